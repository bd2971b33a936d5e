"""
unwrap-lint Package.

A consistency checker for the wrap/unwrap error handling idiom in TypeScript:
the type argument of `wrap<...>()` must list, as a union of `typeof fn`,
exactly the functions whose results are passed to `unwrap` in the wrapped
async body.

Usage
-----

Simple String Check
^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import unwrap_lint

    code = "const run = wrap()(async () => unwrap(await load()))"
    result = unwrap_lint.lint(code, fix=True)
    print(result.output)
    # const run = wrap<typeof load>()(async () => unwrap(await load()))

Advanced Usage (Lint Engine)
^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from unwrap_lint import LintConfig, LintEngine

    engine = LintEngine(config=LintConfig(wrap_name="safe", unwrap_name="must"))
    res = engine.lint(code)

    for diagnostic in res.diagnostics:
        print(diagnostic.line, diagnostic.message_id, diagnostic.message)
"""

from unwrap_lint.config import LintConfig
from unwrap_lint.core.engine import Diagnostic, LintEngine, LintResult
from unwrap_lint.core.nodes import from_estree
from unwrap_lint.core.tokens import LintSyntaxError

__version__ = "0.1.0"

__all__ = [
  "Diagnostic",
  "LintConfig",
  "LintEngine",
  "LintResult",
  "LintSyntaxError",
  "from_estree",
  "lint",
  "__version__",
]


def lint(code: str, wrap_name: str = "wrap", unwrap_name: str = "unwrap", fix: bool = False) -> LintResult:
  """
  Checks a TypeScript source string.

  Args:
      code: The source text.
      wrap_name: Identifier `wrap` is imported under.
      unwrap_name: Identifier `unwrap` is imported under.
      fix: If True, applies fixes; the fixed text is in `result.output`.

  Returns:
      LintResult: Diagnostics (remaining after fixing, if `fix`).
  """
  engine = LintEngine(config=LintConfig(wrap_name=wrap_name, unwrap_name=unwrap_name))
  return engine.lint_and_fix(code) if fix else engine.lint(code)
