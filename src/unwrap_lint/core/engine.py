"""
Orchestration Engine for Lint Runs.

This module provides the `LintEngine`, the driver that turns source text into
diagnostics and, on request, into fixed text.

The pipeline for one pass:

1.  **Ingestion**: Parses the source into a `Node` tree with the bundled
    `TypeScriptParser`, or accepts a tree supplied by the caller (e.g.
    hydrated from an ESTree dump via `from_estree`).
2.  **Rule Execution**: Instantiates each configured rule with a fresh
    `RuleContext` and drives it through one depth-first traversal.
3.  **Collection**: Reports become `Diagnostic` records, sorted by position.

`lint_and_fix` repeats the pass, applying the offered fixes between passes,
until no fix applies or `max_fix_passes` is reached, and then reports what
remains on the final text.
"""

import bisect
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

import unwrap_lint.rules as rule_registry
from unwrap_lint.config import LintConfig
from unwrap_lint.core.fixer import Fix, RuleFixer, apply_fixes
from unwrap_lint.core.nodes import Node
from unwrap_lint.core.parser import TypeScriptParser
from unwrap_lint.core.tokens import LintSyntaxError
from unwrap_lint.core.visitor import walk

logger = logging.getLogger(__name__)

DEFAULT_RULES = ("consistent-unwrap",)

FixFunction = Callable[[RuleFixer], Fix]


class Diagnostic(BaseModel):
  """
  A single finding reported by a rule.
  """

  rule_id: str = Field(..., description="Id of the reporting rule.")
  message_id: str = Field(..., description="Key into the rule's message catalog.")
  message: str = Field(..., description="Rendered message text.")
  line: int = Field(..., description="1-based line of the anchor node start.")
  column: int = Field(..., description="1-based column of the anchor node start.")
  end_line: int = Field(..., description="1-based line of the anchor node end.")
  end_column: int = Field(..., description="1-based column one past the anchor node end.")
  fix: Optional[Fix] = Field(None, description="Suggested edit, if the rule offers one.")


class LintResult(BaseModel):
  """
  Structured result of linting one source text.
  """

  source: str = Field(default="", description="The text that was submitted.")
  output: str = Field(default="", description="The text after fixing (equal to `source` when not fixing).")
  diagnostics: List[Diagnostic] = Field(default_factory=list, description="Findings, sorted by position.")
  fixed: bool = Field(default=False, description="True if fixes changed the text.")
  errors: List[str] = Field(default_factory=list, description="Parse failures.")
  success: bool = Field(default=True, description="False if the text could not be parsed.")

  @property
  def has_diagnostics(self) -> bool:
    """
    Returns True if any rule reported a finding.

    Returns:
        bool: True if diagnostics list is non-empty.
    """
    return len(self.diagnostics) > 0


class SourceCode:
  """
  Maps character offsets of a text to 1-based line/column positions.
  """

  def __init__(self, text: str):
    self.text = text
    self._line_starts = [0]
    for index, char in enumerate(text):
      if char == "\n":
        self._line_starts.append(index + 1)

  def position(self, offset: int) -> Tuple[int, int]:
    """
    Converts an offset into `(line, column)`, both 1-based.

    Args:
        offset: Character offset into the text.

    Returns:
        Tuple[int, int]: The position.
    """
    line_index = bisect.bisect_right(self._line_starts, offset) - 1
    return line_index + 1, offset - self._line_starts[line_index] + 1


class RuleContext:
  """
  Reporting channel handed to a rule for one run.

  Attributes:
      rule_id: Id of the rule this context belongs to.
      messages: The rule's message catalog.
      options: User options for the rule.
  """

  def __init__(
    self,
    rule_id: str,
    messages: Dict[str, str],
    options: Dict[str, Any],
    report_sink: Callable[[Diagnostic], None],
    source: SourceCode,
  ):
    self.rule_id = rule_id
    self.messages = messages
    self.options = options
    self._report_sink = report_sink
    self._source = source

  def report(self, message_id: str, node: Node, fix: Optional[FixFunction] = None) -> None:
    """
    Records a finding anchored at `node`.

    Args:
        message_id: Key into the message catalog.
        node: The node the finding points at.
        fix: Optional callback producing the suggested edit. It is evaluated
            here into a `Fix` record; the text is only edited by the engine.

    Raises:
        KeyError: If `message_id` is not in the catalog.
    """
    message = self.messages[message_id]
    line, column = self._source.position(node.start)
    end_line, end_column = self._source.position(node.end)
    self._report_sink(
      Diagnostic(
        rule_id=self.rule_id,
        message_id=message_id,
        message=message,
        line=line,
        column=column,
        end_line=end_line,
        end_column=end_column,
        fix=fix(RuleFixer()) if fix is not None else None,
      )
    )


class LintEngine:
  """
  Runs rules over source text and applies their fixes.
  """

  def __init__(self, config: Optional[LintConfig] = None, rules: Optional[Sequence[str]] = None):
    """
    Initializes the engine.

    Args:
        config: Runtime configuration. Defaults to `LintConfig()`.
        rules: Ids of the rules to run. Defaults to all bundled rules.

    Raises:
        KeyError: If a rule id is not registered.
    """
    self.config = config or LintConfig()
    rule_ids = list(rules) if rules is not None else list(DEFAULT_RULES)
    self.rule_classes = [rule_registry.get_rule(rule_id) for rule_id in rule_ids]

  def check(self, tree: Node, code: str) -> List[Diagnostic]:
    """
    Runs every configured rule over an already built tree.

    Args:
        tree: The root node.
        code: The text `tree` was built from (used for positions).

    Returns:
        List[Diagnostic]: Findings sorted by position.
    """
    source = SourceCode(code)
    diagnostics: List[Diagnostic] = []

    for rule_cls in self.rule_classes:
      context = RuleContext(
        rule_id=rule_cls.meta.name,
        messages=rule_cls.meta.messages,
        options=self.config.rule_options(),
        report_sink=diagnostics.append,
        source=source,
      )
      walk(tree, rule_cls(context))

    # Stable: reports at the same position keep their emission order
    diagnostics.sort(key=lambda d: (d.line, d.column))
    return diagnostics

  def lint(self, code: str, tree: Optional[Node] = None) -> LintResult:
    """
    Lints `code` without modifying it.

    Args:
        code: The source text.
        tree: A prebuilt tree for `code`; parsed from `code` if omitted.

    Returns:
        LintResult: Diagnostics, or `success=False` with the parse error.
    """
    if tree is None:
      try:
        tree = TypeScriptParser(code).parse()
      except LintSyntaxError as e:
        logger.debug("Parse failed: %s", e)
        return LintResult(source=code, output=code, errors=[str(e)], success=False)

    diagnostics = self.check(tree, code)
    return LintResult(source=code, output=code, diagnostics=diagnostics)

  def lint_and_fix(self, code: str) -> LintResult:
    """
    Lints `code`, applying offered fixes until the text is stable.

    Args:
        code: The source text.

    Returns:
        LintResult: The final text in `output` and the diagnostics that remain on it.
    """
    text = code
    result = self.lint(text)
    passes = 0

    while result.success and passes < self.config.max_fix_passes:
      fixes = [d.fix for d in result.diagnostics if d.fix is not None]
      if not fixes:
        break
      text, applied = apply_fixes(text, fixes)
      passes += 1
      logger.debug("Fix pass %d applied %d of %d fixes", passes, applied, len(fixes))
      result = self.lint(text)

    if result.success and passes == self.config.max_fix_passes:
      logger.debug("Stopped after %d fix passes", passes)

    return result.model_copy(update={"source": code, "output": text, "fixed": text != code})
