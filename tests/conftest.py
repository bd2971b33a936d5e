"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Console isolation so captured output does not leak between tests.
- Rule registry isolation so rules registered by a test do not leak.
- A factory writing throwaway TypeScript projects.
"""

import sys
from pathlib import Path
from typing import Callable, Dict

import pytest

# Add src to path so we can import 'unwrap_lint' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from unwrap_lint.rules.base import _RULE_REGISTRY  # noqa: E402
from unwrap_lint.utils.console import reset_console  # noqa: E402


@pytest.fixture(autouse=True)
def isolate_console():
  """
  Restores the default console after each test, so a test that swaps in a
  recording console does not capture output of the next one.
  """
  yield
  reset_console()


@pytest.fixture(autouse=True)
def isolate_rule_registry():
  """
  Restores the rule registry after each test.
  """
  original_registry = _RULE_REGISTRY.copy()
  yield
  _RULE_REGISTRY.clear()
  _RULE_REGISTRY.update(original_registry)


@pytest.fixture
def ts_project(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
  """
  Factory writing `{relative_path: content}` under a temporary directory.

  Returns:
      Callable returning the project root.
  """

  def _write(files: Dict[str, str]) -> Path:
    for rel, content in files.items():
      target = tmp_path / rel
      target.parent.mkdir(parents=True, exist_ok=True)
      target.write_text(content, encoding="utf-8")
    return tmp_path

  return _write
