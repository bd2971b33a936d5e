"""
CLI Command Handlers Facade.

Re-exports the handlers from `unwrap_lint.cli.handlers` so the dispatcher
(and test patches) have a single module to target.
"""

from unwrap_lint.cli.handlers.check import handle_check, collect_files, _check_single_file, _print_report
from unwrap_lint.cli.handlers.rules import handle_rules

__all__ = [
  "_check_single_file",
  "_print_report",
  "collect_files",
  "handle_check",
  "handle_rules",
]
