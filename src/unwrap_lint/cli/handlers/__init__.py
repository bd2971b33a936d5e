from .check import handle_check, collect_files, _check_single_file, _print_report
from .rules import handle_rules

__all__ = [
  "_check_single_file",
  "_print_report",
  "collect_files",
  "handle_check",
  "handle_rules",
]
