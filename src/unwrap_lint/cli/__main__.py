"""
Main Entry Point for unwrap-lint CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `unwrap_lint.cli.commands`.
"""

import argparse
from pathlib import Path
from typing import List, Optional

from unwrap_lint import __version__
from unwrap_lint.cli import commands
from unwrap_lint.utils.console import set_verbose


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.
  Usage errors exit with status 2 (raised by argparse as `SystemExit`).

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="unwrap-lint: wrap/unwrap consistency checker for TypeScript")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("-v", "--verbose", action="store_true", help="Show debug output of the lint engine")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: CHECK ---
  cmd_check = subparsers.add_parser("check", help="Lint a TypeScript file or directory")
  cmd_check.add_argument("path", type=Path, help="Input source file or directory")
  cmd_check.add_argument("--fix", action="store_true", help="Apply fixes and write files back")
  cmd_check.add_argument("--json", action="store_true", dest="as_json", help="Print a JSON report")
  cmd_check.add_argument("--wrap-name", default=None, help="Identifier of wrap (default: from toml, else 'wrap')")
  cmd_check.add_argument(
    "--unwrap-name", default=None, help="Identifier of unwrap (default: from toml, else 'unwrap')"
  )

  # --- Command: RULES ---
  subparsers.add_parser("rules", help="List available rules")

  args = parser.parse_args(argv)
  set_verbose(args.verbose)

  if args.command == "check":
    return commands.handle_check(args.path, args.fix, args.as_json, args.wrap_name, args.unwrap_name)

  elif args.command == "rules":
    return commands.handle_rules()

  return 1
