"""
Check Command Handler.

This module implements the `unwrap-lint check` command. It orchestrates:
1. Configuration loading (pyproject.toml plus CLI overrides).
2. File discovery (a single file, or every matching file under a directory).
3. Linting (and optionally fixing) via the `LintEngine`.
4. Reporting as a rich table or as JSON, and writing fixed text back.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

from rich.table import Table

from unwrap_lint.config import LintConfig
from unwrap_lint.core.engine import LintEngine, LintResult
from unwrap_lint.utils.console import console, log_error, log_info, log_success, log_warning

IGNORED_DIRS = frozenset({"node_modules", ".git", "dist", "build"})


def handle_check(
  input_path: Path,
  fix: bool = False,
  as_json: bool = False,
  wrap_name: Optional[str] = None,
  unwrap_name: Optional[str] = None,
) -> int:
  """
  Handles the 'check' command execution.

  Args:
      input_path: File or directory to lint.
      fix: If True, applies fixes and writes changed files back.
      as_json: If True, prints a JSON report instead of a table.
      wrap_name: Override for the wrap identifier.
      unwrap_name: Override for the unwrap identifier.

  Returns:
      int: 0 if clean, 1 if diagnostics remain or a file failed.
  """
  if not input_path.exists():
    log_error(f"Input not found: {input_path}")
    return 1

  try:
    config = LintConfig.load(wrap_name=wrap_name, unwrap_name=unwrap_name, search_path=input_path)
  except ValueError as e:
    log_error(f"Invalid configuration: {e}")
    return 1

  files = collect_files(input_path, config.extensions)
  if not files:
    if not as_json:
      log_warning(f"No files matching {', '.join(config.extensions)} found in {input_path}")
    else:
      print(json.dumps([], indent=2))
    return 0

  if not as_json:
    log_info(f"Checking {len(files)} file(s) under [path]{input_path}[/path]...")

  engine = LintEngine(config)
  results: Dict[str, LintResult] = {}
  for path in files:
    results[_display_name(path, input_path)] = _check_single_file(path, engine, fix, quiet=as_json)

  if as_json:
    print(json.dumps(_json_report(results), indent=2))
  else:
    _print_report(results)

  clean = all(r.success and not r.has_diagnostics for r in results.values())
  return 0 if clean else 1


def collect_files(input_path: Path, extensions: List[str]) -> List[Path]:
  """
  Lists the files to lint, sorted.

  A file given explicitly is always linted. Directories are searched
  recursively for the configured extensions, skipping dependency and build
  folders.

  Args:
      input_path: File or directory.
      extensions: Accepted suffixes (e.g. ['.ts']).

  Returns:
      List[Path]: The files.
  """
  if input_path.is_file():
    return [input_path]

  found = []
  for path in input_path.rglob("*"):
    if not path.is_file() or path.suffix not in extensions:
      continue
    if path.name.endswith(".d.ts"):
      continue
    if IGNORED_DIRS.intersection(path.relative_to(input_path).parts):
      continue
    found.append(path)
  return sorted(found)


def _check_single_file(path: Path, engine: LintEngine, fix: bool, quiet: bool = False) -> LintResult:
  """
  Lints one file, writing the fixed text back when it changed.

  Args:
      path: The file.
      engine: Configured engine.
      fix: Whether to apply fixes.
      quiet: Suppress per-file log lines.

  Returns:
      LintResult: The outcome for the file.
  """
  try:
    # newline="" keeps CRLF line endings intact through a fix
    with open(path, "r", encoding="utf-8", newline="") as f:
      code = f.read()
  except (OSError, UnicodeDecodeError) as e:
    log_error(f"Failed to read {path}: {e}")
    return LintResult(success=False, errors=[str(e)])

  result = engine.lint_and_fix(code) if fix else engine.lint(code)

  if fix and result.fixed:
    with open(path, "w", encoding="utf-8", newline="") as f:
      f.write(result.output)
    if not quiet:
      log_success(f"Fixed [path]{path}[/path]")

  return result


def _display_name(path: Path, root: Path) -> str:
  if root.is_dir():
    return str(path.relative_to(root))
  return str(path)


def _json_report(results: Dict[str, LintResult]) -> List[Dict]:
  report = []
  for filename, result in results.items():
    report.append(
      {
        "file": filename,
        "success": result.success,
        "fixed": result.fixed,
        "errors": result.errors,
        "diagnostics": [d.model_dump(exclude={"fix"}) for d in result.diagnostics],
      }
    )
  return report


def _print_report(results: Dict[str, LintResult]) -> None:
  """
  Renders the diagnostics of all files as one table.

  Args:
      results: Dictionary mapping filenames to lint results.
  """
  total = len(results)
  failures = [name for name, r in results.items() if not r.success]
  problems = sum(len(r.diagnostics) for r in results.values())

  if not failures and problems == 0:
    log_success(f"All {total} file(s) pass consistent-unwrap.")
    return

  table = Table(title="Lint Report")
  table.add_column("File", style="cyan")
  table.add_column("Line:Col", justify="right", style="location")
  table.add_column("Rule", style="rule")
  table.add_column("Message", style="red")

  for filename, res in results.items():
    for error in res.errors:
      table.add_row(filename, "-", "parse-error", error)
    for diagnostic in res.diagnostics:
      table.add_row(
        filename,
        f"{diagnostic.line}:{diagnostic.column}",
        f"{diagnostic.rule_id}/{diagnostic.message_id}",
        diagnostic.message,
      )

  console.print(table)
  console.print(f"\n[bold]Summary:[/bold] {problems} problem(s), {len(failures)} file(s) failed to parse.")
