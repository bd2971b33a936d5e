"""
Rules Command Handler.

Lists the registered rules with their metadata.
"""

from rich.table import Table

from unwrap_lint.rules import available_rules, get_rule
from unwrap_lint.utils.console import console


def handle_rules() -> int:
  """
  Prints a table of the available rules.

  Returns:
      int: Exit code (always 0).
  """
  table = Table(title="Available Rules")
  table.add_column("Rule", style="rule")
  table.add_column("Type")
  table.add_column("Fixable", justify="center")
  table.add_column("Description")

  for name in available_rules():
    meta = get_rule(name).meta
    table.add_row(name, meta.type, "🔧" if meta.fixable else "", meta.description)

  console.print(table)
  return 0
