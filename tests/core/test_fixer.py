"""
Tests for Fix records and their application.

Verifies:
1.  `RuleFixer` builds insert and replace records from node ranges.
2.  `apply_fixes` applies in range order regardless of input order.
3.  Overlapping (or touching) fixes after the first are skipped.
"""

from unwrap_lint.core.fixer import Fix, RuleFixer, apply_fixes
from unwrap_lint.core.nodes import Node


def test_fixer_records():
  node = Node("Identifier", 4, 8, name="wrap")
  fixer = RuleFixer()

  assert fixer.insert_text_after(node, "<T>") == Fix(range=(8, 8), text="<T>")
  assert fixer.replace_text(node, "safe") == Fix(range=(4, 8), text="safe")


def test_apply_in_range_order():
  fixes = [Fix(range=(5, 5), text="!"), Fix(range=(0, 1), text="A")]
  output, applied = apply_fixes("abcdef", fixes)
  assert output == "Abcde!f"
  assert applied == 2


def test_overlapping_fixes_skipped():
  fixes = [
    Fix(range=(1, 3), text="X"),
    Fix(range=(2, 4), text="Y"),
    Fix(range=(3, 3), text="Z"),
    Fix(range=(5, 5), text="!"),
  ]
  output, applied = apply_fixes("abcdef", fixes)
  assert output == "aXde!f"
  assert applied == 2


def test_no_fixes():
  assert apply_fixes("same", []) == ("same", 0)
