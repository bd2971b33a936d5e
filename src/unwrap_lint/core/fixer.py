"""
Text Edits for Auto-Fixing.

Rules never mutate source text. They describe an edit through a `RuleFixer`,
which only builds `Fix` records; the engine decides whether and when to apply
them with `apply_fixes`.
"""

from typing import List, Sequence, Tuple

from pydantic import BaseModel, Field

from unwrap_lint.core.nodes import Node


class Fix(BaseModel):
  """
  A single text replacement.

  An insertion is a replacement of an empty range.
  """

  range: Tuple[int, int] = Field(..., description="Character span [start, end) to replace.")
  text: str = Field(..., description="Replacement text.")


class RuleFixer:
  """
  Builds `Fix` records anchored on syntax nodes.
  """

  def insert_text_after(self, node: Node, text: str) -> Fix:
    """Inserts `text` immediately after `node`."""
    return Fix(range=(node.end, node.end), text=text)

  def replace_text(self, node: Node, text: str) -> Fix:
    """Replaces the full span of `node` with `text`."""
    return Fix(range=(node.start, node.end), text=text)


def apply_fixes(source: str, fixes: Sequence[Fix]) -> Tuple[str, int]:
  """
  Applies non-overlapping fixes to `source`.

  Fixes are applied in order of their start offset. A fix that starts at or
  before the end of an already applied fix is skipped; it will be reconsidered
  on the next lint pass against the updated text.

  Args:
      source: Original text.
      fixes: Candidate edits.

  Returns:
      Tuple[str, int]: The edited text and the number of fixes applied.
  """
  pieces: List[str] = []
  cursor = 0
  last_end = -1
  applied = 0

  for fix in sorted(fixes, key=lambda f: f.range):
    start, end = fix.range
    if start <= last_end:
      continue
    pieces.append(source[cursor:start])
    pieces.append(fix.text)
    cursor = end
    last_end = end
    applied += 1

  pieces.append(source[cursor:])
  return "".join(pieces), applied
