"""
ESTree-shaped Syntax Tree.

This module defines the single `Node` class used for every syntax element.
Nodes follow the ESTree / typescript-estree vocabulary (`CallExpression`,
`ArrowFunctionExpression`, `TSTypeQuery`, ...) so that rules written against
that vocabulary read the same whether the tree came from the bundled parser or
from a JSON dump produced by another toolchain.

Conventions:
1.  **Fields**: Child fields are stored as attributes in source order. The
    traversal visits them in that order.
2.  **Ranges**: `start`/`end` are character offsets into the source text.
3.  **Identity**: Nodes compare by identity. Rules match scopes to function
    nodes with `is`, never by name.
4.  **Python keywords**: The ESTree `async` and `await` flags are exposed as
    `is_async` and `is_await`.
"""

from typing import Any, Dict, Iterator, List, Optional, Tuple

# Keys of an ESTree JSON object that carry position metadata, not children.
_META_KEYS = frozenset({"type", "range", "loc", "start", "end", "parent", "comments", "tokens"})

# ESTree keys that collide with Python keywords.
_RENAMED_KEYS = {"async": "is_async", "await": "is_await"}

# Canonical child order for node types whose JSON key order varies between dumpers.
VISITOR_KEYS: Dict[str, Tuple[str, ...]] = {
  "CallExpression": ("callee", "typeArguments", "arguments"),
  "NewExpression": ("callee", "typeArguments", "arguments"),
  "FunctionDeclaration": ("id", "typeParameters", "params", "returnType", "body"),
  "FunctionExpression": ("id", "typeParameters", "params", "returnType", "body"),
  "ArrowFunctionExpression": ("typeParameters", "params", "returnType", "body"),
  "TSTypeQuery": ("exprName", "typeArguments"),
  "TSTypeReference": ("typeName", "typeArguments"),
}


class Node:
  """
  A syntax tree node.

  Attributes:
      type: ESTree node type (e.g. "CallExpression").
      start: Offset of the first character of the node.
      end: Offset one past the last character of the node.
      line: 1-based line of `start`.
      column: 1-based column of `start`.
      parent: Enclosing node, assigned by the traversal on descent.
  """

  def __init__(self, type: str, start: int, end: int, line: int = 1, column: int = 1, **fields: Any):
    self.type = type
    self.start = start
    self.end = end
    self.line = line
    self.column = column
    self.parent: Optional["Node"] = None
    self._field_names: List[str] = list(fields)
    for name, value in fields.items():
      setattr(self, name, value)

  @property
  def range(self) -> Tuple[int, int]:
    """The `(start, end)` character span of the node."""
    return (self.start, self.end)

  @property
  def field_names(self) -> List[str]:
    """Names of the structural fields, in source order."""
    return list(self._field_names)

  def get(self, name: str, default: Any = None) -> Any:
    """Returns a field value, or `default` if the node has no such field."""
    return getattr(self, name, default) if name in self._field_names else default

  def set_field(self, name: str, value: Any) -> None:
    """Adds or replaces a structural field, keeping it visible to the traversal."""
    if name not in self._field_names:
      self._field_names.append(name)
    setattr(self, name, value)

  def __repr__(self) -> str:
    label = getattr(self, "name", None)
    suffix = f" {label!r}" if isinstance(label, str) else ""
    return f"<{self.type}{suffix} {self.start}:{self.end}>"


def iter_children(node: Node) -> Iterator[Node]:
  """
  Yields the direct child nodes of `node` in field order.

  List fields are flattened; `None` entries (array holes, absent optionals)
  are skipped.

  Args:
      node: The parent node.

  Yields:
      Node: Each child node.
  """
  for name in node.field_names:
    value = getattr(node, name)
    if isinstance(value, Node):
      yield value
    elif isinstance(value, list):
      for item in value:
        if isinstance(item, Node):
          yield item


def from_estree(data: Dict[str, Any]) -> Node:
  """
  Hydrates a `Node` tree from an ESTree JSON document.

  Accepts documents produced by `@typescript-eslint/typescript-estree` with
  `range: true, loc: true`. Call expressions exposing only the legacy
  `typeParameters` key are normalized to `typeArguments`; when both keys are
  present the legacy duplicate is dropped so it is not traversed twice.

  Args:
      data: The decoded JSON object for the root node (usually a `Program`).

  Returns:
      Node: The root of the hydrated tree.

  Raises:
      ValueError: If `data` is not an ESTree node object.
  """
  if not isinstance(data, dict) or "type" not in data:
    raise ValueError("ESTree document must be an object with a 'type' key")
  return _hydrate(data)


def _hydrate(data: Dict[str, Any]) -> Node:
  node_type = data["type"]

  if "range" in data:
    start, end = data["range"]
  else:
    start, end = data.get("start", 0), data.get("end", 0)

  loc = data.get("loc") or {}
  loc_start = loc.get("start") or {}
  line = loc_start.get("line", 1)
  # ESTree columns are 0-based
  column = loc_start.get("column", 0) + 1

  raw = {key: value for key, value in data.items() if key not in _META_KEYS}

  if node_type in ("CallExpression", "NewExpression"):
    legacy = raw.pop("typeParameters", None)
    if raw.get("typeArguments") is None:
      raw["typeArguments"] = legacy

  for key, renamed in _RENAMED_KEYS.items():
    if key in raw:
      raw[renamed] = raw.pop(key)

  ordered: Dict[str, Any] = {}
  for key in VISITOR_KEYS.get(node_type, ()):
    ordered[key] = _hydrate_value(raw.pop(key, None))
  for key, value in raw.items():
    ordered[key] = _hydrate_value(value)

  return Node(node_type, start, end, line, column, **ordered)


def _hydrate_value(value: Any) -> Any:
  if isinstance(value, dict) and "type" in value:
    return _hydrate(value)
  if isinstance(value, list):
    return [_hydrate_value(item) for item in value]
  return value
