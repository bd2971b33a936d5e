"""
Traversal Driver.

Implements the enter/exit event protocol that rules react to. A rule is a
`NodeVisitor` subclass declaring `visit_<NodeType>` methods (fired on entry)
and `leave_<NodeType>` methods (fired on exit), mirroring the `visit_*` /
`leave_*` convention of LibCST visitors.

The walk is depth-first and iterative (explicit stack), so deeply nested trees
do not hit the interpreter recursion limit. Each child's `parent` is assigned
before its enter event fires, which lets rules inspect the syntactic parent of
the node being entered.
"""

from typing import Iterator, List, Optional, Tuple

from unwrap_lint.core.nodes import Node, iter_children


class NodeVisitor:
  """
  Base class for tree visitors.

  Subclasses add `visit_<Type>(node)` and `leave_<Type>(node)` methods for the
  node types they care about. Returning `False` from a `visit_*` method skips
  the children of that node (its `leave_*` method still fires).
  """

  def on_visit(self, node: Node) -> bool:
    """
    Dispatches the enter event for `node`.

    Args:
        node: The node being entered.

    Returns:
        bool: False if the children of `node` should be skipped.
    """
    handler = getattr(self, f"visit_{node.type}", None)
    if handler is None:
      return True
    return handler(node) is not False

  def on_leave(self, node: Node) -> None:
    """
    Dispatches the exit event for `node`.

    Args:
        node: The node being exited.
    """
    handler = getattr(self, f"leave_{node.type}", None)
    if handler is not None:
      handler(node)


def walk(root: Node, visitor: NodeVisitor) -> None:
  """
  Traverses `root` depth-first, firing enter/exit events on `visitor`.

  Args:
      root: The tree to traverse.
      visitor: The event receiver.
  """
  stack: List[Tuple[Node, Optional[Iterator[Node]]]] = [(root, None)]

  while stack:
    node, children = stack.pop()

    if children is None:
      # First time we see this node
      if visitor.on_visit(node):
        stack.append((node, iter_children(node)))
      else:
        visitor.on_leave(node)
      continue

    child = next(children, None)
    if child is None:
      visitor.on_leave(node)
      continue

    stack.append((node, children))
    child.parent = node
    stack.append((child, None))
