"""
Consistency Check for the wrap/unwrap Error Handling Idiom.

This module provides the `consistent-unwrap` rule. Given code such as::

    const run = wrap<typeof load | typeof save>()(async (id: string) => {
      const data = unwrap(await load(id))
      unwrap(await save(data))
    })

it verifies that the type argument of `wrap` lists, as `typeof <name>`
members of a single union, exactly the functions whose results are passed to
`unwrap` inside the wrapped body, and offers a fix that regenerates the list
from what is actually unwrapped.

Detection Scope:
1.  **Scope Tracking**: Every `wrap<...>()(async fn)` opens a `WrapScope` on
    a linked stack. Scopes nest; each is reconciled on its own when its
    function is left.
2.  **Unwrap Recognition**: `unwrap(f(...))` and `unwrap(await f(...))`
    inside the entered body record `f`. Any other single argument is a
    `badUnwrapArg`.
3.  **Reconciliation**: The declared `typeof` members and the unwrapped names
    are compared in both directions; malformed or repeated members are
    reported individually, followed by one aggregate `badWrap`.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from unwrap_lint.core.fixer import Fix, RuleFixer
from unwrap_lint.core.nodes import Node
from unwrap_lint.rules.base import Rule, RuleMeta, register_rule

FUNCTION_TYPES = ("FunctionExpression", "ArrowFunctionExpression")


@dataclass
class WrapScope:
  """
  State of one open `wrap(...)(fn)` construct.

  Attributes:
      function_node: The function literal passed to the wrapped call; matched by identity.
      callee: The `wrap` identifier; anchors diagnostics and insertion fixes.
      type_arguments: The explicit `<...>` list of the wrap call, if any.
      parent: The enclosing scope, or None for the outermost one.
      entered_body: True once the traversal has entered `function_node`.
      unwrapped_calls: Unwrapped function name -> first call expression seen.
      declared_types: Declared function name -> its `typeof` type node.
  """

  function_node: Node
  callee: Node
  type_arguments: Optional[Node]
  parent: Optional["WrapScope"] = None
  entered_body: bool = False
  unwrapped_calls: Dict[str, Node] = field(default_factory=dict)
  declared_types: Dict[str, Node] = field(default_factory=dict)


@register_rule("consistent-unwrap")
class ConsistentUnwrap(Rule):
  """
  Checks that wrap type arguments and unwrapped calls agree.
  """

  meta = RuleMeta(
    name="consistent-unwrap",
    type="problem",
    fixable="code",
    description="wrapped functions must specify the types of functions being unwrapped",
    recommended="error",
    requires_type_checking=True,
    messages={
      "badWrap": "specify all the types of functions being unwrapped",
      # Reserved; no check emits it.
      "badUnwrap": "this unwrapped function must be specified on the wrap type parameters",
      "missingTypeParamInWrap": (
        "the wrap function must specify one type parameter with an union of types of the functions being unwrapped"
      ),
      "badUnwrapArg": "unwrap argument must be a call expression",
      "badWrapTypeArg": (
        "wrap type parameter must be an union of typeof functionName of every function being unwrapped"
      ),
      "duplicatedWrapArg": "You only need to specify wrap parameters once.",
      "unwrapNotInWrap": "You must add this function type to wrap type parameter",
      "wrappedFnNotUnwrapped": "You are not unwrapping this function",
    },
    default_options={"wrapName": "wrap", "unwrapName": "unwrap"},
  )

  def __init__(self, context):
    super().__init__(context)
    self.wrap_name: str = self.options["wrapName"]
    self.unwrap_name: str = self.options["unwrapName"]
    self._scope: Optional[WrapScope] = None

  # --- Scope Stack ---

  @property
  def scope(self) -> Optional[WrapScope]:
    """The innermost open wrap scope."""
    return self._scope

  def _push(self, scope: WrapScope) -> None:
    scope.parent = self._scope
    self._scope = scope

  def _pop(self, function_node: Node) -> Optional[WrapScope]:
    """Closes the top scope if `function_node` is the function it wraps."""
    scope = self._scope
    if scope is None or scope.function_node is not function_node:
      return None
    self._scope = scope.parent
    return scope

  # --- Traversal Events ---

  def visit_CallExpression(self, node: Node) -> None:
    self._on_wrap_call(node)
    self._on_unwrap_call(node)

  def visit_FunctionExpression(self, node: Node) -> None:
    self._enter_function(node)

  def visit_ArrowFunctionExpression(self, node: Node) -> None:
    self._enter_function(node)

  def leave_FunctionExpression(self, node: Node) -> None:
    self._exit_function(node)

  def leave_ArrowFunctionExpression(self, node: Node) -> None:
    self._exit_function(node)

  # --- Recognition ---

  def _on_wrap_call(self, node: Node) -> None:
    """Opens a scope for `wrap<...>(...)(async fn)`."""
    if not _is_identifier(node.callee, self.wrap_name):
      return

    outer = node.parent
    if outer is None or outer.type != "CallExpression" or outer.callee is not node:
      return
    if len(outer.arguments) != 1:
      return

    fn = outer.arguments[0]
    if fn.type not in FUNCTION_TYPES or not fn.get("is_async", False):
      return

    self._push(WrapScope(function_node=fn, callee=node.callee, type_arguments=node.get("typeArguments")))

  def _enter_function(self, node: Node) -> None:
    if self._scope is not None and self._scope.function_node is node:
      self._scope.entered_body = True

  def _on_unwrap_call(self, node: Node) -> None:
    """Records `unwrap(f(...))` / `unwrap(await f(...))` in the active scope."""
    scope = self._scope
    if scope is None or not scope.entered_body:
      return
    if not _is_identifier(node.callee, self.unwrap_name):
      return
    if len(node.arguments) != 1:
      return

    argument = node.arguments[0]
    if argument.type == "AwaitExpression":
      argument = argument.argument

    if argument.type != "CallExpression" or argument.callee.type != "Identifier":
      self.context.report("badUnwrapArg", node)
      return

    scope.unwrapped_calls.setdefault(argument.callee.name, argument)

  # --- Reconciliation ---

  def _exit_function(self, node: Node) -> None:
    scope = self._scope
    if scope is None or scope.function_node is not node:
      return
    self._reconcile(scope)
    self._pop(node)

  def _reconcile(self, scope: WrapScope) -> None:
    """Reports every disagreement between declared and unwrapped functions."""
    need_fix = False
    type_arguments = scope.type_arguments

    if type_arguments is None or len(type_arguments.params) != 1:
      self.context.report("missingTypeParamInWrap", scope.callee)
      need_fix = True
    else:
      param = type_arguments.params[0]
      members: List[Node] = param.types if param.type == "TSUnionType" else [param]
      for member in members:
        name = _type_query_name(member)
        if name is None:
          self.context.report("badWrapTypeArg", member)
          need_fix = True
        elif name in scope.declared_types:
          self.context.report("duplicatedWrapArg", member)
          need_fix = True
        else:
          scope.declared_types[name] = member

    for name, call in scope.unwrapped_calls.items():
      if name not in scope.declared_types:
        self.context.report("unwrapNotInWrap", call)
        need_fix = True

    for name, member in scope.declared_types.items():
      if name not in scope.unwrapped_calls:
        self.context.report("wrappedFnNotUnwrapped", member)
        need_fix = True

    if need_fix:
      self.context.report("badWrap", scope.callee, fix=self._synthesize_fix(scope))

  def _synthesize_fix(self, scope: WrapScope) -> Optional[Callable[[RuleFixer], Fix]]:
    """
    Builds the fix regenerating the type argument list from the unwrapped calls.

    Returns None when nothing is unwrapped: no type list can satisfy an empty
    body, so any edit would be reported again on the next pass.
    """
    if not scope.unwrapped_calls:
      return None

    union = " | ".join(f"typeof {name}" for name in scope.unwrapped_calls)
    replacement = f"<{union}>"

    if scope.type_arguments is None:
      callee = scope.callee
      return lambda fixer: fixer.insert_text_after(callee, replacement)

    type_arguments = scope.type_arguments
    return lambda fixer: fixer.replace_text(type_arguments, replacement)


def _is_identifier(node: Optional[Node], name: str) -> bool:
  return node is not None and node.type == "Identifier" and node.name == name


def _type_query_name(node: Node) -> Optional[str]:
  """Returns `f` for a `typeof f` type node, None for any other type."""
  if node.type != "TSTypeQuery":
    return None
  expr_name = node.exprName
  if expr_name.type != "Identifier":
    return None
  return expr_name.name
