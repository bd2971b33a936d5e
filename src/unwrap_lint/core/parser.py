"""
TypeScript Parser Implementation.

This module provides the `TypeScriptParser`, a recursive descent parser that
converts a stream of tokens (from `TypeScriptLexer`) into an ESTree-shaped
tree of `Node` objects.

Capabilities:
- Statements: import/export, variable declarations, functions, classes,
  `if`/`while`/`do`/`for`/`switch`/`try`, `return`/`throw`/`break`/`continue`,
  `type` aliases, `enum` declarations and (opaque) interfaces.
- Expressions: arrow functions, function expressions, calls with explicit type
  arguments (`wrap<typeof f>()`), member access and optional chaining, `new`,
  `await`, unary/binary/logical/conditional/assignment operators, `as`,
  object/array literals, spread, template literals with their substitutions,
  regular expression and primitive literals. Optional chains are wrapped in a
  `ChainExpression`.
- Types: unions, intersections, arrays, tuples, `typeof` queries, references,
  keyword, literal and template literal types, function types, `keyof`.

Ambiguities (`f<T>(x)` versus `f < T > (x)`, arrow parameters versus a
parenthesized expression) are resolved by bounded lookahead; the parser
rewinds on failure and never commits a half-parsed speculative branch.
"""

import ast
import re
from typing import Callable, List, Optional, TypeVar

from unwrap_lint.core.nodes import Node
from unwrap_lint.core.tokens import LintSyntaxError, Token, TokenType, TypeScriptLexer

T = TypeVar("T")

BINARY_PRECEDENCE = {
  "??": 1,
  "||": 2,
  "&&": 3,
  "|": 4,
  "^": 5,
  "&": 6,
  "==": 7,
  "!=": 7,
  "===": 7,
  "!==": 7,
  "<": 8,
  ">": 8,
  "<=": 8,
  ">=": 8,
  "instanceof": 8,
  "in": 8,
  "as": 8,
  "satisfies": 8,
  "<<": 9,
  ">>": 9,
  ">>>": 9,
  "+": 10,
  "-": 10,
  "*": 11,
  "/": 11,
  "%": 11,
  "**": 12,
}

LOGICAL_OPERATORS = frozenset({"&&", "||", "??"})

ASSIGNMENT_OPERATORS = frozenset(
  {"=", "+=", "-=", "*=", "/=", "%=", "**=", "<<=", "&=", "|=", "^=", "&&=", "||=", "??="}
)

KEYWORD_TYPES = {
  "any": "TSAnyKeyword",
  "unknown": "TSUnknownKeyword",
  "never": "TSNeverKeyword",
  "string": "TSStringKeyword",
  "number": "TSNumberKeyword",
  "boolean": "TSBooleanKeyword",
  "bigint": "TSBigIntKeyword",
  "symbol": "TSSymbolKeyword",
  "object": "TSObjectKeyword",
  "undefined": "TSUndefinedKeyword",
}

CLASS_MODIFIERS = frozenset(
  {"public", "private", "protected", "static", "readonly", "abstract", "override", "declare", "accessor"}
)

VARIABLE_KINDS = frozenset({"const", "let", "var"})


def parse(code: str) -> Node:
  """
  Parses TypeScript source into a `Program` node.

  Args:
      code: The source text.

  Returns:
      Node: The `Program` root.

  Raises:
      LintSyntaxError: If the source cannot be parsed.
  """
  return TypeScriptParser(code).parse()


class TypeScriptParser:
  """
  Recursive descent parser for a practical TypeScript subset.
  """

  def __init__(self, code: str):
    """
    Initialize the parser.

    Args:
        code: The raw TypeScript source string.
    """
    self.code = code
    self.tokens: List[Token] = list(TypeScriptLexer().tokenize(code))
    self.pos = 0

  def parse(self) -> Node:
    """
    Parses the entire module.

    Returns:
        Node: A `Program` node.
    """
    body = []
    while not self._is_eof():
      body.append(self._parse_statement())
    return Node("Program", 0, len(self.code), 1, 1, body=body, sourceType="module")

  # --- Token Helpers ---

  def _peek(self, offset: int = 0) -> Token:
    """Looks ahead at a pending token (EOF once exhausted)."""
    index = min(self.pos + offset, len(self.tokens) - 1)
    return self.tokens[index]

  def _next(self) -> Token:
    """Consumes the current token."""
    token = self._peek()
    if token.kind == TokenType.EOF:
      raise self._error("Unexpected end of input", token)
    self.pos += 1
    return token

  def _is_eof(self) -> bool:
    return self._peek().kind == TokenType.EOF

  def _at(self, value: str, offset: int = 0) -> bool:
    """Checks if a punctuator or keyword with `value` is pending."""
    token = self._peek(offset)
    return token.value == value and token.kind in (TokenType.PUNCTUATOR, TokenType.KEYWORD)

  def _at_word(self, value: str, offset: int = 0) -> bool:
    """Checks for a contextual keyword (lexed as an identifier)."""
    token = self._peek(offset)
    return token.kind == TokenType.IDENTIFIER and token.value == value

  def _eat(self, value: str) -> bool:
    if self._at(value):
      self.pos += 1
      return True
    return False

  def _expect(self, value: str) -> Token:
    if not self._at(value):
      raise self._error(f"Expected '{value}'")
    return self._next()

  def _expect_word(self, value: str) -> Token:
    if not self._at_word(value):
      raise self._error(f"Expected '{value}'")
    return self._next()

  def _consume_semicolon(self) -> None:
    self._eat(";")

  def _error(self, message: str, token: Optional[Token] = None) -> LintSyntaxError:
    token = token or self._peek()
    shown = token.value or "end of input"
    return LintSyntaxError(f"{message}, got '{shown}'", token.line, token.column)

  @property
  def _prev_end(self) -> int:
    return self.tokens[self.pos - 1].end if self.pos > 0 else 0

  def _finish(self, node_type: str, start: Token, **fields) -> Node:
    """Builds a node spanning from `start` to the last consumed token."""
    return Node(node_type, start.start, self._prev_end, start.line, start.column, **fields)

  def _speculate(self, attempt: Callable[[], T]) -> Optional[T]:
    """Runs `attempt`, rewinding and returning None if it fails to parse."""
    saved = self.pos
    try:
      return attempt()
    except LintSyntaxError:
      self.pos = saved
      return None

  def _skip_balanced(self, open_value: str, close_value: str) -> None:
    """Consumes a bracketed region, including nested brackets of the same kind."""
    self._expect(open_value)
    depth = 1
    while depth:
      token = self._next()
      if token.kind != TokenType.PUNCTUATOR:
        continue
      if token.value == open_value:
        depth += 1
      elif token.value == close_value:
        depth -= 1

  # --- Statements ---

  def _parse_statement(self) -> Node:
    token = self._peek()

    if self._at(";"):
      self._next()
      return self._finish("EmptyStatement", token)
    if self._at("{"):
      return self._parse_block()
    if self._at("enum") or (self._at("const") and self._at("enum", 1)):
      return self._parse_enum()
    if token.value in VARIABLE_KINDS and token.kind in (TokenType.KEYWORD, TokenType.IDENTIFIER):
      if self._peek(1).kind in (TokenType.IDENTIFIER, TokenType.KEYWORD) or self._at("{", 1) or self._at("[", 1):
        return self._parse_variable_declaration()
    if self._at("function"):
      return self._parse_function(token, is_async=False, expression=False)
    if self._at_word("async") and self._at("function", 1) and not self._peek(1).newline_before:
      self._next()
      return self._parse_function(token, is_async=True, expression=False)
    if self._at("class"):
      return self._parse_class(token, expression=False)
    if self._at_word("abstract") and self._at("class", 1):
      self._next()
      return self._parse_class(token, expression=False)
    if self._at("import") and not (self._at("(", 1) or self._at(".", 1)):
      return self._parse_import()
    if self._at("export"):
      return self._parse_export()
    if self._at_word("type") and self._peek(1).kind == TokenType.IDENTIFIER and not self._peek(1).newline_before:
      return self._parse_type_alias()
    if self._at_word("interface") and self._peek(1).kind == TokenType.IDENTIFIER:
      return self._parse_interface()

    keyword_handlers = {
      "return": self._parse_return,
      "if": self._parse_if,
      "while": self._parse_while,
      "do": self._parse_do_while,
      "for": self._parse_for,
      "try": self._parse_try,
      "throw": self._parse_throw,
      "switch": self._parse_switch,
      "break": self._parse_jump,
      "continue": self._parse_jump,
    }
    if token.kind == TokenType.KEYWORD and token.value in keyword_handlers:
      return keyword_handlers[token.value]()

    expression = self._parse_expression()
    self._consume_semicolon()
    return self._finish("ExpressionStatement", token, expression=expression)

  def _parse_block(self) -> Node:
    start = self._expect("{")
    body = []
    while not self._at("}"):
      if self._is_eof():
        raise self._error("Unterminated block")
      body.append(self._parse_statement())
    self._expect("}")
    return self._finish("BlockStatement", start, body=body)

  def _parse_variable_declaration(self, in_for: bool = False) -> Node:
    start = self._next()
    declarations = []
    while True:
      decl_start = self._peek()
      target = self._parse_binding(allow_optional=False)
      init = None
      if self._eat("="):
        init = self._parse_assignment()
      declarations.append(self._finish("VariableDeclarator", decl_start, id=target, init=init))
      if not self._eat(","):
        break
    if not in_for:
      self._consume_semicolon()
    return self._finish("VariableDeclaration", start, declarations=declarations, kind=start.value)

  def _parse_return(self) -> Node:
    start = self._expect("return")
    argument = None
    following = self._peek()
    if not (self._at(";") or self._at("}") or self._is_eof() or following.newline_before):
      argument = self._parse_expression()
    self._consume_semicolon()
    return self._finish("ReturnStatement", start, argument=argument)

  def _parse_throw(self) -> Node:
    start = self._expect("throw")
    argument = self._parse_expression()
    self._consume_semicolon()
    return self._finish("ThrowStatement", start, argument=argument)

  def _parse_jump(self) -> Node:
    start = self._next()
    label = None
    if self._peek().kind == TokenType.IDENTIFIER and not self._peek().newline_before:
      label = self._parse_identifier()
    self._consume_semicolon()
    node_type = "BreakStatement" if start.value == "break" else "ContinueStatement"
    return self._finish(node_type, start, label=label)

  def _parse_if(self) -> Node:
    start = self._expect("if")
    self._expect("(")
    test = self._parse_expression()
    self._expect(")")
    consequent = self._parse_statement()
    alternate = None
    if self._eat("else"):
      alternate = self._parse_statement()
    return self._finish("IfStatement", start, test=test, consequent=consequent, alternate=alternate)

  def _parse_while(self) -> Node:
    start = self._expect("while")
    self._expect("(")
    test = self._parse_expression()
    self._expect(")")
    body = self._parse_statement()
    return self._finish("WhileStatement", start, test=test, body=body)

  def _parse_do_while(self) -> Node:
    start = self._expect("do")
    body = self._parse_statement()
    self._expect("while")
    self._expect("(")
    test = self._parse_expression()
    self._expect(")")
    self._consume_semicolon()
    return self._finish("DoWhileStatement", start, body=body, test=test)

  def _parse_for(self) -> Node:
    start = self._expect("for")
    is_await = self._eat("await")
    self._expect("(")

    init = None
    if not self._at(";"):
      token = self._peek()
      if token.value in VARIABLE_KINDS and token.kind in (TokenType.KEYWORD, TokenType.IDENTIFIER):
        init = self._parse_variable_declaration(in_for=True)
      else:
        init = self._parse_expression()

    if self._at_word("of") or self._at("in"):
      node_type = "ForOfStatement" if self._next().value == "of" else "ForInStatement"
      right = self._parse_assignment() if node_type == "ForOfStatement" else self._parse_expression()
      self._expect(")")
      body = self._parse_statement()
      if node_type == "ForOfStatement":
        return self._finish(node_type, start, left=init, right=right, body=body, is_await=is_await)
      return self._finish(node_type, start, left=init, right=right, body=body)

    self._expect(";")
    test = None if self._at(";") else self._parse_expression()
    self._expect(";")
    update = None if self._at(")") else self._parse_expression()
    self._expect(")")
    body = self._parse_statement()
    return self._finish("ForStatement", start, init=init, test=test, update=update, body=body)

  def _parse_try(self) -> Node:
    start = self._expect("try")
    block = self._parse_block()
    handler = None
    finalizer = None
    if self._at("catch"):
      catch_start = self._next()
      param = None
      if self._eat("("):
        param = self._parse_binding(allow_optional=False)
        self._expect(")")
      body = self._parse_block()
      handler = self._finish("CatchClause", catch_start, param=param, body=body)
    if self._eat("finally"):
      finalizer = self._parse_block()
    if handler is None and finalizer is None:
      raise self._error("Missing catch or finally after try")
    return self._finish("TryStatement", start, block=block, handler=handler, finalizer=finalizer)

  def _parse_switch(self) -> Node:
    start = self._expect("switch")
    self._expect("(")
    discriminant = self._parse_expression()
    self._expect(")")
    self._expect("{")
    cases = []
    while not self._at("}"):
      case_start = self._peek()
      if self._eat("default"):
        test = None
      else:
        self._expect("case")
        test = self._parse_expression()
      self._expect(":")
      consequent = []
      while not (self._at("case") or self._at("default") or self._at("}")):
        consequent.append(self._parse_statement())
      cases.append(self._finish("SwitchCase", case_start, test=test, consequent=consequent))
    self._expect("}")
    return self._finish("SwitchStatement", start, discriminant=discriminant, cases=cases)

  def _parse_import(self) -> Node:
    start = self._expect("import")
    import_kind = "value"
    if self._at_word("type") and (self._at("{", 1) or self._at("*", 1) or not self._at_word("from", 1)):
      if self._peek(1).kind != TokenType.STRING:
        self._next()
        import_kind = "type"

    specifiers = []
    if self._peek().kind != TokenType.STRING:
      if self._peek().kind == TokenType.IDENTIFIER:
        local = self._parse_identifier()
        specifiers.append(Node("ImportDefaultSpecifier", local.start, local.end, local.line, local.column, local=local))
        self._eat(",")
      if self._at("*"):
        spec_start = self._next()
        self._expect_word("as")
        local = self._parse_identifier()
        specifiers.append(self._finish("ImportNamespaceSpecifier", spec_start, local=local))
      elif self._at("{"):
        specifiers.extend(self._parse_module_specifiers("ImportSpecifier"))
      self._expect_word("from")

    source = self._parse_string_literal()
    self._consume_semicolon()
    return self._finish("ImportDeclaration", start, specifiers=specifiers, source=source, importKind=import_kind)

  def _parse_module_specifiers(self, node_type: str) -> List[Node]:
    self._expect("{")
    specifiers = []
    while not self._at("}"):
      spec_start = self._peek()
      if self._at_word("type") and self._peek(1).kind in (TokenType.IDENTIFIER, TokenType.KEYWORD):
        self._next()
      first = self._parse_identifier(allow_keyword=True)
      local = first
      if self._at_word("as"):
        self._next()
        local = self._parse_identifier(allow_keyword=True)
      if node_type == "ImportSpecifier":
        specifiers.append(self._finish(node_type, spec_start, imported=first, local=local))
      else:
        specifiers.append(self._finish(node_type, spec_start, local=first, exported=local))
      if not self._eat(","):
        break
    self._expect("}")
    return specifiers

  def _parse_export(self) -> Node:
    start = self._expect("export")

    if self._eat("default"):
      token = self._peek()
      if self._at("function") or (self._at_word("async") and self._at("function", 1)):
        is_async = self._at_word("async")
        if is_async:
          self._next()
        declaration = self._parse_function(token, is_async=is_async, expression=False)
      elif self._at("class"):
        declaration = self._parse_class(token, expression=False)
      else:
        declaration = self._parse_assignment()
        self._consume_semicolon()
      return self._finish("ExportDefaultDeclaration", start, declaration=declaration)

    if self._at("*"):
      self._next()
      exported = None
      if self._at_word("as"):
        self._next()
        exported = self._parse_identifier(allow_keyword=True)
      self._expect_word("from")
      source = self._parse_string_literal()
      self._consume_semicolon()
      return self._finish("ExportAllDeclaration", start, exported=exported, source=source)

    if self._at_word("type") and self._at("{", 1):
      self._next()
    if self._at("{"):
      specifiers = self._parse_module_specifiers("ExportSpecifier")
      source = None
      if self._at_word("from"):
        self._next()
        source = self._parse_string_literal()
      self._consume_semicolon()
      return self._finish("ExportNamedDeclaration", start, declaration=None, specifiers=specifiers, source=source)

    declaration = self._parse_statement()
    return self._finish("ExportNamedDeclaration", start, declaration=declaration, specifiers=[], source=None)

  def _parse_type_alias(self) -> Node:
    start = self._expect_word("type")
    name = self._parse_identifier()
    type_parameters = self._parse_type_parameters_opt()
    self._expect("=")
    annotation = self._parse_type()
    self._consume_semicolon()
    return self._finish(
      "TSTypeAliasDeclaration", start, id=name, typeParameters=type_parameters, typeAnnotation=annotation
    )

  def _parse_interface(self) -> Node:
    start = self._expect_word("interface")
    name = self._parse_identifier()
    type_parameters = self._parse_type_parameters_opt()
    while not self._at("{"):
      self._next()
    body_start = self._peek()
    self._skip_balanced("{", "}")
    body = self._finish("TSInterfaceBody", body_start, body=[])
    return self._finish("TSInterfaceDeclaration", start, id=name, typeParameters=type_parameters, body=body)

  def _parse_enum(self) -> Node:
    start = self._peek()
    is_const = self._eat("const")
    self._expect("enum")
    name = self._parse_identifier()
    self._expect("{")
    members = []
    while not self._at("}"):
      member_start = self._peek()
      if member_start.kind == TokenType.STRING:
        member_id = self._parse_string_literal()
      else:
        member_id = self._parse_identifier(allow_keyword=True)
      initializer = self._parse_assignment() if self._eat("=") else None
      members.append(self._finish("TSEnumMember", member_start, id=member_id, initializer=initializer))
      if not self._eat(","):
        break
    self._expect("}")
    return self._finish("TSEnumDeclaration", start, id=name, members=members, const=is_const)

  # --- Functions & Classes ---

  def _parse_function(self, start: Token, is_async: bool, expression: bool) -> Node:
    self._expect("function")
    generator = self._eat("*")
    name = None
    if self._peek().kind == TokenType.IDENTIFIER:
      name = self._parse_identifier()
    type_parameters = self._parse_type_parameters_opt()
    params = self._parse_params()
    return_type = self._parse_type_annotation_opt()
    body = self._parse_block()
    node_type = "FunctionExpression" if expression else "FunctionDeclaration"
    return self._finish(
      node_type,
      start,
      id=name,
      typeParameters=type_parameters,
      params=params,
      returnType=return_type,
      body=body,
      is_async=is_async,
      generator=generator,
    )

  def _parse_method_function(self, start: Token, is_async: bool) -> Node:
    """Parses `(params): R { body }` of a method into a FunctionExpression."""
    type_parameters = self._parse_type_parameters_opt()
    params = self._parse_params()
    return_type = self._parse_type_annotation_opt()
    body = self._parse_block()
    return self._finish(
      "FunctionExpression",
      start,
      id=None,
      typeParameters=type_parameters,
      params=params,
      returnType=return_type,
      body=body,
      is_async=is_async,
      generator=False,
    )

  def _parse_params(self) -> List[Node]:
    self._expect("(")
    params = []
    while not self._at(")"):
      params.append(self._parse_param())
      if not self._eat(","):
        break
    self._expect(")")
    return params

  def _parse_param(self) -> Node:
    start = self._peek()
    while self._peek().value in CLASS_MODIFIERS and self._peek(1).kind == TokenType.IDENTIFIER:
      self._next()
    if self._at("..."):
      self._next()
      argument = self._parse_binding(allow_optional=False)
      return self._finish("RestElement", start, argument=argument)
    target = self._parse_binding(allow_optional=True)
    if self._eat("="):
      default = self._parse_assignment()
      return self._finish("AssignmentPattern", start, left=target, right=default)
    return target

  def _parse_binding(self, allow_optional: bool) -> Node:
    """Parses a binding name or destructuring pattern with its optional annotation."""
    start = self._peek()
    if self._at("{") or self._at("["):
      pattern = self._parse_object() if self._at("{") else self._parse_array()
      pattern.type = "ObjectPattern" if pattern.type == "ObjectExpression" else "ArrayPattern"
      annotation = self._parse_type_annotation_opt()
      if annotation is not None:
        pattern.set_field("typeAnnotation", annotation)
        pattern.end = annotation.end
      return pattern

    name_token = self._peek()
    if name_token.kind != TokenType.IDENTIFIER and name_token.value != "this":
      raise self._error("Expected binding name")
    self._next()
    optional = False
    if allow_optional and self._eat("?"):
      optional = True
    self._eat("!")
    annotation = self._parse_type_annotation_opt()
    return self._finish("Identifier", start, name=name_token.value, typeAnnotation=annotation, optional=optional)

  def _parse_class(self, start: Token, expression: bool) -> Node:
    self._expect("class")
    name = None
    if self._peek().kind == TokenType.IDENTIFIER and not self._at_word("extends") and not self._at_word("implements"):
      name = self._parse_identifier()
    type_parameters = self._parse_type_parameters_opt()
    super_class = None
    if self._eat("extends"):
      super_start = self._peek()
      super_class = self._parse_call_tail(super_start, self._parse_primary(), allow_call=False)
      if self._at("<"):
        self._parse_type_arguments()
    if self._at_word("implements"):
      self._next()
      while True:
        self._parse_type()
        if not self._eat(","):
          break

    body_start = self._expect("{")
    members = []
    while not self._at("}"):
      if self._eat(";"):
        continue
      members.append(self._parse_class_member())
    self._expect("}")
    body = self._finish("ClassBody", body_start, body=members)
    node_type = "ClassExpression" if expression else "ClassDeclaration"
    return self._finish(node_type, start, id=name, typeParameters=type_parameters, superClass=super_class, body=body)

  def _parse_class_member(self) -> Node:
    start = self._peek()
    is_static = False
    while self._peek().value in CLASS_MODIFIERS and not self._is_member_name_end(1):
      is_static = is_static or self._peek().value == "static"
      self._next()

    if self._at("[") and self._peek(1).kind == TokenType.IDENTIFIER and self._at(":", 2):
      # Index signature: [key: string]: T;
      self._skip_balanced("[", "]")
      annotation = self._parse_type_annotation_opt()
      self._consume_semicolon()
      return self._finish("TSIndexSignature", start, typeAnnotation=annotation)

    is_async = False
    if self._at_word("async") and not self._is_member_name_end(1) and not self._peek(1).newline_before:
      self._next()
      is_async = True
    self._eat("*")
    kind = "method"
    if (self._at_word("get") or self._at_word("set")) and not self._is_member_name_end(1):
      kind = self._next().value

    computed = self._at("[")
    key = self._parse_property_key()
    if key.type == "Identifier" and key.name == "constructor":
      kind = "constructor"
    self._eat("?")
    self._eat("!")

    if self._at("(") or self._at("<"):
      value_start = self._peek()
      value = self._parse_method_function(value_start, is_async)
      return self._finish(
        "MethodDefinition", start, key=key, value=value, kind=kind, computed=computed, static=is_static
      )

    annotation = self._parse_type_annotation_opt()
    value = None
    if self._eat("="):
      value = self._parse_assignment()
    self._consume_semicolon()
    return self._finish(
      "PropertyDefinition",
      start,
      key=key,
      typeAnnotation=annotation,
      value=value,
      computed=computed,
      static=is_static,
    )

  def _is_member_name_end(self, offset: int) -> bool:
    """True if the token at `offset` ends a member name (so the previous word is the name)."""
    return any(self._at(value, offset) for value in ("(", "=", ";", ":", "?", "!", "<", "}"))

  # --- Expressions ---

  def _parse_expression(self) -> Node:
    start = self._peek()
    expression = self._parse_assignment()
    if not self._at(","):
      return expression
    expressions = [expression]
    while self._eat(","):
      expressions.append(self._parse_assignment())
    return self._finish("SequenceExpression", start, expressions=expressions)

  def _parse_assignment(self) -> Node:
    if self._looks_like_arrow():
      return self._parse_arrow_function()

    start = self._peek()
    left = self._parse_conditional()
    token = self._peek()
    if token.kind == TokenType.PUNCTUATOR and token.value in ASSIGNMENT_OPERATORS:
      self._next()
      right = self._parse_assignment()
      return self._finish("AssignmentExpression", start, operator=token.value, left=left, right=right)
    return left

  def _parse_conditional(self) -> Node:
    start = self._peek()
    test = self._parse_binary(0)
    if not self._eat("?"):
      return test
    consequent = self._parse_assignment()
    self._expect(":")
    alternate = self._parse_assignment()
    return self._finish("ConditionalExpression", start, test=test, consequent=consequent, alternate=alternate)

  def _peek_binary_operator(self):
    """Returns `(operator, token_count)` for a pending binary operator, or `(None, 0)`."""
    token = self._peek()
    if token.kind == TokenType.PUNCTUATOR:
      if token.value == ">":
        # Recombine adjacent `>` tokens into shift operators
        count = 1
        while count < 3 and self._at(">", count) and self._peek(count).start == self._peek(count - 1).end:
          count += 1
        if self._at("=", count) and self._peek(count).start == self._peek(count - 1).end:
          return None, 0
        return ">" * count, count
      if token.value in BINARY_PRECEDENCE:
        return token.value, 1
      return None, 0
    if token.kind == TokenType.KEYWORD and token.value in ("instanceof", "in"):
      return token.value, 1
    if token.kind == TokenType.IDENTIFIER and token.value in ("as", "satisfies") and not token.newline_before:
      return token.value, 1
    return None, 0

  def _parse_binary(self, min_precedence: int) -> Node:
    start = self._peek()
    left = self._parse_unary()
    while True:
      operator, width = self._peek_binary_operator()
      if operator is None:
        break
      precedence = BINARY_PRECEDENCE[operator]
      if precedence < min_precedence:
        break
      for _ in range(width):
        self._next()

      if operator in ("as", "satisfies"):
        if self._at("const"):
          const_token = self._next()
          annotation = self._finish("TSTypeReference", const_token, typeName=self._identifier_from(const_token))
        else:
          annotation = self._parse_type()
        node_type = "TSAsExpression" if operator == "as" else "TSSatisfiesExpression"
        left = self._finish(node_type, start, expression=left, typeAnnotation=annotation)
        continue

      # `**` is right-associative
      next_min = precedence if operator == "**" else precedence + 1
      right = self._parse_binary(next_min)
      node_type = "LogicalExpression" if operator in LOGICAL_OPERATORS else "BinaryExpression"
      left = self._finish(node_type, start, operator=operator, left=left, right=right)
    return left

  def _parse_unary(self) -> Node:
    token = self._peek()
    if self._at("await"):
      self._next()
      argument = self._parse_unary()
      return self._finish("AwaitExpression", token, argument=argument)
    if token.kind == TokenType.PUNCTUATOR and token.value in ("!", "-", "+", "~") or (
      token.kind == TokenType.KEYWORD and token.value in ("typeof", "void", "delete")
    ):
      self._next()
      argument = self._parse_unary()
      return self._finish("UnaryExpression", token, operator=token.value, prefix=True, argument=argument)
    if self._at("++") or self._at("--"):
      self._next()
      argument = self._parse_unary()
      return self._finish("UpdateExpression", token, operator=token.value, prefix=True, argument=argument)
    if self._at("<") and self._peek(1).kind == TokenType.IDENTIFIER:
      # Legacy type assertion: <T>expr
      assertion = self._speculate(self._parse_type_assertion)
      if assertion is not None:
        return assertion

    expression = self._parse_call_tail(token, self._parse_primary(), allow_call=True)
    pending = self._peek()
    if (self._at("++") or self._at("--")) and not pending.newline_before:
      self._next()
      return self._finish("UpdateExpression", token, operator=pending.value, prefix=False, argument=expression)
    return expression

  def _parse_type_assertion(self) -> Node:
    start = self._expect("<")
    annotation = self._parse_type()
    self._expect(">")
    expression = self._parse_unary()
    return self._finish("TSTypeAssertion", start, typeAnnotation=annotation, expression=expression)

  def _parse_call_tail(self, start: Token, expression: Node, allow_call: bool) -> Node:
    """Parses member accesses, calls and non-null assertions following a primary."""
    # An optional link makes the whole tail one ChainExpression, as in ESTree
    in_chain = False
    while True:
      token = self._peek()
      if self._at("."):
        self._next()
        prop = self._parse_identifier(allow_keyword=True)
        expression = self._finish(
          "MemberExpression", start, object=expression, property=prop, computed=False, optional=False
        )
      elif self._at("?."):
        self._next()
        in_chain = True
        if self._at("(") and allow_call:
          arguments = self._parse_arguments()
          expression = self._finish(
            "CallExpression", start, callee=expression, typeArguments=None, arguments=arguments, optional=True
          )
        elif self._eat("["):
          prop = self._parse_expression()
          self._expect("]")
          expression = self._finish(
            "MemberExpression", start, object=expression, property=prop, computed=True, optional=True
          )
        else:
          prop = self._parse_identifier(allow_keyword=True)
          expression = self._finish(
            "MemberExpression", start, object=expression, property=prop, computed=False, optional=True
          )
      elif self._at("["):
        self._next()
        prop = self._parse_expression()
        self._expect("]")
        expression = self._finish(
          "MemberExpression", start, object=expression, property=prop, computed=True, optional=False
        )
      elif self._at("(") and allow_call:
        arguments = self._parse_arguments()
        expression = self._finish(
          "CallExpression", start, callee=expression, typeArguments=None, arguments=arguments, optional=False
        )
      elif self._at("<") and allow_call:
        type_arguments = self._speculate(self._parse_call_type_arguments)
        if type_arguments is None:
          break
        arguments = self._parse_arguments()
        expression = self._finish(
          "CallExpression",
          start,
          callee=expression,
          typeArguments=type_arguments,
          arguments=arguments,
          optional=False,
        )
      elif self._at("!") and not token.newline_before:
        self._next()
        expression = self._finish("TSNonNullExpression", start, expression=expression)
      elif self._at_template_start() and not token.newline_before:
        quasi = self._parse_template()
        expression = self._finish("TaggedTemplateExpression", start, tag=expression, quasi=quasi)
      else:
        break
    if in_chain:
      return self._finish("ChainExpression", start, expression=expression)
    return expression

  def _parse_call_type_arguments(self) -> Node:
    """Parses `<...>` only when it is immediately followed by an argument list."""
    type_arguments = self._parse_type_arguments()
    if not self._at("("):
      raise self._error("Expected '(' after type arguments")
    return type_arguments

  def _parse_arguments(self) -> List[Node]:
    self._expect("(")
    arguments = []
    while not self._at(")"):
      if self._at("..."):
        spread_start = self._next()
        argument = self._parse_assignment()
        arguments.append(self._finish("SpreadElement", spread_start, argument=argument))
      else:
        arguments.append(self._parse_assignment())
      if not self._eat(","):
        break
    self._expect(")")
    return arguments

  def _parse_primary(self) -> Node:
    token = self._peek()

    if token.kind == TokenType.IDENTIFIER:
      if token.value == "async" and self._at("function", 1) and not self._peek(1).newline_before:
        self._next()
        return self._parse_function(token, is_async=True, expression=True)
      return self._parse_identifier()

    if token.kind == TokenType.KEYWORD:
      if token.value == "function":
        return self._parse_function(token, is_async=False, expression=True)
      if token.value == "class":
        return self._parse_class(token, expression=True)
      if token.value == "new":
        return self._parse_new()
      if token.value in ("this", "super", "import"):
        self._next()
        node_type = {"this": "ThisExpression", "super": "Super", "import": "Import"}[token.value]
        return self._finish(node_type, token)
      if token.value in ("true", "false"):
        self._next()
        return self._finish("Literal", token, value=token.value == "true", raw=token.value)
      if token.value == "null":
        self._next()
        return self._finish("Literal", token, value=None, raw="null")

    if token.kind == TokenType.NUMBER:
      self._next()
      return self._finish("Literal", token, value=_number_value(token.value), raw=token.value)
    if token.kind == TokenType.STRING:
      return self._parse_string_literal()
    if self._at_template_start():
      return self._parse_template()
    if token.kind == TokenType.REGEX:
      return self._parse_regex()

    if self._at("("):
      self._next()
      expression = self._parse_expression()
      self._expect(")")
      return expression
    if self._at("["):
      return self._parse_array()
    if self._at("{"):
      return self._parse_object()

    raise self._error("Unexpected token")

  def _parse_new(self) -> Node:
    start = self._expect("new")
    callee_start = self._peek()
    callee = self._parse_call_tail(callee_start, self._parse_primary(), allow_call=False)
    type_arguments = None
    if self._at("<"):
      type_arguments = self._speculate(self._parse_call_type_arguments)
    arguments = self._parse_arguments() if self._at("(") else []
    return self._finish("NewExpression", start, callee=callee, typeArguments=type_arguments, arguments=arguments)

  def _parse_identifier(self, allow_keyword: bool = False) -> Node:
    token = self._peek()
    if token.kind == TokenType.IDENTIFIER or (allow_keyword and token.kind == TokenType.KEYWORD):
      self._next()
      return self._identifier_from(token)
    raise self._error("Expected identifier")

  def _identifier_from(self, token: Token) -> Node:
    return Node("Identifier", token.start, token.end, token.line, token.column, name=token.value)

  def _parse_string_literal(self) -> Node:
    token = self._peek()
    if token.kind != TokenType.STRING:
      raise self._error("Expected string literal")
    self._next()
    return self._finish("Literal", token, value=_string_value(token.value), raw=token.value)

  def _at_template_start(self) -> bool:
    token = self._peek()
    return token.kind == TokenType.TEMPLATE and token.value.startswith("`")

  def _parse_template(self, type_level: bool = False) -> Node:
    """
    Parses a template literal with its substitutions.

    Args:
        type_level: Parse substitutions as types (`TSTemplateLiteralType`)
            instead of expressions.

    Returns:
        Node: A `TemplateLiteral` or `TSTemplateLiteralType`.
    """
    start = self._peek()
    if not self._at_template_start():
      raise self._error("Expected template literal")
    token = self._next()
    quasis = [self._template_element(token)]
    substitutions = []
    while token.value.endswith("${"):
      substitutions.append(self._parse_type() if type_level else self._parse_expression())
      token = self._peek()
      if token.kind != TokenType.TEMPLATE or token.value.startswith("`"):
        raise self._error("Expected '}' closing template substitution")
      self._next()
      quasis.append(self._template_element(token))
    if type_level:
      return self._finish("TSTemplateLiteralType", start, quasis=quasis, types=substitutions)
    return self._finish("TemplateLiteral", start, quasis=quasis, expressions=substitutions)

  def _template_element(self, token: Token) -> Node:
    tail = token.value.endswith("`")
    raw = token.value[1:-1] if tail else token.value[1:-2]
    return Node(
      "TemplateElement",
      token.start,
      token.end,
      token.line,
      token.column,
      value={"raw": raw, "cooked": _cooked_value(raw)},
      tail=tail,
    )

  def _parse_regex(self) -> Node:
    token = self._next()
    closing = token.value.rindex("/")
    regex = {"pattern": token.value[1:closing], "flags": token.value[closing + 1 :]}
    return self._finish("Literal", token, value=None, raw=token.value, regex=regex)

  def _parse_array(self) -> Node:
    start = self._expect("[")
    elements: List[Optional[Node]] = []
    while not self._at("]"):
      if self._at(","):
        self._next()
        elements.append(None)
        continue
      if self._at("..."):
        spread_start = self._next()
        argument = self._parse_assignment()
        elements.append(self._finish("SpreadElement", spread_start, argument=argument))
      else:
        elements.append(self._parse_assignment())
      if not self._eat(","):
        break
    self._expect("]")
    return self._finish("ArrayExpression", start, elements=elements)

  def _parse_object(self) -> Node:
    start = self._expect("{")
    properties = []
    while not self._at("}"):
      if self._at("..."):
        spread_start = self._next()
        argument = self._parse_assignment()
        properties.append(self._finish("SpreadElement", spread_start, argument=argument))
      else:
        properties.append(self._parse_property())
      if not self._eat(","):
        break
    self._expect("}")
    return self._finish("ObjectExpression", start, properties=properties)

  def _parse_property(self) -> Node:
    start = self._peek()
    is_async = False
    if self._at_word("async") and not any(self._at(v, 1) for v in (",", ":", "(", "}", "=")):
      self._next()
      is_async = True
    self._eat("*")
    kind = "init"
    if (self._at_word("get") or self._at_word("set")) and not any(self._at(v, 1) for v in (",", ":", "(", "}", "=")):
      kind = self._next().value

    computed = self._at("[")
    key = self._parse_property_key()

    if self._at("(") or self._at("<"):
      value_start = self._peek()
      value = self._parse_method_function(value_start, is_async)
      return self._finish(
        "Property", start, key=key, value=value, kind=kind, method=kind == "init", shorthand=False, computed=computed
      )

    if self._eat(":"):
      value = self._parse_assignment()
      return self._finish(
        "Property", start, key=key, value=value, kind="init", method=False, shorthand=False, computed=computed
      )

    if key.type != "Identifier" or computed:
      raise self._error("Expected ':' in object literal")
    # Shorthand: the value is a distinct node covering the same text as the key
    value = Node("Identifier", key.start, key.end, key.line, key.column, name=key.name)
    if self._eat("="):
      default = self._parse_assignment()
      value = self._finish("AssignmentPattern", start, left=value, right=default)
    return self._finish(
      "Property", start, key=key, value=value, kind="init", method=False, shorthand=True, computed=False
    )

  def _parse_property_key(self) -> Node:
    token = self._peek()
    if self._eat("["):
      key = self._parse_assignment()
      self._expect("]")
      return key
    if token.kind in (TokenType.IDENTIFIER, TokenType.KEYWORD):
      return self._parse_identifier(allow_keyword=True)
    if token.kind == TokenType.STRING:
      return self._parse_string_literal()
    if token.kind == TokenType.NUMBER:
      self._next()
      return self._finish("Literal", token, value=_number_value(token.value), raw=token.value)
    if self._at("#") and self._peek(1).kind == TokenType.IDENTIFIER:
      self._next()
      name = self._next()
      return self._finish("PrivateIdentifier", token, name=name.value)
    raise self._error("Expected property name")

  # --- Arrow Functions ---

  def _looks_like_arrow(self) -> bool:
    """Bounded lookahead deciding whether an arrow function starts here."""
    offset = 0
    if self._at_word("async") and not self._peek(1).newline_before:
      if self._peek(1).kind == TokenType.IDENTIFIER or self._at("(", 1):
        offset = 1

    token = self._peek(offset)
    if token.kind == TokenType.IDENTIFIER:
      return self._at("=>", offset + 1)
    if not self._at("(", offset):
      return False

    # Find the matching `)`
    depth = 0
    index = self.pos + offset
    while index < len(self.tokens):
      candidate = self.tokens[index]
      if candidate.kind == TokenType.EOF:
        return False
      if candidate.kind == TokenType.PUNCTUATOR:
        if candidate.value in ("(", "[", "{"):
          depth += 1
        elif candidate.value in (")", "]", "}"):
          depth -= 1
          if depth == 0:
            break
      index += 1

    after = index + 1 - self.pos
    if self._at("=>", after):
      return True
    if not self._at(":", after):
      return False

    # `(a): T => ...` versus `cond ? (a) : b`
    saved = self.pos
    try:
      self.pos = saved + after + 1
      self._parse_type()
      return self._at("=>")
    except LintSyntaxError:
      return False
    finally:
      self.pos = saved

  def _parse_arrow_function(self) -> Node:
    start = self._peek()
    is_async = False
    if self._at_word("async") and not self._at("=>", 1):
      self._next()
      is_async = True

    return_type = None
    if self._peek().kind == TokenType.IDENTIFIER:
      params = [self._parse_identifier()]
    else:
      params = self._parse_params()
      return_type = self._parse_type_annotation_opt()

    self._expect("=>")
    if self._at("{"):
      body = self._parse_block()
      expression = False
    else:
      body = self._parse_assignment()
      expression = True
    return self._finish(
      "ArrowFunctionExpression",
      start,
      typeParameters=None,
      params=params,
      returnType=return_type,
      body=body,
      is_async=is_async,
      expression=expression,
    )

  # --- Types ---

  def _parse_type_annotation_opt(self) -> Optional[Node]:
    if not self._at(":"):
      return None
    start = self._next()
    annotation = self._parse_type()
    return self._finish("TSTypeAnnotation", start, typeAnnotation=annotation)

  def _parse_type_arguments(self) -> Node:
    start = self._expect("<")
    params = []
    while not self._at(">"):
      params.append(self._parse_type())
      if not self._eat(","):
        break
    self._expect(">")
    return self._finish("TSTypeParameterInstantiation", start, params=params)

  def _parse_type_parameters_opt(self) -> Optional[Node]:
    if not self._at("<"):
      return None
    start = self._next()
    params = []
    while not self._at(">"):
      param_start = self._peek()
      self._eat("const")
      name = self._parse_identifier()
      constraint = None
      default = None
      if self._eat("extends"):
        constraint = self._parse_type()
      if self._eat("="):
        default = self._parse_type()
      params.append(self._finish("TSTypeParameter", param_start, name=name, constraint=constraint, default=default))
      if not self._eat(","):
        break
    self._expect(">")
    return self._finish("TSTypeParameterDeclaration", start, params=params)

  def _parse_type(self) -> Node:
    start = self._peek()
    leading = self._eat("|")
    types = [self._parse_intersection_type()]
    while self._eat("|"):
      types.append(self._parse_intersection_type())
    if len(types) == 1 and not leading:
      return types[0]
    return self._finish("TSUnionType", start, types=types)

  def _parse_intersection_type(self) -> Node:
    start = self._peek()
    leading = self._eat("&")
    types = [self._parse_postfix_type()]
    while self._eat("&"):
      types.append(self._parse_postfix_type())
    if len(types) == 1 and not leading:
      return types[0]
    return self._finish("TSIntersectionType", start, types=types)

  def _parse_postfix_type(self) -> Node:
    start = self._peek()
    annotation = self._parse_primary_type()
    while self._at("[") and not self._peek().newline_before:
      self._next()
      if self._eat("]"):
        annotation = self._finish("TSArrayType", start, elementType=annotation)
      else:
        index = self._parse_type()
        self._expect("]")
        annotation = self._finish("TSIndexedAccessType", start, objectType=annotation, indexType=index)
    return annotation

  def _parse_primary_type(self) -> Node:
    token = self._peek()

    if self._at("typeof"):
      self._next()
      name = self._parse_entity_name()
      type_arguments = self._parse_type_arguments() if self._at("<") else None
      return self._finish("TSTypeQuery", token, exprName=name, typeArguments=type_arguments)

    if token.kind == TokenType.IDENTIFIER and token.value in ("keyof", "unique", "readonly"):
      if not (self._at(".", 1) or self._at(",", 1) or self._at(">", 1) or self._at("|", 1)):
        self._next()
        operand = self._parse_postfix_type()
        return self._finish("TSTypeOperator", token, operator=token.value, typeAnnotation=operand)

    if token.kind == TokenType.IDENTIFIER:
      if token.value in KEYWORD_TYPES and not self._at(".", 1):
        self._next()
        return self._finish(KEYWORD_TYPES[token.value], token)
      name = self._parse_entity_name()
      type_arguments = self._parse_type_arguments() if self._at("<") else None
      return self._finish("TSTypeReference", token, typeName=name, typeArguments=type_arguments)

    if token.kind == TokenType.KEYWORD:
      if token.value == "void":
        self._next()
        return self._finish("TSVoidKeyword", token)
      if token.value == "null":
        self._next()
        return self._finish("TSNullKeyword", token)
      if token.value == "this":
        self._next()
        return self._finish("TSThisType", token)
      if token.value in ("true", "false"):
        literal = self._parse_primary()
        return self._finish("TSLiteralType", token, literal=literal)
      if token.value == "new":
        self._next()
        return self._parse_function_type(token, "TSConstructorType")

    if self._at_template_start():
      return self._parse_template(type_level=True)
    if token.kind in (TokenType.STRING, TokenType.NUMBER):
      literal = self._parse_primary()
      return self._finish("TSLiteralType", token, literal=literal)
    if self._at("-") and self._peek(1).kind == TokenType.NUMBER:
      literal = self._parse_unary()
      return self._finish("TSLiteralType", token, literal=literal)

    if self._at("(") or self._at("<"):
      function_type = self._speculate(lambda: self._parse_function_type(token, "TSFunctionType"))
      if function_type is not None:
        return function_type
      self._expect("(")
      inner = self._parse_type()
      self._expect(")")
      return inner

    if self._at("{"):
      self._skip_balanced("{", "}")
      return self._finish("TSTypeLiteral", token, members=[])

    if self._at("["):
      self._next()
      element_types = []
      while not self._at("]"):
        element_start = self._peek()
        if self._eat("..."):
          element_types.append(self._finish("TSRestType", element_start, typeAnnotation=self._parse_type()))
        else:
          element_types.append(self._parse_type())
        if not self._eat(","):
          break
      self._expect("]")
      return self._finish("TSTupleType", token, elementTypes=element_types)

    raise self._error("Expected type")

  def _parse_function_type(self, start: Token, node_type: str) -> Node:
    type_parameters = self._parse_type_parameters_opt()
    params = self._parse_params()
    arrow = self._expect("=>")
    return_annotation = self._parse_type()
    return_type = self._finish("TSTypeAnnotation", arrow, typeAnnotation=return_annotation)
    return self._finish(node_type, start, typeParameters=type_parameters, params=params, returnType=return_type)

  def _parse_entity_name(self) -> Node:
    start = self._peek()
    if self._at("this"):
      self._next()
      name = self._finish("ThisExpression", start)
    else:
      name = self._parse_identifier()
    while self._at(".") and self._peek(1).kind in (TokenType.IDENTIFIER, TokenType.KEYWORD):
      self._next()
      right = self._parse_identifier(allow_keyword=True)
      name = self._finish("TSQualifiedName", start, left=name, right=right)
    return name


def _number_value(raw: str):
  text = raw.replace("_", "")
  if text.endswith("n"):
    text = text[:-1]
  try:
    return int(text, 0)
  except ValueError:
    pass
  try:
    return float(text)
  except ValueError:
    return raw


def _string_value(raw: str) -> str:
  try:
    return ast.literal_eval(raw)
  except (ValueError, SyntaxError):
    return raw[1:-1]


_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}

_ESCAPE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])")


def _cooked_value(raw: str) -> str:
  """Interprets the escape sequences of a template chunk."""

  def replace(match: "re.Match[str]") -> str:
    escape = match.group(1)
    if escape in ("\n", "\r\n", "\r"):
      return ""
    if escape[0] in "ux" and len(escape) > 1:
      return chr(int(escape.strip("ux{}"), 16))
    return _SIMPLE_ESCAPES.get(escape, escape)

  return _ESCAPE.sub(replace, raw)
