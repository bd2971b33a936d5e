"""
Tests for TypeScript Parser.

Verifies:
1.  The wrap construct shape: nested calls, explicit type arguments whose
    range covers the angle brackets, async arrow argument.
2.  `<` / `>` disambiguation between comparisons, shifts and type arguments.
3.  Arrow function forms, function expressions and generic declarations.
4.  Type syntax: unions, qualified `typeof`, nested generics, arrays.
5.  Statement coverage with optional semicolons.
.  Template substitutions, regular expressions and enums.
"""

import pytest

from unwrap_lint.core.parser import parse
from unwrap_lint.core.tokens import LintSyntaxError


def first_expression(code: str):
  statement = parse(code).body[0]
  if statement.type == "VariableDeclaration":
    return statement.declarations[0].init
  return statement.expression


def test_wrap_construct_shape():
  code = "const f = wrap<typeof a | typeof b>()(async (x: number) => { return unwrap(await a(x)) })"
  outer = first_expression(code)

  assert outer.type == "CallExpression"
  inner = outer.callee
  assert inner.type == "CallExpression"
  assert inner.callee.type == "Identifier"
  assert inner.callee.name == "wrap"
  assert code[inner.callee.start : inner.callee.end] == "wrap"

  type_args = inner.typeArguments
  assert type_args.type == "TSTypeParameterInstantiation"
  assert code[type_args.start : type_args.end] == "<typeof a | typeof b>"

  union = type_args.params[0]
  assert union.type == "TSUnionType"
  assert [t.type for t in union.types] == ["TSTypeQuery", "TSTypeQuery"]
  assert [t.exprName.name for t in union.types] == ["a", "b"]

  fn = outer.arguments[0]
  assert fn.type == "ArrowFunctionExpression"
  assert fn.is_async is True
  assert fn.params[0].name == "x"

  ret = fn.body.body[0]
  assert ret.type == "ReturnStatement"
  unwrap_call = ret.argument
  assert unwrap_call.callee.name == "unwrap"
  assert unwrap_call.arguments[0].type == "AwaitExpression"
  assert unwrap_call.arguments[0].argument.callee.name == "a"


def test_call_without_type_arguments():
  outer = first_expression("wrap()(async function () {})")
  assert outer.callee.typeArguments is None
  fn = outer.arguments[0]
  assert fn.type == "FunctionExpression"
  assert fn.is_async is True


def test_empty_type_argument_list():
  call = first_expression("wrap<>()")
  assert call.typeArguments.params == []


def test_comparisons_are_not_type_arguments():
  expr = first_expression("const ok = a < b && c > d")
  assert expr.type == "LogicalExpression"
  assert expr.operator == "&&"
  assert expr.left.type == "BinaryExpression"
  assert expr.left.operator == "<"
  assert expr.right.operator == ">"


def test_shift_operators_are_recombined():
  expr = first_expression("x = a >> b >>> c")
  assert expr.type == "AssignmentExpression"
  assert expr.right.operator == ">>>"
  assert expr.right.left.operator == ">>"


def test_arrow_forms():
  body = parse(
    """
const f = x => x + 1
const g = async x => x
const h = async function () {}
const k = function named(a, b) { return a }
const m = (a?: string, ...rest: number[]): void => {}
"""
  ).body
  inits = [decl.declarations[0].init for decl in body]

  assert [i.type for i in inits] == [
    "ArrowFunctionExpression",
    "ArrowFunctionExpression",
    "FunctionExpression",
    "FunctionExpression",
    "ArrowFunctionExpression",
  ]
  assert [i.is_async for i in inits] == [False, True, True, False, False]
  assert inits[0].expression is True
  assert inits[3].id.name == "named"

  m = inits[4]
  assert m.params[0].optional is True
  assert m.params[1].type == "RestElement"
  assert m.params[1].argument.typeAnnotation.typeAnnotation.type == "TSArrayType"
  assert m.returnType.typeAnnotation.type == "TSVoidKeyword"


def test_parenthesized_conditional_branch_is_not_an_arrow():
  expr = first_expression("const r = ok ? (a) : b")
  assert expr.type == "ConditionalExpression"
  assert expr.consequent.name == "a"
  assert expr.alternate.name == "b"


def test_qualified_type_query():
  alias = parse("type T = typeof ns.fn").body[0]
  assert alias.type == "TSTypeAliasDeclaration"
  query = alias.typeAnnotation
  assert query.type == "TSTypeQuery"
  assert query.exprName.type == "TSQualifiedName"
  assert query.exprName.right.name == "fn"


def test_nested_generics_close_without_splitting():
  decl = parse("let v: Map<string, Array<number>> = new Map()").body[0]
  target = decl.declarations[0].id
  ref = target.typeAnnotation.typeAnnotation
  assert ref.type == "TSTypeReference"
  assert ref.typeName.name == "Map"
  assert ref.typeArguments.params[1].typeArguments.params[0].type == "TSNumberKeyword"
  assert decl.declarations[0].init.type == "NewExpression"


def test_generic_async_function_declaration():
  fn = parse("async function f<T extends object>(x: T): Promise<T> { return x }").body[0]
  assert fn.type == "FunctionDeclaration"
  assert fn.is_async is True
  assert fn.typeParameters.params[0].constraint.type == "TSObjectKeyword"
  assert fn.returnType.typeAnnotation.typeName.name == "Promise"


def test_statements_with_optional_semicolons():
  code = """
import { wrap, unwrap } from 'typed-errors'
import type { Result } from './result'
export interface Opts { retries?: number; nested: { a: string } }
export class Repo extends Base {
  private readonly items: string[] = []
  constructor(private db: Db) { super() }
  async load(id: string): Promise<Item> { return this.db.get(id) }
  static get size() { return 0 }
}
for (const item of list) { if (!item) continue; else total += 1 }
try { risky() } catch (e) { log(e) } finally { done() }
switch (kind) { case 'a': break; default: noop() }
let counter = 0
counter++
"""
  body = parse(code).body
  assert [s.type for s in body] == [
    "ImportDeclaration",
    "ImportDeclaration",
    "ExportNamedDeclaration",
    "ExportNamedDeclaration",
    "ForOfStatement",
    "TryStatement",
    "SwitchStatement",
    "VariableDeclaration",
    "ExpressionStatement",
  ]

  assert [s.imported.name for s in body[0].specifiers] == ["wrap", "unwrap"]
  assert body[1].importKind == "type"

  cls = body[3].declaration
  assert cls.type == "ClassDeclaration"
  members = cls.body.body
  assert [m.type for m in members] == ["PropertyDefinition", "MethodDefinition", "MethodDefinition", "MethodDefinition"]
  assert members[1].kind == "constructor"
  assert members[2].value.is_async is True
  assert members[3].kind == "get"
  assert members[3].static is True

  assert body[8].expression.type == "UpdateExpression"


def test_object_literal_members():
  obj = first_expression("const o = { a, b: 2, ...rest, m() { return 1 } }")
  assert [p.type for p in obj.properties] == ["Property", "Property", "SpreadElement", "Property"]
  assert obj.properties[0].shorthand is True
  assert obj.properties[0].value is not obj.properties[0].key
  assert obj.properties[3].method is True


def test_optional_chain_and_non_null():
  chain = first_expression("maybe?.call(x)!.y")
  assert chain.type == "ChainExpression"
  expr = chain.expression
  assert expr.type == "MemberExpression"
  assert expr.object.type == "TSNonNullExpression"
  call = expr.object.expression
  assert call.type == "CallExpression"
  assert call.callee.optional is True


def test_as_expressions_chain():
  expr = first_expression("const n = value as unknown as number")
  assert expr.type == "TSAsExpression"
  assert expr.typeAnnotation.type == "TSNumberKeyword"
  assert expr.expression.type == "TSAsExpression"
  assert expr.expression.typeAnnotation.type == "TSUnknownKeyword"


def test_program_range_and_positions():
  code = "\n  foo()"
  program = parse(code)
  assert program.range == (0, len(code))
  call = program.body[0].expression
  assert (call.line, call.column) == (2, 3)


def test_unterminated_block_raises():
  with pytest.raises(LintSyntaxError) as exc:
    parse("wrap<typeof a>()(async () => {\n  unwrap(await a())\n")
  assert exc.value.line == 3


def test_unexpected_token_raises():
  with pytest.raises(LintSyntaxError):
    parse("const x = )")


def test_template_substitutions_are_expressions():
  code = "const s = `id: ${unwrap(await f())}, ${a + 1}`"
  template = first_expression(code)
  assert template.type == "TemplateLiteral"
  assert [e.type for e in template.expressions] == ["CallExpression", "BinaryExpression"]
  assert template.expressions[0].callee.name == "unwrap"
  assert [q.value["raw"] for q in template.quasis] == ["id: ", ", ", ""]
  assert [q.tail for q in template.quasis] == [False, False, True]
  assert code[template.start : template.end] == code[code.index("`") :]


def test_template_cooked_value_and_tag():
  tagged = first_expression("sql`a\\tb${x}`")
  assert tagged.type == "TaggedTemplateExpression"
  assert tagged.tag.name == "sql"
  assert tagged.quasi.quasis[0].value == {"raw": "a\\tb", "cooked": "a\tb"}


def test_template_literal_type():
  alias = parse("type Key = `on${Capitalize<Name>}`").body[0]
  annotation = alias.typeAnnotation
  assert annotation.type == "TSTemplateLiteralType"
  assert annotation.types[0].type == "TSTypeReference"


def test_regex_literal():
  literal = first_expression("const re = /^a+$/gi")
  assert literal.type == "Literal"
  assert literal.regex == {"pattern": "^a+$", "flags": "gi"}
  assert literal.raw == "/^a+$/gi"

  test_call = first_expression("/x/.test(s)")
  assert test_call.callee.object.type == "Literal"


def test_enum_declarations():
  program = parse("enum E { A, B = 2, 'c' = A | B }\nexport const enum F { X }")
  enum = program.body[0]
  assert enum.type == "TSEnumDeclaration"
  assert enum.id.name == "E"
  assert enum.const is False
  assert [m.initializer is None for m in enum.members] == [True, False, False]
  assert enum.members[2].id.type == "Literal"

  exported = program.body[1].declaration
  assert exported.type == "TSEnumDeclaration"
  assert exported.const is True


def test_optional_call_is_chain_expression():
  chain = first_expression("unwrap(await f?.())").arguments[0].argument
  assert chain.type == "ChainExpression"
  assert chain.expression.type == "CallExpression"
  assert chain.expression.optional is True
  assert chain.expression.callee.name == "f"
