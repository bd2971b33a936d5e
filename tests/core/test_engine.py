"""
Tests for the Lint Engine.

Verifies:
1.  Offsets map to 1-based line/column positions.
2.  Diagnostics are sorted by position and carry rendered messages.
3.  Parse failures produce `success=False` without running rules.
4.  The fix loop converges and stops at `max_fix_passes`.
5.  Prebuilt trees (ESTree JSON) can be linted directly.
6.  Unknown rule ids raise `KeyError`.
"""

import pytest

from unwrap_lint.config import LintConfig
from unwrap_lint.core.engine import LintEngine, RuleContext, SourceCode
from unwrap_lint.core.nodes import Node, from_estree
from unwrap_lint.rules.base import Rule, RuleMeta, register_rule

BROKEN = "const run = wrap()(async () => {\n  const a = unwrap(await load())\n})\n"


def test_source_positions():
  source = SourceCode("ab\ncd\n")
  assert source.position(0) == (1, 1)
  assert source.position(2) == (1, 3)
  assert source.position(3) == (2, 1)
  assert source.position(6) == (3, 1)


def test_rule_context_renders_fix_lazily():
  sink = []
  context = RuleContext("demo", {"m": "message text"}, {}, sink.append, SourceCode("wrap()"))
  callee = Node("Identifier", 0, 4, name="wrap")

  context.report("m", callee, fix=lambda fixer: fixer.insert_text_after(callee, "<T>"))

  diagnostic = sink[0]
  assert diagnostic.message == "message text"
  assert (diagnostic.line, diagnostic.column, diagnostic.end_line, diagnostic.end_column) == (1, 1, 1, 5)
  assert diagnostic.fix.range == (4, 4)
  assert diagnostic.fix.text == "<T>"


def test_lint_reports_sorted_diagnostics():
  result = LintEngine().lint(BROKEN)

  assert result.success
  assert result.has_diagnostics
  assert result.output == BROKEN
  assert not result.fixed
  positions = [(d.line, d.column) for d in result.diagnostics]
  assert positions == sorted(positions)
  assert [d.message_id for d in result.diagnostics] == ["missingTypeParamInWrap", "badWrap", "unwrapNotInWrap"]
  assert all(d.rule_id == "consistent-unwrap" for d in result.diagnostics)
  assert result.diagnostics[1].message == "specify all the types of functions being unwrapped"


def test_parse_failure():
  result = LintEngine().lint("wrap()(async () => {")

  assert not result.success
  assert result.errors
  assert "line 1" in result.errors[0]
  assert result.diagnostics == []


def test_lint_and_fix_converges():
  result = LintEngine().lint_and_fix(BROKEN)

  assert result.fixed
  assert result.source == BROKEN
  assert result.output.startswith("const run = wrap<typeof load>()(async () => {")
  assert result.diagnostics == []


def test_lint_and_fix_clean_input_untouched():
  clean = "const run = wrap<typeof load>()(async () => unwrap(await load()))"
  result = LintEngine().lint_and_fix(clean)
  assert not result.fixed
  assert result.output == clean


def test_nested_wraps_fixed_in_one_pass():
  nested = (
    "wrap()(async () => {\n"
    "  unwrap(await a())\n"
    "  wrap()(async () => {\n"
    "    unwrap(await b())\n"
    "  })\n"
    "})\n"
  )
  engine = LintEngine(LintConfig(max_fix_passes=1))
  result = engine.lint_and_fix(nested)

  assert result.fixed
  assert "wrap<typeof a>()" in result.output
  assert "wrap<typeof b>()" in result.output
  assert result.diagnostics == []


def test_fix_passes_are_bounded():
  @register_rule("always-fix")
  class AlwaysFix(Rule):
    meta = RuleMeta(name="always-fix", messages={"again": "fixable forever"})

    def visit_Program(self, node):
      self.context.report("again", node, fix=lambda fixer: fixer.insert_text_after(node, ";"))

  engine = LintEngine(LintConfig(max_fix_passes=3), rules=["always-fix"])
  result = engine.lint_and_fix("x")

  assert result.output == "x;;;"
  assert [d.message_id for d in result.diagnostics] == ["again"]


def test_lint_prebuilt_estree():
  code = "wrap<typeof b>()(async () => { unwrap(a()) })"
  doc = {
    "type": "Program",
    "range": [0, 45],
    "sourceType": "module",
    "body": [
      {
        "type": "ExpressionStatement",
        "range": [0, 45],
        "expression": {
          "type": "CallExpression",
          "range": [0, 45],
          "callee": {
            "type": "CallExpression",
            "range": [0, 16],
            "callee": {"type": "Identifier", "name": "wrap", "range": [0, 4]},
            "typeParameters": {
              "type": "TSTypeParameterInstantiation",
              "range": [4, 14],
              "params": [
                {
                  "type": "TSTypeQuery",
                  "range": [5, 13],
                  "exprName": {"type": "Identifier", "name": "b", "range": [12, 13]},
                }
              ],
            },
            "arguments": [],
            "optional": False,
          },
          "arguments": [
            {
              "type": "ArrowFunctionExpression",
              "range": [17, 44],
              "async": True,
              "expression": False,
              "params": [],
              "body": {
                "type": "BlockStatement",
                "range": [29, 44],
                "body": [
                  {
                    "type": "ExpressionStatement",
                    "range": [31, 41],
                    "expression": {
                      "type": "CallExpression",
                      "range": [31, 41],
                      "callee": {"type": "Identifier", "name": "unwrap", "range": [31, 37]},
                      "arguments": [
                        {
                          "type": "CallExpression",
                          "range": [38, 41],
                          "callee": {"type": "Identifier", "name": "a", "range": [38, 39]},
                          "arguments": [],
                          "optional": False,
                        }
                      ],
                      "optional": False,
                    },
                  }
                ],
              },
            }
          ],
          "optional": False,
        },
      }
    ],
  }

  result = LintEngine().lint(code, tree=from_estree(doc))

  assert [(d.message_id, d.column) for d in result.diagnostics] == [
    ("badWrap", 1),
    ("wrappedFnNotUnwrapped", 6),
    ("unwrapNotInWrap", 39),
  ]
  fix = result.diagnostics[0].fix
  assert fix.range == (4, 14)
  assert fix.text == "<typeof a>"


def test_unknown_rule():
  with pytest.raises(KeyError):
    LintEngine(rules=["no-such-rule"])
