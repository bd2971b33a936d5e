"""
Tests for TypeScript Lexer.

Verifies:
1.  Keyword vs contextual identifier classification.
2.  Longest-match punctuators and the single `>` rule.
3.  Offsets, 1-based line/column tracking and `newline_before`.
4.  Comments and whitespace are skipped.
.  Template literals split at substitutions, including nested braces.
7.  `/` opens a regular expression only where an expression may start.
"""

import pytest

from unwrap_lint.core.tokens import LintSyntaxError, TokenType, TypeScriptLexer


def lex(code: str):
  return list(TypeScriptLexer().tokenize(code))


def values(code: str):
  return [t.value for t in lex(code) if t.kind != TokenType.EOF]


def test_keywords_and_contextual_words():
  tokens = lex("const async = await typeof of")
  kinds = [(t.value, t.kind) for t in tokens[:-1]]
  assert kinds == [
    ("const", TokenType.KEYWORD),
    ("async", TokenType.IDENTIFIER),
    ("=", TokenType.PUNCTUATOR),
    ("await", TokenType.KEYWORD),
    ("typeof", TokenType.KEYWORD),
    ("of", TokenType.IDENTIFIER),
  ]
  assert tokens[-1].kind == TokenType.EOF


def test_longest_match_punctuators():
  assert values("a === b !== c => d ?? e ?. f ...g") == [
    "a",
    "===",
    "b",
    "!==",
    "c",
    "=>",
    "d",
    "??",
    "e",
    "?.",
    "f",
    "...",
    "g",
  ]


def test_greater_than_is_never_combined():
  assert values("Array<Array<T>>") == ["Array", "<", "Array", "<", "T", ">", ">"]
  assert values("a >> b") == ["a", ">", ">", "b"]


def test_optional_chain_not_confused_with_ternary_number():
  assert values("a?.5:1") == ["a", "?", ".5", ":", "1"]


def test_literals():
  tokens = lex("'a\\'b' \"c\" `t` 0xff 1_000 2.5e3 10n")
  kinds = [t.kind for t in tokens[:-1]]
  assert kinds == [
    TokenType.STRING,
    TokenType.STRING,
    TokenType.TEMPLATE,
    TokenType.NUMBER,
    TokenType.NUMBER,
    TokenType.NUMBER,
    TokenType.NUMBER,
  ]
  assert tokens[0].value == "'a\\'b'"


def test_positions_and_newlines():
  tokens = lex("a\n  // note\n  b /* c */ c")
  a, b, c = tokens[0], tokens[1], tokens[2]

  assert (a.start, a.end, a.line, a.column) == (0, 1, 1, 1)
  assert not a.newline_before

  assert (b.line, b.column) == (3, 3)
  assert b.newline_before

  assert c.line == 3
  assert not c.newline_before


def test_multiline_template_advances_lines():
  tokens = lex("`x\ny` z")
  assert tokens[1].value == "z"
  assert tokens[1].line == 2


def test_illegal_character():
  with pytest.raises(LintSyntaxError) as exc:
    lex("let a = 1\nlet b = \\")
  assert exc.value.line == 2
  assert exc.value.column == 9
  assert "line 2" in str(exc.value)


def test_template_substitutions_are_lexed():
  tokens = lex("`id: ${unwrap(f())} and ${ {a: 1}.a }!`")
  assert [(t.kind, t.value) for t in tokens[:-1]] == [
    (TokenType.TEMPLATE, "`id: ${"),
    (TokenType.IDENTIFIER, "unwrap"),
    (TokenType.PUNCTUATOR, "("),
    (TokenType.IDENTIFIER, "f"),
    (TokenType.PUNCTUATOR, "("),
    (TokenType.PUNCTUATOR, ")"),
    (TokenType.PUNCTUATOR, ")"),
    (TokenType.TEMPLATE, "} and ${"),
    (TokenType.PUNCTUATOR, "{"),
    (TokenType.IDENTIFIER, "a"),
    (TokenType.PUNCTUATOR, ":"),
    (TokenType.NUMBER, "1"),
    (TokenType.PUNCTUATOR, "}"),
    (TokenType.PUNCTUATOR, "."),
    (TokenType.IDENTIFIER, "a"),
    (TokenType.TEMPLATE, "}!`"),
  ]


def test_nested_template_and_escaped_dollar():
  assert values("`a${`b${c}`}\\${d}`") == ["`a${", "`b${", "c", "}`", "}\\${d}`"]


def test_unterminated_template():
  with pytest.raises(LintSyntaxError) as exc:
    lex("const s = `abc")
  assert exc.value.column == 11


def test_regex_where_expression_starts():
  tokens = lex("const re = /^a+[/]$/gi; x = a / b / c; return /x/")
  regexes = [t.value for t in tokens if t.kind == TokenType.REGEX]
  assert regexes == ["/^a+[/]$/gi", "/x/"]


def test_division_after_operands():
  assert values("(a) / 2 / x[0] / this") == ["(", "a", ")", "/", "2", "/", "x", "[", "0", "]", "/", "this"]
