"""
TypeScript Tokenizer Definition.

Provides a Regex-based Lexer (`TypeScriptLexer`) that decomposes TypeScript
source into a stream of typed `Token` objects carrying both character offsets
(for text edits) and 1-based line/column positions (for diagnostics).

Template literals are split at their substitutions: the head (`` `text${ ``), each
middle (`` }text${ ``) and the tail (`` }text` ``) become TEMPLATE tokens and the
substitution expressions are lexed as ordinary tokens. A `/` starts a regular
expression literal when it appears where an expression may begin.

The lexer intentionally emits `>` as a single-character token in every
context. Nested type argument lists such as `Array<Array<T>>` therefore close
without any token splitting; the parser recombines adjacent `>` tokens into
shift operators inside expressions.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Generator, List, Optional, Pattern, Tuple


class LintSyntaxError(SyntaxError):
  """
  Raised when the source cannot be tokenized or parsed.

  Attributes:
      line: 1-based line of the offending token.
      column: 1-based column of the offending token.
  """

  def __init__(self, message: str, line: int = 0, column: int = 0):
    super().__init__(f"{message} (line {line}, column {column})")
    self.line = line
    self.column = column


class TokenType(Enum):
  """Enumeration of TypeScript token kinds."""

  IDENTIFIER = auto()  # foo, async, type, of (contextual keywords included)
  KEYWORD = auto()  # const, function, await, typeof
  NUMBER = auto()  # 42, 0xff, 1.5e3
  STRING = auto()  # 'a', "b"
  TEMPLATE = auto()  # `text ${, }text${, }text`
  REGEX = auto()  # /ab+c/gi
  PUNCTUATOR = auto()  # (, =>, ?., ...
  EOF = auto()


KEYWORDS = frozenset(
  {
    "await",
    "break",
    "case",
    "catch",
    "class",
    "const",
    "continue",
    "debugger",
    "default",
    "delete",
    "do",
    "else",
    "enum",
    "export",
    "extends",
    "false",
    "finally",
    "for",
    "function",
    "if",
    "import",
    "in",
    "instanceof",
    "new",
    "null",
    "return",
    "super",
    "switch",
    "this",
    "throw",
    "true",
    "try",
    "typeof",
    "var",
    "void",
    "while",
    "with",
    "yield",
  }
)

# Longest first so that `===` wins over `==` and `=`.
PUNCTUATORS = [
  "...",
  "===",
  "!==",
  "**=",
  "<<=",
  "&&=",
  "||=",
  "??=",
  "=>",
  "==",
  "!=",
  "<=",
  ">=",
  "&&",
  "||",
  "??",
  "++",
  "--",
  "+=",
  "-=",
  "*=",
  "/=",
  "%=",
  "&=",
  "|=",
  "^=",
  "**",
  "<<",
]


@dataclass
class Token:
  """
  Represents a lexical unit.

  Attributes:
      kind: The type of token.
      value: The raw source text of the token.
      start: Offset of the first character.
      end: Offset one past the last character.
      line: Line number in source (1-based).
      column: Column number in source (1-based).
      newline_before: True if a line break separates this token from the previous one.
  """

  kind: TokenType
  value: str
  start: int
  end: int
  line: int
  column: int
  newline_before: bool = False


class TypeScriptLexer:
  """
  Regex-based Lexer for the TypeScript subset understood by the parser.
  """

  # Order matters: comments and literals before punctuators, `?.` before `?`.
  PATTERNS: List[Tuple[TokenType, str]] = [
    (TokenType.STRING, r"\"(?:[^\"\\\n]|\\.)*\""),
    (TokenType.STRING, r"'(?:[^'\\\n]|\\.)*'"),
    (
      TokenType.NUMBER,
      r"0[xX][0-9a-fA-F_]+n?|0[bB][01_]+n?|0[oO][0-7_]+n?"
      r"|(?:\d[\d_]*(?:\.[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?\d+)?n?",
    ),
    (TokenType.IDENTIFIER, r"[A-Za-z_$][\w$]*"),
    (TokenType.PUNCTUATOR, "|".join(re.escape(p) for p in PUNCTUATORS)),
    (TokenType.PUNCTUATOR, r"\?\.(?!\d)"),
    (TokenType.PUNCTUATOR, r"[{}()\[\];,<>+\-*/%&|^!~?:=.@#]"),
  ]

  _SKIP = re.compile(r"(?:\s+|//[^\n]*|/\*[\s\S]*?\*/)+")

  # A template chunk runs up to the closing backtick or the next `${`.
  _TEMPLATE_HEAD = re.compile(r"`(?:[^`\\$]|\\[\s\S]|\$(?!\{))*(?:`|\$\{)")
  _TEMPLATE_CONTINUATION = re.compile(r"\}(?:[^`\\$]|\\[\s\S]|\$(?!\{))*(?:`|\$\{)")
  _REGEX = re.compile(r"/(?:[^/\\\[\n]|\\.|\[(?:[^\]\\\n]|\\.)*\])+/[A-Za-z]*")

  # Tokens after which a `/` divides instead of opening a regular expression.
  _OPERAND_KEYWORDS = frozenset({"this", "super", "true", "false", "null"})
  _OPERAND_PUNCTUATORS = frozenset({")", "]", "}", "++", "--"})

  def __init__(self) -> None:
    """Initializes the lexer with compiled patterns."""
    self.regex_pairs: List[Tuple[TokenType, Pattern[str]]] = [
      (kind, re.compile(pattern)) for kind, pattern in self.PATTERNS
    ]

  def _regex_allowed(self, previous: Optional[Token]) -> bool:
    """True if an expression may start after `previous`."""
    if previous is None:
      return True
    if previous.kind == TokenType.PUNCTUATOR:
      return previous.value not in self._OPERAND_PUNCTUATORS
    if previous.kind == TokenType.KEYWORD:
      return previous.value not in self._OPERAND_KEYWORDS
    if previous.kind == TokenType.TEMPLATE:
      return previous.value.endswith("${")
    return False

  def tokenize(self, text: str) -> Generator[Token, None, None]:
    """
    Tokenizes the input string.

    Braces are tracked on a stack so that the `}` closing a template
    substitution resumes the template instead of being emitted as a
    punctuator.

    Args:
        text: Raw TypeScript source code.

    Yields:
        Token objects, terminated by a single EOF token.

    Raises:
        LintSyntaxError: If an unrecognized character sequence is encountered.
    """
    pos = 0
    line_num = 1
    line_start = 0
    length = len(text)
    newline_before = False
    previous: Optional[Token] = None
    # True entries mark an open `${` substitution, False a plain `{`
    braces: List[bool] = []

    while pos < length:
      skipped = self._SKIP.match(text, pos)
      if skipped:
        gap = skipped.group(0)
        newlines = gap.count("\n")
        if newlines:
          newline_before = True
          line_num += newlines
          line_start = pos + gap.rfind("\n") + 1
        pos = skipped.end()
        continue

      char = text[pos]
      match = None
      kind = TokenType.EOF

      if char == "`" or (char == "}" and braces and braces[-1]):
        pattern = self._TEMPLATE_HEAD if char == "`" else self._TEMPLATE_CONTINUATION
        match = pattern.match(text, pos)
        if match is None:
          raise LintSyntaxError("Unterminated template literal", line_num, pos - line_start + 1)
        kind = TokenType.TEMPLATE
        if char == "}":
          braces.pop()
        if match.group(0).endswith("${"):
          braces.append(True)
      elif char == "/" and self._regex_allowed(previous):
        match = self._REGEX.match(text, pos)
        kind = TokenType.REGEX

      if match is None:
        for candidate, regex in self.regex_pairs:
          match = regex.match(text, pos)
          if match:
            kind = candidate
            break
        else:
          snippet = text[pos : min(pos + 10, length)]
          raise LintSyntaxError(f"Illegal character '{snippet}...'", line_num, pos - line_start + 1)

      value = match.group(0)
      if kind == TokenType.IDENTIFIER and value in KEYWORDS:
        kind = TokenType.KEYWORD
      elif kind == TokenType.PUNCTUATOR and value == "{":
        braces.append(False)
      elif kind == TokenType.PUNCTUATOR and value == "}" and braces:
        braces.pop()

      token = Token(kind, value, pos, match.end(), line_num, pos - line_start + 1, newline_before)
      yield token
      previous = token

      # Template literals may span lines
      newlines = value.count("\n")
      if newlines:
        line_num += newlines
        line_start = pos + value.rfind("\n") + 1

      pos = match.end()
      newline_before = False

    yield Token(TokenType.EOF, "", length, length, line_num, pos - line_start + 1, newline_before)
