"""
Tokenizer for binding expressions.

Converts an expression string into a sequence of typed tokens.
"""

import re
from enum import Enum


class TokenKind(str, Enum):
    """Token types for the expression language."""

    # Literals
    INT = "int"
    FLOAT = "float"
    STRING = "string"

    # Identifiers and keywords
    IDENT = "ident"
    TRUE = "true"
    FALSE = "false"
    NULL = "null"

    # Operators
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    PERCENT = "%"
    EQ = "=="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    AND = "&&"
    OR = "||"
    NOT = "!"
    COALESCE = "??"
    QUESTION = "?"
    COLON = ":"

    # Punctuation
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    COMMA = ","
    DOT = "."
    TEMPLATE_OPEN = "${"
    RBRACE = "}"

    # End of input
    EOF = "eof"


class Token:
    """A single token from the expression tokenizer."""

    __slots__ = ("kind", "value", "pos")

    def __init__(self, kind: TokenKind, value: str, pos: int) -> None:
        self.kind = kind
        self.value = value
        self.pos = pos

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.value!r}, pos={self.pos})"


_KEYWORDS: dict[str, TokenKind] = {
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
    "null": TokenKind.NULL,
}

_TWO_CHAR: dict[str, TokenKind] = {
    "==": TokenKind.EQ,
    "!=": TokenKind.NE,
    "<=": TokenKind.LE,
    ">=": TokenKind.GE,
    "&&": TokenKind.AND,
    "||": TokenKind.OR,
    "??": TokenKind.COALESCE,
    "${": TokenKind.TEMPLATE_OPEN,
}

_SINGLE_CHAR: dict[str, TokenKind] = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "%": TokenKind.PERCENT,
    "<": TokenKind.LT,
    ">": TokenKind.GT,
    "!": TokenKind.NOT,
    "?": TokenKind.QUESTION,
    ":": TokenKind.COLON,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    ",": TokenKind.COMMA,
    ".": TokenKind.DOT,
    "}": TokenKind.RBRACE,
}

_NUMBER_RE = re.compile(r"\d+(\.\d+)?([eE][+-]?\d+)?")
_DIGITS_RE = re.compile(r"\d+")
_IDENT_RE = re.compile(r"[^\W\d]\w*")

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", "'": "'", '"': '"'}


class ExpressionTokenError(Exception):
    """Error during expression tokenization."""

    def __init__(self, message: str, pos: int) -> None:
        super().__init__(message)
        self.pos = pos


def tokenize(source: str) -> list[Token]:
    """Tokenize an expression string into a list of tokens."""
    tokens: list[Token] = []
    i = 0
    n = len(source)

    while i < n:
        c = source[i]

        if c in " \t\n\r":
            i += 1
            continue

        if c in ('"', "'"):
            i, tok = _read_string(source, i)
            tokens.append(tok)
            continue

        if c.isdecimal():
            # After a dot only plain digits: `items.0.name` is a path, not 0.0
            after_dot = bool(tokens) and tokens[-1].kind == TokenKind.DOT
            m = (_DIGITS_RE if after_dot else _NUMBER_RE).match(source, i)
            assert m is not None
            text = m.group(0)
            is_float = not after_dot and (m.group(1) is not None or m.group(2) is not None)
            tokens.append(Token(TokenKind.FLOAT if is_float else TokenKind.INT, text, i))
            i = m.end()
            continue

        if c.isalpha() or c == "_":
            m = _IDENT_RE.match(source, i)
            assert m is not None
            word = m.group(0)
            tokens.append(Token(_KEYWORDS.get(word, TokenKind.IDENT), word, i))
            i = m.end()
            continue

        two = source[i:i + 2]
        if two in _TWO_CHAR:
            tokens.append(Token(_TWO_CHAR[two], two, i))
            i += 2
            continue

        if c in _SINGLE_CHAR:
            tokens.append(Token(_SINGLE_CHAR[c], c, i))
            i += 1
            continue

        raise ExpressionTokenError(f"Unexpected character {c!r}", i)

    tokens.append(Token(TokenKind.EOF, "", n))
    return tokens


def _read_string(source: str, start: int) -> tuple[int, Token]:
    """Read a quoted string literal starting at source[start]."""
    quote = source[start]
    i = start + 1
    chars: list[str] = []
    while i < len(source):
        c = source[i]
        if c == "\\" and i + 1 < len(source):
            chars.append(_ESCAPES.get(source[i + 1], source[i + 1]))
            i += 2
            continue
        if c == quote:
            return i + 1, Token(TokenKind.STRING, "".join(chars), start)
        chars.append(c)
        i += 1
    raise ExpressionTokenError("Unterminated string literal", start)
