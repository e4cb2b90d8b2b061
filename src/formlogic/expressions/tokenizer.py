"""Tokenizer for the form expression language.

Converts an expression string into a sequence of typed tokens. Function
names may contain spaces (``string length``); known multi-word names are
folded into a single identifier when they are followed by ``(``.
"""

from __future__ import annotations

import re
from enum import StrEnum, auto

from formlogic.exceptions import ExpressionError


class TokenKind(StrEnum):
    """Token types for the expression language."""

    # Literals
    INT = auto()
    FLOAT = auto()
    STRING = auto()

    # Identifiers and keywords
    IDENT = auto()
    TRUE = auto()
    FALSE = auto()
    NULL = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    IN = auto()
    IF = auto()
    THEN = auto()
    ELSE = auto()

    # Operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    EQ = auto()
    NE = auto()
    LT = auto()
    GT = auto()
    LE = auto()
    GE = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    COMMA = auto()
    DOT = auto()

    EOF = auto()


class Token:
    """A single token from the expression tokenizer."""

    __slots__ = ("kind", "pos", "value")

    def __init__(self, kind: TokenKind, value: str, pos: int) -> None:
        self.kind = kind
        self.value = value
        self.pos = pos

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, pos={self.pos})"


_KEYWORDS: dict[str, TokenKind] = {
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
    "null": TokenKind.NULL,
    "and": TokenKind.AND,
    "or": TokenKind.OR,
    "not": TokenKind.NOT,
    "in": TokenKind.IN,
    "if": TokenKind.IF,
    "then": TokenKind.THEN,
    "else": TokenKind.ELSE,
}

MULTI_WORD_FUNCTIONS = (
    "string length",
    "upper case",
    "lower case",
    "starts with",
    "ends with",
    "list contains",
    "is empty",
)

_MULTI_WORD_RES = [
    (name, re.compile(r"\s+".join(re.escape(word) for word in name.split()) + r"(?=\s*\()"))
    for name in MULTI_WORD_FUNCTIONS
]
_NUMBER_RE = re.compile(r"[0-9]+(\.[0-9]+)?")
# Letters of any script start a name; digits (and other word characters) may follow.
_IDENT_RE = re.compile(r"[^\W\d]\w*")

_TWO_CHAR_OPERATORS: dict[str, TokenKind] = {
    "==": TokenKind.EQ,
    "!=": TokenKind.NE,
    "<=": TokenKind.LE,
    ">=": TokenKind.GE,
}

_SINGLE_CHAR_OPERATORS: dict[str, TokenKind] = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "=": TokenKind.EQ,
    "<": TokenKind.LT,
    ">": TokenKind.GT,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    ",": TokenKind.COMMA,
    ".": TokenKind.DOT,
}


def tokenize(source: str) -> list[Token]:
    """Tokenize an expression string into a list of tokens.

    Args:
        source (str): Expression text.

    Raises:
        ExpressionError: On an unexpected character or unterminated string.

    Returns:
        list[Token]: Tokens, terminated by an EOF token.
    """
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

        m = _NUMBER_RE.match(source, i)
        if m is not None:
            num_str = m.group(0)
            kind = TokenKind.FLOAT if "." in num_str else TokenKind.INT
            tokens.append(Token(kind, num_str, i))
            i = m.end()
            continue

        if c.isalpha() or c == "_":
            multi = _match_multi_word_function(source, i)
            if multi is not None:
                name, end = multi
                tokens.append(Token(TokenKind.IDENT, name, i))
                i = end
                continue
            m = _IDENT_RE.match(source, i)
            if m is None:
                raise ExpressionError(f"Unexpected character: {c!r}", i)
            word = m.group(0)
            tokens.append(Token(_KEYWORDS.get(word, TokenKind.IDENT), word, i))
            i = m.end()
            continue

        two = source[i : i + 2]
        if two in _TWO_CHAR_OPERATORS:
            tokens.append(Token(_TWO_CHAR_OPERATORS[two], two, i))
            i += 2
            continue

        if c in _SINGLE_CHAR_OPERATORS:
            tokens.append(Token(_SINGLE_CHAR_OPERATORS[c], c, i))
            i += 1
            continue

        raise ExpressionError(f"Unexpected character: {c!r}", i)

    tokens.append(Token(TokenKind.EOF, "", n))
    return tokens


def _match_multi_word_function(source: str, start: int) -> tuple[str, int] | None:
    for name, pattern in _MULTI_WORD_RES:
        m = pattern.match(source, start)
        if m is not None:
            return name, m.end()
    return None


def _read_string(source: str, start: int) -> tuple[int, Token]:
    """Read a quoted string literal."""
    quote = source[start]
    i = start + 1
    n = len(source)
    chars: list[str] = []

    while i < n:
        c = source[i]
        if c == "\\":
            if i + 1 < n:
                chars.append(source[i + 1])
                i += 2
                continue
            raise ExpressionError("Unterminated escape sequence", i)
        if c == quote:
            return i + 1, Token(TokenKind.STRING, "".join(chars), start)
        chars.append(c)
        i += 1

    raise ExpressionError("Unterminated string literal", start)
