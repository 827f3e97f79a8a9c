"""Span and token types, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class SpanKind(Enum):
    CODE = auto()
    COMMENT = auto()  # # line comment or #= block comment =#
    STRING = auto()  # "..."
    TRIPLE_STRING = auto()  # """..."""
    COMMAND = auto()  # `...`
    TRIPLE_COMMAND = auto()  # ```...```
    CHAR = auto()  # 'c'


# Literal kinds whose interior lines are never re-indented
LITERAL_KINDS = frozenset(
    {
        SpanKind.STRING,
        SpanKind.TRIPLE_STRING,
        SpanKind.COMMAND,
        SpanKind.TRIPLE_COMMAND,
        SpanKind.CHAR,
    }
)


class TokenCategory(Enum):
    KEYWORD_OPEN = auto()  # if, for, function, ...
    KEYWORD_MID = auto()  # else, elseif, catch, finally
    KEYWORD_CLOSE = auto()  # end
    BRACKET_OPEN = auto()  # ( [ {
    BRACKET_CLOSE = auto()  # ) ] }
    OPERATOR = auto()  # = |> + == && ...
    TERMINATOR = auto()  # ; or newline
    OTHER = auto()  # identifiers, numbers, macros, commas, postfix '


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based character offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Classified source range [start, end)."""

    start: int
    end: int
    kind: SpanKind
    terminated: bool = True

    def __contains__(self, offset: int) -> bool:
        return self.start <= offset < self.end


@dataclass(frozen=True, slots=True)
class Token:
    """A structural token found inside a code span."""

    start: int
    end: int
    text: str
    category: TokenCategory
    after_value: bool = False


BLOCK_OPEN_KEYWORDS = frozenset(
    {
        "if",
        "for",
        "while",
        "function",
        "struct",
        "module",
        "baremodule",
        "begin",
        "quote",
        "try",
        "macro",
        "let",
        "do",
    }
)
BLOCK_MID_KEYWORDS = frozenset({"else", "elseif", "catch", "finally"})
BLOCK_CLOSE_KEYWORDS = frozenset({"end"})

# `abstract type T end` and `primitive type T 8 end`
TYPE_PREFIX_KEYWORDS = frozenset({"abstract", "primitive"})

OPEN_BRACKETS = "([{"
CLOSE_BRACKETS = ")]}"

# Operators that leave an expression unfinished when they end a line
CONTINUATION_OPERATORS = frozenset(
    {
        "=",
        "+=",
        "-=",
        "*=",
        "/=",
        "//=",
        "\\=",
        "^=",
        "%=",
        "|=",
        "&=",
        "⊻=",
        "÷=",
        "<<=",
        ">>=",
        ">>>=",
        ":=",
        "|>",
        "<|",
        "=>",
        "->",
        "==",
        "===",
        "!=",
        "!==",
        "<",
        ">",
        "<=",
        ">=",
        "<:",
        ">:",
        "&&",
        "||",
        "+",
        "-",
        "*",
        "/",
        "//",
        "\\",
        "^",
        "%",
        "&",
        "|",
        "<<",
        ">>",
        ">>>",
        "÷",
        "⊻",
        "≤",
        "≥",
        "≠",
        "∈",
        "∉",
        "∘",
        "?",
        ":",
    }
)

# Every operator the scanner knows, matched longest-first
OPERATORS = tuple(
    sorted(
        CONTINUATION_OPERATORS | {"::", "...", "..", ".", "!", "~", "$", "'"},
        key=len,
        reverse=True,
    )
)

# Characters that may start an operator
_OPERATOR_CHARS = frozenset("".join(OPERATORS))


def is_ident_start(ch: str) -> bool:
    """Return True if ch may start a Julia identifier."""
    return ch == "_" or ch.isalpha() or (ord(ch) > 0x7F and ch.isidentifier())


def is_ident_char(ch: str) -> bool:
    """Return True if ch may continue a Julia identifier (push!, x′, x₁)."""
    if not ch:
        return False
    return ch in "_!′" or ch.isalnum() or (ord(ch) > 0x7F and ("a" + ch).isidentifier())


def is_operator_char(ch: str) -> bool:
    return ch in _OPERATOR_CHARS


def is_hex_digit(ch: str) -> bool:
    """Return True if ch is a hexadecimal digit."""
    return ch in "0123456789abcdefABCDEF"


def ends_operand(ch: str) -> bool:
    """Return True if ch can be the last character of an operand.

    A ``'`` directly after such a character is the transpose operator rather
    than the start of a character literal.
    """
    return ch != "" and (is_ident_char(ch) or ch in ")]}'\"`.")


def is_continuation(token: Token) -> bool:
    """Return True if token is an operator that continues onto the next line."""
    if token.category != TokenCategory.OPERATOR:
        return False
    op = token.text
    # Broadcast forms continue like their plain operator
    if len(op) > 1 and op[0] == "." and op[1] != ".":
        op = op[1:]
    return op in CONTINUATION_OPERATORS
