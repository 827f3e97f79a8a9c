"""Structural tokens from the code spans of classified text."""

from __future__ import annotations

from collections.abc import Iterator

from jlindent.classifier import classify
from jlindent.tokens import (
    BLOCK_CLOSE_KEYWORDS,
    BLOCK_MID_KEYWORDS,
    BLOCK_OPEN_KEYWORDS,
    CLOSE_BRACKETS,
    OPEN_BRACKETS,
    OPERATORS,
    TYPE_PREFIX_KEYWORDS,
    Span,
    SpanKind,
    Token,
    TokenCategory,
    is_ident_char,
    is_ident_start,
    is_operator_char,
)


class Scanner:
    """Scan the code spans of a classified text into Token objects.

    Each call to ``scan()`` starts a fresh, independent pass.
    """

    def __init__(self, text: str, spans: list[Span] | None = None) -> None:
        self._text = text
        self._spans = classify(text) if spans is None else spans

    def scan(self) -> Iterator[Token]:
        after_value = False
        previous = ""
        for span in self._spans:
            if span.kind != SpanKind.CODE:
                if span.kind != SpanKind.COMMENT:
                    after_value = True
                continue
            pos = span.start
            while pos < span.end:
                ch = self._text[pos]
                if ch in " \t\r":
                    pos += 1
                    continue
                token, value = self._scan_one(pos, span.end, previous)
                yield Token(token.start, token.end, token.text, token.category, after_value)
                if token.category != TokenCategory.TERMINATOR or token.text == ";":
                    after_value = value
                previous = token.text
                pos = token.end

    # ------------------------------------------------------------------
    # Single tokens: each returns the token and whether it ends an operand
    # ------------------------------------------------------------------

    def _scan_one(self, pos: int, end: int, previous: str) -> tuple[Token, bool]:
        text = self._text
        ch = text[pos]

        if ch == "\n":
            return Token(pos, pos + 1, ch, TokenCategory.TERMINATOR), False

        if ch == ";":
            return Token(pos, pos + 1, ch, TokenCategory.TERMINATOR), False

        if ch in OPEN_BRACKETS:
            return Token(pos, pos + 1, ch, TokenCategory.BRACKET_OPEN), False

        if ch in CLOSE_BRACKETS:
            return Token(pos, pos + 1, ch, TokenCategory.BRACKET_CLOSE), True

        if ch == ",":
            return Token(pos, pos + 1, ch, TokenCategory.OTHER), False

        if ch == "'":
            # Postfix transpose; the classifier already took character literals
            return Token(pos, pos + 1, ch, TokenCategory.OTHER), True

        if is_ident_start(ch):
            return self._scan_word(pos, end, previous)

        if ch.isdigit():
            stop = pos + 1
            while stop < end and (
                text[stop].isalnum()
                or text[stop] == "_"
                or (text[stop] == "." and stop + 1 < end and text[stop + 1].isdigit())
            ):
                stop += 1
            return Token(pos, stop, text[pos:stop], TokenCategory.OTHER), True

        if ch == "@" and pos + 1 < end and is_ident_start(text[pos + 1]):
            stop = pos + 2
            while stop < end and is_ident_char(text[stop]):
                stop += 1
            return Token(pos, stop, text[pos:stop], TokenCategory.OTHER), False

        if is_operator_char(ch):
            op = self._match_operator(pos, end)
            return Token(pos, pos + len(op), op, TokenCategory.OPERATOR), False

        return Token(pos, pos + 1, ch, TokenCategory.OTHER), False

    def _scan_word(self, pos: int, end: int, previous: str) -> tuple[Token, bool]:
        text = self._text
        stop = pos + 1
        while stop < end and is_ident_char(text[stop]):
            # x!=y is x != y
            if text[stop] == "!" and stop + 1 < end and text[stop + 1] == "=":
                break
            stop += 1
        word = text[pos:stop]

        # Field access (x.end) and quoted symbols or range ends (:end) are plain names
        quoted = pos > 0 and text[pos - 1] in ".:"
        if not quoted:
            if word in BLOCK_OPEN_KEYWORDS or (word == "type" and previous in TYPE_PREFIX_KEYWORDS):
                return Token(pos, stop, word, TokenCategory.KEYWORD_OPEN), False
            if word in BLOCK_MID_KEYWORDS:
                return Token(pos, stop, word, TokenCategory.KEYWORD_MID), False
            if word in BLOCK_CLOSE_KEYWORDS:
                return Token(pos, stop, word, TokenCategory.KEYWORD_CLOSE), True
        return Token(pos, stop, word, TokenCategory.OTHER), True

    def _match_operator(self, pos: int, end: int) -> str:
        text = self._text
        # Broadcast forms: .+ .== .=
        if text[pos] == "." and pos + 1 < end and text[pos + 1] not in ".'":
            inner = self._longest_operator(pos + 1, end)
            if inner:
                return "." + inner
        return self._longest_operator(pos, end) or text[pos]

    def _longest_operator(self, pos: int, end: int) -> str:
        for op in OPERATORS:
            if op != "'" and self._text.startswith(op, pos, end):
                return op
        return ""


def tokens(text: str, spans: list[Span] | None = None) -> Iterator[Token]:
    """Convenience function: lazily yield the structural tokens of text."""
    return Scanner(text, spans).scan()
