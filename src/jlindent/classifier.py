"""Split Julia source into code, comment and literal spans."""

from __future__ import annotations

import os
from collections.abc import Iterator
from enum import Enum, auto

from jlindent.tokens import LITERAL_KINDS, Span, SpanKind, ends_operand, is_hex_digit, is_ident_char


class _State(Enum):
    CODE = auto()
    LINE_COMMENT = auto()
    BLOCK_COMMENT = auto()
    STRING = auto()
    TRIPLE_STRING = auto()
    COMMAND = auto()
    TRIPLE_COMMAND = auto()
    CHAR = auto()
    INTERP = auto()  # $( ... ) inside a string or command


_SPAN_KINDS = {
    _State.LINE_COMMENT: SpanKind.COMMENT,
    _State.BLOCK_COMMENT: SpanKind.COMMENT,
    _State.STRING: SpanKind.STRING,
    _State.TRIPLE_STRING: SpanKind.TRIPLE_STRING,
    _State.COMMAND: SpanKind.COMMAND,
    _State.TRIPLE_COMMAND: SpanKind.TRIPLE_COMMAND,
    _State.CHAR: SpanKind.CHAR,
}

# state -> (delimiter, triple?)
_QUOTED = {
    _State.STRING: ('"', False),
    _State.TRIPLE_STRING: ('"', True),
    _State.COMMAND: ("`", False),
    _State.TRIPLE_COMMAND: ("`", True),
}


class Classifier:
    """Classify Julia source text into an ordered, contiguous list of Spans.

    Scanning starts in code at ``start``; callers resuming mid-text must pass
    an offset that begins a top-level code span.
    """

    def __init__(self, text: str, start: int = 0) -> None:
        self._text = text
        self._pos = start
        self._spans: list[Span] = []
        self._state = _State.CODE
        self._depth = 0  # paren depth in INTERP, nesting level in BLOCK_COMMENT
        self._interpolates = False
        # (state, depth, interpolates)
        self._state_stack: list[tuple[_State, int, bool]] = []
        self._code_start = start
        self._span_start = start
        self._span_kind = SpanKind.CODE

    def classify(self) -> list[Span]:
        """Scan to the end of the text and return the span list."""
        end = len(self._text)
        while self._pos < end:
            if self._state in (_State.CODE, _State.INTERP):
                self._scan_code()
            elif self._state == _State.LINE_COMMENT:
                self._scan_line_comment()
            elif self._state == _State.BLOCK_COMMENT:
                self._scan_block_comment()
            elif self._state == _State.CHAR:
                self._scan_char()
            else:
                self._scan_quoted()

        if self._state == _State.CODE:
            if self._code_start < end:
                self._spans.append(Span(self._code_start, end, SpanKind.CODE))
        else:
            # A line comment is closed by the end of text; everything else is left open
            terminated = self._state == _State.LINE_COMMENT
            self._spans.append(Span(self._span_start, end, self._span_kind, terminated))
        return self._spans

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if 0 <= idx < len(self._text):
            return self._text[idx]
        return ""

    def _advance(self, count: int = 1) -> None:
        self._pos = min(self._pos + count, len(self._text))

    # ------------------------------------------------------------------
    # State management
    # ------------------------------------------------------------------

    def _push_state(self, state: _State, depth: int = 0, interpolates: bool = False) -> None:
        if self._state == _State.CODE:
            if self._code_start < self._pos:
                self._spans.append(Span(self._code_start, self._pos, SpanKind.CODE))
            self._span_start = self._pos
            self._span_kind = _SPAN_KINDS[state]
        self._state_stack.append((self._state, self._depth, self._interpolates))
        self._state = state
        self._depth = depth
        self._interpolates = interpolates

    def _pop_state(self) -> None:
        self._state, self._depth, self._interpolates = self._state_stack.pop()
        if self._state == _State.CODE:
            self._spans.append(Span(self._span_start, self._pos, self._span_kind))
            self._code_start = self._pos

    # ------------------------------------------------------------------
    # Code (top level and inside interpolations)
    # ------------------------------------------------------------------

    def _scan_code(self) -> None:
        ch = self._peek()

        if ch == "\\":
            # The escaped character never opens or closes anything
            self._advance(2)
            return

        if ch == "#" and self._state == _State.CODE:
            if self._peek(1) == "=":
                self._push_state(_State.BLOCK_COMMENT, 1)
                self._advance(2)
            else:
                self._push_state(_State.LINE_COMMENT)
                self._advance()
            return

        if ch in "\"`":
            # r"..." and friends do not interpolate
            interpolates = not is_ident_char(self._peek(-1))
            triple = self._peek(1) == ch and self._peek(2) == ch
            if ch == '"':
                state = _State.TRIPLE_STRING if triple else _State.STRING
            else:
                state = _State.TRIPLE_COMMAND if triple else _State.COMMAND
            self._push_state(state, interpolates=interpolates)
            self._advance(3 if triple else 1)
            return

        if ch == "'":
            if ends_operand(self._peek(-1)):
                # Transpose operator
                self._advance()
            else:
                self._push_state(_State.CHAR)
                self._advance()
            return

        if self._state == _State.INTERP:
            if ch == "(":
                self._depth += 1
            elif ch == ")":
                self._depth -= 1
                if self._depth == 0:
                    self._advance()
                    self._pop_state()
                    return

        self._advance()

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def _scan_line_comment(self) -> None:
        newline = self._text.find("\n", self._pos)
        self._pos = len(self._text) if newline < 0 else newline
        if newline >= 0:
            self._pop_state()

    def _scan_block_comment(self) -> None:
        ch = self._peek()
        if ch == "#" and self._peek(1) == "=":
            self._depth += 1
            self._advance(2)
        elif ch == "=" and self._peek(1) == "#":
            self._depth -= 1
            self._advance(2)
            if self._depth == 0:
                self._pop_state()
        else:
            self._advance()

    # ------------------------------------------------------------------
    # Literals
    # ------------------------------------------------------------------

    def _scan_char(self) -> None:
        ch = self._peek()
        if ch == "\\":
            self._advance(2)
        elif ch == "'":
            self._advance()
            self._pop_state()
        else:
            self._advance()

    def _scan_quoted(self) -> None:
        delimiter, triple = _QUOTED[self._state]
        ch = self._peek()

        if ch == "\\":
            self._advance(2)
            return

        if ch == delimiter:
            if not triple:
                self._advance()
                self._pop_state()
                return
            run = 0
            while self._peek(run) == delimiter:
                run += 1
            # The closing delimiter is the last three characters of the run
            self._advance(run)
            if run >= 3:
                self._pop_state()
            return

        if ch == "$" and self._peek(1) == "(" and self._interpolates:
            self._advance(2)
            self._push_state(_State.INTERP, 1)
            return

        self._advance()


def classify(text: str, start: int = 0) -> list[Span]:
    """Convenience function: classify text (from a top-level code offset)."""
    return Classifier(text, start).classify()


class ClassificationCache:
    """Memoized classification that re-scans only from the last safe boundary.

    The boundary is the start of the last code span beginning strictly before
    the first changed character; everything before it is reused.
    """

    def __init__(self) -> None:
        self._text: str | None = None
        self._spans: list[Span] = []

    @property
    def boundary(self) -> int:
        """Length of the text prefix the cached spans are valid for."""
        return 0 if self._text is None else len(self._text)

    def invalidate(self) -> None:
        self._text = None
        self._spans = []

    def classify(self, text: str) -> list[Span]:
        if self._text is None:
            spans = classify(text)
        elif text == self._text:
            return list(self._spans)
        else:
            changed = len(os.path.commonprefix([self._text, text]))
            keep = 0
            resume = 0
            for i, span in enumerate(self._spans):
                if span.start >= changed:
                    break
                if span.kind == SpanKind.CODE:
                    keep, resume = i, span.start
            spans = self._spans[:keep] + classify(text, resume)
        self._text = text
        self._spans = spans
        return list(spans)


# Escape lengths after the backslash: \xHH, \uHHHH, \UHHHHHHHH
_HEX_ESCAPES = {"x": 2, "u": 4, "U": 8}


def escapes(text: str, spans: list[Span]) -> Iterator[tuple[int, int]]:
    """Yield (start, end) ranges of backslash escapes inside literal spans."""
    for span in spans:
        if span.kind not in LITERAL_KINDS:
            continue
        i = text.find("\\", span.start, span.end)
        while i >= 0:
            end = min(i + 2, span.end)
            kind = text[i + 1] if i + 1 < span.end else ""
            if kind in _HEX_ESCAPES:
                limit = min(end + _HEX_ESCAPES[kind], span.end)
                while end < limit and is_hex_digit(text[end]):
                    end += 1
            elif kind and kind in "01234567":
                limit = min(i + 4, span.end)
                while end < limit and text[end] in "01234567":
                    end += 1
            yield i, end
            i = text.find("\\", end, span.end)
