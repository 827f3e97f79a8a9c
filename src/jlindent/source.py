"""Line table and span lookup over classified Julia source."""

from __future__ import annotations

from bisect import bisect_right

from jlindent.classifier import classify
from jlindent.tokens import Position, Span, SpanKind


class Source:
    """Text plus its spans, addressable by offset or 0-based line number."""

    def __init__(self, text: str, spans: list[Span] | None = None) -> None:
        self.text = text
        self.spans = classify(text) if spans is None else spans
        self._span_starts = [span.start for span in self.spans]
        self._line_starts = [0]
        pos = text.find("\n")
        while pos >= 0:
            self._line_starts.append(pos + 1)
            pos = text.find("\n", pos + 1)

    # ------------------------------------------------------------------
    # Lines
    # ------------------------------------------------------------------

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def line_start(self, line: int) -> int:
        return self._line_starts[line]

    def line_end(self, line: int) -> int:
        """Offset of the line's newline, or the end of text for the last line."""
        if line + 1 < len(self._line_starts):
            return self._line_starts[line + 1] - 1
        return len(self.text)

    def line_text(self, line: int) -> str:
        return self.text[self.line_start(line) : self.line_end(line)]

    def line_of(self, offset: int) -> int:
        return bisect_right(self._line_starts, offset) - 1

    def indentation(self, line: int) -> int:
        """Width of the line's leading spaces and tabs (one column each)."""
        text = self.line_text(line)
        return len(text) - len(text.lstrip(" \t"))

    def is_blank(self, line: int) -> bool:
        return not self.line_text(line).strip()

    def position(self, offset: int) -> Position:
        line = self.line_of(offset)
        return Position(line + 1, offset - self.line_start(line) + 1, offset)

    # ------------------------------------------------------------------
    # Spans
    # ------------------------------------------------------------------

    def span_at(self, offset: int) -> Span | None:
        idx = bisect_right(self._span_starts, offset) - 1
        if idx >= 0 and offset in self.spans[idx]:
            return self.spans[idx]
        return None

    def kind_at(self, offset: int) -> SpanKind:
        span = self.span_at(offset)
        return SpanKind.CODE if span is None else span.kind

    def starts_inside(self, line: int) -> Span | None:
        """Return the non-code span the line begins inside of, if any.

        A line that begins with the span's own opening delimiter is not inside
        it. An unterminated span also owns the empty position at end of text.
        """
        start = self.line_start(line)
        if self.spans and start == len(self.text):
            last = self.spans[-1]
            if last.kind != SpanKind.CODE and not last.terminated and last.start < start:
                return last
            return None
        span = self.span_at(start)
        if span is not None and span.kind != SpanKind.CODE and span.start < start:
            return span
        return None

    def literal_between(self, start: int, end: int) -> bool:
        """Return True if a non-code, non-comment span overlaps [start, end)."""
        idx = max(bisect_right(self._span_starts, start) - 1, 0)
        for span in self.spans[idx:]:
            if span.start >= end:
                break
            if span.end > start and span.kind not in (SpanKind.CODE, SpanKind.COMMENT):
                return True
        return False
