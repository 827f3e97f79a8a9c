"""Expected indentation of Julia source lines."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from jlindent.scanner import tokens
from jlindent.source import Source
from jlindent.tokens import Span, Token, TokenCategory, is_continuation
from jlindent.tracker import Frame, FrameKind, Tracker


@dataclass(frozen=True, slots=True)
class LineContext:
    """Computed indentation of one line and how it was derived."""

    line: int
    column: int
    depth: int  # open frames at the start of the line
    continuation: int  # extra columns for a hanging operator, 0 or one unit
    untouched: bool = False  # starts inside a multi-line literal or block comment


class Indenter:
    """Walk a Source line by line, computing each line's indentation.

    With ``rewrite`` the tracker sees every line at its computed column, as
    if the text had already been re-indented; otherwise lines keep their own.
    """

    def __init__(self, source: Source, indent_unit: int = 4) -> None:
        self._source = source
        self._unit = indent_unit
        self._tracker = Tracker(source, indent_unit)
        self._by_line: dict[int, list[Token]] = {}
        for token in tokens(source.text, source.spans):
            self._by_line.setdefault(source.line_of(token.start), []).append(token)
        self._last: Token | None = None  # last non-newline token fed

    @property
    def frames(self) -> tuple[Frame, ...]:
        """Snapshot of the open frames at the current point of the walk."""
        return tuple(self._tracker.stack)

    def contexts(self, stop: int | None = None, rewrite: bool = False) -> Iterator[LineContext]:
        """Yield a LineContext per line, up to and including line ``stop``."""
        source = self._source
        last_line = source.line_count - 1 if stop is None else stop
        for line in range(last_line + 1):
            ctx = self._compute(line)
            yield ctx
            if rewrite and not ctx.untouched and not source.is_blank(line):
                self._tracker.begin_line(line, ctx.column)
            else:
                self._tracker.begin_line(line)
            for token in self._by_line.get(line, ()):
                self._tracker.feed(token)
                if token.category != TokenCategory.TERMINATOR or token.text == ";":
                    self._last = token

    # ------------------------------------------------------------------
    # Per-line rules
    # ------------------------------------------------------------------

    def _compute(self, line: int) -> LineContext:
        source = self._source
        tracker = self._tracker
        if source.starts_inside(line) is not None:
            return LineContext(line, source.indentation(line), tracker.depth, 0, untouched=True)

        closing = self._closed_by(self._first_token(line))
        if closing is not None:
            return LineContext(line, max(closing.base, 0), tracker.depth, 0)

        column = tracker.anchor
        continuation = 0
        if self._continues(line):
            continuation = self._unit
        return LineContext(line, max(column + continuation, 0), tracker.depth, continuation)

    def _first_token(self, line: int) -> Token | None:
        start = self._source.line_start(line) + self._source.indentation(line)
        for token in self._by_line.get(line, ()):
            if token.start == start and token.text != "\n":
                return token
            break
        return None

    def _closed_by(self, first: Token | None) -> Frame | None:
        """Return the frame a line-leading closer or mid-keyword belongs to."""
        top = self._tracker.top
        if first is None or top is None:
            return None
        if first.category in (TokenCategory.KEYWORD_MID, TokenCategory.KEYWORD_CLOSE):
            return top if top.kind != FrameKind.PAREN else None
        if first.category == TokenCategory.BRACKET_CLOSE:
            return self._tracker.nearest(FrameKind.PAREN)
        return None

    def _continues(self, line: int) -> bool:
        """Return True if the previous logical line ends with a hanging operator."""
        last = self._last
        top = self._tracker.top
        if last is None or not is_continuation(last):
            return False
        if top is not None and top.kind == FrameKind.PAREN:
            return False
        source = self._source
        if top is not None and top.line == source.line_of(last.start):
            # The frame opened on that line already indents this one
            return False
        return not source.literal_between(last.end, source.line_start(line))


def line_context(text: str, line_number: int, indent_unit: int = 4) -> LineContext:
    """Return the LineContext of one 0-based line, other lines as they stand."""
    source = Source(text)
    if not 0 <= line_number < source.line_count:
        raise ValueError(f"line {line_number} out of range (0..{source.line_count - 1})")
    *_, ctx = Indenter(source, indent_unit).contexts(stop=line_number)
    return ctx


def compute_indent(text: str, line_number: int, indent_unit: int = 4) -> int:
    """Return the expected indentation column of a 0-based line."""
    return line_context(text, line_number, indent_unit).column


def reindent(text: str, indent_unit: int = 4, spans: list[Span] | None = None) -> str:
    """Re-indent every line of text; blank lines and literal interiors are kept."""
    source = Source(text, spans)
    lines = text.split("\n")
    for ctx in Indenter(source, indent_unit).contexts(rewrite=True):
        if ctx.untouched or source.is_blank(ctx.line):
            continue
        stripped = lines[ctx.line].lstrip(" \t")
        lines[ctx.line] = " " * ctx.column + stripped
    return "\n".join(lines)
