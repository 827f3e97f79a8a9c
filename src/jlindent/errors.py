"""Structural problem types with formatted source context."""

from __future__ import annotations

from jlindent.scanner import tokens
from jlindent.source import Source
from jlindent.tokens import Position, Span, SpanKind
from jlindent.tracker import FrameKind, Tracker


class ConfigError(Exception):
    """Raised for an unreadable or invalid configuration file or value."""


class SourceError(Exception):
    """A structural problem in Julia source, with position and source context.

    Problems are collected by ``check()`` and returned, never raised by the
    core operations.
    """

    severity = "error"

    def __init__(self, message: str, position: Position, source: str, length: int = 1) -> None:
        self.message = message
        self.position = position
        self.source = source
        self.length = max(1, length)
        super().__init__(self.format())

    def format(self, filename: str = "input.jl") -> str:
        lines = self.source.splitlines(keepends=True)
        line_idx = self.position.line - 1
        col = self.position.column

        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip("\n").rstrip("\r")
        else:
            source_line = ""

        # Underline the problem, staying within the line
        underline_len = max(1, min(self.length, len(source_line) - col + 1))

        pad = " " * (col - 1)
        carets = "^" * underline_len

        line_num = str(self.position.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"{self.severity}: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{self.position.line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}{carets}"
        )


class UnterminatedLiteral(SourceError):
    """A string, command, character literal or block comment left open."""


class StrayCloser(SourceError):
    """An ``end`` or closing bracket with nothing to close."""


class UnclosedFrame(SourceError):
    """A block keyword or bracket never closed."""

    severity = "warning"


_LITERAL_NAMES = {
    SpanKind.COMMENT: "block comment",
    SpanKind.STRING: "string",
    SpanKind.TRIPLE_STRING: "triple-quoted string",
    SpanKind.COMMAND: "command",
    SpanKind.TRIPLE_COMMAND: "triple-backtick command",
    SpanKind.CHAR: "character literal",
}


def check(text: str, spans: list[Span] | None = None) -> list[SourceError]:
    """Return the structural problems in text, ordered by offset.

    *spans* may be passed in when the caller already holds a classification.
    """
    source = Source(text, spans)
    problems: list[SourceError] = []

    for span in source.spans:
        if not span.terminated:
            problems.append(
                UnterminatedLiteral(
                    f"unterminated {_LITERAL_NAMES[span.kind]}",
                    source.position(span.start),
                    text,
                    3 if span.kind in (SpanKind.TRIPLE_STRING, SpanKind.TRIPLE_COMMAND) else 1,
                )
            )

    tracker = Tracker(source)
    for token in tokens(text, source.spans):
        tracker.feed(token)

    for token in tracker.strays:
        problems.append(
            StrayCloser(
                f"'{token.text}' has nothing to close",
                source.position(token.start),
                text,
                token.end - token.start,
            )
        )
    for frame in tracker.unclosed + tracker.stack:
        what = "bracket" if frame.kind == FrameKind.PAREN else "block"
        problems.append(
            UnclosedFrame(
                f"{what} '{frame.keyword}' is never closed",
                source.position(frame.opener.start),
                text,
                frame.opener.end - frame.opener.start,
            )
        )

    problems.sort(key=lambda problem: problem.position.offset)
    return problems
