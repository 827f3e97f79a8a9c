"""--debug span and frame dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from jlindent.indent import Indenter
from jlindent.scanner import tokens
from jlindent.source import Source
from jlindent.tracker import Frame


def dump_source(text: str, indent_unit: int = 4, *, file: TextIO | None = None) -> None:
    """Print the spans, the tokens and the per-line indentation walk of text to *file*.

    *file* defaults to the current ``sys.stderr``.
    """
    if file is None:
        file = sys.stderr
    source = Source(text)
    _dump_spans(source, file)
    _dump_tokens(source, file)
    _dump_lines(source, indent_unit, file)


def _indent(depth: int) -> str:
    return "  " * depth


def _dump_spans(source: Source, f: TextIO) -> None:
    f.write("Spans\n")
    for span in source.spans:
        snippet = source.text[span.start : span.end]
        if len(snippet) > 40:
            snippet = snippet[:37] + "..."
        suffix = "" if span.terminated else " (unterminated)"
        f.write(f"{_indent(1)}{span.kind.name} {span.start}-{span.end}{suffix} {snippet!r}\n")


def _dump_tokens(source: Source, f: TextIO) -> None:
    f.write("Tokens\n")
    for token in tokens(source.text, source.spans):
        if token.text == "\n":
            continue
        pos = source.position(token.start)
        value = " after-value" if token.after_value else ""
        f.write(f"{_indent(1)}{pos.line}:{pos.column} {token.category.name} {token.text!r}{value}\n")


def _dump_lines(source: Source, indent_unit: int, f: TextIO) -> None:
    f.write("Lines\n")
    indenter = Indenter(source, indent_unit)
    for ctx in indenter.contexts(rewrite=True):
        flags = " untouched" if ctx.untouched else ""
        if ctx.continuation:
            flags += f" +{ctx.continuation}"
        f.write(f"{_indent(1)}{ctx.line + 1}: column={ctx.column} depth={ctx.depth}{flags}\n")
        for frame in indenter.frames:
            _dump_frame(frame, 2, f)


def _dump_frame(frame: Frame, depth: int, f: TextIO) -> None:
    f.write(
        f"{_indent(depth)}{frame.kind.name} {frame.keyword!r} "
        f"line={frame.line + 1} column={frame.column} base={frame.base} anchor={frame.anchor}\n"
    )
