"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from jlindent.classifier import classify
from jlindent.scanner import tokens
from jlindent.source import Source
from jlindent.tokens import Span, SpanKind, Token, TokenCategory
from jlindent.tracker import Tracker


@pytest.fixture
def scan():
    """Return a helper that scans source and returns tokens (excluding newlines)."""

    def _scan(source: str) -> list[Token]:
        # Newlines are noise in most assertions
        return [t for t in tokens(source) if t.text != "\n"]

    return _scan


@pytest.fixture
def track():
    """Return a helper that feeds all of source through a Tracker and returns it."""

    def _track(source: str, indent_unit: int = 4) -> Tracker:
        src = Source(source)
        tracker = Tracker(src, indent_unit)
        for token in tokens(source, src.spans):
            tracker.feed(token)
        return tracker

    return _track


def assert_categories(toks: list[Token], expected: list[TokenCategory]) -> None:
    """Assert that the token categories match the expected list."""
    actual = [t.category for t in toks]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_texts(toks: list[Token], expected: list[str]) -> None:
    """Assert that the token texts match the expected list."""
    actual = [t.text for t in toks]
    assert actual == expected, f"Expected {expected}, got {actual}"


def kinds(source: str) -> list[tuple[SpanKind, str]]:
    """Classify source and return (kind, text) for every span."""
    return [(s.kind, source[s.start : s.end]) for s in classify(source)]


def kind_of(source: str, needle: str) -> SpanKind:
    """Return the span kind at the first occurrence of needle."""
    offset = source.index(needle)
    return Source(source).kind_at(offset)


def assert_covers(source: str, spans: list[Span]) -> None:
    """Assert spans are sorted, contiguous and cover [0, len(source)) exactly."""
    if not source:
        assert spans == [], f"Expected no spans, got {spans}"
        return
    assert spans[0].start == 0, f"First span starts at {spans[0].start}"
    for prev, cur in zip(spans, spans[1:]):
        assert prev.end == cur.start, f"Gap or overlap between {prev} and {cur}"
        assert cur.start < cur.end, f"Empty span {cur}"
    assert spans[-1].end == len(source), f"Last span ends at {spans[-1].end}, not {len(source)}"


def categories_of(toks: list[Token], category: TokenCategory) -> list[Token]:
    """Return all tokens of the given category."""
    return [t for t in toks if t.category == category]
