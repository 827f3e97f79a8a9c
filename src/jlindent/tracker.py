"""Nesting stack of open blocks and brackets, maintained as tokens are fed in."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from jlindent.source import Source
from jlindent.tokens import SpanKind, Token, TokenCategory


class FrameKind(Enum):
    BLOCK = auto()  # if/for/function/... closed by end
    MODULE = auto()  # module/baremodule: closed by end, body not indented
    PAREN = auto()  # ( [ {


@dataclass(frozen=True, slots=True)
class Frame:
    """One level of open block or bracket nesting.

    ``column`` is where the opener token sits, ``base`` the column its closer
    and mid-keywords align to, and ``anchor`` the column for its body.
    """

    kind: FrameKind
    opener: Token
    line: int
    column: int
    base: int
    anchor: int

    @property
    def keyword(self) -> str:
        return self.opener.text


_MODULE_KEYWORDS = frozenset({"module", "baremodule"})

# Keywords that double as generator/filter clauses: [x for x in xs if p(x)]
_CLAUSE_KEYWORDS = frozenset({"for", "if"})


class Tracker:
    """Track open blocks and brackets over a token stream.

    Lines are announced with ``begin_line()``, optionally with a recomputed
    indentation so columns reflect re-indented text; tokens on a line that
    was never announced start it with the text's own indentation.
    """

    def __init__(self, source: Source, indent_unit: int = 4) -> None:
        if indent_unit < 1:
            raise ValueError(f"indent unit must be at least 1, got {indent_unit}")
        self._source = source
        self._unit = indent_unit
        self.stack: list[Frame] = []
        self.strays: list[Token] = []  # closers with nothing to close
        self.unclosed: list[Frame] = []  # blocks discarded by a closing bracket
        self._line = -1
        self._line_start = 0
        self._line_end = -1
        self._indent = 0
        self._delta = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def top(self) -> Frame | None:
        return self.stack[-1] if self.stack else None

    @property
    def depth(self) -> int:
        return len(self.stack)

    @property
    def anchor(self) -> int:
        """Body column of the innermost frame, 0 at top level."""
        return self.stack[-1].anchor if self.stack else 0

    def nearest(self, kind: FrameKind) -> Frame | None:
        for frame in reversed(self.stack):
            if frame.kind == kind:
                return frame
        return None

    def begin_line(self, line: int, indent: int | None = None) -> None:
        own = self._source.indentation(line)
        self._line = line
        self._line_start = self._source.line_start(line)
        self._line_end = self._source.line_end(line)
        self._indent = own if indent is None else indent
        self._delta = self._indent - own

    def column(self, offset: int) -> int:
        """Column of an offset on the current line, after re-indentation."""
        return offset - self._line_start + self._delta

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def feed(self, token: Token) -> list[Frame]:
        """Advance over one token; return the frames it closed, innermost first."""
        if not self._line_start <= token.start <= self._line_end:
            self.begin_line(self._source.line_of(token.start))

        category = token.category

        if category == TokenCategory.KEYWORD_OPEN:
            if not self._is_clause(token):
                kind = FrameKind.MODULE if token.text in _MODULE_KEYWORDS else FrameKind.BLOCK
                self._push(kind, token)
            return []

        if category == TokenCategory.KEYWORD_CLOSE:
            top = self.top
            if top is None:
                self.strays.append(token)
                return []
            if top.kind == FrameKind.PAREN:
                # No block opened since the bracket did: a last-index sentinel
                return []
            return [self.stack.pop()]

        if category == TokenCategory.BRACKET_OPEN:
            self._push(FrameKind.PAREN, token)
            return []

        if category == TokenCategory.BRACKET_CLOSE:
            for idx in range(len(self.stack) - 1, -1, -1):
                if self.stack[idx].kind == FrameKind.PAREN:
                    popped = self.stack[idx:][::-1]
                    del self.stack[idx:]
                    self.unclosed.extend(popped[:-1])
                    return popped
            self.strays.append(token)
            return []

        return []

    def _is_clause(self, token: Token) -> bool:
        """Return True if a block keyword is used inside brackets without a block."""
        top = self.top
        if top is None or top.kind != FrameKind.PAREN:
            return False
        if token.text in _CLAUSE_KEYWORDS:
            return token.after_value
        # a[begin] / a[begin+1:end]
        return token.text == "begin" and top.opener.text == "[" and top.opener.after_value

    def _push(self, kind: FrameKind, token: Token) -> None:
        top = self.top
        if top is not None and top.kind == FrameKind.PAREN and top.line == self._line:
            base = top.anchor
        else:
            base = self._indent

        if kind == FrameKind.BLOCK:
            anchor = base + self._unit
        elif kind == FrameKind.MODULE:
            anchor = base
        else:
            anchor = self._paren_anchor(token, base)

        self.stack.append(
            Frame(kind, token, self._line, self.column(token.start), base, anchor)
        )

    def _paren_anchor(self, token: Token, base: int) -> int:
        text = self._source.text
        pos = token.end
        while pos < self._line_end and text[pos] in " \t\r":
            pos += 1
        if pos >= self._line_end or self._source.kind_at(pos) == SpanKind.COMMENT:
            # Hanging bracket
            return base + self._unit
        return self.column(pos)
