"""Function definition boundaries and count-based defun navigation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from jlindent.scanner import tokens
from jlindent.source import Source
from jlindent.tokens import Span, SpanKind, Token, TokenCategory, is_continuation, is_ident_start
from jlindent.tracker import Frame, FrameKind, Tracker


class DefinitionForm(Enum):
    KEYWORD = auto()  # function name(...) ... end
    ASSIGNMENT = auto()  # name(...) = expr


@dataclass(frozen=True, slots=True)
class Definition:
    """A function definition located in the text, [start, end)."""

    start: int
    end: int
    name: str | None
    form: DefinitionForm
    depth: int = 0  # number of enclosing definitions


@dataclass
class _PendingAssignment:
    start: int
    name: str
    depth: int  # tracker depth right after the =


class _Collector:
    """Single pass over the tokens collecting both definition forms."""

    def __init__(self, source: Source) -> None:
        self._source = source
        self._tokens = list(tokens(source.text, source.spans))
        self._tracker = Tracker(source)
        self._open: dict[int, tuple[int, str | None]] = {}  # id(frame) -> (start, name)
        self._pending: list[_PendingAssignment] = []
        self._found: list[tuple[int, int, str | None, DefinitionForm]] = []
        self._last: Token | None = None

    def collect(self) -> list[Definition]:
        toks = self._tokens
        skip_to = 0
        for idx, token in enumerate(toks):
            if idx < skip_to:
                continue
            if token.category == TokenCategory.TERMINATOR:
                self._feed(token)
                self._finish_assignments(token)
                continue
            if self._at_statement_start(idx):
                header = self._assignment_header(idx)
                if header is not None:
                    eq_idx, name = header
                    # Feed the header so the tracker sees its brackets
                    for inner in toks[idx : eq_idx + 1]:
                        self._feed(inner)
                    self._pending.append(
                        _PendingAssignment(token.start, name, self._tracker.depth)
                    )
                    skip_to = eq_idx + 1
                    continue
            self._feed(token)

        end = len(self._source.text)
        for start, name in self._open.values():
            self._found.append((start, end, name, DefinitionForm.KEYWORD))
        for pending in self._pending:
            self._found.append((pending.start, self._trim(end), pending.name, DefinitionForm.ASSIGNMENT))
        return _nest(self._found)

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------

    def _feed(self, token: Token) -> None:
        popped = self._tracker.feed(token)
        top = self._tracker.top
        if top is not None and top.opener is token and token.text == "function":
            self._open[id(top)] = (token.start, self._keyword_name(token))
        for frame in popped:
            self._close(frame, token)
        if token.category != TokenCategory.TERMINATOR or token.text == ";":
            self._last = token

    def _close(self, frame: Frame, closer: Token) -> None:
        opened = self._open.pop(id(frame), None)
        if opened is None:
            return
        start, name = opened
        end = closer.end if closer.category == TokenCategory.KEYWORD_CLOSE else closer.start
        self._found.append((start, end, name, DefinitionForm.KEYWORD))

    def _keyword_name(self, keyword: Token) -> str | None:
        toks = self._tokens
        idx = self._index_of(keyword) + 1
        parts: list[str] = []
        prev_end = None
        while idx < len(toks):
            token = toks[idx]
            if prev_end is not None and token.start != prev_end:
                break
            if token.category == TokenCategory.OTHER and is_ident_start(token.text[0]):
                parts.append(token.text)
            elif token.category == TokenCategory.OPERATOR and token.text == "." and parts:
                parts.append(".")
            else:
                break
            prev_end = token.end
            idx += 1
        return "".join(parts) or None

    def _index_of(self, token: Token) -> int:
        # Tokens are sorted by start offset
        lo, hi = 0, len(self._tokens)
        while lo < hi:
            mid = (lo + hi) // 2
            if self._tokens[mid].start < token.start:
                lo = mid + 1
            else:
                hi = mid
        return lo

    # ------------------------------------------------------------------
    # Assignment form
    # ------------------------------------------------------------------

    def _at_statement_start(self, idx: int) -> bool:
        top = self._tracker.top
        if top is not None and top.kind == FrameKind.PAREN:
            return False
        toks = self._tokens
        prev = idx - 1
        # Leading macro calls: @inline f(x) = ...
        while prev >= 0 and toks[prev].text.startswith("@"):
            prev -= 1
        if prev < 0:
            return True
        if toks[prev].category != TokenCategory.TERMINATOR:
            return False
        return toks[prev].text == ";" or not self._hanging(toks[prev].start)

    def _hanging(self, offset: int) -> bool:
        """Return True if the last token fed is an operator still waiting for its operand."""
        last = self._last
        if last is None or not is_continuation(last):
            return False
        return not self._source.literal_between(last.end, offset)

    def _assignment_header(self, idx: int) -> tuple[int, str] | None:
        """Match ``name[.name]*[{...}](...)[::T][where ...] =`` starting at idx."""
        toks = self._tokens
        n = len(toks)
        token = toks[idx]
        if token.category != TokenCategory.OTHER or not is_ident_start(token.text[0]):
            return None
        name = token.text
        pos = idx + 1
        while (
            pos + 1 < n
            and toks[pos].text == "."
            and toks[pos].start == toks[pos - 1].end
            and toks[pos + 1].category == TokenCategory.OTHER
            and is_ident_start(toks[pos + 1].text[0])
        ):
            name += "." + toks[pos + 1].text
            pos += 2
        if pos < n and toks[pos].text == "{" and toks[pos].start == toks[pos - 1].end:
            pos = self._skip_group(pos)
            if pos is None:
                return None
        if pos >= n or toks[pos].text != "(" or toks[pos].start != toks[pos - 1].end:
            return None
        pos = self._skip_group(pos)
        if pos is None:
            return None

        # Brackets and dots after the arguments belong to a ::T or where clause;
        # before one, f(x)[1] = ... and f(x).a = ... are plain assignments.
        depth = 0
        qualified = False
        while pos < n:
            token = toks[pos]
            text = token.text
            if depth == 0 and text == "=":
                return pos, name
            if depth == 0 and text in ("::", "where"):
                qualified = True
            elif depth == 0 and not qualified:
                return None
            if token.category == TokenCategory.BRACKET_OPEN:
                depth += 1
            elif token.category == TokenCategory.BRACKET_CLOSE:
                depth -= 1
                if depth < 0:
                    return None
            elif depth == 0 and not (
                text in ("::", "<:", ">:", ".", "where")
                or (token.category == TokenCategory.OTHER and text not in (",", "\n"))
            ):
                return None
            pos += 1
        return None

    def _skip_group(self, pos: int) -> int | None:
        """Return the index after the bracket group opening at pos."""
        depth = 0
        for idx in range(pos, len(self._tokens)):
            category = self._tokens[idx].category
            if category == TokenCategory.BRACKET_OPEN:
                depth += 1
            elif category == TokenCategory.BRACKET_CLOSE:
                depth -= 1
                if depth == 0:
                    return idx + 1
        return None

    def _finish_assignments(self, terminator: Token) -> None:
        """Close pending assignment definitions whose right-hand side ends here."""
        if terminator.text == "\n" and self._hanging(terminator.start):
            return
        depth = self._tracker.depth
        while self._pending and depth <= self._pending[-1].depth:
            pending = self._pending.pop()
            end = self._trim(terminator.start)
            self._found.append((pending.start, end, pending.name, DefinitionForm.ASSIGNMENT))

    def _trim(self, end: int) -> int:
        """Back end up over trailing whitespace and comments."""
        text = self._source.text
        while end > 0 and (
            text[end - 1] in " \t\r\n" or self._source.kind_at(end - 1) == SpanKind.COMMENT
        ):
            end -= 1
        return end


def _nest(found: list[tuple[int, int, str | None, DefinitionForm]]) -> list[Definition]:
    """Sort definitions by start and compute each one's nesting depth."""
    result: list[Definition] = []
    enclosing: list[Definition] = []
    for start, end, name, form in sorted(found, key=lambda item: (item[0], -item[1])):
        while enclosing and enclosing[-1].end <= start:
            enclosing.pop()
        definition = Definition(start, end, name, form, len(enclosing))
        result.append(definition)
        enclosing.append(definition)
    return result


def definitions(text: str, spans: list[Span] | None = None) -> list[Definition]:
    """Return every function definition in text, ordered by start offset."""
    return _Collector(Source(text, spans)).collect()


def _enclosing(defs: list[Definition], position: int, prefer_end: bool) -> Definition | None:
    inner = None
    for definition in defs:
        if definition.start >= position:
            break
        if position < definition.end or (prefer_end and position == definition.end):
            inner = definition
    return inner


def find_defun_start(text: str, position: int, count: int = 1, prefer_end: bool = False) -> int:
    """Return the start of the count-th definition moving backward from position.

    The first step lands on the innermost definition enclosing position (or,
    outside every definition, the nearest preceding top-level one); later
    steps move to earlier definitions at the same or shallower depth.
    Negative counts move forward to following definition starts.
    """
    defs = definitions(text)
    if count == 0 or not defs:
        return position

    if count < 0:
        following = [d.start for d in defs if d.start > position]
        if not following:
            return position
        return following[min(-count, len(following)) - 1]

    current = _enclosing(defs, position, prefer_end)
    if current is None:
        preceding = [d for d in defs if d.depth == 0 and d.start < position]
        if not preceding:
            return position
        current = preceding[-1]

    for _ in range(count - 1):
        earlier = [d for d in defs if d.start < current.start and d.depth <= current.depth]
        if not earlier:
            break
        current = earlier[-1]
    return current.start


def find_defun_end(text: str, position: int) -> int:
    """Return the end of the innermost definition containing position."""
    inner = None
    for definition in definitions(text):
        if definition.start > position:
            break
        if position < definition.end:
            inner = definition
    return position if inner is None else inner.end
