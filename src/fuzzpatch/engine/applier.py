from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable

import structlog

from .hunk import Hunk, HunkLine, LineKind, insertion_kind, removal_kind
from .lines import strip_eol
from .report import Reporter
from .session import FileSession

logger = structlog.get_logger(__name__)

_WHITESPACE_RE = re.compile(r"[ \t\n\r\f\v]+")

Comparator = Callable[[str, str], bool]


def exact_compare(left: str, right: str) -> bool:
    return left == right


def loose_compare(left: str, right: str) -> bool:
    return _WHITESPACE_RE.sub("", left) == _WHITESPACE_RE.sub("", right)


def _terminator(raw: str) -> str:
    return raw[len(strip_eol(raw)) :]


class Outcome(Enum):
    READ_MORE = auto()
    MATCHED = auto()
    FAILED = auto()


@dataclass(frozen=True, slots=True)
class MatchPlan:
    """Per-hunk facts computed before any input is read."""

    context: int
    trail: int
    match_eof: bool
    fuzz_budget: int

    @property
    def anchored_at_start(self) -> bool:
        # No leading context, or less leading than trailing: the hunk can only
        # sit where the scan started and never slides.
        return self.context == 0 or self.trail > self.context

    @classmethod
    def for_hunk(cls, hunk: Hunk, *, reverse: bool, fuzz: int | None) -> MatchPlan:
        removal = removal_kind(reverse)
        trail = 0
        anchors = 0
        for line in hunk.lines:
            trail = trail + 1 if line.kind is LineKind.CONTEXT else 0
            if line.kind in (LineKind.CONTEXT, removal) and line.is_nontrivial():
                anchors += 1
        if anchors < 2:  # noqa: PLR2004
            budget = 0
        elif fuzz is not None:
            budget = fuzz
        else:
            budget = max(hunk.context - 1, 0)
        return cls(
            context=hunk.context,
            trail=trail,
            match_eof=trail == 0 or trail < hunk.context,
            fuzz_budget=budget,
        )


@dataclass(slots=True)
class MatchCursor:
    """Transient matching state: hunk lines still expected and input held back."""

    pending: deque[HunkLine]
    buffer: deque[str] = field(default_factory=deque)
    check: int = 0
    fuzzed: int = 0
    backwarn: int | None = None

    def restart(self, hunk: Hunk) -> None:
        self.pending = deque(hunk.lines)
        self.fuzzed = 0
        self.check = 0


class HunkApplier:
    """
    Locate a hunk in the target by its content and splice it into the output.

    The target is read once, front to back. Lines that might still belong to
    the hunk are held in the cursor's buffer; when a candidate position stops
    matching, the oldest held line is written through unchanged and matching
    restarts one line further down. Recorded line numbers are never used.
    """

    def __init__(
        self,
        session: FileSession,
        reporter: Reporter,
        *,
        reverse: bool = False,
        fuzz: int | None = None,
        loose: bool = False,
    ) -> None:
        self.session = session
        self.reporter = reporter
        self.reverse = reverse
        self.fuzz = fuzz
        self.compare: Comparator = loose_compare if loose else exact_compare
        self.insertion = insertion_kind(reverse)

    def apply(self, hunk: Hunk) -> bool:
        plan = MatchPlan.for_hunk(hunk, reverse=self.reverse, fuzz=self.fuzz)
        cursor = MatchCursor(pending=deque(hunk.lines))
        while True:
            raw = self.session.read_line()
            self._skip_insertions(cursor, None if raw is None else strip_eol(raw), self.session.linenum)
            if raw is None:
                if not cursor.pending and plan.match_eof:
                    self._emit(hunk, cursor)
                    return True
                self._fail(hunk, cursor, reason="eof")
                return False
            cursor.buffer.append(raw)
            outcome = self._scan(hunk, cursor, plan)
            if outcome is Outcome.MATCHED:
                self._emit(hunk, cursor)
                return True
            if outcome is Outcome.FAILED:
                self._fail(hunk, cursor, reason="anchored")
                return False

    def _skip_insertions(self, cursor: MatchCursor, text: str | None, lineno: int) -> None:
        while cursor.pending and cursor.pending[0].kind is self.insertion:
            line = cursor.pending.popleft()
            if text is not None and cursor.backwarn is None and self.compare(text, line.text):
                cursor.backwarn = lineno

    def _scan(self, hunk: Hunk, cursor: MatchCursor, plan: MatchPlan) -> Outcome:
        while cursor.check < len(cursor.buffer):
            text = strip_eol(cursor.buffer[cursor.check])
            # buffered lines may sit behind the last line read
            lineno = self.session.linenum - len(cursor.buffer) + cursor.check + 1
            self._skip_insertions(cursor, text, lineno)
            expected = cursor.pending[0] if cursor.pending else None
            if expected is None or not self.compare(text, expected.text):
                if expected is not None and expected.kind is LineKind.CONTEXT and cursor.fuzzed < plan.fuzz_budget:
                    cursor.fuzzed += 1
                    logger.debug("hunk.fuzzed", hunk=hunk.number, expected=expected.text, found=text)
                else:
                    if plan.anchored_at_start:
                        return Outcome.FAILED
                    self.session.write_line(cursor.buffer.popleft())
                    cursor.restart(hunk)
                    continue
            cursor.pending.popleft()
            if not cursor.pending and not plan.match_eof:
                return Outcome.MATCHED
            cursor.check += 1
        return Outcome.READ_MORE

    def _emit(self, hunk: Hunk, cursor: MatchCursor) -> None:
        at_line = self.session.linenum - len(cursor.buffer) + 1
        eol = next((term for term in map(_terminator, cursor.buffer) if term), "\n")
        for line in hunk.lines:
            if line.kind is self.insertion:
                self.session.write_line(line.text + eol)
                continue
            raw = cursor.buffer.popleft()
            if line.kind is LineKind.CONTEXT:
                self.session.write_line(raw)
        self._flush(cursor)
        logger.info(
            "hunk.applied",
            path=str(self.session.path),
            hunk=hunk.number,
            at_line=at_line,
            declared_line=hunk.header.old_start if not self.reverse else hunk.header.new_start,
            fuzz=cursor.fuzzed,
        )

    def _fail(self, hunk: Hunk, cursor: MatchCursor, *, reason: str) -> None:
        if cursor.backwarn is not None:
            self.reporter.warn(f"Possibly reversed hunk {hunk.number} at {cursor.backwarn}")
            logger.warning("hunk.reversed_suspect", hunk=hunk.number, line=cursor.backwarn)
        self.reporter.hunk_failed(hunk.describe(), hunk.lines)
        logger.warning("hunk.failed", path=str(self.session.path), hunk=hunk.number, reason=reason)
        self._flush(cursor)
        self.session.abandon()

    def _flush(self, cursor: MatchCursor) -> None:
        while cursor.buffer:
            self.session.write_line(cursor.buffer.popleft())
