from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass, field
from enum import Enum

HUNK_HEADER_RE = re.compile(r"^@@ -\s*(\d+)(?:,\s*(\d+))?\s+\+\s*(\d+)(?:,\s*(\d+))?\s*@@")
NO_NEWLINE_MARKER = "\\"


class LineKind(str, Enum):
    CONTEXT = " "
    REMOVE = "-"
    ADD = "+"


def removal_kind(reverse: bool) -> LineKind:
    """Kind of hunk line that must be found (and dropped) in the target file."""
    return LineKind.ADD if reverse else LineKind.REMOVE


def insertion_kind(reverse: bool) -> LineKind:
    """Kind of hunk line that is written without consuming target input."""
    return LineKind.REMOVE if reverse else LineKind.ADD


def is_body_line(line: str) -> bool:
    return line[:1] in (" ", "+", "-")


@dataclass(frozen=True, slots=True)
class HunkLine:
    kind: LineKind
    text: str

    @classmethod
    def parse(cls, raw: str) -> HunkLine:
        return cls(kind=LineKind(raw[0]), text=raw[1:])

    def is_nontrivial(self) -> bool:
        # Blank and single-brace lines make poor anchors for fuzzy matching.
        stripped = self.text.lstrip()
        return len(stripped) >= 2 and not stripped[1].isspace()

    def __str__(self) -> str:
        return f"{self.kind.value}{self.text}"


@dataclass(frozen=True, slots=True)
class HunkHeader:
    old_start: int
    old_len: int
    new_start: int
    new_len: int


def parse_hunk_header(line: str) -> HunkHeader:
    """Parse ``@@ -a[,b] +c[,d] @@``; an omitted length means one line."""
    match = HUNK_HEADER_RE.match(line)
    if match is None:
        raise ValueError(f"malformed hunk header: {line!r}")
    old_start, old_len, new_start, new_len = match.groups()
    return HunkHeader(
        old_start=int(old_start),
        old_len=1 if old_len is None else int(old_len),
        new_start=int(new_start),
        new_len=1 if new_len is None else int(new_len),
    )


@dataclass(slots=True)
class Hunk:
    """One hunk being assembled from the patch body.

    ``context`` is the number of context lines before the first change; it
    is the declared context width used for end-of-file and start-of-file
    anchoring.
    """

    number: int
    header: HunkHeader
    lines: deque[HunkLine] = field(default_factory=deque)
    context: int = field(default=0, init=False)
    old_remaining: int = field(default=0, init=False)
    new_remaining: int = field(default=0, init=False)
    _leading: bool = field(default=True, init=False, repr=False)

    def __post_init__(self) -> None:
        self.old_remaining = self.header.old_len
        self.new_remaining = self.header.new_len

    def append(self, raw: str) -> None:
        line = HunkLine.parse(raw)
        self.lines.append(line)
        if line.kind is not LineKind.ADD:
            self.old_remaining -= 1
        if line.kind is not LineKind.REMOVE:
            self.new_remaining -= 1
        if line.kind is LineKind.CONTEXT and self._leading:
            self.context += 1
        else:
            self._leading = False

    @property
    def complete(self) -> bool:
        return self.old_remaining == 0 and self.new_remaining == 0

    @property
    def overrun(self) -> bool:
        return self.old_remaining < 0 or self.new_remaining < 0

    def describe(self) -> str:
        return f"Hunk {self.number} FAILED {self.header.old_start}/{self.header.new_start}."
