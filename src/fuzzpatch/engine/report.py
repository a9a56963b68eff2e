from __future__ import annotations

from typing import Iterable

from rich.console import Console


class Reporter:
    """User-facing diagnostics: progress on stdout, failures on stderr."""

    def __init__(self, *, silent: bool = False, out: Console | None = None, err: Console | None = None) -> None:
        self.silent = silent
        self.out = out or Console(highlight=False)
        self.err = err or Console(stderr=True, highlight=False)

    def progress(self, verb: str, name: str) -> None:
        if not self.silent:
            self.out.out(f"{verb} {name}", highlight=False)

    def warn(self, message: str) -> None:
        if not self.silent:
            self.err.out(message, highlight=False)

    def hunk_failed(self, summary: str, lines: Iterable[object]) -> None:
        self.err.out(summary, highlight=False)
        for line in lines:
            self.err.out(str(line), highlight=False)
