from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import Iterator, TextIO

PATCH_ENCODING = "utf-8"
PATCH_ERRORS = "surrogateescape"


def strip_eol(raw: str) -> str:
    if raw.endswith("\r\n"):
        return raw[:-2]
    if raw.endswith(("\n", "\r")):
        return raw[:-1]
    return raw


class LineSource:
    """Forward-only lines of a patch, read from a file or standard input.

    Line terminators are removed and NUL bytes become spaces. Iterating a
    file-backed source again starts over from the first line; standard input
    and in-memory text can only be consumed once.
    """

    def __init__(self, path: Path | None = None, *, stream: TextIO | None = None) -> None:
        self.path = path
        self._stream = stream

    @classmethod
    def from_text(cls, text: str) -> LineSource:
        return cls(stream=io.StringIO(text))

    @property
    def name(self) -> str:
        if self.path is not None:
            return str(self.path)
        return "<stdin>" if self._stream is None else "<memory>"

    def __iter__(self) -> Iterator[str]:
        if self.path is not None:
            with self.path.open("r", encoding=PATCH_ENCODING, errors=PATCH_ERRORS, newline="") as handle:
                yield from self._normalize(handle)
            return
        if self._stream is not None:
            yield from self._normalize(self._stream)
            return
        stdin = io.TextIOWrapper(sys.stdin.buffer, encoding=PATCH_ENCODING, errors=PATCH_ERRORS, newline="")
        try:
            yield from self._normalize(stdin)
        finally:
            # leave sys.stdin usable for the caller
            stdin.detach()

    @staticmethod
    def _normalize(handle: TextIO) -> Iterator[str]:
        for raw in handle:
            yield strip_eol(raw).replace("\0", " ")
