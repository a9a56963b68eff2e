from __future__ import annotations

import os
import pathlib
import shutil
import tempfile
from typing import TextIO

TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "surrogateescape"
NULL_DEVICE_NAMES = frozenset({"/dev/null", os.devnull})


def ensure_dir(p: str | pathlib.Path) -> pathlib.Path:
    path = pathlib.Path(p)
    path.mkdir(parents=True, exist_ok=True)
    return path


def is_null_device(name: str | None) -> bool:
    return name is not None and name in NULL_DEVICE_NAMES


def open_text(path: pathlib.Path, mode: str = "r") -> TextIO:
    """Open a target file so that line terminators and undecodable bytes round-trip."""
    return path.open(mode, encoding=TEXT_ENCODING, errors=TEXT_ERRORS, newline="")


def open_discard_sink() -> TextIO:
    return open(os.devnull, "w", encoding=TEXT_ENCODING, errors=TEXT_ERRORS, newline="")  # noqa: SIM115


def copy_tempfile(original: pathlib.Path) -> tuple[pathlib.Path, TextIO]:
    """Create a temp file in the directory of ``original`` with its permission bits."""
    fd, name = tempfile.mkstemp(prefix=f".{original.name}.", suffix=".fuzzpatch", dir=original.parent)
    temp = pathlib.Path(name)
    try:
        shutil.copymode(original, temp)
        handle = os.fdopen(fd, "w", encoding=TEXT_ENCODING, errors=TEXT_ERRORS, newline="")
    except OSError:
        os.close(fd)
        temp.unlink(missing_ok=True)
        raise
    return temp, handle
