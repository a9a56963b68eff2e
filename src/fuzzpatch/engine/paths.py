from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..config import PatchOptions
from ..util.fs import is_null_device
from .errors import PatchFormatError
from .hunk import HunkHeader

NULL_NAME = "/dev/null"
_LEADING_INT_RE = re.compile(r"\s*(\d+)")


class TargetAction(str, Enum):
    PATCH = "patch"
    CREATE = "create"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class Target:
    path: Path
    display: str
    action: TargetAction


def header_name(line: str) -> str:
    """Name from a ``--- `` or ``+++ `` line, without trailing metadata.

    A timestamp whose year is at or before the epoch means the side does
    not exist, which some diff tools write instead of ``/dev/null``.
    """
    name, tab, metadata = line[4:].partition("\t")
    if tab:
        match = _LEADING_INT_RE.match(metadata)
        if match is not None and 1900 < int(match.group(1)) <= 1970:  # noqa: PLR2004
            return NULL_NAME
    return name


def strip_components(name: str, count: int | None) -> str:
    """Drop ``count`` leading path segments; ``None`` drops every directory."""
    rest = name
    stripped = 0
    index = 0
    while index < len(name):
        if count is not None and stripped == count:
            break
        char = name[index]
        index += 1
        if char != "/":
            continue
        while index < len(name) and name[index] == "/":
            index += 1
        rest = name[index:]
        stripped += 1
    return rest


def resolve_target(
    old_name: str | None,
    new_name: str | None,
    header: HunkHeader,
    options: PatchOptions,
) -> Target:
    if options.reverse:
        source, dest, source_len = new_name, old_name, header.new_len
    else:
        source, dest, source_len = old_name, new_name, header.old_len

    if dest is None and options.target is None:
        raise PatchFormatError("hunk found before any file header")

    # An emptied file (new side 0,0 under a real name) is patched, not removed.
    deleting = is_null_device(dest)
    if options.target is not None:
        chosen = str(options.target)
    elif deleting:
        if source is None or is_null_device(source):
            raise PatchFormatError("both sides of the patch are /dev/null")
        chosen = source
    else:
        chosen = dest

    display = strip_components(chosen, options.strip)
    if not display:
        raise PatchFormatError(f"no file name left after stripping {chosen!r}")
    path = options.directory / display

    if deleting:
        action = TargetAction.DELETE
    elif (is_null_device(source) or source_len == 0) and not path.exists():
        action = TargetAction.CREATE
    else:
        action = TargetAction.PATCH
    return Target(path=path, display=display, action=action)
