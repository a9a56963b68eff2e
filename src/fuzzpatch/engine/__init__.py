from __future__ import annotations

__all__ = [
    "EXIT_FATAL",
    "EXIT_HUNKS_FAILED",
    "EXIT_OK",
    "FileSession",
    "FileSessionError",
    "Hunk",
    "HunkApplier",
    "HunkLine",
    "LineKind",
    "LineSource",
    "PatchError",
    "PatchFormatError",
    "PatchResult",
    "PatchStreamParser",
    "Reporter",
    "Target",
    "TargetAction",
    "apply_patch_text",
    "parse_hunk_header",
    "resolve_target",
    "run_patch",
    "strip_components",
]

from .applier import HunkApplier
from .errors import FileSessionError, PatchError, PatchFormatError
from .hunk import Hunk, HunkLine, LineKind, parse_hunk_header
from .lines import LineSource
from .parser import PatchStreamParser, apply_patch_text, run_patch
from .paths import Target, TargetAction, resolve_target, strip_components
from .report import Reporter
from .result import EXIT_FATAL, EXIT_HUNKS_FAILED, EXIT_OK, PatchResult
from .session import FileSession
