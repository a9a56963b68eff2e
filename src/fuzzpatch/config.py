"""
Configuration model for fuzzpatch.

The CLI builds a PatchOptions instance and hands it to the engine so no
module depends on process-wide state.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

FUZZ_ENV = "FUZZPATCH_FUZZ"
STRIP_ENV = "FUZZPATCH_STRIP"


def _env_int(environ: Mapping[str, str], key: str) -> int | None:
    raw = environ.get(key, "").strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{key} must not be negative, got {value}")
    return value


@dataclass(slots=True)
class PatchOptions:
    """
    Settings for one patch run.

    ``strip=None`` removes every leading directory from header names. An
    explicit ``fuzz`` always wins over the budget derived from a hunk's
    context width, including ``fuzz=0``.
    """

    directory: Path = Path(".")
    patch_file: Path | None = None
    target: Path | None = None
    strip: int | None = None
    reverse: bool = False
    fuzz: int | None = None
    loose: bool = False
    silent: bool = False
    dry_run: bool = False
    verbosity: int = 0

    def __post_init__(self) -> None:
        # A file named on the command line is taken literally.
        if self.target is not None:
            self.strip = 0
        # Relative patch paths are read from inside ``directory``.
        if self.patch_file is not None:
            self.patch_file = self.directory / self.patch_file

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: object) -> PatchOptions:
        env = os.environ if environ is None else environ
        defaults: dict[str, object] = {
            "fuzz": _env_int(env, FUZZ_ENV),
            "strip": _env_int(env, STRIP_ENV),
        }
        defaults.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**defaults)  # type: ignore[arg-type]
