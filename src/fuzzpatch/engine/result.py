from __future__ import annotations

from dataclasses import dataclass
from typing import Any

EXIT_OK = 0
EXIT_HUNKS_FAILED = 1
EXIT_FATAL = 2


@dataclass(slots=True)
class PatchResult:
    """Summary of one patch run, translated to an exit status by the CLI."""

    dry_run: bool = False
    files_patched: int = 0
    files_created: int = 0
    files_deleted: int = 0
    hunks_applied: int = 0
    hunks_failed: int = 0
    hunks_skipped: int = 0

    @property
    def exit_code(self) -> int:
        return EXIT_HUNKS_FAILED if self.hunks_failed else EXIT_OK

    @property
    def message(self) -> str:
        return (
            f"Applied {self.hunks_applied} hunks, failed {self.hunks_failed}. "
            f"patched={self.files_patched} created={self.files_created} deleted={self.files_deleted}."
        )

    def to_event(self) -> dict[str, Any]:
        return {
            "event": "dry_run_summary" if self.dry_run else "patch_summary",
            "summary": {
                "files_patched": self.files_patched,
                "files_created": self.files_created,
                "files_deleted": self.files_deleted,
                "hunks_applied": self.hunks_applied,
                "hunks_failed": self.hunks_failed,
                "hunks_skipped": self.hunks_skipped,
            },
            "exit_code": self.exit_code,
        }
