from __future__ import annotations


class PatchError(Exception):
    """Raised when a patch cannot be applied at all (as opposed to a failed hunk)."""


class PatchFormatError(PatchError):
    """Raised when the patch stream is structurally unusable."""


class FileSessionError(PatchError):
    """Raised when a target file cannot be opened, created, renamed or removed."""

    def __init__(self, action: str, path: str, cause: OSError) -> None:
        super().__init__(f"cannot {action} {path}: {cause.strerror or cause}")
        self.action = action
        self.path = path
        self.cause = cause
