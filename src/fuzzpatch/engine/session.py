from __future__ import annotations

import io
import os
from pathlib import Path
from typing import TextIO

import structlog

from ..config import PatchOptions
from ..util.fs import copy_tempfile, ensure_dir, open_discard_sink, open_text
from .errors import FileSessionError
from .paths import Target, TargetAction
from .report import Reporter

logger = structlog.get_logger(__name__)


class FileSession:
    """Read handle, temp output and rename bookkeeping for one target file.

    ``linenum`` counts lines consumed from the original, ``outnum`` lines
    written to the output. The original is only ever replaced by
    :meth:`finish`, in a single ``os.replace``.
    """

    def __init__(self, target: Target, options: PatchOptions, reporter: Reporter) -> None:
        self.target = target
        self.options = options
        self.reporter = reporter
        self.filein: TextIO | None = None
        self.fileout: TextIO | None = None
        self.tempname: Path | None = None
        self.created = False
        self.failed = False
        self.hunknum = 0
        self.linenum = 0
        self.outnum = 0
        self._open_line = False

    @classmethod
    def open(cls, target: Target, options: PatchOptions, reporter: Reporter) -> FileSession:
        session = cls(target, options, reporter)
        if target.action is TargetAction.DELETE:
            session._remove()
        else:
            session._open_input()
            session._open_output()
        logger.info("session.opened", path=str(target.path), action=target.action.value, dry_run=options.dry_run)
        return session

    @property
    def path(self) -> Path:
        return self.target.path

    @property
    def accepts_hunks(self) -> bool:
        return self.filein is not None and not self.failed

    def next_hunk_number(self) -> int:
        self.hunknum += 1
        return self.hunknum

    def _remove(self) -> None:
        self.reporter.progress("removing", self.target.display)
        if self.options.dry_run:
            return
        try:
            self.path.unlink()
        except OSError as exc:
            raise FileSessionError("remove", str(self.path), exc) from exc

    def _open_input(self) -> None:
        if self.target.action is TargetAction.CREATE:
            self.reporter.progress("creating", self.target.display)
            if self.options.dry_run:
                self.filein = io.StringIO("")
                return
            try:
                ensure_dir(self.path.parent)
                self.path.touch(exist_ok=False)
            except OSError as exc:
                raise FileSessionError("create", str(self.path), exc) from exc
            self.created = True
        else:
            self.reporter.progress("patching", self.target.display)
        try:
            self.filein = open_text(self.path)
        except OSError as exc:
            raise FileSessionError("open", str(self.path), exc) from exc

    def _open_output(self) -> None:
        if self.options.dry_run:
            self.fileout = open_discard_sink()
            return
        try:
            self.tempname, self.fileout = copy_tempfile(self.path)
        except OSError as exc:
            self._close()
            if self.created:
                self.path.unlink(missing_ok=True)
            raise FileSessionError("create a temporary file for", str(self.path), exc) from exc

    def read_line(self) -> str | None:
        """Next raw line of the original, terminator included, or ``None`` at EOF."""
        assert self.filein is not None
        raw = self.filein.readline()
        if not raw:
            return None
        self.linenum += 1
        return raw

    def write_line(self, raw: str) -> None:
        assert self.fileout is not None
        if self._open_line:
            self.fileout.write("\n")
        self.fileout.write(raw)
        self._open_line = not raw.endswith(("\n", "\r"))
        self.outnum += 1

    def finish(self) -> None:
        """Copy the unread rest of the original and move the output into place."""
        if not self.accepts_hunks:
            self._close()
            return
        while (raw := self.read_line()) is not None:
            self.write_line(raw)
        self._close()
        if self.tempname is not None:
            try:
                os.replace(self.tempname, self.path)
            except OSError as exc:
                raise FileSessionError("rename", str(self.tempname), exc) from exc
            self.tempname = None
        logger.info("session.finalized", path=str(self.path), lines_in=self.linenum, lines_out=self.outnum)

    def abandon(self) -> None:
        """Drop the in-progress output; the original stays as it was."""
        self.failed = True
        self._close()
        logger.info("session.abandoned", path=str(self.path), created=self.created, dry_run=self.options.dry_run)
        if self.options.dry_run:
            return
        try:
            if self.tempname is not None:
                self.tempname.unlink(missing_ok=True)
                self.tempname = None
            if self.created:
                self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise FileSessionError("remove", str(self.path), exc) from exc

    def _close(self) -> None:
        for handle in (self.filein, self.fileout):
            if handle is not None:
                handle.close()
        self.filein = None
        self.fileout = None
