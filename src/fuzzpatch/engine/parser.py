from __future__ import annotations

from enum import Enum
from typing import Iterable

import structlog

from ..config import PatchOptions
from .applier import HunkApplier
from .hunk import NO_NEWLINE_MARKER, Hunk, is_body_line, parse_hunk_header
from .lines import LineSource
from .paths import TargetAction, header_name, resolve_target
from .report import Reporter
from .result import PatchResult
from .session import FileSession

logger = structlog.get_logger(__name__)


class ParserState(Enum):
    PREAMBLE = "preamble"
    OLD_HEADER_SEEN = "old_header_seen"
    HUNK_EXPECTED = "hunk_expected"
    ASSEMBLING = "assembling"


class PatchStreamParser:
    """
    Line-driven state machine over a unified diff.

    Header pairs open and close file sessions; each hunk is assembled until
    its declared old and new line counts are used up and is then handed to
    a HunkApplier. At most one session is open at a time.
    """

    def __init__(self, options: PatchOptions, reporter: Reporter | None = None) -> None:
        self.options = options
        self.reporter = reporter or Reporter(silent=options.silent)
        self.state = ParserState.PREAMBLE
        self.old_name: str | None = None
        self.new_name: str | None = None
        self.session: FileSession | None = None
        self.hunk: Hunk | None = None
        self.result = PatchResult(dry_run=options.dry_run)

    def run(self, lines: Iterable[str]) -> PatchResult:
        try:
            for line in lines:
                self.feed(line)
            self.close()
        except BaseException:
            if self.session is not None and self.session.accepts_hunks:
                self.session.abandon()
            raise
        return self.result

    def feed(self, line: str) -> None:
        if self.state is ParserState.ASSEMBLING:
            if is_body_line(line):
                self._assemble(line)
            elif not line.startswith(NO_NEWLINE_MARKER):
                self._malformed("unexpected line inside hunk", line)
            return

        if line.startswith("--- "):
            self._finish_session()
            self.old_name = header_name(line)
            self.new_name = None
            self.state = ParserState.OLD_HEADER_SEEN
        elif line.startswith("+++ "):
            self._finish_session()
            if self.state is not ParserState.OLD_HEADER_SEEN:
                self.old_name = None
            self.new_name = header_name(line)
            self.state = ParserState.HUNK_EXPECTED
        elif self.state is ParserState.HUNK_EXPECTED and line.startswith("@@ -"):
            self._start_hunk(line)

    def close(self) -> None:
        if self.state is ParserState.ASSEMBLING:
            self._malformed("patch ended inside a hunk", None)
        self._finish_session()

    def _start_hunk(self, line: str) -> None:
        try:
            header = parse_hunk_header(line)
        except ValueError:
            self._malformed("bad hunk header", line)
            return

        if self.session is None:
            target = resolve_target(self.old_name, self.new_name, header, self.options)
            self.session = FileSession.open(target, self.options, self.reporter)
            if target.action is TargetAction.DELETE:
                self.result.files_deleted += 1

        self.hunk = Hunk(number=self.session.next_hunk_number(), header=header)
        if self.hunk.complete:
            self._malformed("hunk declares no lines", line)
            return
        self.state = ParserState.ASSEMBLING

    def _assemble(self, line: str) -> None:
        assert self.hunk is not None
        self.hunk.append(line)
        if self.hunk.overrun:
            self._malformed("hunk longer than its header declares", line)
        elif self.hunk.complete:
            self._apply_hunk()

    def _apply_hunk(self) -> None:
        hunk, session = self.hunk, self.session
        assert hunk is not None and session is not None
        self.hunk = None
        self.state = ParserState.HUNK_EXPECTED

        if not session.accepts_hunks:
            if session.failed:
                self.result.hunks_skipped += 1
                logger.debug("parser.hunk_discarded", path=str(session.path), hunk=hunk.number)
            return

        applier = HunkApplier(
            session,
            self.reporter,
            reverse=self.options.reverse,
            fuzz=self.options.fuzz,
            loose=self.options.loose,
        )
        if applier.apply(hunk):
            self.result.hunks_applied += 1
        else:
            self.result.hunks_failed += 1

    def _malformed(self, reason: str, line: str | None) -> None:
        hunk = self.hunk
        self.hunk = None
        self.state = ParserState.PREAMBLE
        self.result.hunks_failed += 1
        logger.warning("parser.malformed_hunk", reason=reason, line=line, hunk=hunk.number if hunk else None)
        if hunk is not None:
            self.reporter.hunk_failed(f"{hunk.describe()} ({reason})", hunk.lines)
        else:
            self.reporter.hunk_failed(f"Malformed hunk: {reason}", [line] if line is not None else [])
        if self.session is not None and self.session.accepts_hunks:
            self.session.abandon()

    def _finish_session(self) -> None:
        session = self.session
        if session is None:
            return
        self.session = None
        applied = session.accepts_hunks
        session.finish()
        if not applied:
            return
        if session.target.action is TargetAction.CREATE:
            self.result.files_created += 1
        else:
            self.result.files_patched += 1


def run_patch(options: PatchOptions, reporter: Reporter | None = None) -> PatchResult:
    """Apply the patch named by ``options.patch_file`` (standard input when unset)."""
    source = LineSource(options.patch_file)
    logger.info("patch.start", source=source.name, directory=str(options.directory), reverse=options.reverse)
    return PatchStreamParser(options, reporter).run(source)


def apply_patch_text(text: str, options: PatchOptions, reporter: Reporter | None = None) -> PatchResult:
    return PatchStreamParser(options, reporter).run(LineSource.from_text(text))
