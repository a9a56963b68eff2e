from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog
import typer
from rich.console import Console

from .config import PatchOptions
from .engine import EXIT_FATAL, PatchError, run_patch

app = typer.Typer(add_completion=False)
err_console = Console(stderr=True, highlight=False)
logger = structlog.get_logger(__name__)

_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def _configure_structlog(verbosity: int) -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_LEVELS.get(verbosity, logging.DEBUG)),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        # stderr is bound per invocation
        cache_logger_on_first_use=False,
    )


@app.command()
def patch(
    files: list[Path] | None = typer.Argument(  # noqa: B008
        None,
        metavar="[FILE [PATCH]]",
        help="Patch FILE instead of the names in the diff; read the diff from PATCH.",
    ),
    directory: Path = typer.Option(  # noqa: B008
        Path("."),
        "-d",
        "--directory",
        exists=True,
        file_okay=False,
        dir_okay=True,
        help="Modify files relative to this directory.",
    ),
    input_file: Path | None = typer.Option(  # noqa: B008
        None,
        "-i",
        "--input",
        dir_okay=False,
        help="Read the patch from this file instead of standard input; relative to --directory.",
    ),
    strip: int | None = typer.Option(  # noqa: B008
        None,
        "-p",
        "--strip",
        min=0,
        help="Strip this many leading path segments from file names (default: all directories).",
    ),
    reverse: bool = typer.Option(False, "-R", "--reverse", help="Apply the patch in reverse."),  # noqa: B008
    fuzz: int | None = typer.Option(  # noqa: B008
        None,
        "-F",
        "--fuzz",
        min=0,
        help="Number of context lines allowed to mismatch per hunk.",
    ),
    loose: bool = typer.Option(False, "-l", "--loose", help="Ignore whitespace when comparing lines."),  # noqa: B008
    silent: bool = typer.Option(False, "-s", "--silent", help="Only report errors."),  # noqa: B008
    unified: bool = typer.Option(  # noqa: B008
        False,
        "-u",
        "--unified",
        help="Ignored; unified diffs are the only format read.",
    ),
    dry_run: bool = typer.Option(  # noqa: B008
        False,
        "--dry-run",
        is_flag=True,
        help="Check that the patch applies without changing any file.",
    ),
    verbose: int = typer.Option(0, "-v", "--verbose", count=True, help="Increase log verbosity."),  # noqa: B008
) -> None:
    """Apply a unified diff, locating each hunk by its context rather than its line numbers."""

    _configure_structlog(verbose)
    files = files or []
    if len(files) > 2:  # noqa: PLR2004
        raise typer.BadParameter("expected at most a target FILE and a PATCH file", param_hint="FILE PATCH")
    target = files[0] if files else None
    patch_file = input_file or (files[1] if len(files) == 2 else None)  # noqa: PLR2004

    try:
        options = PatchOptions.from_env(
            directory=directory,
            patch_file=patch_file,
            target=target,
            strip=strip,
            reverse=reverse,
            fuzz=fuzz,
            loose=loose,
            silent=silent,
            dry_run=dry_run,
            verbosity=verbose,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    try:
        result = run_patch(options)
    except KeyboardInterrupt:
        raise typer.Exit(130) from None
    except (PatchError, OSError) as exc:
        logger.error("cli.patch.fatal", error=str(exc))
        err_console.out(f"fuzzpatch: error: {exc}", highlight=False)
        raise typer.Exit(EXIT_FATAL) from exc

    logger.info("cli.patch.complete", result=result.to_event())
    if result.exit_code:
        raise typer.Exit(result.exit_code)


if __name__ == "__main__":
    app()
