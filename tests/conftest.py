from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest
import structlog

from src.fuzzpatch.config import PatchOptions
from src.fuzzpatch.engine import Reporter


@pytest.fixture(autouse=True)
def quiet_structlog() -> Iterator[None]:
    """Keep engine log events out of captured stdout while still letting capture_logs see them."""

    structlog.configure(
        processors=[structlog.processors.add_log_level, structlog.processors.JSONRenderer()],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        logger_factory=structlog.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def options(tmp_path: Path) -> PatchOptions:
    return PatchOptions(directory=tmp_path, strip=1)


@pytest.fixture
def reporter() -> Reporter:
    return Reporter()

