"""Pytest fixtures and configuration."""

import logging
from collections.abc import Iterator

import pytest
import structlog

from earnsight.config import Settings

_STDLIB_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo ``setup_logging`` so no logger keeps a captured stream past its test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    levels = {name: logging.getLogger(name).level for name in _STDLIB_LOGGERS}
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, saved in levels.items():
        logging.getLogger(name).setLevel(saved)


@pytest.fixture
def live_settings() -> Settings:
    """Settings with mock mode off, so services go through the gateway client."""
    return Settings(  # type: ignore[call-arg]
        _env_file=None,
        EARNSIGHT_MOCK_MODE=False,
        mock_seed=7,
    )


@pytest.fixture
def mock_settings() -> Settings:
    return Settings(  # type: ignore[call-arg]
        _env_file=None,
        EARNSIGHT_MOCK_MODE=True,
        mock_seed=42,
    )
