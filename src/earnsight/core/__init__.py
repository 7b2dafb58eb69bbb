"""Core utilities: logging, exceptions, session clock."""

from earnsight.core.exceptions import EarnsightError
from earnsight.core.logging import get_logger, setup_logging
from earnsight.core.session import session_state

__all__ = [
    "EarnsightError",
    "get_logger",
    "setup_logging",
    "session_state",
]
