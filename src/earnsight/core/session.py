"""Market session clock.

Classifies a wall-clock time into a trading-session state. Times are read as
given, so pass the market's local time; ``market_now`` produces it from the
configured exchange timezone. Holidays are not modelled.
"""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from earnsight.core.constants import (
    AFTER_HOURS_END,
    DEFAULT_MARKET_TIMEZONE,
    MARKET_CLOSE,
    MARKET_OPEN,
    PRE_MARKET_START,
    REFRESH_EARNINGS_TIME,
    REFRESH_MARKET_HOURS,
    REFRESH_OFF_HOURS,
)
from earnsight.models import SessionState

_SATURDAY = 5


def market_now(timezone: str = DEFAULT_MARKET_TIMEZONE) -> datetime:
    """Current wall-clock time in ``timezone``, as a naive datetime."""
    return datetime.now(ZoneInfo(timezone)).replace(tzinfo=None)


def session_state(now: datetime) -> SessionState:
    """Classify ``now`` into a trading-session state.

    Weekends are always closed. On weekdays the day is split into half-open
    intervals [04:00, 09:30) pre-market, [09:30, 16:00) market hours,
    [16:00, 20:00) after hours, and closed otherwise.
    """
    if now.weekday() >= _SATURDAY:
        return SessionState.CLOSED

    minutes = now.hour * 60 + now.minute
    if PRE_MARKET_START <= minutes < MARKET_OPEN:
        return SessionState.PRE_MARKET
    if MARKET_OPEN <= minutes < MARKET_CLOSE:
        return SessionState.MARKET_HOURS
    if MARKET_CLOSE <= minutes < AFTER_HOURS_END:
        return SessionState.AFTER_HOURS
    return SessionState.CLOSED


def is_market_open(state: SessionState) -> bool:
    """Any trading session (extended hours included) is in progress."""
    return state is not SessionState.CLOSED


def refresh_interval(state: SessionState, earnings_window: bool = False) -> float:
    """Seconds between dashboard refreshes for the given session."""
    if earnings_window and is_market_open(state):
        return REFRESH_EARNINGS_TIME
    if state is SessionState.MARKET_HOURS:
        return REFRESH_MARKET_HOURS
    return REFRESH_OFF_HOURS
