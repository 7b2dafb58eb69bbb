"""Tests for synthetic mock-mode data."""

from __future__ import annotations

import random
from datetime import date

from earnsight.models import EarningsTiming, SessionState
from earnsight.processing.mock import (
    MOCK_CALENDAR,
    MOCK_PRICES,
    mock_calendar,
    mock_price_history,
    mock_quote,
)

DAY = date(2024, 1, 24)


class TestMockCalendar:
    def test_reproducible_with_seed(self) -> None:
        assert mock_calendar(DAY, random.Random(1)) == mock_calendar(DAY, random.Random(1))

    def test_bmo_always_released_within_ten_percent(self) -> None:
        for seed in range(20):
            for entry in mock_calendar(DAY, random.Random(seed)):
                if entry.timing is EarningsTiming.BEFORE_OPEN:
                    assert entry.eps_actual is not None
                if entry.eps_actual is not None:
                    assert entry.eps_estimate is not None
                    ratio = entry.eps_actual / entry.eps_estimate
                    assert 0.89 <= ratio <= 1.11

    def test_covers_every_symbol(self) -> None:
        entries = mock_calendar(DAY, random.Random(3))
        assert [e.symbol for e in entries] == [row[0] for row in MOCK_CALENDAR]
        assert all(e.scheduled_date == DAY for e in entries)


class TestMockQuote:
    def test_after_hours_only_in_after_hours_session(self) -> None:
        rng = random.Random(5)
        assert mock_quote("aapl", SessionState.AFTER_HOURS, rng).after_hours is not None
        assert mock_quote("aapl", SessionState.MARKET_HOURS, rng).after_hours is None

    def test_price_near_reference(self) -> None:
        quote = mock_quote("NVDA", SessionState.CLOSED, random.Random(9))
        assert quote.symbol == "NVDA"
        assert abs(quote.current_price - MOCK_PRICES["NVDA"]) <= 5.01
        assert quote.industry == "Semiconductors"

    def test_unknown_symbol_uses_default_price(self) -> None:
        quote = mock_quote("zzzz", SessionState.CLOSED, random.Random(9))
        assert 95 <= quote.current_price <= 105
        assert quote.industry is None


class TestMockHistory:
    def test_bars_are_consistent(self) -> None:
        bars = mock_price_history("MSFT", 30, random.Random(2), end=DAY)

        assert len(bars) == 31
        assert bars[-1].date == DAY
        assert [b.date for b in bars] == sorted(b.date for b in bars)
        for bar in bars:
            assert bar.low <= min(bar.open, bar.close)
            assert bar.high >= max(bar.open, bar.close)
            assert bar.volume >= 1_000_000
