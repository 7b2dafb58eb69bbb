"""Tests for merging calendar entries with quotes."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

import pytest

from earnsight.models import (
    AfterHoursPrice,
    BeatStatus,
    CalendarEntry,
    EarningsStatus,
    EarningsTiming,
    PriceBar,
    Quote,
    SessionState,
)
from earnsight.processing.merge import beat_status, build_earnings_report, merge

NOW = datetime(2024, 1, 24, 17, 30)


def _entry(**overrides: Any) -> CalendarEntry:
    defaults: dict[str, Any] = {
        "symbol": "AAPL",
        "company_name": "Apple Inc.",
        "timing": EarningsTiming.AFTER_CLOSE,
        "scheduled_date": date(2024, 1, 24),
        "scheduled_time": "amc",
        "eps_estimate": 1.50,
        "revenue_estimate": 90_000_000_000,
    }
    defaults.update(overrides)
    return CalendarEntry(**defaults)


def _quote(**overrides: Any) -> Quote:
    defaults: dict[str, Any] = {
        "symbol": "AAPL",
        "current_price": 185.0,
        "change": 1.5,
        "change_percent": 0.82,
        "company_name": "Apple (quote)",
        "industry": "Technology",
        "after_hours": AfterHoursPrice(price=187.0, change=2.0, change_percent=1.08),
    }
    defaults.update(overrides)
    return Quote(**defaults)


class TestBeatStatus:
    @pytest.mark.parametrize(
        ("actual", "estimate", "expected"),
        [
            (1.60, 1.50, BeatStatus.BEAT),
            (1.40, 1.50, BeatStatus.MISS),
            (1.50, 1.50, BeatStatus.MEET),
            (1.50, None, BeatStatus.UNKNOWN),
            (-0.10, -0.20, BeatStatus.BEAT),
        ],
    )
    def test_classification(
        self, actual: float, estimate: float | None, expected: BeatStatus
    ) -> None:
        assert beat_status(actual, estimate) is expected


class TestBuildEarningsReport:
    def test_pending_without_actual(self) -> None:
        report = build_earnings_report(_entry())

        assert report.status is EarningsStatus.PENDING
        assert report.actual is None
        assert report.beat_status is None
        assert report.estimate is not None
        assert report.estimate.eps == 1.50

    def test_released_with_actual(self) -> None:
        report = build_earnings_report(_entry(eps_actual=1.64, revenue_actual=91_000_000_000))

        assert report.status is EarningsStatus.RELEASED
        assert report.actual is not None
        assert report.actual.eps == 1.64
        assert report.actual.eps_estimate == 1.50
        assert report.actual.revenue_estimate == 90_000_000_000
        assert report.beat_status is BeatStatus.BEAT

    def test_released_without_estimate_is_unknown(self) -> None:
        report = build_earnings_report(
            _entry(eps_estimate=None, revenue_estimate=None, eps_actual=0.80)
        )

        assert report.estimate is None
        assert report.beat_status is BeatStatus.UNKNOWN

    def test_revenue_only_estimate_still_builds_estimate(self) -> None:
        report = build_earnings_report(_entry(eps_estimate=None))
        assert report.estimate is not None
        assert report.estimate.eps is None
        assert report.estimate.revenue == 90_000_000_000


class TestMerge:
    def test_after_hours_kept_in_after_hours_session(self) -> None:
        stock = merge(_entry(), _quote(), SessionState.AFTER_HOURS, NOW)

        assert stock.price.after_hours is not None
        assert stock.price.after_hours.price == 187.0
        assert stock.market_status is SessionState.AFTER_HOURS

    @pytest.mark.parametrize(
        "session",
        [SessionState.PRE_MARKET, SessionState.MARKET_HOURS, SessionState.CLOSED],
    )
    def test_after_hours_dropped_outside_session(self, session: SessionState) -> None:
        stock = merge(_entry(), _quote(), session, NOW)
        assert stock.price.after_hours is None

    def test_after_hours_absent_stays_absent(self) -> None:
        stock = merge(_entry(), _quote(after_hours=None), SessionState.AFTER_HOURS, NOW)
        assert stock.price.after_hours is None

    def test_company_name_precedence(self) -> None:
        assert merge(_entry(), _quote(), SessionState.CLOSED, NOW).company_name == "Apple Inc."
        assert (
            merge(_entry(company_name=""), _quote(), SessionState.CLOSED, NOW).company_name
            == "Apple (quote)"
        )
        assert (
            merge(
                _entry(company_name=""), _quote(company_name=None), SessionState.CLOSED, NOW
            ).company_name
            == "AAPL"
        )

    def test_industry_history_and_timestamp(self) -> None:
        bars = [
            PriceBar(date=date(2024, 1, 22), open=1, high=2, low=0.5, close=1.5),
            PriceBar(date=date(2024, 1, 23), open=1.5, high=2, low=1, close=1.8),
        ]
        stock = merge(_entry(), _quote(), SessionState.CLOSED, NOW, price_history=bars)

        assert stock.industry == "Technology"
        assert stock.price_history == tuple(bars)
        assert stock.last_updated == NOW

    def test_inputs_not_mutated_and_result_deterministic(self) -> None:
        entry, quote = _entry(eps_actual=1.40), _quote()
        entry_before = entry.model_dump()
        quote_before = quote.model_dump()

        first = merge(entry, quote, SessionState.MARKET_HOURS, NOW)
        second = merge(entry, quote, SessionState.MARKET_HOURS, NOW)

        assert first == second
        assert entry.model_dump() == entry_before
        assert quote.model_dump() == quote_before
        assert first.earnings.beat_status is BeatStatus.MISS

    def test_wire_format_is_camel_case(self) -> None:
        stock = merge(_entry(eps_actual=1.64), _quote(), SessionState.AFTER_HOURS, NOW)
        data = stock.model_dump(mode="json", by_alias=True)

        assert data["companyName"] == "Apple Inc."
        assert data["marketStatus"] == "after-hours"
        assert data["price"]["current"] == 185.0
        assert data["price"]["afterHours"]["changePercent"] == 1.08
        assert data["earnings"]["beatStatus"] == "beat"
        assert data["earnings"]["timing"] == "AMC"
