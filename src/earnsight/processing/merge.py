"""Merge a calendar entry and a live quote into one EnrichedStock."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from earnsight.models import (
    BeatStatus,
    CalendarEntry,
    EarningsActual,
    EarningsEstimate,
    EarningsReport,
    EarningsStatus,
    EnrichedStock,
    PriceBar,
    Quote,
    SessionState,
)


def beat_status(actual: float, estimate: float | None) -> BeatStatus:
    """Classify actual EPS against the consensus estimate.

    Without an estimate there is nothing to compare to, so the result is
    ``UNKNOWN`` rather than a guess.
    """
    if estimate is None:
        return BeatStatus.UNKNOWN
    if actual > estimate:
        return BeatStatus.BEAT
    if actual < estimate:
        return BeatStatus.MISS
    return BeatStatus.MEET


def build_earnings_report(entry: CalendarEntry) -> EarningsReport:
    """Derive release status, estimate/actual blocks and beat status from an entry."""
    estimate = None
    if entry.eps_estimate is not None or entry.revenue_estimate is not None:
        estimate = EarningsEstimate(eps=entry.eps_estimate, revenue=entry.revenue_estimate)

    if entry.eps_actual is None:
        return EarningsReport(
            status=EarningsStatus.PENDING,
            timing=entry.timing,
            scheduled_time=entry.scheduled_time,
            estimate=estimate,
        )

    actual = EarningsActual(
        eps=entry.eps_actual,
        revenue=entry.revenue_actual,
        eps_estimate=entry.eps_estimate,
        revenue_estimate=entry.revenue_estimate,
    )
    return EarningsReport(
        status=EarningsStatus.RELEASED,
        timing=entry.timing,
        scheduled_time=entry.scheduled_time,
        estimate=estimate,
        actual=actual,
        beat_status=beat_status(actual.eps, actual.eps_estimate),
    )


def merge(
    entry: CalendarEntry,
    quote: Quote,
    session: SessionState,
    now: datetime,
    price_history: Sequence[PriceBar] = (),
) -> EnrichedStock:
    """Combine a calendar entry with a quote.

    ``price.after_hours`` is kept only when ``session`` is after-hours and the
    quote has after-hours data; otherwise it is ``None`` so consumers can tell
    "no after-hours trading" from "zero change".

    ``last_updated`` is ``now`` (merge time, not fetch time); callers decide
    when a record is stale. Inputs are never mutated.
    """
    price = quote
    if quote.after_hours is not None and session is not SessionState.AFTER_HOURS:
        price = quote.model_copy(update={"after_hours": None})

    return EnrichedStock(
        symbol=entry.symbol,
        company_name=entry.company_name or quote.company_name or entry.symbol,
        industry=quote.industry,
        price=price,
        market_status=session,
        earnings=build_earnings_report(entry),
        price_history=tuple(price_history),
        last_updated=now,
    )
