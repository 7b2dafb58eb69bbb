"""Synthetic market data for mock mode.

Mock mode (``EARNSIGHT_MOCK_MODE=true``) replaces every network call with data
generated here. Pass a seeded ``random.Random`` for reproducible output.
"""

from __future__ import annotations

import random
from datetime import date, timedelta

from earnsight.models import (
    AfterHoursPrice,
    CalendarEntry,
    EarningsTiming,
    PriceBar,
    Quote,
    ReportAnalysis,
    SessionState,
)

# symbol, company, timing, scheduled time, EPS estimate, revenue estimate
MOCK_CALENDAR: tuple[tuple[str, str, EarningsTiming, str, float, float], ...] = (
    ("AAPL", "Apple Inc.", EarningsTiming.AFTER_CLOSE, "16:30", 1.54, 89_500_000_000),
    ("MSFT", "Microsoft Corporation", EarningsTiming.AFTER_CLOSE, "16:00", 2.65, 56_200_000_000),
    ("GOOGL", "Alphabet Inc.", EarningsTiming.AFTER_CLOSE, "16:15", 1.45, 74_800_000_000),
    ("AMZN", "Amazon.com Inc.", EarningsTiming.AFTER_CLOSE, "16:30", 0.95, 145_400_000_000),
    ("TSLA", "Tesla Inc.", EarningsTiming.AFTER_CLOSE, "17:00", 0.85, 24_500_000_000),
    ("NVDA", "NVIDIA Corporation", EarningsTiming.BEFORE_OPEN, "07:00", 4.12, 18_200_000_000),
    ("META", "Meta Platforms Inc.", EarningsTiming.AFTER_CLOSE, "16:00", 4.25, 34_100_000_000),
    ("JPM", "JPMorgan Chase & Co.", EarningsTiming.BEFORE_OPEN, "07:30", 3.97, 38_500_000_000),
)

MOCK_PRICES: dict[str, float] = {
    "AAPL": 185.92,
    "MSFT": 374.58,
    "GOOGL": 141.80,
    "AMZN": 178.25,
    "TSLA": 242.84,
    "NVDA": 495.22,
    "META": 482.32,
    "JPM": 194.67,
}

MOCK_INDUSTRIES: dict[str, str] = {
    "AAPL": "Technology",
    "MSFT": "Technology",
    "GOOGL": "Media",
    "AMZN": "Retail",
    "TSLA": "Automobiles",
    "NVDA": "Semiconductors",
    "META": "Media",
    "JPM": "Banking",
}

# Mock S&P 500 members; ``TSLA`` is deliberately absent so both lists are populated
MOCK_SP500: frozenset[str] = frozenset({"AAPL", "MSFT", "GOOGL", "AMZN", "NVDA", "META", "JPM"})

DEFAULT_BASE_PRICE = 100.0


def mock_calendar(day: date, rng: random.Random) -> list[CalendarEntry]:
    """Mock calendar for ``day``.

    BMO reporters have always released; AMC reporters have released about half
    the time. Actual EPS lands within +/-10% of the estimate.
    """
    entries: list[CalendarEntry] = []
    for symbol, name, timing, scheduled, eps_est, rev_est in MOCK_CALENDAR:
        released = timing is EarningsTiming.BEFORE_OPEN or (
            timing is EarningsTiming.AFTER_CLOSE and rng.random() > 0.5
        )
        entries.append(
            CalendarEntry(
                symbol=symbol,
                company_name=name,
                timing=timing,
                scheduled_date=day,
                scheduled_time=scheduled,
                eps_estimate=eps_est,
                revenue_estimate=rev_est,
                eps_actual=round(eps_est * (0.9 + rng.random() * 0.2), 2) if released else None,
                revenue_actual=(
                    round(rev_est * (0.95 + rng.random() * 0.1)) if released else None
                ),
            )
        )
    return entries


def mock_quote(
    symbol: str,
    session: SessionState,
    rng: random.Random,
    company_name: str | None = None,
) -> Quote:
    """Random quote around the symbol's reference price."""
    symbol = symbol.upper()
    base = MOCK_PRICES.get(symbol, DEFAULT_BASE_PRICE)
    change = (rng.random() - 0.5) * 10
    current = base + change

    after_hours = None
    if session is SessionState.AFTER_HOURS:
        ah_change = (rng.random() - 0.5) * 5
        after_hours = AfterHoursPrice(
            price=round(current + ah_change, 2),
            change=round(ah_change, 2),
            change_percent=round(ah_change / current * 100, 2),
        )

    return Quote(
        symbol=symbol,
        current_price=round(current, 2),
        change=round(change, 2),
        change_percent=round(change / base * 100, 2),
        previous_close=base,
        after_hours=after_hours,
        company_name=company_name,
        industry=MOCK_INDUSTRIES.get(symbol),
    )


def mock_price_history(
    symbol: str,
    days: int,
    rng: random.Random,
    end: date | None = None,
    volatility: float = 0.02,
) -> list[PriceBar]:
    """Random-walk daily bars for the last ``days`` days, oldest first."""
    end = end or date.today()
    price = MOCK_PRICES.get(symbol.upper(), DEFAULT_BASE_PRICE)
    bars: list[PriceBar] = []

    for offset in range(days, -1, -1):
        price += (rng.random() - 0.5) * 2 * volatility * price
        open_ = price + (rng.random() - 0.5) * volatility * price
        close = price
        bars.append(
            PriceBar(
                date=end - timedelta(days=offset),
                open=round(open_, 2),
                high=round(max(open_, close) * (1 + rng.random() * volatility), 2),
                low=round(min(open_, close) * (1 - rng.random() * volatility), 2),
                close=round(close, 2),
                volume=rng.randint(1_000_000, 11_000_000),
            )
        )
    return bars


def mock_report_analysis(symbol: str, quarter: str | None = None) -> ReportAnalysis:
    return ReportAnalysis(
        summary=(
            f"This is a MOCK summary for {symbol.upper()}. No live report was found "
            "or API keys are missing."
        ),
        sentiment="neutral",
        key_takeaways=("Mock Data Point 1", "Mock Data Point 2", "Mock Data Point 3"),
        report_url="https://example.com/mock-report",
        quarter=quarter,
    )
