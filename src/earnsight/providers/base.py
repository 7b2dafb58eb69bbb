"""Abstract provider protocol for upstream market data.

The gateway talks to exactly one upstream (Finnhub or FMP, chosen by
``settings.data_provider``). Both implement ``MarketDataProvider`` so routes
never branch on the provider.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Protocol, runtime_checkable

from earnsight.models import BatchResult, PriceBar, Quote
from earnsight.processing.calendar import CalendarShape


@runtime_checkable
class MarketDataProvider(Protocol):
    """Protocol for upstream quote, history and earnings-calendar data."""

    calendar_shape: CalendarShape
    calendar_cache_max_age: int

    async def get_quote(self, symbol: str) -> Quote:
        """Get a quote enriched with company profile fields.

        Raises:
            UpstreamError: the upstream failed or has no data for the symbol
        """
        ...

    async def get_quotes(self, symbols: list[str]) -> BatchResult[Quote]:
        """Get basic quotes for several symbols; failed symbols are reported, not raised."""
        ...

    async def get_history(self, symbol: str, days: int) -> list[PriceBar]:
        """Get daily bars for the last ``days`` days, oldest first."""
        ...

    async def get_earnings_calendar(self, day: date) -> Any:
        """Get the raw earnings calendar payload for one day, in ``calendar_shape``."""
        ...

    async def close(self) -> None:
        """Clean up resources."""
        ...
