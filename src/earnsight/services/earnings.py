"""Earnings-side service: calendar, enriched stocks and the daily dashboard.

Failure policy:
- single-symbol operations (``get_stock_with_earnings``) propagate errors, the
  caller legitimately has no data;
- multi-symbol operations drop the symbols that failed and report them in
  ``DailyEarnings.missing``; only whole-request failures (calendar endpoint
  down, missing credentials) propagate.
"""

from __future__ import annotations

import random
from collections import OrderedDict
from collections.abc import Callable
from datetime import date, datetime
from functools import partial
from typing import TYPE_CHECKING

from earnsight.core.constants import MOCK_CALENDAR_DAYS
from earnsight.core.exceptions import ShapeMismatchError, StockNotFoundError
from earnsight.core.logging import get_logger
from earnsight.core.session import market_now, session_state
from earnsight.models import CalendarEntry, DailyEarnings, EnrichedStock, ReportAnalysis
from earnsight.processing.calendar import normalize
from earnsight.processing.merge import merge
from earnsight.processing.mock import MOCK_SP500, mock_calendar, mock_report_analysis
from earnsight.processing.report import current_quarter
from earnsight.processing.sp500 import SymbolSetCache, partition

if TYPE_CHECKING:
    from earnsight.client.api_client import ApiClient
    from earnsight.config import Settings
    from earnsight.services.stock import StockService

logger = get_logger(__name__)


class EarningsService:
    """Build enriched earnings records from the calendar and live quotes.

    Usage:
        service = EarningsService(settings, api_client, stock_service, sp500_cache)
        today = await service.get_earnings_for_date()
        for stock in today.major:
            print(stock.symbol, stock.earnings.beat_status)
    """

    def __init__(
        self,
        settings: Settings,
        api_client: ApiClient,
        stock_service: StockService,
        sp500_cache: SymbolSetCache,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings
        self._api = api_client
        self._stocks = stock_service
        self._sp500 = sp500_cache
        self._rng = rng or random.Random(settings.mock_seed)
        self._clock: Callable[[], datetime] = clock or partial(market_now, settings.market_timezone)
        # Recent mock calendars, so repeated calls for a day agree on release status
        self._mock_calendars: OrderedDict[date, list[CalendarEntry]] = OrderedDict()

    # ─────────────────────────────────────────────────────────────
    # Calendar
    # ─────────────────────────────────────────────────────────────

    async def get_earnings_calendar(self, day: date | None = None) -> list[CalendarEntry]:
        """Normalized calendar for ``day`` (default today).

        Raises:
            ApiError: calendar endpoint failed
        """
        day = day or self._clock().date()
        if self._settings.mock_mode:
            return list(self._mock_calendar_for(day))

        payload = await self._api.get("/earnings-calendar", params={"date": day.isoformat()})
        entries = normalize(payload, self._settings.data_provider, default_date=day)
        logger.debug("Loaded earnings calendar", date=day.isoformat(), count=len(entries))
        return entries

    def _mock_calendar_for(self, day: date) -> list[CalendarEntry]:
        if day not in self._mock_calendars:
            self._mock_calendars[day] = mock_calendar(day, self._rng)
        self._mock_calendars.move_to_end(day)
        while len(self._mock_calendars) > MOCK_CALENDAR_DAYS:
            self._mock_calendars.popitem(last=False)
        return self._mock_calendars[day]

    # ─────────────────────────────────────────────────────────────
    # Enriched stocks
    # ─────────────────────────────────────────────────────────────

    async def get_stock_with_earnings(
        self,
        symbol: str,
        day: date | None = None,
    ) -> EnrichedStock:
        """Full record for one symbol, price history included.

        Raises:
            StockNotFoundError: symbol is not reporting on ``day``
            ApiError: quote or history request failed
        """
        symbol = symbol.strip().upper()
        calendar = await self.get_earnings_calendar(day)
        entry = next((e for e in calendar if e.symbol == symbol), None)
        if entry is None:
            raise StockNotFoundError(f"Stock not found: {symbol}")

        quote = await self._stocks.get_current_price(symbol)
        history = await self._stocks.get_price_history(symbol)
        now = self._clock()
        return merge(entry, quote, session_state(now), now, price_history=history)

    async def get_multiple_stocks_with_earnings(
        self,
        symbols: list[str],
        day: date | None = None,
    ) -> list[EnrichedStock]:
        """Records for several symbols, without price history.

        Symbols that are not on the calendar or whose quote failed are left out.
        """
        if not symbols:
            return []
        wanted = {s.strip().upper() for s in symbols}
        calendar = [e for e in await self.get_earnings_calendar(day) if e.symbol in wanted]
        for symbol in sorted(wanted - {e.symbol for e in calendar}):
            logger.warning("Symbol not on earnings calendar", symbol=symbol)
        stocks, _ = await self._enrich(calendar)
        return stocks

    async def get_earnings_for_date(self, day: date | None = None) -> DailyEarnings:
        """Every stock reporting on ``day``, split into S&P 500 members and the rest.

        Raises:
            ApiError: calendar endpoint failed
        """
        now = self._clock()
        day = day or now.date()
        calendar = await self.get_earnings_calendar(day)
        stocks, missing = await self._enrich(calendar)

        sp500 = await self.get_sp500_symbols()
        major, other, partitioned = partition(stocks, sp500)
        logger.info(
            "Built daily earnings",
            date=day.isoformat(),
            reporting=len(calendar),
            enriched=len(stocks),
            major=len(major),
            missing=len(missing),
        )
        return DailyEarnings(
            date=day,
            market_status=session_state(now),
            major=tuple(major),
            other=tuple(other),
            missing=tuple(missing),
            partitioned=partitioned,
        )

    async def _enrich(
        self, calendar: list[CalendarEntry]
    ) -> tuple[list[EnrichedStock], list[str]]:
        """Fetch quotes for calendar entries and merge. Returns (stocks, missing symbols)."""
        if not calendar:
            return [], []

        result = await self._stocks.get_quotes([e.symbol for e in calendar])
        quotes = {q.symbol: q for q in result.items}
        now = self._clock()
        session = session_state(now)

        stocks: list[EnrichedStock] = []
        missing: list[str] = []
        for entry in calendar:
            quote = quotes.get(entry.symbol)
            if quote is None:
                missing.append(entry.symbol)
                continue
            stocks.append(merge(entry, quote, session, now))
        return stocks, missing

    # ─────────────────────────────────────────────────────────────
    # S&P 500
    # ─────────────────────────────────────────────────────────────

    async def _load_sp500(self) -> list[str]:
        if self._settings.mock_mode:
            return sorted(MOCK_SP500)
        data = await self._api.get("/sp500")
        if not isinstance(data, list):
            raise ShapeMismatchError(f"expected symbol array, got {type(data).__name__}")
        return [s for s in data if isinstance(s, str)]

    async def get_sp500_symbols(self) -> frozenset[str]:
        """S&P 500 members, loaded once per process.

        Falls back to ``settings.sp500_fallback_symbols`` while the list cannot be
        loaded; an empty result disables the major/other split.
        """
        symbols = await self._sp500.get(self._load_sp500)
        fallback = self._settings.sp500_fallback_symbols
        if not symbols and fallback:
            logger.info("Using fallback S&P 500 list", count=len(fallback))
            return frozenset(fallback)
        return symbols

    # ─────────────────────────────────────────────────────────────
    # Report analysis
    # ─────────────────────────────────────────────────────────────

    async def analyze_report(self, symbol: str) -> ReportAnalysis:
        """AI summary of the symbol's latest earnings release.

        Raises:
            ClientError: report not found (404), PDF (415) or unusable (422)
            ApiError: analysis failed
        """
        symbol = symbol.strip().upper()
        if self._settings.mock_mode:
            return mock_report_analysis(symbol, current_quarter(self._clock()))
        data = await self._api.post("/analyze-earnings", json={"symbol": symbol})
        return ReportAnalysis.model_validate(data)
