"""Price-side service: quotes, price history and market status."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Callable
from datetime import datetime
from functools import partial
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from earnsight.core.exceptions import ShapeMismatchError, StockNotFoundError
from earnsight.core.logging import get_logger
from earnsight.core.session import is_market_open, market_now, session_state
from earnsight.models import BatchResult, PriceBar, Quote, SessionState
from earnsight.processing.mock import mock_price_history, mock_quote
from earnsight.processing.quotes import (
    BatchQuoteFetcher,
    SleepFunc,
    normalize_symbols,
    parse_quote,
)

if TYPE_CHECKING:
    from earnsight.client.api_client import ApiClient
    from earnsight.config import Settings

logger = get_logger(__name__)


def parse_history(payload: Any) -> list[PriceBar]:
    """Parse a ``{"historical": [...]}`` payload (oldest first by contract).

    Raises:
        ShapeMismatchError: payload is not the expected object/array shape
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("historical"), list):
        raise ShapeMismatchError("expected {historical: [...]}")
    try:
        return [PriceBar.model_validate(row) for row in payload["historical"]]
    except ValidationError as e:
        raise ShapeMismatchError(f"malformed price bar: {e.error_count()} validation errors") from e


class StockService:
    """Fetch prices through the API gateway, or synthesize them in mock mode.

    Usage:
        service = StockService(settings, api_client)
        quote = await service.get_current_price("AAPL")
        history = await service.get_price_history("AAPL", days=30)
    """

    def __init__(
        self,
        settings: Settings,
        api_client: ApiClient,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._settings = settings
        self._api = api_client
        self._rng = rng or random.Random(settings.mock_seed)
        self._clock: Callable[[], datetime] = clock or partial(market_now, settings.market_timezone)
        self._sleep = sleep
        self._fetcher = self._build_fetcher()

    def _build_fetcher(self) -> BatchQuoteFetcher:
        if self._settings.quote_fetch_mode == "per_symbol":
            return BatchQuoteFetcher(
                fetch_one=self.get_current_price,
                chunk_size=self._settings.quote_chunk_size,
                chunk_delay=self._settings.quote_chunk_delay,
                sleep=self._sleep,
            )
        return BatchQuoteFetcher(
            fetch_chunk=self._fetch_quote_chunk,
            chunk_size=self._settings.quote_chunk_size,
            chunk_delay=self._settings.quote_chunk_delay,
            sleep=self._sleep,
        )

    @property
    def fetcher(self) -> BatchQuoteFetcher:
        return self._fetcher

    # ─────────────────────────────────────────────────────────────
    # Market status
    # ─────────────────────────────────────────────────────────────

    def market_status(self, now: datetime | None = None) -> SessionState:
        return session_state(now or self._clock())

    def is_market_open(self, now: datetime | None = None) -> bool:
        return is_market_open(self.market_status(now))

    # ─────────────────────────────────────────────────────────────
    # Quotes
    # ─────────────────────────────────────────────────────────────

    async def get_current_price(self, symbol: str) -> Quote:
        """Get a quote for one symbol.

        Raises:
            ApiError: gateway request failed
            StockNotFoundError: gateway answered with an unusable quote
        """
        symbol = symbol.strip().upper()
        if self._settings.mock_mode:
            return mock_quote(symbol, self.market_status(), self._rng)

        data = await self._api.get("/quote", params={"symbol": symbol})
        try:
            return parse_quote(data, symbol)
        except ValueError as e:
            raise StockNotFoundError(f"No usable quote for {symbol}: {e}") from e

    async def _fetch_quote_chunk(self, symbols: list[str]) -> list[Quote]:
        data = await self._api.post("/batch-quotes", json={"symbols": symbols})
        if not isinstance(data, list):
            raise ShapeMismatchError(f"expected quote array, got {type(data).__name__}")
        quotes: list[Quote] = []
        for item in data:
            try:
                quotes.append(parse_quote(item))
            except ValueError as e:
                logger.warning("Skipping malformed batch quote", error=str(e))
        return quotes

    async def get_quotes(self, symbols: list[str]) -> BatchResult[Quote]:
        """Get quotes for many symbols in rate-limit-friendly chunks.

        Failed symbols are omitted from ``items`` and listed in ``failures``.

        Raises:
            ValueError: ``symbols`` is empty or not a list of strings
        """
        if self._settings.mock_mode:
            status = self.market_status()
            return BatchResult(
                items=[mock_quote(s, status, self._rng) for s in normalize_symbols(symbols)]
            )
        return await self._fetcher.fetch_batch(symbols)

    # ─────────────────────────────────────────────────────────────
    # History
    # ─────────────────────────────────────────────────────────────

    async def get_price_history(self, symbol: str, days: int | None = None) -> list[PriceBar]:
        """Daily bars for the last ``days`` days, oldest first.

        An unexpected payload shape yields an empty history and a warning.

        Raises:
            ApiError: gateway request failed
        """
        symbol = symbol.strip().upper()
        days = days or self._settings.history_days
        if self._settings.mock_mode:
            return mock_price_history(symbol, days, self._rng, end=self._clock().date())

        payload = await self._api.get("/stock-history", params={"symbol": symbol, "days": days})
        try:
            return parse_history(payload)
        except ShapeMismatchError as e:
            logger.warning("Unexpected history payload shape", symbol=symbol, error=str(e))
            return []
