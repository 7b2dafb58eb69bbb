"""Finnhub market data provider.

Endpoints used (free tier, 60 calls/min across all endpoints):
- /quote                 current price, change, day range
- /stock/profile2        company name, industry, market cap, shares
- /stock/candle          daily OHLCV history (parallel arrays, oldest first)
- /calendar/earnings     earnings calendar ({"earningsCalendar": [...]})

Finnhub has no batch quote endpoint, so batch quotes fan out to one /quote
call per symbol.
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timedelta, timezone
from typing import Any

import httpx
import orjson

from earnsight.core.constants import DEFAULT_FINNHUB_API_URL, FINNHUB_CALENDAR_CACHE_MAX_AGE
from earnsight.core.exceptions import UpstreamError
from earnsight.core.logging import get_logger
from earnsight.models import BatchResult, PriceBar, Quote
from earnsight.processing.calendar import CalendarShape
from earnsight.processing.quotes import BatchQuoteFetcher
from earnsight.providers.rate_limit import RateLimiter

logger = get_logger(__name__)

# Finnhub reports market cap and shares outstanding in millions
_MILLION = 1_000_000


def quote_from_finnhub(
    symbol: str,
    data: dict[str, Any],
    profile: dict[str, Any] | None = None,
) -> Quote:
    """Map a Finnhub /quote (+ optional /stock/profile2) response to a Quote.

    Raises:
        UpstreamError: the response has no price (Finnhub answers unknown
            symbols with all-zero fields)
    """
    current = data.get("c")
    if not current:
        raise UpstreamError(f"No quote data for {symbol}")
    profile = profile or {}
    market_cap = profile.get("marketCapitalization")
    shares = profile.get("shareOutstanding")
    return Quote(
        symbol=symbol.upper(),
        current_price=current,
        change=data.get("d") or 0.0,
        change_percent=data.get("dp") or 0.0,
        day_high=data.get("h"),
        day_low=data.get("l"),
        open=data.get("o"),
        previous_close=data.get("pc"),
        timestamp=data.get("t"),
        company_name=profile.get("name") or symbol.upper(),
        industry=profile.get("finnhubIndustry") or None,
        market_cap=market_cap * _MILLION if market_cap else None,
        shares_outstanding=shares * _MILLION if shares else None,
    )


def bars_from_candles(data: dict[str, Any]) -> list[PriceBar]:
    """Zip Finnhub's parallel candle arrays into bars, oldest first."""
    if data.get("s") == "no_data":
        return []
    timestamps = data.get("t") or []
    bars = [
        PriceBar(
            date=datetime.fromtimestamp(ts, tz=timezone.utc).date(),
            open=data["o"][i],
            high=data["h"][i],
            low=data["l"][i],
            close=data["c"][i],
            volume=int(data["v"][i]),
        )
        for i, ts in enumerate(timestamps)
    ]
    return sorted(bars, key=lambda b: b.date)


class FinnhubProvider:
    """Finnhub implementation of MarketDataProvider.

    Usage:
        provider = FinnhubProvider(api_key="your_key")
        quote = await provider.get_quote("AAPL")
        await provider.close()
    """

    calendar_shape = CalendarShape.FINNHUB
    calendar_cache_max_age = FINNHUB_CALENDAR_CACHE_MAX_AGE

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_FINNHUB_API_URL,
        rate_limiter: RateLimiter | None = None,
        batch_limit: int = 30,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._rate_limiter = rate_limiter or RateLimiter()
        self._batch_limit = batch_limit
        self._http_client: httpx.AsyncClient | None = None

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=30.0)
        return self._http_client

    async def _fetch_finnhub(self, endpoint: str, params: dict[str, str | int]) -> Any:
        """Rate-limited GET against the Finnhub API.

        Raises:
            UpstreamError: non-2xx status, transport failure or invalid JSON
        """
        await self._rate_limiter.acquire()
        client = self._get_http_client()
        try:
            response = await client.get(
                f"{self._base_url}{endpoint}",
                params={**params, "token": self._api_key},
            )
            response.raise_for_status()
            return orjson.loads(response.content)
        except httpx.HTTPStatusError as e:
            logger.warning("Finnhub API error", endpoint=endpoint, status=e.response.status_code)
            raise UpstreamError(f"Finnhub API error: {e.response.status_code}") from e
        except (httpx.HTTPError, orjson.JSONDecodeError) as e:
            logger.warning("Finnhub API request failed", endpoint=endpoint, error=str(e))
            raise UpstreamError(f"Finnhub API request failed: {e}") from e

    async def _get_profile(self, symbol: str) -> dict[str, Any]:
        # Profile is best-effort: empty for ETFs and often rate limited on free tier
        try:
            data = await self._fetch_finnhub("/stock/profile2", {"symbol": symbol})
        except UpstreamError:
            return {}
        return data if isinstance(data, dict) else {}

    async def get_quote(self, symbol: str) -> Quote:
        symbol = symbol.upper()
        data, profile = await asyncio.gather(
            self._fetch_finnhub("/quote", {"symbol": symbol}),
            self._get_profile(symbol),
        )
        if not isinstance(data, dict):
            raise UpstreamError(f"Unexpected quote payload for {symbol}")
        return quote_from_finnhub(symbol, data, profile)

    async def _get_basic_quote(self, symbol: str) -> Quote:
        # Profile call skipped to save quota; name falls back to the symbol
        data = await self._fetch_finnhub("/quote", {"symbol": symbol})
        if not isinstance(data, dict):
            raise UpstreamError(f"Unexpected quote payload for {symbol}")
        return quote_from_finnhub(symbol, data)

    async def get_quotes(self, symbols: list[str]) -> BatchResult[Quote]:
        fetcher = BatchQuoteFetcher(
            fetch_one=self._get_basic_quote,
            chunk_size=self._batch_limit,
            chunk_delay=0.0,
        )
        return await fetcher.fetch_batch(symbols)

    async def get_history(self, symbol: str, days: int) -> list[PriceBar]:
        to_ts = int(datetime.now(tz=timezone.utc).timestamp())
        from_ts = to_ts - int(timedelta(days=days).total_seconds())
        data = await self._fetch_finnhub(
            "/stock/candle",
            {"symbol": symbol.upper(), "resolution": "D", "from": from_ts, "to": to_ts},
        )
        if not isinstance(data, dict):
            raise UpstreamError(f"Unexpected candle payload for {symbol}")
        try:
            return bars_from_candles(data)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise UpstreamError(f"Malformed candle payload for {symbol}: {e}") from e

    async def get_earnings_calendar(self, day: date) -> Any:
        date_str = day.isoformat()
        data = await self._fetch_finnhub("/calendar/earnings", {"from": date_str, "to": date_str})
        logger.debug(
            "Fetched Finnhub earnings calendar",
            date=date_str,
            count=len(data.get("earningsCalendar") or []) if isinstance(data, dict) else None,
        )
        return data

    async def close(self) -> None:
        """Clean up resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("FinnhubProvider closed")
