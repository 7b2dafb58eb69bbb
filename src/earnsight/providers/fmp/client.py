"""Financial Modeling Prep (FMP) market data provider.

Endpoints used:
- /quote/{symbols}                 quotes, comma-separated symbols in one call
- /historical-price-full/{symbol}  daily bars, newest first
- /earning_calendar                earnings calendar (bare array)
"""

from __future__ import annotations

from datetime import date
from typing import Any

import httpx
import orjson
from pydantic import ValidationError

from earnsight.core.constants import (
    DEFAULT_FMP_API_URL,
    FMP_CALENDAR_CACHE_MAX_AGE,
    FMP_RATE_LIMIT_CALLS_PER_MINUTE,
)
from earnsight.core.exceptions import UpstreamError
from earnsight.core.logging import get_logger
from earnsight.models import BatchResult, PriceBar, Quote
from earnsight.processing.calendar import CalendarShape
from earnsight.processing.quotes import BatchQuoteFetcher
from earnsight.providers.rate_limit import RateLimiter

logger = get_logger(__name__)


def quote_from_fmp(data: dict[str, Any]) -> Quote:
    """Map one FMP /quote object to a Quote.

    Raises:
        UpstreamError: the object has no symbol, or a price or other field
            that does not parse
    """
    symbol = str(data.get("symbol") or "").upper()
    if not symbol or data.get("price") is None:
        raise UpstreamError(f"No quote data for {symbol or 'unknown symbol'}")
    try:
        return _build_quote(symbol, data)
    except ValidationError as e:
        raise UpstreamError(f"Malformed quote for {symbol}: {e.error_count()} bad field(s)") from e


def _build_quote(symbol: str, data: dict[str, Any]) -> Quote:
    return Quote(
        symbol=symbol,
        current_price=data["price"],
        change=data.get("change") or 0.0,
        change_percent=data.get("changesPercentage") or 0.0,
        day_high=data.get("dayHigh"),
        day_low=data.get("dayLow"),
        open=data.get("open"),
        previous_close=data.get("previousClose"),
        timestamp=data.get("timestamp"),
        company_name=data.get("name") or symbol,
        market_cap=data.get("marketCap"),
        shares_outstanding=data.get("sharesOutstanding"),
    )


def bars_from_historical(data: dict[str, Any]) -> list[PriceBar]:
    """Map FMP's newest-first ``historical`` array to bars, oldest first."""
    rows = data.get("historical") or []
    bars = [
        PriceBar(
            date=row["date"],
            open=row["open"],
            high=row["high"],
            low=row["low"],
            close=row["close"],
            volume=int(row.get("volume") or 0),
        )
        for row in rows
    ]
    bars.reverse()
    return bars


class FmpProvider:
    """FMP implementation of MarketDataProvider.

    Usage:
        provider = FmpProvider(api_key="your_key")
        result = await provider.get_quotes(["AAPL", "MSFT"])
        await provider.close()
    """

    calendar_shape = CalendarShape.FMP
    calendar_cache_max_age = FMP_CALENDAR_CACHE_MAX_AGE

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_FMP_API_URL,
        rate_limiter: RateLimiter | None = None,
        batch_limit: int = 30,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._rate_limiter = rate_limiter or RateLimiter(FMP_RATE_LIMIT_CALLS_PER_MINUTE)
        self._batch_limit = batch_limit
        self._http_client: httpx.AsyncClient | None = None

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=30.0)
        return self._http_client

    async def _fetch_fmp(self, endpoint: str, params: dict[str, str | int] | None = None) -> Any:
        """Rate-limited GET against the FMP API.

        Raises:
            UpstreamError: non-2xx status, transport failure or invalid JSON
        """
        await self._rate_limiter.acquire()
        client = self._get_http_client()
        try:
            response = await client.get(
                f"{self._base_url}{endpoint}",
                params={**(params or {}), "apikey": self._api_key},
            )
            response.raise_for_status()
            data = orjson.loads(response.content)
        except httpx.HTTPStatusError as e:
            logger.warning("FMP API error", endpoint=endpoint, status=e.response.status_code)
            raise UpstreamError(f"FMP API error: {e.response.status_code}") from e
        except (httpx.HTTPError, orjson.JSONDecodeError) as e:
            logger.warning("FMP API request failed", endpoint=endpoint, error=str(e))
            raise UpstreamError(f"FMP API request failed: {e}") from e

        # FMP reports bad keys and quota exhaustion with 200 + {"Error Message": ...}
        if isinstance(data, dict) and "Error Message" in data:
            raise UpstreamError(f"FMP API error: {data['Error Message']}")
        return data

    async def get_quote(self, symbol: str) -> Quote:
        symbol = symbol.upper()
        data = await self._fetch_fmp(f"/quote/{symbol}")
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            raise UpstreamError(f"No quote data for {symbol}")
        return quote_from_fmp(data[0])

    async def get_quotes(self, symbols: list[str]) -> BatchResult[Quote]:
        fetcher = BatchQuoteFetcher(
            fetch_chunk=self._fetch_quote_chunk,
            chunk_size=self._batch_limit,
            chunk_delay=0.0,
        )
        return await fetcher.fetch_batch(symbols)

    async def _fetch_quote_chunk(self, chunk: list[str]) -> list[Quote]:
        """One /quote call for the chunk; unusable rows are left out."""
        data = await self._fetch_fmp(f"/quote/{','.join(chunk)}")
        quotes: list[Quote] = []
        for row in data if isinstance(data, list) else []:
            if not isinstance(row, dict):
                continue
            try:
                quotes.append(quote_from_fmp(row))
            except UpstreamError as e:
                logger.warning("Skipping unusable FMP quote", error=str(e))
        return quotes

    async def get_history(self, symbol: str, days: int) -> list[PriceBar]:
        symbol = symbol.upper()
        data = await self._fetch_fmp(f"/historical-price-full/{symbol}", {"timeseries": days})
        if not isinstance(data, dict):
            # Unknown symbols come back as {} or []
            return []
        try:
            return bars_from_historical(data)
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"Malformed history payload for {symbol}: {e}") from e

    async def get_earnings_calendar(self, day: date) -> Any:
        date_str = day.isoformat()
        data = await self._fetch_fmp("/earning_calendar", {"from": date_str, "to": date_str})
        logger.debug(
            "Fetched FMP earnings calendar",
            date=date_str,
            count=len(data) if isinstance(data, list) else None,
        )
        return data

    async def close(self) -> None:
        """Clean up resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("FmpProvider closed")
