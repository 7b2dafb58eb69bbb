"""Chunked multi-symbol quote fetching.

Symbols are split into fixed-size chunks that run one after another with a
pause in between, so a quota-limited upstream sees bounded bursts. Inside a
chunk the per-symbol calls run concurrently.

A failing symbol never fails the batch: it is logged, left out of the result,
and recorded in ``BatchResult.failures``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from pydantic import ValidationError

from earnsight.core.logging import get_logger
from earnsight.models import BatchResult, Quote

logger = get_logger(__name__)

FetchOne = Callable[[str], Awaitable[Quote]]
FetchChunk = Callable[[list[str]], Awaitable[list[Quote]]]
SleepFunc = Callable[[float], Awaitable[None]]


def parse_quote(data: Any, symbol: str | None = None) -> Quote:
    """Validate a gateway quote payload.

    Raises:
        ValueError: payload is not an object or lacks a usable price
    """
    if not isinstance(data, dict):
        raise ValueError(f"expected quote object, got {type(data).__name__}")
    if symbol is not None and not data.get("symbol"):
        data = {**data, "symbol": symbol}
    try:
        quote = Quote.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"malformed quote: {e.error_count()} validation errors") from e
    return quote.model_copy(update={"symbol": quote.symbol.upper()})


def chunked(items: Sequence[str], size: int) -> list[list[str]]:
    """Split ``items`` into consecutive lists of at most ``size`` elements."""
    if size < 1:
        raise ValueError("chunk size must be >= 1")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def normalize_symbols(symbols: Sequence[str]) -> list[str]:
    """Strip, upper-case and de-duplicate symbols, keeping first-seen order.

    Raises:
        ValueError: ``symbols`` is not a non-empty list/tuple of strings
    """
    if not isinstance(symbols, (list, tuple)):
        raise ValueError(f"symbols must be a list, got {type(symbols).__name__}")
    if not symbols:
        raise ValueError("symbols must not be empty")

    normalized: list[str] = []
    seen: set[str] = set()
    for raw in symbols:
        if not isinstance(raw, str):
            raise ValueError(f"symbol must be a string, got {type(raw).__name__}")
        symbol = raw.strip().upper()
        if symbol and symbol not in seen:
            seen.add(symbol)
            normalized.append(symbol)
    if not normalized:
        raise ValueError("symbols must not be empty")
    return normalized


class BatchQuoteFetcher:
    """Fetch quotes for many symbols in sequential, rate-limit-friendly chunks.

    Exactly one of ``fetch_one`` (concurrent per-symbol calls within a chunk)
    or ``fetch_chunk`` (one call per chunk, e.g. ``POST /batch-quotes``) must
    be given.

    Usage:
        fetcher = BatchQuoteFetcher(fetch_one=gateway_quote, chunk_size=5)
        quotes = await fetcher.fetch_quotes(["AAPL", "MSFT"])
    """

    def __init__(
        self,
        fetch_one: FetchOne | None = None,
        fetch_chunk: FetchChunk | None = None,
        chunk_size: int = 5,
        chunk_delay: float = 0.5,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        if (fetch_one is None) == (fetch_chunk is None):
            raise ValueError("Provide exactly one of fetch_one or fetch_chunk")
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self._fetch_one = fetch_one
        self._fetch_chunk = fetch_chunk
        self._chunk_size = chunk_size
        self._chunk_delay = chunk_delay
        self._sleep = sleep

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    async def fetch_quotes(self, symbols: Sequence[str]) -> list[Quote]:
        """Fetch quotes, silently dropping symbols that failed."""
        result = await self.fetch_batch(symbols)
        return result.items

    async def fetch_batch(self, symbols: Sequence[str]) -> BatchResult[Quote]:
        """Fetch quotes and report which symbols failed and why.

        Raises:
            ValueError: ``symbols`` is empty or not a list of strings
        """
        normalized = normalize_symbols(symbols)
        chunks = chunked(normalized, self._chunk_size)
        result: BatchResult[Quote] = BatchResult()

        for index, chunk in enumerate(chunks):
            if index > 0 and self._chunk_delay > 0:
                await self._sleep(self._chunk_delay)
            try:
                await self._run_chunk(chunk, result)
            except Exception as e:
                logger.warning(
                    "Quote chunk failed",
                    chunk=index,
                    symbols=chunk,
                    error=str(e),
                )
                result.failed_chunks += 1
                for symbol in chunk:
                    result.failures[symbol] = f"chunk failed: {e}"

        if result.failures:
            logger.info(
                "Quote batch completed with failures",
                requested=len(normalized),
                fetched=len(result.items),
                failed=sorted(result.failures),
            )
        else:
            logger.debug("Quote batch completed", requested=len(normalized), chunks=len(chunks))
        return result

    async def _run_chunk(self, chunk: list[str], result: BatchResult[Quote]) -> None:
        if self._fetch_chunk is not None:
            quotes = await self._fetch_chunk(chunk)
            by_symbol = {q.symbol.upper(): q for q in quotes}
            for symbol in chunk:
                quote = by_symbol.get(symbol)
                if quote is None:
                    logger.warning("Quote missing from batch response", symbol=symbol)
                    result.failures[symbol] = "missing from batch response"
                else:
                    result.items.append(_with_symbol(quote, symbol))
            return

        assert self._fetch_one is not None
        outcomes = await asyncio.gather(
            *[self._fetch_one(symbol) for symbol in chunk],
            return_exceptions=True,
        )
        for symbol, outcome in zip(chunk, outcomes):
            if isinstance(outcome, Quote):
                result.items.append(_with_symbol(outcome, symbol))
            elif isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.warning("Quote fetch failed", symbol=symbol, error=str(outcome))
                result.failures[symbol] = str(outcome) or type(outcome).__name__
            else:
                logger.warning("Quote fetch returned no data", symbol=symbol)
                result.failures[symbol] = "no data"


def _with_symbol(quote: Quote, symbol: str) -> Quote:
    if quote.symbol == symbol:
        return quote
    return quote.model_copy(update={"symbol": symbol})
