"""S&P 500 membership: populate-once symbol cache and major/other partition."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Sequence

from earnsight.core.logging import get_logger
from earnsight.models import EnrichedStock

logger = get_logger(__name__)

SymbolLoader = Callable[[], Awaitable[Iterable[str]]]


class SymbolSetCache:
    """Process-lifetime cache of an upper-case symbol set.

    The first successful ``get()`` populates the set; it is never refreshed
    afterwards (constituents change a few times a year). A failed or empty load
    is not cached, so the next caller tries again. Concurrent first callers are
    serialized on a lock and only one of them runs the loader.

    Usage:
        cache = SymbolSetCache()
        symbols = await cache.get(service.fetch_sp500_list)
    """

    def __init__(self) -> None:
        self._symbols: frozenset[str] | None = None
        self._lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self._symbols is not None

    async def get(self, loader: SymbolLoader) -> frozenset[str]:
        """Return the cached set, loading it on first use.

        Returns an empty set (without caching it) when the loader fails.
        """
        # Fast path, no lock needed once populated
        if self._symbols is not None:
            return self._symbols

        async with self._lock:
            if self._symbols is not None:
                return self._symbols

            try:
                loaded = frozenset(s.strip().upper() for s in await loader() if s and s.strip())
            except Exception as e:
                logger.warning("Failed to load S&P 500 list", error=str(e))
                return frozenset()

            if not loaded:
                logger.warning("S&P 500 list loaded empty, not caching")
                return frozenset()

            self._symbols = loaded
            logger.debug("Loaded S&P 500 list", count=len(loaded))
            return loaded


def is_member(symbol: str, symbols: frozenset[str] | set[str]) -> bool:
    """Case-insensitive membership test.

    An empty set means the list is unavailable, and nothing counts as a member.
    """
    if not symbols:
        return False
    return symbol.upper() in symbols


def partition(
    stocks: Sequence[EnrichedStock],
    symbols: frozenset[str] | set[str],
) -> tuple[list[EnrichedStock], list[EnrichedStock], bool]:
    """Split stocks into (members, non-members, partitioned).

    ``partitioned`` is False when the membership set is empty; every stock then
    lands in the non-member list.
    """
    major: list[EnrichedStock] = []
    other: list[EnrichedStock] = []
    for stock in stocks:
        (major if is_member(stock.symbol, symbols) else other).append(stock)
    return major, other, bool(symbols)
