"""Finnhub provider implementation of MarketDataProvider."""

from earnsight.providers.finnhub.client import (
    FinnhubProvider,
    bars_from_candles,
    quote_from_finnhub,
)

__all__ = [
    "FinnhubProvider",
    "bars_from_candles",
    "quote_from_finnhub",
]
