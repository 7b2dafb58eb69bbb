"""Financial Modeling Prep provider implementation of MarketDataProvider."""

from earnsight.providers.fmp.client import FmpProvider, bars_from_historical, quote_from_fmp

__all__ = [
    "FmpProvider",
    "bars_from_historical",
    "quote_from_fmp",
]
