"""Upstream market data providers.

Usage:
    from earnsight.providers import MarketDataProvider, create_market_data_provider
"""

from earnsight.providers.base import MarketDataProvider
from earnsight.providers.factory import create_market_data_provider
from earnsight.providers.finnhub import FinnhubProvider
from earnsight.providers.fmp import FmpProvider
from earnsight.providers.rate_limit import RateLimiter

__all__ = [
    "MarketDataProvider",
    "create_market_data_provider",
    "FinnhubProvider",
    "FmpProvider",
    "RateLimiter",
]
