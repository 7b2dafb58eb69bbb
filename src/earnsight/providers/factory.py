"""Provider factory for the configured upstream market data provider.

Usage:
    from earnsight.providers import create_market_data_provider

    provider = create_market_data_provider(get_settings())
    quote = await provider.get_quote("AAPL")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from earnsight.core.exceptions import ConfigurationError
from earnsight.core.logging import get_logger
from earnsight.providers.base import MarketDataProvider
from earnsight.providers.finnhub import FinnhubProvider
from earnsight.providers.fmp import FmpProvider

if TYPE_CHECKING:
    from earnsight.config import Settings

logger = get_logger(__name__)


def create_market_data_provider(
    settings: Settings,
    api_key: str | None = None,
) -> MarketDataProvider:
    """Create the market data provider selected by ``settings.data_provider``.

    Args:
        settings: Application settings
        api_key: Optional API key override (uses settings if not provided)

    Raises:
        ConfigurationError: the provider's API key is missing
    """
    provider_type = settings.data_provider
    key = api_key or settings.upstream_api_key()

    if provider_type == "finnhub":
        if not key:
            raise ConfigurationError("Finnhub API key not configured")
        logger.debug("Creating FinnhubProvider")
        return FinnhubProvider(
            api_key=key,
            base_url=settings.finnhub_api_url,
            batch_limit=settings.gateway_batch_limit,
        )

    if provider_type == "fmp":
        if not key:
            raise ConfigurationError("FMP API key not configured")
        logger.debug("Creating FmpProvider")
        return FmpProvider(
            api_key=key,
            base_url=settings.fmp_api_url,
            batch_limit=settings.gateway_batch_limit,
        )

    raise ConfigurationError(f"Unsupported data provider: {provider_type}")
