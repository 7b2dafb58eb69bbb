"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from typing import Annotated

import httpx
from fastapi import Depends, HTTPException

from earnsight.config import Settings, get_settings
from earnsight.core.exceptions import ConfigurationError
from earnsight.core.logging import get_logger
from earnsight.processing.report import ReportAnalyzer
from earnsight.processing.sp500 import SymbolSetCache
from earnsight.providers import MarketDataProvider, create_market_data_provider

logger = get_logger(__name__)

# Type aliases for cleaner dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Module-level singletons (initialised lazily on first use)
_provider: MarketDataProvider | None = None
_report_analyzer: ReportAnalyzer | None = None
_sp500_cache: SymbolSetCache | None = None
_http_client: httpx.AsyncClient | None = None


def get_provider(settings: SettingsDep) -> MarketDataProvider:
    """Get or create the configured upstream provider."""
    global _provider
    if _provider is None:
        try:
            _provider = create_market_data_provider(settings)
        except ConfigurationError as e:
            raise HTTPException(status_code=503, detail=f"Market data not available ({e})")
    return _provider


def get_report_analyzer() -> ReportAnalyzer:
    """Get or create singleton report analyzer."""
    global _report_analyzer
    if _report_analyzer is None:
        _report_analyzer = ReportAnalyzer()
    return _report_analyzer


def get_sp500_cache() -> SymbolSetCache:
    """Get or create the process-wide S&P 500 symbol cache."""
    global _sp500_cache
    if _sp500_cache is None:
        _sp500_cache = SymbolSetCache()
    return _sp500_cache


def get_http_client() -> httpx.AsyncClient:
    """Get or create the shared client for plain downloads (constituents CSV)."""
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(timeout=30.0, follow_redirects=True)
    return _http_client


async def close_dependencies() -> None:
    """Close singletons that hold network resources."""
    global _provider, _report_analyzer, _http_client
    if _provider is not None:
        await _provider.close()
        _provider = None
    if _report_analyzer is not None:
        await _report_analyzer.close()
        _report_analyzer = None
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None
    logger.debug("Gateway dependencies closed")


# Annotated dependencies for use in route handlers
ProviderDep = Annotated[MarketDataProvider, Depends(get_provider)]
ReportAnalyzerDep = Annotated[ReportAnalyzer, Depends(get_report_analyzer)]
SP500CacheDep = Annotated[SymbolSetCache, Depends(get_sp500_cache)]
HttpClientDep = Annotated[httpx.AsyncClient, Depends(get_http_client)]
