"""S&P 500 constituents endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Response

from earnsight.core.constants import SP500_CACHE_MAX_AGE
from earnsight.core.dependencies import HttpClientDep, SettingsDep, SP500CacheDep
from earnsight.core.exceptions import UpstreamError
from earnsight.providers.sp500 import fetch_sp500_symbols

router = APIRouter()


@router.get("/sp500")
async def get_sp500(
    cache: SP500CacheDep,
    client: HttpClientDep,
    settings: SettingsDep,
    response: Response,
) -> list[str]:
    """Get the current S&P 500 symbols."""

    async def load() -> list[str]:
        return await fetch_sp500_symbols(client, settings.sp500_csv_url)

    symbols = await cache.get(load)
    if not symbols:
        raise UpstreamError("Failed to fetch S&P 500 data")
    response.headers["Cache-Control"] = f"public, s-maxage={SP500_CACHE_MAX_AGE}"
    return sorted(symbols)
