"""Quote endpoints proxied to the configured upstream."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Response
from pydantic import BaseModel

from earnsight.core.constants import QUOTE_CACHE_MAX_AGE
from earnsight.core.dependencies import ProviderDep, SettingsDep
from earnsight.core.logging import get_logger
from earnsight.processing.quotes import normalize_symbols

logger = get_logger(__name__)

router = APIRouter()


class BatchQuotesRequest(BaseModel):
    """Request body for POST /batch-quotes."""

    symbols: list[str]


@router.get("/quote")
async def get_quote(
    provider: ProviderDep,
    symbol: str = Query(..., min_length=1, description="Ticker symbol"),
) -> dict[str, Any]:
    """Get a quote with company profile fields for one symbol."""
    quote = await provider.get_quote(symbol.strip().upper())
    return quote.model_dump(mode="json", by_alias=True)


@router.post("/batch-quotes")
async def get_batch_quotes(
    body: BatchQuotesRequest,
    provider: ProviderDep,
    settings: SettingsDep,
    response: Response,
) -> list[dict[str, Any]]:
    """Get quotes for up to ``gateway_batch_limit`` symbols.

    Symbols the upstream has no data for are left out of the array.
    """
    try:
        symbols = normalize_symbols(body.symbols)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if len(symbols) > settings.gateway_batch_limit:
        raise HTTPException(
            status_code=400,
            detail=f"Maximum {settings.gateway_batch_limit} symbols per request",
        )

    result = await provider.get_quotes(symbols)
    if result.failures:
        logger.info("Batch quotes partially failed", failed=sorted(result.failures))

    response.headers["Cache-Control"] = f"public, s-maxage={QUOTE_CACHE_MAX_AGE}"
    return [q.model_dump(mode="json", by_alias=True) for q in result.items]
