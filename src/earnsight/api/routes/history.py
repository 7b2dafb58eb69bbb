"""Daily price history endpoint."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query, Response

from earnsight.core.constants import HISTORY_CACHE_MAX_AGE
from earnsight.core.dependencies import ProviderDep

router = APIRouter()


@router.get("/stock-history")
async def get_stock_history(
    provider: ProviderDep,
    response: Response,
    symbol: str = Query(..., min_length=1, description="Ticker symbol"),
    days: int = Query(30, ge=1, le=365, description="Days of history"),
) -> dict[str, Any]:
    """Get daily bars, oldest first."""
    bars = await provider.get_history(symbol.strip().upper(), days)
    response.headers["Cache-Control"] = f"public, s-maxage={HISTORY_CACHE_MAX_AGE}"
    return {"historical": [b.model_dump(mode="json", by_alias=True) for b in bars]}
