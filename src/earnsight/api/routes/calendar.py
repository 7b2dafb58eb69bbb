"""Earnings calendar endpoint (upstream payload, primary listings only)."""

from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, Query, Response

from earnsight.core.dependencies import ProviderDep
from earnsight.core.logging import get_logger
from earnsight.processing.calendar import filter_primary_listings

logger = get_logger(__name__)

router = APIRouter()


@router.get("/earnings-calendar")
async def get_earnings_calendar(
    provider: ProviderDep,
    response: Response,
    target_date: date = Query(
        default_factory=date.today,
        alias="date",
        description="Date to get earnings for (YYYY-MM-DD)",
    ),
) -> Any:
    """Get the day's earnings calendar in the upstream provider's shape.

    Foreign listings (SHOP.TO, SAP.DE) are removed; share classes (BRK.B) stay.
    """
    payload = await provider.get_earnings_calendar(target_date)
    filtered = filter_primary_listings(payload, provider.calendar_shape)
    response.headers["Cache-Control"] = f"public, s-maxage={provider.calendar_cache_max_age}"
    return filtered
