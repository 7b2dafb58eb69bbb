"""Earnings report analysis endpoint."""

from __future__ import annotations

from typing import Any

import httpx
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from pydantic_ai.exceptions import AgentRunError

from earnsight.core.dependencies import ReportAnalyzerDep
from earnsight.core.exceptions import ConfigurationError, UpstreamError

router = APIRouter()


class AnalyzeEarningsRequest(BaseModel):
    """Request body for POST /analyze-earnings."""

    symbol: str


@router.post("/analyze-earnings")
async def analyze_earnings(
    body: AnalyzeEarningsRequest,
    analyzer: ReportAnalyzerDep,
) -> dict[str, Any]:
    """Find the latest earnings release for a symbol and summarize it."""
    symbol = body.symbol.strip().upper()
    if not symbol:
        raise HTTPException(status_code=400, detail="Symbol is required")

    try:
        analysis = await analyzer.analyze_earnings_report(symbol)
    except httpx.HTTPError as e:
        raise UpstreamError(f"Failed to download report: {e}") from e
    except AgentRunError as e:
        raise UpstreamError(f"Failed to analyze report: {e}") from e
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=f"Report analysis not available ({e})")
    return analysis.model_dump(mode="json", by_alias=True)
