"""System status and config endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from earnsight.core.dependencies import SettingsDep
from earnsight.core.session import is_market_open, market_now, refresh_interval, session_state

router = APIRouter()


@router.get("/market-status")
async def market_status(settings: SettingsDep) -> dict[str, object]:
    state = session_state(market_now(settings.market_timezone))
    return {
        "status": state.value,
        "isOpen": is_market_open(state),
        "refreshInterval": refresh_interval(state),
    }


@router.get("/config")
async def system_config(settings: SettingsDep) -> dict[str, object]:
    return {
        "env": settings.env,
        "data_provider": settings.data_provider,
        "mock_mode": settings.mock_mode,
        "upstream_configured": bool(settings.upstream_api_key()),
        "report_search_enabled": bool(settings.serper_api_key),
        "llm_provider": settings.llm_provider,
        "market_timezone": settings.market_timezone,
    }
