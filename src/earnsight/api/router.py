"""Top-level API router, mounted under /api by the app."""

from fastapi import APIRouter

from earnsight.api.routes import analysis, calendar, history, quotes, sp500, system

api_router = APIRouter()
api_router.include_router(quotes.router, tags=["quotes"])
api_router.include_router(history.router, tags=["history"])
api_router.include_router(calendar.router, tags=["earnings"])
api_router.include_router(sp500.router, tags=["sp500"])
api_router.include_router(analysis.router, tags=["analysis"])
api_router.include_router(system.router, prefix="/system", tags=["system"])
