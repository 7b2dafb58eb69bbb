"""CLI entry point for Earnsight."""

import argparse
import asyncio
import sys
from datetime import date

import orjson
import uvicorn

from earnsight.client import ApiClient
from earnsight.config import get_settings
from earnsight.core.exceptions import EarnsightError
from earnsight.core.logging import get_logger, setup_logging
from earnsight.processing.sp500 import SymbolSetCache
from earnsight.services import EarningsService, StockService

logger = get_logger(__name__)


async def _print_earnings(day: date | None) -> None:
    settings = get_settings()
    api_client = ApiClient.from_settings(settings)
    try:
        stocks = StockService(settings, api_client)
        earnings = EarningsService(settings, api_client, stocks, SymbolSetCache())
        result = await earnings.get_earnings_for_date(day)
    finally:
        await api_client.close()
    sys.stdout.buffer.write(
        orjson.dumps(result.model_dump(mode="json", by_alias=True), option=orjson.OPT_INDENT_2)
    )
    sys.stdout.write("\n")


def main() -> None:
    parser = argparse.ArgumentParser(description="Earnsight")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the API gateway")
    serve.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve.add_argument("--host", default="0.0.0.0", help="Bind host")
    serve.add_argument("--port", type=int, default=8000, help="Bind port")

    earnings = subparsers.add_parser("earnings", help="Print a day's enriched earnings as JSON")
    earnings.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Report date (YYYY-MM-DD, default today)",
    )

    args = parser.parse_args()

    if args.command == "serve":
        uvicorn.run(
            "earnsight.main:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
        )
        return

    setup_logging(get_settings())
    try:
        asyncio.run(_print_earnings(args.date))
    except EarnsightError as e:
        logger.error("Failed to load earnings", error=str(e))
        raise SystemExit(1) from e
