"""S&P 500 constituents from the public datasets CSV.

Source: https://github.com/datasets/s-and-p-500-companies (first column is the symbol).
"""

from __future__ import annotations

import csv
import io

import httpx

from earnsight.core.constants import DEFAULT_SP500_CSV_URL
from earnsight.core.exceptions import UpstreamError
from earnsight.core.logging import get_logger

logger = get_logger(__name__)


def parse_constituents_csv(text: str) -> list[str]:
    """Extract upper-case symbols from the first column, skipping the header."""
    reader = csv.reader(io.StringIO(text))
    next(reader, None)
    symbols: list[str] = []
    for row in reader:
        if row and row[0].strip():
            symbols.append(row[0].strip().upper())
    return symbols


async def fetch_sp500_symbols(
    client: httpx.AsyncClient,
    url: str = DEFAULT_SP500_CSV_URL,
) -> list[str]:
    """Download and parse the constituents list.

    Raises:
        UpstreamError: download failed
    """
    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("Failed to fetch S&P 500 CSV", url=url, error=str(e))
        raise UpstreamError(f"Failed to fetch S&P 500 data: {e}") from e

    symbols = parse_constituents_csv(response.text)
    logger.debug("Fetched S&P 500 constituents", count=len(symbols))
    return symbols
