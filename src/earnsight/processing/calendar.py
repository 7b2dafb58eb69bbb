"""Earnings calendar normalization.

Each upstream provider returns its calendar in its own shape:

- Finnhub: ``{"earningsCalendar": [{"symbol", "date", "hour", "epsEstimate", ...}]}``
- FMP: ``[{"symbol", "date", "time", "epsEstimated", "eps", ...}]``

One normalizer per shape maps the payload to canonical ``CalendarEntry``
objects. The shape is selected by configuration (``settings.data_provider``),
never sniffed from the payload.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Protocol

from earnsight.core.constants import FOREIGN_EXCHANGE_SUFFIXES, MAX_CLASS_SUFFIX_LENGTH
from earnsight.core.exceptions import ShapeMismatchError
from earnsight.core.logging import get_logger
from earnsight.models import CalendarEntry, EarningsTiming

logger = get_logger(__name__)


class CalendarShape(str, Enum):
    """Calendar payload layouts, one per upstream provider."""

    FINNHUB = "finnhub"
    FMP = "fmp"


# =============================================================================
# Heuristics
# =============================================================================


def infer_timing(text: str | None) -> EarningsTiming:
    """Guess the announcement timing from a free-text hour/time field.

    Case-insensitive substring match: "bmo"/"before" means before the open,
    "amc"/"after" means after the close, anything else (including an empty
    field or "dmh") is treated as during market hours. This is a heuristic,
    not a parser: "after lunch" would be read as after the close.
    """
    if not text or not isinstance(text, str):
        return EarningsTiming.DURING_HOURS
    lowered = text.lower()
    if "bmo" in lowered or "before" in lowered:
        return EarningsTiming.BEFORE_OPEN
    if "amc" in lowered or "after" in lowered:
        return EarningsTiming.AFTER_CLOSE
    return EarningsTiming.DURING_HOURS


def is_primary_listing(symbol: str) -> bool:
    """Best-effort check that a ticker is a primary US listing.

    Plain tickers (AAPL) are kept. A single short suffix is treated as a share
    class (BRK.A, BF.B) unless it is a known foreign-exchange code (SHOP.TO,
    SAP.DE). Anything with more than one separator is dropped. Expect the odd
    false positive/negative at the margin.
    """
    if not symbol:
        return False
    parts = symbol.upper().split(".")
    if len(parts) == 1:
        return True
    if len(parts) != 2:
        return False
    suffix = parts[1]
    return 0 < len(suffix) <= MAX_CLASS_SUFFIX_LENGTH and suffix not in FOREIGN_EXCHANGE_SUFFIXES


def _parse_float(value: Any) -> float | None:
    """Parse a number that may arrive as a string, "N/A" or null."""
    if value is None or value == "" or value == "N/A":
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def _parse_text(value: Any) -> str | None:
    """Free-text field, or None when absent, blank or not a string."""
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _parse_date(value: Any, default: date) -> date:
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            logger.debug("Unparseable calendar date", value=value)
    return default


# =============================================================================
# Normalizers
# =============================================================================


class CalendarNormalizer(Protocol):
    """Maps one provider's calendar payload to canonical entries."""

    shape: CalendarShape

    def extract_rows(self, payload: Any) -> list[Any]:
        """Return the raw row list, raising ShapeMismatchError on the wrong shape."""
        ...

    def to_entry(self, row: dict[str, Any], default_date: date) -> CalendarEntry:
        """Map one raw row to a CalendarEntry."""
        ...


class FinnhubCalendarNormalizer:
    """``{"earningsCalendar": [...]}`` payloads from Finnhub ``/calendar/earnings``."""

    shape = CalendarShape.FINNHUB

    def extract_rows(self, payload: Any) -> list[Any]:
        if not isinstance(payload, dict):
            raise ShapeMismatchError(f"expected object, got {type(payload).__name__}")
        rows = payload.get("earningsCalendar")
        if not isinstance(rows, list):
            raise ShapeMismatchError("missing earningsCalendar array")
        return rows

    def to_entry(self, row: dict[str, Any], default_date: date) -> CalendarEntry:
        hour = _parse_text(row.get("hour"))
        return CalendarEntry(
            symbol=str(row["symbol"]).strip().upper(),
            # Finnhub's calendar carries no company name; the quote fills it in
            company_name=str(row.get("name") or ""),
            timing=infer_timing(hour),
            scheduled_date=_parse_date(row.get("date"), default_date),
            scheduled_time=hour,
            eps_estimate=_parse_float(row.get("epsEstimate")),
            revenue_estimate=_parse_float(row.get("revenueEstimate")),
            eps_actual=_parse_float(row.get("epsActual")),
            revenue_actual=_parse_float(row.get("revenueActual")),
        )


class FmpCalendarNormalizer:
    """Bare-array payloads from FMP ``/earning_calendar``."""

    shape = CalendarShape.FMP

    def extract_rows(self, payload: Any) -> list[Any]:
        if not isinstance(payload, list):
            raise ShapeMismatchError(f"expected array, got {type(payload).__name__}")
        return payload

    def to_entry(self, row: dict[str, Any], default_date: date) -> CalendarEntry:
        time = _parse_text(row.get("time"))
        if time == "--":
            time = None
        return CalendarEntry(
            symbol=str(row["symbol"]).strip().upper(),
            company_name=str(row.get("name") or row.get("companyName") or ""),
            timing=infer_timing(time),
            scheduled_date=_parse_date(row.get("date"), default_date),
            scheduled_time=time,
            eps_estimate=_parse_float(row.get("epsEstimated")),
            revenue_estimate=_parse_float(row.get("revenueEstimated")),
            eps_actual=_parse_float(row.get("eps")),
            revenue_actual=_parse_float(row.get("revenue")),
        )


_NORMALIZERS: dict[CalendarShape, CalendarNormalizer] = {
    CalendarShape.FINNHUB: FinnhubCalendarNormalizer(),
    CalendarShape.FMP: FmpCalendarNormalizer(),
}


def get_normalizer(shape: CalendarShape | str) -> CalendarNormalizer:
    """Get the normalizer for a configured provider shape."""
    return _NORMALIZERS[CalendarShape(shape)]


def normalize(
    payload: Any,
    shape: CalendarShape | str,
    default_date: date | None = None,
) -> list[CalendarEntry]:
    """Normalize a provider calendar payload into CalendarEntry objects.

    Args:
        payload: Decoded JSON as returned by the calendar endpoint
        shape: Which provider layout the payload is in
        default_date: Date to use for rows without a parseable date

    Returns:
        Entries in payload order, one per symbol (first occurrence wins).
        An unexpected payload shape yields an empty list and a warning; a
        row that cannot be mapped is skipped with a warning.
    """
    normalizer = get_normalizer(shape)
    fallback_date = default_date or date.today()

    try:
        rows = normalizer.extract_rows(payload)
    except ShapeMismatchError as e:
        logger.warning(
            "Unexpected calendar payload shape", shape=normalizer.shape.value, error=str(e)
        )
        return []

    entries: list[CalendarEntry] = []
    seen: set[str] = set()
    for row in rows:
        if not isinstance(row, dict) or not str(row.get("symbol") or "").strip():
            logger.debug("Skipping calendar row without symbol", row=row)
            continue
        try:
            entry = normalizer.to_entry(row, fallback_date)
        except (TypeError, ValueError) as e:
            logger.warning(
                "Skipping malformed calendar row",
                shape=normalizer.shape.value,
                symbol=row.get("symbol"),
                error=str(e),
            )
            continue
        if entry.symbol in seen:
            continue
        seen.add(entry.symbol)
        entries.append(entry)

    logger.debug("Normalized earnings calendar", shape=normalizer.shape.value, count=len(entries))
    return entries


def filter_primary_listings(payload: Any, shape: CalendarShape | str) -> Any:
    """Drop non-primary listings from a raw payload, keeping its provider shape."""
    normalizer = get_normalizer(shape)
    try:
        rows = normalizer.extract_rows(payload)
    except ShapeMismatchError as e:
        logger.warning("Cannot filter calendar payload", shape=normalizer.shape.value, error=str(e))
        return payload

    kept = [
        row
        for row in rows
        if isinstance(row, dict) and is_primary_listing(str(row.get("symbol") or ""))
    ]
    if normalizer.shape is CalendarShape.FINNHUB:
        return {**payload, "earningsCalendar": kept}
    return kept
