"""Pydantic models shared by the gateway and the enrichment pipeline.

Wire format is camelCase (``companyName``, ``changePercent``) to match the
dashboard's JSON contracts; Python code uses the snake_case field names.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class EarningsTiming(str, Enum):
    """When the company reports relative to the regular session."""

    BEFORE_OPEN = "BMO"
    AFTER_CLOSE = "AMC"
    DURING_HOURS = "DMH"


class SessionState(str, Enum):
    """Trading-calendar phase derived from wall-clock time."""

    PRE_MARKET = "pre-market"
    MARKET_HOURS = "market-hours"
    AFTER_HOURS = "after-hours"
    CLOSED = "closed"


class EarningsStatus(str, Enum):
    PENDING = "pending"
    RELEASED = "released"


class BeatStatus(str, Enum):
    BEAT = "beat"
    MEET = "meet"
    MISS = "miss"
    UNKNOWN = "unknown"


class WireModel(BaseModel):
    """Immutable model serialized with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# =============================================================================
# Calendar
# =============================================================================


class CalendarEntry(WireModel):
    """One expected-or-reported earnings event."""

    symbol: str
    company_name: str = ""
    timing: EarningsTiming = EarningsTiming.DURING_HOURS
    scheduled_date: dt.date
    scheduled_time: str | None = None
    eps_estimate: float | None = None
    revenue_estimate: float | None = None
    eps_actual: float | None = None
    revenue_actual: float | None = None


# =============================================================================
# Prices
# =============================================================================


class AfterHoursPrice(WireModel):
    price: float
    change: float
    change_percent: float


class Quote(WireModel):
    """Point-in-time price snapshot as served by ``GET /quote``."""

    symbol: str
    current_price: float = Field(alias="current")
    change: float = 0.0
    change_percent: float = 0.0
    day_high: float | None = None
    day_low: float | None = None
    open: float | None = None
    previous_close: float | None = None
    timestamp: int | None = None
    after_hours: AfterHoursPrice | None = None
    company_name: str | None = Field(default=None, alias="name")
    industry: str | None = None
    market_cap: float | None = None
    shares_outstanding: float | None = None


class PriceBar(WireModel):
    """One daily OHLCV bar."""

    date: dt.date
    open: float
    high: float
    low: float
    close: float
    volume: int = 0


# =============================================================================
# Enriched record
# =============================================================================


class EarningsEstimate(WireModel):
    eps: float | None = None
    revenue: float | None = None


class EarningsActual(WireModel):
    eps: float
    revenue: float | None = None
    eps_estimate: float | None = None
    revenue_estimate: float | None = None


class EarningsReport(WireModel):
    """Earnings state of one stock. ``actual`` is set iff status is released."""

    status: EarningsStatus
    timing: EarningsTiming
    scheduled_time: str | None = None
    estimate: EarningsEstimate | None = None
    actual: EarningsActual | None = None
    beat_status: BeatStatus | None = None


class EnrichedStock(WireModel):
    """Calendar entry + quote + price history, merged at ``last_updated``."""

    symbol: str
    company_name: str
    industry: str | None = None
    price: Quote
    market_status: SessionState
    earnings: EarningsReport
    price_history: tuple[PriceBar, ...] = ()
    last_updated: dt.datetime


class DailyEarnings(WireModel):
    """All enriched stocks reporting on one day, split into S&P 500 and the rest."""

    date: dt.date
    market_status: SessionState
    major: tuple[EnrichedStock, ...] = ()
    other: tuple[EnrichedStock, ...] = ()
    missing: tuple[str, ...] = ()
    partitioned: bool = False


# =============================================================================
# Report analysis
# =============================================================================


class ReportSummary(BaseModel):
    """Structured LLM output for one earnings release."""

    summary: str = Field(description="3-5 sentence summary of the quarter")
    sentiment: Literal["positive", "neutral", "negative"] = Field(
        description="Overall tone of the results relative to expectations"
    )
    key_takeaways: list[str] = Field(
        default_factory=list,
        description="Short bullet points: metrics, guidance, notable items",
    )


class ReportAnalysis(WireModel):
    """Report summary plus where it came from, as served by ``POST /analyze-earnings``."""

    summary: str
    sentiment: Literal["positive", "neutral", "negative"]
    key_takeaways: tuple[str, ...] = ()
    report_url: str | None = None
    quarter: str | None = None


# =============================================================================
# Batch results
# =============================================================================


@dataclass
class BatchResult(Generic[T]):
    """Outcome of a multi-symbol fetch.

    Partial failure is the normal degradation mode: failed symbols are left out
    of ``items`` and listed in ``failures`` with the reason.
    """

    items: list[T] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)
    failed_chunks: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures and self.failed_chunks == 0
