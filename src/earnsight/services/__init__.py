"""Dashboard-facing services built on the gateway client."""

from earnsight.services.earnings import EarningsService
from earnsight.services.stock import StockService

__all__ = [
    "EarningsService",
    "StockService",
]
