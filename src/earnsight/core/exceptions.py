"""Custom exceptions for Earnsight."""


class EarnsightError(Exception):
    """Base exception for all Earnsight errors."""

    def __init__(self, message: str, *args: object) -> None:
        self.message = message
        super().__init__(message, *args)


class ConfigurationError(EarnsightError):
    """Required configuration (usually an API key) is missing."""


# Gateway client errors
class ApiError(EarnsightError):
    """Request to the API gateway failed.

    ``status`` is the last HTTP status seen, or None when the request never
    got a response.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.message} (status {self.status})"


class ClientError(ApiError):
    """4xx response. Terminal, never retried."""


class TransientNetworkError(ApiError):
    """Transport-level failure that survived every retry."""


# Data errors
class ShapeMismatchError(EarnsightError):
    """Provider payload does not have the expected shape."""


class StockNotFoundError(EarnsightError):
    """Symbol is not on the earnings calendar or has no quote."""


# Upstream provider errors (gateway side)
class UpstreamError(EarnsightError):
    """Third-party data provider returned an error or unusable data."""


# Report analysis errors
class ReportError(EarnsightError):
    """Base error for earnings report analysis."""


class ReportNotFoundError(ReportError):
    """No earnings report URL could be found."""


class UnsupportedDocumentError(ReportError):
    """Report is in a format we cannot parse (PDF)."""


class ReportContentError(ReportError):
    """Downloaded report is too short or otherwise unusable."""
