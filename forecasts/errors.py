"""Error taxonomy for point forecast enrichment.

Every error carries a stable `code` so per-point failures can be surfaced to
API clients without leaking exception class names.
"""

from __future__ import annotations


class ForecastError(Exception):
    """Base class for forecast enrichment errors."""

    default_code = "forecast_error"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code or self.default_code


class ForecastConfigError(ForecastError):
    """Raised before any request when the batch cannot be configured."""

    default_code = "invalid_config"


class ForecastDataError(ForecastError):
    """A 2xx response whose body cannot be turned into a weather result."""


class EmptySeries(ForecastDataError):
    default_code = "empty_series"


class MalformedResponse(ForecastDataError):
    default_code = "malformed_response"


class MissingWindData(ForecastDataError):
    default_code = "missing_wind_data"


class TransportError(ForecastError):
    """Network failure, timeout or non-2xx status from the forecast service."""

    default_code = "transport_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message, code=code)
        self.status_code = status_code


class RetriesExhausted(ForecastError):
    """Terminal failure after every attempt for one point failed."""

    default_code = "retries_exhausted"

    def __init__(self, last_error: Exception, *, attempts: int) -> None:
        super().__init__(
            f"Forecast request failed after {attempts} attempt(s): "
            f"{last_error}"
        )
        self.last_error = last_error
        self.attempts = attempts


class DeadlineExceeded(ForecastError):
    default_code = "deadline_exceeded"
