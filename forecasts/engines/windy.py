from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx

from ..errors import (
    ForecastDataError,
    MalformedResponse,
    RetriesExhausted,
    TransportError,
)
from ..metrics import (
    forecast_errors_total,
    forecast_latency_seconds,
    forecast_requests_total,
    forecast_retries_total,
)
from ..normalizer import TS_KEY, normalize_forecast
from ..resolver import resolve_sample_index
from .base import ForecastClient
from .types import FetchConfig, ForecastRequest, Point, WeatherResult

logger = logging.getLogger(__name__)


class WindyPointForecastClient(ForecastClient):
    """Windy point-forecast v2 implementation.

    Each attempt POSTs a fresh request body. Transport failures are retried
    with linear backoff (`initial_delay * attempt`); data errors are retried
    only when `FetchConfig.retry_on_data_errors` is set.
    """

    name = "windy"

    async def fetch(self, point: Point, config: FetchConfig) -> WeatherResult:
        last_error: Exception | None = None
        for attempt in range(1, config.retries + 1):
            request = ForecastRequest.for_point(point, config)
            try:
                payload = await self._request(request, config)
                return self._parse(payload, point)
            except TransportError as exc:
                last_error = exc
            except ForecastDataError as exc:
                last_error = exc
                if not config.retry_on_data_errors:
                    self._record_failure(point, attempt, config, exc)
                    raise
            self._record_failure(point, attempt, config, last_error)
            if attempt < config.retries:
                forecast_retries_total.labels(model=config.model).inc()
                await asyncio.sleep(config.initial_delay * attempt)

        if last_error is None:  # pragma: no cover
            raise RuntimeError("Forecast fetch made no attempts")
        raise RetriesExhausted(last_error, attempts=config.retries)

    async def _request(
        self, request: ForecastRequest, config: FetchConfig
    ) -> dict[str, Any]:
        forecast_requests_total.labels(model=request.model).inc()
        start_time = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=config.timeout) as client:
                response = await client.post(
                    config.base_url, json=request.as_payload()
                )
        except httpx.TimeoutException as exc:
            raise TransportError("Forecast request timed out.") from exc
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Forecast request failed: {exc.__class__.__name__}"
            ) from exc
        finally:
            duration = time.perf_counter() - start_time
            forecast_latency_seconds.labels(model=request.model).observe(
                duration
            )

        if not 200 <= response.status_code < 300:
            raise TransportError(
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise TransportError(
                "Forecast response is not valid JSON."
            ) from exc
        if not isinstance(data, dict):
            raise MalformedResponse("Unexpected forecast response shape.")
        return data

    def _parse(self, payload: dict[str, Any], point: Point) -> WeatherResult:
        timestamps = payload.get(TS_KEY)
        if not isinstance(timestamps, list):
            raise MalformedResponse(f"Missing required field '{TS_KEY}'.")
        index = resolve_sample_index(timestamps, point.time)
        return normalize_forecast(payload, index)

    def _record_failure(
        self,
        point: Point,
        attempt: int,
        config: FetchConfig,
        exc: Exception,
    ) -> None:
        forecast_errors_total.labels(
            model=config.model, error_type=exc.__class__.__name__
        ).inc()
        logger.warning(
            "forecasts.attempt.failed point_id=%s attempt=%s/%s err=%s",
            point.id,
            attempt,
            config.retries,
            exc,
        )
