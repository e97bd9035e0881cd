from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import Any

from django.conf import settings
from django.utils import timezone

from .engines.base import ForecastClient
from .engines.registry import default_model_name, validate_model
from .engines.types import (
    WINDY_POINT_FORECAST_URL,
    BatchConfig,
    BatchResult,
    FetchConfig,
    OutcomeError,
    Point,
    PointOutcome,
    WeatherResult,
)
from .engines.windy import WindyPointForecastClient
from .errors import DeadlineExceeded, ForecastConfigError, ForecastError
from .metrics import forecast_batch_duration_seconds, forecast_points_total

logger = logging.getLogger(__name__)

PROBE_LAT = 37.7749
PROBE_LON = -122.4194

OutcomeCallback = Callable[[PointOutcome], None]


def build_fetch_config(
    credential: str | None = None, **overrides: Any
) -> FetchConfig:
    """Build a fetch configuration from settings plus explicit overrides.

    An explicit `credential` wins over `WINDY_API_KEY`.
    """

    model = overrides.pop("model", None)
    try:
        model_name = validate_model(model) if model else default_model_name()
    except ValueError as exc:
        raise ForecastConfigError(str(exc)) from exc

    config = FetchConfig(
        credential=(
            credential or str(getattr(settings, "WINDY_API_KEY", "") or "")
        ).strip(),
        retries=int(getattr(settings, "FORECAST_RETRIES", 3)),
        initial_delay=float(
            getattr(settings, "FORECAST_INITIAL_DELAY_S", 1.0)
        ),
        model=model_name,
        timeout=float(getattr(settings, "FORECAST_TIMEOUT_S", 10.0)),
        retry_on_data_errors=bool(
            getattr(settings, "FORECAST_RETRY_ON_DATA_ERRORS", True)
        ),
        base_url=str(
            getattr(
                settings,
                "WINDY_POINT_FORECAST_URL",
                WINDY_POINT_FORECAST_URL,
            )
        ),
    )
    return replace(config, **overrides)


def build_batch_config(
    credential: str | None = None, **overrides: Any
) -> BatchConfig:
    deadline = getattr(settings, "FORECAST_BATCH_DEADLINE_S", 60.0)
    batch_kwargs: dict[str, Any] = {
        "max_concurrency": int(
            getattr(settings, "FORECAST_MAX_CONCURRENCY", 8)
        ),
        "deadline_seconds": float(deadline) if deadline is not None else None,
    }
    for key in ("max_concurrency", "deadline_seconds"):
        if key in overrides:
            batch_kwargs[key] = overrides.pop(key)
    return BatchConfig(
        fetch=build_fetch_config(credential, **overrides), **batch_kwargs
    )


def validate_config(config: BatchConfig) -> None:
    """Reject a batch before any request is issued."""

    if not config.fetch.credential:
        raise ForecastConfigError(
            "A Windy API key is required.", code="missing_credential"
        )
    if config.fetch.retries < 1:
        raise ForecastConfigError("retries must be at least 1.")
    if config.fetch.initial_delay < 0:
        raise ForecastConfigError("initial_delay must not be negative.")
    if config.max_concurrency < 1:
        raise ForecastConfigError("max_concurrency must be at least 1.")
    if config.deadline_seconds is not None and config.deadline_seconds <= 0:
        raise ForecastConfigError("deadline_seconds must be positive.")


async def enrich_points(
    points: Sequence[Point],
    config: BatchConfig,
    *,
    client: ForecastClient | None = None,
    on_outcome: OutcomeCallback | None = None,
) -> BatchResult:
    """Fetch a forecast for every point concurrently.

    Every point yields exactly one outcome. Failures stay scoped to their
    point; only configuration errors fail the whole batch. Outcomes are
    stored by input index, whatever order they settle in.
    """

    validate_config(config)
    forecast_client = client or WindyPointForecastClient()
    semaphore = asyncio.Semaphore(config.max_concurrency)
    slots: list[PointOutcome | None] = [None] * len(points)
    start_time = time.perf_counter()

    async def run_one(point: Point) -> PointOutcome:
        async with semaphore:
            return await _fetch_outcome(forecast_client, point, config.fetch)

    tasks: dict[asyncio.Task[PointOutcome], int] = {
        asyncio.ensure_future(run_one(point)): idx
        for idx, point in enumerate(points)
    }
    logger.info(
        "forecasts.batch.start points=%s model=%s max_concurrency=%s",
        len(points),
        config.fetch.model,
        config.max_concurrency,
    )

    loop = asyncio.get_running_loop()
    deadline = (
        loop.time() + config.deadline_seconds
        if config.deadline_seconds is not None
        else None
    )
    pending: set[asyncio.Task[PointOutcome]] = set(tasks)
    try:
        while pending:
            timeout = None
            if deadline is not None:
                timeout = max(deadline - loop.time(), 0)
            done, pending = await asyncio.wait(
                pending, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
            if not done:
                break
            for task in done:
                _settle(slots, tasks[task], task.result(), on_outcome)
    finally:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    for task in pending:
        idx = tasks[task]
        exc = DeadlineExceeded(
            f"No forecast within {config.deadline_seconds}s batch deadline."
        )
        _settle(slots, idx, _failure(points[idx], exc), on_outcome)

    forecast_batch_duration_seconds.observe(time.perf_counter() - start_time)
    result = BatchResult(outcomes=tuple(_filled(slots)))
    logger.info(
        "forecasts.batch.done points=%s succeeded=%s failed=%s",
        len(result),
        len(result.succeeded),
        len(result.failed),
    )
    return result


async def check_credential(
    credential: str,
    *,
    model: str | None = None,
    client: ForecastClient | None = None,
) -> WeatherResult:
    """Probe the forecast service with `credential` for a fixed location."""

    config = build_fetch_config(credential, model=model)
    validate_config(BatchConfig(fetch=config))
    probe = Point(
        id=0,
        name="San Francisco",
        lat=PROBE_LAT,
        lon=PROBE_LON,
        time=timezone.now(),
    )
    forecast_client = client or WindyPointForecastClient()
    return await forecast_client.fetch(probe, config)


async def _fetch_outcome(
    client: ForecastClient, point: Point, config: FetchConfig
) -> PointOutcome:
    try:
        result = await client.fetch(point, config)
    except ForecastError as exc:
        return _failure(point, exc)
    except Exception as exc:
        logger.exception(
            "forecasts.point.crashed point_id=%s err=%s", point.id, exc
        )
        return _failure(point, exc)
    return PointOutcome(point=point, result=result)


def _failure(point: Point, exc: Exception) -> PointOutcome:
    kind = exc.code if isinstance(exc, ForecastError) else "internal_error"
    return PointOutcome(
        point=point, error=OutcomeError(kind=kind, message=str(exc))
    )


def _settle(
    slots: list[PointOutcome | None],
    idx: int,
    outcome: PointOutcome,
    on_outcome: OutcomeCallback | None,
) -> None:
    slots[idx] = outcome
    forecast_points_total.labels(
        outcome="success" if outcome.ok else "failure"
    ).inc()
    if outcome.error is not None:
        logger.info(
            "forecasts.point.failed point_id=%s kind=%s",
            outcome.point.id,
            outcome.error.kind,
        )
    if on_outcome is not None:
        on_outcome(outcome)


def _filled(slots: list[PointOutcome | None]) -> list[PointOutcome]:
    outcomes: list[PointOutcome] = []
    for idx, outcome in enumerate(slots):
        if outcome is None:  # pragma: no cover
            raise RuntimeError(f"Batch slot {idx} was never settled")
        outcomes.append(outcome)
    return outcomes
