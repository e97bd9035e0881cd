from __future__ import annotations

# ruff: noqa: S101
import asyncio
from datetime import UTC, datetime
from typing import Any

import pytest
from django.conf import LazySettings

from forecasts.engines.base import ForecastClient
from forecasts.engines.types import (
    BatchConfig,
    FetchConfig,
    OutcomeError,
    Point,
    PointOutcome,
    WeatherResult,
)
from forecasts.errors import (
    ForecastConfigError,
    MissingWindData,
    RetriesExhausted,
    TransportError,
)
from forecasts.metrics import forecast_points_total
from forecasts.services import (
    PROBE_LAT,
    PROBE_LON,
    build_batch_config,
    build_fetch_config,
    check_credential,
    enrich_points,
)


def _points(count: int) -> list[Point]:
    return [
        Point(
            id=idx,
            name=f"wp{idx}",
            lat=45.0 + idx / 10,
            lon=6.0 + idx / 10,
            time=datetime(2025, 6, 1, 12, tzinfo=UTC),
        )
        for idx in range(count)
    ]


def _config(**overrides: Any) -> BatchConfig:
    batch: dict[str, Any] = {"max_concurrency": 8, "deadline_seconds": 5.0}
    for key in ("max_concurrency", "deadline_seconds"):
        if key in overrides:
            batch[key] = overrides.pop(key)
    fetch = FetchConfig(credential="k", initial_delay=0.0, **overrides)
    return BatchConfig(fetch=fetch, **batch)


class ScriptedClient(ForecastClient):
    """Returns the point id as temperature after a per-point delay."""

    name = "scripted"

    def __init__(
        self,
        delays: dict[int, float] | None = None,
        failures: dict[int, Exception] | None = None,
        hang: set[int] | None = None,
    ) -> None:
        self.delays = delays or {}
        self.failures = failures or {}
        self.hang = hang or set()
        self.calls: list[int] = []
        self.active = 0
        self.max_active = 0

    async def fetch(self, point: Point, config: FetchConfig) -> WeatherResult:
        self.calls.append(point.id)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if point.id in self.hang:
                await asyncio.Event().wait()
            await asyncio.sleep(self.delays.get(point.id, 0.0))
            if point.id in self.failures:
                raise self.failures[point.id]
            return WeatherResult(
                temperature_c=float(point.id),
                wind_speed_mps=1.0,
            )
        finally:
            self.active -= 1


def test_mixed_batch_keeps_input_order_and_attribution() -> None:
    points = _points(5)
    client = ScriptedClient(
        delays={0: 0.05, 1: 0.04, 2: 0.03, 3: 0.02, 4: 0.0},
        failures={
            1: RetriesExhausted(TransportError("HTTP 503"), attempts=3),
            3: MissingWindData("no wind"),
        },
    )
    settled: list[int] = []

    batch = asyncio.run(
        enrich_points(
            points,
            _config(),
            client=client,
            on_outcome=lambda outcome: settled.append(outcome.point.id),
        )
    )

    assert len(batch) == 5
    assert [outcome.point for outcome in batch] == points
    assert settled != [0, 1, 2, 3, 4]
    assert sorted(settled) == [0, 1, 2, 3, 4]
    for idx in (0, 2, 4):
        result = batch[idx].result
        assert result is not None
        assert result.temperature_c == float(idx)
        assert batch[idx].error is None
    assert batch[1].error == OutcomeError(
        kind="retries_exhausted",
        message=str(client.failures[1]),
    )
    failed = batch[3].error
    assert failed is not None
    assert failed.kind == "missing_wind_data"
    assert [o.point.id for o in batch.succeeded] == [0, 2, 4]
    assert [o.point.id for o in batch.failed] == [1, 3]


def test_requests_run_concurrently() -> None:
    client = ScriptedClient(delays={idx: 0.05 for idx in range(6)})
    asyncio.run(enrich_points(_points(6), _config(), client=client))
    assert client.max_active == 6


def test_concurrency_is_capped() -> None:
    client = ScriptedClient(delays={idx: 0.02 for idx in range(7)})
    batch = asyncio.run(
        enrich_points(_points(7), _config(max_concurrency=2), client=client)
    )
    assert client.max_active == 2
    assert len(batch.succeeded) == 7


def test_deadline_turns_stragglers_into_outcomes() -> None:
    client = ScriptedClient(hang={1})
    batch = asyncio.run(
        enrich_points(
            _points(3), _config(deadline_seconds=0.1), client=client
        )
    )
    assert len(batch) == 3
    assert batch[0].ok and batch[2].ok
    error = batch[1].error
    assert error is not None
    assert error.kind == "deadline_exceeded"


def test_unexpected_exception_is_contained() -> None:
    client = ScriptedClient(failures={0: RuntimeError("kaboom")})
    batch = asyncio.run(enrich_points(_points(2), _config(), client=client))
    error = batch[0].error
    assert error is not None
    assert error.kind == "internal_error"
    assert error.message == "kaboom"
    assert batch[1].ok


def test_empty_batch() -> None:
    batch = asyncio.run(
        enrich_points([], _config(), client=ScriptedClient())
    )
    assert len(batch) == 0
    assert list(batch) == []


@pytest.mark.parametrize(
    ("config", "code"),
    [
        (BatchConfig(fetch=FetchConfig(credential="")), "missing_credential"),
        (
            BatchConfig(fetch=FetchConfig(credential="k", retries=0)),
            "invalid_config",
        ),
        (
            BatchConfig(fetch=FetchConfig(credential="k"), max_concurrency=0),
            "invalid_config",
        ),
        (
            BatchConfig(fetch=FetchConfig(credential="k"), deadline_seconds=0),
            "invalid_config",
        ),
    ],
)
def test_config_errors_fail_before_any_request(
    config: BatchConfig, code: str
) -> None:
    client = ScriptedClient()
    with pytest.raises(ForecastConfigError) as excinfo:
        asyncio.run(enrich_points(_points(2), config, client=client))
    assert excinfo.value.code == code
    assert client.calls == []


def test_point_metrics_increment() -> None:
    success = forecast_points_total.labels(outcome="success")
    failure = forecast_points_total.labels(outcome="failure")
    success_before = success._value.get()
    failure_before = failure._value.get()
    client = ScriptedClient(failures={1: MissingWindData("no wind")})
    asyncio.run(enrich_points(_points(3), _config(), client=client))
    assert success._value.get() == success_before + 2
    assert failure._value.get() == failure_before + 1


def test_point_outcome_requires_exactly_one_side() -> None:
    point = _points(1)[0]
    with pytest.raises(ValueError):
        PointOutcome(point=point)
    with pytest.raises(ValueError):
        PointOutcome(
            point=point,
            result=WeatherResult(temperature_c=1.0, wind_speed_mps=1.0),
            error=OutcomeError(kind="x", message="y"),
        )


def test_build_fetch_config_reads_settings(settings: LazySettings) -> None:
    settings.WINDY_API_KEY = "from-settings"
    settings.FORECAST_RETRIES = 5
    settings.FORECAST_INITIAL_DELAY_S = 0.25
    settings.FORECAST_MODEL = "ecmwf"
    settings.FORECAST_RETRY_ON_DATA_ERRORS = False

    config = build_fetch_config()
    assert config.credential == "from-settings"
    assert config.retries == 5
    assert config.initial_delay == 0.25
    assert config.model == "ecmwf"
    assert config.retry_on_data_errors is False

    explicit = build_fetch_config(" explicit ", model="ICONEU", retries=2)
    assert explicit.credential == "explicit"
    assert explicit.model == "iconEu"
    assert explicit.retries == 2


def test_build_fetch_config_rejects_unknown_model() -> None:
    with pytest.raises(ForecastConfigError, match="Unsupported"):
        build_fetch_config("k", model="nope")


def test_build_batch_config_overrides(settings: LazySettings) -> None:
    settings.FORECAST_MAX_CONCURRENCY = 3
    settings.FORECAST_BATCH_DEADLINE_S = 12.0
    config = build_batch_config("k")
    assert config.max_concurrency == 3
    assert config.deadline_seconds == 12.0

    overridden = build_batch_config("k", max_concurrency=1, retries=4)
    assert overridden.max_concurrency == 1
    assert overridden.fetch.retries == 4


def test_check_credential_probes_fixed_point(settings: LazySettings) -> None:
    settings.WINDY_API_KEY = ""
    seen: dict[str, Any] = {}

    class ProbeClient(ForecastClient):
        name = "probe"

        async def fetch(
            self, point: Point, config: FetchConfig
        ) -> WeatherResult:
            seen["point"] = point
            seen["key"] = config.credential
            return WeatherResult(temperature_c=15.0, wind_speed_mps=2.0)

    result = asyncio.run(check_credential("probe-key", client=ProbeClient()))
    assert result.temperature_c == 15.0
    assert seen["key"] == "probe-key"
    assert (seen["point"].lat, seen["point"].lon) == (PROBE_LAT, PROBE_LON)

    with pytest.raises(ForecastConfigError) as excinfo:
        asyncio.run(check_credential("", client=ProbeClient()))
    assert excinfo.value.code == "missing_credential"
