from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

ModelName = Literal[
    "gfs",
    "ecmwf",
    "iconEu",
    "arome",
    "namConus",
    "namHawaii",
    "namAlaska",
]

WINDY_POINT_FORECAST_URL = "https://api.windy.com/api/point-forecast/v2"


@dataclass(frozen=True)
class Point:
    id: int
    lat: float
    lon: float
    time: datetime
    name: str = ""


@dataclass(frozen=True)
class ForecastRequest:
    lat: float
    lon: float
    model: str
    parameters: tuple[str, ...]
    levels: tuple[str, ...]
    key: str = field(repr=False)

    @classmethod
    def for_point(cls, point: Point, config: FetchConfig) -> ForecastRequest:
        return cls(
            lat=point.lat,
            lon=point.lon,
            model=config.model,
            parameters=tuple(config.parameters),
            levels=tuple(config.levels),
            key=config.credential,
        )

    def as_payload(self) -> dict[str, Any]:
        return {
            "lat": self.lat,
            "lon": self.lon,
            "model": self.model,
            "parameters": list(self.parameters),
            "levels": list(self.levels),
            "key": self.key,
        }


@dataclass(frozen=True)
class WeatherResult:
    """Canonical weather for one resolved forecast sample.

    Units are fixed: temperature in Celsius, wind speed in metres per second,
    precipitation in millimetres. Display conversion happens downstream.
    """

    temperature_c: float
    wind_speed_mps: float
    precipitation_mm: float = 0.0
    sample_time: datetime | None = None


@dataclass(frozen=True)
class OutcomeError:
    kind: str
    message: str


@dataclass(frozen=True)
class PointOutcome:
    point: Point
    result: WeatherResult | None = None
    error: OutcomeError | None = None

    def __post_init__(self) -> None:
        if (self.result is None) == (self.error is None):
            raise ValueError("PointOutcome needs exactly one of result/error.")

    @property
    def ok(self) -> bool:
        return self.result is not None


@dataclass(frozen=True)
class BatchResult:
    """Outcomes ordered by input index, one per submitted point."""

    outcomes: tuple[PointOutcome, ...]

    def __len__(self) -> int:
        return len(self.outcomes)

    def __iter__(self) -> Iterator[PointOutcome]:
        return iter(self.outcomes)

    def __getitem__(self, index: int) -> PointOutcome:
        return self.outcomes[index]

    @property
    def succeeded(self) -> list[PointOutcome]:
        return [outcome for outcome in self.outcomes if outcome.ok]

    @property
    def failed(self) -> list[PointOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]


@dataclass(frozen=True)
class FetchConfig:
    credential: str = field(repr=False)
    retries: int = 3
    initial_delay: float = 1.0
    model: str = "gfs"
    parameters: Sequence[str] = ("temp", "wind", "precip")
    levels: Sequence[str] = ("surface",)
    timeout: float = 10.0
    retry_on_data_errors: bool = True
    base_url: str = WINDY_POINT_FORECAST_URL


@dataclass(frozen=True)
class BatchConfig:
    fetch: FetchConfig
    max_concurrency: int = 8
    deadline_seconds: float | None = 60.0
