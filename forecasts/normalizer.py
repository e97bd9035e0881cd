"""Turn a raw point-forecast body into a canonical `WeatherResult`.

The service answers with one array per requested parameter/level pair plus a
parallel `ts` array. Wind may arrive as a scalar speed series or as u/v
components; the scalar series wins when both are present.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Final

from .engines.types import WeatherResult
from .errors import MalformedResponse, MissingWindData
from .timeutils import from_epoch_ms

KELVIN_OFFSET: Final[float] = 273.15

TS_KEY: Final[str] = "ts"
TEMPERATURE_KEY: Final[str] = "temp-surface"
WIND_SPEED_KEY: Final[str] = "wind-surface"
WIND_U_KEY: Final[str] = "wind_u-surface"
WIND_V_KEY: Final[str] = "wind_v-surface"
PRECIP_KEYS: Final[tuple[str, ...]] = (
    "precip-surface",
    "past3hprecip-surface",
)


def kelvin_to_celsius(value: float) -> float:
    return value - KELVIN_OFFSET


def normalize_forecast(raw: Any, index: int) -> WeatherResult:
    if not isinstance(raw, Mapping):
        raise MalformedResponse("Forecast response must be a JSON object.")

    timestamps = _required_series(raw, TS_KEY)
    if not 0 <= index < len(timestamps):
        raise MalformedResponse(
            f"Sample index {index} outside series of length {len(timestamps)}."
        )
    expected = len(timestamps)

    temperatures = _required_series(raw, TEMPERATURE_KEY, expected)
    temperature_k = _sample(temperatures, index, TEMPERATURE_KEY)

    return WeatherResult(
        temperature_c=kelvin_to_celsius(temperature_k),
        wind_speed_mps=_wind_speed(raw, index, expected),
        precipitation_mm=_precipitation(raw, index, expected),
        sample_time=from_epoch_ms(
            _sample(timestamps, index, TS_KEY) * 1000
        ),
    )


def _wind_speed(raw: Mapping[str, Any], index: int, expected: int) -> float:
    speeds = _optional_series(raw, WIND_SPEED_KEY, expected)
    if speeds is not None:
        return _sample(speeds, index, WIND_SPEED_KEY)

    u_series = _optional_series(raw, WIND_U_KEY, expected)
    v_series = _optional_series(raw, WIND_V_KEY, expected)
    if u_series is not None and v_series is not None:
        u = _sample(u_series, index, WIND_U_KEY)
        v = _sample(v_series, index, WIND_V_KEY)
        return math.sqrt(u**2 + v**2)

    raise MissingWindData(
        "Response has neither a wind speed series nor u/v components."
    )


def _precipitation(raw: Mapping[str, Any], index: int, expected: int) -> float:
    for key in PRECIP_KEYS:
        series = _optional_series(raw, key, expected)
        if series is None:
            continue
        value = series[index]
        if not value:
            return 0.0
        return _to_float(value, key)
    return 0.0


def _required_series(
    raw: Mapping[str, Any], key: str, expected: int | None = None
) -> list[Any]:
    if key not in raw:
        raise MalformedResponse(f"Missing required field '{key}'.")
    series = _optional_series(raw, key, expected)
    if series is None:
        raise MalformedResponse(f"Field '{key}' must be an array.")
    return series


def _optional_series(
    raw: Mapping[str, Any], key: str, expected: int | None = None
) -> list[Any] | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise MalformedResponse(f"Field '{key}' must be an array.")
    if expected is not None and len(value) != expected:
        raise MalformedResponse(
            f"Field '{key}' has {len(value)} samples, expected {expected}."
        )
    return value


def _sample(series: list[Any], index: int, key: str) -> float:
    return _to_float(series[index], key)


def _to_float(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise MalformedResponse(
            f"Field '{key}' has a non-numeric sample: {value!r}"
        )
    return float(value)
