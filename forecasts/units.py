"""Display-unit conversion for canonical weather results.

`WeatherResult` always carries Celsius, m/s and millimetres. API responses
render one of the unit systems below, rounded for display only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

from .engines.types import WeatherResult

UnitSystem = Literal["metric", "imperial"]
UNIT_SYSTEMS: Final[tuple[UnitSystem, ...]] = ("metric", "imperial")

MPS_TO_KMH: Final[float] = 3.6
MPS_TO_MPH: Final[float] = 2.2369362920544
MM_PER_INCH: Final[float] = 25.4


@dataclass(frozen=True)
class DisplayWeather:
    temperature: float
    temperature_unit: str
    wind_speed: float
    wind_speed_unit: str
    precipitation: float
    precipitation_unit: str


def celsius_to_fahrenheit(value: float) -> float:
    return value * 9 / 5 + 32


def to_display(
    result: WeatherResult, units: UnitSystem = "metric", digits: int = 1
) -> DisplayWeather:
    if units == "imperial":
        return DisplayWeather(
            temperature=round(
                celsius_to_fahrenheit(result.temperature_c), digits
            ),
            temperature_unit="F",
            wind_speed=round(result.wind_speed_mps * MPS_TO_MPH, digits),
            wind_speed_unit="mph",
            precipitation=round(result.precipitation_mm / MM_PER_INCH, 2),
            precipitation_unit="in",
        )
    return DisplayWeather(
        temperature=round(result.temperature_c, digits),
        temperature_unit="C",
        wind_speed=round(result.wind_speed_mps * MPS_TO_KMH, digits),
        wind_speed_unit="km/h",
        precipitation=round(result.precipitation_mm, digits),
        precipitation_unit="mm",
    )
