from __future__ import annotations

from abc import ABC, abstractmethod

from .types import FetchConfig, Point, WeatherResult


class ForecastClient(ABC):
    """Abstract base for point forecast clients."""

    name: str

    @abstractmethod
    async def fetch(self, point: Point, config: FetchConfig) -> WeatherResult:
        """Return the forecast sample closest to `point.time`."""
