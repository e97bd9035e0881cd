from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, ClassVar

from django.conf import settings
from django.utils import timezone
from rest_framework import serializers

from config.api.responses import JSONValue

from .engines.registry import validate_model
from .engines.types import BatchResult, Point, PointOutcome, WeatherResult
from .timeutils import ensure_aware, isoformat_with_tz
from .units import UNIT_SYSTEMS, UnitSystem, to_display

MAX_BATCH_POINTS = int(getattr(settings, "FORECAST_MAX_BATCH_POINTS", 500))


class PointInputSerializer(serializers.Serializer):
    name: ClassVar[serializers.CharField] = serializers.CharField(
        required=False, allow_blank=True, default="", max_length=200
    )
    lat: ClassVar[serializers.FloatField] = serializers.FloatField(
        min_value=-90.0, max_value=90.0
    )
    lon: ClassVar[serializers.FloatField] = serializers.FloatField(
        min_value=-180.0, max_value=180.0
    )
    time: ClassVar[serializers.DateTimeField] = serializers.DateTimeField(
        required=False, allow_null=True, default=None
    )


class ForecastOptionsSerializer(serializers.Serializer):
    key: ClassVar[serializers.CharField] = serializers.CharField(
        required=False, allow_blank=True, write_only=True
    )
    model: ClassVar[serializers.CharField] = serializers.CharField(
        required=False, allow_null=True
    )
    units: ClassVar[serializers.ChoiceField] = serializers.ChoiceField(
        choices=UNIT_SYSTEMS, required=False, default="metric"
    )

    def validate_model(self, value: str | None) -> str | None:
        if not value:
            return None
        try:
            return validate_model(value)
        except ValueError as exc:
            raise serializers.ValidationError("Unknown model.") from exc


class BatchRequestSerializer(ForecastOptionsSerializer):
    points: ClassVar[PointInputSerializer] = PointInputSerializer(many=True)

    def validate_points(
        self, value: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        if not value:
            raise serializers.ValidationError(
                "At least one point is required."
            )
        if len(value) > MAX_BATCH_POINTS:
            raise serializers.ValidationError(
                "Too many points; see FORECAST_MAX_BATCH_POINTS."
            )
        return value


class PointSerializer(serializers.Serializer):
    id: ClassVar[serializers.IntegerField] = serializers.IntegerField()
    name: ClassVar[serializers.CharField] = serializers.CharField()
    lat: ClassVar[serializers.FloatField] = serializers.FloatField()
    lon: ClassVar[serializers.FloatField] = serializers.FloatField()
    time: ClassVar[serializers.DateTimeField] = serializers.DateTimeField()


class DisplayWeatherSerializer(serializers.Serializer):
    temperature: ClassVar[serializers.FloatField] = serializers.FloatField()
    temperature_unit: ClassVar[serializers.CharField] = serializers.CharField()
    wind_speed: ClassVar[serializers.FloatField] = serializers.FloatField()
    wind_speed_unit: ClassVar[serializers.CharField] = serializers.CharField()
    precipitation: ClassVar[serializers.FloatField] = serializers.FloatField()
    precipitation_unit: ClassVar[serializers.CharField] = (
        serializers.CharField()
    )
    sample_time: ClassVar[serializers.DateTimeField] = (
        serializers.DateTimeField(allow_null=True)
    )


class OutcomeErrorSerializer(serializers.Serializer):
    kind: ClassVar[serializers.CharField] = serializers.CharField()
    message: ClassVar[serializers.CharField] = serializers.CharField()


class PointOutcomeSerializer(serializers.Serializer):
    point: ClassVar[PointSerializer] = PointSerializer()
    weather: ClassVar[DisplayWeatherSerializer] = DisplayWeatherSerializer(
        allow_null=True
    )
    error: ClassVar[OutcomeErrorSerializer] = OutcomeErrorSerializer(
        allow_null=True
    )


def to_points(raw_points: list[Mapping[str, Any]]) -> list[Point]:
    """Build points keyed by input index; missing times default to now."""

    now = timezone.now()
    points: list[Point] = []
    for idx, raw in enumerate(raw_points):
        when = raw.get("time")
        points.append(
            Point(
                id=idx,
                name=str(raw.get("name") or ""),
                lat=float(raw["lat"]),
                lon=float(raw["lon"]),
                time=ensure_aware(when) if isinstance(when, datetime) else now,
            )
        )
    return points


def serialize_weather(
    result: WeatherResult, units: UnitSystem = "metric"
) -> dict[str, JSONValue]:
    display = to_display(result, units)
    return {
        "temperature": display.temperature,
        "temperature_unit": display.temperature_unit,
        "wind_speed": display.wind_speed,
        "wind_speed_unit": display.wind_speed_unit,
        "precipitation": display.precipitation,
        "precipitation_unit": display.precipitation_unit,
        "sample_time": (
            isoformat_with_tz(result.sample_time)
            if result.sample_time is not None
            else None
        ),
    }


def serialize_point(point: Point) -> dict[str, JSONValue]:
    data = dict(PointSerializer(point).data)
    data["time"] = isoformat_with_tz(point.time)
    return data


def serialize_outcome(
    outcome: PointOutcome, units: UnitSystem = "metric"
) -> dict[str, JSONValue]:
    error: JSONValue = None
    if outcome.error is not None:
        error = dict(OutcomeErrorSerializer(outcome.error).data)
    return {
        "point": serialize_point(outcome.point),
        "weather": (
            serialize_weather(outcome.result, units)
            if outcome.result is not None
            else None
        ),
        "error": error,
    }


def serialize_batch(
    batch: BatchResult, units: UnitSystem = "metric"
) -> dict[str, JSONValue]:
    outcomes: list[JSONValue] = [
        serialize_outcome(outcome, units) for outcome in batch
    ]
    return {
        "outcomes": outcomes,
        "succeeded": len(batch.succeeded),
        "failed": len(batch.failed),
    }
