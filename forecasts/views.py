"""Point forecast API endpoints.

Authentication: IsAuthenticated (session or basic auth, global DRF settings).
Responses: wrapped by `config.api.responses.success_response`
(status/message/data/errors).
"""

from __future__ import annotations

import logging
from typing import cast

from asgiref.sync import async_to_sync
from drf_spectacular.utils import extend_schema, inline_serializer
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from config.api.openapi import (
    error_envelope_serializer,
    success_envelope_serializer,
)
from config.api.responses import error_response, success_response

from .errors import ForecastConfigError, ForecastError
from .serializers import (
    BatchRequestSerializer,
    DisplayWeatherSerializer,
    ForecastOptionsSerializer,
    PointOutcomeSerializer,
    serialize_batch,
    serialize_weather,
    to_points,
)
from .services import build_batch_config, check_credential, enrich_points
from .units import UnitSystem

logger = logging.getLogger(__name__)

forecast_error_schema = error_envelope_serializer("ForecastErrorResponse")

batch_success_schema = success_envelope_serializer(
    "ForecastBatchSuccess",
    data=inline_serializer(
        name="ForecastBatchData",
        fields={
            "outcomes": PointOutcomeSerializer(many=True),
            "succeeded": serializers.IntegerField(),
            "failed": serializers.IntegerField(),
        },
    ),
)

credential_success_schema = success_envelope_serializer(
    "ForecastCredentialSuccess",
    data=inline_serializer(
        name="ForecastCredentialData",
        fields={"weather": DisplayWeatherSerializer()},
    ),
)


class ForecastBatchView(APIView):
    """Enrich a batch of points with forecast weather.

    Auth: IsAuthenticated.
    Response: success envelope with one outcome per submitted point, in
    input order. Per-point failures are reported inside the outcome; only a
    missing API key or invalid body fails the whole request.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=BatchRequestSerializer,
        responses={
            200: batch_success_schema,
            400: forecast_error_schema,
            401: forecast_error_schema,
            403: forecast_error_schema,
        },
    )
    def post(self, request: Request) -> Response:
        """Run the batch and return every point's outcome.

        Inputs: `points` (lat, lon, optional name/time), optional `key`,
        `model`, `units` (metric or imperial).
        Outputs: envelope with `outcomes`, `succeeded`, `failed`.
        """

        serializer = BatchRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        units = cast(UnitSystem, params.get("units") or "metric")

        try:
            config = build_batch_config(
                params.get("key") or None, model=params.get("model")
            )
            batch = async_to_sync(enrich_points)(
                to_points(params["points"]), config
            )
        except ForecastConfigError as exc:
            return error_response(str(exc), code=exc.code)

        return success_response(serialize_batch(batch, units))


class ForecastCredentialCheckView(APIView):
    """Verify a Windy API key with a single probe forecast.

    Auth: IsAuthenticated.
    Response: success envelope with the probe weather, or an error envelope
    (502) naming the failure kind.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=ForecastOptionsSerializer,
        responses={
            200: credential_success_schema,
            400: forecast_error_schema,
            502: forecast_error_schema,
        },
    )
    def post(self, request: Request) -> Response:
        serializer = ForecastOptionsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        units = cast(UnitSystem, params.get("units") or "metric")

        try:
            result = async_to_sync(check_credential)(
                params.get("key") or "", model=params.get("model")
            )
        except ForecastConfigError as exc:
            return error_response(str(exc), code=exc.code)
        except ForecastError as exc:
            logger.warning("forecasts.credential.failed kind=%s", exc.code)
            return error_response(
                "Forecast API check failed.",
                code=exc.code,
                errors={"detail": str(exc)},
                status_code=status.HTTP_502_BAD_GATEWAY,
            )

        return success_response(
            {"weather": serialize_weather(result, units)},
            message="API key OK",
        )
