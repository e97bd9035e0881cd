from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from rest_framework.response import Response


JSONValue: TypeAlias = (
    None
    | bool
    | int
    | float
    | str
    | list["JSONValue"]
    | dict[str, "JSONValue"]
)


def _to_json_value(value: object) -> JSONValue:
    if value is None or isinstance(value, str | int | float | bool):
        return value
    if isinstance(value, Mapping):
        return {str(k): _to_json_value(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_to_json_value(v) for v in value]
    return str(value)


def _forecast_error_response(exc: Exception) -> Response | None:
    from rest_framework import status

    from config.api.responses import error_response
    from forecasts.errors import ForecastConfigError, ForecastError

    if not isinstance(exc, ForecastError):
        return None
    status_code = (
        status.HTTP_400_BAD_REQUEST
        if isinstance(exc, ForecastConfigError)
        else status.HTTP_502_BAD_GATEWAY
    )
    return error_response(str(exc), code=exc.code, status_code=status_code)


def custom_exception_handler(
    exc: Exception,
    context: dict[str, Any],
) -> Response:
    # Lazy imports: safe even if settings aren't configured at import time.
    from rest_framework import status
    from rest_framework.response import Response
    from rest_framework.views import exception_handler as drf_exception_handler

    forecast_response = _forecast_error_response(exc)
    if forecast_response is not None:
        return forecast_response

    response = drf_exception_handler(exc, context)

    if response is None:
        return Response(
            {"status": 1, "message": "Internal server error", "errors": None},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    detail = _to_json_value(response.data)
    message = "Request failed"
    if isinstance(detail, dict):
        maybe = detail.get("detail")
        if isinstance(maybe, str):
            message = maybe

    response.data = {"status": 1, "message": message, "errors": detail}
    return response
