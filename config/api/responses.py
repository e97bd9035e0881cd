"""Response envelope helpers shared by every API view.

Envelope: {"status": 0|1, "message": str, "data": ..., "errors": ...}.
"""

from __future__ import annotations

from typing import TypeAlias

from rest_framework import status
from rest_framework.response import Response

JSONScalar: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]


def success_response(
    data: JSONValue | None,
    message: str = "OK",
    *,
    status_code: int = status.HTTP_200_OK,
) -> Response:
    payload: dict[str, JSONValue] = {
        "status": 0,
        "message": message,
        "data": data,
        "errors": None,
    }
    return Response(payload, status=status_code)


def error_response(
    message: str,
    *,
    code: str | None = None,
    errors: dict[str, JSONValue] | None = None,
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> Response:
    """Error envelope; `code` is merged into `errors` as `errors["code"]`."""

    details: dict[str, JSONValue] | None = dict(errors) if errors else None
    if code is not None:
        details = {**(details or {}), "code": code}
    payload: dict[str, JSONValue] = {
        "status": 1,
        "message": message,
        "data": None,
        "errors": details,
    }
    return Response(payload, status=status_code)
