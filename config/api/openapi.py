"""drf-spectacular helpers documenting the response envelope.

`config.api.responses` and the global exception handler wrap API responses in
`{status, message, data, errors}`; these builders produce matching schemas.
"""

from __future__ import annotations

from drf_spectacular.utils import inline_serializer
from rest_framework import serializers
from rest_framework.serializers import Serializer


def success_envelope_serializer(
    name: str,
    *,
    data: serializers.Field,
) -> Serializer:
    """Build an OpenAPI schema matching `success_response`."""

    return inline_serializer(
        name=name,
        fields={
            "status": serializers.IntegerField(),
            "message": serializers.CharField(),
            "data": data,
            "errors": serializers.JSONField(allow_null=True),
        },
    )


def error_envelope_serializer(name: str) -> Serializer:
    """Build an OpenAPI schema matching `error_response`.

    `errors.code` names the failure (`missing_credential`,
    `retries_exhausted`, ...); validation failures carry field errors instead.
    """

    return inline_serializer(
        name=name,
        fields={
            "status": serializers.IntegerField(),
            "message": serializers.CharField(),
            "data": serializers.JSONField(allow_null=True),
            "errors": inline_serializer(
                name=f"{name}Errors",
                fields={
                    "code": serializers.CharField(required=False),
                    "detail": serializers.CharField(required=False),
                },
                allow_null=True,
            ),
        },
    )
