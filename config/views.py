"""Project-level non-DRF views.

The root landing endpoint is used for quick service checks and links to the
interactive API documentation.
"""

from __future__ import annotations

from django.http import HttpRequest, JsonResponse


def home(request: HttpRequest) -> JsonResponse:
    """Return basic service metadata and documentation links."""
    return JsonResponse(
        {
            "ok": True,
            "service": "point-forecasts",
            "batch": "/api/v1/forecasts/batch/",
            "docs": "/api/docs/",
            "redoc": "/api/redoc/",
        }
    )
