from __future__ import annotations

from django.urls import path

from .views import ForecastBatchView, ForecastCredentialCheckView

urlpatterns = [
    path(
        "forecasts/batch/",
        ForecastBatchView.as_view(),
        name="forecasts-batch",
    ),
    path(
        "forecasts/credential-check/",
        ForecastCredentialCheckView.as_view(),
        name="forecasts-credential-check",
    ),
]
