from __future__ import annotations

from typing import cast, get_args

from django.conf import settings

from .types import ModelName

SUPPORTED_MODELS: tuple[ModelName, ...] = get_args(ModelName)


def default_model_name() -> ModelName:
    configured = str(getattr(settings, "FORECAST_MODEL", "") or "gfs")
    return validate_model(configured)


def validate_model(model: str | None) -> ModelName:
    """Map a case-insensitive model name onto a supported Windy model."""

    if not model:
        return default_model_name()
    lookup = {name.lower(): name for name in SUPPORTED_MODELS}
    name = lookup.get(model.lower())
    if name is None:
        raise ValueError(f"Unsupported forecast model: {model}")
    return cast(ModelName, name)
