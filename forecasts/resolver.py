from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from .errors import EmptySeries, MalformedResponse
from .timeutils import to_epoch_ms


def resolve_sample_index(timestamps: Sequence[Any], target: datetime) -> int:
    """Return the index of the sample closest in time to `target`.

    `timestamps` are epoch seconds in ascending order. Ties go to the
    earliest index; there is no interpolation.
    """

    if not timestamps:
        raise EmptySeries("Forecast time series has no samples.")

    target_ms = to_epoch_ms(target)
    best_index = 0
    best_distance: float | None = None
    for idx, raw in enumerate(timestamps):
        if isinstance(raw, bool) or not isinstance(raw, int | float):
            raise MalformedResponse(
                f"Non-numeric timestamp at index {idx}: {raw!r}"
            )
        distance = abs(raw * 1000 - target_ms)
        if best_distance is None or distance < best_distance:
            best_index = idx
            best_distance = distance
    return best_index
