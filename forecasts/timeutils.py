from __future__ import annotations

from datetime import datetime, timezone, tzinfo


def ensure_aware(
    dt: datetime, tz: tzinfo = timezone.utc  # noqa: UP017
) -> datetime:
    """Attach or convert timezone information to a datetime."""

    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def to_epoch_ms(dt: datetime) -> float:
    """Milliseconds since the epoch; naive values are read as UTC."""

    return ensure_aware(dt).timestamp() * 1000


def from_epoch_ms(value: float) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)  # noqa: UP017


def isoformat_with_tz(dt: datetime, tz: tzinfo | None = None) -> str:
    """Return an ISO8601 string with timezone offset."""

    zone = tz or dt.tzinfo or timezone.utc  # noqa: UP017
    aware = ensure_aware(dt, zone)
    return aware.isoformat()
