"""
Named date-range presets for the createdAt filters.

Presets are resolved against "now" in UTC and rendered as ISO-8601 strings
that Shopify's search syntax accepts.
"""
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Tuple


def _midnight(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def _today(now: datetime) -> Tuple[datetime, datetime]:
    return _midnight(now), now


def _yesterday(now: datetime) -> Tuple[datetime, datetime]:
    start = _midnight(now - timedelta(days=1))
    return start, start + timedelta(days=1) - timedelta(milliseconds=1)


def _last_days(days: int) -> Callable[[datetime], Tuple[datetime, datetime]]:
    def resolve(now: datetime) -> Tuple[datetime, datetime]:
        return _midnight(now - timedelta(days=days)), now
    return resolve


def _this_month(now: datetime) -> Tuple[datetime, datetime]:
    return _midnight(now.replace(day=1)), now


def _last_month(now: datetime) -> Tuple[datetime, datetime]:
    first_this_month = _midnight(now.replace(day=1))
    last_month_end = first_this_month - timedelta(milliseconds=1)
    return _midnight(last_month_end.replace(day=1)), last_month_end


DATE_RANGES: Dict[str, Callable[[datetime], Tuple[datetime, datetime]]] = {
    "today": _today,
    "yesterday": _yesterday,
    "last7days": _last_days(7),
    "last30days": _last_days(30),
    "thisMonth": _this_month,
    "lastMonth": _last_month,
}


def to_iso(dt: datetime) -> str:
    """Render a UTC datetime as 2024-01-31T23:59:59.999Z."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def resolve_date_range(name: str, now: Optional[datetime] = None) -> Tuple[str, str]:
    """
    Resolve a preset name to (created_at_min, created_at_max).

    Args:
        name: One of today, yesterday, last7days, last30days, thisMonth, lastMonth
        now: Reference time (defaults to the current UTC time)

    Returns:
        Tuple of ISO-8601 UTC strings

    Raises:
        ValueError: If the preset name is unknown
    """
    if name not in DATE_RANGES:
        raise ValueError(
            f"Unknown date range '{name}'. Expected one of: {', '.join(DATE_RANGES)}"
        )
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    start, end = DATE_RANGES[name](now.astimezone(timezone.utc))
    return to_iso(start), to_iso(end)
