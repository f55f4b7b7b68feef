"""Period keys used to index monthly and yearly statistics (UTC)."""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def month_key(now: Optional[datetime] = None) -> str:
    """Return the monthly period key, e.g. ``2025-01``."""
    now = now or utc_now()
    return now.astimezone(timezone.utc).strftime("%Y-%m")


def year_key(now: Optional[datetime] = None) -> str:
    """Return the yearly period key, e.g. ``2025``."""
    now = now or utc_now()
    return str(now.astimezone(timezone.utc).year)


def isoformat_utc(now: Optional[datetime] = None) -> str:
    """ISO-8601 timestamp with millisecond precision and a ``Z`` suffix."""
    now = (now or utc_now()).astimezone(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
