from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 UTC timestamp with a trailing 'Z'; naive datetimes are taken as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")
