from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

# Small helpers shared across the engine, the API and the worker.

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def ensure_timezone_aware(dt: datetime) -> datetime:
    """Ensures a datetime object is timezone-aware, assuming UTC if naive."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt

def time_ago(dt: datetime) -> str:
    """Converts a datetime object to a human-readable string like '2h ago'."""
    if not dt: return "N/A"
    diff = utc_now() - ensure_timezone_aware(dt)
    seconds = diff.total_seconds()
    if seconds < 60: return "Just now"
    if seconds < 3600: return f"{int(seconds / 60)}m ago"
    if seconds < 86400: return f"{int(seconds / 3600)}h ago"
    return f"{diff.days}d ago"

def round_half_up(value: float) -> int:
    """Rounds to the nearest integer with .5 going up (Python's round() goes to even)."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
