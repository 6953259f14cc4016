from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def duration_seconds(started_at: Optional[datetime], completed_at: Optional[datetime]) -> Optional[int]:
    """Whole seconds between two timestamps, or None while either is unknown."""
    if started_at is None or completed_at is None:
        return None
    if started_at.tzinfo is None:
        started_at = started_at.replace(tzinfo=timezone.utc)
    if completed_at.tzinfo is None:
        completed_at = completed_at.replace(tzinfo=timezone.utc)
    return max(0, int((completed_at - started_at).total_seconds()))
