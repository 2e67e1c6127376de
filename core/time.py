from datetime import datetime, timezone


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    """ISO-8601 string for storage; UTC values get a 'Z' suffix."""
    return dt.isoformat().replace("+00:00", "Z")
