from datetime import datetime, timezone


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo on read; every stored timestamp is UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
