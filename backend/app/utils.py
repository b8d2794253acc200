from datetime import datetime, timezone


def to_storage_timestamp(value: datetime | None) -> datetime | None:
    """Normalize a datetime to naive UTC with second precision."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=0)


def utcnow() -> datetime:
    return to_storage_timestamp(datetime.now(timezone.utc))
