from datetime import UTC, datetime


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes (as returned by some SQL drivers) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def utcnow() -> datetime:
    return datetime.now(UTC)
