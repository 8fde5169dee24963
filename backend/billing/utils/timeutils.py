from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current UTC time"""
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC. Naive values are taken to be UTC already.

    SQLite keeps only the wall-clock part of a DateTime, so every timestamp is
    converted before it is stored or compared.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
