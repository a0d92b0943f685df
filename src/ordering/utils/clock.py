"""Single source of wall-clock time for the ordering domain.

Domain code calls ``clock.utc_now()`` through the module so tests can pin time
with ``monkeypatch.setattr(clock, "utc_now", ...)``.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Treat a naive stored datetime as UTC so it compares with ``utc_now()``."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)
