"""Wall-clock access, injectable for deterministic tests."""

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def get_clock() -> Clock:
    """FastAPI dependency returning the clock used for validation."""
    return utc_now
