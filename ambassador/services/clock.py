from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], int]


def utc_now() -> int:
    """Current UTC time as integer epoch seconds."""
    return int(datetime.now(UTC).timestamp())
