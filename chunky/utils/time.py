"""Time utilities. Wall-clock datetimes in UTC; durations from the monotonic clock."""

import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return current UTC datetime. Use for run start/end stamps."""
    return datetime.now(timezone.utc)


def monotonic() -> float:
    """Seconds from a monotonic clock. Use for durations and throttling."""
    return time.perf_counter()
