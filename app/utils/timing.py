import time
from datetime import datetime, timezone


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-01-15T10:30:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def elapsed_ms(started: float) -> str:
    """Milliseconds since a time.perf_counter() reading, formatted as '123ms'."""
    return f"{round((time.perf_counter() - started) * 1000)}ms"
