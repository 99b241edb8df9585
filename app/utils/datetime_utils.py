"""Clock helpers shared by the models and the generation pipeline."""

import time
from datetime import datetime, timezone


def get_current_utc_datetime() -> datetime:
    """Timezone-aware "now", used as the Python-side default for timestamp columns."""
    return datetime.now(timezone.utc)


def start_timer() -> float:
    return time.perf_counter()


def elapsed_ms(started: float) -> int:
    """Whole milliseconds since ``started`` (a ``start_timer`` value)."""
    return int((time.perf_counter() - started) * 1000)
