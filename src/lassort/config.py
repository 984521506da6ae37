"""Environment overrides for run tunables."""

import os

from lassort.errors import UsageError
from lassort.grid.types import FLUSH_THRESHOLD

# Environment variable to override the number of points read between flushes.
FLUSH_THRESHOLD_ENV = "LASSORT_FLUSH_THRESHOLD"


def get_flush_threshold() -> int:
    """
    Resolve the flush threshold.

    Priority:
    1. LASSORT_FLUSH_THRESHOLD env var (positive integer)
    2. FLUSH_THRESHOLD default
    """
    override = os.environ.get(FLUSH_THRESHOLD_ENV, "").strip()
    if not override:
        return FLUSH_THRESHOLD

    try:
        value = int(override)
    except ValueError:
        raise UsageError(f"{FLUSH_THRESHOLD_ENV} must be an integer, got {override!r}") from None
    if value <= 0:
        raise UsageError(f"{FLUSH_THRESHOLD_ENV} must be positive, got {value}")
    return value
