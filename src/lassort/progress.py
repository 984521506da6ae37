"""Progress observers for long-running phases."""

import logging
from collections.abc import Callable
from typing import TypeAlias

logger = logging.getLogger(__name__)

# Called with the phase name ("ingest" or "merge") and a percentage.
ProgressCallback: TypeAlias = Callable[[str, float], None]


def log_progress(phase: str, percent: float) -> None:
    """Report progress through logging."""
    logger.info("%s: %.1f%%", phase.capitalize(), percent)
