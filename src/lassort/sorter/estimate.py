"""Cell size estimation from header metadata."""

import math

from lassort.codec.types import BoundingBox
from lassort.errors import EstimationError

# Points a single cell is sized to hold when the cloud is evenly spread.
TARGET_POINTS_PER_CELL = 2_000_000

# Smallest cell edge length an estimate may return.
MIN_CELL_SIZE = 1e-3


def estimate_cell_size(
    bounds: BoundingBox,
    declared_count: int,
    thin: float = 0.0,
    target: int = TARGET_POINTS_PER_CELL,
) -> float:
    """
    Estimate the edge length of a cubic cell holding about `target` points.

    Assumes the retained points fill the bounding box uniformly.

    Raises:
        EstimationError: No points would be retained or the box has no volume.
    """
    retained = declared_count * (1.0 - thin)
    if not retained > 0:
        raise EstimationError(
            f"cannot estimate cell size: no retained points "
            f"(declared={declared_count}, thin={thin})"
        )

    volume = bounds.volume
    if not (math.isfinite(volume) and volume > 0):
        raise EstimationError(
            f"cannot estimate cell size: bounding box volume is {volume} "
            f"(extents={bounds.extents}); pass an explicit cell size"
        )

    edge = math.cbrt(volume / retained * target)
    if not math.isfinite(edge):
        raise EstimationError(f"cannot estimate cell size: got {edge}")
    return max(edge, MIN_CELL_SIZE)
