"""Run orchestration: cell size estimation and the two-pass partitioner."""

from lassort.sorter.estimate import MIN_CELL_SIZE, TARGET_POINTS_PER_CELL, estimate_cell_size
from lassort.sorter.partition import (
    Phase,
    PartitionResult,
    SortSession,
    default_output_path,
    main_partition,
    partition,
)

__all__ = [
    "MIN_CELL_SIZE",
    "TARGET_POINTS_PER_CELL",
    "PartitionResult",
    "Phase",
    "SortSession",
    "default_output_path",
    "estimate_cell_size",
    "main_partition",
    "partition",
]
