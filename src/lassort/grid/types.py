"""Shared constants and metadata structures for the grid."""

from dataclasses import dataclass
from typing import TypeAlias

# Source points read between two flushes of every bucket.
FLUSH_THRESHOLD = 1_000_000

# Prefix of spill segment file names inside the work dir.
SEGMENT_PREFIX = "seg_"

BucketKey: TypeAlias = tuple[int, int, int]


@dataclass
class GridSummary:
    """Statistics gathered while ingesting into a Grid."""

    points_read: int = 0
    points_thinned: int = 0
    points_retained: int = 0
    flushes: int = 0
    segments: int = 0
    buckets: int = 0
    average_points_per_bucket: float = 0.0
    average_bucket_file_size: float = 0.0
