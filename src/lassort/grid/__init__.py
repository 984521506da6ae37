"""Spatial bucketing: key derivation, spillable buckets and the grid."""

from lassort.grid.bucket import Bucket, Segment
from lassort.grid.grid import Grid
from lassort.grid.key import bucket_key, key_of
from lassort.grid.types import FLUSH_THRESHOLD, BucketKey, GridSummary

__all__ = [
    "FLUSH_THRESHOLD",
    "Bucket",
    "BucketKey",
    "Grid",
    "GridSummary",
    "Segment",
    "bucket_key",
    "key_of",
]
