"""Bucket key derivation."""

from lassort.codec.types import Point
from lassort.grid.types import BucketKey


def key_of(x: float, y: float, z: float, cell_size: float) -> BucketKey:
    """
    Map coordinates to the integer cell triple for a cubic cell of edge cell_size.

    Each component is truncated toward zero, so the cell at index 0 spans
    (-cell_size, cell_size) on every axis.
    """
    return int(x / cell_size), int(y / cell_size), int(z / cell_size)


def bucket_key(point: Point, cell_size: float) -> BucketKey:
    """Key of the bucket a point belongs to."""
    return key_of(point.x, point.y, point.z, cell_size)
