"""Point-cloud container codecs."""

from lassort.codec.las import LasCodec
from lassort.codec.types import BoundingBox, Codec, Header, Point, PointReader, PointWriter

__all__ = [
    "BoundingBox",
    "Codec",
    "Header",
    "LasCodec",
    "Point",
    "PointReader",
    "PointWriter",
]
