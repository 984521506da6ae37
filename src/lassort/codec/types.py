"""Shared types for point-cloud codecs."""

import math
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Protocol, Self, TypeAlias

Triple: TypeAlias = tuple[float, float, float]


@dataclass(frozen=True, slots=True)
class Point:
    """One point record. Only the coordinates are read; payload is carried verbatim."""

    x: float
    y: float
    z: float
    payload: bytes = b""


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned bounds of a point cloud."""

    mins: Triple
    maxs: Triple

    @property
    def extents(self) -> Triple:
        return (
            self.maxs[0] - self.mins[0],
            self.maxs[1] - self.mins[1],
            self.maxs[2] - self.mins[2],
        )

    @property
    def volume(self) -> float:
        return math.prod(self.extents)


@dataclass(frozen=True, slots=True)
class Header:
    """
    Container metadata.

    record_count is advisory on input. layout holds the codec's native header
    (point format, scales, offsets) and is passed through untouched.
    """

    record_count: int
    bounds: BoundingBox
    compressed: bool = False
    layout: Any = field(default=None, compare=False, repr=False)

    def for_segment(self) -> "Header":
        """Header for a transient spill segment: uncompressed, empty."""
        return replace(self, record_count=0, compressed=False)

    def for_output(self, compressed: bool) -> "Header":
        """Header for the final output; the true count is committed on finalize."""
        return replace(self, record_count=0, compressed=compressed)


class PointReader(Protocol):
    """Sequential, forward-only point source."""

    header: Header

    def __iter__(self) -> Iterator[Point]: ...

    def __enter__(self) -> Self: ...

    def __exit__(self, *exc_info: object) -> None: ...


class PointWriter(Protocol):
    """Point sink whose persisted header count is committed by finalize()."""

    def write(self, point: Point) -> None: ...

    def finalize(self, record_count: int | None = None) -> int: ...

    def __enter__(self) -> Self: ...

    def __exit__(self, *exc_info: object) -> None: ...


class Codec(Protocol):
    """Factory for readers and writers of one container format."""

    segment_suffix: str

    def is_compressed(self, path: Path) -> bool: ...

    def open_reader(self, path: Path) -> PointReader: ...

    def open_writer(self, path: Path, header: Header) -> PointWriter: ...
