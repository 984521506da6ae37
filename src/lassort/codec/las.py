"""LAS/LAZ codec backed by laspy."""

import copy
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Self

import laspy
import numpy as np

from lassort.codec.types import BoundingBox, Header, Point
from lassort.errors import RuntimeFailure

logger = logging.getLogger(__name__)

# Records decoded or encoded per laspy call.
CHUNK_SIZE = 100_000

COMPRESSED_SUFFIX = ".laz"


def _triple(values) -> tuple[float, float, float]:
    return float(values[0]), float(values[1]), float(values[2])


class LasPointReader:
    """Stream points from a LAS/LAZ file, one Point per record."""

    def __init__(self, path: Path, chunk_size: int = CHUNK_SIZE):
        self._path = Path(path)
        self._chunk_size = chunk_size
        self._reader = laspy.open(self._path, mode="r")
        las_header = self._reader.header
        self.header = Header(
            record_count=int(las_header.point_count),
            bounds=BoundingBox(_triple(las_header.mins), _triple(las_header.maxs)),
            compressed=self._path.suffix.lower() == COMPRESSED_SUFFIX,
            layout=las_header,
        )

    def __iter__(self) -> Iterator[Point]:
        for chunk in self._reader.chunk_iterator(self._chunk_size):
            raw = chunk.array
            record_size = raw.dtype.itemsize
            data = raw.tobytes()
            xs = np.asarray(chunk.x, dtype=np.float64).tolist()
            ys = np.asarray(chunk.y, dtype=np.float64).tolist()
            zs = np.asarray(chunk.z, dtype=np.float64).tolist()
            offset = 0
            for x, y, z in zip(xs, ys, zs, strict=True):
                yield Point(x, y, z, data[offset : offset + record_size])
                offset += record_size

    def close(self) -> None:
        self._reader.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class LasPointWriter:
    """
    Write points to a LAS/LAZ file.

    Payloads are batched into a structured array of the header's point format
    and handed to laspy, which commits the point count on close.
    """

    def __init__(self, path: Path, header: Header, batch_size: int = CHUNK_SIZE):
        if header.layout is None:
            raise RuntimeFailure(f"cannot write {path}: header carries no LAS layout")
        self._path = Path(path)
        self._batch_size = batch_size
        las_header = copy.deepcopy(header.layout)
        self._writer = laspy.open(
            self._path, mode="w", header=las_header, do_compress=header.compressed
        )
        self._point_format = self._writer.header.point_format
        self._dtype = self._point_format.dtype()
        self._pending = bytearray()
        self._pending_count = 0
        self._closed = False
        self.written = 0

    def write(self, point: Point) -> None:
        self._pending += point.payload
        self._pending_count += 1
        if self._pending_count >= self._batch_size:
            self._write_pending()

    def _write_pending(self) -> None:
        if not self._pending_count:
            return
        array = np.frombuffer(self._pending, dtype=self._dtype)
        if len(array) != self._pending_count:
            raise RuntimeFailure(
                f"payload size mismatch writing {self._path}: "
                f"{self._pending_count} points, {len(array)} records"
            )
        self._writer.write_points(laspy.PackedPointRecord(array, self._point_format))
        self.written += self._pending_count
        self._pending = bytearray()
        self._pending_count = 0

    def finalize(self, record_count: int | None = None) -> int:
        """Flush, check the expected count and commit it to the file header."""
        self._write_pending()
        if record_count is not None and record_count != self.written:
            raise RuntimeFailure(
                f"record count mismatch for {self._path}: "
                f"expected {record_count}, wrote {self.written}"
            )
        self.close()
        return self.written

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._writer.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class LasCodec:
    """Codec for the LAS container; ``.laz`` paths are compressed."""

    segment_suffix = ".las"

    def __init__(self, chunk_size: int = CHUNK_SIZE):
        self.chunk_size = chunk_size

    def is_compressed(self, path: Path) -> bool:
        return Path(path).suffix.lower() == COMPRESSED_SUFFIX

    def open_reader(self, path: Path) -> LasPointReader:
        logger.debug("Opening %s for reading", path)
        return LasPointReader(path, chunk_size=self.chunk_size)

    def open_writer(self, path: Path, header: Header) -> LasPointWriter:
        logger.debug("Opening %s for writing (compressed=%s)", path, header.compressed)
        return LasPointWriter(path, header, batch_size=self.chunk_size)
