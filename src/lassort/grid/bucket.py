"""Per-cell point buffer that spills to disk segments."""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from lassort.codec.types import Codec, Header, Point, PointWriter
from lassort.grid.types import SEGMENT_PREFIX, BucketKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Segment:
    """One flushed batch of a bucket's points, stored as its own container file."""

    path: Path
    record_count: int


class Bucket:
    """
    Buffer for the points of one cell.

    Every flush writes the buffer to a new segment; replay streams the
    segments back in creation order. Until replay, count equals the records held in
    segments plus the records still buffered.
    """

    def __init__(self, key: BucketKey, work_dir: Path, codec: Codec, header: Header):
        self.key = key
        self._work_dir = work_dir
        self._codec = codec
        self._header = header
        self._buffer: list[Point] = []
        self._segments: list[Segment] = []
        self._replayed = False
        self.count = 0

    @property
    def segments(self) -> tuple[Segment, ...]:
        return tuple(self._segments)

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    def add(self, point: Point) -> None:
        self._buffer.append(point)
        self.count += 1

    def _new_segment_path(self) -> Path:
        fd, name = tempfile.mkstemp(
            prefix=SEGMENT_PREFIX,
            suffix=self._codec.segment_suffix,
            dir=self._work_dir,
        )
        os.close(fd)
        return Path(name)

    def flush(self) -> None:
        """Write buffered points to a new segment and clear the buffer."""
        if not self._buffer:
            return

        path = self._new_segment_path()
        try:
            with self._codec.open_writer(path, self._header) as writer:
                for point in self._buffer:
                    writer.write(point)
                writer.finalize(len(self._buffer))
        except BaseException:
            path.unlink(missing_ok=True)
            raise

        self._segments.append(Segment(path, len(self._buffer)))
        self._buffer.clear()

    def replay(self, writer: PointWriter) -> int:
        """
        Stream all points of this bucket into writer, in arrival order.

        Each segment is deleted as soon as it has been replayed.
        """
        if self._replayed:
            raise RuntimeError(f"bucket {self.key} was already replayed")
        self._replayed = True

        written = 0
        while self._segments:
            segment = self._segments[0]
            with self._codec.open_reader(segment.path) as reader:
                for point in reader:
                    writer.write(point)
                    written += 1
            segment.path.unlink()
            self._segments.pop(0)

        for point in self._buffer:
            writer.write(point)
            written += 1
        self._buffer.clear()

        return written

    def disk_footprint(self) -> int:
        """Bytes currently held on disk by this bucket's segments."""
        return sum(segment.path.stat().st_size for segment in self._segments)

    def discard(self) -> None:
        """Delete any segments that were not replayed."""
        for segment in self._segments:
            segment.path.unlink(missing_ok=True)
        if self._segments:
            logger.debug("Bucket %s: discarded %d segments", self.key, len(self._segments))
        self._segments.clear()
