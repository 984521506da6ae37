"""Spatial grid driving bounded-memory ingestion and ordered merge-out."""

import logging
import math
import random
import shutil
from pathlib import Path
from typing import Self

from lassort.codec.types import Codec, Header, PointReader, PointWriter
from lassort.grid.bucket import Bucket
from lassort.grid.key import bucket_key
from lassort.grid.types import FLUSH_THRESHOLD, BucketKey, GridSummary
from lassort.progress import ProgressCallback

logger = logging.getLogger(__name__)


class Grid:
    """
    Owns the buckets of one run and the work dir their segments live in.

    Use as a context manager: the work dir is created on enter if needed, and
    on exit every unreplayed segment is deleted. The work dir itself is only
    removed after a clean exit, and only if this grid created it.
    """

    def __init__(
        self,
        work_dir: str | Path,
        cell_size: float,
        codec: Codec,
        flush_threshold: int = FLUSH_THRESHOLD,
        progress: ProgressCallback | None = None,
    ):
        if not (math.isfinite(cell_size) and cell_size > 0):
            raise ValueError(f"cell_size must be positive and finite, got {cell_size}")
        if flush_threshold <= 0:
            raise ValueError(f"flush_threshold must be positive, got {flush_threshold}")

        self.work_dir = Path(work_dir)
        self.cell_size = cell_size
        self.flush_threshold = flush_threshold
        self._codec = codec
        self._progress = progress
        self._buckets: dict[BucketKey, Bucket] = {}
        self._created_root: Path | None = None
        self._summary: GridSummary | None = None
        self.total = 0

    def open(self) -> None:
        if self.work_dir.exists():
            return

        # Topmost missing ancestor; everything below it is ours to remove.
        root = self.work_dir
        while not root.parent.exists():
            root = root.parent
        self.work_dir.mkdir(parents=True)
        self._created_root = root
        logger.debug("Created work dir %s", self.work_dir)

    def close(self, success: bool = True) -> None:
        for bucket in self._buckets.values():
            bucket.discard()
        if success and self._created_root is not None:
            shutil.rmtree(self._created_root)
            logger.debug("Removed work dir %s", self._created_root)
            self._created_root = None

    def __enter__(self) -> Self:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close(success=exc_type is None)

    def _report(self, phase: str, done: int, expected: int) -> None:
        if self._progress is not None and expected > 0:
            self._progress(phase, 100.0 * done / expected)

    def flush_all(self) -> None:
        """Flush every bucket, bounding buffered points to one threshold's worth."""
        for bucket in self._buckets.values():
            bucket.flush()

    def ingest(
        self,
        reader: PointReader,
        thin: float = 0.0,
        rng: random.Random | None = None,
    ) -> GridSummary:
        """
        Route every point of reader to its bucket, spilling to disk as it goes.

        With thin > 0 each point is dropped with that probability before it is
        routed or counted.
        """
        if not self.work_dir.is_dir():
            raise RuntimeError("grid must be opened before ingest")
        if self._summary is not None:
            raise RuntimeError("grid was already ingested")
        if thin > 0 and rng is None:
            rng = random.Random()

        header: Header = reader.header
        segment_header = header.for_segment()
        declared = header.record_count
        stats = GridSummary()

        for point in reader:
            stats.points_read += 1

            if thin > 0 and rng.random() < thin:
                stats.points_thinned += 1
            else:
                key = bucket_key(point, self.cell_size)
                bucket = self._buckets.get(key)
                if bucket is None:
                    bucket = Bucket(key, self.work_dir, self._codec, segment_header)
                    self._buckets[key] = bucket
                bucket.add(point)
                self.total += 1

            if stats.points_read % self.flush_threshold == 0:
                self.flush_all()
                stats.flushes += 1
                logger.debug(
                    "Flushed %d buckets after %d points", len(self._buckets), stats.points_read
                )
                self._report("ingest", stats.points_read, declared)

        self.flush_all()
        stats.flushes += 1
        self._report("ingest", stats.points_read, stats.points_read)

        stats.points_retained = self.total
        stats.segments = sum(len(b.segments) for b in self._buckets.values())
        stats.buckets = len(self._buckets)
        if self._buckets:
            stats.average_points_per_bucket = self.total / len(self._buckets)
            footprint = sum(b.disk_footprint() for b in self._buckets.values())
            stats.average_bucket_file_size = footprint / len(self._buckets)
        self._summary = stats
        return stats

    def merge_out(self, writer: PointWriter) -> int:
        """Replay all buckets into writer in ascending key order."""
        if self._summary is None:
            raise RuntimeError("grid must be ingested before merge_out")

        written = 0
        for key in sorted(self._buckets):
            written += self._buckets[key].replay(writer)
            self._report("merge", written, self.total)
        return written

    @property
    def summary(self) -> GridSummary:
        if self._summary is None:
            raise RuntimeError("grid has not been ingested")
        return self._summary

    def bucket_count(self) -> int:
        return self.summary.buckets

    def average_points_per_bucket(self) -> float:
        return self.summary.average_points_per_bucket

    def average_bucket_file_size(self) -> float:
        return self.summary.average_bucket_file_size

    def buckets(self) -> list[Bucket]:
        """Buckets in merge order."""
        return [self._buckets[key] for key in sorted(self._buckets)]
