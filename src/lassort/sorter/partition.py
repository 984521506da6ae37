import enum
import logging
import math
import random
import time
from dataclasses import dataclass, field
from pathlib import Path

from lassort.codec.las import LasCodec
from lassort.codec.types import Codec
from lassort.config import get_flush_threshold
from lassort.errors import UsageError
from lassort.grid import Grid, GridSummary
from lassort.progress import ProgressCallback
from lassort.sorter.estimate import estimate_cell_size

logger = logging.getLogger(__name__)

DEFAULT_WORK_DIR = "temp"


class Phase(enum.Enum):
    """States of a run; each is entered only after the previous one completed."""

    OPENED = "opened"
    INGESTED = "ingested"
    MERGED = "merged"


@dataclass(frozen=True, slots=True)
class SortSession:
    """Configuration of one sorting run."""

    input_path: Path
    output_path: Path
    work_dir: Path = Path(DEFAULT_WORK_DIR)
    cell_size: float = 0.0
    thin: float = 0.0
    seed: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "input_path", Path(self.input_path))
        object.__setattr__(self, "output_path", Path(self.output_path))
        object.__setattr__(self, "work_dir", Path(self.work_dir))

        if not math.isfinite(self.cell_size) or self.cell_size < 0:
            raise UsageError(f"cell size must be >= 0, got {self.cell_size}")
        if not 0.0 <= self.thin < 1.0:
            raise UsageError(f"thinning fraction must be in [0, 1), got {self.thin}")
        if self.input_path.resolve() == self.output_path.resolve():
            raise UsageError(f"output path must differ from input path: {self.input_path}")


@dataclass
class PartitionResult:
    """Outcome of a completed run."""

    cell_size: float
    summary: GridSummary
    points_written: int
    timings: dict[str, float] = field(default_factory=dict)


def _enter(phase: Phase) -> None:
    logger.debug("Phase: %s", phase.value)


def default_output_path(input_path: str | Path) -> Path:
    """sorted.<ext> in the current directory, keeping the input's extension."""
    suffix = Path(input_path).suffix or ".las"
    return Path(f"sorted{suffix}")


def partition(
    session: SortSession,
    codec: Codec | None = None,
    progress: ProgressCallback | None = None,
    flush_threshold: int | None = None,
) -> PartitionResult:
    """
    Rewrite session.input_path so points are grouped by spatial cell.

    Two passes:
    1. Ingest: route each point to its cell bucket, spilling buckets to the
       work dir every flush_threshold points
    2. Merge: replay buckets in ascending key order into the output file
    """
    codec = codec or LasCodec()
    if flush_threshold is None:
        flush_threshold = get_flush_threshold()
    rng = random.Random(session.seed)
    timings: dict[str, float] = {}
    total_start = time.perf_counter()

    with codec.open_reader(session.input_path) as reader:
        header = reader.header
        _enter(Phase.OPENED)
        logger.info(
            "File: %s, declared points: %d", session.input_path.name, header.record_count
        )

        if session.cell_size > 0:
            cell_size = session.cell_size
            logger.info("Cell size: %.3f", cell_size)
        else:
            cell_size = estimate_cell_size(header.bounds, header.record_count, session.thin)
            logger.info("Cell size: %.3f (estimated)", cell_size)

        compressed = codec.is_compressed(session.output_path)

        with Grid(
            session.work_dir,
            cell_size,
            codec,
            flush_threshold=flush_threshold,
            progress=progress,
        ) as grid:
            # Pass 1: ingest into buckets.
            t1_start = time.perf_counter()
            summary = grid.ingest(reader, thin=session.thin, rng=rng)
            timings["ingest"] = time.perf_counter() - t1_start
            _enter(Phase.INGESTED)

            if summary.points_thinned:
                logger.info(
                    "Thinned %d of %d points", summary.points_thinned, summary.points_read
                )
            if summary.points_read and not summary.points_retained:
                logger.warning("Thinning removed every point; output will be empty")
            logger.info(
                "Pass 1 done: %d points in %d buckets in %.2fs",
                summary.points_retained,
                summary.buckets,
                timings["ingest"],
            )

            # Pass 2: merge buckets in key order.
            t2_start = time.perf_counter()
            with codec.open_writer(
                session.output_path, header.for_output(compressed)
            ) as writer:
                written = grid.merge_out(writer)
                writer.finalize(grid.total)
            timings["merge"] = time.perf_counter() - t2_start
            _enter(Phase.MERGED)
            logger.info("Pass 2 done: %d points written in %.2fs", written, timings["merge"])

    timings["total"] = time.perf_counter() - total_start
    logger.info(
        "Buckets: %d, average points per bucket: %.1f, average bucket file size: %.1f KiB",
        summary.buckets,
        summary.average_points_per_bucket,
        summary.average_bucket_file_size / 1024,
    )
    logger.info("Result: %s (total %.2fs)", session.output_path, timings["total"])

    return PartitionResult(
        cell_size=cell_size,
        summary=summary,
        points_written=written,
        timings=timings,
    )


def main_partition(
    session: SortSession,
    progress: ProgressCallback | None = None,
    flush_threshold: int | None = None,
) -> int:
    """Run a session and return the number of points written."""
    result = partition(session, progress=progress, flush_threshold=flush_threshold)
    return result.points_written
