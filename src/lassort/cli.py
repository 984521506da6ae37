"""Command-line interface for lassort."""

import argparse
import logging
import sys

from lassort.config import get_flush_threshold
from lassort.errors import UsageError
from lassort.progress import log_progress
from lassort.sorter.partition import (
    DEFAULT_WORK_DIR,
    SortSession,
    default_output_path,
    main_partition,
)

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure logging to write to stderr."""
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="lassort",
        description="Reorder a LAS/LAZ file so points are grouped by spatial cell.",
    )

    parser.add_argument("input_file", help="Path to the source LAS/LAZ file")

    parser.add_argument(
        "output_file",
        nargs="?",
        default=None,
        help="Path to the sorted output (default: sorted.<input extension>)",
    )

    parser.add_argument(
        "-s",
        "--size",
        type=float,
        default=0.0,
        help="Cell edge length (default: 0, estimate from the header)",
    )

    parser.add_argument(
        "-t",
        "--thin",
        type=float,
        default=0.0,
        help="Fraction of points to drop at random, in [0, 1) (default: 0)",
    )

    parser.add_argument(
        "-w",
        "--work-dir",
        default=DEFAULT_WORK_DIR,
        help=f"Directory for temporary segment files (default: {DEFAULT_WORK_DIR})",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the thinning random generator",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    log_level = getattr(logging, args.log_level)
    configure_logging(log_level)

    output_file = args.output_file or default_output_path(args.input_file)

    try:
        session = SortSession(
            input_path=args.input_file,
            output_path=output_file,
            work_dir=args.work_dir,
            cell_size=args.size,
            thin=args.thin,
            seed=args.seed,
        )
        flush_threshold = get_flush_threshold()
    except UsageError as exc:
        parser.error(str(exc))

    try:
        main_partition(session, progress=log_progress, flush_threshold=flush_threshold)
    except Exception as exc:
        logger.error("%s", exc)
        logger.debug("Run aborted", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
