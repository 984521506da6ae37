#!/usr/bin/env python3
"""
Synthetic point cloud generator for lassort benchmarks.

Writes a LAS file of uniformly distributed points inside a box, in scan-like
order (sorted along x within each chunk) so that consecutive records are
spread across many cells.
"""

import argparse
import sys

import laspy
import numpy as np

# Points generated and written per laspy call
CHUNK_SIZE = 1_000_000


def generate_synthetic_cloud(
    output_path: str,
    num_points: int,
    extent: tuple[float, float, float],
    point_format: int,
    seed: int,
) -> int:
    """
    Generate a synthetic LAS file.

    Streams output chunk by chunk to avoid holding the cloud in memory.

    Args:
        output_path: Path to output file (.las or .laz).
        num_points: Number of points to write.
        extent: Box size along x, y and z; the box starts at the origin.
        point_format: LAS point format id.
        seed: Random seed for reproducibility.

    Returns:
        Total number of points written.
    """
    rng = np.random.default_rng(seed)

    header = laspy.LasHeader(point_format=point_format, version="1.2")
    header.scales = (0.001, 0.001, 0.001)
    header.offsets = (0.0, 0.0, 0.0)

    total = 0
    with laspy.open(output_path, mode="w", header=header) as writer:
        while total < num_points:
            n = min(CHUNK_SIZE, num_points - total)
            xyz = rng.random((n, 3)) * np.asarray(extent, dtype=np.float64)
            xyz = xyz[np.argsort(xyz[:, 0], kind="stable")]

            record = laspy.ScaleAwarePointRecord.zeros(n, header=header)
            record.x = xyz[:, 0]
            record.y = xyz[:, 1]
            record.z = xyz[:, 2]
            record.intensity = rng.integers(0, 65535, size=n, dtype=np.uint16)
            writer.write_points(record)

            total += n
            print(f"  Generated {total:,}/{num_points:,} points...", file=sys.stderr)

    return total


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Generate a synthetic LAS point cloud.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 20M points in a 1km x 1km x 100m box
  python generate_synthetic_cloud.py data/cloud.las --points 20000000

  # Compressed, point format 3
  python generate_synthetic_cloud.py data/cloud.laz --points 5000000 --point-format 3
""",
    )

    parser.add_argument("out", help="Output file path")
    parser.add_argument(
        "--points",
        type=int,
        default=10_000_000,
        help="Number of points (default: 10000000)",
    )
    parser.add_argument(
        "--extent",
        type=float,
        nargs=3,
        default=(1000.0, 1000.0, 100.0),
        metavar=("X", "Y", "Z"),
        help="Box size along each axis (default: 1000 1000 100)",
    )
    parser.add_argument(
        "--point-format",
        type=int,
        default=1,
        help="LAS point format id (default: 1)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=1,
        help="Random seed for reproducibility (default: 1)",
    )

    args = parser.parse_args()

    if args.points < 1:
        parser.error("--points must be at least 1")
    if any(e <= 0 for e in args.extent):
        parser.error("--extent values must be positive")

    print(f"Output: {args.out}", file=sys.stderr)
    print(f"Points: {args.points:,}", file=sys.stderr)
    print(f"Extent: {tuple(args.extent)}", file=sys.stderr)

    total = generate_synthetic_cloud(
        output_path=args.out,
        num_points=args.points,
        extent=tuple(args.extent),
        point_format=args.point_format,
        seed=args.seed,
    )

    print(f"Done! Wrote {total:,} points to {args.out}", file=sys.stderr)


if __name__ == "__main__":
    main()
