#!/usr/bin/env python3
"""
Benchmark wall time and peak memory of lassort for several flush thresholds.

Runs `python -m lassort.cli` as a subprocess per trial, samples the RSS of the
process tree with psutil, and reports the median of each mode. Peak memory
should track the flush threshold, not the input size.
"""

import argparse
import logging
import os
import subprocess
import sys
import tempfile
import time
from pathlib import Path
from statistics import median

import psutil

logger = logging.getLogger(__name__)


def sample_tree_rss(root_proc: psutil.Process) -> int:
    """Sum RSS over a process and all of its descendants."""
    total_rss = 0
    try:
        total_rss += root_proc.memory_info().rss
        for child in root_proc.children(recursive=True):
            try:
                total_rss += child.memory_info().rss
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        pass
    return total_rss


def measure_peak_rss_tree(proc: subprocess.Popen, poll_interval_s: float) -> int:
    """Peak total RSS in bytes of proc's tree, sampled until it exits."""
    try:
        root_proc = psutil.Process(proc.pid)
    except psutil.NoSuchProcess:
        return 0

    peak_bytes = 0
    while proc.poll() is None:
        peak_bytes = max(peak_bytes, sample_tree_rss(root_proc))
        time.sleep(poll_interval_s)
    return peak_bytes


def run_benchmark(input_file: str, flush_threshold: int, mem_sample_ms: int) -> dict:
    """Run one lassort invocation and capture timing and memory."""
    env = os.environ.copy()
    env["LASSORT_FLUSH_THRESHOLD"] = str(flush_threshold)

    with tempfile.TemporaryDirectory(prefix="lassort_bench_") as tmp_dir:
        output = Path(tmp_dir) / f"sorted{Path(input_file).suffix or '.las'}"
        cmd = [
            sys.executable,
            "-m",
            "lassort.cli",
            input_file,
            str(output),
            "--work-dir",
            str(Path(tmp_dir) / "work"),
            "--log-level",
            "WARNING",
        ]

        # stderr goes to a file so a chatty child cannot block on a full pipe.
        stderr_path = Path(tmp_dir) / "stderr.log"
        with open(stderr_path, "w", encoding="utf-8") as stderr_file:
            start_time = time.perf_counter()
            proc = subprocess.Popen(
                cmd, stdout=subprocess.DEVNULL, stderr=stderr_file, env=env
            )
            peak_rss_bytes = measure_peak_rss_tree(proc, mem_sample_ms / 1000.0)
            proc.wait()
            elapsed = time.perf_counter() - start_time
        stderr = stderr_path.read_text(encoding="utf-8", errors="replace")

    if proc.returncode != 0:
        logger.error("lassort failed (threshold=%d):", flush_threshold)
        logger.error("%s", stderr)
        sys.exit(1)

    return {
        "threshold": flush_threshold,
        "seconds": elapsed,
        "peak_rss_mib": peak_rss_bytes / (1024 * 1024),
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark lassort memory use.")
    parser.add_argument("input_file", help="LAS/LAZ file to sort")
    parser.add_argument(
        "--thresholds",
        type=int,
        nargs="+",
        default=[250_000, 1_000_000, 4_000_000],
        help="Flush thresholds to compare (default: 250000 1000000 4000000)",
    )
    parser.add_argument("--trials", type=int, default=3, help="Trials per mode (default: 3)")
    parser.add_argument(
        "--mem-sample-ms",
        type=int,
        default=50,
        help="Memory sampling interval in milliseconds (default: 50)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stderr)

    if args.trials < 1:
        parser.error("--trials must be at least 1")

    logger.info("%-12s %12s %12s %16s", "threshold", "median (s)", "min (s)", "peak RSS (MiB)")
    for threshold in args.thresholds:
        results = [
            run_benchmark(args.input_file, threshold, args.mem_sample_ms)
            for _ in range(args.trials)
        ]
        times = [r["seconds"] for r in results]
        rss = [r["peak_rss_mib"] for r in results]
        logger.info(
            "%-12d %12.2f %12.2f %16.1f", threshold, median(times), min(times), median(rss)
        )


if __name__ == "__main__":
    main()
