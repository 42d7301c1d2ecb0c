# scripts/benchmark.py
# ============================================================
# Performance Benchmark Script
# ============================================================
# Measures orientation detection throughput for a document at
# different worker counts.
#
# Usage:
#   python scripts/benchmark.py scans/batch.tif --workers 1 2 4 8 --runs 3
# ============================================================

import argparse
import statistics
import time

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from orientation.pipeline.orchestrator import PipelineOrchestrator
from orientation.utils.logger import get_logger

logger = get_logger(__name__)
console = Console()


def run_benchmark(input_path: str, worker_counts: list[int], runs: int = 3) -> None:
    """
    Time full detection runs of one document per worker count.

    Pages are loaded once up front so only detection is timed.

    Args:
        input_path: TIFF, PDF, image, or directory to benchmark.
        worker_counts: Parallelism caps to compare.
        runs: Repetitions per worker count.
    """
    console.print(Panel(
        f"[bold yellow]Orientation Benchmark[/bold yellow]\n"
        f"Input:   {input_path}\n"
        f"Workers: {', '.join(map(str, worker_counts))}\n"
        f"Runs:    {runs}",
        title="Benchmark",
        border_style="yellow",
    ))

    pages = PipelineOrchestrator().load(input_path)
    console.print(f"\nBenchmarking with [bold]{len(pages)}[/bold] pages...\n")

    table = Table(title="Benchmark Results", border_style="bright_blue")
    table.add_column("Workers", justify="right")
    table.add_column("Mean", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Pages/min", justify="right")

    baseline = None
    for workers in worker_counts:
        pipeline = PipelineOrchestrator(max_workers=workers)
        timings = []
        for _ in range(runs):
            start = time.perf_counter()
            verdicts = pipeline.detect_pages(pages).verdicts
            timings.append((time.perf_counter() - start) * 1000)

            if baseline is None:
                baseline = verdicts
            elif verdicts != baseline:
                logger.warning(f"Verdicts with {workers} workers differ from the first run")

        mean = statistics.mean(timings)
        table.add_row(
            str(workers),
            f"[cyan]{mean:.0f}ms[/cyan]",
            f"[green]{min(timings):.0f}ms[/green]",
            f"[yellow]{max(timings):.0f}ms[/yellow]",
            f"[bold green]{len(pages) * 60_000 / mean:.1f}[/bold green]",
        )

    console.print(table)


# ============================================================
# Entry Point
# ============================================================

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Orientation detection benchmark")
    parser.add_argument("input_path", help="Document to benchmark")
    parser.add_argument("--workers", type=int, nargs="+", default=[1, 2, 4], help="Worker counts to compare")
    parser.add_argument("--runs", type=int, default=3, help="Runs per worker count")
    args = parser.parse_args()

    run_benchmark(args.input_path, args.workers, args.runs)
