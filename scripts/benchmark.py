#!/usr/bin/env python3
"""
zderive Performance Benchmarks

Measures how derived stores scale with the size of the store graph, and prints
the results as rich-formatted tables.

Usage:
    python scripts/benchmark.py            # Run all benchmarks
    python scripts/benchmark.py --config   # Show current benchmark configuration
    python scripts/benchmark.py --quiet    # Only show the final table

Configuration:
    Adjust the constants at the top of the file to change benchmark parameters.
"""

import argparse
import time
from typing import Any, Callable, Dict

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from zderive import create_simple_store, derive

# Configuration constants - adjust these to change benchmark behavior
TIME_LIMIT_SECONDS = 1.0  # Maximum time allowed per operation
STARTING_N = 10  # Starting number of stores/operations
SCALE_FACTOR = 1.5  # How much to multiply N by each iteration
CHAIN_LENGTH = 200  # Links in the chain benchmark; propagation is recursive


def _sum(deps, prev_deps, prev_state):
    return sum(deps)


class DeriveBenchmark:
    """Rich-formatted display for zderive performance benchmarking."""

    def __init__(self, quiet: bool = False):
        self.console = Console()
        self.quiet = quiet
        self.results: Dict[str, Dict[str, Any]] = {}

    def run_benchmarks(self):
        """Run all benchmarks and display results."""
        start_time = time.time()

        self._display_header()

        self._run("creation", "Derived Store Creation", self._creation)
        self._run("wide", "Wide Recompute", self._wide)
        self._run("chain", "Chain Propagation", self._chain)
        self._run("fanout", "Listener Fan-out", self._fanout)

        self._display_final_results(start_time)

    # ========================================================================
    # WORKLOADS
    # ========================================================================

    def _creation(self, n: int) -> float:
        """Build n derived stores over two shared sources."""
        a, b = create_simple_store(1), create_simple_store(2)
        start_time = time.perf_counter()
        for _ in range(n):
            derive([a, b], _sum)
        return time.perf_counter() - start_time

    def _wide(self, n: int) -> float:
        """Update each of n sources feeding one derived store."""
        sources = [create_simple_store(0) for _ in range(n)]
        total = derive(sources, _sum)
        start_time = time.perf_counter()
        for source in sources:
            source.set_state(1)
        elapsed = time.perf_counter() - start_time
        assert total.get_state() == n
        return elapsed

    def _chain(self, n: int) -> float:
        """Push n updates through a chain of CHAIN_LENGTH derived stores."""
        base = create_simple_store(0)
        current = base
        for _ in range(CHAIN_LENGTH):
            current = derive([current], lambda deps, *_: deps[0] + 1)
        start_time = time.perf_counter()
        for i in range(1, n + 1):
            base.set_state(i)
        elapsed = time.perf_counter() - start_time
        assert current.get_state() == n + CHAIN_LENGTH
        return elapsed

    def _fanout(self, n: int) -> float:
        """Notify n listeners of one derived store."""
        base = create_simple_store(0)
        doubled = derive([base], lambda deps, *_: deps[0] * 2)
        received = []
        for _ in range(n):
            doubled.subscribe(lambda state, prev: received.append(state))
        start_time = time.perf_counter()
        base.set_state(1)
        elapsed = time.perf_counter() - start_time
        assert len(received) == n
        return elapsed

    # ========================================================================
    # RUNNER
    # ========================================================================

    def _run(self, key: str, title: str, workload: Callable[[int], float]):
        if not self.quiet:
            self.console.print(f"[yellow]Running {title} benchmark...[/yellow]")
        result = self._run_adaptive_benchmark(workload)
        self.results[key] = {"title": title, **result}
        if not self.quiet:
            self.console.print(
                f"[green]✓[/green] {title}: {result['operations_per_second']:,.0f} "
                f"ops/sec ({result['max_n']} items)"
            )

    def _run_adaptive_benchmark(self, workload: Callable[[int], float]) -> Dict[str, Any]:
        """Scale the workload until a single run hits the time limit."""
        n = STARTING_N
        while True:
            operation_time = max(workload(n), 1e-9)
            result = {
                "max_n": n,
                "operation_time": operation_time,
                "operations_per_second": n / operation_time,
            }
            if operation_time >= TIME_LIMIT_SECONDS:
                return result
            n = int(n * SCALE_FACTOR) + 1

    # ========================================================================
    # DISPLAY
    # ========================================================================

    def _display_header(self):
        header = Panel(
            Align.center("zderive Performance Benchmark Suite"),
            title="zderive Benchmarks",
            border_style="blue",
        )
        self.console.print(header)
        self.console.print()

    def _display_final_results(self, start_time: float):
        elapsed = time.time() - start_time

        table = Table(title="Final Benchmark Results")
        table.add_column("Benchmark", style="cyan", no_wrap=True)
        table.add_column("Max Workload", style="magenta")
        table.add_column("Performance", style="green", justify="right")
        table.add_column("Latency / item", style="yellow", justify="right")

        for result in self.results.values():
            latency_us = result["operation_time"] / max(result["max_n"], 1) * 1e6
            table.add_row(
                result["title"],
                f"{result['max_n']:,}",
                f"{result['operations_per_second'] / 1000:.1f}K ops/sec",
                f"{latency_us:.2f}μs",
            )

        self.console.print()
        self.console.print(table)
        self.console.print(f"[dim]Completed in {elapsed:.1f}s[/dim]")


def print_config():
    """Print the current benchmark configuration."""
    print("zderive Benchmark Configuration:")
    print(f"  TIME_LIMIT_SECONDS: {TIME_LIMIT_SECONDS}")
    print(f"  STARTING_N: {STARTING_N}")
    print(f"  SCALE_FACTOR: {SCALE_FACTOR}")
    print(f"  CHAIN_LENGTH: {CHAIN_LENGTH}")


def main():
    """Main entry point for the benchmark script."""
    parser = argparse.ArgumentParser(description="zderive Performance Benchmarks")
    parser.add_argument(
        "--config", action="store_true", help="Show current benchmark configuration"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output, show only final results",
    )
    args = parser.parse_args()

    if args.config:
        print_config()
        return

    if not args.quiet:
        print_config()
        print()

    DeriveBenchmark(quiet=args.quiet).run_benchmarks()


if __name__ == "__main__":
    main()
