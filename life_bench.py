#!/usr/bin/env python3
"""
Profiling harness for the sparse Life board.

Steps a seeded board headlessly under cProfile, optionally pushing every
generation through the curses renderer into a stub window, then prints a
ranked breakdown of where time is spent.

Usage:
  python3 life_bench.py                    # 500 generations of r_pentomino
  python3 life_bench.py -n 1000 -p acorn   # another seed
  python3 life_bench.py --line-timing      # per-generation component timing
  python3 life_bench.py --dump prof.out    # dump cProfile binary for snakeviz etc.
  python3 life_bench.py --stats run.csv    # per-generation telemetry as CSV
"""

from __future__ import annotations

import argparse
import cProfile
import pstats
import sys
import time
from io import StringIO
from pathlib import Path
from typing import IO, ClassVar

import numpy as np

from life import PATTERNS, Board
from life_term import Viewport, render


# ── Fake curses stubs for headless rendering ────────────────────────────

class FakeWindow:
    """Minimal curses.window stub that absorbs addstr calls."""

    def __init__(self, rows: int, cols: int) -> None:
        self._rows = rows
        self._cols = cols
        self.calls = 0

    def getmaxyx(self) -> tuple[int, int]:
        return self._rows, self._cols

    def addstr(self, *args: object) -> None:
        self.calls += 1

    def erase(self) -> None:
        pass

    def refresh(self) -> None:
        pass


# ═══════════════════════════════════════════════════════════════════════
#  Stats logger
# ═══════════════════════════════════════════════════════════════════════

class StatsLogger:
    """Writes per-generation telemetry to CSV for post-hoc tuning."""

    HEADER: ClassVar[str] = "gen,time_s,population,births,deaths,step_ms\n"

    def __init__(self, path: Path) -> None:
        self._path = path
        self._fh: IO[str] | None = None
        self._t0: float = time.monotonic()

    def open(self) -> bool:
        """Start a fresh CSV. Returns False if the file could not be written."""
        try:
            self._fh = open(self._path, "w")
            self._fh.write(self.HEADER)
            self._fh.flush()
        except OSError:
            self._fh = None
        return self._fh is not None

    def log(self, gen: int, pop: int, births: int, deaths: int, step_ms: float) -> None:
        if self._fh is None:
            return
        t = time.monotonic() - self._t0
        self._fh.write(f"{gen},{t:.3f},{pop},{births},{deaths},{step_ms:.3f}\n")
        if gen % 50 == 0:
            try:
                self._fh.flush()
            except OSError:
                pass

    def close(self) -> None:
        if self._fh is not None:
            try:
                self._fh.close()
            except OSError:
                pass
            self._fh = None


def seeded_board(pattern: str) -> Board:
    board = Board()
    board.place(pattern, (0, 0))
    return board


def step_with_stats(board: Board) -> tuple[Board, int, int]:
    """Advance once and report (next board, births, deaths)."""
    nxt = board.advance()
    before, after = board.cells(), nxt.cells()
    return nxt, len(after - before), len(before - after)


def run_benchmark(
    n_generations: int,
    pattern: str = "r_pentomino",
    term_rows: int = 60,
    term_cols: int = 200,
    line_timing: bool = False,
    dump_path: str | None = None,
    stats_path: Path | None = None,
) -> Board:
    """Run the benchmark for n_generations, report results, return the final board."""

    board = seeded_board(pattern)
    viewport = Viewport()
    window = FakeWindow(term_rows, term_cols)

    print(f"Seed: {pattern} ({len(board)} cells)  "
          f"Generations: {n_generations}  "
          f"Terminal: {term_rows}x{term_cols}")
    print()

    logger: StatsLogger | None = None
    if stats_path is not None:
        logger = StatsLogger(stats_path)
        if not logger.open():
            print(f"warning: cannot write stats to {stats_path}; telemetry disabled",
                  file=sys.stderr)

    try:
        # ── Per-generation component timing ────────────────────────
        if line_timing or logger is not None:
            step_times: list[float] = []
            render_times: list[float] = []

            for gen in range(1, n_generations + 1):
                t0 = time.perf_counter()
                board, births, deaths = step_with_stats(board)
                step_dt = time.perf_counter() - t0
                step_times.append(step_dt)

                t0 = time.perf_counter()
                render(window, board, viewport)  # type: ignore[arg-type]
                render_times.append(time.perf_counter() - t0)

                if logger is not None:
                    logger.log(gen, len(board), births, deaths, step_dt * 1000)

                if line_timing and gen % 100 == 0:
                    avg_ms = sum(step_times[-100:]) / 100 * 1000
                    print(f"  gen {gen}/{n_generations}  "
                          f"avg step {avg_ms:.2f}ms  "
                          f"pop {len(board):,}")

            if line_timing and step_times:
                print()
                print("=== Per-Generation Component Breakdown (ms) ===")
                print(f"{'Component':<25} {'Mean':>8} {'P50':>8} {'P95':>8} {'P99':>8} {'Max':>8}")
                print("-" * 73)

                def stats_line(name: str, data: list[float]) -> str:
                    arr = np.array(data) * 1000  # to ms
                    return (f"{name:<25} {arr.mean():8.2f} {np.median(arr):8.2f} "
                            f"{np.percentile(arr, 95):8.2f} {np.percentile(arr, 99):8.2f} "
                            f"{arr.max():8.2f}")

                print(stats_line("advance()", step_times))
                print(stats_line("render()", render_times))
                print(f"\naddstr calls/generation: "
                      f"{window.calls / len(step_times):.0f}")
            return board

        # ── cProfile run ───────────────────────────────────────────
        def profiled_run() -> Board:
            b = board
            for _ in range(n_generations):
                b = b.advance()
                render(window, b, viewport)  # type: ignore[arg-type]
            return b

        profiler = cProfile.Profile()
        wall_t0 = time.perf_counter()
        board = profiler.runcall(profiled_run)
        wall_dt = time.perf_counter() - wall_t0

        per_gen = wall_dt / max(n_generations, 1)
        print(f"Wall time: {wall_dt:.2f}s  ({per_gen * 1000:.2f}ms/generation)")
        print(f"Final population: {len(board):,}")
        print()

        if dump_path:
            profiler.dump_stats(dump_path)
            print(f"Profile data saved to: {dump_path}")
            print(f"  View with: python3 -m pstats {dump_path}")
            print()

        buf = StringIO()
        ps = pstats.Stats(profiler, stream=buf)
        ps.sort_stats("cumulative")
        ps.print_stats(25)
        print(buf.getvalue())
        return board
    finally:
        if logger is not None:
            logger.close()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Profile the sparse Life board")
    parser.add_argument("-n", "--generations", type=int, default=500,
                        help="Number of generations to step (default: 500)")
    parser.add_argument("-p", "--pattern", choices=sorted(PATTERNS), default="r_pentomino",
                        help="Seed pattern placed at the origin (default: r_pentomino)")
    parser.add_argument("--rows", type=int, default=60,
                        help="Simulated terminal rows (default: 60)")
    parser.add_argument("--cols", type=int, default=200,
                        help="Simulated terminal cols (default: 200)")
    parser.add_argument("--line-timing", action="store_true",
                        help="Per-generation component timing instead of cProfile")
    parser.add_argument("--dump", type=str, default=None,
                        help="Dump cProfile binary to this path")
    parser.add_argument("--stats", type=Path, default=None,
                        help="Write per-generation telemetry CSV to this path")
    args = parser.parse_args(argv)

    run_benchmark(
        n_generations=args.generations,
        pattern=args.pattern,
        term_rows=args.rows,
        term_cols=args.cols,
        line_timing=args.line_timing,
        dump_path=args.dump,
        stats_path=args.stats,
    )


if __name__ == "__main__":
    main()
