#!/usr/bin/env python3
"""
  ∞  L I F E  ∞
  Conway's Game of Life on a board with no edges.

  Only live cells are stored, keyed by their (x, y) coordinate, so the
  universe costs memory in proportion to what is alive in it rather than
  to its area. Stepping never mutates a board: every generation is built
  from scratch against a read-only snapshot of the previous one.

  Running this module directly starts the text-mode driver, which dumps a
  fixed 50x50 window to standard output ten times a second until killed.
  See life_term.py for the interactive curses view.
"""

from __future__ import annotations

import enum
import logging
import sys
import time
from collections.abc import Iterable, Iterator
from typing import TextIO

import numpy as np
from numpy.typing import NDArray

log = logging.getLogger(__name__)

Coord = tuple[int, int]

# ── Text-mode driver ────────────────────────────────────────────────────
TEXT_COLS: int = 50
TEXT_ROWS: int = 50
TEXT_DELAY: float = 0.1  # seconds between frames

CLEAR_SEQUENCE = "\x1b[2J\x1b[H"

# ── Moore neighbourhood ─────────────────────────────────────────────────
# W, E, N, S, then the four true diagonals
NEIGHBOR_OFFSETS: tuple[Coord, ...] = (
    (-1, 0), (1, 0), (0, -1), (0, 1),
    (1, 1), (1, -1), (-1, 1), (-1, -1),
)

# ── Pattern library ─────────────────────────────────────────────────────
# Offsets are (x, y) relative to the anchor cell.
PATTERNS: dict[str, list[Coord]] = {
    "glider": [(0, 0), (1, 1), (-1, 2), (0, 2), (1, 2)],
    "blinker": [(0, 0), (1, 0), (2, 0)],
    "block": [(0, 0), (1, 0), (0, 1), (1, 1)],
    "r_pentomino": [(1, 0), (2, 0), (0, 1), (1, 1), (1, 2)],
    "acorn": [(1, 0), (3, 1), (0, 2), (1, 2), (4, 2), (5, 2), (6, 2)],
    "diehard": [(6, 0), (0, 1), (1, 1), (1, 2), (5, 2), (6, 2), (7, 2)],
}

# Where the drivers put things at start-up
DEMO_GLIDER: Coord = (5, 5)
DEMO_CELLS: list[Coord] = [(10, 10), (10, 11), (10, 12)]


class TerminalError(RuntimeError):
    """Setting up, clearing or restoring the terminal failed."""


class CellState(enum.Enum):
    """State of a single cell. The value is the glyph used by the text dump."""

    ALIVE = "█"
    DEAD = " "

    def __str__(self) -> str:
        return self.value


def surrounding(coord: Coord) -> list[Coord]:
    """The eight Moore-neighbourhood coordinates of ``coord``."""
    x, y = coord
    return [(x + dx, y + dy) for dx, dy in NEIGHBOR_OFFSETS]


# ═══════════════════════════════════════════════════════════════════════
#  The board
# ═══════════════════════════════════════════════════════════════════════

class Board:
    """
    The set of live cells on an unbounded integer grid.

    A coordinate missing from storage is dead; a dead cell is never
    stored. ``advance()`` returns the next generation as a new Board and
    leaves this one untouched, so a board handed to a renderer can never
    change underneath it.
    """

    def __init__(self, cells: Iterable[Coord] = ()) -> None:
        self._cells: set[Coord] = set()
        for coord in cells:
            self.spawn(coord)

    # ── Storage ─────────────────────────────────────────────────────

    def spawn(self, coord: Coord) -> None:
        x, y = coord
        self._cells.add((int(x), int(y)))

    def get(self, coord: Coord) -> CellState:
        return CellState.ALIVE if coord in self._cells else CellState.DEAD

    def place(self, name: str, origin: Coord) -> None:
        """Spawn every cell of the named pattern anchored at ``origin``."""
        ox, oy = origin
        for dx, dy in PATTERNS[name]:
            self.spawn((ox + dx, oy + dy))

    def population(self) -> int:
        return len(self._cells)

    def cells(self) -> frozenset[Coord]:
        return frozenset(self._cells)

    # ── Neighbourhood queries ───────────────────────────────────────

    def neighbors(self, coord: Coord) -> tuple[CellState, ...]:
        return tuple(self.get(c) for c in surrounding(coord))

    def living_neighbor_count(self, coord: Coord) -> int:
        cells = self._cells
        return sum(1 for c in surrounding(coord) if c in cells)

    def dead_neighbors(self, coord: Coord) -> list[Coord]:
        cells = self._cells
        return [c for c in surrounding(coord) if c not in cells]

    # ── Simulation ──────────────────────────────────────────────────

    def advance(self) -> Board:
        """Compute the next generation under B3/S23.

        Survival is decided for every live cell; birth is only considered
        for dead cells that touch a live one, since a cell with no live
        neighbour cannot reach the three it needs. All counts are taken
        against this board, never against the one being built.
        """
        nxt = Board()
        born = nxt._cells
        for coord in self._cells:
            if self.living_neighbor_count(coord) in (2, 3):
                born.add(coord)
            for dead in self.dead_neighbors(coord):
                # Shared dead neighbours would otherwise be recounted
                if dead not in born and self.living_neighbor_count(dead) == 3:
                    born.add(dead)
        return nxt

    # ── Rendering support ───────────────────────────────────────────

    def points(self) -> NDArray[np.float64]:
        """Live coordinates as an ``(n, 2)`` float array of (x, y)."""
        if not self._cells:
            return np.empty((0, 2), dtype=np.float64)
        return np.array(list(self._cells), dtype=np.float64)

    def window(self, x_range: range, y_range: range) -> NDArray[np.int8]:
        """Dense 0/1 grid of the half-open rectangle ``x_range × y_range``.

        Row ``i`` holds ``y_range[i]``, column ``j`` holds ``x_range[j]``.
        """
        grid = np.zeros((len(y_range), len(x_range)), dtype=np.int8)
        if not self._cells or grid.size == 0:
            return grid
        pts = np.array(list(self._cells), dtype=np.int64)
        xs = pts[:, 0] - x_range.start
        ys = pts[:, 1] - y_range.start
        inside = (xs >= 0) & (xs < len(x_range)) & (ys >= 0) & (ys < len(y_range))
        grid[ys[inside], xs[inside]] = 1
        return grid

    # ── Container protocol ──────────────────────────────────────────

    def __contains__(self, coord: object) -> bool:
        return coord in self._cells

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[Coord]:
        return iter(self._cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._cells == other._cells

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Board({sorted(self._cells)!r})"


def make_glider(board: Board, origin: Coord) -> None:
    """Spawn the canonical five-cell glider anchored at ``origin``."""
    board.place("glider", origin)


def seed_demo(board: Board) -> Board:
    """Seed the start-up scene shared by both drivers and return the board."""
    make_glider(board, DEMO_GLIDER)
    for coord in DEMO_CELLS:
        board.spawn(coord)
    return board


# ═══════════════════════════════════════════════════════════════════════
#  Text-mode driver
# ═══════════════════════════════════════════════════════════════════════

def render_text(board: Board, cols: int = TEXT_COLS, rows: int = TEXT_ROWS) -> str:
    """The window x∈[0, cols), y∈[0, rows) as lines of glyphs."""
    grid = board.window(range(cols), range(rows))
    glyphs = np.where(grid > 0, CellState.ALIVE.value, CellState.DEAD.value)
    return "".join("".join(row) + "\n" for row in glyphs.tolist())


def clear_screen(out: TextIO) -> None:
    try:
        out.write(CLEAR_SEQUENCE)
        out.flush()
    except OSError as exc:
        raise TerminalError("Tried to clear screen") from exc


def run_text(
    board: Board,
    out: TextIO,
    frames: int | None = None,
    delay: float = TEXT_DELAY,
) -> Board:
    """Draw, advance and sleep; forever unless ``frames`` is given.

    Returns the board that would have been drawn next.
    """
    log.debug("text driver starting with %d live cells", len(board))
    drawn = 0
    while frames is None or drawn < frames:
        clear_screen(out)
        out.write(render_text(board))
        out.flush()
        board = board.advance()
        drawn += 1
        if delay > 0:
            time.sleep(delay)
    return board


def main() -> None:
    try:
        run_text(seed_demo(Board()), sys.stdout)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
