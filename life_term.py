#!/usr/bin/env python3
"""
Interactive curses view of the Game of Life.

Controls:
  q / ESC       quit               SPACE     pause / resume
  h j k l       pan                arrows    pan
  H / L         narrow / widen     K / J     heighten / shorten

A background thread polls the keyboard and a 200ms timer and forwards
both through one queue; the main loop blocks on that queue, applies
exactly one event, and redraws.
"""

from __future__ import annotations

import curses
import logging
import queue
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from life import Board, TerminalError, seed_demo

log = logging.getLogger(__name__)

# ── Timing ──────────────────────────────────────────────────────────────
TICK_RATE: float = 0.2     # seconds between simulation ticks
POLL_SLICE_MS: int = 20    # longest single keyboard poll

# ── Viewport ────────────────────────────────────────────────────────────
DEFAULT_BOUNDS: tuple[float, float] = (-50.0, 50.0)
PAN_STEP: float = 10.0
FRAME_STEP: float = 5.0
MIN_SPAN: float = 10.0

# ── Layout ──────────────────────────────────────────────────────────────
HELP_TEXT = (
    "q/esc: quit, spc: stop, start, hjkl/←↓↑→: move view port, "
    "HJKL: expand/contract view"
)
CONTROLS_HEIGHT = 3
MARGIN = 1

# ── Half-block characters ───────────────────────────────────────────────
UPPER_HALF = "▀"  # ▀  top pixel alive
LOWER_HALF = "▄"  # ▄  bottom pixel alive
FULL_BLOCK = "█"  # █  both pixels alive

KEY_ESC = 27


# ═══════════════════════════════════════════════════════════════════════
#  Viewport
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class Viewport:
    """The visible window onto the board plus the pause flag.

    Bounds are half-open ``[lo, hi)`` ranges in board units. The y axis
    grows upward on screen.
    """

    paused: bool = False
    x_bounds: list[float] = field(default_factory=lambda: list(DEFAULT_BOUNDS))
    y_bounds: list[float] = field(default_factory=lambda: list(DEFAULT_BOUNDS))

    def translate(self, dx: float, dy: float) -> None:
        self.x_bounds[0] += dx
        self.x_bounds[1] += dx
        self.y_bounds[0] += dy
        self.y_bounds[1] += dy

    def toggle_pause(self) -> None:
        self.paused = not self.paused

    def expand_frame_x(self) -> None:
        _resize(self.x_bounds, FRAME_STEP)

    def contract_frame_x(self) -> None:
        _resize(self.x_bounds, -FRAME_STEP)

    def expand_frame_y(self) -> None:
        _resize(self.y_bounds, FRAME_STEP)

    def contract_frame_y(self) -> None:
        _resize(self.y_bounds, -FRAME_STEP)

    def rasterize(self, points: NDArray[np.float64], rows: int, cols: int) -> NDArray[np.bool_]:
        """Project board points into a ``rows × cols`` pixel grid.

        Row 0 is the top of the window (largest y). Points outside the
        bounds are dropped.
        """
        grid = np.zeros((max(rows, 0), max(cols, 0)), dtype=np.bool_)
        if grid.size == 0 or len(points) == 0:
            return grid
        x0, x1 = self.x_bounds
        y0, y1 = self.y_bounds
        xs = points[:, 0]
        ys = points[:, 1]
        inside = (xs >= x0) & (xs < x1) & (ys >= y0) & (ys < y1)
        xs = xs[inside]
        ys = ys[inside]
        col = np.floor((xs - x0) / (x1 - x0) * cols).astype(np.intp)
        row = rows - 1 - np.floor((ys - y0) / (y1 - y0) * rows).astype(np.intp)
        # Float rounding at the upper edge
        np.clip(col, 0, cols - 1, out=col)
        np.clip(row, 0, rows - 1, out=row)
        grid[row, col] = True
        return grid


def _resize(bounds: list[float], step: float) -> None:
    # Never let a contraction invert the window
    if bounds[1] - bounds[0] + 2 * step < MIN_SPAN:
        return
    bounds[0] -= step
    bounds[1] += step


# ═══════════════════════════════════════════════════════════════════════
#  Input
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class UserEvent:
    """A key press forwarded from the terminal, or a tick when ``key`` is None.

    ``closed`` marks the last event a pump sends before its thread exits.
    """

    key: int | None = None
    closed: bool = False

    @property
    def is_tick(self) -> bool:
        return self.key is None and not self.closed


TICK = UserEvent()
CLOSED = UserEvent(closed=True)

KEY_ACTIONS: dict[int, Callable[[Viewport], None]] = {
    ord(" "): Viewport.toggle_pause,
    ord("h"): lambda v: v.translate(-PAN_STEP, 0.0),
    curses.KEY_LEFT: lambda v: v.translate(-PAN_STEP, 0.0),
    ord("l"): lambda v: v.translate(PAN_STEP, 0.0),
    curses.KEY_RIGHT: lambda v: v.translate(PAN_STEP, 0.0),
    ord("k"): lambda v: v.translate(0.0, PAN_STEP),
    curses.KEY_UP: lambda v: v.translate(0.0, PAN_STEP),
    ord("j"): lambda v: v.translate(0.0, -PAN_STEP),
    curses.KEY_DOWN: lambda v: v.translate(0.0, -PAN_STEP),
    ord("H"): Viewport.contract_frame_x,
    ord("L"): Viewport.expand_frame_x,
    ord("K"): Viewport.expand_frame_y,
    ord("J"): Viewport.contract_frame_y,
}

QUIT_KEYS: frozenset[int] = frozenset({ord("q"), KEY_ESC})


def handle_key(viewport: Viewport, key: int) -> bool:
    """Apply a key press to the viewport. Returns False when it means quit."""
    if key in QUIT_KEYS:
        return False
    action = KEY_ACTIONS.get(key)
    if action is not None:
        action(viewport)
    return True


class InputPump(threading.Thread):
    """Merges keyboard polling and a fixed-rate timer into one queue.

    ``read_key(timeout_ms)`` must return a key code, or -1 when nothing
    arrived within the timeout. If it raises, the exception is kept in
    ``error`` and ``CLOSED`` is queued so the consumer stops waiting.
    """

    def __init__(
        self,
        read_key: Callable[[int], int],
        events: queue.Queue[UserEvent],
        tick_rate: float = TICK_RATE,
    ) -> None:
        super().__init__(name="life-input", daemon=True)
        self._read_key = read_key
        self.events = events
        self.tick_rate = tick_rate
        self._stopped = threading.Event()
        self.error: BaseException | None = None

    def run(self) -> None:
        try:
            self._pump()
        except Exception as exc:
            self.error = exc
            self.events.put(CLOSED)

    def _pump(self) -> None:
        last_tick = time.monotonic()
        while not self._stopped.is_set():
            remaining = self.tick_rate - (time.monotonic() - last_tick)
            timeout_ms = max(0, min(int(remaining * 1000), POLL_SLICE_MS))
            key = self._read_key(timeout_ms)
            if key != -1:
                self.events.put(UserEvent(key))
            if time.monotonic() - last_tick >= self.tick_rate:
                self.events.put(TICK)
                last_tick = time.monotonic()

    def stop(self, timeout: float | None = 1.0) -> None:
        self._stopped.set()
        if self.is_alive():
            self.join(timeout)


# ═══════════════════════════════════════════════════════════════════════
#  Rendering
# ═══════════════════════════════════════════════════════════════════════

def _addstr(stdscr: curses.window, y: int, x: int, text: str, attr: int = 0) -> None:
    try:
        stdscr.addstr(y, x, text, attr)
    except curses.error:
        pass


def _draw_box(
    stdscr: curses.window, y: int, x: int, h: int, w: int, title: str, attr: int = 0
) -> None:
    if h < 2 or w < 2:
        return
    inner = w - 2
    label = title[:inner]
    _addstr(stdscr, y, x, "┌" + label + "─" * (inner - len(label)) + "┐", attr)
    for row in range(y + 1, y + h - 1):
        _addstr(stdscr, row, x, "│", attr)
        _addstr(stdscr, row, x + w - 1, "│", attr)
    _addstr(stdscr, y + h - 1, x, "└" + "─" * inner + "┘", attr)


def _color(pair: int) -> int:
    # color_pair raises before start_color(), e.g. under a stub window
    try:
        return curses.color_pair(pair)
    except curses.error:
        return 0


def setup_colors() -> None:
    curses.start_color()
    curses.use_default_colors()
    curses.init_pair(1, curses.COLOR_CYAN, -1)
    curses.init_pair(2, curses.COLOR_YELLOW, -1)


def render(stdscr: curses.window, board: Board, viewport: Viewport) -> None:
    """Controls panel on top, the board canvas underneath.

    The canvas uses half-block glyphs, so every terminal cell shows two
    vertically stacked pixels.
    """
    max_y, max_x = stdscr.getmaxyx()
    width = max_x - 2 * MARGIN

    _draw_box(stdscr, MARGIN, MARGIN, CONTROLS_HEIGHT, width, "Controls")
    help_line = HELP_TEXT[: max(width - 2, 0)]
    help_col = MARGIN + 1 + max(0, (width - 2 - len(help_line)) // 2)
    _addstr(stdscr, MARGIN + 1, help_col, help_line, _color(1))

    top = MARGIN + CONTROLS_HEIGHT
    height = max_y - top - MARGIN
    title = "Game of life" + (" (paused)" if viewport.paused else "")
    _draw_box(stdscr, top, MARGIN, height, width, title)

    rows, cols = height - 2, width - 2
    if rows <= 0 or cols <= 0:
        return
    pixels = viewport.rasterize(board.points(), rows * 2, cols)
    top_px = pixels[0::2]
    bot_px = pixels[1::2]

    # Only visit cells that need drawing
    ys, xs = np.nonzero(top_px | bot_px)
    attr = _color(2) | curses.A_BOLD
    for y, x, t, b in zip(
        ys.tolist(), xs.tolist(), top_px[ys, xs].tolist(), bot_px[ys, xs].tolist()
    ):
        glyph = FULL_BLOCK if t and b else (UPPER_HALF if t else LOWER_HALF)
        _addstr(stdscr, top + 1 + y, MARGIN + 1 + x, glyph, attr)


# ═══════════════════════════════════════════════════════════════════════
#  Main loop
# ═══════════════════════════════════════════════════════════════════════

def main(stdscr: curses.window) -> None:
    curses.curs_set(0)
    curses.set_escdelay(25)
    stdscr.keypad(True)
    setup_colors()

    board = seed_demo(Board())
    viewport = Viewport()

    screen_lock = threading.Lock()

    def read_key(timeout_ms: int) -> int:
        with screen_lock:
            stdscr.timeout(timeout_ms)
            try:
                return stdscr.getch()
            except curses.error:
                return -1

    events: queue.Queue[UserEvent] = queue.Queue()
    pump = InputPump(read_key, events)
    pump.start()
    log.debug("interactive driver started")

    try:
        while True:
            with screen_lock:
                stdscr.erase()
                render(stdscr, board, viewport)
                stdscr.refresh()

            event = events.get()
            if event.closed:
                raise TerminalError("Reading terminal input") from pump.error
            if event.is_tick:
                if not viewport.paused:
                    board = board.advance()
            elif not handle_key(viewport, event.key):
                break
    finally:
        pump.stop()
        log.debug("interactive driver stopped at population %d", len(board))


def run() -> None:
    try:
        curses.wrapper(main)
    except KeyboardInterrupt:
        pass
    except curses.error as exc:
        raise TerminalError("Terminal setup/teardown failed") from exc


if __name__ == "__main__":
    run()
