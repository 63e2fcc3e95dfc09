import pytest

from life import Board


class RecordingWindow:
    """curses.window stub that keeps every string drawn, keyed by position."""

    def __init__(self, rows: int = 40, cols: int = 120):
        self._rows = rows
        self._cols = cols
        self.drawn = {}

    def getmaxyx(self):
        return self._rows, self._cols

    def addstr(self, y, x, text, attr=0):
        self.drawn[(y, x)] = text

    def text(self):
        return "".join(self.drawn.values())


@pytest.fixture
def window():
    return RecordingWindow()


@pytest.fixture
def blinker():
    board = Board()
    board.place("blinker", (0, 0))
    return board
