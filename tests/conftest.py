from collections import deque

import pytest

from snake import Cell, State


class RecordingSurface:
    """In-memory stand-in for the glyph console.

    Keys are handed out one per ``poll_key`` call; ``None`` entries model
    frames without a key press.
    """

    def __init__(self, keys=()):
        self.keys = deque(keys)
        self.blocks = []
        self.lines = []
        self.clears = 0
        self.quit_requested = False

    def clear(self):
        self.clears += 1
        self.blocks = []
        self.lines = []

    def draw_block(self, x, y, glyph, fg, bg):
        self.blocks.append((x, y, glyph, fg, bg))

    def poll_key(self):
        return self.keys.popleft() if self.keys else None

    def print_centered(self, row, text):
        self.lines.append((row, text))

    def request_quit(self):
        self.quit_requested = True


class ScriptedRandom:
    """Returns queued values from ``randrange`` in order."""

    def __init__(self, values):
        self.values = deque(values)

    def randrange(self, start, stop):
        return self.values.popleft()


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def state():
    """A fresh game with the food parked away from the start cell."""
    game = State()
    game.food.pos = Cell(10, 10)
    return game
