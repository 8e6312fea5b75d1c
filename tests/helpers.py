"""Shared helpers for board engine tests."""

from board_engine import BoardEngine
from board_events import EventRecorder


class FixedRandom:
    """Deterministic stand-in for random.Random used by the spawn policy."""

    def __init__(self, index: int = 0, roll: float = 0.5):
        self.index = index
        self.roll = roll

    def choice(self, seq):
        # Negative indexes pick from the end of the empty-cell list.
        return seq[self.index]

    def random(self):
        return self.roll


def make_engine(layout, index=0, roll=0.5, **kwargs):
    """Build an engine over a layout with a recorder and a fixed spawn source."""
    recorder = EventRecorder()
    engine = BoardEngine(layout=layout, listener=recorder, rng=FixedRandom(index, roll), **kwargs)
    return engine, recorder


def without_spawn(engine, outcome):
    """The serialized grid with the tile spawned by this move removed."""
    grid = engine.serialized_grid()
    if outcome.spawned is not None:
        row, col = outcome.spawned
        grid[row][col] = None
    return grid


def total_value(layout) -> int:
    return sum(2 ** power for row in layout for power in row if power is not None)
