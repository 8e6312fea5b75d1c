# board_events.py
# Listener interface through which renderers and drivers observe the board engine.

from dataclasses import dataclass
from typing import ClassVar, List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from board_engine import Tile

Position = Tuple[int, int]


class BoardListener:
    """
    Receives notifications from a BoardEngine.

    Every method is a no-op, so a listener only overrides what it cares about.
    Notifications for one move arrive in this order: moves and merges in sweep
    order, the spawned tile, the new score, a win, and finally game over.
    """

    def tile_moved(self, from_position: Position, to_position: Position) -> None:
        pass

    def tile_merged(self, from_position: Position, into_position: Position, tile: "Tile") -> None:
        pass

    def tile_spawned(self, position: Position, tile: "Tile") -> None:
        pass

    def tile_placed(self, position: Position, tile: "Tile") -> None:
        pass

    def score_changed(self, score: int) -> None:
        pass

    def game_won(self) -> None:
        pass

    def game_over(self) -> None:
        pass


# --- Event records ---

@dataclass(frozen=True)
class TileMoved:
    kind: ClassVar[str] = "tile_moved"
    from_position: Position
    to_position: Position

@dataclass(frozen=True)
class TileMerged:
    kind: ClassVar[str] = "tile_merged"
    from_position: Position
    to_position: Position
    power: int

@dataclass(frozen=True)
class TileSpawned:
    kind: ClassVar[str] = "tile_spawned"
    position: Position
    power: int

@dataclass(frozen=True)
class TilePlaced:
    kind: ClassVar[str] = "tile_placed"
    position: Position
    power: int

@dataclass(frozen=True)
class ScoreChanged:
    kind: ClassVar[str] = "score_changed"
    score: int

@dataclass(frozen=True)
class GameWon:
    kind: ClassVar[str] = "game_won"

@dataclass(frozen=True)
class GameOver:
    kind: ClassVar[str] = "game_over"


class EventRecorder(BoardListener):
    """Listener that keeps an ordered log of everything the engine reported."""

    def __init__(self):
        self.events: List[object] = []

    def tile_moved(self, from_position, to_position):
        self.events.append(TileMoved(tuple(from_position), tuple(to_position)))

    def tile_merged(self, from_position, into_position, tile):
        # Tiles are mutable, so only their power is kept.
        self.events.append(TileMerged(tuple(from_position), tuple(into_position), tile.power))

    def tile_spawned(self, position, tile):
        self.events.append(TileSpawned(tuple(position), tile.power))

    def tile_placed(self, position, tile):
        self.events.append(TilePlaced(tuple(position), tile.power))

    def score_changed(self, score):
        self.events.append(ScoreChanged(score))

    def game_won(self):
        self.events.append(GameWon())

    def game_over(self):
        self.events.append(GameOver())

    def of_kind(self, kind: str) -> List[object]:
        return [event for event in self.events if event.kind == kind]

    def kinds(self) -> List[str]:
        return [event.kind for event in self.events]

    def last_spawn(self) -> Optional[TileSpawned]:
        spawns = self.of_kind(TileSpawned.kind)
        return spawns[-1] if spawns else None

    def clear(self) -> None:
        self.events = []
