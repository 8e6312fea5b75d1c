# board_engine.py
# Rule engine for a sliding-tile merge game. Tiles are stored as powers of two:
# a tile with power p shows the value 2 ** p.

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple
import logging
import random

from board_events import BoardListener
from engine_settings import (
    DEFAULT_BOARD_SIZE,
    DEFAULT_SPAWN_PROBABILITY,
    DEFAULT_WIN_POWER,
    EngineSettings,
)

logger = logging.getLogger("tile_merge.engine")

Position = Tuple[int, int]
Layout = List[List[Optional[int]]]

class InvalidLayoutError(ValueError):
    """Raised when an explicit board layout is empty, ragged or holds invalid powers."""

class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    IN_PROGRESS = 1
    GAME_OVER = 2  # Lost
    GAME_WON = 3

class DIRECTION(Enum):
    """Represents the possible move directions."""
    UP = 1
    DOWN = 2
    LEFT = 3
    RIGHT = 4

# (row step, column step) of one cell of travel
_STEPS = {
    DIRECTION.UP: (-1, 0),
    DIRECTION.DOWN: (1, 0),
    DIRECTION.LEFT: (0, -1),
    DIRECTION.RIGHT: (0, 1),
}

@dataclass
class Tile:
    """A tile on the board. Owned by the grid cell that holds it."""
    power: int
    position: Position
    has_merged_this_move: bool = False

    @property
    def value(self) -> int:
        return 2 ** self.power

@dataclass(frozen=True)
class MoveOutcome:
    """Result of a single BoardEngine.move call."""
    moved: bool
    score_delta: int
    game_over: bool
    spawned: Optional[Position] = None

# --- Layout Helper Functions ---

def get_board_dimensions(layout: Layout) -> Tuple[int, int]:
    """
    Gets the (rows, columns) of a rectangular layout of optional powers.
    Args:
        layout (Layout): Row-major board, None for empty cells.
    Returns:
        Tuple[int, int]: The number of rows and columns.
    Raises:
        InvalidLayoutError: If the layout is empty, has a zero-width row, has rows
                            of differing lengths or holds a non-positive power.
    """
    if not layout:
        raise InvalidLayoutError("Layout must have at least one row.")
    columns = len(layout[0])
    if columns == 0:
        raise InvalidLayoutError("Layout rows must have at least one column.")
    for row in layout:
        if len(row) != columns:
            raise InvalidLayoutError("Layout rows must all have the same length.")
        for power in row:
            if power is None:
                continue
            if isinstance(power, bool) or not isinstance(power, int) or power < 1:
                raise InvalidLayoutError(f"Tile powers must be positive integers, got {power!r}.")
    return len(layout), columns

def get_empty_cells(layout: Layout) -> List[Position]:
    """
    Get coordinates of empty cells in the given layout, in row-major order.
    Args:
        layout (Layout): The layout to check.
    Returns:
        List[Position]: List of (row, col) tuples for empty cells.
    """
    empty_cells = []
    for row_idx, row in enumerate(layout):
        for col_idx, power in enumerate(row):
            if power is None:
                empty_cells.append((row_idx, col_idx))
    return empty_cells

def has_adjacent_pair(layout: Layout) -> bool:
    """
    Check whether any two orthogonally adjacent cells hold tiles of equal power.
    Only the right and lower neighbour of each cell are compared, which covers
    every adjacent pair exactly once.
    """
    if not layout or not layout[0]:
        return False
    rows, columns = len(layout), len(layout[0])
    for r in range(rows):
        for c in range(columns):
            power = layout[r][c]
            if power is None:
                continue
            if c + 1 < columns and layout[r][c + 1] == power:
                return True
            if r + 1 < rows and layout[r + 1][c] == power:
                return True
    return False

def is_game_over(layout: Layout) -> bool:
    """
    A layout is terminal when it has no empty cell and no adjacent equal pair.
    Never true while any cell is empty.
    """
    if not layout or not layout[0] or get_empty_cells(layout):
        return False
    return not has_adjacent_pair(layout)

def check_for_win(layout: Layout, win_power: int = DEFAULT_WIN_POWER) -> bool:
    """
    Check if the game is won (a tile of at least win_power exists).
    Args:
        layout (Layout): The game board.
        win_power (int): The tile power that signifies a win. Default is 11 (2048).
    Returns:
        bool: True if the game is won, False otherwise.
    """
    return any(power is not None and power >= win_power for row in layout for power in row)

def determine_game_status(layout: Layout, win_power: int = DEFAULT_WIN_POWER) -> GameProgressState:
    """
    Determines the current progress state of the game based on the layout.
    A winning tile takes precedence over a terminal board.
    """
    if check_for_win(layout, win_power):
        return GameProgressState.GAME_WON
    if is_game_over(layout):
        return GameProgressState.GAME_OVER
    return GameProgressState.IN_PROGRESS

# --- Board Engine ---

class BoardEngine:
    """
    Owns the grid and score of one game session and executes moves on it.

    The engine is synchronous and not internally synchronized: callers running
    it inside a concurrent host must serialize calls to move().
    """

    def __init__(
        self,
        rows: Optional[int] = None,
        columns: Optional[int] = None,
        layout: Optional[Layout] = None,
        spawn_probability: float = DEFAULT_SPAWN_PROBABILITY,
        win_power: int = DEFAULT_WIN_POWER,
        best_score: int = 0,
        listener: Optional[BoardListener] = None,
        rng: Optional[random.Random] = None,
    ):
        if layout is not None:
            layout_rows, layout_columns = get_board_dimensions(layout)
            if rows is not None and rows != layout_rows:
                raise InvalidLayoutError(f"Layout has {layout_rows} rows, expected {rows}.")
            if columns is not None and columns != layout_columns:
                raise InvalidLayoutError(f"Layout has {layout_columns} columns, expected {columns}.")
            rows, columns = layout_rows, layout_columns
        else:
            rows = DEFAULT_BOARD_SIZE if rows is None else rows
            columns = DEFAULT_BOARD_SIZE if columns is None else columns
            if rows < 1 or columns < 1:
                raise InvalidLayoutError("Board dimensions must be positive.")

        self._rows = rows
        self._columns = columns
        self._cells: List[List[Optional[Tile]]] = [[None] * columns for _ in range(rows)]
        if layout is not None:
            for r, row in enumerate(layout):
                for c, power in enumerate(row):
                    if power is not None:
                        self._cells[r][c] = Tile(power=power, position=(r, c))

        self.spawn_probability = spawn_probability
        self.win_power = win_power
        self.listener = listener if listener is not None else BoardListener()
        self._rng = rng if rng is not None else random.Random()
        self._score = 0
        self._best_score = best_score
        self._won_reported = check_for_win(self.serialized_grid(), win_power)
        self._over_reported = False

    @classmethod
    def from_settings(
        cls,
        settings: EngineSettings,
        layout: Optional[Layout] = None,
        best_score: int = 0,
        listener: Optional[BoardListener] = None,
        rng: Optional[random.Random] = None,
    ) -> "BoardEngine":
        """Builds an engine from validated settings. A layout overrides the configured dimensions."""
        return cls(
            rows=None if layout is not None else settings.rows,
            columns=None if layout is not None else settings.columns,
            layout=layout,
            spawn_probability=settings.spawn_probability,
            win_power=settings.win_power,
            best_score=best_score,
            listener=listener,
            rng=rng,
        )

    # --- Queries ---

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def score(self) -> int:
        return self._score

    @score.setter
    def score(self, value: int) -> None:
        # Used when resuming a game whose score lives with the caller.
        self._score = value
        self._best_score = max(self._best_score, value)

    @property
    def best_score(self) -> int:
        return self._best_score

    def tile_at(self, position: Position) -> Optional[Tile]:
        row, col = position
        return self._cells[row][col]

    def tiles(self) -> Iterator[Tile]:
        """Yields every tile in row-major order."""
        for row in self._cells:
            for tile in row:
                if tile is not None:
                    yield tile

    def serialized_grid(self) -> Layout:
        """Returns the board as a row-major list of optional powers."""
        return [[tile.power if tile is not None else None for tile in row] for row in self._cells]

    def is_game_over(self) -> bool:
        return is_game_over(self.serialized_grid())

    def progress(self) -> GameProgressState:
        return determine_game_status(self.serialized_grid(), self.win_power)

    # --- Operations ---

    def start(self) -> None:
        """
        Starts a session. An empty board gets its first random tile; a board
        loaded from a layout reports every existing tile so a renderer can seed itself.
        """
        if next(self.tiles(), None) is None:
            self._spawn_random_tile()
            # A 1x1 board is full after its first tile.
            self._check_game_over(self.serialized_grid())
            return
        for tile in self.tiles():
            self.listener.tile_placed(tile.position, tile)

    def move(self, direction: DIRECTION) -> MoveOutcome:
        """
        Slides every tile toward one edge, merging equal neighbours.
        Args:
            direction (DIRECTION): The direction of travel.
        Returns:
            MoveOutcome: Whether anything moved, the score gained, the spawned
                         tile's position and the terminal flag after the move.
        """
        moved = False
        score_delta = 0

        for origin in self._sweep_order(direction):
            tile = self.tile_at(origin)
            if tile is None:
                continue
            target = origin
            ahead = self._step(target, direction)
            while self._in_bounds(ahead) and self.tile_at(ahead) is None:
                target = ahead
                ahead = self._step(ahead, direction)

            blocker = self.tile_at(ahead) if self._in_bounds(ahead) else None
            if blocker is not None and blocker.power == tile.power and not blocker.has_merged_this_move:
                merged = Tile(power=tile.power + 1, position=ahead, has_merged_this_move=True)
                self._place(origin, None)
                self._place(ahead, merged)
                score_delta += merged.value
                moved = True
                self.listener.tile_merged(origin, ahead, merged)
            elif target != origin:
                self._place(origin, None)
                self._place(target, tile)
                moved = True
                self.listener.tile_moved(origin, target)

        for tile in self.tiles():
            tile.has_merged_this_move = False

        spawned = None
        if moved:
            spawned = self._spawn_random_tile()

        if score_delta:
            self._score += score_delta
            self._best_score = max(self._best_score, self._score)
            self.listener.score_changed(self._score)

        layout = self.serialized_grid()
        if not self._won_reported and check_for_win(layout, self.win_power):
            self._won_reported = True
            logger.info("Reached winning tile %d", 2 ** self.win_power)
            self.listener.game_won()

        game_over = self._check_game_over(layout)

        logger.debug("Move %s: moved=%s score_delta=%d spawned=%s",
                     direction.name, moved, score_delta, spawned)
        return MoveOutcome(moved=moved, score_delta=score_delta, game_over=game_over, spawned=spawned)

    # --- Internals ---

    def _sweep_order(self, direction: DIRECTION) -> Iterator[Position]:
        """
        Yields cells so that, along the axis of motion, cells nearest the
        destination edge come first. Lines are visited in ascending order.
        """
        row_step, col_step = _STEPS[direction]
        if row_step:
            along = range(self._rows) if row_step < 0 else range(self._rows - 1, -1, -1)
            for col in range(self._columns):
                for row in along:
                    yield row, col
        else:
            along = range(self._columns) if col_step < 0 else range(self._columns - 1, -1, -1)
            for row in range(self._rows):
                for col in along:
                    yield row, col

    def _step(self, position: Position, direction: DIRECTION) -> Position:
        row_step, col_step = _STEPS[direction]
        return position[0] + row_step, position[1] + col_step

    def _in_bounds(self, position: Position) -> bool:
        row, col = position
        return 0 <= row < self._rows and 0 <= col < self._columns

    def _place(self, position: Position, tile: Optional[Tile]) -> None:
        row, col = position
        self._cells[row][col] = tile
        if tile is not None:
            tile.position = position

    def _check_game_over(self, layout: Layout) -> bool:
        """Evaluates the terminal state and emits game over the first time it holds."""
        game_over = is_game_over(layout)
        if game_over and not self._over_reported:
            self._over_reported = True
            logger.info("Game over with score %d", self._score)
            self.listener.game_over()
        return game_over

    def _spawn_random_tile(self) -> Optional[Position]:
        """
        Puts a new tile (power 1, or power 2 with spawn_probability) on a
        uniformly random empty cell.
        Returns:
            Optional[Position]: Where the tile landed, or None if the board is full.
        """
        empty_cells = get_empty_cells(self.serialized_grid())
        if not empty_cells:
            return None
        position = self._rng.choice(empty_cells)
        power = 2 if self._rng.random() < self.spawn_probability else 1
        tile = Tile(power=power, position=position)
        self._place(position, tile)
        logger.debug("Spawned power %d tile at %s", power, position)
        self.listener.tile_spawned(position, tile)
        return position
