from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from dataclasses import asdict
from typing import List, Optional, Tuple
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
import logging
import random

import board_engine
from board_events import EventRecorder
from engine_settings import DEFAULT_SPAWN_PROBABILITY, DEFAULT_WIN_POWER, EngineSettings

logger = logging.getLogger("tile_merge.api")

# Initialize the rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(
    title="Tile Merge Engine API",
    description="A stateless API for the sliding-tile merge game. "\
                "Boards are exchanged as row-major lists of tile powers (null for empty cells); "\
                "the client keeps the board, score and best score between calls.",
    version="1.0.0"
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# --- Pydantic Models for API requests and responses ---

class EventData(BaseModel):
    """One notification emitted by the engine, in emission order."""
    kind: str = Field(..., description="tile_moved, tile_merged, tile_spawned, tile_placed, score_changed, game_won or game_over.")
    from_position: Optional[Tuple[int, int]] = None
    to_position: Optional[Tuple[int, int]] = None
    position: Optional[Tuple[int, int]] = None
    power: Optional[int] = None
    score: Optional[int] = None

class NewGameRequest(BaseModel):
    """Settings for creating a new game."""
    settings: EngineSettings = Field(default_factory=EngineSettings)
    seed: Optional[int] = Field(default=None, description="Seed for reproducible tile spawns.")
    best_score: int = Field(default=0, ge=0, description="Best score carried over from earlier games.")

class GameStateData(BaseModel):
    """Represents the complete state of a game instance."""
    board: List[List[Optional[int]]] = Field(..., description="Row-major tile powers, null for empty cells.")
    score: int = Field(..., ge=0, description="Current score of the game.")
    best_score: int = Field(..., ge=0, description="Highest score seen so far.")
    progress: board_engine.GameProgressState = Field(
        ...,
        description="Current progress state of the game (IN_PROGRESS, GAME_WON, GAME_OVER)."
    )
    game_over: bool = Field(..., description="True if the board is full and no adjacent tiles can merge.")
    win_power: int = Field(..., ge=1, description="The tile power required to win this game instance.")
    rows: int = Field(..., ge=1)
    columns: int = Field(..., ge=1)
    events: List[EventData] = Field(default_factory=list, description="Engine notifications for this call.")

class MoveRequestData(BaseModel):
    """Data required to make a move."""
    board: List[List[Optional[int]]] = Field(..., description="Current board before the move.")
    score: int = Field(..., ge=0, description="Current score before the move.")
    best_score: int = Field(default=0, ge=0)
    direction: board_engine.DIRECTION = Field(
        ...,
        description="Direction of the move (UP, DOWN, LEFT, RIGHT)."
    )
    spawn_probability: float = Field(default=DEFAULT_SPAWN_PROBABILITY, ge=0.0, le=1.0)
    win_power: int = Field(default=DEFAULT_WIN_POWER, ge=1)
    seed: Optional[int] = None
    # rows and columns are derived from the board structure.

class MoveResponseData(GameStateData):
    """Response after a move, including the new game state and move effectiveness."""
    move_was_effective: bool = Field(
        ...,
        description="True if the move resulted in a change to the board state, False otherwise."
    )
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g., if a move was not effective or the game ended."
    )

def _event_log(recorder: EventRecorder) -> List[EventData]:
    return [EventData(kind=event.kind, **asdict(event)) for event in recorder.events]

def _state_fields(engine: board_engine.BoardEngine, recorder: EventRecorder) -> dict:
    return dict(
        board=engine.serialized_grid(),
        score=engine.score,
        best_score=engine.best_score,
        progress=engine.progress(),
        game_over=engine.is_game_over(),
        win_power=engine.win_power,
        rows=engine.rows,
        columns=engine.columns,
        events=_event_log(recorder),
    )

# --- API Endpoints ---

@app.post("/game/new", response_model=GameStateData, summary="Start a New Game")
@limiter.limit("100/minute")
async def start_new_game(request: Request, new_game: NewGameRequest):
    """
    Creates an empty board and spawns its first tile.

    - **settings**: board dimensions, spawn probability and win power.
    - **seed**: optional seed to make the spawned tile reproducible.

    Returns the initial game state with the spawn event.
    """
    try:
        recorder = EventRecorder()
        engine = board_engine.BoardEngine.from_settings(
            new_game.settings,
            best_score=new_game.best_score,
            listener=recorder,
            rng=random.Random(new_game.seed),
        )
        engine.start()
        return GameStateData(**_state_fields(engine, recorder))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Unexpected error in /game/new")
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred during game creation: {str(e)}")


@app.post("/game/move", response_model=MoveResponseData, summary="Make a Move in the Game")
@limiter.limit("100/minute")
async def make_move(request: Request, request_data: MoveRequestData):
    """
    Processes a player's move.

    The API will:
    1. Rebuild the board from the submitted layout.
    2. Slide and merge tiles in the chosen direction.
    3. If anything changed, spawn one new tile.
    4. Determine the new game status (IN_PROGRESS, GAME_WON, GAME_OVER).

    Returns the updated game state, the ordered event log, whether the move
    was effective, and an optional message.
    """
    recorder = EventRecorder()
    try:
        engine = board_engine.BoardEngine(
            layout=request_data.board,
            spawn_probability=request_data.spawn_probability,
            win_power=request_data.win_power,
            best_score=request_data.best_score,
            listener=recorder,
            rng=random.Random(request_data.seed),
        )
    except board_engine.InvalidLayoutError as e:
        raise HTTPException(status_code=400, detail=f"Invalid board structure in request: {str(e)}")
    engine.score = request_data.score

    try:
        outcome = engine.move(request_data.direction)
    except Exception as e:
        logger.exception("Unexpected error in /game/move")
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while processing the move: {str(e)}")

    message_for_client: Optional[str] = None
    if not outcome.moved:
        message_for_client = "Move was not effective; board state unchanged."

    # A stuck board ends the game even when it also holds a winning tile.
    if outcome.game_over:
        message_for_client = "Game Over. No more valid moves."
    elif engine.progress() == board_engine.GameProgressState.GAME_WON:
        message_for_client = "Congratulations! You won!"

    return MoveResponseData(
        **_state_fields(engine, recorder),
        move_was_effective=outcome.moved,
        message=message_for_client,
    )
