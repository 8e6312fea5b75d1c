# engine_settings.py
# Construction-time configuration shared by the API and the CLI driver.

from pydantic import BaseModel, Field

DEFAULT_BOARD_SIZE = 4
DEFAULT_SPAWN_PROBABILITY = 0.1
DEFAULT_WIN_POWER = 11  # 2 ** 11 == 2048

class EngineSettings(BaseModel):
    """Settings for creating a board engine."""
    rows: int = Field(
        default=DEFAULT_BOARD_SIZE,
        ge=1,
        description="Number of rows on the board."
    )
    columns: int = Field(
        default=DEFAULT_BOARD_SIZE,
        ge=1,
        description="Number of columns on the board."
    )
    spawn_probability: float = Field(
        default=DEFAULT_SPAWN_PROBABILITY,
        ge=0.0,
        le=1.0,
        description="Probability that a spawned tile has power 2 (value 4) instead of power 1 (value 2)."
    )
    win_power: int = Field(
        default=DEFAULT_WIN_POWER,
        ge=1,
        description="Tile power that counts as a win (11 for the 2048 tile)."
    )
