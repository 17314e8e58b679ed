# src/chesselo/schemas/game.py

"""Pydantic schemas for the Game resource."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chesselo.rating.elo_engine import GameResult
from chesselo.store.base import as_utc

GameStatus = Literal["waiting", "active", "completed", "abandoned"]


class GameCreate(BaseModel):
    """Properties to receive when a game starts."""

    white_player_id: int
    black_player_id: int
    rated: bool = Field(default=True, description="Whether the game counts for rating")


class GameFinish(BaseModel):
    """Terminal result of a game.

    status defaults to 'completed'. An 'abandoned' game keeps its result but
    is never rated.
    """

    result: GameResult
    status: Literal["completed", "abandoned"] = "completed"
    completed_at: datetime | None = Field(
        default=None,
        description="When the game ended (ISO format). Defaults to current time.",
    )

    @field_validator("completed_at")
    @classmethod
    def normalize_completed_at(cls, v: datetime | None) -> datetime | None:
        # Stored without an offset, so every value must be UTC first
        return as_utc(v) if v is not None else None


class GameRead(BaseModel):
    """Properties to return to the client for a game."""

    id: int
    white_player_id: int
    black_player_id: int
    rated: bool
    status: GameStatus
    result: str | None = None
    white_rating_change: int | None = None
    black_rating_change: int | None = None
    created_at: datetime
    completed_at: datetime | None = None

    @field_validator("created_at", "completed_at")
    @classmethod
    def ensure_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else None

    model_config = ConfigDict(from_attributes=True)
