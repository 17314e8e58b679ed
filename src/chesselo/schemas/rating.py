# src/chesselo/schemas/rating.py

"""Rating update, history and series schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict


class RatingUpdateRead(BaseModel):
    """Result of applying a game to both players' ratings."""

    game_id: int
    white_player_id: int
    black_player_id: int
    white_rating_change: int
    black_rating_change: int
    white_new_rating: int | None = None
    black_new_rating: int | None = None
    already_processed: bool = False

    model_config = ConfigDict(from_attributes=True)


class RatingHistoryItemRead(BaseModel):
    """One rated game from the requesting player's side."""

    game_id: int
    played_at: datetime
    opponent_id: int
    rating_change: int
    result: str
    color: Literal["white", "black"]

    model_config = ConfigDict(from_attributes=True)


class RatingPointRead(BaseModel):
    timestamp: datetime
    rating: int

    model_config = ConfigDict(from_attributes=True)


class RatingSeriesRead(BaseModel):
    """Chartable rating series.

    has_history is False (and points empty) below two rated games.
    """

    player_id: int
    current_rating: int
    is_provisional: bool
    games_counted: int
    has_history: bool
    points: list[RatingPointRead]

    model_config = ConfigDict(from_attributes=True)
