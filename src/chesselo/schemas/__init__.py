# src/chesselo/schemas/__init__.py

"""Pydantic schemas for API validation and serialization."""

from .analysis import (
    GameAnalysisRead,
    MoveQualityRead,
    MoveQualityRequest,
    SideSummaryRead,
)
from .game import GameCreate, GameFinish, GameRead, GameStatus
from .player import PlayerBase, PlayerCreate, PlayerRead
from .rating import (
    RatingHistoryItemRead,
    RatingPointRead,
    RatingSeriesRead,
    RatingUpdateRead,
)

__all__ = [
    # Analysis
    "GameAnalysisRead",
    "MoveQualityRead",
    "MoveQualityRequest",
    "SideSummaryRead",
    # Game
    "GameCreate",
    "GameFinish",
    "GameRead",
    "GameStatus",
    # Player
    "PlayerBase",
    "PlayerCreate",
    "PlayerRead",
    # Rating
    "RatingHistoryItemRead",
    "RatingPointRead",
    "RatingSeriesRead",
    "RatingUpdateRead",
]
