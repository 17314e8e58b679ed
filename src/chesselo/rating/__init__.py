# src/chesselo/rating/__init__.py

"""Pure rating and move-quality calculations."""

from .categories import rating_category
from .elo_engine import (
    EloCalculationResult,
    GameResult,
    calculate_ratings,
    expected_score,
    get_k_factor,
)
from .move_quality import analyze_game

__all__ = [
    "EloCalculationResult",
    "GameResult",
    "analyze_game",
    "calculate_ratings",
    "expected_score",
    "get_k_factor",
    "rating_category",
]
