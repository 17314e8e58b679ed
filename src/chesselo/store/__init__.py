# src/chesselo/store/__init__.py

"""Storage contract and storage-agnostic records for the rating engine."""

from .base import (
    GameRecord,
    PlayerRatingUpdate,
    PlayerRecord,
    RatingHistoryItem,
    RatingStore,
    as_utc,
)
from .memory import InMemoryRatingStore

__all__ = [
    "GameRecord",
    "InMemoryRatingStore",
    "PlayerRatingUpdate",
    "PlayerRecord",
    "RatingHistoryItem",
    "RatingStore",
    "as_utc",
]
