# src/chesselo/store/base.py

"""Persistence contract required by the rating services.

The services never talk to a database directly. They receive a RatingStore
and work with the plain records defined here, so any backend that satisfies
the protocol (SQL, document store, in-memory map) can be plugged in.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from chesselo.rating.constants import DEFAULT_RATING


def as_utc(value: datetime) -> datetime:
    """Return `value` as an aware UTC datetime.

    Naive values are taken to be UTC already; that is how the database
    columns store them.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class PlayerRecord:
    """A player's rating state."""

    id: int
    rating: int = DEFAULT_RATING
    games_played: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    version: int = 1


@dataclass(frozen=True)
class GameRecord:
    """The fields of a game the rating engine cares about."""

    id: int
    white_player_id: int
    black_player_id: int
    rated: bool
    status: str
    result: str | None = None
    white_rating_change: int | None = None
    black_rating_change: int | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_rating_recorded(self) -> bool:
        """Whether the rating update for this game already ran."""
        return (
            self.white_rating_change is not None
            or self.black_rating_change is not None
        )


@dataclass(frozen=True)
class PlayerRatingUpdate:
    """New values written to a player after a rated game."""

    rating: int
    games_played: int
    wins: int
    losses: int
    draws: int


@dataclass(frozen=True)
class RatingHistoryItem:
    """One rated game seen from a single player's side."""

    game_id: int
    played_at: datetime
    opponent_id: int
    rating_change: int
    result: str
    color: str


class RatingStore(Protocol):
    """Storage operations used by the rating updater and history services.

    Implementations raise RatingPersistenceError for backend failures and
    StaleRecordError when a conditional write loses a race.
    """

    # True when a failed transaction() leaves no partial writes behind
    atomic: bool

    async def get_game(self, game_id: int) -> GameRecord | None: ...

    async def get_player(self, player_id: int) -> PlayerRecord | None: ...

    async def update_player(
        self,
        player_id: int,
        values: PlayerRatingUpdate,
        expected_version: int,
    ) -> None:
        """Write new rating values if the player is still at expected_version."""
        ...

    async def update_game(
        self,
        game_id: int,
        white_rating_change: int,
        black_rating_change: int,
    ) -> None:
        """Record both rating changes if none were recorded yet."""
        ...

    async def list_rated_completed_games_for_player(
        self, player_id: int, limit: int
    ) -> list[RatingHistoryItem]:
        """Most-recent-first rated, completed and already rated games."""
        ...

    def transaction(self) -> AbstractAsyncContextManager[None]: ...
