# src/chesselo/services/history_service.py

"""Rating history reconstruction and provisional status."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from chesselo.exceptions import InvalidHistoryLimitError, PlayerNotFoundError
from chesselo.rating.constants import DEFAULT_HISTORY_LIMIT, PROVISIONAL_THRESHOLD
from chesselo.store.base import RatingHistoryItem, RatingStore, as_utc

logger = logging.getLogger(__name__)

# A trend needs at least this many rated games
MIN_GAMES_FOR_HISTORY = 2


@dataclass(frozen=True)
class RatingPoint:
    timestamp: datetime
    rating: int


@dataclass
class RatingSeries:
    """A player's rating over time, oldest point first.

    has_history is False when the player has fewer than two rated games;
    points is then empty. That is a normal outcome, not an error.
    """

    player_id: int
    current_rating: int
    is_provisional: bool
    games_counted: int
    has_history: bool
    points: list[RatingPoint] = field(default_factory=list)


def is_provisional(games_played: int) -> bool:
    """A rating is provisional until PROVISIONAL_THRESHOLD rated games."""
    return games_played < PROVISIONAL_THRESHOLD


async def is_provisional_rating(store: RatingStore, player_id: int) -> bool:
    player = await store.get_player(player_id)
    if player is None:
        raise PlayerNotFoundError(player_id)
    return is_provisional(player.games_played)


async def get_rating_history(
    store: RatingStore,
    player_id: int,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> list[RatingHistoryItem]:
    """Most recent rated games of a player, newest first.

    Unrated games and games whose rating update has not run yet carry no
    rating change and are never included.
    """
    if limit < 1:
        raise InvalidHistoryLimitError(limit)
    player = await store.get_player(player_id)
    if player is None:
        raise PlayerNotFoundError(player_id)
    return await store.list_rated_completed_games_for_player(player_id, limit)


def reconstruct_rating_series(
    current_rating: int,
    history: list[RatingHistoryItem],
    as_of: datetime,
) -> list[RatingPoint]:
    """
    Replay rating changes backwards from the current rating.

    history is newest first. The returned points are oldest first: one point
    per game holding the rating before that game, stamped with the game's
    time, followed by (as_of, current_rating).

    Example:
        current 1230, changes newest first [+10, -5, +25]
        -> ratings 1200, 1225, 1220, 1230
    """
    points = [RatingPoint(timestamp=as_of, rating=current_rating)]
    rating = current_rating
    for item in history:
        rating -= item.rating_change
        points.append(RatingPoint(timestamp=item.played_at, rating=rating))
    points.reverse()
    return points


async def get_rating_series(
    store: RatingStore,
    player_id: int,
    limit: int = DEFAULT_HISTORY_LIMIT,
    as_of: datetime | None = None,
) -> RatingSeries:
    """Build the chartable rating series of a player, with provisional status.

    Every point is stamped in UTC; as_of defaults to the current time.
    """
    if limit < 1:
        raise InvalidHistoryLimitError(limit)
    player = await store.get_player(player_id)
    if player is None:
        raise PlayerNotFoundError(player_id)

    history = await store.list_rated_completed_games_for_player(player_id, limit)
    series = RatingSeries(
        player_id=player_id,
        current_rating=player.rating,
        is_provisional=is_provisional(player.games_played),
        games_counted=len(history),
        has_history=len(history) >= MIN_GAMES_FOR_HISTORY,
    )
    if not series.has_history:
        logger.debug(
            "Not enough rated games for a rating history",
            extra={"player_id": player_id, "games_counted": len(history)},
        )
        return series

    series.points = reconstruct_rating_series(
        player.rating,
        history,
        as_utc(as_of) if as_of else datetime.now(timezone.utc),
    )
    return series
