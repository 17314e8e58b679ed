# src/chesselo/services/rating_service.py

"""Business logic for applying a completed game's result to player ratings."""

from __future__ import annotations

import logging
import os
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TypeVar

from chesselo.exceptions import (
    ChessEloError,
    GameNotCompletedError,
    GameNotFoundError,
    GameNotRatedError,
    MissingGameResultError,
    PlayerNotFoundError,
    RatingConsistencyError,
    RatingPersistenceError,
    StaleRecordError,
)
from chesselo.rating.elo_engine import (
    UNFINISHED_RESULT,
    actual_scores,
    calculate_ratings,
    parse_result,
)
from chesselo.store.base import PlayerRatingUpdate, PlayerRecord, RatingStore

logger = logging.getLogger(__name__)

# How many times a rating update is retried after losing a race to another write
MAX_ATTEMPTS = int(os.getenv("RATING_UPDATE_MAX_ATTEMPTS", "3"))

T = TypeVar("T")


@dataclass(frozen=True)
class RatingUpdateResult:
    """Outcome of a rating update.

    When already_processed is True the game had been rated before; the
    changes are the recorded ones and the new ratings are not reported.
    """

    game_id: int
    white_player_id: int
    black_player_id: int
    white_rating_change: int
    black_rating_change: int
    white_new_rating: int | None = None
    black_new_rating: int | None = None
    already_processed: bool = False


def _counters_after_game(
    player: PlayerRecord, score: float, new_rating: int
) -> PlayerRatingUpdate:
    """New rating and counters for a player who scored `score` in one game."""
    return PlayerRatingUpdate(
        rating=new_rating,
        games_played=player.games_played + 1,
        wins=player.wins + (1 if score == 1.0 else 0),
        losses=player.losses + (1 if score == 0.0 else 0),
        draws=player.draws + (1 if score == 0.5 else 0),
    )


async def _read(operation: str, pending: Awaitable[T], game_id: int) -> T:
    """Await a store read, attaching the game id to any failure."""
    try:
        return await pending
    except RatingPersistenceError as e:
        e.details.setdefault("game_id", game_id)
        raise
    except ChessEloError:
        raise
    except Exception as e:
        raise RatingPersistenceError(operation, str(e), game_id=game_id) from e


async def _apply_rating_update(store: RatingStore, game_id: int) -> RatingUpdateResult:
    # 1. Load and validate the game. Nothing is written before this passes.
    game = await _read("get_game", store.get_game(game_id), game_id)
    if game is None:
        raise GameNotFoundError(game_id)
    if not game.rated:
        raise GameNotRatedError(game_id)
    if game.status != "completed":
        raise GameNotCompletedError(game_id, game.status)
    if game.result is None or game.result in ("", UNFINISHED_RESULT):
        raise MissingGameResultError(game_id)
    result = parse_result(game.result)

    # 2. Load both players
    white = await _read("get_player", store.get_player(game.white_player_id), game_id)
    if white is None:
        raise PlayerNotFoundError(game.white_player_id, game_id=game_id)
    black = await _read("get_player", store.get_player(game.black_player_id), game_id)
    if black is None:
        raise PlayerNotFoundError(game.black_player_id, game_id=game_id)

    # 3. Idempotence guard: a game is rated at most once
    if game.is_rating_recorded:
        logger.debug("Ratings already recorded for game", extra={"game_id": game_id})
        return RatingUpdateResult(
            game_id=game_id,
            white_player_id=white.id,
            black_player_id=black.id,
            white_rating_change=game.white_rating_change or 0,
            black_rating_change=game.black_rating_change or 0,
            already_processed=True,
        )

    # 4. Calculate
    calc = calculate_ratings(
        white_rating=white.rating,
        black_rating=black.rating,
        white_games_played=white.games_played,
        black_games_played=black.games_played,
        result=result,
    )
    white_score, black_score = actual_scores(result)

    # 5-6. Persist players and game as one transaction
    applied: list[str] = []
    try:
        async with store.transaction():
            await store.update_player(
                white.id,
                _counters_after_game(white, white_score, calc.white_new_rating),
                white.version,
            )
            applied.append(f"player:{white.id}")
            await store.update_player(
                black.id,
                _counters_after_game(black, black_score, calc.black_new_rating),
                black.version,
            )
            applied.append(f"player:{black.id}")
            await store.update_game(
                game_id, calc.white_rating_change, calc.black_rating_change
            )
            applied.append(f"game:{game_id}")
    except Exception as e:
        if applied and not store.atomic:
            logger.error(
                "Rating update partially applied, manual repair required",
                extra={"game_id": game_id, "applied_writes": applied, "error": str(e)},
            )
            raise RatingConsistencyError(game_id, applied, str(e)) from e
        if isinstance(e, StaleRecordError):
            raise
        if isinstance(e, RatingPersistenceError):
            e.details.setdefault("game_id", game_id)
            raise
        raise RatingPersistenceError(
            "apply_rating_update", str(e), game_id=game_id
        ) from e

    logger.info(
        "Ratings updated",
        extra={
            "game_id": game_id,
            "result": result.value,
            "white_player_id": white.id,
            "black_player_id": black.id,
            "white_rating_before": white.rating,
            "black_rating_before": black.rating,
            "white_rating_after": calc.white_new_rating,
            "black_rating_after": calc.black_new_rating,
        },
    )
    return RatingUpdateResult(
        game_id=game_id,
        white_player_id=white.id,
        black_player_id=black.id,
        white_rating_change=calc.white_rating_change,
        black_rating_change=calc.black_rating_change,
        white_new_rating=calc.white_new_rating,
        black_new_rating=calc.black_new_rating,
    )


async def update_ratings_for_game(
    store: RatingStore,
    game_id: int,
    max_attempts: int = MAX_ATTEMPTS,
) -> RatingUpdateResult:
    """
    Apply a completed, rated game's result to both players exactly once.

    This service is responsible for:
    1. Validating the game (exists, rated, completed, has a result)
    2. Loading both players
    3. Returning the recorded changes if the game was already rated
    4. Calculating new ratings
    5. Writing both players' ratings and counters and the game's changes
       in a single store transaction

    A write that loses a race with another update (stale player version, or
    the game rated in the meantime) is retried from step 1.

    Raises:
        GameNotFoundError / PlayerNotFoundError: If a record is missing
        GameNotRatedError, GameNotCompletedError, MissingGameResultError,
        InvalidGameResultError: If the game cannot be rated
        RatingPersistenceError: If the store fails; nothing was written
        StaleRecordError: If every attempt lost a race
        RatingConsistencyError: If a non-atomic store was left half-written
    """
    attempt = 1
    while True:
        try:
            return await _apply_rating_update(store, game_id)
        except StaleRecordError as e:
            if attempt >= max_attempts:
                logger.error(
                    "Giving up on rating update after concurrent writes",
                    extra={"game_id": game_id, "attempts": attempt, **e.details},
                )
                raise
            logger.warning(
                "Concurrent rating write detected, retrying",
                extra={"game_id": game_id, "attempt": attempt, **e.details},
            )
            attempt += 1
