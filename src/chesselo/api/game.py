# src/chesselo/api/game.py

"""API endpoints for games and their rating updates."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from chesselo.db.models import FINISHED_STATUSES, Game, Player
from chesselo.db.session import get_db
from chesselo.db.store import SqlAlchemyRatingStore
from chesselo.exceptions import (
    GameAlreadyFinishedError,
    GameNotFoundError,
    PlayerNotFoundError,
    SamePlayerError,
)
from chesselo.schemas import game as game_schema
from chesselo.schemas import rating as rating_schema
from chesselo.services import rating_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/games", tags=["Games"])


async def _get_game_or_404(db: AsyncSession, game_id: int) -> Game:
    game = await db.get(Game, game_id)
    if not game:
        raise GameNotFoundError(game_id)
    return game


@router.post(
    "/",
    response_model=game_schema.GameRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_game(
    game_in: game_schema.GameCreate,
    db: AsyncSession = Depends(get_db),
) -> Game:
    """
    Start a game between two registered players.

    Raises:
        404: If either player doesn't exist
        422: If both sides are the same player
    """
    if game_in.white_player_id == game_in.black_player_id:
        raise SamePlayerError(game_in.white_player_id)

    for player_id in (game_in.white_player_id, game_in.black_player_id):
        if await db.get(Player, player_id) is None:
            raise PlayerNotFoundError(player_id)

    new_game = Game(**game_in.model_dump(), status="active")
    db.add(new_game)
    await db.commit()
    await db.refresh(new_game)
    return new_game


@router.get("/{game_id}", response_model=game_schema.GameRead)
async def read_game(game_id: int, db: AsyncSession = Depends(get_db)) -> Game:
    """Retrieve a single game, including its rating changes once rated."""
    return await _get_game_or_404(db, game_id)


@router.put("/{game_id}/result", response_model=game_schema.GameRead)
async def finish_game(
    game_id: int,
    finish_in: game_schema.GameFinish,
    db: AsyncSession = Depends(get_db),
) -> Game:
    """
    Record the terminal result of a game.

    For a rated game that completed normally the rating update runs in the
    same request. The result is committed first, so if the rating update
    fails it can be retried with POST /games/{game_id}/rating.

    Raises:
        404: If the game doesn't exist
        422: If the game already finished
        503: If the rating update hit a store failure
    """
    game = await _get_game_or_404(db, game_id)
    if game.status in FINISHED_STATUSES:
        raise GameAlreadyFinishedError(game_id, game.status)

    game.result = finish_in.result.value
    game.status = finish_in.status
    game.completed_at = finish_in.completed_at or datetime.now(timezone.utc)
    db.add(game)
    await db.commit()

    logger.info(
        "Game finished",
        extra={"game_id": game_id, "result": game.result, "status": game.status},
    )

    if game.rated and game.status == "completed":
        await rating_service.update_ratings_for_game(
            SqlAlchemyRatingStore(db), game_id
        )
        await db.refresh(game)

    return game


@router.post("/{game_id}/rating", response_model=rating_schema.RatingUpdateRead)
async def rate_game(
    game_id: int, db: AsyncSession = Depends(get_db)
) -> rating_schema.RatingUpdateRead:
    """
    Apply a completed rated game to both players' ratings.

    Safe to call repeatedly: once a game is rated, further calls return the
    recorded changes with already_processed=true.

    Raises:
        404: If the game or a player doesn't exist
        409: If concurrent updates kept conflicting
        422: If the game is unrated, not completed, or has no result
        503: If the store failed; nothing was written
    """
    update = await rating_service.update_ratings_for_game(
        SqlAlchemyRatingStore(db), game_id
    )
    return rating_schema.RatingUpdateRead.model_validate(update)
