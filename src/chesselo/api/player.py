# src/chesselo/api/player.py

"""API endpoints for players, their rating history and rating series."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from chesselo.db.models import Player
from chesselo.db.session import get_db
from chesselo.db.store import SqlAlchemyRatingStore
from chesselo.rating.constants import DEFAULT_HISTORY_LIMIT
from chesselo.schemas import player as player_schema
from chesselo.schemas import rating as rating_schema
from chesselo.services import history_service

# - prefix="/players": All routes here will be prefixed with /players
# - tags=["Players"]: Groups these endpoints under "Players" in the API docs
router = APIRouter(prefix="/players", tags=["Players"])


@router.post(
    "/",
    response_model=player_schema.PlayerRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_player(
    player_in: player_schema.PlayerCreate, db: AsyncSession = Depends(get_db)
) -> Player:
    """
    Register a new player with the default rating and no games.

    - **username**: The unique name for the player.

    Raises:
        409 Conflict: If a player with the same username already exists.
    """
    new_player = Player(**player_in.model_dump())

    try:
        db.add(new_player)
        await db.commit()
        await db.refresh(new_player)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Player with username '{player_in.username}' already exists",
        )

    return new_player


@router.get("/{player_id}", response_model=player_schema.PlayerRead)
async def read_player(player_id: int, db: AsyncSession = Depends(get_db)) -> Player:
    """
    Retrieve a player with their rating, counters and provisional status.
    """
    player = await db.get(Player, player_id)
    if not player:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Player with id {player_id} not found",
        )
    return player


@router.get(
    "/{player_id}/rating-history",
    response_model=list[rating_schema.RatingHistoryItemRead],
)
async def read_rating_history(
    player_id: int,
    limit: int = Query(
        DEFAULT_HISTORY_LIMIT, ge=1, le=100, description="Max games to return"
    ),
    db: AsyncSession = Depends(get_db),
) -> list[rating_schema.RatingHistoryItemRead]:
    """
    Rated games of a player, most recent first, with the rating change,
    opponent, result and colour of each.
    """
    history = await history_service.get_rating_history(
        SqlAlchemyRatingStore(db), player_id, limit
    )
    return [rating_schema.RatingHistoryItemRead.model_validate(h) for h in history]


@router.get(
    "/{player_id}/rating-series",
    response_model=rating_schema.RatingSeriesRead,
)
async def read_rating_series(
    player_id: int,
    limit: int = Query(
        DEFAULT_HISTORY_LIMIT, ge=1, le=100, description="Max games to replay"
    ),
    db: AsyncSession = Depends(get_db),
) -> rating_schema.RatingSeriesRead:
    """
    Rating over time, oldest point first, ending at the current rating.

    - **has_history**: False when the player has fewer than two rated games
    - **is_provisional**: True below 30 rated games
    """
    series = await history_service.get_rating_series(
        SqlAlchemyRatingStore(db), player_id, limit
    )
    return rating_schema.RatingSeriesRead.model_validate(series)
