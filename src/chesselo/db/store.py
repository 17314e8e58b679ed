# src/chesselo/db/store.py

"""SQLAlchemy implementation of the RatingStore contract."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chesselo.db import models
from chesselo.exceptions import RatingPersistenceError, StaleRecordError
from chesselo.rating.elo_engine import GameResult
from chesselo.store.base import (
    GameRecord,
    PlayerRatingUpdate,
    PlayerRecord,
    RatingHistoryItem,
    as_utc,
)

logger = logging.getLogger(__name__)

TERMINAL_RESULTS = [r.value for r in GameResult]


def player_record(player: models.Player) -> PlayerRecord:
    return PlayerRecord(
        id=player.id,
        rating=player.rating,
        games_played=player.games_played,
        wins=player.wins,
        losses=player.losses,
        draws=player.draws,
        version=player.version,
    )


def game_record(game: models.Game) -> GameRecord:
    return GameRecord(
        id=game.id,
        white_player_id=game.white_player_id,
        black_player_id=game.black_player_id,
        rated=game.rated,
        status=game.status,
        result=game.result,
        white_rating_change=game.white_rating_change,
        black_rating_change=game.black_rating_change,
        created_at=as_utc(game.created_at) if game.created_at else None,
        completed_at=as_utc(game.completed_at) if game.completed_at else None,
    )


class SqlAlchemyRatingStore:
    """
    RatingStore backed by an AsyncSession.

    Writes are conditional UPDATE statements: players on their version
    column, games on their rating change columns still being NULL. A write
    that matches no row raises StaleRecordError. transaction() commits on
    success and rolls back on any error, so the store is atomic.
    """

    atomic = True

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_game(self, game_id: int) -> GameRecord | None:
        try:
            # populate_existing: never trust identity-map state across retries
            game = await self.db.get(models.Game, game_id, populate_existing=True)
        except SQLAlchemyError as e:
            raise RatingPersistenceError("get_game", str(e), game_id=game_id) from e
        return game_record(game) if game else None

    async def get_player(self, player_id: int) -> PlayerRecord | None:
        try:
            player = await self.db.get(
                models.Player, player_id, populate_existing=True
            )
        except SQLAlchemyError as e:
            raise RatingPersistenceError(
                "get_player", str(e), player_id=player_id
            ) from e
        return player_record(player) if player else None

    async def update_player(
        self,
        player_id: int,
        values: PlayerRatingUpdate,
        expected_version: int,
    ) -> None:
        stmt = (
            update(models.Player)
            .where(
                models.Player.id == player_id,
                models.Player.version == expected_version,
            )
            .values(
                rating=values.rating,
                games_played=values.games_played,
                wins=values.wins,
                losses=values.losses,
                draws=values.draws,
                version=models.Player.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise RatingPersistenceError(
                "update_player", str(e), player_id=player_id
            ) from e

        if result.rowcount != 1:  # type: ignore[attr-defined]
            raise StaleRecordError("player", player_id, expected_version)

    async def update_game(
        self,
        game_id: int,
        white_rating_change: int,
        black_rating_change: int,
    ) -> None:
        stmt = (
            update(models.Game)
            .where(
                models.Game.id == game_id,
                models.Game.white_rating_change.is_(None),
                models.Game.black_rating_change.is_(None),
            )
            .values(
                white_rating_change=white_rating_change,
                black_rating_change=black_rating_change,
                version=models.Game.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise RatingPersistenceError(
                "update_game", str(e), game_id=game_id
            ) from e

        if result.rowcount != 1:  # type: ignore[attr-defined]
            raise StaleRecordError("game", game_id)

    async def list_rated_completed_games_for_player(
        self, player_id: int, limit: int
    ) -> list[RatingHistoryItem]:
        Game = models.Game
        played_at = func.coalesce(Game.completed_at, Game.created_at)

        query = (
            select(Game)
            .where(
                Game.rated.is_(True),
                Game.status == "completed",
                Game.result.in_(TERMINAL_RESULTS),
                or_(
                    and_(
                        Game.white_player_id == player_id,
                        Game.white_rating_change.is_not(None),
                    ),
                    and_(
                        Game.black_player_id == player_id,
                        Game.black_rating_change.is_not(None),
                    ),
                ),
            )
            .order_by(played_at.desc(), Game.id.desc())
            .limit(limit)
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            raise RatingPersistenceError(
                "list_rated_completed_games_for_player",
                str(e),
                player_id=player_id,
            ) from e

        items = []
        for game in result.scalars().all():
            is_white = game.white_player_id == player_id
            change = game.white_rating_change if is_white else game.black_rating_change
            if change is None or game.result is None:
                continue
            items.append(
                RatingHistoryItem(
                    game_id=game.id,
                    played_at=as_utc(game.completed_at or game.created_at),
                    opponent_id=(
                        game.black_player_id if is_white else game.white_player_id
                    ),
                    rating_change=change,
                    result=game.result,
                    color="white" if is_white else "black",
                )
            )
        return items

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Commit everything done inside the block, or roll all of it back."""
        try:
            yield
            await self.db.commit()
        except Exception:
            logger.debug("Rolling back rating transaction")
            await self.db.rollback()
            raise
