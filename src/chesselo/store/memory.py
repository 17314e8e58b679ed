# src/chesselo/store/memory.py

"""Dictionary-backed RatingStore for tests and embedding."""

from __future__ import annotations

import copy
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime, timezone

from chesselo.exceptions import StaleRecordError
from chesselo.store.base import (
    GameRecord,
    PlayerRatingUpdate,
    PlayerRecord,
    RatingHistoryItem,
    as_utc,
)

logger = logging.getLogger(__name__)


class InMemoryRatingStore:
    """
    A RatingStore that keeps records in plain dicts.

    transaction() snapshots both tables and restores them if the block
    raises, so the store is atomic like a database transaction.
    """

    atomic = True

    def __init__(self) -> None:
        self.players: dict[int, PlayerRecord] = {}
        self.games: dict[int, GameRecord] = {}

    # --- seeding helpers ---

    def add_player(self, player: PlayerRecord) -> PlayerRecord:
        self.players[player.id] = player
        return player

    def add_game(self, game: GameRecord) -> GameRecord:
        if game.created_at is None:
            game = replace(game, created_at=datetime.now(timezone.utc))
        self.games[game.id] = game
        return game

    # --- RatingStore protocol ---

    async def get_game(self, game_id: int) -> GameRecord | None:
        return self.games.get(game_id)

    async def get_player(self, player_id: int) -> PlayerRecord | None:
        return self.players.get(player_id)

    async def update_player(
        self,
        player_id: int,
        values: PlayerRatingUpdate,
        expected_version: int,
    ) -> None:
        current = self.players.get(player_id)
        if current is None or current.version != expected_version:
            raise StaleRecordError("player", player_id, expected_version)
        self.players[player_id] = replace(
            current,
            rating=values.rating,
            games_played=values.games_played,
            wins=values.wins,
            losses=values.losses,
            draws=values.draws,
            version=current.version + 1,
        )

    async def update_game(
        self,
        game_id: int,
        white_rating_change: int,
        black_rating_change: int,
    ) -> None:
        current = self.games.get(game_id)
        if current is None or current.is_rating_recorded:
            raise StaleRecordError("game", game_id)
        self.games[game_id] = replace(
            current,
            white_rating_change=white_rating_change,
            black_rating_change=black_rating_change,
        )

    async def list_rated_completed_games_for_player(
        self, player_id: int, limit: int
    ) -> list[RatingHistoryItem]:
        items = []
        for game in self.games.values():
            if not game.rated or game.status != "completed":
                continue
            if game.white_player_id == player_id:
                color, opponent_id = "white", game.black_player_id
                change = game.white_rating_change
            elif game.black_player_id == player_id:
                color, opponent_id = "black", game.white_player_id
                change = game.black_rating_change
            else:
                continue
            played_at = game.completed_at or game.created_at
            if change is None or game.result is None or played_at is None:
                continue
            items.append(
                RatingHistoryItem(
                    game_id=game.id,
                    played_at=as_utc(played_at),
                    opponent_id=opponent_id,
                    rating_change=change,
                    result=game.result,
                    color=color,
                )
            )

        items.sort(key=lambda item: (item.played_at, item.game_id), reverse=True)
        return items[: max(limit, 0)]

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        players = copy.copy(self.players)
        games = copy.copy(self.games)
        try:
            yield
        except Exception:
            logger.debug("Rolling back in-memory transaction")
            self.players = players
            self.games = games
            raise
