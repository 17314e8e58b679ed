# tests/test_rating_service.py

"""Tests for the rating updater against in-memory stores."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace

import pytest
from chesselo.exceptions import (
    GameNotCompletedError,
    GameNotFoundError,
    GameNotRatedError,
    InvalidGameResultError,
    MissingGameResultError,
    PlayerNotFoundError,
    RatingConsistencyError,
    RatingPersistenceError,
    StaleRecordError,
)
from chesselo.services.rating_service import update_ratings_for_game
from chesselo.store import GameRecord, InMemoryRatingStore, PlayerRecord

# =============================================================================
# Helper Stores and Functions
# =============================================================================


class ConflictingStore(InMemoryRatingStore):
    """Loses the first `conflicts` player writes to a concurrent writer."""

    def __init__(self, conflicts: int) -> None:
        super().__init__()
        self.conflicts = conflicts
        self.player_write_attempts = 0

    async def update_player(self, player_id, values, expected_version):
        self.player_write_attempts += 1
        if self.conflicts > 0:
            self.conflicts -= 1
            raise StaleRecordError("player", player_id, expected_version)
        await super().update_player(player_id, values, expected_version)


class RatedMeanwhileStore(InMemoryRatingStore):
    """Another worker rates the game right after we read it."""

    def __init__(self) -> None:
        super().__init__()
        self.raced = False

    async def get_game(self, game_id):
        game = await super().get_game(game_id)
        if not self.raced and game is not None:
            self.raced = True
            self.games[game_id] = replace(
                game, white_rating_change=10, black_rating_change=-10
            )
        return game


class BrokenGameWriteStore(InMemoryRatingStore):
    async def update_game(self, game_id, white_rating_change, black_rating_change):
        raise RuntimeError("disk full")


class BrokenReadStore(InMemoryRatingStore):
    async def get_game(self, game_id):
        raise RuntimeError("connection reset")


class NonAtomicStore(BrokenGameWriteStore):
    """Applies each write immediately and cannot undo it."""

    atomic = False

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        yield


class NonAtomicBrokenPlayerWriteStore(InMemoryRatingStore):
    atomic = False

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        yield

    async def update_player(self, player_id, values, expected_version):
        raise RuntimeError("timeout")


def seed(
    store: InMemoryRatingStore,
    result: str | None = "1-0",
    rated: bool = True,
    status: str = "completed",
    white: PlayerRecord | None = None,
    black: PlayerRecord | None = None,
) -> GameRecord:
    """Seed two 1400 players with 50 games each and one game between them."""
    store.add_player(white or PlayerRecord(id=1, rating=1400, games_played=50))
    store.add_player(black or PlayerRecord(id=2, rating=1400, games_played=50))
    return store.add_game(
        GameRecord(
            id=10,
            white_player_id=1,
            black_player_id=2,
            rated=rated,
            status=status,
            result=result,
        )
    )


# =============================================================================
# Successful Updates
# =============================================================================


@pytest.mark.asyncio
async def test_white_win_updates_ratings_and_counters(memory_store):
    """Test the full update for a decisive game."""
    # 1. ARRANGE
    seed(memory_store, result="1-0")

    # 2. ACT
    update = await update_ratings_for_game(memory_store, 10)

    # 3. ASSERT: Returned result
    assert update.already_processed is False
    assert update.white_rating_change == 10
    assert update.black_rating_change == -10
    assert update.white_new_rating == 1410
    assert update.black_new_rating == 1390

    # Players persisted
    white = memory_store.players[1]
    black = memory_store.players[2]
    assert (white.rating, white.games_played, white.wins, white.losses) == (
        1410,
        51,
        1,
        0,
    )
    assert (black.rating, black.games_played, black.wins, black.losses) == (
        1390,
        51,
        0,
        1,
    )
    assert white.version == black.version == 2

    # Game persisted
    game = memory_store.games[10]
    assert game.white_rating_change == 10
    assert game.black_rating_change == -10


@pytest.mark.asyncio
async def test_draw_increments_draw_counters(memory_store):
    seed(memory_store, result="1/2-1/2")

    await update_ratings_for_game(memory_store, 10)

    for player_id in (1, 2):
        player = memory_store.players[player_id]
        assert player.draws == 1
        assert player.wins == 0
        assert player.losses == 0
        assert player.games_played == 51


@pytest.mark.asyncio
async def test_second_update_is_a_no_op(memory_store):
    """Test that a game is rated at most once."""
    # 1. ARRANGE: Rate the game once.
    seed(memory_store, result="0-1")
    first = await update_ratings_for_game(memory_store, 10)
    players_after_first = dict(memory_store.players)

    # 2. ACT: Rate it again.
    second = await update_ratings_for_game(memory_store, 10)

    # 3. ASSERT: Recorded changes are returned, nothing is written.
    assert second.already_processed is True
    assert second.white_rating_change == first.white_rating_change
    assert second.black_rating_change == first.black_rating_change
    assert second.white_new_rating is None
    assert memory_store.players == players_after_first


# =============================================================================
# Validation Failures
# =============================================================================


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "game_kwargs, expected_error",
    [
        ({"rated": False}, GameNotRatedError),
        ({"status": "active"}, GameNotCompletedError),
        ({"status": "abandoned"}, GameNotCompletedError),
        ({"result": None}, MissingGameResultError),
        ({"result": "*"}, MissingGameResultError),
        ({"result": "2-0"}, InvalidGameResultError),
    ],
)
async def test_invalid_game_is_rejected_without_writes(
    memory_store, game_kwargs, expected_error
):
    seed(memory_store, **game_kwargs)
    players_before = dict(memory_store.players)
    game_before = memory_store.games[10]

    with pytest.raises(expected_error):
        await update_ratings_for_game(memory_store, 10)

    assert memory_store.players == players_before
    assert memory_store.games[10] == game_before


@pytest.mark.asyncio
async def test_missing_game(memory_store):
    with pytest.raises(GameNotFoundError):
        await update_ratings_for_game(memory_store, 999)


@pytest.mark.asyncio
async def test_missing_player_carries_game_id(memory_store):
    seed(memory_store)
    del memory_store.players[2]

    with pytest.raises(PlayerNotFoundError) as exc_info:
        await update_ratings_for_game(memory_store, 10)

    assert exc_info.value.details == {"player_id": 2, "game_id": 10}
    assert memory_store.players[1].games_played == 50


# =============================================================================
# Concurrency
# =============================================================================


@pytest.mark.asyncio
async def test_stale_player_write_is_retried():
    """Test that losing one race still applies the game exactly once."""
    # 1. ARRANGE
    store = ConflictingStore(conflicts=1)
    seed(store)

    # 2. ACT
    update = await update_ratings_for_game(store, 10, max_attempts=3)

    # 3. ASSERT: One failed and two successful player writes.
    assert update.already_processed is False
    assert store.player_write_attempts == 3
    assert store.players[1].games_played == 51
    assert store.players[2].games_played == 51
    assert store.games[10].white_rating_change == 10


@pytest.mark.asyncio
async def test_retries_are_bounded():
    store = ConflictingStore(conflicts=10)
    seed(store)

    with pytest.raises(StaleRecordError):
        await update_ratings_for_game(store, 10, max_attempts=3)

    assert store.player_write_attempts == 3
    assert store.players[1].games_played == 50
    assert store.games[10].white_rating_change is None


@pytest.mark.asyncio
async def test_game_rated_concurrently_is_not_applied_twice():
    """If another worker rates the game first, our writes are rolled back."""
    # 1. ARRANGE
    store = RatedMeanwhileStore()
    seed(store)

    # 2. ACT
    update = await update_ratings_for_game(store, 10)

    # 3. ASSERT: The retry sees the other worker's result.
    assert update.already_processed is True
    assert update.white_rating_change == 10
    assert store.players[1].games_played == 50
    assert store.players[1].rating == 1400
    assert store.players[2].version == 1


# =============================================================================
# Store Failures
# =============================================================================


@pytest.mark.asyncio
async def test_write_failure_rolls_back_and_is_retryable():
    store = BrokenGameWriteStore()
    seed(store)

    with pytest.raises(RatingPersistenceError) as exc_info:
        await update_ratings_for_game(store, 10)

    assert exc_info.value.details["game_id"] == 10
    assert "disk full" in exc_info.value.message
    # Player writes that preceded the failure were undone
    assert store.players[1].rating == 1400
    assert store.players[2].games_played == 50


@pytest.mark.asyncio
async def test_read_failure_is_wrapped():
    store = BrokenReadStore()
    seed(store)

    with pytest.raises(RatingPersistenceError) as exc_info:
        await update_ratings_for_game(store, 10)

    assert exc_info.value.details["operation"] == "get_game"
    assert exc_info.value.details["game_id"] == 10


@pytest.mark.asyncio
async def test_partial_write_on_non_atomic_store_is_reported():
    """Test that a half-applied update is never reported as retryable."""
    # 1. ARRANGE
    store = NonAtomicStore()
    seed(store)

    # 2. ACT
    with pytest.raises(RatingConsistencyError) as exc_info:
        await update_ratings_for_game(store, 10)

    # 3. ASSERT: Both player writes landed, the game write did not.
    assert exc_info.value.details["applied_writes"] == ["player:1", "player:2"]
    assert store.players[1].games_played == 51
    assert store.games[10].white_rating_change is None


@pytest.mark.asyncio
async def test_non_atomic_failure_before_any_write_is_retryable():
    store = NonAtomicBrokenPlayerWriteStore()
    seed(store)

    with pytest.raises(RatingPersistenceError):
        await update_ratings_for_game(store, 10)

    assert store.players[1].games_played == 50
