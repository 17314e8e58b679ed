# tests/test_api_players.py

"""Tests for the Player API endpoints."""

import pytest
from httpx import AsyncClient


async def create_player(client: AsyncClient, username: str) -> int:
    """Helper to create a player and return its ID."""
    res = await client.post("/players/", json={"username": username})
    assert res.status_code == 201
    return int(res.json()["id"])


async def play_rated_game(
    client: AsyncClient,
    white_id: int,
    black_id: int,
    result: str,
    completed_at: str | None = None,
) -> int:
    """Helper to start and finish a rated game, returning its ID."""
    res = await client.post(
        "/games/", json={"white_player_id": white_id, "black_player_id": black_id}
    )
    assert res.status_code == 201
    game_id = int(res.json()["id"])
    payload = {"result": result}
    if completed_at is not None:
        payload["completed_at"] = completed_at
    res = await client.put(f"/games/{game_id}/result", json=payload)
    assert res.status_code == 200
    return game_id


def is_utc(timestamp: str) -> bool:
    """Whether a serialized datetime carries a UTC offset."""
    return timestamp.endswith("Z") or timestamp.endswith("+00:00")


@pytest.mark.asyncio
async def test_create_player(async_client: AsyncClient):
    """Test creating a new player via the POST /players/ endpoint."""
    # 1. ACT
    response = await async_client.post("/players/", json={"username": "capablanca"})

    # 2. ASSERT: New players start at the default rating.
    assert response.status_code == 201
    data = response.json()
    assert data["username"] == "capablanca"
    assert data["rating"] == 1200
    assert data["games_played"] == 0
    assert data["wins"] == data["losses"] == data["draws"] == 0
    assert data["is_provisional"] is True
    assert data["rating_category"] == "Novice"
    assert isinstance(data["id"], int)


@pytest.mark.asyncio
async def test_create_player_ignores_client_rating(async_client: AsyncClient):
    response = await async_client.post(
        "/players/", json={"username": "smurf", "rating": 2800}
    )

    assert response.status_code == 201
    assert response.json()["rating"] == 1200


@pytest.mark.asyncio
async def test_create_duplicate_player(async_client: AsyncClient):
    await create_player(async_client, "tal")

    response = await async_client.post("/players/", json={"username": "tal"})

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_create_player_with_empty_username(async_client: AsyncClient):
    response = await async_client.post("/players/", json={"username": ""})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_read_player(async_client: AsyncClient):
    player_id = await create_player(async_client, "botvinnik")

    response = await async_client.get(f"/players/{player_id}")

    assert response.status_code == 200
    assert response.json()["username"] == "botvinnik"


@pytest.mark.asyncio
async def test_read_missing_player(async_client: AsyncClient):
    response = await async_client.get("/players/999")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_rating_history(async_client: AsyncClient):
    """Test the history lists rated games from the player's side."""
    # 1. ARRANGE
    alice = await create_player(async_client, "alice")
    bob = await create_player(async_client, "bob")
    first = await play_rated_game(async_client, alice, bob, "1-0")
    second = await play_rated_game(async_client, bob, alice, "1-0")

    # 2. ACT
    response = await async_client.get(f"/players/{alice}/rating-history")

    # 3. ASSERT: Newest first.
    assert response.status_code == 200
    history = response.json()
    assert [h["game_id"] for h in history] == [second, first]
    assert history[0]["color"] == "black"
    assert history[0]["opponent_id"] == bob
    assert history[0]["result"] == "1-0"
    assert history[1]["rating_change"] == 20


@pytest.mark.asyncio
async def test_rating_history_limit_is_validated(async_client: AsyncClient):
    player_id = await create_player(async_client, "limited")

    response = await async_client.get(
        f"/players/{player_id}/rating-history", params={"limit": 0}
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_rating_history_for_missing_player(async_client: AsyncClient):
    response = await async_client.get("/players/999/rating-history")

    assert response.status_code == 404
    assert response.json()["error_type"] == "PlayerNotFoundError"


@pytest.mark.asyncio
async def test_rating_series(async_client: AsyncClient):
    alice = await create_player(async_client, "alice")
    bob = await create_player(async_client, "bob")
    await play_rated_game(async_client, alice, bob, "1-0")
    await play_rated_game(async_client, alice, bob, "1/2-1/2")

    response = await async_client.get(f"/players/{alice}/rating-series")

    assert response.status_code == 200
    series = response.json()
    assert series["has_history"] is True
    assert series["games_counted"] == 2
    assert series["is_provisional"] is True
    ratings = [p["rating"] for p in series["points"]]
    assert ratings[0] == 1200
    assert ratings[-1] == series["current_rating"]
    assert len(ratings) == 3
    assert all(is_utc(p["timestamp"]) for p in series["points"])


@pytest.mark.asyncio
async def test_rating_series_without_history(async_client: AsyncClient):
    player_id = await create_player(async_client, "newcomer")

    response = await async_client.get(f"/players/{player_id}/rating-series")

    assert response.status_code == 200
    series = response.json()
    assert series["has_history"] is False
    assert series["points"] == []
    assert series["current_rating"] == 1200


@pytest.mark.asyncio
async def test_rating_history_orders_by_instant_across_offsets(
    async_client: AsyncClient,
):
    """Completion times with different offsets are compared as instants."""
    # 1. ARRANGE: Game 1 ends at 05:00 UTC (10:00 local +05:00), game 2 at
    #    08:00 UTC, so game 2 is the more recent one.
    alice = await create_player(async_client, "alice")
    bob = await create_player(async_client, "bob")
    first = await play_rated_game(
        async_client, alice, bob, "1-0", completed_at="2026-01-01T10:00:00+05:00"
    )
    second = await play_rated_game(
        async_client, alice, bob, "0-1", completed_at="2026-01-01T08:00:00+00:00"
    )

    # 2. ACT
    response = await async_client.get(f"/players/{alice}/rating-history")

    # 3. ASSERT: Newest first, every timestamp in UTC.
    assert response.status_code == 200
    history = response.json()
    assert [h["game_id"] for h in history] == [second, first]
    assert history[1]["played_at"].startswith("2026-01-01T05:00:00")
    assert all(is_utc(h["played_at"]) for h in history)


@pytest.mark.asyncio
async def test_finished_game_reports_completion_in_utc(async_client: AsyncClient):
    alice = await create_player(async_client, "alice")
    bob = await create_player(async_client, "bob")
    game_id = await play_rated_game(
        async_client, alice, bob, "1/2-1/2", completed_at="2026-01-01T01:30:00-03:00"
    )

    response = await async_client.get(f"/games/{game_id}")

    assert response.status_code == 200
    game = response.json()
    assert game["completed_at"].startswith("2026-01-01T04:30:00")
    assert is_utc(game["completed_at"])
    assert is_utc(game["created_at"])
