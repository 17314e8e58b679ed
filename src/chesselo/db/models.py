# src/chesselo/db/models.py

"""Database models for the chesselo application."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import CheckConstraint, ForeignKey, String
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

from chesselo.rating.constants import DEFAULT_RATING, MAX_RATING, MIN_RATING

Base = declarative_base()

# Lifecycle states of a game
GAME_STATUSES = ("waiting", "active", "completed", "abandoned")
FINISHED_STATUSES = ("completed", "abandoned")


# ===============================================
# Mixins for Common Columns
# ===============================================


class TimestampMixin:
    """Mixin providing created_at and updated_at timestamp columns."""

    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        default=None,
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=True,
    )


class VersionMixin:
    """Mixin providing optimistic locking via version column.

    Rating writes are conditional on the version read beforehand and bump it
    by one, so two updates racing on the same row cannot both succeed.
    """

    version: Mapped[int] = mapped_column(default=1, nullable=False)


# ===============================================
# Core Tables: Player and Game
# ===============================================


class Player(Base, TimestampMixin, VersionMixin):
    """A registered player and their current rating state.

    Counters only include rated games, so once every rated game has been
    processed wins + losses + draws == games_played.
    """

    __tablename__ = "players"
    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String, unique=True, nullable=False)

    rating: Mapped[int] = mapped_column(default=DEFAULT_RATING, nullable=False)
    games_played: Mapped[int] = mapped_column(default=0, nullable=False)
    wins: Mapped[int] = mapped_column(default=0, nullable=False)
    losses: Mapped[int] = mapped_column(default=0, nullable=False)
    draws: Mapped[int] = mapped_column(default=0, nullable=False)

    __table_args__ = (
        CheckConstraint(
            f"rating >= {MIN_RATING} AND rating <= {MAX_RATING}",
            name="ck_players_rating_range",
        ),
        CheckConstraint(
            "games_played >= 0 AND wins >= 0 AND losses >= 0 AND draws >= 0",
            name="ck_players_counters_non_negative",
        ),
    )

    def __init__(self, username: str, **kw: Any):
        super().__init__(**kw)
        self.username = username


class Game(Base, TimestampMixin, VersionMixin):
    """A game between two players.

    The rating change columns stay NULL until the rating update for the game
    has run, and are written exactly once.
    """

    __tablename__ = "games"
    id: Mapped[int] = mapped_column(primary_key=True)
    white_player_id: Mapped[int] = mapped_column(
        ForeignKey("players.id"), nullable=False, index=True
    )
    black_player_id: Mapped[int] = mapped_column(
        ForeignKey("players.id"), nullable=False, index=True
    )

    rated: Mapped[bool] = mapped_column(default=True, nullable=False)
    # One of GAME_STATUSES
    status: Mapped[str] = mapped_column(String, default="active", nullable=False)
    # '1-0', '0-1', '1/2-1/2', or NULL / '*' while unfinished
    result: Mapped[str | None] = mapped_column(String, nullable=True)

    white_rating_change: Mapped[int | None] = mapped_column(nullable=True)
    black_rating_change: Mapped[int | None] = mapped_column(nullable=True)

    # When the game ended, UTC without an offset
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True, index=True)

    __table_args__ = (
        CheckConstraint(
            "white_player_id != black_player_id", name="ck_games_distinct_players"
        ),
        CheckConstraint(
            "status IN (" + ", ".join(f"'{s}'" for s in GAME_STATUSES) + ")",
            name="ck_games_status",
        ),
    )

    def __init__(self, **kw: Any):
        super().__init__(**kw)
