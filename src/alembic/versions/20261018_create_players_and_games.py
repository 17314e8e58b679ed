"""Create players and games tables

Revision ID: 20261018_initial
Revises:
Create Date: 2026-10-18

This migration creates:
- players, with rating, counters and a version column for optimistic locking
- games, with lifecycle status, result and the per-side rating changes
- Indexes on the foreign key columns and on games.completed_at
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261018_initial"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create players and games."""
    # === PLAYERS ===
    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False, server_default="1200"),
        sa.Column("games_played", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("wins", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("losses", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("draws", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.CheckConstraint(
            "rating >= 100 AND rating <= 3000", name="ck_players_rating_range"
        ),
        sa.CheckConstraint(
            "games_played >= 0 AND wins >= 0 AND losses >= 0 AND draws >= 0",
            name="ck_players_counters_non_negative",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )

    # === GAMES ===
    op.create_table(
        "games",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("white_player_id", sa.Integer(), nullable=False),
        sa.Column("black_player_id", sa.Integer(), nullable=False),
        sa.Column("rated", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        sa.Column("result", sa.String(), nullable=True),
        sa.Column("white_rating_change", sa.Integer(), nullable=True),
        sa.Column("black_rating_change", sa.Integer(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.CheckConstraint(
            "white_player_id != black_player_id", name="ck_games_distinct_players"
        ),
        sa.CheckConstraint(
            "status IN ('waiting', 'active', 'completed', 'abandoned')",
            name="ck_games_status",
        ),
        sa.ForeignKeyConstraint(["white_player_id"], ["players.id"]),
        sa.ForeignKeyConstraint(["black_player_id"], ["players.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    # === INDEXES ===
    op.create_index("ix_games_white_player_id", "games", ["white_player_id"])
    op.create_index("ix_games_black_player_id", "games", ["black_player_id"])
    op.create_index("ix_games_completed_at", "games", ["completed_at"])


def downgrade() -> None:
    """Drop games and players."""
    op.drop_index("ix_games_completed_at", table_name="games")
    op.drop_index("ix_games_black_player_id", table_name="games")
    op.drop_index("ix_games_white_player_id", table_name="games")
    op.drop_table("games")
    op.drop_table("players")
