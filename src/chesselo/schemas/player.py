# src/chesselo/schemas/player.py

"""Pydantic schemas for the Player resource."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from chesselo.rating.categories import rating_category
from chesselo.services.history_service import is_provisional
from chesselo.store.base import as_utc


# ===============================================
# Base Schema: Defines shared attributes for creation
# ===============================================
class PlayerBase(BaseModel):
    """Shared properties for a player."""

    username: str = Field(..., min_length=1, max_length=64)


# ===============================================
# Create Schema: Inherits the base properties
# ===============================================
class PlayerCreate(PlayerBase):
    """Properties to receive via API on create.

    Rating and counters are never accepted from clients; every new player
    starts at the default rating with no games.
    """

    pass


# ===============================================
# Read Schema: Defines attributes for returning data
# ===============================================
class PlayerRead(PlayerBase):
    """Properties to return to the client."""

    id: int
    rating: int
    games_played: int
    wins: int
    losses: int
    draws: int
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_provisional(self) -> bool:
        return is_provisional(self.games_played)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def rating_category(self) -> str:
        return rating_category(self.rating)

    # Enable ORM mode for this schema
    model_config = ConfigDict(from_attributes=True)
