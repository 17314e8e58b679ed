# src/chesselo/exceptions.py

"""Custom exception hierarchy for chesselo.

This module provides a structured exception hierarchy that enables:
1. Proper HTTP status code mapping in API endpoints
2. Detailed error context for logging and debugging
3. Clear distinction between validation, persistence and consistency failures
"""

from __future__ import annotations


class ChessEloError(Exception):
    """Base exception for all chesselo errors.

    Attributes:
        message: Human-readable error description
        details: Optional dict with additional context for logging/debugging
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


# =============================================================================
# Resource Not Found Errors (HTTP 404)
# =============================================================================


class ResourceNotFoundError(ChessEloError):
    """Base class for resource not found errors."""

    pass


class GameNotFoundError(ResourceNotFoundError):
    """Raised when a game ID does not exist."""

    def __init__(self, game_id: int) -> None:
        super().__init__(
            message=f"Game with ID {game_id} not found",
            details={"game_id": game_id},
        )


class PlayerNotFoundError(ResourceNotFoundError):
    """Raised when a player ID does not exist."""

    def __init__(self, player_id: int, game_id: int | None = None) -> None:
        details: dict = {"player_id": player_id}
        if game_id is not None:
            details["game_id"] = game_id
        super().__init__(
            message=f"Player with ID {player_id} not found",
            details=details,
        )


# =============================================================================
# Validation Errors (HTTP 422)
# =============================================================================


class ValidationError(ChessEloError):
    """Base class for validation errors. These are never retryable."""

    pass


class GameNotRatedError(ValidationError):
    """Raised when a rating update is requested for an unrated game."""

    def __init__(self, game_id: int) -> None:
        super().__init__(
            message=f"Cannot calculate ratings for unrated game {game_id}",
            details={"game_id": game_id, "field": "rated"},
        )


class GameNotCompletedError(ValidationError):
    """Raised when a rating update is requested for a game still in progress."""

    def __init__(self, game_id: int, status: str) -> None:
        super().__init__(
            message=f"Cannot calculate ratings for game {game_id} "
            f"with status '{status}'",
            details={"game_id": game_id, "field": "status", "status": status},
        )


class MissingGameResultError(ValidationError):
    """Raised when a completed game has no terminal result recorded."""

    def __init__(self, game_id: int) -> None:
        super().__init__(
            message=f"Game {game_id} has no result",
            details={"game_id": game_id, "field": "result"},
        )


class InvalidGameResultError(ValidationError):
    """Raised when a result is not one of '1-0', '0-1' or '1/2-1/2'."""

    def __init__(self, result: object, game_id: int | None = None) -> None:
        details: dict = {"field": "result", "result": result}
        if game_id is not None:
            details["game_id"] = game_id
        super().__init__(
            message=f"Invalid game result: {result!r}",
            details=details,
        )


class SamePlayerError(ValidationError):
    """Raised when a game is started with the same player on both sides."""

    def __init__(self, player_id: int) -> None:
        super().__init__(
            message=f"Player {player_id} cannot play against themselves",
            details={"player_id": player_id},
        )


class GameAlreadyFinishedError(ValidationError):
    """Raised when a result is recorded for a game that already ended."""

    def __init__(self, game_id: int, status: str) -> None:
        super().__init__(
            message=f"Game {game_id} has already finished with status '{status}'",
            details={"game_id": game_id, "status": status},
        )


class InvalidHistoryLimitError(ValidationError):
    """Raised when a rating history is requested with a limit below 1."""

    def __init__(self, limit: int) -> None:
        super().__init__(
            message=f"History limit must be at least 1, got {limit}",
            details={"field": "limit", "limit": limit},
        )


# =============================================================================
# Rating Engine Errors (HTTP 409, 500 or 503 depending on cause)
# =============================================================================


class RatingEngineError(ChessEloError):
    """Base class for failures while persisting a rating update."""

    pass


class RatingPersistenceError(RatingEngineError):
    """Raised when the store fails during a read or a write.

    The caller may retry: either no write happened or the store rolled
    every write back.
    """

    def __init__(self, operation: str, reason: str, **context: object) -> None:
        super().__init__(
            message=f"Store operation '{operation}' failed: {reason}",
            details={"operation": operation, "reason": reason, **context},
        )


class StaleRecordError(RatingEngineError):
    """Raised when a conditional write finds the record changed underneath it."""

    def __init__(
        self,
        record_type: str,
        record_id: int,
        expected_version: int | None = None,
    ) -> None:
        details: dict = {"record_type": record_type, "record_id": record_id}
        if expected_version is not None:
            details["expected_version"] = expected_version
        super().__init__(
            message=f"{record_type.capitalize()} {record_id} was modified "
            f"concurrently",
            details=details,
        )


class RatingConsistencyError(RatingEngineError):
    """Raised when a rating update was only partially written.

    Persisted state is inconsistent and needs operator attention.
    """

    def __init__(self, game_id: int, applied_writes: list[str], reason: str) -> None:
        super().__init__(
            message=f"Rating update for game {game_id} partially applied "
            f"({', '.join(applied_writes)}): {reason}",
            details={
                "game_id": game_id,
                "applied_writes": applied_writes,
                "reason": reason,
            },
        )
