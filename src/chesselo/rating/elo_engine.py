# src/chesselo/rating/elo_engine.py

"""
ELO rating calculation for rated chess games.

The formulas:
  Expected score: E = 1 / (1 + 10^((R_opp - R) / 400))
  New rating:     R' = round(R + K * (actual - expected)), clamped to [100, 3000]

Each side uses its own K factor, chosen from the number of rated games it
has played. Rounding is half away from zero so exact values are reproducible.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from chesselo.exceptions import InvalidGameResultError
from chesselo.rating.constants import (
    DEFAULT_K_FACTOR,
    ELO_SCALE,
    EXPERIENCED_PLAYER_K_FACTOR,
    EXPERIENCED_THRESHOLD,
    MAX_RATING,
    MIN_RATING,
    NEW_PLAYER_K_FACTOR,
    PROVISIONAL_THRESHOLD,
)


class GameResult(str, Enum):
    """Terminal results of a chess game, in PGN notation."""

    WHITE_WIN = "1-0"
    BLACK_WIN = "0-1"
    DRAW = "1/2-1/2"


# PGN marker for a game without a result yet
UNFINISHED_RESULT = "*"


@dataclass(frozen=True)
class EloCalculationResult:
    """New ratings for both sides of a game, plus the inputs used to get there."""

    white_new_rating: int
    black_new_rating: int
    white_rating_change: int
    black_rating_change: int

    # Kept for auditing
    white_expected: float
    black_expected: float
    white_k_factor: int
    black_k_factor: int


def parse_result(result: object) -> GameResult:
    """Convert a stored result value into a GameResult, failing fast otherwise."""
    if isinstance(result, GameResult):
        return result
    try:
        return GameResult(result)
    except ValueError:
        raise InvalidGameResultError(result) from None


def get_k_factor(games_played: int) -> int:
    """K factor for a player based on their own experience."""
    if games_played < PROVISIONAL_THRESHOLD:
        return NEW_PLAYER_K_FACTOR
    if games_played > EXPERIENCED_THRESHOLD:
        return EXPERIENCED_PLAYER_K_FACTOR
    return DEFAULT_K_FACTOR


def expected_score(rating: int, opponent_rating: int) -> float:
    """Probability-like expected score of a player against an opponent."""
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / ELO_SCALE))


def actual_scores(result: GameResult | str) -> tuple[float, float]:
    """(white, black) actual scores for a terminal result."""
    result = parse_result(result)
    if result is GameResult.WHITE_WIN:
        return 1.0, 0.0
    if result is GameResult.BLACK_WIN:
        return 0.0, 1.0
    return 0.5, 0.5


def clamp_rating(rating: int) -> int:
    """Clamp a rating into the allowed range."""
    return max(MIN_RATING, min(MAX_RATING, rating))


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _new_rating(rating: int, k_factor: int, actual: float, expected: float) -> int:
    raw = _round_half_up(rating + k_factor * (actual - expected))
    return clamp_rating(raw)


def calculate_ratings(
    white_rating: int,
    black_rating: int,
    white_games_played: int,
    black_games_played: int,
    result: GameResult | str,
) -> EloCalculationResult:
    """
    Calculate both players' new ratings after a completed rated game.

    The reported change is taken from the clamped rating, so a player at the
    floor losing 30 raw points from 105 reports a change of -5, not -30.

    Raises:
        InvalidGameResultError: If result is not '1-0', '0-1' or '1/2-1/2'.

    Example:
        # Equal 1400 players with 50 games each, white wins
        calc = calculate_ratings(1400, 1400, 50, 50, "1-0")
        # calc.white_new_rating == 1410, calc.black_new_rating == 1390
    """
    white_actual, black_actual = actual_scores(result)

    white_k = get_k_factor(white_games_played)
    black_k = get_k_factor(black_games_played)

    white_expected = expected_score(white_rating, black_rating)
    black_expected = expected_score(black_rating, white_rating)

    white_new = _new_rating(white_rating, white_k, white_actual, white_expected)
    black_new = _new_rating(black_rating, black_k, black_actual, black_expected)

    return EloCalculationResult(
        white_new_rating=white_new,
        black_new_rating=black_new,
        white_rating_change=white_new - white_rating,
        black_rating_change=black_new - black_rating,
        white_expected=white_expected,
        black_expected=black_expected,
        white_k_factor=white_k,
        black_k_factor=black_k,
    )
