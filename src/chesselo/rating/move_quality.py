# src/chesselo/rating/move_quality.py

"""
Move quality and accuracy scoring for post-game analysis.

Every ply is judged by its centipawn loss: how far the engine evaluation
dropped from the point of view of the side that moved. Evaluations are
centipawns from White's point of view, and mate scores are capped so a
single forced mate cannot dominate a game's accuracy.
"""

from dataclasses import dataclass, field
from enum import Enum

# Mate scores are typically reported as +/-10000; cap them first
EVALUATION_CAP = 1000

BLUNDER_THRESHOLD = 300
MISTAKE_THRESHOLD = 100
INACCURACY_THRESHOLD = 50
BEST_MOVE_TOLERANCE = 10


class MoveClassification(str, Enum):
    BEST = "best"
    GOOD = "good"
    INACCURACY = "inaccuracy"
    MISTAKE = "mistake"
    BLUNDER = "blunder"


@dataclass(frozen=True)
class MoveQuality:
    """Quality of a single ply."""

    ply: int
    color: str
    evaluation: int
    centipawn_loss: int
    accuracy: int
    classification: MoveClassification


@dataclass
class SideSummary:
    """Aggregate move quality for one side of a game."""

    moves: int = 0
    accuracy: float | None = None
    best_moves: int = 0
    inaccuracies: int = 0
    mistakes: int = 0
    blunders: int = 0


@dataclass
class GameAnalysis:
    moves: list[MoveQuality] = field(default_factory=list)
    white: SideSummary = field(default_factory=SideSummary)
    black: SideSummary = field(default_factory=SideSummary)


def cap_evaluation(evaluation: int) -> int:
    return max(-EVALUATION_CAP, min(EVALUATION_CAP, evaluation))


def centipawn_loss(eval_before: int, eval_after: int, color: str) -> int:
    """Evaluation drop caused by a move, seen from the mover's side."""
    before = cap_evaluation(eval_before)
    after = cap_evaluation(eval_after)
    swing = before - after if color == "white" else after - before
    return max(0, swing)


def classify_loss(loss: int) -> MoveClassification:
    if loss >= BLUNDER_THRESHOLD:
        return MoveClassification.BLUNDER
    if loss >= MISTAKE_THRESHOLD:
        return MoveClassification.MISTAKE
    if loss >= INACCURACY_THRESHOLD:
        return MoveClassification.INACCURACY
    if loss <= BEST_MOVE_TOLERANCE:
        return MoveClassification.BEST
    return MoveClassification.GOOD


def move_accuracy(loss: int) -> int:
    """Accuracy of a single move on a 0-100 scale."""
    return max(0, min(100, 100 - loss // 10))


def evaluate_move(ply: int, eval_before: int, eval_after: int) -> MoveQuality:
    """Score one ply. Ply 1 is White's first move."""
    color = "white" if ply % 2 == 1 else "black"
    loss = centipawn_loss(eval_before, eval_after, color)
    return MoveQuality(
        ply=ply,
        color=color,
        evaluation=eval_after,
        centipawn_loss=loss,
        accuracy=move_accuracy(loss),
        classification=classify_loss(loss),
    )


def _summarize(moves: list[MoveQuality]) -> SideSummary:
    summary = SideSummary(moves=len(moves))
    if not moves:
        return summary
    summary.accuracy = round(sum(m.accuracy for m in moves) / len(moves), 1)
    for move in moves:
        if move.classification is MoveClassification.BEST:
            summary.best_moves += 1
        elif move.classification is MoveClassification.INACCURACY:
            summary.inaccuracies += 1
        elif move.classification is MoveClassification.MISTAKE:
            summary.mistakes += 1
        elif move.classification is MoveClassification.BLUNDER:
            summary.blunders += 1
    return summary


def analyze_game(evaluations: list[int], initial_evaluation: int = 0) -> GameAnalysis:
    """
    Score every ply of a game.

    Args:
        evaluations: Engine evaluation after each ply, in order
        initial_evaluation: Evaluation of the starting position

    Returns:
        GameAnalysis with per-ply results and a summary per side
    """
    moves = []
    previous = initial_evaluation
    for ply, evaluation in enumerate(evaluations, start=1):
        moves.append(evaluate_move(ply, previous, evaluation))
        previous = evaluation

    return GameAnalysis(
        moves=moves,
        white=_summarize([m for m in moves if m.color == "white"]),
        black=_summarize([m for m in moves if m.color == "black"]),
    )
