# src/chesselo/schemas/analysis.py

"""Move quality analysis schemas."""

from pydantic import BaseModel, ConfigDict, Field

from chesselo.rating.move_quality import MoveClassification


class MoveQualityRequest(BaseModel):
    """Engine evaluations of a game, one per ply.

    Examples:
        {"evaluations": [30, 25, 40, -260]}
        {"evaluations": [15, 10], "initial_evaluation": 20}
    """

    evaluations: list[int] = Field(
        ..., description="Centipawns from White's point of view after each ply"
    )
    initial_evaluation: int = Field(
        default=0, description="Evaluation of the starting position"
    )


class MoveQualityRead(BaseModel):
    ply: int
    color: str
    evaluation: int
    centipawn_loss: int
    accuracy: int
    classification: MoveClassification

    model_config = ConfigDict(from_attributes=True)


class SideSummaryRead(BaseModel):
    moves: int
    accuracy: float | None = None
    best_moves: int
    inaccuracies: int
    mistakes: int
    blunders: int

    model_config = ConfigDict(from_attributes=True)


class GameAnalysisRead(BaseModel):
    moves: list[MoveQualityRead]
    white: SideSummaryRead
    black: SideSummaryRead

    model_config = ConfigDict(from_attributes=True)
