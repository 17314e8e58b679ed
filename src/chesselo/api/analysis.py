# src/chesselo/api/analysis.py

"""API endpoints for post-game move quality analysis."""

from fastapi import APIRouter

from chesselo.rating.move_quality import analyze_game
from chesselo.schemas import analysis as analysis_schema

router = APIRouter(prefix="/analysis", tags=["Analysis"])


@router.post("/move-quality", response_model=analysis_schema.GameAnalysisRead)
async def score_move_quality(
    request: analysis_schema.MoveQualityRequest,
) -> analysis_schema.GameAnalysisRead:
    """
    Classify every ply of a game and summarise accuracy per side.

    - **evaluations**: centipawns from White's point of view after each ply
    - **initial_evaluation**: evaluation of the starting position
    """
    analysis = analyze_game(request.evaluations, request.initial_evaluation)
    return analysis_schema.GameAnalysisRead.model_validate(analysis)
