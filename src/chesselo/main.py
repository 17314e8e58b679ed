# src/chesselo/main.py

"""Main FastAPI application for chesselo."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .api import analysis, game, player
from .db.session import AUTO_CREATE_TABLES, engine, init_models
from .exceptions import (
    ChessEloError,
    RatingConsistencyError,
    RatingEngineError,
    RatingPersistenceError,
    ResourceNotFoundError,
    StaleRecordError,
    ValidationError,
)
from .middleware.logging import RequestLoggingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager for startup and shutdown events."""
    if AUTO_CREATE_TABLES:
        await init_models()
    yield
    await engine.dispose()


app = FastAPI(title="chesselo API", lifespan=lifespan)

app.add_middleware(RequestLoggingMiddleware)


# =============================================================================
# Global Exception Handlers
# =============================================================================


def _error_response(status_code: int, detail: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "error_type": type(exc).__name__},
    )


@app.exception_handler(ResourceNotFoundError)
async def resource_not_found_handler(
    request: Request, exc: ResourceNotFoundError
) -> JSONResponse:
    """Handle all resource not found errors -> 404."""
    logger.warning("Resource not found: %s", exc.message, extra=exc.details)
    return _error_response(404, exc.message, exc)


@app.exception_handler(ValidationError)
async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Handle all validation errors -> 422."""
    logger.warning("Validation error: %s", exc.message, extra=exc.details)
    return _error_response(422, exc.message, exc)


@app.exception_handler(StaleRecordError)
async def stale_record_handler(
    request: Request, exc: StaleRecordError
) -> JSONResponse:
    """Concurrent writes kept winning the race -> 409."""
    logger.warning("Stale record: %s", exc.message, extra=exc.details)
    return _error_response(409, exc.message, exc)


@app.exception_handler(RatingPersistenceError)
async def rating_persistence_handler(
    request: Request, exc: RatingPersistenceError
) -> JSONResponse:
    """Store failure with nothing written; the client may retry -> 503."""
    logger.error("Rating store failure: %s", exc.message, extra=exc.details)
    return _error_response(503, "Rating store unavailable, please retry", exc)


@app.exception_handler(RatingConsistencyError)
async def rating_consistency_handler(
    request: Request, exc: RatingConsistencyError
) -> JSONResponse:
    """Partially applied rating update -> 500."""
    logger.error(
        "Rating update left inconsistent state: %s",
        exc.message,
        extra=exc.details,
        exc_info=True,
    )
    return _error_response(500, "Rating update partially applied", exc)


@app.exception_handler(RatingEngineError)
async def rating_engine_error_handler(
    request: Request, exc: RatingEngineError
) -> JSONResponse:
    """Handle any other rating engine errors -> 500."""
    logger.error(
        "Rating engine error: %s", exc.message, extra=exc.details, exc_info=True
    )
    return _error_response(500, "Rating calculation failed", exc)


@app.exception_handler(ChessEloError)
async def chesselo_error_handler(request: Request, exc: ChessEloError) -> JSONResponse:
    """Catch-all for any other chesselo errors -> 500."""
    logger.error("chesselo error: %s", exc.message, extra=exc.details, exc_info=True)
    return _error_response(500, exc.message, exc)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(
    request: Request, exc: IntegrityError
) -> JSONResponse:
    """Handle database integrity constraint violations."""
    error_msg = str(exc.orig) if exc.orig else str(exc)
    logger.warning("Database integrity error: %s", error_msg)

    if "UNIQUE constraint failed" in error_msg or "duplicate key" in error_msg:
        return JSONResponse(
            status_code=409,
            content={"detail": "Resource already exists with given unique field(s)"},
        )

    if "FOREIGN KEY constraint failed" in error_msg or "violates foreign key" in (
        error_msg
    ):
        return JSONResponse(
            status_code=400,
            content={"detail": "Referenced resource does not exist"},
        )

    return JSONResponse(
        status_code=400,
        content={"detail": "Database constraint violation"},
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_error_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """Catch-all for other SQLAlchemy database errors."""
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "An internal database error occurred"},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions."""
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "An internal server error occurred"},
    )


app.include_router(player.router)
app.include_router(game.router)
app.include_router(analysis.router)


@app.get("/", tags=["Root"])
async def read_root() -> dict[str, str]:
    """Provides a welcome message."""
    return {"message": "Welcome to the chesselo API"}


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for monitoring."""
    return {"status": "healthy"}
