"""Main FastAPI application with modularized routes."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quiz_api.config import LOG_LEVEL
from quiz_api.database import init_db
from quiz_api.dependencies.engine import get_quiz_engine
from quiz_api.errors import (
    AttemptInProgress,
    InvalidModuleState,
    ModuleNotFound,
    QuizError,
    SessionNotFound,
    SessionTerminal,
    UnknownQuestion,
)
from quiz_api.logging_setup import setup_console_logging
from quiz_api.routes import progress, quiz
from quiz_api.services.deadline_service import recover_deadlines

setup_console_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[QuizError], int] = {
    SessionNotFound: 404,
    ModuleNotFound: 404,
    UnknownQuestion: 400,
    SessionTerminal: 409,
    AttemptInProgress: 409,
    InvalidModuleState: 422,
}

app = FastAPI(title="Quiz Session API")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(QuizError)
def quiz_error_handler(request: Request, exc: QuizError) -> JSONResponse:
    """Map engine errors to HTTP responses."""
    status_code = ERROR_STATUS_CODES.get(type(exc), 400)
    if isinstance(exc, InvalidModuleState):
        logger.warning(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


# Startup events
@app.on_event("startup")
def startup_events() -> None:
    """Initialize database and restore quiz deadlines on startup."""
    init_db()
    recover_deadlines(get_quiz_engine())


@app.on_event("shutdown")
def shutdown_events() -> None:
    """Cancel pending deadline timers."""
    get_quiz_engine().shutdown()


# Include routers
app.include_router(quiz.router)
app.include_router(progress.router)
