"""Quiz session endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DbSession

from quiz_api.database import get_db
from quiz_api.dependencies import ensure_same_employee, get_current_employee, get_quiz_engine
from quiz_api.domain import QuizSession
from quiz_api.errors import SessionNotFound
from quiz_api.models import (
    RetakeQuizRequest,
    SessionRequest,
    SessionSnapshot,
    StartQuizRequest,
    SubmitAnswerRequest,
)
from quiz_api.serialization import serialize_session
from quiz_api.services.module_service import load_module_quiz
from quiz_api.services.quiz_engine import QuizSessionEngine
from quiz_api.utils import validate_id

router = APIRouter(prefix="/api/quiz", tags=["quiz"])


def _owned_session(
    engine: QuizSessionEngine, session_id: str, employee_id: str
) -> QuizSession:
    """Fetch a session, hiding other employees' sessions as not found."""
    session_id = validate_id("sessionId", session_id)
    session = engine.get(session_id)
    if session is None or session.employee_id != employee_id:
        raise SessionNotFound(session_id)
    return session


def _snapshot(engine: QuizSessionEngine, session: QuizSession) -> dict[str, object]:
    return serialize_session(session, engine.clock.now())


@router.post("/start", response_model=SessionSnapshot)
def start_quiz(
    payload: StartQuizRequest,
    current_employee: Annotated[str, Depends(get_current_employee)],
    engine: Annotated[QuizSessionEngine, Depends(get_quiz_engine)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Start the module quiz, or resume the attempt already running."""
    employee_id = validate_id("employeeId", payload.employeeId)
    module_id = validate_id("moduleId", payload.moduleId)
    ensure_same_employee(current_employee, employee_id)

    quiz = load_module_quiz(db, module_id)
    session = engine.start(
        employee_id,
        module_id,
        quiz.questions,
        time_limit_seconds=quiz.time_limit_seconds,
        pass_threshold=quiz.pass_threshold,
    )
    return _snapshot(engine, session)


@router.post("/answer", response_model=SessionSnapshot)
def submit_answer(
    payload: SubmitAnswerRequest,
    current_employee: Annotated[str, Depends(get_current_employee)],
    engine: Annotated[QuizSessionEngine, Depends(get_quiz_engine)],
) -> dict[str, object]:
    """Record the answer to a question without moving on."""
    session = _owned_session(engine, payload.sessionId, current_employee)
    session = engine.submit_answer(
        session.session_id, payload.questionId.strip(), payload.value
    )
    return _snapshot(engine, session)


@router.post("/advance", response_model=SessionSnapshot)
def advance(
    payload: SessionRequest,
    current_employee: Annotated[str, Depends(get_current_employee)],
    engine: Annotated[QuizSessionEngine, Depends(get_quiz_engine)],
) -> dict[str, object]:
    """Move to the next question."""
    session = _owned_session(engine, payload.sessionId, current_employee)
    return _snapshot(engine, engine.advance(session.session_id))


@router.post("/submit", response_model=SessionSnapshot)
def submit_quiz(
    payload: SessionRequest,
    current_employee: Annotated[str, Depends(get_current_employee)],
    engine: Annotated[QuizSessionEngine, Depends(get_quiz_engine)],
) -> dict[str, object]:
    """Submit the attempt and return its score."""
    session = _owned_session(engine, payload.sessionId, current_employee)
    return _snapshot(engine, engine.submit(session.session_id))


@router.get("/sessions/{session_id}", response_model=SessionSnapshot)
def get_session(
    session_id: str,
    current_employee: Annotated[str, Depends(get_current_employee)],
    engine: Annotated[QuizSessionEngine, Depends(get_quiz_engine)],
) -> dict[str, object]:
    """Current session state, used to resume after navigating away."""
    return _snapshot(engine, _owned_session(engine, session_id, current_employee))


@router.post("/retake", response_model=SessionSnapshot)
def retake_quiz(
    payload: RetakeQuizRequest,
    current_employee: Annotated[str, Depends(get_current_employee)],
    engine: Annotated[QuizSessionEngine, Depends(get_quiz_engine)],
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Start a new attempt once the previous one has finished."""
    employee_id = validate_id("employeeId", payload.employeeId)
    module_id = validate_id("moduleId", payload.moduleId)
    ensure_same_employee(current_employee, employee_id)

    quiz = load_module_quiz(db, module_id)
    session = engine.retake(
        employee_id,
        module_id,
        quiz.questions,
        time_limit_seconds=quiz.time_limit_seconds,
        pass_threshold=quiz.pass_threshold,
    )
    return _snapshot(engine, session)
