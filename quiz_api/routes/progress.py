"""Employee progress endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends

from quiz_api.dependencies import ensure_same_employee, get_current_employee, get_quiz_engine
from quiz_api.models import AttemptSummary, ProgressResponse
from quiz_api.serialization import serialize_attempt
from quiz_api.services.progress_service import build_progress
from quiz_api.services.quiz_engine import QuizSessionEngine
from quiz_api.utils import validate_id

router = APIRouter(prefix="/api/employees/{employee_id}", tags=["progress"])


@router.get("/completions", response_model=list[AttemptSummary])
def list_completions(
    employee_id: str,
    current_employee: Annotated[str, Depends(get_current_employee)],
    engine: Annotated[QuizSessionEngine, Depends(get_quiz_engine)],
) -> list[dict[str, object]]:
    """Latest finished attempt of every module."""
    employee_id = validate_id("employeeId", employee_id)
    ensure_same_employee(current_employee, employee_id)
    return [serialize_attempt(s) for s in engine.store.list_completions(employee_id)]


@router.get("/progress", response_model=ProgressResponse)
def get_progress(
    employee_id: str,
    current_employee: Annotated[str, Depends(get_current_employee)],
    engine: Annotated[QuizSessionEngine, Depends(get_quiz_engine)],
) -> dict[str, object]:
    """Completion and score summary across modules."""
    employee_id = validate_id("employeeId", employee_id)
    ensure_same_employee(current_employee, employee_id)
    return build_progress(engine.store, employee_id)


@router.get("/modules/{module_id}/attempts", response_model=list[AttemptSummary])
def list_attempts(
    employee_id: str,
    module_id: str,
    current_employee: Annotated[str, Depends(get_current_employee)],
    engine: Annotated[QuizSessionEngine, Depends(get_quiz_engine)],
) -> list[dict[str, object]]:
    """Every attempt at one module, newest first."""
    employee_id = validate_id("employeeId", employee_id)
    module_id = validate_id("moduleId", module_id)
    ensure_same_employee(current_employee, employee_id)
    return [
        serialize_attempt(s) for s in engine.store.list_attempts(employee_id, module_id)
    ]
