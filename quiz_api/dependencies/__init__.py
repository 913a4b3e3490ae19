"""FastAPI dependencies."""
from quiz_api.dependencies.auth import ensure_same_employee, get_current_employee
from quiz_api.dependencies.engine import get_quiz_engine

__all__ = ["ensure_same_employee", "get_current_employee", "get_quiz_engine"]
