"""Progress reporting Pydantic models."""
from pydantic import BaseModel

from quiz_api.models.quiz import ScoreView


class AttemptSummary(BaseModel):
    """One attempt in a history or completion list."""

    sessionId: str
    moduleId: str
    attemptNumber: int
    status: str
    startedAt: str
    submittedAt: str | None = None
    score: ScoreView | None = None


class ProgressResponse(BaseModel):
    """Quiz progress across all modules for one employee."""

    employeeId: str
    completedModules: int
    passedModules: int
    averagePercentage: int
    totalAttempts: int
