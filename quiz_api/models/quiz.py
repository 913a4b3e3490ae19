"""Quiz session Pydantic models."""
from pydantic import BaseModel, Field


class StartQuizRequest(BaseModel):
    """Model for starting (or resuming) a module quiz."""

    employeeId: str = Field(..., min_length=1)
    moduleId: str = Field(..., min_length=1)


class RetakeQuizRequest(BaseModel):
    """Model for retaking a finished module quiz."""

    employeeId: str = Field(..., min_length=1)
    moduleId: str = Field(..., min_length=1)


class SessionRequest(BaseModel):
    """Model for actions addressed to one session."""

    sessionId: str = Field(..., min_length=1)


class SubmitAnswerRequest(BaseModel):
    """Model for recording an answer."""

    sessionId: str = Field(..., min_length=1)
    questionId: str = Field(..., min_length=1)
    value: str


class QuestionView(BaseModel):
    id: str
    text: str
    kind: str
    options: list[str]


class AnswerView(BaseModel):
    questionId: str
    value: str
    answeredAt: str | None = None


class ScoreView(BaseModel):
    correct: int
    total: int
    percentage: int
    passed: bool


class ReviewItem(QuestionView):
    """Per-question feedback shown after the attempt ends."""

    selected: str | None = None
    correctAnswer: str
    isCorrect: bool
    explanation: str | None = None


class SessionSnapshot(BaseModel):
    """Session state returned by every quiz endpoint."""

    sessionId: str
    employeeId: str
    moduleId: str
    attemptNumber: int
    status: str
    currentIndex: int
    totalQuestions: int
    startedAt: str
    deadlineAt: str | None = None
    submittedAt: str | None = None
    remainingSeconds: int | None = None
    currentQuestion: QuestionView | None = None
    answers: list[AnswerView] = []
    score: ScoreView | None = None
    review: list[ReviewItem] | None = None
