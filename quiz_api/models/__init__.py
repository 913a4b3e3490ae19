"""Pydantic models."""
from quiz_api.models.progress import AttemptSummary, ProgressResponse
from quiz_api.models.quiz import (
    AnswerView,
    QuestionView,
    RetakeQuizRequest,
    ReviewItem,
    ScoreView,
    SessionRequest,
    SessionSnapshot,
    StartQuizRequest,
    SubmitAnswerRequest,
)

__all__ = [
    "AnswerView",
    "AttemptSummary",
    "ProgressResponse",
    "QuestionView",
    "RetakeQuizRequest",
    "ReviewItem",
    "ScoreView",
    "SessionRequest",
    "SessionSnapshot",
    "StartQuizRequest",
    "SubmitAnswerRequest",
]
