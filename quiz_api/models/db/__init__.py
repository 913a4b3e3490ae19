"""Database models."""
from quiz_api.models.db.quiz_session import QuizSessionRecord, SessionAnswer
from quiz_api.models.db.training_module import ModuleStatus, QuizQuestion, TrainingModule

__all__ = [
    "QuizSessionRecord",
    "SessionAnswer",
    "ModuleStatus",
    "QuizQuestion",
    "TrainingModule",
]
