"""Read access to training modules and their quiz configuration."""
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session as DBSession, selectinload

from quiz_api.config import DEFAULT_PASS_THRESHOLD
from quiz_api.domain import Question
from quiz_api.errors import InvalidModuleState, ModuleNotFound
from quiz_api.models.db.training_module import ModuleStatus, QuizQuestion, TrainingModule


@dataclass(frozen=True)
class ModuleQuiz:
    """Everything the engine needs to start an attempt at a module."""

    module_id: str
    title: str
    questions: tuple[Question, ...]
    time_limit_seconds: int | None
    pass_threshold: int


def question_from_row(row: QuizQuestion) -> Question:
    """Convert an authored question row into an engine Question."""
    return Question(
        id=str(row.id),
        text=row.question_text,
        kind=row.question_type,
        correct_answer=row.correct_answer,
        options=tuple(row.options),
        explanation=row.explanation,
    )


def get_module(db: DBSession, module_id: str) -> TrainingModule | None:
    """Get module with its questions loaded."""
    return db.execute(
        select(TrainingModule)
        .options(selectinload(TrainingModule.questions))
        .where(TrainingModule.id == module_id)
    ).scalar_one_or_none()


def load_module_quiz(db: DBSession, module_id: str) -> ModuleQuiz:
    """
    Load the quiz of a published module.

    Raises:
        ModuleNotFound: unknown module id.
        InvalidModuleState: module is not published.
    """
    module = get_module(db, module_id)
    if module is None:
        raise ModuleNotFound(module_id)
    if module.status != ModuleStatus.PUBLISHED.value:
        raise InvalidModuleState(f"Module {module_id} is {module.status}")

    threshold = module.pass_threshold
    if threshold is None:
        threshold = DEFAULT_PASS_THRESHOLD

    return ModuleQuiz(
        module_id=module.id,
        title=module.title,
        questions=tuple(question_from_row(row) for row in module.questions),
        time_limit_seconds=module.time_limit_seconds,
        pass_threshold=threshold,
    )
