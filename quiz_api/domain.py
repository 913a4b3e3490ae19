"""Core quiz session types."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Iterable

from quiz_api.errors import InvalidModuleState

MULTIPLE_CHOICE = "multiple_choice"
TRUE_FALSE = "true_false"
QUESTION_KINDS = (MULTIPLE_CHOICE, TRUE_FALSE)
TRUE_FALSE_VALUES = ("True", "False")


class SessionStatus(str, enum.Enum):
    """Lifecycle status of a quiz session."""

    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self is not SessionStatus.IN_PROGRESS


@dataclass(frozen=True)
class Question:
    id: str
    text: str
    kind: str  # "multiple_choice" | "true_false"
    correct_answer: str
    options: tuple[str, ...] = ()  # empty for true/false
    explanation: str | None = None

    def public_view(self) -> dict[str, Any]:
        """Question as shown to the employee (no correct answer)."""
        options = list(self.options)
        if self.kind == TRUE_FALSE and not options:
            options = list(TRUE_FALSE_VALUES)
        return {
            "id": self.id,
            "text": self.text,
            "kind": self.kind,
            "options": options,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "kind": self.kind,
            "correctAnswer": self.correct_answer,
            "options": list(self.options),
            "explanation": self.explanation,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Question:
        return cls(
            id=str(data["id"]),
            text=data["text"],
            kind=data["kind"],
            correct_answer=data["correctAnswer"],
            options=tuple(data.get("options") or ()),
            explanation=data.get("explanation"),
        )


@dataclass(frozen=True)
class Answer:
    question_id: str
    value: str
    answered_at: datetime


@dataclass(frozen=True)
class Score:
    correct: int
    total: int
    percentage: int
    passed: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "correct": self.correct,
            "total": self.total,
            "percentage": self.percentage,
            "passed": self.passed,
        }


def build_question_set(questions: Iterable[Question]) -> tuple[Question, ...]:
    """
    Freeze an ordered question set for one attempt.
    Raises InvalidModuleState for empty or malformed sets.
    """
    frozen = tuple(questions)
    if not frozen:
        raise InvalidModuleState("Quiz has no questions")

    seen: set[str] = set()
    for question in frozen:
        if question.id in seen:
            raise InvalidModuleState(f"Duplicate question id {question.id}")
        seen.add(question.id)

        if question.kind not in QUESTION_KINDS:
            raise InvalidModuleState(
                f"Question {question.id} has unsupported kind {question.kind!r}"
            )
        if question.kind == MULTIPLE_CHOICE and not question.options:
            raise InvalidModuleState(
                f"Multiple choice question {question.id} has no options"
            )
    return frozen


@dataclass
class QuizSession:
    """
    One employee's attempt at a module quiz.
    Mutated only by the engine; immutable once terminal.
    """

    session_id: str
    employee_id: str
    module_id: str
    questions: tuple[Question, ...]
    started_at: datetime
    pass_threshold: int
    attempt_number: int = 1
    answers: dict[str, Answer] = field(default_factory=dict)
    current_index: int = 0
    status: SessionStatus = SessionStatus.IN_PROGRESS
    time_limit_seconds: int | None = None
    deadline_at: datetime | None = None
    submitted_at: datetime | None = None
    score: Score | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Question | None:
        if self.current_index >= len(self.questions):
            return None
        return self.questions[self.current_index]

    def has_question(self, question_id: str) -> bool:
        return any(question.id == question_id for question in self.questions)

    def copy(self) -> QuizSession:
        """Snapshot copy; answers mapping is not shared."""
        return replace(self, answers=dict(self.answers))
