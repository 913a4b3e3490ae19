"""
Quiz session and session answer database models.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

import sqlalchemy as sa
from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quiz_api.database import Base
from quiz_api.domain import SessionStatus


class QuizSessionRecord(Base):
    """
    Persisted snapshot of one quiz attempt.
    The question set is frozen into ``questions_json`` at creation.
    """

    __tablename__ = "quiz_sessions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)

    # Owner
    employee_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    module_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    attempt_number: Mapped[int] = mapped_column(default=1, nullable=False)

    # Progress
    status: Mapped[str] = mapped_column(
        String(20), default=SessionStatus.IN_PROGRESS.value, nullable=False, index=True
    )
    current_index: Mapped[int] = mapped_column(default=0, nullable=False)
    pass_threshold: Mapped[int] = mapped_column(default=70, nullable=False)

    # Timing
    time_limit_seconds: Mapped[int | None] = mapped_column(nullable=True)
    started_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    deadline_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    submitted_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )

    # Result (only set once terminal)
    correct_count: Mapped[int | None] = mapped_column(nullable=True)
    total_count: Mapped[int | None] = mapped_column(nullable=True)
    percentage: Mapped[int | None] = mapped_column(nullable=True)
    passed: Mapped[bool | None] = mapped_column(nullable=True)

    # Frozen question set (JSON list)
    questions_json: Mapped[str] = mapped_column(Text, nullable=False)

    answers: Mapped[list["SessionAnswer"]] = relationship(
        "SessionAnswer",
        back_populates="session",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint(
            "employee_id", "module_id", "attempt_number", name="uq_session_attempt"
        ),
    )

    @property
    def questions(self) -> list[dict[str, Any]]:
        """Parse question set from JSON."""
        try:
            return json.loads(self.questions_json)
        except (json.JSONDecodeError, TypeError):
            return []

    @questions.setter
    def questions(self, value: list[dict[str, Any]]) -> None:
        """Serialize question set to JSON."""
        self.questions_json = json.dumps(value, ensure_ascii=False)

    @property
    def is_terminal(self) -> bool:
        return self.status != SessionStatus.IN_PROGRESS.value


class SessionAnswer(Base):
    """Latest answer to one question within a session."""

    __tablename__ = "quiz_session_answers"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    session_id: Mapped[str] = mapped_column(
        ForeignKey("quiz_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id: Mapped[str] = mapped_column(String(64), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    answered_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("session_id", "question_id", name="uq_session_question"),
    )

    session: Mapped["QuizSessionRecord"] = relationship(
        "QuizSessionRecord", back_populates="answers"
    )
