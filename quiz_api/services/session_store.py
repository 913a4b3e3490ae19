"""Persistence of quiz session snapshots.

The engine talks to a ``SessionStore``; two implementations are provided:
an in-memory store used by tests and single-process tools, and a SQLAlchemy
store used by the web application.
"""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod

from sqlalchemy import func, select
from sqlalchemy.orm import Session as DBSession, sessionmaker

from quiz_api.domain import Answer, Question, QuizSession, Score, SessionStatus
from quiz_api.errors import AttemptInProgress
from quiz_api.models.db.quiz_session import QuizSessionRecord, SessionAnswer
from quiz_api.utils.time_utils import ensure_utc

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Keyed storage of session snapshots per (employee, module)."""

    @abstractmethod
    def get(self, session_id: str) -> QuizSession | None:
        """Session by id, or None."""

    @abstractmethod
    def get_latest(self, employee_id: str, module_id: str) -> QuizSession | None:
        """Most recent attempt for the pair, whatever its status."""

    @abstractmethod
    def get_in_progress(self, employee_id: str, module_id: str) -> QuizSession | None:
        """The single in-progress attempt for the pair, if any."""

    @abstractmethod
    def get_latest_terminal(
        self, employee_id: str, module_id: str
    ) -> QuizSession | None:
        """Most recent submitted or expired attempt for the pair."""

    @abstractmethod
    def save(self, session: QuizSession) -> None:
        """
        Upsert by session id.
        Terminal snapshots are immutable: saving over one is a no-op.
        """

    @abstractmethod
    def list_completions(self, employee_id: str) -> list[QuizSession]:
        """Latest terminal attempt of each module, newest module first."""

    @abstractmethod
    def list_attempts(self, employee_id: str, module_id: str) -> list[QuizSession]:
        """All attempts for the pair, newest first."""

    @abstractmethod
    def list_in_progress_timed(self) -> list[QuizSession]:
        """In-progress sessions that carry a deadline."""

    @abstractmethod
    def count_attempts(self, employee_id: str) -> int:
        """Number of attempts (any status) recorded for an employee."""


class InMemorySessionStore(SessionStore):
    """Process-local store. Snapshots are copied in and out."""

    def __init__(self) -> None:
        self._sessions: dict[str, QuizSession] = {}
        self._lock = threading.Lock()

    def _attempts(self, employee_id: str, module_id: str) -> list[QuizSession]:
        attempts = [
            s
            for s in self._sessions.values()
            if s.employee_id == employee_id and s.module_id == module_id
        ]
        attempts.sort(key=lambda s: s.attempt_number, reverse=True)
        return attempts

    def get(self, session_id: str) -> QuizSession | None:
        with self._lock:
            session = self._sessions.get(session_id)
            return session.copy() if session else None

    def get_latest(self, employee_id: str, module_id: str) -> QuizSession | None:
        with self._lock:
            attempts = self._attempts(employee_id, module_id)
            return attempts[0].copy() if attempts else None

    def get_in_progress(self, employee_id: str, module_id: str) -> QuizSession | None:
        with self._lock:
            for session in self._attempts(employee_id, module_id):
                if not session.is_terminal:
                    return session.copy()
            return None

    def get_latest_terminal(
        self, employee_id: str, module_id: str
    ) -> QuizSession | None:
        with self._lock:
            for session in self._attempts(employee_id, module_id):
                if session.is_terminal:
                    return session.copy()
            return None

    def save(self, session: QuizSession) -> None:
        with self._lock:
            existing = self._sessions.get(session.session_id)
            if existing is not None and existing.is_terminal:
                if session.status is not existing.status:
                    logger.warning(
                        f"Refusing to overwrite {existing.status.value} session "
                        f"{session.session_id} with status {session.status.value}"
                    )
                return
            if existing is None and not session.is_terminal:
                for other in self._attempts(session.employee_id, session.module_id):
                    if not other.is_terminal:
                        raise AttemptInProgress(other.session_id)
            self._sessions[session.session_id] = session.copy()

    def list_completions(self, employee_id: str) -> list[QuizSession]:
        with self._lock:
            latest: dict[str, QuizSession] = {}
            for session in self._sessions.values():
                if session.employee_id != employee_id or not session.is_terminal:
                    continue
                current = latest.get(session.module_id)
                if current is None or session.attempt_number > current.attempt_number:
                    latest[session.module_id] = session
            completions = sorted(
                latest.values(), key=lambda s: s.submitted_at, reverse=True
            )
            return [s.copy() for s in completions]

    def list_attempts(self, employee_id: str, module_id: str) -> list[QuizSession]:
        with self._lock:
            return [s.copy() for s in self._attempts(employee_id, module_id)]

    def list_in_progress_timed(self) -> list[QuizSession]:
        with self._lock:
            return [
                s.copy()
                for s in self._sessions.values()
                if not s.is_terminal and s.deadline_at is not None
            ]

    def count_attempts(self, employee_id: str) -> int:
        with self._lock:
            return sum(
                1 for s in self._sessions.values() if s.employee_id == employee_id
            )


def record_to_session(record: QuizSessionRecord) -> QuizSession:
    """Convert a database row into a domain snapshot."""
    status = SessionStatus(record.status)
    answers = {
        row.question_id: Answer(
            question_id=row.question_id,
            value=row.value,
            answered_at=ensure_utc(row.answered_at),
        )
        for row in record.answers
    }
    score = None
    if status.is_terminal and record.total_count is not None:
        score = Score(
            correct=record.correct_count or 0,
            total=record.total_count,
            percentage=record.percentage or 0,
            passed=bool(record.passed),
        )
    return QuizSession(
        session_id=record.id,
        employee_id=record.employee_id,
        module_id=record.module_id,
        questions=tuple(Question.from_dict(item) for item in record.questions),
        started_at=ensure_utc(record.started_at),
        pass_threshold=record.pass_threshold,
        attempt_number=record.attempt_number,
        answers=answers,
        current_index=record.current_index,
        status=status,
        time_limit_seconds=record.time_limit_seconds,
        deadline_at=ensure_utc(record.deadline_at),
        submitted_at=ensure_utc(record.submitted_at),
        score=score,
    )


class SqlSessionStore(SessionStore):
    """Store backed by the ``quiz_sessions`` tables."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _open(self) -> DBSession:
        return self._session_factory()

    def _one(self, query) -> QuizSession | None:
        db = self._open()
        try:
            record = db.execute(query.limit(1)).scalars().first()
            return record_to_session(record) if record else None
        finally:
            db.close()

    def _many(self, query) -> list[QuizSession]:
        db = self._open()
        try:
            return [record_to_session(r) for r in db.execute(query).scalars().all()]
        finally:
            db.close()

    @staticmethod
    def _pair(employee_id: str, module_id: str):
        return select(QuizSessionRecord).where(
            QuizSessionRecord.employee_id == employee_id,
            QuizSessionRecord.module_id == module_id,
        )

    def get(self, session_id: str) -> QuizSession | None:
        return self._one(
            select(QuizSessionRecord).where(QuizSessionRecord.id == session_id)
        )

    def get_latest(self, employee_id: str, module_id: str) -> QuizSession | None:
        return self._one(
            self._pair(employee_id, module_id).order_by(
                QuizSessionRecord.attempt_number.desc()
            )
        )

    def get_in_progress(self, employee_id: str, module_id: str) -> QuizSession | None:
        return self._one(
            self._pair(employee_id, module_id).where(
                QuizSessionRecord.status == SessionStatus.IN_PROGRESS.value
            )
        )

    def get_latest_terminal(
        self, employee_id: str, module_id: str
    ) -> QuizSession | None:
        return self._one(
            self._pair(employee_id, module_id)
            .where(QuizSessionRecord.status != SessionStatus.IN_PROGRESS.value)
            .order_by(QuizSessionRecord.attempt_number.desc())
        )

    def save(self, session: QuizSession) -> None:
        db = self._open()
        try:
            record = db.get(QuizSessionRecord, session.session_id)
            if record is None:
                if not session.is_terminal:
                    conflicting = db.execute(
                        self._pair(session.employee_id, session.module_id)
                        .where(QuizSessionRecord.status == SessionStatus.IN_PROGRESS.value)
                        .limit(1)
                    ).scalars().first()
                    if conflicting is not None:
                        raise AttemptInProgress(conflicting.id)
                record = QuizSessionRecord(
                    id=session.session_id,
                    employee_id=session.employee_id,
                    module_id=session.module_id,
                    attempt_number=session.attempt_number,
                    pass_threshold=session.pass_threshold,
                    time_limit_seconds=session.time_limit_seconds,
                    started_at=session.started_at,
                    deadline_at=session.deadline_at,
                )
                record.questions = [q.to_dict() for q in session.questions]
                db.add(record)
            elif record.is_terminal:
                if record.status != session.status.value:
                    logger.warning(
                        f"Refusing to overwrite {record.status} session "
                        f"{session.session_id} with status {session.status.value}"
                    )
                return

            record.status = session.status.value
            record.current_index = session.current_index
            record.submitted_at = session.submitted_at
            if session.score is not None:
                record.correct_count = session.score.correct
                record.total_count = session.score.total
                record.percentage = session.score.percentage
                record.passed = session.score.passed

            rows = {row.question_id: row for row in record.answers}
            for question_id, answer in session.answers.items():
                row = rows.get(question_id)
                if row is None:
                    record.answers.append(
                        SessionAnswer(
                            question_id=question_id,
                            value=answer.value,
                            answered_at=answer.answered_at,
                        )
                    )
                else:
                    row.value = answer.value
                    row.answered_at = answer.answered_at

            db.commit()
        finally:
            db.close()

    def list_completions(self, employee_id: str) -> list[QuizSession]:
        terminal = self._many(
            select(QuizSessionRecord)
            .where(
                QuizSessionRecord.employee_id == employee_id,
                QuizSessionRecord.status != SessionStatus.IN_PROGRESS.value,
            )
            .order_by(QuizSessionRecord.attempt_number.desc())
        )
        latest: dict[str, QuizSession] = {}
        for session in terminal:
            latest.setdefault(session.module_id, session)
        return sorted(latest.values(), key=lambda s: s.submitted_at, reverse=True)

    def list_attempts(self, employee_id: str, module_id: str) -> list[QuizSession]:
        return self._many(
            self._pair(employee_id, module_id).order_by(
                QuizSessionRecord.attempt_number.desc()
            )
        )

    def list_in_progress_timed(self) -> list[QuizSession]:
        return self._many(
            select(QuizSessionRecord).where(
                QuizSessionRecord.status == SessionStatus.IN_PROGRESS.value,
                QuizSessionRecord.deadline_at.is_not(None),
            )
        )

    def count_attempts(self, employee_id: str) -> int:
        db = self._open()
        try:
            return db.execute(
                select(func.count(QuizSessionRecord.id)).where(
                    QuizSessionRecord.employee_id == employee_id
                )
            ).scalar() or 0
        finally:
            db.close()
