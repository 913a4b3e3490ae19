"""Quiz session state machine.

A session moves ``in_progress -> submitted`` when the employee submits, or
``in_progress -> expired`` when its deadline passes. Terminal sessions are
never mutated again; a retake always creates a new session.

All mutations of one session are serialized by a per-session lock. Starting
and retaking are serialized per (employee, module) so a pair never has two
in-progress attempts.
"""
from __future__ import annotations

import logging
import threading
import uuid
import weakref
from datetime import timedelta
from typing import Callable, Iterable

from quiz_api.config import (
    DEADLINE_RETRY_SECONDS,
    DEFAULT_PASS_THRESHOLD,
    MAX_TIME_LIMIT_SECONDS,
)
from quiz_api.domain import (
    Answer,
    Question,
    QuizSession,
    SessionStatus,
    build_question_set,
)
from quiz_api.errors import (
    AttemptInProgress,
    InvalidModuleState,
    SessionNotFound,
    SessionTerminal,
    UnknownQuestion,
)
from quiz_api.services.clock import Clock, SystemClock, TimerHandle
from quiz_api.services.scoring import score
from quiz_api.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class _KeyLock:
    def __init__(self) -> None:
        self._lock = threading.Lock()

    def __enter__(self) -> "_KeyLock":
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info) -> None:
        self._lock.release()


class _KeyedLocks:
    """Lock per key; entries disappear once nobody holds them."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, _KeyLock] = (
            weakref.WeakValueDictionary()
        )
        self._guard = threading.Lock()

    def __call__(self, key: str) -> _KeyLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = _KeyLock()
                self._locks[key] = lock
            return lock


class QuizSessionEngine:
    """Owns session lifecycle, answer intake and deadline handling."""

    def __init__(
        self,
        store: SessionStore,
        clock: Clock | None = None,
        default_pass_threshold: int = DEFAULT_PASS_THRESHOLD,
        id_factory: Callable[[], str] | None = None,
        deadline_retry_seconds: int = DEADLINE_RETRY_SECONDS,
    ) -> None:
        self.store = store
        self.clock = clock or SystemClock()
        self.default_pass_threshold = default_pass_threshold
        self.deadline_retry_seconds = deadline_retry_seconds
        self._new_id = id_factory or (lambda: uuid.uuid4().hex)
        self._locks = _KeyedLocks()
        self._timers: dict[str, TimerHandle] = {}
        self._timers_guard = threading.Lock()

    # Public operations

    def start(
        self,
        employee_id: str,
        module_id: str,
        question_set: Iterable[Question],
        time_limit_seconds: int | None = None,
        pass_threshold: int | None = None,
    ) -> QuizSession:
        """
        Start a quiz, or resume the running attempt for this employee/module.

        A resumed session is returned unchanged, except that an attempt whose
        deadline has already passed is expired first.
        """
        with self._locks(self._pair_key(employee_id, module_id)):
            latest = self.store.get_latest(employee_id, module_id)
            if latest is not None and not latest.is_terminal:
                with self._locks(latest.session_id):
                    session = self._load(latest.session_id)
                logger.info(
                    f"Resumed session {session.session_id} for employee "
                    f"{employee_id} module {module_id} ({session.status.value})"
                )
                return session.copy()

            attempt_number = latest.attempt_number + 1 if latest else 1
            return self._create(
                employee_id,
                module_id,
                question_set,
                time_limit_seconds,
                pass_threshold,
                attempt_number,
            )

    def retake(
        self,
        employee_id: str,
        module_id: str,
        question_set: Iterable[Question],
        time_limit_seconds: int | None = None,
        pass_threshold: int | None = None,
    ) -> QuizSession:
        """
        Start a fresh attempt after the previous one finished.
        Raises AttemptInProgress while the previous attempt is still running.
        """
        with self._locks(self._pair_key(employee_id, module_id)):
            latest = self.store.get_latest(employee_id, module_id)
            if latest is not None and not latest.is_terminal:
                with self._locks(latest.session_id):
                    latest = self._load(latest.session_id)
                if not latest.is_terminal:
                    raise AttemptInProgress(latest.session_id)

            attempt_number = latest.attempt_number + 1 if latest else 1
            session = self._create(
                employee_id,
                module_id,
                question_set,
                time_limit_seconds,
                pass_threshold,
                attempt_number,
            )
            logger.info(
                f"Retake attempt {attempt_number} for employee {employee_id} "
                f"module {module_id}"
            )
            return session

    def submit_answer(self, session_id: str, question_id: str, value: str) -> QuizSession:
        """Record (or overwrite) the answer to one question. Does not advance."""
        with self._locks(session_id):
            session = self._load(session_id)
            if session.is_terminal:
                raise SessionTerminal(session_id, session.status.value)
            if not session.has_question(question_id):
                raise UnknownQuestion(session_id, question_id)

            session.answers[question_id] = Answer(
                question_id=question_id,
                value=value,
                answered_at=self.clock.now(),
            )
            self.store.save(session)
            return session.copy()

    def advance(self, session_id: str) -> QuizSession:
        """Move the cursor to the next question, stopping past the last one."""
        with self._locks(session_id):
            session = self._load(session_id)
            if session.is_terminal:
                raise SessionTerminal(session_id, session.status.value)

            session.current_index = min(
                session.current_index + 1, session.total_questions
            )
            self.store.save(session)
            return session.copy()

    def submit(self, session_id: str) -> QuizSession:
        """
        Submit the attempt and score it.
        Submitting a session that already ended returns it unchanged.
        """
        with self._locks(session_id):
            session = self._load(session_id)
            if session.is_terminal:
                logger.debug(
                    f"Submit on {session.status.value} session {session_id} ignored"
                )
                return session.copy()

            self._finish(session, SessionStatus.SUBMITTED)
            self.store.save(session)
            self._discard_timer(session_id)
            logger.info(
                f"Session {session_id} submitted: {session.score.correct}/"
                f"{session.score.total} ({session.score.percentage}%)"
            )
            return session.copy()

    def on_deadline_elapsed(self, session_id: str) -> None:
        """
        Expire the session if it is still running and its deadline has
        been reached. Called by the clock; a no-op for unknown, untimed or
        already finished sessions. A call before the deadline re-arms the
        timer instead.
        """
        with self._locks(session_id):
            session = self.store.get(session_id)
            if session is None or session.is_terminal or session.deadline_at is None:
                self._discard_timer(session_id)
                return
            if session.deadline_at > self.clock.now():
                # Timer threads count monotonic time; the wall clock may disagree
                logger.warning(
                    f"Deadline callback for {session_id} fired before "
                    f"{session.deadline_at.isoformat()}, re-arming"
                )
                self._discard_timer(session_id)
                self._arm(session)
                return
            self._expire(session)

    def get(self, session_id: str) -> QuizSession | None:
        """Current snapshot, or None for an unknown session id."""
        with self._locks(session_id):
            try:
                return self._load(session_id).copy()
            except SessionNotFound:
                return None

    def recover(self) -> tuple[int, int]:
        """
        Re-arm deadlines after a restart.
        Returns (expired, armed) counts.
        """
        expired = armed = 0
        for snapshot in self.store.list_in_progress_timed():
            with self._locks(snapshot.session_id):
                session = self._refresh(snapshot)
            if session.is_terminal:
                expired += 1
            else:
                armed += 1
        if expired or armed:
            logger.info(f"Deadline recovery: {expired} expired, {armed} re-armed")
        return expired, armed

    def shutdown(self) -> None:
        """Cancel all armed deadline timers."""
        with self._timers_guard:
            handles = list(self._timers.values())
            self._timers.clear()
        for handle in handles:
            handle.cancel()

    @property
    def armed_timers(self) -> int:
        with self._timers_guard:
            return len(self._timers)

    # Internals

    @staticmethod
    def _pair_key(employee_id: str, module_id: str) -> str:
        return f"pair:{employee_id}:{module_id}"

    def _validate_config(
        self, time_limit_seconds: int | None, pass_threshold: int | None
    ) -> int:
        if time_limit_seconds is not None:
            if time_limit_seconds <= 0 or time_limit_seconds > MAX_TIME_LIMIT_SECONDS:
                raise InvalidModuleState(
                    f"Invalid time limit: {time_limit_seconds} seconds"
                )
        threshold = (
            self.default_pass_threshold if pass_threshold is None else pass_threshold
        )
        if not 0 <= threshold <= 100:
            raise InvalidModuleState(f"Invalid pass threshold: {threshold}")
        return threshold

    def _create(
        self,
        employee_id: str,
        module_id: str,
        question_set: Iterable[Question],
        time_limit_seconds: int | None,
        pass_threshold: int | None,
        attempt_number: int,
    ) -> QuizSession:
        questions = build_question_set(question_set)
        threshold = self._validate_config(time_limit_seconds, pass_threshold)
        now = self.clock.now()
        deadline = (
            now + timedelta(seconds=time_limit_seconds)
            if time_limit_seconds is not None
            else None
        )

        session = QuizSession(
            session_id=self._new_id(),
            employee_id=employee_id,
            module_id=module_id,
            questions=questions,
            started_at=now,
            pass_threshold=threshold,
            attempt_number=attempt_number,
            time_limit_seconds=time_limit_seconds,
            deadline_at=deadline,
        )
        self.store.save(session)
        self._arm(session)
        logger.info(
            f"Started session {session.session_id} for employee {employee_id} "
            f"module {module_id} (attempt {attempt_number}, "
            f"{len(questions)} questions, limit {time_limit_seconds}s)"
        )
        return session.copy()

    def _load(self, session_id: str) -> QuizSession:
        """Read a session; caller holds its lock."""
        session = self.store.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return self._refresh(session)

    def _refresh(self, session: QuizSession) -> QuizSession:
        """Apply an overdue deadline or make sure a timer is armed."""
        if session.is_terminal or session.deadline_at is None:
            return session
        if session.deadline_at <= self.clock.now():
            self._expire(session)
        else:
            self._arm(session)
        return session

    def _finish(self, session: QuizSession, status: SessionStatus) -> None:
        session.status = status
        session.submitted_at = self.clock.now()
        session.score = score(session.questions, session.answers, session.pass_threshold)

    def _expire(self, session: QuizSession) -> None:
        self._finish(session, SessionStatus.EXPIRED)
        self.store.save(session)
        self._discard_timer(session.session_id)
        logger.info(
            f"Session {session.session_id} expired: {len(session.answers)}/"
            f"{session.total_questions} answered, score {session.score.percentage}%"
        )

    def _arm(self, session: QuizSession) -> None:
        if session.deadline_at is None or session.is_terminal:
            return
        session_id = session.session_id
        with self._timers_guard:
            if session_id in self._timers:
                return
            self._timers[session_id] = self.clock.schedule(
                session.deadline_at, lambda: self._fire_deadline(session_id)
            )
        logger.debug(f"Armed deadline for {session_id} at {session.deadline_at.isoformat()}")

    def _discard_timer(self, session_id: str) -> None:
        with self._timers_guard:
            handle = self._timers.pop(session_id, None)
        if handle is not None:
            handle.cancel()

    def _fire_deadline(self, session_id: str) -> None:
        try:
            self.on_deadline_elapsed(session_id)
        except Exception:
            logger.exception(f"Deadline handling failed for session {session_id}")
            self._schedule_retry(session_id)

    def _schedule_retry(self, session_id: str) -> None:
        retry_at = self.clock.now() + timedelta(seconds=self.deadline_retry_seconds)
        with self._timers_guard:
            stale = self._timers.pop(session_id, None)
            self._timers[session_id] = self.clock.schedule(
                retry_at, lambda: self._fire_deadline(session_id)
            )
        if stale is not None:
            stale.cancel()
        logger.warning(f"Retrying deadline for {session_id} at {retry_at.isoformat()}")
