from __future__ import annotations

from datetime import datetime
from typing import Any

from quiz_api.domain import QuizSession
from quiz_api.services.scoring import is_correct
from quiz_api.utils.time_utils import seconds_until, to_iso


def _answers_payload(session: QuizSession) -> list[dict[str, Any]]:
    ordered = [
        session.answers[q.id] for q in session.questions if q.id in session.answers
    ]
    return [
        {
            "questionId": answer.question_id,
            "value": answer.value,
            "answeredAt": to_iso(answer.answered_at),
        }
        for answer in ordered
    ]


def _review_payload(session: QuizSession) -> list[dict[str, Any]]:
    review = []
    for question in session.questions:
        answer = session.answers.get(question.id)
        review.append(
            {
                **question.public_view(),
                "selected": answer.value if answer else None,
                "correctAnswer": question.correct_answer,
                "isCorrect": is_correct(question, answer),
                "explanation": question.explanation,
            }
        )
    return review


def serialize_session(session: QuizSession, now: datetime) -> dict[str, Any]:
    """
    Session snapshot as sent to the employee's browser.

    A running session only reveals the question under the cursor and never
    any correct answer; a finished one carries the score and a full review.
    """
    payload: dict[str, Any] = {
        "sessionId": session.session_id,
        "employeeId": session.employee_id,
        "moduleId": session.module_id,
        "attemptNumber": session.attempt_number,
        "status": session.status.value,
        "currentIndex": session.current_index,
        "totalQuestions": session.total_questions,
        "startedAt": to_iso(session.started_at),
        "deadlineAt": to_iso(session.deadline_at),
        "submittedAt": to_iso(session.submitted_at),
        "remainingSeconds": None,
        "currentQuestion": None,
        "answers": _answers_payload(session),
        "score": None,
        "review": None,
    }

    if session.is_terminal:
        payload["score"] = session.score.to_dict() if session.score else None
        payload["review"] = _review_payload(session)
        return payload

    if session.deadline_at is not None:
        payload["remainingSeconds"] = seconds_until(session.deadline_at, now)
    question = session.current_question
    if question is not None:
        payload["currentQuestion"] = question.public_view()
    return payload


def serialize_attempt(session: QuizSession) -> dict[str, Any]:
    """Short attempt entry for history and completion lists."""
    return {
        "sessionId": session.session_id,
        "moduleId": session.module_id,
        "attemptNumber": session.attempt_number,
        "status": session.status.value,
        "startedAt": to_iso(session.started_at),
        "submittedAt": to_iso(session.submitted_at),
        "score": session.score.to_dict() if session.score else None,
    }
