from quiz_api.domain import Question
from quiz_api.serialization import serialize_attempt, serialize_session
from quiz_api.services.clock import ManualClock
from quiz_api.services.quiz_engine import QuizSessionEngine


def test_running_session_reveals_only_current_question(
    engine: QuizSessionEngine, questions: list[Question], clock: ManualClock
) -> None:
    session = engine.start("emp-1", "react-101", questions, time_limit_seconds=90)
    session = engine.submit_answer(session.session_id, "1", "A CSS class")
    clock.advance(30)

    payload = serialize_session(session, clock.now())

    assert payload["currentQuestion"] == {
        "id": "1",
        "text": "What is a React component?",
        "kind": "multiple_choice",
        "options": list(questions[0].options),
    }
    assert payload["remainingSeconds"] == 60
    assert payload["answers"][0]["value"] == "A CSS class"
    assert payload["score"] is None
    assert payload["review"] is None
    assert "correctAnswer" not in str(payload)


def test_finished_session_carries_review(
    engine: QuizSessionEngine, questions: list[Question], clock: ManualClock
) -> None:
    session = engine.start("emp-1", "react-101", questions)
    engine.submit_answer(session.session_id, "1", "A CSS class")
    engine.submit_answer(session.session_id, "2", "True")
    session = engine.submit(session.session_id)

    payload = serialize_session(session, clock.now())

    assert payload["status"] == "submitted"
    assert payload["currentQuestion"] is None
    assert payload["score"]["percentage"] == 33
    review = payload["review"]
    assert [item["isCorrect"] for item in review] == [False, True, False]
    assert review[0]["correctAnswer"] == "A JavaScript function that returns JSX"
    assert review[0]["explanation"].startswith("React components")
    assert review[2]["selected"] is None

    summary = serialize_attempt(session)
    assert summary["attemptNumber"] == 1
    assert summary["score"]["correct"] == 1
