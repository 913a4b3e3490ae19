from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.orm import sessionmaker

from quiz_api.app import app
from quiz_api.config import ALGORITHM, SECRET_KEY
from quiz_api.database import get_db
from quiz_api.dependencies import get_quiz_engine
from quiz_api.models.db import ModuleStatus, QuizQuestion, TrainingModule
from quiz_api.services.clock import ManualClock
from quiz_api.services.quiz_engine import QuizSessionEngine
from quiz_api.services.session_store import SqlSessionStore


def _seed(db) -> None:
    react = TrainingModule(
        id="react-101", title="React Fundamentals", status=ModuleStatus.PUBLISHED.value
    )
    react.questions = [
        QuizQuestion(
            question_text="Which hook is used for state management?",
            question_type="multiple_choice",
            correct_answer="useState",
            order=3,
        ),
        QuizQuestion(
            question_text="What is a React component?",
            question_type="multiple_choice",
            correct_answer="A JavaScript function",
            explanation="React components are JavaScript functions",
            order=1,
        ),
        QuizQuestion(
            question_text="React uses a virtual DOM for better performance",
            question_type="true_false",
            correct_answer="True",
            order=2,
        ),
    ]
    react.questions[0].options = ["useEffect", "useState"]
    react.questions[1].options = ["A JavaScript function", "A CSS class"]

    timed = TrainingModule(
        id="timed", title="Timed Quiz", status=ModuleStatus.PUBLISHED.value,
        time_limit_seconds=5, pass_threshold=50,
    )
    timed.questions = [
        QuizQuestion(
            question_text="Test question?",
            question_type="true_false",
            correct_answer="False",
            order=1,
        )
    ]
    draft = TrainingModule(id="draft", title="Draft", status=ModuleStatus.DRAFT.value)
    empty = TrainingModule(id="empty", title="Empty", status=ModuleStatus.PUBLISHED.value)
    db.add_all([react, timed, draft, empty])
    db.commit()


@pytest.fixture
def client(session_factory: sessionmaker, clock: ManualClock):
    db = session_factory()
    _seed(db)
    db.close()

    quiz_engine = QuizSessionEngine(SqlSessionStore(session_factory), clock)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_quiz_engine] = lambda: quiz_engine
    yield TestClient(app)
    app.dependency_overrides.clear()
    quiz_engine.shutdown()


def _token(employee_id: str, expires_minutes: int = 60) -> str:
    """Token as the portal's auth service would issue it."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    return jwt.encode({"sub": employee_id, "exp": expire}, SECRET_KEY, algorithm=ALGORITHM)


def _auth(employee_id: str = "emp-1") -> dict[str, str]:
    return {"Authorization": f"Bearer {_token(employee_id)}"}


def _start(client: TestClient, module_id: str = "react-101", employee_id: str = "emp-1"):
    return client.post(
        "/api/quiz/start",
        json={"employeeId": employee_id, "moduleId": module_id},
        headers=_auth(employee_id),
    )


def _post(client: TestClient, action: str, payload: dict, employee_id: str = "emp-1"):
    return client.post(f"/api/quiz/{action}", json=payload, headers=_auth(employee_id))


def test_start_hides_correct_answers(client: TestClient) -> None:
    response = _start(client)
    assert response.status_code == 200
    body = response.json()

    assert body["status"] == "in_progress"
    assert body["currentIndex"] == 0
    assert body["totalQuestions"] == 3
    assert body["deadlineAt"] is None
    assert body["currentQuestion"]["text"] == "What is a React component?"
    assert body["currentQuestion"]["options"] == ["A JavaScript function", "A CSS class"]
    assert "correctAnswer" not in body["currentQuestion"]
    assert body["review"] is None
    assert "useState" not in response.text


def test_full_quiz_flow(client: TestClient) -> None:
    session_id = _start(client).json()["sessionId"]
    ids = []

    for value in ("A JavaScript function", "True", "useState"):
        current = client.get(f"/api/quiz/sessions/{session_id}", headers=_auth()).json()
        question = current["currentQuestion"]
        ids.append(question["id"])
        answered = _post(client, "answer", {"sessionId": session_id, "questionId": question["id"], "value": value})
        assert answered.status_code == 200
        assert _post(client, "advance", {"sessionId": session_id}).status_code == 200

    finished = client.get(f"/api/quiz/sessions/{session_id}", headers=_auth()).json()
    assert finished["currentIndex"] == 3
    assert [a["questionId"] for a in finished["answers"]] == ids

    result = _post(client, "submit", {"sessionId": session_id}).json()
    assert result["status"] == "submitted"
    assert result["score"] == {"correct": 3, "total": 3, "percentage": 100, "passed": True}
    assert result["review"][0]["isCorrect"] is True
    assert result["review"][0]["explanation"] == "React components are JavaScript functions"
    assert result["review"][1]["options"] == ["True", "False"]


def test_resume_returns_same_session(client: TestClient) -> None:
    first = _start(client).json()
    _post(client, "answer", {"sessionId": first["sessionId"], "questionId": first["currentQuestion"]["id"], "value": "A CSS class"})
    _post(client, "advance", {"sessionId": first["sessionId"]})

    resumed = _start(client).json()
    assert resumed["sessionId"] == first["sessionId"]
    assert resumed["currentIndex"] == 1
    assert len(resumed["answers"]) == 1


def test_requires_authentication(client: TestClient) -> None:
    response = client.post(
        "/api/quiz/start", json={"employeeId": "emp-1", "moduleId": "react-101"}
    )
    assert response.status_code == 401

    response = client.post(
        "/api/quiz/start",
        json={"employeeId": "emp-1", "moduleId": "react-101"},
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == 401

    response = client.post(
        "/api/quiz/start",
        json={"employeeId": "emp-1", "moduleId": "react-101"},
        headers={"Authorization": f"Bearer {_token('emp-1', expires_minutes=-5)}"},
    )
    assert response.status_code == 401


def test_cannot_act_for_other_employee(client: TestClient) -> None:
    response = client.post(
        "/api/quiz/start",
        json={"employeeId": "emp-2", "moduleId": "react-101"},
        headers=_auth("emp-1"),
    )
    assert response.status_code == 403

    session_id = _start(client).json()["sessionId"]
    response = client.get(f"/api/quiz/sessions/{session_id}", headers=_auth("emp-2"))
    assert response.status_code == 404
    response = _post(client, "submit", {"sessionId": session_id}, employee_id="emp-2")
    assert response.status_code == 404


def test_error_mapping(client: TestClient) -> None:
    missing = client.get("/api/quiz/sessions/unknown", headers=_auth())
    assert missing.status_code == 404
    assert missing.json()["error"] == "SessionNotFound"

    session_id = _start(client).json()["sessionId"]
    unknown = _post(client, "answer", {"sessionId": session_id, "questionId": "999", "value": "x"})
    assert unknown.status_code == 400
    assert unknown.json()["error"] == "UnknownQuestion"

    _post(client, "submit", {"sessionId": session_id})
    terminal = _post(client, "advance", {"sessionId": session_id})
    assert terminal.status_code == 409
    assert terminal.json()["error"] == "SessionTerminal"


def test_module_errors(client: TestClient) -> None:
    assert _start(client, "nope").status_code == 404
    draft = _start(client, "draft")
    assert draft.status_code == 422
    assert draft.json()["error"] == "InvalidModuleState"
    assert _start(client, "empty").status_code == 422


def test_invalid_payload(client: TestClient) -> None:
    response = client.post(
        "/api/quiz/start", json={"employeeId": "emp-1"}, headers=_auth()
    )
    assert response.status_code == 422
    response = _start(client, "bad/module")
    assert response.status_code == 400


def test_retake(client: TestClient) -> None:
    first = _start(client).json()
    blocked = client.post(
        "/api/quiz/retake",
        json={"employeeId": "emp-1", "moduleId": "react-101"},
        headers=_auth(),
    )
    assert blocked.status_code == 409
    assert blocked.json()["error"] == "AttemptInProgress"

    failed = _post(client, "submit", {"sessionId": first["sessionId"]}).json()
    assert failed["score"]["passed"] is False

    retake = client.post(
        "/api/quiz/retake",
        json={"employeeId": "emp-1", "moduleId": "react-101"},
        headers=_auth(),
    ).json()
    assert retake["sessionId"] != first["sessionId"]
    assert retake["attemptNumber"] == 2
    assert retake["answers"] == []
    assert retake["currentIndex"] == 0


def test_timed_quiz_auto_submits(client: TestClient, clock: ManualClock) -> None:
    started = _start(client, "timed").json()
    assert started["remainingSeconds"] == 5
    assert started["deadlineAt"] is not None

    clock.advance(2)
    halfway = client.get(f"/api/quiz/sessions/{started['sessionId']}", headers=_auth()).json()
    assert halfway["remainingSeconds"] == 3

    clock.advance(3)
    expired = client.get(f"/api/quiz/sessions/{started['sessionId']}", headers=_auth()).json()
    assert expired["status"] == "expired"
    assert expired["remainingSeconds"] is None
    assert expired["score"] == {"correct": 0, "total": 1, "percentage": 0, "passed": False}

    late = _post(client, "answer", {"sessionId": started["sessionId"], "questionId": started["currentQuestion"]["id"], "value": "False"})
    assert late.status_code == 409


def test_progress_endpoints(client: TestClient) -> None:
    react = _start(client).json()
    session_id = react["sessionId"]
    for value in ("A JavaScript function", "True", "useState"):
        current = client.get(f"/api/quiz/sessions/{session_id}", headers=_auth()).json()
        _post(client, "answer", {"sessionId": session_id, "questionId": current["currentQuestion"]["id"], "value": value})
        _post(client, "advance", {"sessionId": session_id})
    _post(client, "submit", {"sessionId": session_id})

    timed = _start(client, "timed").json()
    _post(client, "submit", {"sessionId": timed["sessionId"]})
    _start(client, "timed")

    completions = client.get("/api/employees/emp-1/completions", headers=_auth()).json()
    assert {c["moduleId"] for c in completions} == {"react-101", "timed"}

    progress = client.get("/api/employees/emp-1/progress", headers=_auth()).json()
    assert progress == {
        "employeeId": "emp-1",
        "completedModules": 2,
        "passedModules": 1,
        "averagePercentage": 50,
        "totalAttempts": 3,
    }

    attempts = client.get(
        "/api/employees/emp-1/modules/timed/attempts", headers=_auth()
    ).json()
    assert [a["attemptNumber"] for a in attempts] == [2, 1]
    assert attempts[0]["status"] == "in_progress"
    assert attempts[0]["score"] is None

    forbidden = client.get("/api/employees/emp-2/progress", headers=_auth())
    assert forbidden.status_code == 403
