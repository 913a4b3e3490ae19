import os
import tempfile

# Keep the default SQLite file out of the working tree
os.environ.setdefault("DB_DIR", tempfile.mkdtemp(prefix="quiz_tests_"))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from quiz_api.database import init_db
from quiz_api.domain import MULTIPLE_CHOICE, TRUE_FALSE, Question
from quiz_api.services.clock import ManualClock
from quiz_api.services.quiz_engine import QuizSessionEngine
from quiz_api.services.session_store import InMemorySessionStore


@pytest.fixture
def questions() -> list[Question]:
    return [
        Question(
            id="1",
            text="What is a React component?",
            kind=MULTIPLE_CHOICE,
            options=(
                "A JavaScript function that returns JSX",
                "A CSS class",
                "A database table",
                "An HTTP endpoint",
            ),
            correct_answer="A JavaScript function that returns JSX",
            explanation="React components are JavaScript functions that return JSX.",
        ),
        Question(
            id="2",
            text="React uses a virtual DOM for better performance",
            kind=TRUE_FALSE,
            correct_answer="True",
        ),
        Question(
            id="3",
            text="Which hook is used for state management in function components?",
            kind=MULTIPLE_CHOICE,
            options=("useEffect", "useState", "useContext", "useRef"),
            correct_answer="useState",
        ),
    ]


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def engine(store: InMemorySessionStore, clock: ManualClock):
    quiz_engine = QuizSessionEngine(store, clock)
    yield quiz_engine
    quiz_engine.shutdown()


@pytest.fixture
def session_factory():
    db_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=db_engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db_engine.dispose()
