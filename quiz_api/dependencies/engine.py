"""Quiz engine dependency."""
import threading

from quiz_api.database import SessionLocal
from quiz_api.services.quiz_engine import QuizSessionEngine
from quiz_api.services.session_store import SqlSessionStore

_engine: QuizSessionEngine | None = None
_engine_lock = threading.Lock()


def get_quiz_engine() -> QuizSessionEngine:
    """Process-wide engine over the SQL session store."""
    global _engine
    with _engine_lock:
        if _engine is None:
            _engine = QuizSessionEngine(SqlSessionStore(SessionLocal))
        return _engine
