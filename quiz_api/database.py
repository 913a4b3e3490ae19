"""SQLAlchemy engine, sessions and schema bootstrap for the quiz service."""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from quiz_api.config import DATABASE_URL

# Deadline timers write from their own threads
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Declarative base for the module catalog and quiz session tables."""


def get_db():
    """Request-scoped session for route handlers."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """
    Create missing tables on bind (the application engine by default).
    Alembic owns migrations; this only covers fresh databases and tests.
    """
    import quiz_api.models.db  # noqa: F401  registers the tables

    Base.metadata.create_all(bind=bind or engine)
