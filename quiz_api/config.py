"""Application configuration and constants."""
import logging
import os
from pathlib import Path


def _parse_int_env(name: str, default: int) -> int:
    """Parse integer from environment variable."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# Database
DB_DIR = Path(os.environ.get("DB_DIR", Path.cwd() / "data"))
DB_DIR.mkdir(parents=True, exist_ok=True)
DATABASE_URL = os.environ.get(
    "DATABASE_URL", f"sqlite:///{DB_DIR / 'quiz_sessions.db'}"
)

# Identity tokens are issued by the portal's auth service; we only verify them
SECRET_KEY = os.environ.get(
    "SECRET_KEY",
    "CHANGE_ME_IN_PRODUCTION_USE_openssl_rand_hex_32"
)
ALGORITHM = "HS256"

# Quiz defaults (per-module values override these)
DEFAULT_PASS_THRESHOLD = _parse_int_env("DEFAULT_PASS_THRESHOLD", 70)
MAX_TIME_LIMIT_SECONDS = _parse_int_env("MAX_TIME_LIMIT_SECONDS", 24 * 60 * 60)
# Delay before a failed deadline expiry is attempted again
DEADLINE_RETRY_SECONDS = _parse_int_env("DEADLINE_RETRY_SECONDS", 5)

# Logging
LOG_LEVEL = logging.getLevelName(os.environ.get("LOG_LEVEL", "INFO").upper())
if not isinstance(LOG_LEVEL, int):
    LOG_LEVEL = logging.INFO
