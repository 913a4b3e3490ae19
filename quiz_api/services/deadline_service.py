"""Deadline recovery after a restart."""
import logging

from quiz_api.services.quiz_engine import QuizSessionEngine


def recover_deadlines(engine: QuizSessionEngine) -> int:
    """
    Expire overdue sessions and re-arm timers for the rest.
    Returns number of sessions handled.
    """
    logger = logging.getLogger(__name__)

    try:
        expired, armed = engine.recover()
    except Exception as e:
        # Sessions are still expired lazily on their next access
        logger.error(f"Failed to recover quiz deadlines: {e}")
        return 0
    return expired + armed
