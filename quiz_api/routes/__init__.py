"""API route modules."""
from quiz_api.routes import progress, quiz

__all__ = ["progress", "quiz"]
