"""Domain errors raised by the quiz session engine.

Every error is scoped to a single session or module; none of them is fatal to
the process. The HTTP layer maps them to status codes in ``quiz_api.app``.
"""


class QuizError(Exception):
    """Base class for quiz engine errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SessionNotFound(QuizError):
    """Unknown session id."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id


class SessionTerminal(QuizError):
    """Mutating call on a submitted or expired session."""

    def __init__(self, session_id: str, status: str) -> None:
        super().__init__(f"Session {session_id} is already {status}")
        self.session_id = session_id
        self.status = status


class UnknownQuestion(QuizError):
    """Question id is not part of the session's question set."""

    def __init__(self, session_id: str, question_id: str) -> None:
        super().__init__(
            f"Question {question_id} is not part of session {session_id}"
        )
        self.session_id = session_id
        self.question_id = question_id


class InvalidModuleState(QuizError):
    """Module cannot be taken as configured (e.g. it has no questions)."""


class ModuleNotFound(QuizError):
    """Unknown module id."""

    def __init__(self, module_id: str) -> None:
        super().__init__(f"Module {module_id} not found")
        self.module_id = module_id


class AttemptInProgress(QuizError):
    """Retake requested while the previous attempt is still running."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            f"Attempt {session_id} is still in progress; resume it instead"
        )
        self.session_id = session_id
