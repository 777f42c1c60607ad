"""Exceptions raised by the lesson generation pipeline and the store."""

from typing import Optional

from src.models import ValidatedLesson


class ConfigurationError(Exception):
    """Raised at startup when required settings (API credentials) are absent."""

    pass


class LessonGenerationError(Exception):
    """Raised when a single generation attempt fails. Retryable."""

    pass


class InvocationError(LessonGenerationError):
    """Raised when the model call fails or returns an empty reply."""

    pass


class MalformedResponseError(LessonGenerationError):
    """Raised when the model reply is not a JSON object, even after repair."""

    pass


class StructuralValidationError(LessonGenerationError):
    """Raised when a parsed reply is missing required fields or has the wrong shape."""

    pass


class ExhaustedRetriesError(Exception):
    """Raised when every generation attempt failed."""

    def __init__(self, attempts: int, last_cause: Optional[BaseException]):
        self.attempts = attempts
        self.last_cause = last_cause
        super().__init__(
            f"Failed to generate a valid lesson after {attempts} attempts: {last_cause}"
        )


class GenerationCancelledError(Exception):
    """Raised when the caller's timeout or cancel event stops generation."""

    pass


class PersistenceError(Exception):
    """Raised when a validated lesson cannot be stored.

    The lesson is kept on the exception so the caller never loses
    already-generated content.
    """

    def __init__(self, message: str, lesson: ValidatedLesson):
        self.lesson = lesson
        super().__init__(message)


class UpvoteError(Exception):
    """Raised when an upvote precondition fails."""

    pass


class AlreadyUpvotedError(UpvoteError):
    """Raised when the user has already upvoted the lesson."""

    pass


class LessonNotFoundError(UpvoteError):
    """Raised when the lesson does not exist."""

    pass
