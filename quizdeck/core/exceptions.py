"""Exceptions raised by the quiz core and translated to HTTP errors by the server."""

from __future__ import annotations


class QuizDeckError(Exception):
    """Base exception for QuizDeck."""

    error_code = "QUIZDECK_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidQuizState(QuizDeckError):
    """Quiz has no questions or no point weight, so it cannot be scored."""

    error_code = "INVALID_QUIZ_STATE"


class NoAttemptsInRange(QuizDeckError):
    """No attempts fall inside the requested analytics window."""

    error_code = "NO_ATTEMPTS_IN_RANGE"


class QuizValidationError(QuizDeckError, ValueError):
    error_code = "VALIDATION_ERROR"


class NotFoundError(QuizDeckError):
    error_code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource") -> None:
        super().__init__(f"{resource} not found")


class PermissionDeniedError(QuizDeckError):
    error_code = "PERMISSION_DENIED"


class AuthenticationError(QuizDeckError):
    error_code = "AUTHENTICATION_ERROR"


class DuplicateError(QuizDeckError):
    error_code = "DUPLICATE_ERROR"
