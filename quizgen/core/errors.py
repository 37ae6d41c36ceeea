"""
Error taxonomy for quiz generation and retrieval.

Callers react differently per kind: input errors are caller bugs, gateway
errors are transient, contract violations mean the AI answer was unusable,
persistence errors point at the store.
"""

from __future__ import annotations


class QuizError(Exception):
    """Base class for quiz pipeline errors."""


class InputValidationError(QuizError):
    """Raised when a caller omits a required field."""


class AIGatewayError(QuizError):
    """Raised when the completion gateway is unreachable, misconfigured or errors out."""


class AIContractViolation(QuizError):
    """Raised when the AI response cannot be parsed or has the wrong shape."""

    def __init__(self, message: str, reason: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason


class PersistenceError(QuizError):
    """Raised when writing quiz rows fails."""


class QuizNotFoundError(QuizError):
    """Raised when a material has no generated questions yet."""


class ClientTimeoutError(QuizError):
    """Raised on the client when a local deadline expires."""
