"""
Error types raised by the quiz session engine.

- ConfigurationError: a session cannot be configured from the learner's choices
- DataError: a generated question is malformed (filtered, never surfaced)
- StateError: an operation was called in a state that does not allow it
- PersistenceError: a result store failed to save a session result
"""

from __future__ import annotations

from typing import List, Optional


class QuizEngineError(Exception):
    """Base class for all quiz engine errors."""


class ConfigurationError(QuizEngineError, ValueError):
    """
    Raised when a session plan cannot be built.

    Attributes:
        reason: Machine-readable reason (no_mode/no_types/no_questions/no_time)
        message: Human-readable explanation for the learner
    """

    MESSAGES = {
        "no_mode": "Please select a quiz mode",
        "no_types": "Please select at least one question format",
        "no_questions": (
            "No questions available with the selected formats. "
            "Please adjust your question format selection."
        ),
        "no_time": "Please select a time limit for exam mode",
    }

    def __init__(self, reason: str, message: Optional[str] = None):
        self.reason = reason
        self.message = message or self.MESSAGES.get(reason, reason)
        super().__init__(self.message)


class DataError(QuizEngineError, ValueError):
    """Raised when a raw question from the generator is unusable."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.errors = errors or []
        super().__init__(message)


class StateError(QuizEngineError, RuntimeError):
    """Raised when an operation violates the session lifecycle contract."""


class PersistenceError(QuizEngineError):
    """Raised by result stores when a session result cannot be saved."""
