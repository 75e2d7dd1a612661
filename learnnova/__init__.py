"""
LearnNova quiz session engine.

Turns generated questions into timed or untimed quiz sessions, scores them
and hands the result to storage exactly once.
"""

from .errors import ConfigurationError, DataError, PersistenceError, StateError
from .quiz_session import QuizSession, SessionEvent, SessionProgress, SessionState

__version__ = "0.1.0"

__all__ = [
    "QuizSession",
    "SessionEvent",
    "SessionProgress",
    "SessionState",
    "ConfigurationError",
    "DataError",
    "PersistenceError",
    "StateError",
]
