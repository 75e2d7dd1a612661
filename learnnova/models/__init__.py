"""
Data models for quiz sessions.

This module contains core data models:
- Question / QuestionType: Normalized generator questions
- SessionPlan / SessionMode: Immutable description of a session
- AnswerStore / Answer: Learner answers, frozen on submission
- SessionResult / QuestionOutcome: Scored outcome of a session

Note: the QuizSession state machine lives in learnnova.quiz_session
"""

from .question import Question, QuestionType
from .session_plan import SessionMode, SessionPlan
from .answer_store import Answer, AnswerStore
from .session_result import NOT_ANSWERED, QuestionOutcome, SessionResult

__all__ = [
    "Question",
    "QuestionType",
    "SessionMode",
    "SessionPlan",
    "Answer",
    "AnswerStore",
    "NOT_ANSWERED",
    "QuestionOutcome",
    "SessionResult",
]
