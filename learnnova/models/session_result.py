"""
Session results produced when a quiz session is scored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from .question import QuestionType
from .session_plan import SessionMode

NOT_ANSWERED = "Not answered"


@dataclass(frozen=True)
class QuestionOutcome:
    """
    Scored response to one question.

    Attributes:
        question: Question text
        user_answer: Learner's answer, or "Not answered"
        correct_answer: Expected answer
        is_correct: Whether the answer matched
        type: Question format
        explanation: Explanation of the correct answer
        options: Options shown (multiple choice only)
    """

    question: str
    user_answer: str
    correct_answer: str
    is_correct: bool
    type: QuestionType
    explanation: Optional[str] = None
    options: Tuple[str, ...] = ()

    @property
    def answered(self) -> bool:
        return self.user_answer != NOT_ANSWERED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "question": self.question,
            "userAnswer": self.user_answer,
            "correctAnswer": self.correct_answer,
            "isCorrect": self.is_correct,
            "type": self.type.value,
            "explanation": self.explanation,
            "options": list(self.options),
        }


@dataclass(frozen=True)
class SessionResult:
    """
    Final, immutable outcome of a quiz session.

    Attributes:
        score: Percentage score (0-100)
        per_question: Outcomes in plan order
        time_spent_seconds: Time used (exam mode only)
        tab_switch_count: Focus-loss violations (exam mode only)
        completed_at: When the session was completed (UTC)
        mode: Session mode
    """

    score: int
    per_question: Tuple[QuestionOutcome, ...]
    time_spent_seconds: Optional[int]
    tab_switch_count: Optional[int]
    completed_at: datetime
    mode: SessionMode

    @property
    def total_questions(self) -> int:
        return len(self.per_question)

    @property
    def correct_count(self) -> int:
        return sum(1 for outcome in self.per_question if outcome.is_correct)

    @property
    def answered_count(self) -> int:
        return sum(1 for outcome in self.per_question if outcome.answered)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for persistence."""
        return {
            "mode": self.mode.value,
            "questions": [outcome.to_dict() for outcome in self.per_question],
            "score": self.score,
            "totalQuestions": self.total_questions,
            "correctAnswers": self.correct_count,
            "answeredQuestions": self.answered_count,
            "timeSpent": self.time_spent_seconds,
            "tabSwitches": self.tab_switch_count,
            "completedAt": self.completed_at.isoformat(),
        }
