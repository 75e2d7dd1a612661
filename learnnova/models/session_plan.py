"""
Session plan: the immutable description of what a quiz session contains.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple

from .question import Question, QuestionType


class SessionMode(str, Enum):
    """Timed-and-monitored vs. untimed session variants."""

    EXAM = "exam"
    RELAXED = "relaxed"

    @classmethod
    def parse(cls, value: Any) -> Optional["SessionMode"]:
        """Return the matching mode, or None for unset/unknown values."""
        if isinstance(value, SessionMode):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None


@dataclass(frozen=True)
class SessionPlan:
    """
    What a quiz session will contain and how it is timed.

    Attributes:
        mode: Exam or relaxed
        time_limit_seconds: Total time for exam mode, None for relaxed
        questions: Ordered questions, indexed 0..n-1
        allowed_types: Question formats the learner selected
        max_available: Number of questions that passed filtering (capped)
        source_name: Name of the note/document the quiz was generated from
    """

    mode: SessionMode
    time_limit_seconds: Optional[int]
    questions: Tuple[Question, ...]
    allowed_types: FrozenSet[QuestionType]
    max_available: int
    source_name: Optional[str] = None

    def __post_init__(self):
        if not self.questions:
            raise ValueError("A session plan needs at least one question")
        if self.mode is SessionMode.EXAM:
            if not self.time_limit_seconds or self.time_limit_seconds <= 0:
                raise ValueError(
                    f"Exam mode requires a positive time limit, got {self.time_limit_seconds}"
                )
        elif self.time_limit_seconds is not None:
            raise ValueError("Relaxed mode cannot have a time limit")
        if len(self.questions) > self.max_available:
            raise ValueError(
                f"Plan has {len(self.questions)} questions but only "
                f"{self.max_available} are available"
            )
        for position, question in enumerate(self.questions):
            if question.index != position:
                raise ValueError(
                    f"Question at position {position} has index {question.index}"
                )

    @property
    def is_exam(self) -> bool:
        return self.mode is SessionMode.EXAM

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def quiz_title(self) -> str:
        return f"Quiz - {self.source_name or 'Unknown Source'}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "mode": self.mode.value,
            "time_limit_seconds": self.time_limit_seconds,
            "questions": [q.to_dict() for q in self.questions],
            "allowed_types": sorted(t.value for t in self.allowed_types),
            "max_available": self.max_available,
            "source_name": self.source_name,
        }
