"""
Question model for quiz sessions.

Questions arrive from the generator in an unvalidated shape; ``Question.from_raw``
normalizes one entry and raises ``DataError`` when it cannot be used.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..errors import DataError
from ..utils.validation import validate_question


class QuestionType(str, Enum):
    """Supported question formats."""

    MULTIPLE_CHOICE = "multiple_choice"
    FILL_BLANK = "fill_blank"
    TRUE_FALSE = "true_false"
    OPEN_ENDED = "open_ended"

    @classmethod
    def parse(cls, value: Any) -> Optional["QuestionType"]:
        """
        Map a generator type label onto a QuestionType.

        Returns:
            The matching type, or None if the label is not recognized
        """
        if isinstance(value, QuestionType):
            return value
        if not isinstance(value, str):
            return None
        return TYPE_ALIASES.get(value.strip().lower())


# Labels emitted by the generator for each format
TYPE_ALIASES: Dict[str, QuestionType] = {
    "multiple_choice": QuestionType.MULTIPLE_CHOICE,
    "multiple_choice_question": QuestionType.MULTIPLE_CHOICE,
    "fill_blank": QuestionType.FILL_BLANK,
    "fill_in_blank": QuestionType.FILL_BLANK,
    "fill-in-the-blank": QuestionType.FILL_BLANK,
    "true_false": QuestionType.TRUE_FALSE,
    "true_false_question": QuestionType.TRUE_FALSE,
    "open_ended": QuestionType.OPEN_ENDED,
    "open_ended_question": QuestionType.OPEN_ENDED,
}


@dataclass(frozen=True)
class Question:
    """
    A single quiz question.

    Attributes:
        index: Position of the question within its session plan
        type: Question format
        prompt: Question text
        options: Answer options (multiple choice only)
        correct_answer: Expected answer
        explanation: Explanation of the correct answer
    """

    index: int
    type: QuestionType
    prompt: str
    correct_answer: str
    options: Optional[Tuple[str, ...]] = None
    explanation: Optional[str] = None

    def __post_init__(self):
        if not self.prompt or not self.prompt.strip():
            raise DataError(f"Question {self.index} has an empty prompt")
        if not self.correct_answer or not self.correct_answer.strip():
            raise DataError(f"Question {self.index} has no correct answer")
        if self.type is QuestionType.MULTIPLE_CHOICE:
            if not self.options:
                raise DataError(f"Multiple choice question {self.index} has no options")
        elif self.options is not None:
            raise DataError(
                f"Question {self.index} of type {self.type.value} cannot have options"
            )

    @classmethod
    def from_raw(cls, raw: Any, index: int = 0) -> "Question":
        """
        Build a Question from one generator entry.

        Entries without a recognized type are treated as multiple choice.
        Options are kept only for multiple choice questions.

        Args:
            raw: Question-like object of unknown shape
            index: Position to assign

        Returns:
            Normalized Question

        Raises:
            DataError: If the entry is not usable
        """
        result = validate_question(raw)
        if not result:
            raise DataError(f"Malformed question at position {index}", result.errors)

        data = result.data
        question_type = QuestionType.parse(data.get("type")) or QuestionType.MULTIPLE_CHOICE

        options = None
        if question_type is QuestionType.MULTIPLE_CHOICE:
            options = tuple(data.get("options") or ()) or None

        explanation = data.get("explanation") or None

        return cls(
            index=index,
            type=question_type,
            prompt=data["prompt"],
            correct_answer=data["correct_answer"],
            options=options,
            explanation=explanation,
        )

    def with_index(self, index: int) -> "Question":
        """Return a copy of this question placed at ``index``."""
        if index == self.index:
            return self
        return Question(
            index=index,
            type=self.type,
            prompt=self.prompt,
            correct_answer=self.correct_answer,
            options=self.options,
            explanation=self.explanation,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (generator field names)."""
        return {
            "index": self.index,
            "type": self.type.value,
            "question": self.prompt,
            "options": list(self.options) if self.options else [],
            "correct_answer": self.correct_answer,
            "explanation": self.explanation,
        }
