"""
Answer storage for an in-progress quiz session.

The store is writable while the session is active and frozen (read-only)
from the moment the session leaves the active state.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..errors import StateError


@dataclass(frozen=True)
class Answer:
    """
    A learner's latest answer to one question.

    Attributes:
        question_index: Position of the question in the plan
        value: Submitted value (option text, typed answer, "true"/"false")
        submitted_at: When the value was recorded (UTC)
    """

    question_index: int
    value: str
    submitted_at: datetime

    @property
    def is_blank(self) -> bool:
        return not self.value.strip()


class AnswerStore:
    """Map of question index to the learner's latest answer."""

    def __init__(self, question_count: int):
        if question_count < 0:
            raise ValueError(f"question_count must be >= 0, got {question_count}")
        self.question_count = question_count
        self._answers: Dict[int, Answer] = {}
        self._frozen = False

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def set(self, question_index: int, value: str) -> Answer:
        """
        Record an answer. The last write for an index wins.

        Raises:
            StateError: If the store is frozen or the index is out of range
        """
        if self._frozen:
            raise StateError("Answers are locked once the quiz is submitted")
        if not isinstance(question_index, int) or isinstance(question_index, bool):
            raise StateError(f"Question index must be an int, got {question_index!r}")
        if not 0 <= question_index < self.question_count:
            raise StateError(
                f"Question index {question_index} outside [0, {self.question_count})"
            )

        answer = Answer(
            question_index=question_index,
            value="" if value is None else str(value),
            submitted_at=datetime.now(timezone.utc),
        )
        self._answers[question_index] = answer
        return answer

    def get(self, question_index: int) -> Optional[str]:
        answer = self._answers.get(question_index)
        return answer.value if answer else None

    def get_answer(self, question_index: int) -> Optional[Answer]:
        return self._answers.get(question_index)

    def freeze(self) -> None:
        self._frozen = True

    def answered_count(self) -> int:
        """Number of questions with a non-blank answer."""
        return sum(1 for answer in self._answers.values() if not answer.is_blank)

    def answers(self) -> List[Answer]:
        """Snapshot of recorded answers in question order."""
        return [self._answers[i] for i in sorted(self._answers)]

    def __len__(self) -> int:
        return len(self._answers)
