"""
Scoring of completed quiz sessions.

Every question type uses the same rule: the learner's answer is correct when
it equals the expected answer after trimming, ignoring case. There is no
partial credit, so long open-ended answers rarely match.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from ..errors import StateError
from ..models.answer_store import AnswerStore
from ..models.session_plan import SessionPlan
from ..models.session_result import NOT_ANSWERED, QuestionOutcome, SessionResult


def normalize_answer(value: Optional[str]) -> str:
    """Trim and case-fold an answer for comparison."""
    if value is None:
        return ""
    return str(value).strip().casefold()


def is_correct(user_answer: Optional[str], correct_answer: str) -> bool:
    """Case-insensitive trimmed equality; blank answers are never correct."""
    submitted = normalize_answer(user_answer)
    return bool(submitted) and submitted == normalize_answer(correct_answer)


def percentage(correct: int, total: int) -> int:
    """
    Percentage rounded half up, 0 for an empty quiz.

    Example:
        >>> percentage(5, 6)
        83
        >>> percentage(1, 8)
        13
    """
    if total <= 0:
        return 0
    # Integer form of floor(100 * correct / total + 0.5)
    return (200 * correct + total) // (2 * total)


def score(
    plan: SessionPlan,
    answers: AnswerStore,
    *,
    completed_at: Optional[datetime] = None,
    time_spent_seconds: Optional[int] = None,
    tab_switch_count: Optional[int] = None,
) -> SessionResult:
    """
    Score a frozen answer store against a plan.

    Args:
        plan: The session plan
        answers: Frozen answers for the session
        completed_at: Completion time (defaults to now, UTC)
        time_spent_seconds: Time used, exam mode only
        tab_switch_count: Integrity violations, exam mode only

    Returns:
        SessionResult with per-question outcomes in plan order

    Raises:
        StateError: If the answer store is still writable
    """
    if not answers.is_frozen:
        raise StateError("Answers must be frozen before scoring")

    outcomes: List[QuestionOutcome] = []
    for question in plan.questions:
        value = answers.get(question.index)
        user_answer = value if value is not None and value.strip() else NOT_ANSWERED
        outcomes.append(
            QuestionOutcome(
                question=question.prompt,
                user_answer=user_answer,
                correct_answer=question.correct_answer,
                is_correct=is_correct(value, question.correct_answer),
                type=question.type,
                explanation=question.explanation,
                options=question.options or (),
            )
        )

    correct_count = sum(1 for outcome in outcomes if outcome.is_correct)
    return SessionResult(
        score=percentage(correct_count, len(outcomes)),
        per_question=tuple(outcomes),
        time_spent_seconds=time_spent_seconds,
        tab_switch_count=tab_switch_count,
        completed_at=completed_at or datetime.now(timezone.utc),
        mode=plan.mode,
    )
