"""
Session configuration.

Combines the learner's choices (mode, time budget, formats, question count)
with the filtered question set into an immutable SessionPlan.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Optional, Sequence

from ..config import config
from ..errors import ConfigurationError
from ..models.session_plan import SessionMode, SessionPlan
from .question_filter import FilterResult, filter_questions, parse_allowed_types

logger = logging.getLogger(__name__)


def calculate_time_limit(time_budget_minutes: float, question_count: int) -> int:
    """
    Exam time limit in seconds.

    ``time_budget_minutes`` is the time allotted per 10 questions; the total is
    rounded up to whole minutes.

    Example:
        >>> calculate_time_limit(30, 7)
        1260
    """
    return math.ceil(time_budget_minutes / 10 * question_count) * 60


def configure(
    filter_result: FilterResult,
    mode: Any,
    time_budget_minutes: Optional[float],
    requested_count: int,
    allowed_types: Iterable[Any],
    source_name: Optional[str] = None,
) -> SessionPlan:
    """
    Build a SessionPlan from filtered questions and the learner's choices.

    Args:
        filter_result: Output of filter_questions
        mode: "exam" or "relaxed" (or a SessionMode)
        time_budget_minutes: Minutes per 10 questions (exam mode)
        requested_count: Number of questions requested
        allowed_types: Formats the learner selected
        source_name: Name of the quiz source, for titles

    Returns:
        Immutable SessionPlan

    Raises:
        ConfigurationError: If no mode, no formats or no questions are available
    """
    session_mode = SessionMode.parse(mode)
    if session_mode is None:
        raise ConfigurationError("no_mode")

    allowed = parse_allowed_types(allowed_types)
    if not allowed:
        raise ConfigurationError("no_types")

    if filter_result.max_available == 0:
        raise ConfigurationError("no_questions")

    actual_count = min(requested_count, filter_result.max_available)
    questions = filter_result.selectable[:actual_count]
    if not questions:
        raise ConfigurationError("no_questions")

    time_limit: Optional[int] = None
    if session_mode is SessionMode.EXAM:
        if time_budget_minutes is None:
            time_budget_minutes = config.quiz.default_time_budget
        if time_budget_minutes <= 0:
            raise ConfigurationError("no_time")
        time_limit = calculate_time_limit(time_budget_minutes, len(questions))

    plan = SessionPlan(
        mode=session_mode,
        time_limit_seconds=time_limit,
        questions=tuple(questions),
        allowed_types=allowed,
        max_available=filter_result.max_available,
        source_name=source_name,
    )
    logger.info(
        "Configured %s session: %d question(s), time limit %s",
        session_mode.value,
        plan.total_questions,
        f"{time_limit}s" if time_limit else "none",
    )
    return plan


def build_plan(
    raw_questions: Optional[Sequence[Any]],
    mode: Any,
    time_budget_minutes: Optional[float] = None,
    requested_count: Optional[int] = None,
    allowed_types: Optional[Iterable[Any]] = None,
    source_name: Optional[str] = None,
) -> SessionPlan:
    """
    Filter raw questions and configure a plan in one call.

    Defaults come from ``config.quiz`` when a choice is omitted.
    """
    if requested_count is None:
        requested_count = config.quiz.default_question_count
    if allowed_types is None:
        allowed_types = config.quiz.default_allowed_types

    filter_result = filter_questions(raw_questions, allowed_types, requested_count)
    return configure(
        filter_result,
        mode,
        time_budget_minutes,
        requested_count,
        allowed_types,
        source_name=source_name,
    )
