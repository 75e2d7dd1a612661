"""
Question set filtering.

Turns the generator's raw question list into the ordered, bounded list of
questions a learner can be quizzed on. Malformed entries are dropped and
logged; they never abort configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from ..config import config
from ..errors import DataError
from ..models.question import Question, QuestionType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterResult:
    """
    Output of :func:`filter_questions`.

    Attributes:
        selectable: Questions to use, in original order, re-indexed from 0
        max_available: Retained questions, capped at the hard ceiling
        dropped: Number of malformed entries discarded
    """

    selectable: Tuple[Question, ...]
    max_available: int
    dropped: int = 0


def parse_allowed_types(allowed_types: Optional[Iterable[Any]]) -> frozenset:
    """
    Normalize the learner's format selection into a set of QuestionType.

    Accepts type values or labels, or a mapping of label -> enabled flag
    (the shape the format checkboxes produce). Unknown labels are ignored.
    """
    if not allowed_types:
        return frozenset()
    if isinstance(allowed_types, dict):
        allowed_types = [label for label, enabled in allowed_types.items() if enabled]
    parsed = set()
    for label in allowed_types:
        question_type = QuestionType.parse(label)
        if question_type is not None:
            parsed.add(question_type)
    return frozenset(parsed)


def filter_questions(
    raw_questions: Optional[Sequence[Any]],
    allowed_types: Iterable[Any],
    requested_count: int,
    max_questions: Optional[int] = None,
) -> FilterResult:
    """
    Filter raw generated questions against the allowed formats.

    Args:
        raw_questions: Question-like objects from the generator (any shape)
        allowed_types: Formats the learner selected
        requested_count: Number of questions the learner asked for
        max_questions: Hard ceiling (defaults to config.quiz.max_questions)

    Returns:
        FilterResult with at most min(requested_count, max_available) questions
    """
    ceiling = config.quiz.max_questions if max_questions is None else max_questions
    allowed = parse_allowed_types(allowed_types)

    retained: List[Question] = []
    dropped = 0
    for position, raw in enumerate(raw_questions or []):
        try:
            question = Question.from_raw(raw, index=position)
        except DataError as e:
            dropped += 1
            logger.warning(
                "Dropping generated question %d: %s %s", position, e, "; ".join(e.errors)
            )
            continue
        if question.type in allowed:
            retained.append(question)

    max_available = min(len(retained), ceiling)
    count = max(0, min(requested_count, max_available))
    selectable = tuple(q.with_index(i) for i, q in enumerate(retained[:count]))

    logger.debug(
        "Filtered %d raw question(s): %d retained, %d dropped, %d selected",
        len(raw_questions or []),
        len(retained),
        dropped,
        len(selectable),
    )
    return FilterResult(selectable=selectable, max_available=max_available, dropped=dropped)
