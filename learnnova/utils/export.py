"""
Quiz result export.

Renders a scored session as CSV, JSON or plain text so learners can keep a
copy of their answers.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, Optional

from ..config import config
from ..engine.timer import format_time

if TYPE_CHECKING:
    from ..models.session_result import SessionResult

logger = logging.getLogger(__name__)

NO_EXPLANATION = "No explanation provided"
RULE = "-" * 50


def export_filename(fmt: str, day: Optional[date] = None) -> str:
    """
    File name for an export.

    Example:
        >>> export_filename("csv", date(2024, 3, 1))
        'quiz-results-2024-03-01.csv'
    """
    day = day or datetime.now(timezone.utc).date()
    return f"quiz-results-{day.isoformat()}.{fmt}"


def generate_csv(result: SessionResult, source_name: Optional[str], exported_at: datetime) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["Question", "Your Answer", "Correct Answer", "Result", "Explanation"])
    for outcome in result.per_question:
        writer.writerow(
            [
                outcome.question,
                outcome.user_answer,
                outcome.correct_answer,
                "Correct" if outcome.is_correct else "Incorrect",
                outcome.explanation or NO_EXPLANATION,
            ]
        )

    buffer.write("\nSummary\n")
    writer.writerow(["Total Questions", result.total_questions])
    writer.writerow(["Score", f"{result.score}%"])
    writer.writerow(["Correct Answers", result.correct_count])
    writer.writerow(["Date", exported_at.date().isoformat()])
    return buffer.getvalue()


def generate_json(result: SessionResult, source_name: Optional[str], exported_at: datetime) -> str:
    data = {
        "quizTitle": f"Quiz - {source_name or 'Unknown Source'}",
        "source": source_name or "Unknown",
        "date": exported_at.isoformat(),
        "mode": result.mode.value,
        "score": result.score,
        "totalQuestions": result.total_questions,
        "correctAnswers": result.correct_count,
        "timeSpent": result.time_spent_seconds,
        "tabSwitches": result.tab_switch_count,
        "questions": [
            dict(outcome.to_dict(), explanation=outcome.explanation or NO_EXPLANATION)
            for outcome in result.per_question
        ],
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def generate_text(result: SessionResult, source_name: Optional[str], exported_at: datetime) -> str:
    lines = [
        "QUIZ RESULTS",
        "=" * 50,
        "",
        f"Score: {result.score}%",
        f"Correct: {result.correct_count}/{result.total_questions}",
    ]
    if result.time_spent_seconds is not None:
        lines.append(f"Time Spent: {format_time(result.time_spent_seconds)}")
    lines += [
        f"Date: {exported_at.date().isoformat()}",
        f"Source: {source_name or 'Unknown'}",
        "",
        "QUESTIONS AND ANSWERS",
        RULE,
        "",
    ]

    for number, outcome in enumerate(result.per_question, start=1):
        lines += [
            f"Question {number} ({outcome.type.value}):",
            outcome.question,
            "",
            f"Your Answer: {outcome.user_answer}",
            f"Correct Answer: {outcome.correct_answer}",
            f"Result: {'✓ CORRECT' if outcome.is_correct else '✗ INCORRECT'}",
        ]
        if outcome.explanation:
            lines.append(f"Explanation: {outcome.explanation}")
        if outcome.options:
            lines.append("Options:")
            lines += [
                f"  {chr(65 + i)}. {option}" for i, option in enumerate(outcome.options)
            ]
        lines += ["", RULE, ""]

    return "\n".join(lines) + "\n"


EXPORTERS: Dict[str, Callable[..., str]] = {
    "csv": generate_csv,
    "json": generate_json,
    "txt": generate_text,
}


def export_result(
    result: SessionResult,
    fmt: str = "csv",
    source_name: Optional[str] = None,
    exported_at: Optional[datetime] = None,
) -> str:
    """
    Render a session result in an export format.

    Args:
        result: Scored session result
        fmt: "csv", "json" or "txt"
        source_name: Name of the quiz source
        exported_at: Export timestamp (defaults to now, UTC)

    Returns:
        Export content

    Raises:
        ValueError: If the format is not supported
    """
    exporter = EXPORTERS.get(fmt.lower())
    if exporter is None:
        raise ValueError(f"Unsupported format: {fmt}")
    return exporter(result, source_name, exported_at or datetime.now(timezone.utc))


def write_export(
    result: SessionResult,
    fmt: str = "csv",
    directory: Path | str = None,
    source_name: Optional[str] = None,
) -> Path:
    """
    Write an export file and return its path.

    Args:
        result: Scored session result
        fmt: "csv", "json" or "txt"
        directory: Target directory (default: config.paths.exports_dir)
        source_name: Name of the quiz source
    """
    exported_at = datetime.now(timezone.utc)
    content = export_result(result, fmt, source_name=source_name, exported_at=exported_at)

    target_dir = Path(directory) if directory else config.paths.exports_dir
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / export_filename(fmt.lower(), exported_at.date())
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)

    logger.info("Exported quiz results as %s to %s", fmt.upper(), path)
    return path
