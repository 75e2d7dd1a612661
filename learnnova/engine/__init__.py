"""
Quiz session engine components.

- timer: Cancellable countdown for exam mode
- integrity: Tab-switch monitoring for exam mode
- scorer: Uniform answer checking and percentage scoring
- question_filter: Defensive filtering of generated questions
- configurator: Learner choices -> SessionPlan
"""

from .timer import TimerController, TimerState, format_time
from .integrity import IntegrityMonitor, IntegrityReport
from .scorer import percentage, score
from .question_filter import FilterResult, filter_questions
from .configurator import build_plan, calculate_time_limit, configure

__all__ = [
    "TimerController",
    "TimerState",
    "format_time",
    "IntegrityMonitor",
    "IntegrityReport",
    "percentage",
    "score",
    "FilterResult",
    "filter_questions",
    "build_plan",
    "calculate_time_limit",
    "configure",
]
