"""
Unit tests for session configuration.

Tests plan construction, time limit calculation and configuration errors.
"""

import unittest

import pytest

from learnnova.engine.configurator import build_plan, calculate_time_limit, configure
from learnnova.engine.question_filter import filter_questions
from learnnova.errors import ConfigurationError
from learnnova.models.session_plan import SessionMode, SessionPlan


class TestConfigure:
    """Test configure()."""

    def test_exam_time_limit(self, raw_questions):
        allowed = ["multiple_choice", "true_false"]
        result = filter_questions(raw_questions, allowed, 5)
        plan = configure(result, "exam", 30, 5, allowed)

        # 30 minutes per 10 questions, 5 questions -> 15 minutes
        assert plan.mode is SessionMode.EXAM
        assert plan.time_limit_seconds == 15 * 60
        assert plan.total_questions == 5

    def test_exam_time_uses_actual_count(self, raw_questions):
        allowed = ["true_false"]
        result = filter_questions(raw_questions, allowed, 10)
        plan = configure(result, "exam", 15, 10, allowed)

        # Only 2 true/false questions: ceil(1.5 * 2) = 3 minutes
        assert plan.total_questions == 2
        assert plan.time_limit_seconds == 180

    def test_relaxed_has_no_time_limit(self, raw_questions):
        allowed = ["multiple_choice"]
        result = filter_questions(raw_questions, allowed, 3)
        plan = configure(result, "relaxed", 30, 3, allowed)
        assert plan.time_limit_seconds is None
        assert not plan.is_exam

    def test_questions_keep_filter_order(self, raw_questions):
        allowed = ["multiple_choice", "fill_blank", "true_false", "open_ended"]
        result = filter_questions(raw_questions, allowed, 4)
        plan = configure(result, "relaxed", None, 4, allowed)
        assert plan.questions == result.selectable[:4]

    def test_no_mode(self, raw_questions):
        result = filter_questions(raw_questions, ["multiple_choice"], 3)
        with pytest.raises(ConfigurationError) as exc_info:
            configure(result, None, 30, 3, ["multiple_choice"])
        assert exc_info.value.reason == "no_mode"
        assert "quiz mode" in exc_info.value.message

    def test_unknown_mode(self, raw_questions):
        result = filter_questions(raw_questions, ["multiple_choice"], 3)
        with pytest.raises(ConfigurationError) as exc_info:
            configure(result, "speedrun", 30, 3, ["multiple_choice"])
        assert exc_info.value.reason == "no_mode"

    def test_no_types(self, raw_questions):
        result = filter_questions(raw_questions, [], 3)
        with pytest.raises(ConfigurationError) as exc_info:
            configure(result, "exam", 30, 3, [])
        assert exc_info.value.reason == "no_types"

    def test_no_questions(self, raw_questions):
        result = filter_questions(raw_questions[:2], ["fill_blank"], 3)
        with pytest.raises(ConfigurationError) as exc_info:
            configure(result, "relaxed", None, 3, ["fill_blank"])
        assert exc_info.value.reason == "no_questions"

    def test_non_positive_budget_in_exam(self, raw_questions):
        result = filter_questions(raw_questions, ["multiple_choice"], 3)
        with pytest.raises(ConfigurationError) as exc_info:
            configure(result, "exam", 0, 3, ["multiple_choice"])
        assert exc_info.value.reason == "no_time"

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)


class TestTimeLimit(unittest.TestCase):
    """Test calculate_time_limit()."""

    def test_rounds_up_to_whole_minutes(self):
        # 45 / 10 * 7 = 31.5 -> 32 minutes
        self.assertEqual(calculate_time_limit(45, 7), 32 * 60)

    def test_exact_minutes(self):
        self.assertEqual(calculate_time_limit(60, 10), 3600)

    def test_single_question(self):
        # 15 / 10 * 1 = 1.5 -> 2 minutes
        self.assertEqual(calculate_time_limit(15, 1), 120)


class TestBuildPlan:
    """Test build_plan() convenience."""

    def test_defaults_from_config(self, raw_questions):
        plan = build_plan(raw_questions, "exam", source_name="Chemistry")
        # Default formats exclude open-ended; 7 questions remain
        assert plan.total_questions == 7
        # Default budget of 30 minutes per 10 questions: ceil(21) minutes
        assert plan.time_limit_seconds == 21 * 60
        assert plan.quiz_title == "Quiz - Chemistry"

    def test_mapping_of_formats(self, raw_questions):
        plan = build_plan(
            raw_questions,
            "relaxed",
            requested_count=10,
            allowed_types={"open_ended": True, "multiple_choice": False},
        )
        assert plan.total_questions == 1


class TestSessionPlanInvariants(unittest.TestCase):
    """SessionPlan rejects inconsistent construction."""

    def test_empty_plan_rejected(self):
        with self.assertRaises(ValueError):
            SessionPlan(
                mode=SessionMode.RELAXED,
                time_limit_seconds=None,
                questions=(),
                allowed_types=frozenset(),
                max_available=0,
            )

    def test_exam_without_time_rejected(self):
        question = filter_questions(
            [{"type": "fill_blank", "question": "Q", "correct_answer": "A"}],
            ["fill_blank"],
            1,
        ).selectable
        with self.assertRaises(ValueError):
            SessionPlan(
                mode=SessionMode.EXAM,
                time_limit_seconds=None,
                questions=question,
                allowed_types=frozenset(),
                max_available=1,
            )

    def test_plan_is_frozen(self):
        question = filter_questions(
            [{"type": "fill_blank", "question": "Q", "correct_answer": "A"}],
            ["fill_blank"],
            1,
        ).selectable
        plan = SessionPlan(
            mode=SessionMode.RELAXED,
            time_limit_seconds=None,
            questions=question,
            allowed_types=frozenset(),
            max_available=1,
        )
        with self.assertRaises(AttributeError):
            plan.mode = SessionMode.EXAM
