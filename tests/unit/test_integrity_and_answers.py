"""
Unit tests for the integrity monitor and the answer store.
"""

import unittest

from learnnova.engine.integrity import IntegrityMonitor
from learnnova.errors import StateError
from learnnova.models.answer_store import AnswerStore


class TestIntegrityMonitor(unittest.TestCase):
    """Test IntegrityMonitor."""

    def setUp(self):
        self.monitor = IntegrityMonitor(warn_threshold=3)
        self.monitor.activate()

    def test_counts_transitions_into_hidden(self):
        self.monitor.record_visibility_change(True)
        self.monitor.record_visibility_change(False)
        report = self.monitor.record_visibility_change(True)
        self.assertEqual(report.violation_count, 2)
        self.assertFalse(report.should_warn)

    def test_repeated_hidden_events_count_once(self):
        for _ in range(5):
            report = self.monitor.record_visibility_change(True)
        self.assertEqual(report.violation_count, 1)

    def test_warns_at_threshold(self):
        for _ in range(3):
            self.monitor.record_visibility_change(True)
            report = self.monitor.record_visibility_change(False)
        self.assertEqual(report.violation_count, 3)
        self.assertTrue(report.should_warn)

    def test_inert_when_deactivated(self):
        self.monitor.record_visibility_change(True)
        self.monitor.deactivate()
        self.monitor.record_visibility_change(False)
        report = self.monitor.record_visibility_change(True)
        self.assertEqual(report.violation_count, 1)

    def test_inactive_by_default(self):
        monitor = IntegrityMonitor()
        report = monitor.record_visibility_change(True)
        self.assertEqual(report.violation_count, 0)


class TestAnswerStore(unittest.TestCase):
    """Test AnswerStore."""

    def setUp(self):
        self.store = AnswerStore(question_count=3)

    def test_last_write_wins(self):
        self.store.set(0, "Paris")
        self.store.set(0, "Rome")
        self.assertEqual(self.store.get(0), "Rome")
        self.assertEqual(self.store.answered_count(), 1)

    def test_unanswered_is_none(self):
        self.assertIsNone(self.store.get(2))

    def test_set_after_freeze_raises(self):
        self.store.set(1, "x")
        self.store.freeze()
        with self.assertRaises(StateError):
            self.store.set(1, "y")
        self.assertEqual(self.store.get(1), "x")
        self.assertTrue(self.store.is_frozen)

    def test_out_of_range_index_raises(self):
        with self.assertRaises(StateError):
            self.store.set(3, "x")
        with self.assertRaises(StateError):
            self.store.set(-1, "x")
        self.assertEqual(len(self.store), 0)

    def test_blank_answers_not_counted(self):
        self.store.set(0, "   ")
        self.store.set(1, "Au")
        self.assertEqual(self.store.answered_count(), 1)

    def test_answers_snapshot_in_order(self):
        self.store.set(2, "c")
        self.store.set(0, "a")
        answers = self.store.answers()
        self.assertEqual([a.question_index for a in answers], [0, 2])
        self.assertIsNotNone(answers[0].submitted_at.tzinfo)


class TestIntegrityThreshold(unittest.TestCase):
    """Explicit thresholds are honoured or rejected, never replaced."""

    def test_threshold_of_one_warns_on_first_switch(self):
        monitor = IntegrityMonitor(warn_threshold=1)
        monitor.activate()
        self.assertTrue(monitor.record_visibility_change(True).should_warn)

    def test_non_positive_threshold_rejected(self):
        with self.assertRaises(ValueError):
            IntegrityMonitor(warn_threshold=0)
        with self.assertRaises(ValueError):
            IntegrityMonitor(warn_threshold=-2)
