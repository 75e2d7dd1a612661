"""
Shared pytest fixtures and configuration for LearnNova tests.

This file is automatically discovered by pytest and provides
fixtures available to all tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent))

from learnnova.engine.timer import TimerController  # noqa: E402
from learnnova.errors import PersistenceError  # noqa: E402
from learnnova.utils.persistence import JsonFileResultStore, SessionPersister  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingStore:
    """In-memory ResultStore that records every call."""

    def __init__(self, fail: bool = False, fail_user_update: bool = False):
        self.fail = fail
        self.fail_user_update = fail_user_update
        self.saved = []
        self.user_updates = []

    def save_result(self, payload):
        if self.fail:
            raise PersistenceError("storage unavailable")
        self.saved.append(payload)
        return payload["resultId"]

    def record_user_quiz(self, user_id, result_id, completed_at):
        if self.fail_user_update:
            raise PersistenceError("user record locked")
        self.user_updates.append((user_id, result_id, completed_at))


@pytest.fixture
def raw_questions():
    """
    Fixture providing generator output with mixed formats.

    Returns:
        list: 4 multiple choice, 2 true/false, 1 fill-in, 1 open-ended question
    """
    return [
        {
            "type": "multiple_choice",
            "question": "What is the capital of France?",
            "options": ["Berlin", "Paris", "Rome", "Madrid"],
            "correct_answer": "Paris",
            "explanation": "Paris has been the capital since 987.",
        },
        {
            "type": "multiple_choice",
            "question": "Which planet is known as the Red Planet?",
            "options": ["Venus", "Mars", "Jupiter"],
            "correct_answer": "Mars",
        },
        {
            "type": "true_false",
            "question": "Water boils at 100°C at sea level.",
            "correct_answer": "true",
        },
        {
            "type": "multiple_choice",
            "question": "2 + 2 = ?",
            "options": ["3", "4", "5"],
            "correct_answer": "4",
        },
        {
            "type": "fill_blank",
            "question": "The chemical symbol for gold is ___.",
            "correct_answer": "Au",
        },
        {
            "type": "true_false",
            "question": "The Pacific is the smallest ocean.",
            "correct_answer": "false",
        },
        {
            "type": "multiple_choice",
            "question": "Which language runs in a web browser?",
            "options": ["C", "JavaScript", "Fortran"],
            "correct_answer": "JavaScript",
        },
        {
            "type": "open_ended",
            "question": "Explain photosynthesis.",
            "correct_answer": "Plants convert light into chemical energy",
        },
    ]


@pytest.fixture
def scenario_a_questions(raw_questions):
    """Six questions: 4 multiple choice and 2 true/false."""
    return [
        q for q in raw_questions if q["type"] in ("multiple_choice", "true_false")
    ]


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def manual_timer_factory(fake_clock):
    """Timer factory producing timers driven by poll() and the fake clock."""
    created = []

    def factory():
        timer = TimerController(interval=1.0, clock=fake_clock, threaded=False)
        created.append(timer)
        return timer

    factory.created = created
    return factory


@pytest.fixture
def make_store():
    """Factory for RecordingStore instances with failure switches."""
    return RecordingStore


@pytest.fixture
def recording_store():
    return RecordingStore()


@pytest.fixture
def persister(recording_store):
    return SessionPersister(store=recording_store, user_id="user-123", source_name="Biology notes")


@pytest.fixture
def file_store(tmp_path):
    return JsonFileResultStore(results_dir=tmp_path / "results", users_dir=tmp_path / "users")


# Pytest hooks for better test output


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
