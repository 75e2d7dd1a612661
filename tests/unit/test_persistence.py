"""
Unit tests for result persistence.

Tests:
- SessionPersister: payload shape, single attempt, failures reported not raised
- JsonFileResultStore: schema validation, result files, user history
"""

import json
from datetime import datetime, timezone

import pytest

from learnnova.engine.configurator import build_plan
from learnnova.engine.scorer import score
from learnnova.errors import PersistenceError
from learnnova.models.answer_store import AnswerStore
from learnnova.utils.persistence import JsonFileResultStore, PersistResult, SessionPersister

COMPLETED_AT = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def result(scenario_a_questions):
    plan = build_plan(
        scenario_a_questions,
        "exam",
        time_budget_minutes=30,
        requested_count=3,
        allowed_types=["multiple_choice"],
    )
    store = AnswerStore(plan.total_questions)
    store.set(0, "Paris")
    store.set(1, "Venus")
    store.freeze()
    return score(plan, store, completed_at=COMPLETED_AT, time_spent_seconds=120, tab_switch_count=1)


class TestSessionPersister:
    """Test SessionPersister."""

    def test_payload_fields(self, persister, result):
        payload = persister.build_payload(result, session_id="qs-1")

        assert payload["resultId"].startswith("qr-")
        assert payload["sessionId"] == "qs-1"
        assert payload["userId"] == "user-123"
        assert payload["quizTitle"] == "Quiz - Biology notes"
        assert payload["sourceName"] == "Biology notes"
        assert payload["score"] == 33
        assert payload["totalQuestions"] == 3
        assert payload["correctAnswers"] == 1
        assert payload["timeSpent"] == 120
        assert payload["tabSwitches"] == 1
        assert payload["completedAt"] == COMPLETED_AT.isoformat()
        assert "createdAt" in payload

    def test_session_source_overrides_default(self, persister, result):
        payload = persister.build_payload(result, source_name="Atlas")
        assert payload["quizTitle"] == "Quiz - Atlas"
        assert payload["sourceName"] == "Atlas"
        assert persister.source_name == "Biology notes"

    def test_unknown_source(self, recording_store, result):
        payload = SessionPersister(store=recording_store).build_payload(result)
        assert payload["quizTitle"] == "Quiz - Unknown Source"
        assert payload["sourceName"] == "Unknown"

    def test_success_records_user_history(self, persister, recording_store, result):
        outcome = persister.persist(result, session_id="qs-1")

        assert outcome
        assert outcome.result_id == recording_store.saved[0]["resultId"]
        assert recording_store.user_updates == [("user-123", outcome.result_id, COMPLETED_AT)]
        assert persister.attempts == 1

    def test_store_failure_is_reported(self, make_store, result):
        persister = SessionPersister(store=make_store(fail=True), user_id="user-123")
        outcome = persister.persist(result)

        assert not outcome
        assert outcome.result_id is None
        assert outcome.errors == ["storage unavailable"]
        assert persister.attempts == 1

    def test_user_update_failure_is_not_fatal(self, make_store, result, caplog):
        store = make_store(fail_user_update=True)
        persister = SessionPersister(store=store, user_id="user-123")

        outcome = persister.persist(result)

        assert outcome.success
        assert len(store.saved) == 1
        assert "User history update failed" in caplog.text

    def test_anonymous_session_skips_user_history(self, recording_store, result):
        SessionPersister(store=recording_store).persist(result)
        assert len(recording_store.saved) == 1
        assert recording_store.user_updates == []

    def test_repr(self):
        assert "result_id='qr-1'" in repr(PersistResult(True, result_id="qr-1"))
        assert "errors=['boom']" in repr(PersistResult(False, errors=["boom"]))


class TestJsonFileResultStore:
    """Test JsonFileResultStore against a temporary directory."""

    def test_save_and_load(self, file_store, result):
        persister = SessionPersister(store=file_store, user_id="user-123", source_name="Notes")
        outcome = persister.persist(result, session_id="qs-abc")

        assert outcome.success
        path = file_store.results_dir / f"{outcome.result_id}.json"
        assert path.exists()

        loaded = file_store.load_result(outcome.result_id)
        assert loaded["sessionId"] == "qs-abc"
        assert loaded["questions"][1]["userAnswer"] == "Venus"

        # Prefix is optional
        assert file_store.load_result(outcome.result_id[len("qr-"):]) == loaded

    def test_user_history(self, file_store, result):
        persister = SessionPersister(store=file_store, user_id="user-123")
        first = persister.persist(result)
        second = persister.persist(result)

        user = file_store.load_user("user-123")
        assert user["quizzes"] == [first.result_id, second.result_id]
        assert user["last_quiz_date"] == COMPLETED_AT.isoformat()

        with open(file_store.users_dir / "user-123.json", encoding="utf-8") as f:
            assert json.load(f)["user_id"] == "user-123"

    def test_invalid_payload_rejected(self, file_store):
        payload = {"resultId": "qr-bad", "mode": "exam", "questions": [], "score": 140}
        with pytest.raises(PersistenceError) as exc_info:
            file_store.save_result(payload)
        assert "failed validation" in str(exc_info.value)
        assert not (file_store.results_dir / "qr-bad.json").exists()

    def test_validation_can_be_disabled(self, tmp_path):
        store = JsonFileResultStore(
            results_dir=tmp_path / "r", users_dir=tmp_path / "u", validate=False
        )
        assert store.save_result({"resultId": "qr-raw"}) == "qr-raw"

    def test_list_results_newest_first(self, file_store, result):
        for day in (3, 1, 2):
            payload = SessionPersister(store=file_store, user_id=f"user-{day}").build_payload(
                result
            )
            payload["completedAt"] = datetime(2024, 5, day, tzinfo=timezone.utc).isoformat()
            file_store.save_result(payload)

        listed = file_store.list_results()
        assert [r["userId"] for r in listed] == ["user-3", "user-2", "user-1"]
        assert len(file_store.list_results(limit=2)) == 2
        assert [r["userId"] for r in file_store.load_results_by_user("user-2")] == ["user-2"]

    def test_missing_records(self, file_store):
        assert file_store.load_result("qr-missing") is None
        assert file_store.load_user("nobody") is None
