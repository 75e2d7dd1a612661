"""
Quiz result persistence with validation.

Provides the hand-off of a finalized SessionResult to storage:
- SessionPersister: one attempt per call, never raises
- JsonFileResultStore: JSON-file store with schema validation, a per-user
  quiz history and a "last quiz" timestamp
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol

from ..config import config
from ..errors import PersistenceError
from .validation import ResultValidator

if TYPE_CHECKING:
    from ..models.session_result import SessionResult

logger = logging.getLogger(__name__)


class ResultStore(Protocol):
    """Storage collaborator for quiz results."""

    def save_result(self, payload: Dict[str, Any]) -> str:
        """Store a result payload and return its id."""

    def record_user_quiz(self, user_id: str, result_id: str, completed_at: datetime) -> None:
        """Append a result id to the user's history and stamp the last quiz date."""


class PersistResult:
    """
    Outcome of a persistence attempt.

    Attributes:
        success: Whether the result was saved
        result_id: Id of the stored result (on success)
        errors: Error messages (on failure)
    """

    def __init__(
        self,
        success: bool,
        result_id: Optional[str] = None,
        errors: Optional[List[str]] = None,
    ):
        self.success = success
        self.result_id = result_id
        self.errors = errors or []

    def __bool__(self) -> bool:
        return self.success

    def __repr__(self) -> str:
        if self.success:
            return f"PersistResult(success=True, result_id={self.result_id!r})"
        return f"PersistResult(success=False, errors={self.errors!r})"


class SessionPersister:
    """
    Hands a SessionResult to a ResultStore.

    Makes exactly one attempt per ``persist`` call and never raises; failures
    come back as an unsuccessful PersistResult. Retries, if any, belong to the
    store.
    """

    def __init__(
        self,
        store: Optional[ResultStore] = None,
        user_id: Optional[str] = None,
        source_name: Optional[str] = None,
    ):
        self.store = store if store is not None else JsonFileResultStore()
        self.user_id = user_id
        self.source_name = source_name
        self.attempts = 0

    def build_payload(
        self,
        result: SessionResult,
        session_id: Optional[str] = None,
        source_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Render the stored record for a result.

        ``source_name`` names the session's source; the persister's own
        ``source_name`` is only a fallback.
        """
        source_name = source_name or self.source_name
        source = source_name or "Unknown"
        payload = {
            "resultId": f"qr-{uuid.uuid4()}",
            "sessionId": session_id,
            "userId": self.user_id,
            "quizTitle": f"Quiz - {source_name or 'Unknown Source'}",
            "sourceName": source,
        }
        payload.update(result.to_dict())
        payload["createdAt"] = datetime.now(timezone.utc).isoformat()
        return payload

    def persist(
        self,
        result: SessionResult,
        session_id: Optional[str] = None,
        source_name: Optional[str] = None,
    ) -> PersistResult:
        """
        Persist a session result.

        Args:
            result: Finalized session result
            session_id: Id of the session that produced it
            source_name: Name of the quiz source for the stored title

        Returns:
            PersistResult (never raises)
        """
        self.attempts += 1
        try:
            payload = self.build_payload(result, session_id, source_name)
            result_id = self.store.save_result(payload)
        except Exception as e:
            logger.error("Failed to persist quiz result: %s", e)
            return PersistResult(success=False, errors=[str(e)])

        if self.user_id:
            try:
                self.store.record_user_quiz(self.user_id, result_id, result.completed_at)
            except Exception as e:
                # The result itself is saved; a stale history is tolerated
                logger.warning("User history update failed, but quiz was saved: %s", e)

        logger.info("Quiz result saved with ID: %s", result_id)
        return PersistResult(success=True, result_id=result_id)


class JsonFileResultStore:
    """
    Stores quiz results as JSON files.

    Features:
    - Validate results against quiz_result.schema.json
    - Save results to data/quiz_results/
    - Keep per-user quiz history in data/users/<user_id>.json
    - Thread-safe file operations
    """

    def __init__(
        self,
        results_dir: Path | str = None,
        users_dir: Path | str = None,
        validate: bool = True,
    ):
        """
        Initialize result store.

        Args:
            results_dir: Directory for result files (default: config.paths.results_dir)
            users_dir: Directory for user history files (default: config.paths.users_dir)
            validate: Whether to validate payloads before saving
        """
        self.results_dir = Path(results_dir) if results_dir else config.paths.results_dir
        self.users_dir = Path(users_dir) if users_dir else config.paths.users_dir
        self.results_dir.mkdir(parents=True, exist_ok=True)
        self.users_dir.mkdir(parents=True, exist_ok=True)
        self.validator = ResultValidator() if validate else None
        self._lock = threading.Lock()

    def save_result(self, payload: Dict[str, Any]) -> str:
        """
        Save a result payload to disk.

        Returns:
            The result id

        Raises:
            PersistenceError: If validation or writing fails
        """
        result_id = payload.get("resultId") or f"qr-{uuid.uuid4()}"
        payload = dict(payload, resultId=result_id)

        if self.validator is not None:
            validation = self.validator.validate(payload)
            if not validation:
                raise PersistenceError(
                    "Quiz result failed validation: " + "; ".join(validation.errors)
                )

        filepath = self.results_dir / f"{result_id}.json"
        try:
            with self._lock, open(filepath, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise PersistenceError(f"Failed to save quiz result: {e}") from e
        return result_id

    def record_user_quiz(self, user_id: str, result_id: str, completed_at: datetime) -> None:
        """
        Append a result to the user's history and update last_quiz_date.

        Raises:
            PersistenceError: If the user file cannot be read or written
        """
        filepath = self.users_dir / f"{user_id}.json"
        with self._lock:
            try:
                user = self._read_json(filepath) if filepath.exists() else {"user_id": user_id}
                quizzes = user.setdefault("quizzes", [])
                if result_id not in quizzes:
                    quizzes.append(result_id)
                user["last_quiz_date"] = completed_at.isoformat()
                with open(filepath, "w", encoding="utf-8") as f:
                    json.dump(user, f, indent=2, ensure_ascii=False)
            except (OSError, ValueError) as e:
                raise PersistenceError(f"Failed to update user {user_id}: {e}") from e

    def load_result(self, result_id: str) -> Optional[Dict[str, Any]]:
        """
        Load a result by ID.

        Args:
            result_id: Result ID (with or without 'qr-' prefix)

        Returns:
            Result payload, or None if not found
        """
        if not result_id.startswith("qr-"):
            result_id = f"qr-{result_id}"

        filepath = self.results_dir / f"{result_id}.json"
        if not filepath.exists():
            return None

        try:
            return self._read_json(filepath)
        except (OSError, ValueError) as e:
            logger.warning("Failed to load result %s: %s", result_id, e)
            return None

    def load_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Load a user's quiz history record, or None."""
        filepath = self.users_dir / f"{user_id}.json"
        if not filepath.exists():
            return None
        return self._read_json(filepath)

    def load_results_by_user(self, user_id: str) -> List[Dict[str, Any]]:
        """
        Load all results for a specific user.

        Returns:
            List of result payloads, sorted by completion time (newest first)
        """
        return [r for r in self.list_results() if r.get("userId") == user_id]

    def list_results(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        List stored results.

        Args:
            limit: Maximum number of results to return (newest first)
        """
        results = []
        for filepath in self.results_dir.glob("qr-*.json"):
            try:
                results.append(self._read_json(filepath))
            except (OSError, ValueError) as e:
                logger.warning("Failed to load %s: %s", filepath, e)

        results.sort(key=lambda r: r.get("completedAt", ""), reverse=True)
        if limit:
            return results[:limit]
        return results

    @staticmethod
    def _read_json(filepath: Path) -> Dict[str, Any]:
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)
