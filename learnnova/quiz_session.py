"""
Quiz Session - the lifecycle of one timed or untimed quiz attempt.

A QuizSession owns its plan, answer store, timer and integrity monitor, and
exposes the only mutation entry points: configure, start, answer, submit,
tick and visibility_changed.

States (one-way):
    NOT_STARTED -> ACTIVE -> COMPLETED -> SCORED -> PERSISTED | PERSIST_FAILED
"""

from __future__ import annotations

import logging
import threading
import uuid
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .engine import configurator, scorer
from .engine.integrity import IntegrityMonitor, IntegrityReport
from .engine.question_filter import FilterResult
from .engine.timer import TimerController
from .errors import StateError
from .models.answer_store import AnswerStore
from .models.question import Question
from .models.session_plan import SessionPlan
from .models.session_result import SessionResult
from .utils.persistence import PersistResult, SessionPersister


class SessionState(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    COMPLETED = "completed"
    SCORED = "scored"
    PERSISTED = "persisted"
    PERSIST_FAILED = "persist_failed"


FINISHED_STATES = frozenset(
    {SessionState.SCORED, SessionState.PERSISTED, SessionState.PERSIST_FAILED}
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionEvent:
    """
    "Session finished" notification.

    Emitted on reaching SCORED, then again on PERSISTED or PERSIST_FAILED.
    """

    session_id: str
    state: SessionState
    result: SessionResult
    persist_result: Optional[PersistResult] = None


@dataclass(frozen=True)
class SessionProgress:
    """Read-only snapshot for rendering the session."""

    state: SessionState
    answered: int
    total: int
    remaining_seconds: Optional[int]
    violation_count: int
    should_warn: bool


SessionListener = Callable[[SessionEvent], None]


class QuizSession:
    """
    State machine for one quiz session.

    Features:
    - Guarded, one-way transitions serialized by a single lock
    - Exam mode: countdown with auto-submit and tab-switch monitoring
    - Submit and timer expiry race safely; whichever comes first wins
    - Result scored once and persisted exactly once
    """

    def __init__(
        self,
        persister: Optional[SessionPersister] = None,
        session_id: Optional[str] = None,
        timer_factory: Callable[[], TimerController] = TimerController,
        monitor: Optional[IntegrityMonitor] = None,
        executor: Optional[Executor] = None,
    ):
        """
        Initialize quiz session.

        Args:
            persister: Result persister (default: JSON-file store)
            session_id: Session ID (auto-generated if None)
            timer_factory: Builds the exam countdown timer
            monitor: Integrity monitor (default: new monitor from config)
            executor: Runs persistence (default: a single worker owned by the
                session). The caller never blocks on the store.
        """
        self.session_id = session_id or f"qs-{uuid.uuid4()}"
        self.persister = persister if persister is not None else SessionPersister()
        self.executor = executor
        self.timestamp = datetime.now(timezone.utc).isoformat()

        self._lock = threading.RLock()
        self._state = SessionState.NOT_STARTED
        self._plan: Optional[SessionPlan] = None
        self._answers: Optional[AnswerStore] = None
        self._timer: Optional[TimerController] = None
        self._timer_factory = timer_factory
        self._monitor = monitor or IntegrityMonitor()
        self._listeners: List[SessionListener] = []
        self._scored = threading.Event()
        self._persist_scheduled = threading.Event()

        self._remaining_seconds: Optional[int] = None
        self.completion_reason: Optional[str] = None
        self.result: Optional[SessionResult] = None
        self.persist_result: Optional[PersistResult] = None
        self.persist_future: Optional[Future] = None

    # ==================== Properties ====================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def plan(self) -> Optional[SessionPlan]:
        return self._plan

    @property
    def answers(self) -> Optional[AnswerStore]:
        return self._answers

    @property
    def timer(self) -> Optional[TimerController]:
        return self._timer

    @property
    def monitor(self) -> IntegrityMonitor:
        return self._monitor

    @property
    def is_finished(self) -> bool:
        return self._state in FINISHED_STATES

    def add_listener(self, listener: SessionListener) -> None:
        """Register a callback for "session finished" events."""
        self._listeners.append(listener)

    # ==================== Entry points ====================

    def configure(
        self,
        questions: Sequence[Any] | FilterResult,
        mode: Any,
        time_budget_minutes: Optional[float] = None,
        requested_count: Optional[int] = None,
        allowed_types: Optional[Iterable[Any]] = None,
        source_name: Optional[str] = None,
    ) -> SessionPlan:
        """
        Build and validate the session plan.

        Args:
            questions: Raw generator questions, or an existing FilterResult
            mode: "exam" or "relaxed"
            time_budget_minutes: Minutes per 10 questions (exam mode)
            requested_count: Number of questions requested
            allowed_types: Selected question formats
            source_name: Name of the quiz source

        Returns:
            The configured SessionPlan

        Raises:
            StateError: If the session has started or is already configured
            ConfigurationError: If the choices do not yield a valid plan
        """
        with self._lock:
            if self._state is not SessionState.NOT_STARTED:
                raise StateError(f"Cannot configure a session in state {self._state.value}")
            if self._plan is not None:
                raise StateError("Session is already configured")

            if isinstance(questions, FilterResult):
                if requested_count is None:
                    requested_count = len(questions.selectable)
                plan = configurator.configure(
                    questions,
                    mode,
                    time_budget_minutes,
                    requested_count,
                    allowed_types or (),
                    source_name=source_name,
                )
            else:
                plan = configurator.build_plan(
                    questions,
                    mode,
                    time_budget_minutes=time_budget_minutes,
                    requested_count=requested_count,
                    allowed_types=allowed_types,
                    source_name=source_name,
                )

            self._plan = plan
            return plan

    def start(self) -> None:
        """
        Begin the session: NOT_STARTED -> ACTIVE.

        Raises:
            StateError: If not configured or already started
        """
        with self._lock:
            if self._state is not SessionState.NOT_STARTED:
                raise StateError(f"Cannot start a session in state {self._state.value}")
            if self._plan is None:
                raise StateError("Session must be configured before it starts")

            self._answers = AnswerStore(self._plan.total_questions)
            self._state = SessionState.ACTIVE

            if self._plan.is_exam:
                self._remaining_seconds = self._plan.time_limit_seconds
                self._monitor.activate()
                self._timer = self._timer_factory()
                self._timer.start(
                    self._plan.time_limit_seconds,
                    on_tick=self.tick,
                    on_expire=self._on_timer_expired,
                )

            logger.info(
                "Session %s started (%s, %d question(s))",
                self.session_id,
                self._plan.mode.value,
                self._plan.total_questions,
            )

    def answer(self, question_index: int, value: str) -> None:
        """
        Record an answer; the latest value per question wins.

        Raises:
            StateError: If the session is not active or the index is invalid
        """
        with self._lock:
            if self._state is not SessionState.ACTIVE:
                raise StateError(f"Cannot answer in state {self._state.value}")
            self._answers.set(question_index, value)

    def tick(self, remaining_seconds: int) -> None:
        """
        Timer tick. Reaching zero completes the session (auto-submit).

        Ticks outside the active state, or in relaxed mode, are ignored.
        """
        with self._lock:
            if self._state is not SessionState.ACTIVE or not self._plan.is_exam:
                return
            self._remaining_seconds = max(0, remaining_seconds)
            if remaining_seconds > 0:
                return
        self._complete("expired")

    def submit(self) -> Optional[SessionResult]:
        """
        Submit the session: ACTIVE -> COMPLETED -> SCORED -> PERSISTED/PERSIST_FAILED.

        A submit after the session has completed (for example after the timer
        fired) has no effect and returns the existing result.

        Raises:
            StateError: If the session has not started
        """
        with self._lock:
            if self._state is SessionState.NOT_STARTED:
                raise StateError("Cannot submit a session that has not started")
        self._complete("submitted")
        # A completion started on another thread may still be scoring
        self._scored.wait()
        return self.result

    def visibility_changed(self, is_hidden: bool) -> IntegrityReport:
        """Forward a visibility event to the integrity monitor (exam mode only)."""
        with self._lock:
            if self._state is not SessionState.ACTIVE or not self._plan.is_exam:
                return self._monitor.report()
            return self._monitor.record_visibility_change(is_hidden)

    # ==================== Read-only views ====================

    def progress(self) -> SessionProgress:
        """Snapshot of the session for display."""
        with self._lock:
            remaining = self._remaining_seconds
            if self._timer is not None and self._state is SessionState.ACTIVE:
                remaining = self._timer.remaining_seconds()
            return SessionProgress(
                state=self._state,
                answered=self._answers.answered_count() if self._answers else 0,
                total=self._plan.total_questions if self._plan else 0,
                remaining_seconds=remaining,
                violation_count=self._monitor.violation_count,
                should_warn=self._monitor.should_warn,
            )

    def export_pairs(self) -> List[Tuple[Question, Optional[str]]]:
        """
        Final (question, answer) pairs for the export collaborator.

        Raises:
            StateError: Before the session is scored
        """
        with self._lock:
            if not self.is_finished:
                raise StateError("Export is available once the session is scored")
            return [(q, self._answers.get(q.index)) for q in self._plan.questions]

    def wait_for_persistence(self, timeout: Optional[float] = None) -> Optional[PersistResult]:
        """
        Block until the result has been handed to storage.

        Returns:
            The PersistResult, or None if the session has not been scored

        Raises:
            concurrent.futures.TimeoutError: If persistence is still running
        """
        if not self._scored.is_set():
            return None
        self._persist_scheduled.wait(timeout)
        return self.persist_future.result(timeout)

    def to_dict(self) -> Dict[str, Any]:
        """Convert session to dictionary."""
        return {
            "session_id": self.session_id,
            "timestamp": self.timestamp,
            "state": self._state.value,
            "completion_reason": self.completion_reason,
            "plan": self._plan.to_dict() if self._plan else None,
            "result": self.result.to_dict() if self.result else None,
            "persisted_id": self.persist_result.result_id if self.persist_result else None,
        }

    # ==================== Transitions ====================

    def _on_timer_expired(self) -> None:
        self._complete("expired")

    def _complete(self, reason: str) -> None:
        with self._lock:
            if self._state is not SessionState.ACTIVE:
                logger.debug(
                    "Ignoring %s for session %s in state %s",
                    reason,
                    self.session_id,
                    self._state.value,
                )
                return

            self._state = SessionState.COMPLETED
            self.completion_reason = reason
            self._answers.freeze()
            self._monitor.deactivate()
            if self._plan.is_exam:
                if reason == "expired":
                    self._remaining_seconds = 0
                elif self._timer is not None:
                    self._remaining_seconds = self._timer.remaining_seconds()
            timer = self._timer

        # Cancel outside the session lock: a tick waiting on the lock would
        # otherwise deadlock against the timer lock held during the tick
        if timer is not None:
            timer.cancel_if_running()

        with self._lock:
            self.result = scorer.score(
                self._plan,
                self._answers,
                time_spent_seconds=self._time_spent(),
                tab_switch_count=self._monitor.violation_count if self._plan.is_exam else None,
            )
            self._state = SessionState.SCORED
            self._scored.set()
            logger.info(
                "Session %s %s with score %d%%", self.session_id, reason, self.result.score
            )

        self._emit(SessionEvent(self.session_id, SessionState.SCORED, self.result))

        if self.executor is not None:
            self.persist_future = self.executor.submit(self._persist)
        else:
            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="quiz-persist")
            self.persist_future = executor.submit(self._persist)
            # Queued work still runs; the worker exits once it is done
            executor.shutdown(wait=False)
        self._persist_scheduled.set()

    def _persist(self) -> PersistResult:
        outcome = self.persister.persist(
            self.result, session_id=self.session_id, source_name=self._plan.source_name
        )
        with self._lock:
            self.persist_result = outcome
            self._state = SessionState.PERSISTED if outcome else SessionState.PERSIST_FAILED
            state = self._state
        if not outcome:
            logger.error("Session %s result not saved: %s", self.session_id, outcome.errors)
        self._emit(SessionEvent(self.session_id, state, self.result, outcome))
        return outcome

    def _time_spent(self) -> Optional[int]:
        if not self._plan.is_exam:
            return None
        remaining = self._remaining_seconds or 0
        return self._plan.time_limit_seconds - remaining

    def _emit(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Session listener failed on %s", event.state.value)
