"""
Integrity monitoring for exam-mode sessions.

Counts focus-loss (tab switch) events as a proxy for cheating risk. The
monitor only warns; it never ends a session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import config

logger = logging.getLogger(__name__)

WARNING_MESSAGE = (
    "Warning: Multiple tab switches detected. This may result in quiz termination."
)


@dataclass(frozen=True)
class IntegrityReport:
    """Violation count after a visibility change, and whether to warn."""

    violation_count: int
    should_warn: bool


class IntegrityMonitor:
    """Tracks transitions into the hidden state while active."""

    def __init__(self, warn_threshold: Optional[int] = None):
        if warn_threshold is None:
            warn_threshold = config.quiz.warn_threshold
        if warn_threshold < 1:
            raise ValueError(f"warn_threshold must be >= 1, got {warn_threshold}")
        self.warn_threshold = warn_threshold
        self.violation_count = 0
        self._hidden = False
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def should_warn(self) -> bool:
        return self.violation_count >= self.warn_threshold

    def activate(self) -> None:
        self._active = True

    def deactivate(self) -> None:
        self._active = False

    def report(self) -> IntegrityReport:
        return IntegrityReport(self.violation_count, self.should_warn)

    def record_visibility_change(self, is_hidden: bool) -> IntegrityReport:
        """
        Record a visibility event.

        Only a change from visible to hidden counts as a violation; repeated
        hidden events while already hidden are ignored. Inert when inactive.
        """
        if not self._active:
            return self.report()

        if is_hidden and not self._hidden:
            self.violation_count += 1
            if self.violation_count == self.warn_threshold:
                logger.warning(
                    "Integrity threshold reached: %d tab switch(es)", self.violation_count
                )
        self._hidden = bool(is_hidden)
        return self.report()
