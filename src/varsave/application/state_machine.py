"""Trigger loop state machine — transition execution with bookkeeping updates."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime

from varsave.domain.errors import SaveServiceError
from varsave.domain.models import ServiceStatus
from varsave.domain.transitions import TRANSITIONS, is_valid_transition


class SaveLoopStateMachine:
    """Applies FSM transitions to ServiceStatus, returning a new immutable instance."""

    def validate_transition(self, status: ServiceStatus, event: str) -> bool:
        """Check whether a transition is valid without applying it."""
        return is_valid_transition(status.phase, event)

    def apply_transition(self, status: ServiceStatus, event: str, error: str = "") -> ServiceStatus:
        """Apply a transition event to the current status, returning a new ServiceStatus.

        Raises SaveServiceError if the transition is not defined in the table.
        """
        if not is_valid_transition(status.phase, event):
            raise SaveServiceError(f"Invalid transition: ({status.phase.value}, {event})")

        now = datetime.now(UTC).isoformat()
        next_phase = TRANSITIONS[(status.phase, event)]

        if event == "event_ignored":
            return replace(status, events_ignored=status.events_ignored + 1, updated_at=now)

        if event == "save_succeeded":
            return replace(
                status,
                phase=next_phase,
                saves_completed=status.saves_completed + 1,
                last_error="",
                updated_at=now,
            )

        if event == "save_failed":
            return replace(
                status,
                phase=next_phase,
                saves_failed=status.saves_failed + 1,
                last_error=error,
                updated_at=now,
            )

        return replace(status, phase=next_phase, updated_at=now)
