"""Trigger loop FSM transition table — pure data, no I/O."""

from types import MappingProxyType

from varsave.domain.enums import LoopPhase

# Transition table: (current_phase, event) -> next_phase
# Events: trigger_matched, event_ignored, save_succeeded, save_failed
TRANSITIONS: MappingProxyType[tuple[LoopPhase, str], LoopPhase] = MappingProxyType(
    {
        (LoopPhase.WAITING_FOR_EVENT, "trigger_matched"): LoopPhase.SAVING,
        (LoopPhase.WAITING_FOR_EVENT, "event_ignored"): LoopPhase.WAITING_FOR_EVENT,
        (LoopPhase.SAVING, "save_succeeded"): LoopPhase.WAITING_FOR_EVENT,
        (LoopPhase.SAVING, "save_failed"): LoopPhase.WAITING_FOR_EVENT,
    }
)

INITIAL_PHASE: LoopPhase = LoopPhase.WAITING_FOR_EVENT


def is_valid_transition(current: LoopPhase, event: str) -> bool:
    """Check whether a transition is defined in the table."""
    return (current, event) in TRANSITIONS


def get_next_phase(current: LoopPhase, event: str) -> LoopPhase | None:
    """Look up the next phase for a given (current, event) pair. Returns None if invalid."""
    return TRANSITIONS.get((current, event))
