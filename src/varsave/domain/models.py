"""Domain models — frozen dataclasses for registry snapshots, save targets, and service state."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from varsave.domain.enums import EventKind, LoopPhase, VarType
from varsave.domain.types import NO_INSTANCE, InstanceId, VarHandle

STAGING_SUFFIX = ".tmp"


def _freeze_mapping(m: Mapping[str, Any]) -> MappingProxyType[str, Any]:
    """Wrap a mutable mapping in MappingProxyType for immutability."""
    if isinstance(m, MappingProxyType):
        return m
    return MappingProxyType(dict(m))


@dataclass(frozen=True)
class VariableSnapshot:
    """One item yielded by the registry's dirty-set iterator."""

    name: str
    var_type: VarType
    value: Any
    instance_id: InstanceId = NO_INSTANCE

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("name must not be empty")
        if self.instance_id < 0:
            raise ValueError(f"instance_id must be >= 0, got {self.instance_id}")


@dataclass(frozen=True)
class ConfigEntry:
    """A single variable ready to be written as one configuration line.

    Lives only for the duration of one save cycle.
    """

    name: str
    string_value: str
    instance_id: InstanceId = NO_INSTANCE
    raw_value: Any = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("name must not be empty")
        if self.instance_id < 0:
            raise ValueError(f"instance_id must be >= 0, got {self.instance_id}")


@dataclass(frozen=True)
class RegistryEvent:
    """Notification received from the registry event channel."""

    kind: EventKind
    subject: VarHandle


@dataclass(frozen=True)
class TriggerSubscription:
    """The single trigger variable whose modification gates saves."""

    name: str
    handle: VarHandle

    def matches(self, event: RegistryEvent) -> bool:
        """True when the event is a modification of the trigger variable."""
        return event.kind is EventKind.MODIFIED and event.subject == self.handle


@dataclass(frozen=True)
class SaveTarget:
    """The durable configuration file and its sibling staging path."""

    final_path: Path

    @property
    def staging_path(self) -> Path:
        return self.final_path.with_name(self.final_path.name + STAGING_SUFFIX)


@dataclass(frozen=True)
class SaveReport:
    """Outcome of one successful save cycle."""

    path: Path
    entries_written: int
    skipped: tuple[str, ...] = field(default_factory=tuple)
    duration_seconds: float = 0.0

    def __post_init__(self) -> None:
        if self.entries_written < 0:
            raise ValueError("entries_written must be non-negative")
        if self.duration_seconds < 0:
            raise ValueError("duration_seconds must be non-negative")


@dataclass(frozen=True)
class ServiceStatus:
    """Immutable snapshot of the trigger loop bookkeeping."""

    phase: LoopPhase = LoopPhase.WAITING_FOR_EVENT
    saves_completed: int = 0
    saves_failed: int = 0
    events_ignored: int = 0
    last_error: str = ""
    updated_at: str = ""


@dataclass(frozen=True)
class SaveEvent:
    """Structured event emitted via EventBus for observability."""

    timestamp: str
    event_name: str
    data: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if not isinstance(self.data, MappingProxyType):
            object.__setattr__(self, "data", _freeze_mapping(self.data))
        if not self.event_name:
            raise ValueError("event_name must not be empty")
