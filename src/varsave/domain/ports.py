"""Domain ports — Protocol interfaces for hexagonal architecture boundaries."""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator
from typing import Protocol, runtime_checkable

from varsave.domain.models import RegistryEvent, VariableSnapshot
from varsave.domain.types import VarHandle


@runtime_checkable
class VariableRegistryPort(Protocol):
    """Client connection to the runtime variable registry."""

    async def resolve(self, name: str) -> VarHandle | None:
        """Look up a variable handle by name. Returns None if not found."""
        ...

    async def subscribe_modified(self, handle: VarHandle) -> None:
        """Request MODIFIED notifications for a variable.

        Raises:
            SubscriptionError: the registry rejected the request.
        """
        ...

    async def wait_for_event(self) -> RegistryEvent:
        """Block until the next notification arrives on the event channel."""
        ...

    def iterate_dirty(self) -> AsyncIterator[VariableSnapshot]:
        """Yield every variable flagged dirty, in registry order.

        Each call starts a fresh, finite enumeration.
        """
        ...

    def value_to_string(self, snapshot: VariableSnapshot) -> str:
        """Render a snapshot value as text.

        Raises:
            ValueConversionError: the value has no text form.
        """
        ...

    async def close(self) -> None:
        """Release the registry connection."""
        ...


@runtime_checkable
class ConfigWriterPort(Protocol):
    """Publish a batch of configuration lines as one atomic file replacement."""

    async def commit(self, lines: AsyncIterable[str]) -> int: ...
