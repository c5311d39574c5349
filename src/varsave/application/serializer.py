"""ConfigSerializer — turn the registry's dirty set into configuration file lines."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

from varsave.domain.enums import VarType
from varsave.domain.errors import ValueConversionError
from varsave.domain.models import ConfigEntry, VariableSnapshot

if TYPE_CHECKING:
    from varsave.application.event_bus import EventBus
    from varsave.domain.ports import VariableRegistryPort

logger = logging.getLogger(__name__)


def format_entry(entry: ConfigEntry) -> str:
    """Format one entry as ``name=value`` or ``[instance]name=value``, newline-terminated."""
    if entry.instance_id == 0:
        return f"{entry.name}={entry.string_value}\n"
    return f"[{entry.instance_id}]{entry.name}={entry.string_value}\n"


class DirtyBatch:
    """One enumeration of the dirty set, consumed once by the commit writer.

    Entries whose value cannot be rendered are skipped and recorded in
    ``skipped``; the rest of the batch is still produced.
    """

    def __init__(self, registry: VariableRegistryPort, event_bus: EventBus | None = None) -> None:
        self._registry = registry
        self._event_bus = event_bus
        self.skipped: list[str] = []

    def __aiter__(self) -> AsyncIterator[str]:
        return self._lines()

    async def _lines(self) -> AsyncIterator[str]:
        async for snapshot in self._registry.iterate_dirty():
            entry = await self._to_entry(snapshot)
            if entry is None:
                continue
            yield format_entry(entry)

    async def _to_entry(self, snapshot: VariableSnapshot) -> ConfigEntry | None:
        if snapshot.var_type is VarType.STR and isinstance(snapshot.value, str):
            text = snapshot.value
        else:
            try:
                text = self._registry.value_to_string(snapshot)
            except ValueConversionError as exc:
                logger.warning("Cannot save %s: %s", snapshot.name, exc.message)
                self.skipped.append(snapshot.name)
                if self._event_bus is not None:
                    await self._event_bus.emit("save.entry_skipped", name=snapshot.name, reason=exc.message)
                return None

        return ConfigEntry(
            name=snapshot.name,
            string_value=text,
            instance_id=snapshot.instance_id,
            raw_value=snapshot.value,
        )


class ConfigSerializer:
    """Serializer bound to a registry connection."""

    def __init__(self, registry: VariableRegistryPort, event_bus: EventBus | None = None) -> None:
        self._registry = registry
        self._event_bus = event_bus

    def batch(self) -> DirtyBatch:
        """Start a fresh enumeration of the dirty set."""
        return DirtyBatch(self._registry, self._event_bus)

    async def render(self) -> str:
        """Serialize the whole dirty set into a single string (no header)."""
        return "".join([line async for line in self.batch()])
