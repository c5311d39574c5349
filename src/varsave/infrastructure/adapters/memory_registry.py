"""InMemoryVariableRegistry — in-process VariableRegistryPort implementation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from varsave.domain.enums import EventKind, VarType
from varsave.domain.errors import RegistryError, SubscriptionError, ValueConversionError
from varsave.domain.models import ConfigEntry, RegistryEvent, VariableSnapshot
from varsave.domain.types import InstanceId, VarHandle
from varsave.domain.values import check_value, parse_value, value_to_string

if TYPE_CHECKING:
    from varsave.domain.ports import VariableRegistryPort

logger = logging.getLogger(__name__)


@dataclass
class _Variable:
    handle: VarHandle
    name: str
    instance_id: InstanceId
    var_type: VarType
    value: Any
    persistent: bool = True
    dirty: bool = False


class InMemoryVariableRegistry:
    """Typed variable store with dirty tracking and a single event channel.

    Satisfies the VariableRegistryPort protocol. Variables are keyed by
    ``(name, instance_id)``; handles are assigned in definition order, which
    is also the dirty-set enumeration order. Writing a persistent variable
    marks it dirty. Writing any variable with a MODIFIED subscription queues
    an event on the channel consumed by ``wait_for_event``.
    """

    if TYPE_CHECKING:
        _protocol_check: VariableRegistryPort

    def __init__(self) -> None:
        self._variables: dict[VarHandle, _Variable] = {}
        self._by_key: dict[tuple[str, int], VarHandle] = {}
        self._notify: set[VarHandle] = set()
        self._events: asyncio.Queue[RegistryEvent] = asyncio.Queue()
        self._next_handle = 1
        self._closed = False

    # -- registry management (not part of the port) -------------------------

    def define(
        self,
        name: str,
        var_type: VarType,
        value: Any = None,
        instance_id: int = 0,
        persistent: bool = True,
        dirty: bool = False,
    ) -> VarHandle:
        """Create a variable and return its handle.

        ``value`` defaults to the zero value of the type. Raises ValueError
        for duplicate definitions and ValueConversionError for a default that
        does not fit the type.
        """
        self._ensure_open()
        if not name:
            raise ValueError("variable name must not be empty")
        if instance_id < 0:
            raise ValueError(f"instance_id must be >= 0, got {instance_id}")
        key = (name, instance_id)
        if key in self._by_key:
            raise ValueError(f"variable already defined: {_label(name, instance_id)}")

        if value is None:
            value = _zero_value(var_type)
        if var_type is not VarType.BLOB:
            check_value(var_type, value)

        handle = VarHandle(self._next_handle)
        self._next_handle += 1
        self._variables[handle] = _Variable(
            handle=handle,
            name=name,
            instance_id=InstanceId(instance_id),
            var_type=var_type,
            value=value,
            persistent=persistent,
            dirty=dirty and persistent,
        )
        self._by_key[key] = handle
        return handle

    def set(self, name: str, value: Any, instance_id: int = 0) -> VarHandle:
        """Assign a native value, mark the variable dirty, and notify subscribers."""
        variable = self._lookup(name, instance_id)
        if variable.var_type is not VarType.BLOB:
            check_value(variable.var_type, value)
        return self._assign(variable, value)

    def set_text(self, name: str, text: str, instance_id: int = 0) -> VarHandle:
        """Assign a value given in its text form."""
        variable = self._lookup(name, instance_id)
        return self._assign(variable, parse_value(variable.var_type, text))

    def get(self, name: str, instance_id: int = 0) -> Any:
        """Current value of a variable."""
        return self._lookup(name, instance_id).value

    def is_defined(self, name: str, instance_id: int = 0) -> bool:
        return (name, instance_id) in self._by_key

    def is_dirty(self, name: str, instance_id: int = 0) -> bool:
        return self._lookup(name, instance_id).dirty

    def clear_dirty(self) -> None:
        """Reset the dirty flag on every variable."""
        for variable in self._variables.values():
            variable.dirty = False

    def restore(self, entries: Iterable[ConfigEntry]) -> int:
        """Apply previously saved entries and mark them dirty. Returns the number applied.

        Entries for undefined variables or with unparsable values are skipped.
        No notifications are sent, so restoring never triggers a save.
        """
        self._ensure_open()
        applied = 0
        for entry in entries:
            handle = self._by_key.get((entry.name, entry.instance_id))
            if handle is None:
                logger.warning("Not restoring undefined variable %s", _label(entry.name, entry.instance_id))
                continue
            variable = self._variables[handle]
            try:
                variable.value = parse_value(variable.var_type, entry.string_value)
            except ValueConversionError as exc:
                logger.warning("Not restoring %s: %s", _label(entry.name, entry.instance_id), exc.message)
                continue
            variable.dirty = variable.persistent
            applied += 1
        return applied

    @property
    def pending_events(self) -> int:
        return self._events.qsize()

    # -- VariableRegistryPort ----------------------------------------------

    async def resolve(self, name: str) -> VarHandle | None:
        """Handle of ``name`` without an instance qualifier, else its first instance."""
        self._ensure_open()
        handle = self._by_key.get((name, 0))
        if handle is not None:
            return handle
        for variable in self._variables.values():
            if variable.name == name:
                return variable.handle
        return None

    async def subscribe_modified(self, handle: VarHandle) -> None:
        self._ensure_open()
        if handle not in self._variables:
            raise SubscriptionError(f"unknown variable handle {handle}")
        self._notify.add(handle)

    async def wait_for_event(self) -> RegistryEvent:
        self._ensure_open()
        return await self._events.get()

    async def iterate_dirty(self) -> AsyncIterator[VariableSnapshot]:
        self._ensure_open()
        snapshots = [
            VariableSnapshot(name=v.name, var_type=v.var_type, value=v.value, instance_id=v.instance_id)
            for v in self._variables.values()
            if v.dirty
        ]
        for snapshot in snapshots:
            yield snapshot

    def value_to_string(self, snapshot: VariableSnapshot) -> str:
        return value_to_string(snapshot.var_type, snapshot.value)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._notify.clear()
        logger.info("Registry connection closed")

    @property
    def closed(self) -> bool:
        return self._closed

    # -- internals -----------------------------------------------------------

    def _lookup(self, name: str, instance_id: int) -> _Variable:
        self._ensure_open()
        handle = self._by_key.get((name, instance_id))
        if handle is None:
            raise RegistryError(f"unknown variable: {_label(name, instance_id)}")
        return self._variables[handle]

    def _assign(self, variable: _Variable, value: Any) -> VarHandle:
        variable.value = value
        if variable.persistent:
            variable.dirty = True
        if variable.handle in self._notify:
            self._events.put_nowait(RegistryEvent(kind=EventKind.MODIFIED, subject=variable.handle))
        return variable.handle

    def _ensure_open(self) -> None:
        if self._closed:
            raise RegistryError("registry connection is closed")


def _label(name: str, instance_id: int) -> str:
    return f"[{instance_id}]{name}" if instance_id else name


def _zero_value(var_type: VarType) -> Any:
    if var_type is VarType.STR:
        return ""
    if var_type is VarType.FLOAT:
        return 0.0
    if var_type is VarType.BLOB:
        return b""
    return 0
