"""RegistryConsole — apply ``name=value`` lines from stdin to the in-memory registry."""

from __future__ import annotations

import asyncio
import logging
import sys
import threading
from collections.abc import Callable
from typing import TextIO

from varsave.domain.errors import ConfigFormatError, RegistryError, ValueConversionError
from varsave.infrastructure.adapters.config_file_reader import parse_line
from varsave.infrastructure.adapters.memory_registry import InMemoryVariableRegistry

logger = logging.getLogger(__name__)


class RegistryConsole:
    """Operator console for a standalone service.

    Each input line uses the saved-file syntax (``name=value`` or
    ``[instance]name=value``). Writing the trigger variable, e.g.
    ``/sys/config/save=1``, requests a save. Reads run in a background
    daemon thread and are applied on the event loop, so a blocked read
    never holds up shutdown.
    """

    def __init__(self, registry: InMemoryVariableRegistry, stream: TextIO | None = None) -> None:
        self._registry = registry
        self._readline: Callable[[], str] = (stream or sys.stdin).readline

    def apply(self, line: str) -> bool:
        """Apply one console line. Returns True if a variable was written."""
        try:
            entry = parse_line(line)
        except ConfigFormatError as exc:
            logger.warning("Ignoring console input: %s", exc.message)
            return False
        if entry is None:
            return False

        try:
            self._registry.set_text(entry.name, entry.string_value, instance_id=entry.instance_id)
        except (RegistryError, ValueConversionError) as exc:
            logger.warning("Cannot set %s: %s", entry.name, exc.message)
            return False
        logger.debug("Set %s=%s", entry.name, entry.string_value)
        return True

    def start(self, loop: asyncio.AbstractEventLoop) -> threading.Thread:
        """Start a daemon reader thread that applies lines on ``loop``."""
        thread = threading.Thread(target=self._pump, args=(loop,), name="registry-console", daemon=True)
        thread.start()
        return thread

    def _pump(self, loop: asyncio.AbstractEventLoop) -> None:
        for line in iter(self._readline, ""):
            try:
                loop.call_soon_threadsafe(self.apply, line)
            except RuntimeError:
                return
        logger.info("Console input closed")
