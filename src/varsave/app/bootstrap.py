"""Bootstrap — composition root wiring the registry, writer, and trigger loop."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from varsave.app.settings import SaveServiceSettings
from varsave.application.event_bus import EventBus
from varsave.application.subscription import subscribe_trigger
from varsave.application.trigger_loop import TriggerLoop
from varsave.domain.enums import VarType
from varsave.domain.errors import ConfigurationError
from varsave.domain.ports import VariableRegistryPort
from varsave.infrastructure.adapters.config_file_reader import read_config
from varsave.infrastructure.adapters.config_file_writer import ConfigFileWriter
from varsave.infrastructure.adapters.memory_registry import InMemoryVariableRegistry
from varsave.infrastructure.adapters.registry_console import RegistryConsole
from varsave.infrastructure.adapters.variable_definitions import load_into_registry
from varsave.infrastructure.listeners.save_journal_writer import SaveJournalWriter

logger = logging.getLogger(__name__)


@dataclass
class SaveServiceContext:
    """Process-wide service state, passed explicitly to everything that needs it.

    Constructed at startup, read by the trigger loop, released on shutdown.
    Not a frozen dataclass: the trigger loop is attached once subscribed.
    """

    settings: SaveServiceSettings
    registry: VariableRegistryPort
    writer: ConfigFileWriter
    event_bus: EventBus
    console: RegistryConsole | None = field(default=None)
    trigger_loop: TriggerLoop | None = field(default=None)

    async def close(self) -> None:
        """Release the registry connection."""
        await self.registry.close()


async def create_context(
    settings: SaveServiceSettings | None = None,
    registry: VariableRegistryPort | None = None,
) -> SaveServiceContext:
    """Wire all adapters and return a context ready for ``start_trigger_loop``.

    If no registry is given, an in-memory registry is built from the
    settings' variable definitions and previously saved values.
    """
    if settings is None:
        settings = SaveServiceSettings()

    _validate_settings(settings)

    console: RegistryConsole | None = None
    if registry is None:
        memory_registry = await _build_memory_registry(settings)
        if settings.console:
            console = RegistryConsole(memory_registry)
        registry = memory_registry
    elif settings.console:
        logger.warning("Console input requires the in-memory registry, console disabled")

    event_bus = EventBus()
    if settings.journal_file is not None:
        event_bus.subscribe(SaveJournalWriter(log_path=settings.journal_file))

    writer = ConfigFileWriter(final_path=settings.output_file, fsync=settings.fsync)

    logger.info(
        "Save service configured: output=%s, trigger=%s, verbose=%s",
        settings.output_file,
        settings.trigger_variable,
        settings.verbose,
    )

    return SaveServiceContext(
        settings=settings,
        registry=registry,
        writer=writer,
        event_bus=event_bus,
        console=console,
    )


async def start_trigger_loop(context: SaveServiceContext) -> TriggerLoop:
    """Resolve and subscribe to the trigger variable, then build the trigger loop.

    Raises StartupError (TriggerResolutionError, SubscriptionError) if the
    loop must not be entered.
    """
    subscription = await subscribe_trigger(context.registry, context.settings.trigger_variable)
    context.trigger_loop = TriggerLoop(
        registry=context.registry,
        writer=context.writer,
        subscription=subscription,
        output_path=context.settings.output_file,
        event_bus=context.event_bus,
        verbose=context.settings.verbose,
    )
    return context.trigger_loop


async def _build_memory_registry(settings: SaveServiceSettings) -> InMemoryVariableRegistry:
    registry = InMemoryVariableRegistry()

    if settings.variables_file is not None:
        await load_into_registry(settings.variables_file, registry)
    else:
        # Without definitions only the trigger exists; with them it must be declared.
        registry.define(settings.trigger_variable, VarType.UINT16, persistent=False)
        logger.debug("Defined trigger variable %s", settings.trigger_variable)

    if settings.restore_on_start:
        try:
            entries = await read_config(settings.output_file, skip_malformed=True)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Not restoring settings from %s: %s", settings.output_file, exc)
            entries = None
        if entries is not None:
            restored = registry.restore(entries)
            logger.info("Restored %d of %d saved settings from %s", restored, len(entries), settings.output_file)

    return registry


def _validate_settings(settings: SaveServiceSettings) -> None:
    """Validate critical settings at boot time.

    Raises ConfigurationError if the service cannot run.
    """
    if not settings.trigger_variable:
        raise ConfigurationError("No trigger variable specified")

    if not str(settings.output_file).strip() or settings.output_file.name in ("", ".", ".."):
        raise ConfigurationError(f"Invalid output file: {settings.output_file}")

    if settings.variables_file is not None and not settings.variables_file.is_file():
        raise ConfigurationError(f"Variable definitions file not found: {settings.variables_file}")
