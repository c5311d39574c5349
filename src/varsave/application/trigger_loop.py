"""TriggerLoop — wait for the trigger variable to change, then save all dirty variables."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING

from varsave.application.serializer import ConfigSerializer
from varsave.application.state_machine import SaveLoopStateMachine
from varsave.domain.errors import SaveServiceError
from varsave.domain.models import SaveReport, ServiceStatus, TriggerSubscription

if TYPE_CHECKING:
    from varsave.application.event_bus import EventBus
    from varsave.domain.ports import ConfigWriterPort, VariableRegistryPort

logger = logging.getLogger(__name__)


class TriggerLoop:
    """Single-consumer loop over the registry event channel.

    Only a MODIFIED event for the subscribed trigger handle starts a save.
    Saves run to completion before the next event is read, and a failed save
    never stops the loop.
    """

    def __init__(
        self,
        registry: VariableRegistryPort,
        writer: ConfigWriterPort,
        subscription: TriggerSubscription,
        output_path: Path,
        event_bus: EventBus | None = None,
        verbose: bool = False,
    ) -> None:
        self._registry = registry
        self._writer = writer
        self._subscription = subscription
        self._output_path = output_path
        self._event_bus = event_bus
        self._verbose = verbose
        self._serializer = ConfigSerializer(registry, event_bus)
        self._fsm = SaveLoopStateMachine()
        self._status = ServiceStatus()

    @property
    def status(self) -> ServiceStatus:
        return self._status

    @property
    def subscription(self) -> TriggerSubscription:
        return self._subscription

    async def run_forever(self) -> None:
        """Wait for events indefinitely. Returns only through task cancellation."""
        logger.info("Waiting for %s to be modified", self._subscription.name)
        while True:
            await self.wait_once()

    async def wait_once(self) -> SaveReport | None:
        """Consume one registry event; save if it is the trigger.

        Returns the SaveReport for a successful save, otherwise None.
        """
        event = await self._registry.wait_for_event()
        if not self._subscription.matches(event):
            logger.debug("Ignoring %s event for handle %d", event.kind.value, event.subject)
            self._status = self._fsm.apply_transition(self._status, "event_ignored")
            return None

        self._status = self._fsm.apply_transition(self._status, "trigger_matched")
        return await self._save_guarded()

    async def save(self) -> SaveReport:
        """Run one full save transaction: enumerate, serialize, commit.

        Raises SaveServiceError (or the underlying exception) on failure.
        """
        if self._verbose:
            logger.info("Saving all dirty variables")
        else:
            logger.debug("Saving all dirty variables")
        await self._emit("save.started", path=str(self._output_path))

        started = time.monotonic()
        batch = self._serializer.batch()
        written = await self._writer.commit(batch)
        report = SaveReport(
            path=self._output_path,
            entries_written=written,
            skipped=tuple(batch.skipped),
            duration_seconds=time.monotonic() - started,
        )

        logger.info(
            "Saved %d variables to %s (%d skipped) in %.3fs",
            report.entries_written,
            report.path,
            len(report.skipped),
            report.duration_seconds,
        )
        await self._emit(
            "save.completed",
            path=str(report.path),
            entries_written=report.entries_written,
            skipped=list(report.skipped),
        )
        return report

    async def _save_guarded(self) -> SaveReport | None:
        try:
            report = await self.save()
        except SaveServiceError as exc:
            logger.error("Failed to create configuration file: %s (%s)", self._output_path, exc.message)
            await self._fail(exc.message)
            return None
        except Exception as exc:
            logger.exception("Failed to create configuration file: %s", self._output_path)
            await self._fail(str(exc) or type(exc).__name__)
            return None

        self._status = self._fsm.apply_transition(self._status, "save_succeeded")
        return report

    async def _fail(self, reason: str) -> None:
        self._status = self._fsm.apply_transition(self._status, "save_failed", error=reason)
        await self._emit("save.failed", path=str(self._output_path), error=reason)

    async def _emit(self, event_name: str, **data: object) -> None:
        if self._event_bus is not None:
            await self._event_bus.emit(event_name, **data)
