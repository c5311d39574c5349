"""Trigger subscription — resolve the trigger variable and request notifications."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from varsave.domain.errors import RegistryError, RegistryUnavailableError, SubscriptionError, TriggerResolutionError
from varsave.domain.models import TriggerSubscription

if TYPE_CHECKING:
    from varsave.domain.ports import VariableRegistryPort

logger = logging.getLogger(__name__)


async def subscribe_trigger(registry: VariableRegistryPort, name: str) -> TriggerSubscription:
    """Resolve ``name`` once and subscribe to its MODIFIED notifications.

    Raises:
        RegistryUnavailableError: the registry connection cannot be used.
        TriggerResolutionError: the name does not resolve.
        SubscriptionError: the registry rejected the notification request.
    """
    try:
        handle = await registry.resolve(name)
    except RegistryError as exc:
        raise RegistryUnavailableError(f"Cannot access variable registry: {exc.message}") from exc
    if handle is None:
        raise TriggerResolutionError(f"Cannot find trigger variable: {name}")

    try:
        await registry.subscribe_modified(handle)
    except SubscriptionError as exc:
        raise SubscriptionError(f"Notification request failed for {name}: {exc.message}") from exc

    logger.info("Subscribed to trigger variable %s (handle=%d)", name, handle)
    return TriggerSubscription(name=name, handle=handle)
