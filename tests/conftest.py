"""Shared test fixtures for the save service test suite."""

from __future__ import annotations

from pathlib import Path

import pytest
from fakes import TRIGGER, snapshot

from varsave.domain.enums import VarType
from varsave.domain.models import TriggerSubscription, VariableSnapshot
from varsave.domain.types import VarHandle
from varsave.infrastructure.adapters.memory_registry import InMemoryVariableRegistry


@pytest.fixture
def trigger_subscription() -> TriggerSubscription:
    return TriggerSubscription(name=TRIGGER, handle=VarHandle(1))


@pytest.fixture
def sample_snapshots() -> list[VariableSnapshot]:
    """The dirty set from the reference scenario."""
    return [snapshot("brightness", "80"), snapshot("volume", "45", instance_id=2)]


@pytest.fixture
def memory_registry() -> InMemoryVariableRegistry:
    """In-memory registry with a trigger and two persistent settings."""
    registry = InMemoryVariableRegistry()
    registry.define(TRIGGER, VarType.UINT16, persistent=False)
    registry.define("brightness", VarType.UINT16, value=50)
    registry.define("volume", VarType.UINT16, value=30, instance_id=2)
    return registry


@pytest.fixture
def output_file(tmp_path: Path) -> Path:
    return tmp_path / "usersettings.cfg"
