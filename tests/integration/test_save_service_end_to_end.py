"""End-to-end: definitions file, in-memory registry, trigger, saved configuration file."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from fakes import TRIGGER

from varsave.app.bootstrap import SaveServiceContext, create_context, start_trigger_loop
from varsave.app.settings import SaveServiceSettings
from varsave.infrastructure.adapters.memory_registry import InMemoryVariableRegistry

_DEFINITIONS = """\
variables:
  - name: brightness
    type: uint16
    value: 50
  - name: volume
    type: uint16
    instance: 2
    value: 30
  - name: hostname
    value: device
  - name: /sys/config/save
    type: uint16
    persistent: false
"""


@pytest.fixture
def settings(tmp_path: Path) -> SaveServiceSettings:
    variables = tmp_path / "variables.yaml"
    variables.write_text(_DEFINITIONS)
    return SaveServiceSettings(
        output_file=tmp_path / "out" / "usersettings.cfg",
        variables_file=variables,
        journal_file=tmp_path / "saves.log",
        fsync=False,
    )


async def _run_until_saved(context: SaveServiceContext, saves: int = 1) -> None:
    loop = await start_trigger_loop(context)
    task = asyncio.create_task(loop.run_forever())

    async def _poll() -> None:
        while loop.status.saves_completed < saves:
            await asyncio.sleep(0.01)

    try:
        await asyncio.wait_for(_poll(), 2.0)
    finally:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)


class TestSaveServiceEndToEnd:
    async def test_trigger_writes_dirty_variables(self, settings: SaveServiceSettings) -> None:
        context = await create_context(settings)
        registry = context.registry
        assert isinstance(registry, InMemoryVariableRegistry)

        registry.set("brightness", 80)
        registry.set_text("volume", "45", instance_id=2)
        save = asyncio.get_running_loop().call_later(0.05, registry.set, TRIGGER, 1)
        try:
            await _run_until_saved(context)
        finally:
            save.cancel()
            await context.close()

        assert settings.output_file.read_text() == "@config User Settings\n\nbrightness=80\n[2]volume=45\n"
        assert not settings.output_file.with_name("usersettings.cfg.tmp").exists()
        journal = settings.journal_file.read_text() if settings.journal_file else ""
        assert "save.started" in journal
        assert "save.completed" in journal

    async def test_modifying_other_variable_does_not_save(self, settings: SaveServiceSettings) -> None:
        context = await create_context(settings)
        registry = context.registry
        assert isinstance(registry, InMemoryVariableRegistry)
        loop = await start_trigger_loop(context)
        task = asyncio.create_task(loop.run_forever())

        registry.set("brightness", 80)
        await asyncio.sleep(0.05)
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        await context.close()

        assert not settings.output_file.exists()

    async def test_saved_settings_restored_on_restart(self, settings: SaveServiceSettings) -> None:
        settings.output_file.parent.mkdir(parents=True)
        settings.output_file.write_text("@config User Settings\n\nbrightness=90\n[2]volume=12\n")

        context = await create_context(settings)
        registry = context.registry
        assert isinstance(registry, InMemoryVariableRegistry)
        assert registry.get("brightness") == 90
        assert registry.get("volume", instance_id=2) == 12

        registry.set("hostname", "kitchen")
        save = asyncio.get_running_loop().call_later(0.05, registry.set, TRIGGER, 1)
        try:
            await _run_until_saved(context)
        finally:
            save.cancel()
            await context.close()

        assert settings.output_file.read_text() == (
            "@config User Settings\n\nbrightness=90\n[2]volume=12\nhostname=kitchen\n"
        )

    async def test_multiline_value_does_not_lose_other_settings(self, settings: SaveServiceSettings) -> None:
        context = await create_context(settings)
        registry = context.registry
        assert isinstance(registry, InMemoryVariableRegistry)
        registry.set("brightness", 80)
        registry.set("hostname", "hello\nworld")
        save = asyncio.get_running_loop().call_later(0.05, registry.set, TRIGGER, 1)
        try:
            await _run_until_saved(context)
        finally:
            save.cancel()
            await context.close()

        restarted = await create_context(settings)
        registry = restarted.registry
        assert isinstance(registry, InMemoryVariableRegistry)

        assert registry.get("brightness") == 80
        assert registry.is_dirty("brightness")
        assert registry.get("hostname") == "hello"
        await restarted.close()
