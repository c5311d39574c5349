"""Tests for SaveServiceSettings — configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from varsave.app.settings import DEFAULT_OUTPUT_FILE, DEFAULT_TRIGGER_VARIABLE, SaveServiceSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("OUTPUT_FILE", "TRIGGER_VARIABLE", "VERBOSE", "FSYNC", "CONSOLE", "RESTORE_ON_START"):
        monkeypatch.delenv(f"VARSAVE_{name}", raising=False)


class TestSaveServiceSettings:
    def test_default_values(self) -> None:
        settings = SaveServiceSettings()
        assert settings.output_file == DEFAULT_OUTPUT_FILE == Path("/tmp/usersettings.cfg")
        assert settings.trigger_variable == DEFAULT_TRIGGER_VARIABLE == "/sys/config/save"
        assert settings.verbose is False
        assert settings.fsync is True
        assert settings.restore_on_start is True
        assert settings.console is False
        assert settings.variables_file is None
        assert settings.journal_file is None

    def test_custom_values(self) -> None:
        settings = SaveServiceSettings(output_file=Path("/data/user.cfg"), trigger_variable="/sys/save", verbose=True)
        assert settings.output_file == Path("/data/user.cfg")
        assert settings.trigger_variable == "/sys/save"
        assert settings.verbose is True

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VARSAVE_OUTPUT_FILE", "/var/lib/device/user.cfg")
        monkeypatch.setenv("VARSAVE_VERBOSE", "true")
        monkeypatch.setenv("VARSAVE_FSYNC", "0")

        settings = SaveServiceSettings()

        assert settings.output_file == Path("/var/lib/device/user.cfg")
        assert settings.verbose is True
        assert settings.fsync is False

    def test_env_file(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("VARSAVE_TRIGGER_VARIABLE=/sys/config/commit\n")
        assert SaveServiceSettings().trigger_variable == "/sys/config/commit"

    def test_trigger_is_stripped(self) -> None:
        assert SaveServiceSettings(trigger_variable="  /sys/save \n").trigger_variable == "/sys/save"

    def test_invalid_bool_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SaveServiceSettings(verbose="loud")  # type: ignore[arg-type]
