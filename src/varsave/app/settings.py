"""Save service settings — Pydantic BaseSettings loaded from environment and .env."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_OUTPUT_FILE = Path("/tmp/usersettings.cfg")
DEFAULT_TRIGGER_VARIABLE = "/sys/config/save"


class SaveServiceSettings(BaseSettings):
    """Save service configuration.

    Every field can be set from a ``VARSAVE_``-prefixed environment variable
    (e.g. ``VARSAVE_OUTPUT_FILE``) or the ``.env`` file. Command-line flags
    override both.
    """

    # Core
    output_file: Path = Field(default=DEFAULT_OUTPUT_FILE, description="Configuration file written on each save")
    trigger_variable: str = Field(
        default=DEFAULT_TRIGGER_VARIABLE, description="Variable whose modification triggers a save"
    )
    verbose: bool = Field(default=False, description="Log a notice at the start of every save")
    fsync: bool = Field(default=True, description="fsync the staging file before renaming it into place")

    # Registry
    variables_file: Path | None = Field(default=None, description="YAML variable definitions for the registry")
    restore_on_start: bool = Field(default=True, description="Re-apply settings from an existing output file")
    console: bool = Field(default=False, description="Accept name=value lines on stdin")

    # Observability
    journal_file: Path | None = Field(default=None, description="Append save events to this file")

    model_config = {"env_prefix": "VARSAVE_", "env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @field_validator("trigger_variable")
    @classmethod
    def _strip_trigger(cls, value: str) -> str:
        return value.strip()
