"""Variable definitions — load registry variables from a YAML file.

File layout::

    variables:
      - name: brightness
        type: uint16
        value: 50
      - name: volume
        type: uint16
        instance: 2
      - name: /sys/config/save
        type: uint16
        persistent: false
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from varsave.domain.enums import VarType
from varsave.domain.errors import ConfigurationError, ValueConversionError
from varsave.domain.values import parse_value
from varsave.infrastructure.adapters.memory_registry import InMemoryVariableRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariableDefinition:
    """One variable declaration from the definitions file."""

    name: str
    var_type: VarType
    value: Any = None
    instance_id: int = 0
    persistent: bool = True


def parse_definitions(data: Any) -> list[VariableDefinition]:
    """Validate a decoded YAML document and return its variable definitions.

    Raises ConfigurationError on any structural problem.
    """
    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("variables", [])
    if not isinstance(data, list):
        raise ConfigurationError("variable definitions must be a list or a mapping with a 'variables' list")

    definitions: list[VariableDefinition] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ConfigurationError(f"variable #{index} is not a mapping")
        name = item.get("name")
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"variable #{index} has no name")
        type_name = str(item.get("type", VarType.STR.value)).lower()
        try:
            var_type = VarType(type_name)
        except ValueError as exc:
            raise ConfigurationError(f"variable {name}: unknown type {type_name!r}") from exc
        instance_id = item.get("instance", 0)
        if isinstance(instance_id, bool) or not isinstance(instance_id, int) or instance_id < 0:
            raise ConfigurationError(f"variable {name}: instance must be a non-negative integer")
        definitions.append(
            VariableDefinition(
                name=name,
                var_type=var_type,
                value=item.get("value"),
                instance_id=instance_id,
                persistent=bool(item.get("persistent", True)),
            )
        )
    return definitions


def load_definitions(path: Path) -> list[VariableDefinition]:
    """Read and validate a definitions file (blocking I/O)."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read variable definitions {path}: {exc}") from exc
    if not text.strip():
        return []
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    return parse_definitions(data)


def apply_definitions(registry: InMemoryVariableRegistry, definitions: list[VariableDefinition]) -> int:
    """Define every variable in the registry. Returns the number defined."""
    for definition in definitions:
        value = definition.value
        try:
            if isinstance(value, str) and definition.var_type is not VarType.STR:
                value = parse_value(definition.var_type, value)
            registry.define(
                definition.name,
                definition.var_type,
                value=value,
                instance_id=definition.instance_id,
                persistent=definition.persistent,
            )
        except (ValueError, ValueConversionError) as exc:
            raise ConfigurationError(f"variable {definition.name}: {exc}") from exc
    return len(definitions)


async def load_into_registry(path: Path, registry: InMemoryVariableRegistry) -> int:
    """Load a definitions file into the registry, offloading file I/O to a thread."""
    definitions = await asyncio.to_thread(load_definitions, path)
    count = apply_definitions(registry, definitions)
    logger.info("Defined %d variables from %s", count, path)
    return count
