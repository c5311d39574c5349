"""Config file reader — parse previously saved ``@config`` files back into entries."""

from __future__ import annotations

import logging
import re
from pathlib import Path

import aiofiles

from varsave.domain.errors import ConfigFormatError
from varsave.domain.models import ConfigEntry
from varsave.domain.types import InstanceId

logger = logging.getLogger(__name__)

_INSTANCE_PREFIX = re.compile(r"^\[(\d+)\]")


def parse_line(line: str, line_number: int = 0) -> ConfigEntry | None:
    """Parse one line. Returns None for blank lines, comments, and ``@`` directives.

    Raises ConfigFormatError if the line is not ``name=value`` or ``[n]name=value``.
    """
    text = line.rstrip("\r\n")
    stripped = text.strip()
    if not stripped or stripped.startswith("#") or stripped.startswith("@"):
        return None

    instance_id = 0
    body = text.lstrip()
    if body.startswith("["):
        match = _INSTANCE_PREFIX.match(body)
        if match is None:
            raise ConfigFormatError(f"line {line_number}: malformed instance qualifier: {stripped}", line_number)
        instance_id = int(match.group(1))
        body = body[match.end() :]

    name, sep, value = body.partition("=")
    name = name.strip()
    if not sep:
        raise ConfigFormatError(f"line {line_number}: expected name=value: {stripped}", line_number)
    if not name:
        raise ConfigFormatError(f"line {line_number}: missing variable name: {stripped}", line_number)

    return ConfigEntry(name=name, string_value=value, instance_id=InstanceId(instance_id))


def parse_config(content: str, skip_malformed: bool = False) -> list[ConfigEntry]:
    """Parse the full text of a configuration file, preserving line order.

    With ``skip_malformed``, a bad line is logged and dropped instead of
    failing the whole file.
    """
    entries: list[ConfigEntry] = []
    for number, line in enumerate(content.splitlines(), start=1):
        try:
            entry = parse_line(line, number)
        except ConfigFormatError as exc:
            if not skip_malformed:
                raise
            logger.warning("Skipping saved setting: %s", exc.message)
            continue
        if entry is not None:
            entries.append(entry)
    return entries


async def read_config(path: Path, skip_malformed: bool = False) -> list[ConfigEntry] | None:
    """Read and parse a configuration file. Returns None if it does not exist."""
    try:
        async with aiofiles.open(path, encoding="utf-8") as f:
            content = await f.read()
    except FileNotFoundError:
        return None
    entries = parse_config(content, skip_malformed=skip_malformed)
    logger.debug("Read %d entries from %s", len(entries), path)
    return entries
