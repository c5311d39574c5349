"""SaveJournalWriter — append save lifecycle events to a journal file."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import aiofiles

from varsave.domain.models import SaveEvent

logger = logging.getLogger(__name__)


class SaveJournalWriter:
    """Append formatted event entries to a journal file.

    Format: ``<ISO8601> | <event_name> | <json_data>``
    """

    def __init__(self, log_path: Path) -> None:
        self._log_path = log_path

    async def __call__(self, event: SaveEvent) -> None:
        """Append event to the journal file."""
        data_str = json.dumps(dict(event.data), separators=(",", ":"), sort_keys=True)
        line = f"{event.timestamp} | {event.event_name} | {data_str}\n"

        self._log_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self._log_path, "a") as f:
            await f.write(line)
