"""ConfigFileWriter — crash-safe configuration file commit via staging file and atomic rename."""

from __future__ import annotations

import asyncio
import errno
import logging
import os
from collections.abc import AsyncIterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import aiofiles

from varsave.domain.errors import CommitError
from varsave.domain.models import SaveTarget

if TYPE_CHECKING:
    from varsave.domain.ports import ConfigWriterPort

logger = logging.getLogger(__name__)

CONFIG_HEADER = "@config User Settings\n\n"


def describe_os_error(exc: OSError) -> str:
    """Human-readable error kind, e.g. ``Permission denied (EACCES)``."""
    reason = exc.strerror or str(exc)
    code = errno.errorcode.get(exc.errno) if exc.errno is not None else None
    return f"{reason} ({code})" if code else reason


class ConfigFileWriter:
    """Writes a full configuration file next to the target, then renames it into place.

    Satisfies the ConfigWriterPort protocol. Readers of ``final_path`` only
    ever see the previous complete file or the new complete file.

    Sequence per commit::

        remove stale <final>.tmp   (missing is fine, other errors only logged)
        open <final>.tmp           (failure aborts the cycle)
        write header + lines       (failure aborts; final untouched)
        flush, fsync, close
        os.replace(<final>.tmp, <final>)
    """

    if TYPE_CHECKING:
        _protocol_check: ConfigWriterPort

    def __init__(self, final_path: Path, fsync: bool = True) -> None:
        self._target = SaveTarget(final_path=final_path)
        self._fsync = fsync

    @property
    def target(self) -> SaveTarget:
        return self._target

    async def commit(self, lines: AsyncIterable[str]) -> int:
        """Write the header and all lines, then publish atomically.

        Returns the number of lines written. Raises CommitError if the cycle
        has to be abandoned.
        """
        final = self._target.final_path
        staging = self._target.staging_path

        try:
            final.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CommitError(f"Cannot create directory {final.parent}: {describe_os_error(exc)}") from exc

        self._remove_stale(staging)

        try:
            f = await aiofiles.open(staging, "w", encoding="utf-8")
        except OSError as exc:
            raise CommitError(f"Cannot create {staging}: {describe_os_error(exc)}") from exc

        count = 0
        try:
            await self._write(f, CONFIG_HEADER, what="Header")
            async for line in lines:
                await self._write(f, line, what="Entry")
                count += 1
            await f.flush()
            if self._fsync:
                await asyncio.to_thread(os.fsync, f.fileno())
        except OSError as exc:
            raise CommitError(f"Write to {staging} failed: {describe_os_error(exc)}") from exc
        finally:
            await f.close()

        try:
            os.replace(staging, final)
        except OSError as exc:
            raise CommitError(f"Cannot rename {staging} to {final}: {describe_os_error(exc)}") from exc

        logger.debug("Published %s (%d entries)", final, count)
        return count

    @staticmethod
    async def _write(f: Any, text: str, what: str) -> None:
        written = await f.write(text)
        if written is not None and written != len(text):
            raise CommitError(f"{what} output failed: short write ({written} of {len(text)})")

    @staticmethod
    def _remove_stale(staging: Path) -> None:
        """Best-effort removal of a leftover staging file."""
        try:
            staging.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.warning("Could not remove stale staging file %s: %s", staging, describe_os_error(exc))
            return
        logger.info("Removed stale staging file %s", staging)
