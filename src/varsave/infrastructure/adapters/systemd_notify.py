"""Systemd notify — sd_notify readiness, status, and stopping messages."""

from __future__ import annotations

import logging
import os
import socket

logger = logging.getLogger(__name__)


def _sd_notify(state: str) -> bool:
    """Send a notification to systemd via NOTIFY_SOCKET.

    Returns True if the message was sent successfully.
    """
    addr = os.environ.get("NOTIFY_SOCKET")
    if not addr:
        return False

    if addr.startswith("@"):
        addr = "\0" + addr[1:]

    try:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_DGRAM)
        try:
            sock.sendto(state.encode(), addr)
        finally:
            sock.close()
    except OSError:
        logger.exception("Failed to send sd_notify: %s", state)
        return False

    return True


def notify_ready(status: str = "") -> bool:
    """Signal systemd that the service is ready (READY=1), optionally with a status line."""
    if status:
        return _sd_notify(f"READY=1\nSTATUS={status}")
    return _sd_notify("READY=1")


def notify_status(status: str) -> bool:
    """Update the free-form status shown by ``systemctl status``."""
    return _sd_notify(f"STATUS={status}")


def notify_stopping() -> bool:
    """Signal systemd that the service is stopping (STOPPING=1)."""
    return _sd_notify("STOPPING=1")
