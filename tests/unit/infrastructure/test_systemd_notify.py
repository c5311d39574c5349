"""Tests for systemd notify — sd_notify messages."""

from __future__ import annotations

from unittest.mock import patch

from varsave.infrastructure.adapters.systemd_notify import _sd_notify, notify_ready, notify_status, notify_stopping

# ---------------------------------------------------------------------------
# _sd_notify tests
# ---------------------------------------------------------------------------


class TestSdNotify:
    def test_returns_false_when_no_socket(self) -> None:
        with patch.dict("os.environ", {}, clear=True):
            assert _sd_notify("READY=1") is False

    def test_sends_to_unix_socket(self) -> None:
        with (
            patch.dict("os.environ", {"NOTIFY_SOCKET": "/run/test.sock"}),
            patch("socket.socket") as mock_socket,
        ):
            instance = mock_socket.return_value
            result = _sd_notify("READY=1")

            assert result is True
            instance.sendto.assert_called_once_with(b"READY=1", "/run/test.sock")
            instance.close.assert_called_once()

    def test_handles_abstract_socket(self) -> None:
        with (
            patch.dict("os.environ", {"NOTIFY_SOCKET": "@/run/test"}),
            patch("socket.socket") as mock_socket,
        ):
            _sd_notify("STOPPING=1")

            mock_socket.return_value.sendto.assert_called_once_with(b"STOPPING=1", "\0/run/test")

    def test_returns_false_on_socket_error(self) -> None:
        with (
            patch.dict("os.environ", {"NOTIFY_SOCKET": "/run/test.sock"}),
            patch("socket.socket") as mock_socket,
        ):
            mock_socket.return_value.sendto.side_effect = OSError("connection refused")

            assert _sd_notify("READY=1") is False


# ---------------------------------------------------------------------------
# Convenience function tests
# ---------------------------------------------------------------------------


class TestConvenienceFunctions:
    def test_notify_ready(self) -> None:
        with patch("varsave.infrastructure.adapters.systemd_notify._sd_notify", return_value=True) as m:
            assert notify_ready() is True
            m.assert_called_once_with("READY=1")

    def test_notify_ready_with_status(self) -> None:
        with patch("varsave.infrastructure.adapters.systemd_notify._sd_notify", return_value=True) as m:
            notify_ready("Waiting for /sys/config/save")
            m.assert_called_once_with("READY=1\nSTATUS=Waiting for /sys/config/save")

    def test_notify_status(self) -> None:
        with patch("varsave.infrastructure.adapters.systemd_notify._sd_notify", return_value=True) as m:
            notify_status("Saving")
            m.assert_called_once_with("STATUS=Saving")

    def test_notify_stopping(self) -> None:
        with patch("varsave.infrastructure.adapters.systemd_notify._sd_notify", return_value=True) as m:
            assert notify_stopping() is True
            m.assert_called_once_with("STOPPING=1")
