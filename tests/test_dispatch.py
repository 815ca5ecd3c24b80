"""Tests for UDP dispatch of magic packets."""

import socket
from unittest.mock import MagicMock, patch

import pytest

from wolweb.core.dispatch import DispatchError, send_packet
from wolweb.core.mac import normalize_mac
from wolweb.core.packet import build_packet


def _packet():
    return build_packet(normalize_mac("AA:BB:CC:DD:EE:01"))


def _mock_socket(mock_cls: MagicMock) -> MagicMock:
    sock = MagicMock()
    sock.sendto.return_value = 102
    mock_cls.return_value.__enter__.return_value = sock
    mock_cls.return_value.__exit__.return_value = False
    return sock


class TestSendPacket:
    """Tests for send_packet."""

    @patch("wolweb.core.dispatch.socket.socket")
    def test_sends_once_to_destination(self, mock_cls: MagicMock) -> None:
        sock = _mock_socket(mock_cls)
        packet = _packet()

        send_packet(packet, "192.168.1.255", 9)

        mock_cls.assert_called_once_with(socket.AF_INET, socket.SOCK_DGRAM)
        sock.sendto.assert_called_once_with(bytes(packet), ("192.168.1.255", 9))

    @patch("wolweb.core.dispatch.socket.socket")
    def test_enables_broadcast_and_timeout(self, mock_cls: MagicMock) -> None:
        sock = _mock_socket(mock_cls)

        send_packet(_packet(), timeout=1.5)

        sock.setsockopt.assert_called_once_with(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        sock.settimeout.assert_called_once_with(1.5)

    @patch("wolweb.core.dispatch.socket.socket")
    def test_defaults(self, mock_cls: MagicMock) -> None:
        sock = _mock_socket(mock_cls)

        send_packet(_packet())

        assert sock.sendto.call_args.args[1] == ("255.255.255.255", 9)

    @patch("wolweb.core.dispatch.socket.socket")
    def test_send_failure_raises_dispatch_error(self, mock_cls: MagicMock) -> None:
        sock = _mock_socket(mock_cls)
        sock.sendto.side_effect = OSError(101, "Network is unreachable")

        with pytest.raises(DispatchError, match="Network is unreachable") as excinfo:
            send_packet(_packet(), "10.0.0.255", 9)

        assert isinstance(excinfo.value.__cause__, OSError)
        # socket released even though the send failed
        mock_cls.return_value.__exit__.assert_called_once()

    @patch("wolweb.core.dispatch.socket.socket", side_effect=OSError("no sockets"))
    def test_socket_creation_failure(self, mock_cls: MagicMock) -> None:
        with pytest.raises(DispatchError, match="no sockets"):
            send_packet(_packet())

    @patch("wolweb.core.dispatch.socket.socket")
    def test_setsockopt_failure(self, mock_cls: MagicMock) -> None:
        sock = _mock_socket(mock_cls)
        sock.setsockopt.side_effect = PermissionError("not permitted")

        with pytest.raises(DispatchError, match="not permitted"):
            send_packet(_packet())
        sock.sendto.assert_not_called()

    @patch("wolweb.core.dispatch.socket.socket")
    def test_timeout_raises_dispatch_error(self, mock_cls: MagicMock) -> None:
        sock = _mock_socket(mock_cls)
        sock.sendto.side_effect = socket.timeout("timed out")

        with pytest.raises(DispatchError, match="timed out"):
            send_packet(_packet())

    @patch("wolweb.core.dispatch.socket.socket")
    def test_short_send_raises(self, mock_cls: MagicMock) -> None:
        sock = _mock_socket(mock_cls)
        sock.sendto.return_value = 50

        with pytest.raises(DispatchError, match="short send"):
            send_packet(_packet())

    @patch("wolweb.core.dispatch.socket.socket")
    def test_bad_destination_type_raises_dispatch_error(self, mock_cls: MagicMock) -> None:
        sock = _mock_socket(mock_cls)
        sock.sendto.side_effect = TypeError("str, bytes or bytearray expected, not NoneType")

        with pytest.raises(DispatchError, match="bytearray expected") as excinfo:
            send_packet(_packet(), "192.168.1.255", 9)

        assert isinstance(excinfo.value.__cause__, TypeError)

    @pytest.mark.parametrize(
        "exc",
        [
            ValueError("embedded null character"),
            UnicodeError("label empty or too long"),
        ],
    )
    @patch("wolweb.core.dispatch.socket.socket")
    def test_unusable_destination_raises_dispatch_error(
        self, mock_cls: MagicMock, exc: Exception
    ) -> None:
        sock = _mock_socket(mock_cls)
        sock.sendto.side_effect = exc

        with pytest.raises(DispatchError):
            send_packet(_packet(), "bad\x00host", 9)
