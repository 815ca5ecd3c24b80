"""UDP broadcast of magic packets."""

import logging
import socket

from wolweb.core.packet import MagicPacket

logger = logging.getLogger(__name__)

DEFAULT_BROADCAST = "255.255.255.255"
DEFAULT_PORT = 9


class DispatchError(Exception):
    """Raised when the magic packet could not be handed to the network stack."""


def send_packet(
    packet: MagicPacket,
    address: str = DEFAULT_BROADCAST,
    port: int = DEFAULT_PORT,
    timeout: float = 2.0,
) -> None:
    """
    Send a magic packet once as a UDP broadcast datagram.

    A return without error means the datagram was accepted by the local
    network stack. WOL has no acknowledgement, so it says nothing about
    whether the target woke.

    Args:
        packet: Magic packet to send
        address: Destination broadcast address (default: 255.255.255.255)
        port: Destination UDP port (default: 9)
        timeout: Upper bound in seconds on the blocking send

    Raises:
        DispatchError: If socket setup, address resolution or the send fails
    """
    logger.debug("Sending %d-byte magic packet to %s:%d", len(packet), address, port)
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            sock.settimeout(timeout)
            sent = sock.sendto(bytes(packet), (address, port))
    except (OSError, UnicodeError, TypeError, ValueError) as exc:
        raise DispatchError(f"send to {address}:{port} failed: {exc}") from exc

    if sent != len(packet):
        raise DispatchError(f"short send to {address}:{port}: {sent} of {len(packet)} bytes")
    logger.debug("Magic packet handed to network stack (%s:%d)", address, port)
