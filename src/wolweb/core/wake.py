"""Wake request handling: registry lookup through to broadcast."""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from wolweb.core.dispatch import DEFAULT_BROADCAST, DEFAULT_PORT, DispatchError, send_packet
from wolweb.core.mac import InvalidAddressError, SuspiciousAddressError, normalize_mac
from wolweb.core.packet import build_packet
from wolweb.core.registry import DeviceRegistry

logger = logging.getLogger(__name__)

DEFAULT_DEVICES_FILE = Path("/etc/wol_devices.csv")


@dataclass(frozen=True)
class Settings:
    """Process-wide wake settings."""

    devices_file: Path = DEFAULT_DEVICES_FILE
    broadcast: str = DEFAULT_BROADCAST
    port: int = DEFAULT_PORT
    send_timeout: float = 2.0
    # Upper bound for a whole wake request at the web boundary.
    request_timeout: float = 5.0
    reject_suspicious: bool = True


class WakeStatus(str, Enum):
    SUCCESS = "success"
    UNKNOWN_DEVICE = "unknown_device"
    INVALID_ADDRESS = "invalid_address"
    NETWORK_ERROR = "network_error"


@dataclass
class WakeResult:
    """Outcome of a single wake request."""

    status: WakeStatus
    device_key: str
    message: str
    display_name: Optional[str] = None
    detail: Optional[str] = None
    destination: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is WakeStatus.SUCCESS


def wake_device(registry: DeviceRegistry, key: str, settings: Settings) -> WakeResult:
    """
    Send a Wake-on-LAN packet to the registered device *key*.

    Workflow:
        1. Look the key up in the registry (nothing else happens for unknown keys)
        2. Normalize the configured hardware address
        3. Build the magic packet
        4. Broadcast it once

    Every failure is returned as a WakeResult; nothing is raised for the
    expected outcomes.

    Args:
        registry: Active device registry
        key: Device key supplied by the caller
        settings: Broadcast defaults, port and timeouts

    Returns:
        WakeResult describing what happened
    """
    key = (key or "").strip()
    entry = registry.lookup(key)
    if entry is None:
        logger.info("Wake requested for unknown device %r", key)
        return WakeResult(
            status=WakeStatus.UNKNOWN_DEVICE,
            device_key=key,
            message=f"Unknown device '{key}'.",
        )

    try:
        mac = normalize_mac(entry.hardware_address, reject_suspicious=settings.reject_suspicious)
    except SuspiciousAddressError as exc:
        logger.warning("Device '%s' has a suspicious hardware address: %s", key, exc)
        return WakeResult(
            status=WakeStatus.INVALID_ADDRESS,
            device_key=key,
            display_name=entry.display_name,
            message=(
                f"'{entry.display_name}' is configured with a placeholder hardware address "
                f"({entry.hardware_address}). Fix the device list."
            ),
            detail=str(exc),
        )
    except InvalidAddressError as exc:
        logger.warning("Device '%s' has an invalid hardware address: %s", key, exc)
        return WakeResult(
            status=WakeStatus.INVALID_ADDRESS,
            device_key=key,
            display_name=entry.display_name,
            message=(
                f"'{entry.display_name}' has an invalid hardware address "
                f"({entry.hardware_address}) in the device list."
            ),
            detail=str(exc),
        )

    packet = build_packet(mac)
    broadcast = entry.broadcast_address or settings.broadcast
    destination = f"{broadcast}:{settings.port}"
    try:
        send_packet(packet, broadcast, settings.port, timeout=settings.send_timeout)
    except DispatchError as exc:
        logger.error("Failed to send wake packet for '%s' to %s: %s", key, destination, exc)
        return WakeResult(
            status=WakeStatus.NETWORK_ERROR,
            device_key=key,
            display_name=entry.display_name,
            message=f"Unable to send wake packet for '{entry.display_name}': {exc}",
            detail=str(exc),
            destination=destination,
        )

    logger.info(
        "Woke device '%s' (MAC %s, broadcast %s)",
        key,
        mac,
        entry.broadcast_address or "default",
    )
    return WakeResult(
        status=WakeStatus.SUCCESS,
        device_key=key,
        display_name=entry.display_name,
        message=(
            f"Wake packet for '{entry.display_name}' handed to the network ({destination}). "
            "Wake-on-LAN has no acknowledgement, so this does not confirm the device woke."
        ),
        destination=destination,
    )
