"""Atomic device-list write-out for wolweb."""

import os
from pathlib import Path
from typing import Iterable

from wolweb.core.registry import DeviceEntry

SAMPLE_DEVICES = [
    DeviceEntry("desktop_office", "Office Desktop", "AA:BB:CC:DD:EE:01", "192.168.1.255"),
    DeviceEntry("gaming_rig", "Gaming PC", "AA:BB:CC:DD:EE:02", "192.168.1.255"),
    DeviceEntry("nas", "Home NAS", "AA:BB:CC:DD:EE:03", "192.168.1.255"),
    DeviceEntry("workstation", "Workstation", "AA:BB:CC:DD:EE:04", "192.168.1.255"),
    DeviceEntry("htpc", "Living Room HTPC", "AA:BB:CC:DD:EE:05", "192.168.1.255"),
    DeviceEntry("laptop_dock", "Docked Laptop", "AA:BB:CC:DD:EE:06", "192.168.1.255"),
]

HEADER = "# key,display,mac,broadcast\n"


def entry_to_line(entry: DeviceEntry) -> str:
    """Serialize a DeviceEntry back to the line format the registry loader expects."""
    display = entry.display_name
    if "," in display or '"' in display:
        display = '"' + display.replace('"', '""') + '"'
    fields = [entry.key, display, entry.hardware_address]
    if entry.broadcast_address:
        fields.append(entry.broadcast_address)
    return ",".join(fields)


def write_devices(path: Path, entries: Iterable[DeviceEntry]) -> None:
    """
    Atomically write a device list.

    Uses a temp-file + os.replace so a crash mid-write never leaves a
    half-written file.

    Args:
        path: Destination device list path.
        entries: Devices to write, in order.
    """
    tmp = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(HEADER)
            for entry in entries:
                f.write(entry_to_line(entry) + "\n")
        os.chmod(tmp, 0o644)
        os.replace(tmp, path)
    except Exception:
        # Clean up temp file on failure
        if tmp.exists():
            tmp.unlink(missing_ok=True)
        raise
