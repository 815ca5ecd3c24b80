"""Device registry: the trusted list of wakeable machines."""

import csv
import ipaddress
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Optional

logger = logging.getLogger(__name__)

# key,display_name,hardware_address[,broadcast_address]
_MIN_FIELDS = 3
_MAX_FIELDS = 4


class ConfigLoadError(Exception):
    """Raised when the device list is unreadable or contains a malformed record."""


@dataclass(frozen=True)
class DeviceEntry:
    """A single configured device."""

    key: str
    display_name: str
    hardware_address: str
    broadcast_address: Optional[str] = None


class DeviceRegistry:
    """
    Immutable mapping of device key to DeviceEntry.

    Build one with load_registry() or parse_registry(); a loaded registry
    is never modified. Use RegistryHandle to replace it on reload.
    """

    def __init__(self, entries: Iterable[DeviceEntry] = (), source: str = "<memory>") -> None:
        devices: dict[str, DeviceEntry] = {}
        for entry in entries:
            if entry.key in devices:
                raise ConfigLoadError(f"{source}: duplicate device key '{entry.key}'")
            devices[entry.key] = entry
        self._devices = MappingProxyType(devices)
        self.source = source

    def lookup(self, key: str) -> Optional[DeviceEntry]:
        """Return the entry for *key*, or None. Exact match only."""
        return self._devices.get(key)

    def keys(self) -> list[str]:
        return list(self._devices)

    def __contains__(self, key: object) -> bool:
        return key in self._devices

    def __iter__(self) -> Iterator[DeviceEntry]:
        return iter(self._devices.values())

    def __len__(self) -> int:
        return len(self._devices)

    def __repr__(self) -> str:
        return f"DeviceRegistry(source={self.source!r}, devices={len(self)})"


def _parse_record(line: str, source: str, lineno: int) -> DeviceEntry:
    try:
        row = next(csv.reader([line], skipinitialspace=True))
    except csv.Error as exc:
        raise ConfigLoadError(f"{source}:{lineno}: {exc}") from exc
    fields = [f.strip() for f in row]
    if not (_MIN_FIELDS <= len(fields) <= _MAX_FIELDS):
        raise ConfigLoadError(
            f"{source}:{lineno}: expected {_MIN_FIELDS} or {_MAX_FIELDS} comma-separated "
            f"fields (key,display_name,hardware_address[,broadcast_address]), got {len(fields)}"
        )
    key, display_name, mac = fields[0], fields[1], fields[2]
    broadcast = fields[3] if len(fields) == _MAX_FIELDS else ""
    if not key:
        raise ConfigLoadError(f"{source}:{lineno}: missing device key")
    if not mac:
        raise ConfigLoadError(f"{source}:{lineno}: missing hardware address for '{key}'")
    if broadcast:
        try:
            ipaddress.IPv4Address(broadcast)
        except ValueError:
            raise ConfigLoadError(
                f"{source}:{lineno}: invalid broadcast address '{broadcast}' for '{key}'"
            ) from None
    return DeviceEntry(
        key=key,
        display_name=display_name or key,
        hardware_address=mac,
        broadcast_address=broadcast or None,
    )


def parse_registry(lines: Iterable[str], source: str = "<string>") -> DeviceRegistry:
    """
    Parse device records into a DeviceRegistry.

    Blank lines and lines starting with '#' are skipped. Any other line that
    is not a well-formed record fails the whole parse.

    Raises:
        ConfigLoadError: On the first malformed record or a duplicate key
    """
    entries: list[DeviceEntry] = []
    for lineno, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        entries.append(_parse_record(stripped, source, lineno))
    return DeviceRegistry(entries, source=source)


def load_registry(path: Path) -> DeviceRegistry:
    """
    Load the device list from *path*.

    Raises:
        ConfigLoadError: If the file cannot be read or any record is malformed
    """
    try:
        with open(path, encoding="utf-8") as f:
            registry = parse_registry(f, source=str(path))
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"cannot read device list {path}: {exc}") from exc

    if len(registry) == 0:
        logger.warning("Device list %s contains no devices", path)
    else:
        logger.info("Loaded %d device(s) from %s", len(registry), path)
    return registry


class RegistryHandle:
    """
    Owns the active DeviceRegistry for a process.

    Readers take ``handle.current`` without locking; reload() builds a new
    registry first and only then swaps the reference, so a failed reload
    leaves the previous registry in place.
    """

    def __init__(self, path: Path, registry: Optional[DeviceRegistry] = None) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._current = registry if registry is not None else load_registry(self.path)

    @property
    def current(self) -> DeviceRegistry:
        return self._current

    def reload(self) -> DeviceRegistry:
        """Re-read the device list and atomically replace the active registry."""
        with self._lock:
            registry = load_registry(self.path)
            self._current = registry
        logger.info("Registry reloaded: %d device(s)", len(registry))
        return registry
