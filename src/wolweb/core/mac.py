"""Hardware (MAC) address validation and normalization."""

import re
from dataclasses import dataclass

_SEPARATORS_RE = re.compile(r"[:\-]")
_HEX12_RE = re.compile(r"^[0-9A-Fa-f]{12}$")

_ALL_ZERO = bytes(6)
_BROADCAST = b"\xff" * 6


class InvalidAddressError(ValueError):
    """Raised when a hardware address is not 12 hex digits."""


class SuspiciousAddressError(InvalidAddressError):
    """Raised for well-formed addresses that are almost certainly misconfigured."""


@dataclass(frozen=True)
class MacAddress:
    """A canonical 6-octet hardware address, most-significant octet first."""

    octets: bytes

    def __post_init__(self) -> None:
        if len(self.octets) != 6:
            raise InvalidAddressError(f"MAC address must be 6 octets, got {len(self.octets)}")

    def hex(self) -> str:
        return self.octets.hex().upper()

    def __str__(self) -> str:
        return ":".join(f"{b:02X}" for b in self.octets)


def normalize_mac(raw: str, *, reject_suspicious: bool = True) -> MacAddress:
    """
    Validate a hardware address string and convert it to a MacAddress.

    Colon and hyphen separators are stripped in any position; letter case is
    ignored.

    Args:
        raw: Address as configured (e.g. "AA:BB:CC:DD:EE:01" or "aa-bb-cc-dd-ee-01")
        reject_suspicious: Reject 00:00:00:00:00:00 and FF:FF:FF:FF:FF:FF

    Returns:
        MacAddress with the octets in input order

    Raises:
        InvalidAddressError: If the address is not exactly 12 hex digits
        SuspiciousAddressError: If the address is all-zero or broadcast
    """
    if not isinstance(raw, str):
        raise InvalidAddressError(f"MAC address must be a string, got {type(raw).__name__}")
    digits = _SEPARATORS_RE.sub("", raw.strip())
    if not _HEX12_RE.match(digits):
        raise InvalidAddressError(f"invalid MAC address '{raw}' (expected 12 hex digits)")

    octets = bytes.fromhex(digits)
    if reject_suspicious and octets in (_ALL_ZERO, _BROADCAST):
        raise SuspiciousAddressError(
            f"refusing suspicious MAC address '{raw}' (all-zero or broadcast)"
        )
    return MacAddress(octets)


def is_valid_mac(raw: str, *, reject_suspicious: bool = True) -> bool:
    """Return True if *raw* normalizes cleanly."""
    try:
        normalize_mac(raw, reject_suspicious=reject_suspicious)
    except InvalidAddressError:
        return False
    return True
