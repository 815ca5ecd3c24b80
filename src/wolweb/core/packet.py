"""Wake-on-LAN magic packet construction."""

from dataclasses import dataclass

from wakeonlan import create_magic_packet

from wolweb.core.mac import MacAddress

SYNC_PREFIX = b"\xff" * 6
REPETITIONS = 16
PACKET_LENGTH = len(SYNC_PREFIX) + 6 * REPETITIONS  # 102


@dataclass(frozen=True)
class MagicPacket:
    """The 102-byte WOL payload: six 0xFF bytes, then the target address 16 times."""

    payload: bytes

    def __post_init__(self) -> None:
        if len(self.payload) != PACKET_LENGTH:
            raise ValueError(
                f"magic packet must be {PACKET_LENGTH} bytes, got {len(self.payload)}"
            )
        if not self.payload.startswith(SYNC_PREFIX):
            raise ValueError("magic packet must start with six 0xFF bytes")

    @property
    def target(self) -> MacAddress:
        return MacAddress(self.payload[6:12])

    def __bytes__(self) -> bytes:
        return self.payload

    def __len__(self) -> int:
        return len(self.payload)


def build_packet(address: MacAddress) -> MagicPacket:
    """Build the magic packet for *address*. Deterministic; never fails for a MacAddress."""
    return MagicPacket(create_magic_packet(address.hex()))
