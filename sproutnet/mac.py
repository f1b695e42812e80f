"""Ethernet MAC addresses and the filters built from them."""

from __future__ import annotations

from dataclasses import dataclass

_LENGTH = 6
_BROADCAST = b"\xff" * _LENGTH


def parse_human(with_colons: str) -> bytes:
    """Parse ``aa:bb:cc:dd:ee:ff`` into six octets; empty text means broadcast."""
    if not with_colons:
        return _BROADCAST
    parts = with_colons.split(":")
    if len(parts) < _LENGTH:
        raise ValueError(f"expected six colon-separated octets in {with_colons!r}")
    octets = []
    for part in parts[:_LENGTH]:
        try:
            value = int(part.strip(), 16)
        except ValueError:
            raise ValueError(f"bad octet {part!r} in {with_colons!r}") from None
        if not 0 <= value <= 255:
            raise ValueError(f"octet {part!r} out of range in {with_colons!r}")
        octets.append(value)
    return bytes(octets)


@dataclass(frozen=True)
class MACAddress:
    """A six-octet hardware address."""

    octets: bytes

    def __post_init__(self) -> None:
        octets = bytes(self.octets)
        if len(octets) != _LENGTH:
            raise ValueError(f"MAC address needs {_LENGTH} octets, got {len(octets)}")
        object.__setattr__(self, "octets", octets)

    def is_broadcast(self) -> bool:
        return self.octets == _BROADCAST

    def matches(self, other: MACAddress) -> bool:
        """Equal addresses match, and broadcast on either side matches anything."""
        return self.is_broadcast() or other.is_broadcast() or self.octets == other.octets

    def __str__(self) -> str:
        return ":".join(f"{octet:x}" for octet in self.octets)