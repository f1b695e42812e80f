"""Timestamped packets and the FIFO queue that holds them."""

from __future__ import annotations

import collections
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum

from sproutnet.clock import timestamp


class Qdisc(IntEnum):
    """Queueing discipline applied to each flow."""

    CODEL = 0
    SPROUT = 1


@dataclass(frozen=True)
class TrackedPacket:
    """A payload with the time it entered the queue, to measure sojourn time."""

    tstamp: int
    contents: bytes


class IngressQueue:
    """FIFO of tracked packets that keeps a running byte count."""

    def __init__(self, clock: Callable[[], int] = timestamp) -> None:
        self._clock = clock
        self._packets: collections.deque[TrackedPacket] = collections.deque()
        self._total_length = 0

    def __len__(self) -> int:
        return len(self._packets)

    @property
    def total_length(self) -> int:
        """Bytes of payload currently queued."""
        return self._total_length

    def front(self) -> TrackedPacket:
        if not self._packets:
            raise IndexError("front of an empty queue")
        return self._packets[0]

    def pop(self) -> TrackedPacket:
        if not self._packets:
            raise IndexError("pop from an empty queue")
        packet = self._packets.popleft()
        self._total_length -= len(packet.contents)
        return packet

    def push(self, packet: TrackedPacket) -> None:
        self._packets.append(packet)
        self._total_length += len(packet.contents)

    def is_empty(self) -> bool:
        return not self._packets

    def deque(self) -> TrackedPacket | None:
        """Remove and return the oldest packet, or None when empty."""
        return self.pop() if self._packets else None

    def enque(self, payload: bytes) -> None:
        """Queue ``payload`` stamped with the current time."""
        self.push(TrackedPacket(self._clock(), bytes(payload)))