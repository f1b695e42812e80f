"""Controlled-delay active queue management."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

from sproutnet.clock import timestamp
from sproutnet.ingress import IngressQueue, TrackedPacket

logger = logging.getLogger(__name__)

_UINT64 = 1 << 64


class CoDel:
    """Drops packets from a queue whose sojourn time stays above target."""

    TARGET = 5  # ms
    INTERVAL = 100  # ms
    MAXPACKET = 1500  # bytes, MTU of the link

    def __init__(self, clock: Callable[[], int] = timestamp) -> None:
        self._clock = clock
        self.first_above_time = 0
        self.drop_next = 0
        self.count = 0
        self.dropping = False
        self.drop_count = 0

    def _control_law(self, t: int) -> int:
        return int(t + self.INTERVAL / math.sqrt(self.count))

    def _dodeque(self, queue: IngressQueue) -> tuple[TrackedPacket | None, bool]:
        now = self._clock()
        packet = queue.deque()
        ok_to_drop = False
        if packet is None or not packet.contents:
            self.first_above_time = 0
        else:
            sojourn = now - packet.tstamp
            if sojourn < self.TARGET or queue.total_length < self.MAXPACKET:
                self.first_above_time = 0
            elif self.first_above_time == 0:
                self.first_above_time = now + self.INTERVAL
            elif now >= self.first_above_time:
                ok_to_drop = True
        return packet, ok_to_drop

    def _drop(self, packet: TrackedPacket) -> None:
        self.drop_count += 1
        logger.warning(
            "Codel dropped a packet with size %d, count now at %d",
            len(packet.contents),
            self.drop_count,
        )

    def enque(self, queue: IngressQueue, payload: bytes) -> None:
        queue.enque(payload)

    def deque(self, queue: IngressQueue) -> TrackedPacket | None:
        """Next packet to send, after any drops; None when the queue is empty."""
        now = self._clock()
        packet, ok_to_drop = self._dodeque(queue)
        if packet is None or not packet.contents:
            self.dropping = False
            return packet

        if self.dropping:
            if not ok_to_drop:
                self.dropping = False
            elif now >= self.drop_next:
                while now >= self.drop_next and self.dropping:
                    self._drop(packet)
                    self.count += 1
                    packet, ok_to_drop = self._dodeque(queue)
                    if not ok_to_drop:
                        self.dropping = False
                    else:
                        self.drop_next = self._control_law(self.drop_next)
        else:
            recently_dropping = (now - self.drop_next) % _UINT64 < self.INTERVAL
            if ok_to_drop and (
                recently_dropping
                or (now - self.first_above_time) % _UINT64 >= self.INTERVAL
            ):
                self._drop(packet)
                packet, ok_to_drop = self._dodeque(queue)
                self.dropping = True
                if recently_dropping:
                    self.count = self.count - 2 if self.count > 2 else 1
                else:
                    self.count = 1
                self.drop_next = self._control_law(now)
        return packet