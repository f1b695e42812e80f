"""Per-flow queues served by deficit round robin, with optional AQM."""

from __future__ import annotations

import logging
from collections import deque

from sproutnet.classifier import get_flow_id
from sproutnet.codel import CoDel
from sproutnet.ingress import IngressQueue, Qdisc

logger = logging.getLogger(__name__)


class QueueGang:
    """A set of per-flow queues, dequeued fairly by deficit round robin.

    With ``Qdisc.CODEL`` every flow is served through its own CoDel
    controller.  With ``Qdisc.SPROUT`` the total queued bytes are held under
    ``qlimit`` by dropping from the head of the longest queue.
    """

    MTU_SIZE = 1434

    def __init__(self, qdisc) -> None:
        self.qdisc = Qdisc(qdisc)
        self.qlimit = 0
        self._flow_queues: dict[int, IngressQueue] = {}
        self._credits: dict[int, float] = {}
        self._quantums: dict[int, float] = {}
        self._active: deque[int] = deque()
        self._is_active: dict[int, bool] = {}
        self._codels: dict[int, CoDel] = {}
        self._current_flow = 0

    def _aggregate_length(self) -> int:
        return sum(queue.total_length for queue in self._flow_queues.values())

    def _longest_queue(self) -> int:
        return max(sorted(self._flow_queues), key=lambda flow: self._flow_queues[flow].total_length)

    def _create_new_queue(self, flow_id: int) -> None:
        if flow_id in self._flow_queues:
            raise ValueError(f"flow {flow_id} already has a queue")
        self._flow_queues[flow_id] = IngressQueue()
        self._credits[flow_id] = 0
        self._quantums[flow_id] = self.MTU_SIZE
        self._is_active[flow_id] = False
        if self.qdisc == Qdisc.CODEL:
            self._codels[flow_id] = CoDel()

    def _deque(self, flow_id: int) -> bytes:
        queue = self._flow_queues[flow_id]
        if queue.is_empty():
            raise IndexError(f"flow {flow_id} has nothing queued")
        if self.qdisc == Qdisc.CODEL:
            packet = self._codels[flow_id].deque(queue)
            return packet.contents if packet is not None and packet.contents else b""
        return queue.deque().contents

    def is_empty(self) -> bool:
        """True when every flow's queue is empty."""
        return all(queue.is_empty() for queue in self._flow_queues.values())

    def enque(self, packet: bytes) -> None:
        """Queue an Ethernet frame on the queue of its flow."""
        flow_id = get_flow_id(packet)
        if flow_id not in self._flow_queues:
            self._create_new_queue(flow_id)

        if self.qdisc == Qdisc.SPROUT:
            if self.qlimit <= 0:
                raise ValueError("a queue limit must be set before queueing")
            if self._aggregate_length() > self.qlimit:
                dropped = self._flow_queues[self._longest_queue()].pop()
                logger.warning("Sprout AQM dropped packet of size %d", len(dropped.contents))
        self._flow_queues[flow_id].enque(packet)

        if not self._is_active[flow_id]:
            self._is_active[flow_id] = True
            self._active.append(flow_id)
            self._credits[flow_id] = 0

    def get_next_packet(self) -> bytes:
        """Next frame chosen by deficit round robin; empty when nothing is active."""
        if not self._active:
            return b""
        flow = self._current_flow = self._active[0]
        queue = self._flow_queues[flow]
        pkt_size = len(queue.front().contents)
        if self._credits[flow] < pkt_size:
            self._credits[flow] += self._quantums[flow]

        logger.debug(
            "Flow Qs : %s",
            " ".join(f"{fid}:{q.total_length}" for fid, q in sorted(self._flow_queues.items())),
        )
        if pkt_size > self._credits[flow]:
            raise RuntimeError(
                f"packet of {pkt_size} bytes exceeds the credit of flow {flow}"
            )
        self._credits[flow] -= pkt_size
        packet = self._deque(flow)

        if queue.is_empty():
            self._credits[flow] = 0
            self._active.popleft()
            self._is_active[flow] = False
        elif self._credits[flow] < pkt_size:
            self._active.rotate(-1)
        return packet