"""Reassembly of fragmented packets by hole tracking (RFC 815)."""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

BUFFER_SIZE = 1600


@dataclass(frozen=True)
class PacketFragment:
    """One piece of a packet: its packet id, byte offset and payload."""

    id: int
    offset: int
    payload: bytes
    more_frags: bool = False


@dataclass(frozen=True)
class _Hole:
    first: int
    last: int


class Reassembly:
    """Collects fragments per packet id until no holes remain."""

    def __init__(self) -> None:
        self._holes: dict[int, list[_Hole]] = {}
        self._buffers: dict[int, bytearray] = {}

    def add_fragment(self, fragment: PacketFragment) -> None:
        """Write a fragment into its packet's buffer and update the holes."""
        logger.debug(
            "RECEIVED packet of seq_num %d, size %d from remote",
            fragment.id,
            len(fragment.payload),
        )
        if not fragment.payload:
            raise ValueError("fragment has no payload")
        buffer = self._buffers.get(fragment.id)
        if buffer is not None and fragment.offset > len(buffer):
            raise IndexError(f"fragment offset {fragment.offset} beyond the buffer")

        seq_num = fragment.id
        if seq_num not in self._holes:
            self._holes[seq_num] = [_Hole(0, BUFFER_SIZE)]
            self._buffers[seq_num] = bytearray(BUFFER_SIZE)
            if fragment.offset > BUFFER_SIZE:
                raise IndexError(f"fragment offset {fragment.offset} beyond the buffer")

        first = fragment.offset
        last = fragment.offset + len(fragment.payload) - 1
        holes = self._holes[seq_num]
        # New holes go to the end; the slot after a removed hole is skipped.
        i = 0
        while i < len(holes):
            hole = holes[i]
            if first > hole.last or last < hole.first:
                i += 1
                continue
            del holes[i]
            if first > hole.first:
                holes.append(_Hole(hole.first, first - 1))
            if last < hole.last and fragment.more_frags:
                holes.append(_Hole(last + 1, hole.last))
            i += 1

        self._buffers[seq_num][first:first + len(fragment.payload)] = fragment.payload

    def ready_to_deliver(self, seq_num: int) -> bytes:
        """The reassembled buffer once complete; empty bytes otherwise."""
        if self._holes.get(seq_num):
            return b""
        return bytes(self._buffers.get(seq_num, b""))