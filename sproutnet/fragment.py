"""Transport instructions and their splitting into datagram-sized fragments."""

from __future__ import annotations

import struct
from dataclasses import dataclass

HEADER_LEN = 66  # bytes reserved per datagram for lower-layer headers

_UINT64_MAX = (1 << 64) - 1
_INSTRUCTION_HEADER = struct.Struct(">QQQQ")
_FRAGMENT_HEADER = struct.Struct(">QH")
_FINAL_BIT = 0x8000
_NUM_MASK = 0x7FFF


@dataclass(frozen=True)
class Instruction:
    """A state-sync message: move the receiver from ``old_num`` to ``new_num``."""

    old_num: int = 0
    new_num: int = 0
    ack_num: int = 0
    throwaway_num: int = 0
    diff: bytes = b""

    def __post_init__(self) -> None:
        for name in ("old_num", "new_num", "ack_num", "throwaway_num"):
            value = getattr(self, name)
            if not 0 <= value <= _UINT64_MAX:
                raise ValueError(f"{name} must fit in 64 bits, got {value}")
        object.__setattr__(self, "diff", bytes(self.diff))

    def to_bytes(self) -> bytes:
        header = _INSTRUCTION_HEADER.pack(
            self.old_num, self.new_num, self.ack_num, self.throwaway_num
        )
        return header + self.diff

    @classmethod
    def from_bytes(cls, data: bytes) -> Instruction:
        data = bytes(data)
        if len(data) < _INSTRUCTION_HEADER.size:
            raise ValueError("instruction is truncated")
        old_num, new_num, ack_num, throwaway_num = _INSTRUCTION_HEADER.unpack_from(data)
        return cls(old_num, new_num, ack_num, throwaway_num, data[_INSTRUCTION_HEADER.size:])


@dataclass(frozen=True)
class Fragment:
    """One numbered piece of an encoded instruction."""

    id: int
    fragment_num: int
    final: bool
    contents: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "contents", bytes(self.contents))
        object.__setattr__(self, "final", bool(self.final))

    def to_bytes(self) -> bytes:
        """Header of id and final-flagged fragment number, then the contents."""
        if not 0 <= self.fragment_num <= _NUM_MASK:
            raise ValueError(f"fragment number {self.fragment_num} does not fit in 15 bits")
        if not 0 <= self.id <= _UINT64_MAX:
            raise ValueError(f"fragment id {self.id} does not fit in 64 bits")
        combined = (_FINAL_BIT if self.final else 0) | self.fragment_num
        return _FRAGMENT_HEADER.pack(self.id, combined) + self.contents

    @classmethod
    def from_bytes(cls, data: bytes) -> Fragment:
        data = bytes(data)
        if len(data) < _FRAGMENT_HEADER.size:
            raise ValueError("fragment is shorter than its header")
        frag_id, combined = _FRAGMENT_HEADER.unpack_from(data)
        return cls(
            frag_id,
            combined & _NUM_MASK,
            bool(combined & _FINAL_BIT),
            data[_FRAGMENT_HEADER.size:],
        )


class FragmentAssembly:
    """Collects the fragments of one instruction at a time."""

    def __init__(self) -> None:
        self._fragments: list[Fragment | None] = []
        self._current_id: int | None = None
        self._arrived = 0
        self._total: int | None = None

    def _grow_to(self, size: int) -> None:
        if len(self._fragments) < size:
            self._fragments.extend([None] * (size - len(self._fragments)))

    def add_fragment(self, fragment: Fragment) -> bool:
        """Store a fragment; True once every fragment of its instruction is here."""
        num = fragment.fragment_num
        if self._current_id != fragment.id:
            self._fragments = [None] * (num + 1)
            self._fragments[num] = fragment
            self._arrived = 1
            self._total = None
            self._current_id = fragment.id
        elif num < len(self._fragments) and self._fragments[num] is not None:
            if self._fragments[num] != fragment:
                raise ValueError(f"fragment {num} of {fragment.id} arrived with different data")
        else:
            self._grow_to(num + 1)
            self._fragments[num] = fragment
            self._arrived += 1

        if fragment.final:
            self._total = num + 1
            if len(self._fragments) > self._total:
                raise ValueError("fragment arrived beyond the final one")
            self._grow_to(self._total)

        if self._total is not None and self._arrived > self._total:
            raise ValueError("more fragments arrived than the instruction holds")

        return self._arrived == self._total

    def get_assembly(self) -> Instruction:
        """Decode the completed instruction and make ready for the next one."""
        if self._total is None or self._arrived != self._total:
            raise ValueError("instruction is not complete")
        pieces = []
        for fragment in self._fragments[: self._total]:
            if fragment is None:
                raise ValueError("instruction is missing a fragment")
            pieces.append(fragment.contents)
        instruction = Instruction.from_bytes(b"".join(pieces))
        self._fragments = []
        self._arrived = 0
        self._total = None
        return instruction


class Fragmenter:
    """Splits instructions into fragments that fit a datagram."""

    def __init__(self) -> None:
        self.next_instruction_id = 0

    def make_fragments(self, inst: Instruction, mtu: int) -> list[Fragment]:
        room = mtu - HEADER_LEN
        if room <= 0:
            raise ValueError(f"MTU {mtu} leaves no room beyond the {HEADER_LEN}-byte header")
        self.next_instruction_id += 1
        payload = inst.to_bytes()
        fragments = []
        start = 0
        while start < len(payload):
            chunk = payload[start:start + room]
            start += len(chunk)
            fragments.append(
                Fragment(self.next_instruction_id, len(fragments), start >= len(payload), chunk)
            )
        return fragments