"""Millisecond clocks, 16-bit wire timestamps and the send-side reorder window."""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable

_UINT16 = 1 << 16
_UINT64 = 1 << 64
_TIMESTAMP_NONE = _UINT16 - 1
_MAX_THROWAWAY = _UINT16 - 1


def timestamp() -> int:
    """Current time in milliseconds on a monotonic clock."""
    return time.monotonic_ns() // 1_000_000


def timestamp16() -> int:
    """The current time cut to 16 bits.

    The all-ones value marks "no timestamp" on the wire, so it is never returned.
    """
    ts = timestamp() % _UINT16
    if ts == _TIMESTAMP_NONE:
        ts = 0
    return ts


def timestamp_diff(tsnew: int, tsold: int) -> int:
    """Milliseconds from ``tsold`` to ``tsnew``, allowing for 16-bit wrap-around."""
    for name, value in (("tsnew", tsnew), ("tsold", tsold)):
        if not 0 <= value < _UINT16:
            raise ValueError(f"{name} must fit in 16 bits, got {value}")
    return (tsnew - tsold) % _UINT16


class SendQueue:
    """Remembers recently sent sequence numbers to tell the receiver what it may discard."""

    REORDER_LIMIT = 10  # ms

    def __init__(self, clock: Callable[[], int] = timestamp) -> None:
        self._clock = clock
        self._sent: deque[tuple[int, int]] = deque()

    def add(self, seq: int) -> int:
        """Record ``seq`` as sent now and return the throwaway window for it.

        The window is how far back from ``seq`` the receiver must still keep
        data, capped at 65535.
        """
        now = self._clock()
        self._sent.append((seq, now))

        while self._sent[0][1] < now - self.REORDER_LIMIT:
            self._sent.popleft()
            if not self._sent:
                raise RuntimeError("send queue emptied itself")

        throwaway = (seq - self._sent[0][0]) % _UINT64
        return min(throwaway, _MAX_THROWAWAY)