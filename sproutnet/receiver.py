"""Receiver-side model of the path, producing forecasts of upcoming deliveries."""

from __future__ import annotations

import heapq
import json
import logging
import os
import struct
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from sproutnet.forecaster import ProcessForecastInterval
from sproutnet.process import Process

logger = logging.getLogger(__name__)

MAX_ARRIVAL_RATE = 1000.0
BROWNIAN_MOTION_RATE = 200.0
OUTAGE_ESCAPE_RATE = 1.0
NUM_BINS = 256
TICK_LENGTH = 20  # ms
MAX_ARRIVALS_PER_TICK = 30
NUM_TICKS = 8
PACKET_SIZE = 1400  # bytes counted as one arrival
QUANTILE = 0.05

_NEVER = (1 << 64) - 1
_HEADER = struct.Struct(">QQH")


@dataclass(frozen=True)
class DeliveryForecast:
    """How many packets the path should deliver over each upcoming interval."""

    time: int = 0
    received_or_lost_count: int = 0
    counts: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "counts", tuple(int(c) for c in self.counts))

    def to_bytes(self) -> bytes:
        """Encode as a fixed header followed by one 32-bit word per count."""
        header = _HEADER.pack(self.time, self.received_or_lost_count, len(self.counts))
        return header + struct.pack(f">{len(self.counts)}I", *self.counts)

    @classmethod
    def from_bytes(cls, data: bytes) -> DeliveryForecast:
        data = bytes(data)
        if len(data) < _HEADER.size:
            raise ValueError("delivery forecast is truncated")
        time, received, num_counts = _HEADER.unpack_from(data)
        expected = _HEADER.size + 4 * num_counts
        if len(data) != expected:
            raise ValueError(f"delivery forecast should be {expected} bytes, got {len(data)}")
        counts = struct.unpack_from(f">{num_counts}I", data, _HEADER.size)
        return cls(time, received, counts)


class RecvQueue:
    """Tracks received sequence numbers to count bytes received or given up as lost."""

    def __init__(self) -> None:
        self._received: list[tuple[int, int]] = []
        self.throwaway_before = 0

    def recv(self, seq: int, throwaway_window: int, length: int) -> None:
        heapq.heappush(self._received, (seq, length))
        self.throwaway_before = max(self.throwaway_before, seq - throwaway_window)

    def packet_count(self) -> int:
        """Cumulative count of bytes received or lost."""
        while self._received and self._received[0][0] < self.throwaway_before:
            heapq.heappop(self._received)
        return self.throwaway_before + sum(length for _, length in self._received)


def _new_process() -> Process:
    return Process(MAX_ARRIVAL_RATE, BROWNIAN_MOTION_RATE, OUTAGE_ESCAPE_RATE, NUM_BINS)


@lru_cache(maxsize=1)
def _computed_forecasts() -> tuple[ProcessForecastInterval, ...]:
    logger.info("Starting statistical calculations...")
    example = _new_process()
    forecasts = []
    for tick in range(NUM_TICKS):
        logger.debug("computing forecast for tick %d", tick)
        forecasts.append(
            ProcessForecastInterval.build(
                0.001 * TICK_LENGTH, example, MAX_ARRIVALS_PER_TICK, tick + 1
            )
        )
    logger.info("statistical calculations done")
    return tuple(forecasts)


def _load_model(path: str | os.PathLike) -> list[ProcessForecastInterval]:
    logger.info("Reading model from %s", path)
    with open(path, encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict) or not isinstance(data.get("intervals"), list):
        raise ValueError(f"could not parse model in {path}")
    intervals = data["intervals"]
    if len(intervals) != NUM_TICKS:
        raise ValueError(f"model holds {len(intervals)} intervals, expected {NUM_TICKS}")
    return [ProcessForecastInterval.from_model(interval) for interval in intervals]


def _save_model(path: str | os.PathLike, forecasts: list[ProcessForecastInterval]) -> None:
    logger.info("Writing model to %s", path)
    Path(path).write_text(
        json.dumps({"intervals": [forecast.to_model() for forecast in forecasts]}),
        encoding="utf-8",
    )


class Receiver:
    """Watches arrivals tick by tick and forecasts future deliveries."""

    tick_length = TICK_LENGTH

    def __init__(self, model_in=None, model_out=None) -> None:
        if model_in is None:
            model_in = os.environ.get("SPROUT_MODEL_IN")
        if model_out is None:
            model_out = os.environ.get("SPROUT_MODEL_OUT")

        self._process = _new_process()
        if model_in:
            self._forecasts = _load_model(model_in)
        else:
            self._forecasts = list(_computed_forecasts())
        if model_out:
            _save_model(model_out, self._forecasts)

        self._time = 0
        self._score_time = _NEVER
        self._count_this_tick = 0.0
        self._cached_forecast = DeliveryForecast()
        self._recv_queue = RecvQueue()

    @property
    def time(self) -> int:
        return self._time

    def warp_to(self, time: int) -> None:
        """Jump the model clock to ``time`` without evolving."""
        self._time = time
        self._score_time = time

    def advance_to(self, time: int) -> None:
        """Evolve and observe tick by tick up to ``time``."""
        if time < self._time:
            raise ValueError(f"cannot advance backwards from {self._time} to {time}")
        tick_seconds = 0.001 * TICK_LENGTH
        while self._time + TICK_LENGTH < time:
            self._process.evolve(tick_seconds)
            if self._time >= self._score_time or self._count_this_tick > 0:
                discrete = int(self._count_this_tick + 0.5)
                if 0 < self._count_this_tick < 1:
                    discrete = 1
                self._process.observe(tick_seconds, discrete)
                self._count_this_tick = 0.0
            self._time += TICK_LENGTH

    def recv(self, seq: int, throwaway_window: int, time_to_next: int, length: int) -> None:
        self._count_this_tick += length / PACKET_SIZE
        self._recv_queue.recv(seq, throwaway_window, length)
        self._score_time = max(self._time + time_to_next, self._score_time)

    def forecast(self) -> DeliveryForecast:
        """Forecast for the current tick, computed at most once per tick."""
        if self._cached_forecast.time == self._time:
            return self._cached_forecast
        self._process.normalize()
        self._cached_forecast = DeliveryForecast(
            time=self._time,
            received_or_lost_count=self._recv_queue.packet_count(),
            counts=tuple(
                forecast.lower_quantile(self._process, QUANTILE) for forecast in self._forecasts
            ),
        )
        return self._cached_forecast