"""Datagram payloads that may carry a delivery forecast ahead of the data."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from sproutnet.receiver import DeliveryForecast

_SIZE = struct.Struct("<H")
_MAX_FORECAST = 0xFFFF


@dataclass(frozen=True)
class ForecastPacket:
    """User data, optionally preceded by the sender's latest delivery forecast."""

    data: bytes
    forecast: DeliveryForecast | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", bytes(self.data))

    def has_forecast(self) -> bool:
        return self.forecast is not None

    def to_bytes(self) -> bytes:
        """Forecast length, the encoded forecast if any, then the data."""
        encoded = self.forecast.to_bytes() if self.forecast is not None else b""
        if len(encoded) > _MAX_FORECAST:
            raise ValueError("encoded forecast does not fit in 16 bits of length")
        return _SIZE.pack(len(encoded)) + encoded + self.data

    @classmethod
    def from_bytes(cls, incoming: bytes) -> ForecastPacket:
        incoming = bytes(incoming)
        if len(incoming) < _SIZE.size:
            raise ValueError("packet is shorter than its forecast length field")
        (size,) = _SIZE.unpack_from(incoming)
        end = _SIZE.size + size
        if len(incoming) < end:
            raise ValueError("packet is shorter than its forecast")
        forecast = DeliveryForecast.from_bytes(incoming[_SIZE.size:end]) if size else None
        return cls(incoming[end:], forecast)