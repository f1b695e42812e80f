"""Forecast-driven datagram transport parts: rate inference, queueing and framing."""

__version__ = "0.1.0"

__all__ = [
    "sampled",
    "process",
    "forecaster",
    "clock",
    "receiver",
    "ingress",
    "codel",
    "classifier",
    "queuegang",
    "reassembly",
    "mac",
    "compressor",
    "fragment",
    "forecastpacket",
]