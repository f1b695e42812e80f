"""zlib compression with a fixed limit on the decompressed size."""

from __future__ import annotations

import zlib

BUFFER_SIZE = 2048 * 2048


def compress(data: bytes) -> bytes:
    """Compress ``data`` as a zlib stream."""
    result = zlib.compress(bytes(data))
    if len(result) > BUFFER_SIZE:
        raise ValueError("compressed data exceeds the buffer limit")
    return result


def uncompress(data: bytes) -> bytes:
    """Decompress a complete zlib stream of at most BUFFER_SIZE bytes."""
    inflater = zlib.decompressobj()
    try:
        result = inflater.decompress(bytes(data), BUFFER_SIZE)
        if inflater.unconsumed_tail:
            raise ValueError("decompressed data exceeds the buffer limit")
        result += inflater.flush()
    except zlib.error as exc:
        raise ValueError(f"bad compressed data: {exc}") from exc
    if len(result) > BUFFER_SIZE:
        raise ValueError("decompressed data exceeds the buffer limit")
    if not inflater.eof:
        raise ValueError("compressed data is incomplete")
    return result