"""libmsb.compression

Boundary to the compression layer around MSB files.

Only a bare zlib stream is handled here. DCX/DCP containers (Deflate, Zstd
or Oodle chunks) belong to an external tool; they are recognised and refused
so the caller gets a clear error instead of a garbage parse.
"""

from __future__ import annotations

import logging
import zlib
from enum import Enum
from typing import Tuple

from .errors import MalformedStructureError, UnsupportedVariantError

log = logging.getLogger(__name__)

_CONTAINER_MAGICS = (b"DCX\x00", b"DCP\x00")
_ZLIB_FLAGS = (0x01, 0x5E, 0x9C, 0xDA)


class Compression(Enum):
    NONE = "none"
    ZLIB = "zlib"


def looks_like_zlib(data: bytes) -> bool:
    return len(data) >= 2 and data[0] == 0x78 and data[1] in _ZLIB_FLAGS


def detect(data: bytes) -> Compression:
    if data[:4] in _CONTAINER_MAGICS:
        raise UnsupportedVariantError(
            f"{data[:3].decode('ascii')} containers are not supported; decompress the file first"
        )
    if looks_like_zlib(data):
        return Compression.ZLIB
    return Compression.NONE


def decompress(data: bytes) -> Tuple[bytes, Compression]:
    """Return (raw MSB bytes, codec that was removed)."""
    compression = detect(data)
    if compression is Compression.ZLIB:
        try:
            raw = zlib.decompress(data)
        except zlib.error as e:
            raise MalformedStructureError(f"Broken zlib stream: {e}", 0) from None
        log.debug("zlib: %d -> %d bytes", len(data), len(raw))
        return raw, compression
    return bytes(data), compression


def compress(data: bytes, compression: Compression) -> bytes:
    if compression is Compression.ZLIB:
        out = zlib.compress(data)
        log.debug("zlib: %d -> %d bytes", len(data), len(out))
        return out
    return bytes(data)
