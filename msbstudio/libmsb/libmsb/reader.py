"""libmsb.reader

Load an MSB file into a linked entry graph.

The input may be a bare MSB buffer or a zlib stream around one; the codec
found is kept on the result (MSB.compression) so writing it back reproduces
the same wrapping.
"""

from __future__ import annotations

import logging

from .compression import decompress
from .msb import MSB

log = logging.getLogger(__name__)


def read_msb_bytes(data: bytes) -> MSB:
    raw, compression = decompress(data)
    msb = MSB.from_bytes(raw)
    msb.compression = compression
    return msb


def read_msb(path: str) -> MSB:
    with open(path, "rb") as f:
        data = f.read()
    log.debug("reading %s (%d bytes)", path, len(data))
    return read_msb_bytes(data)
