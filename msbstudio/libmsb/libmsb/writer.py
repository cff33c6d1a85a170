"""libmsb.writer

Save an entry graph back to MSB bytes.

Writing is canonical rather than lossless: every typed table is regrouped by
type (stable), type indices are renumbered and all references re-resolved
before anything is emitted. A file that is already in that order comes back
byte-identical.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from .compression import Compression, compress
from .msb import MSB

log = logging.getLogger(__name__)


def write_msb_bytes(msb: MSB, compression: Optional[Compression] = None) -> bytes:
    """Serialize msb; compression defaults to the codec it was loaded with."""
    codec = msb.compression if compression is None else compression
    return compress(msb.to_bytes(), codec)


def write_msb(msb: MSB, out_path: str, compression: Optional[Compression] = None) -> None:
    data = write_msb_bytes(msb, compression)
    parent = os.path.dirname(os.path.abspath(out_path))
    os.makedirs(parent, exist_ok=True)
    with open(out_path, "wb") as f:
        f.write(data)
    log.debug("wrote %s (%d bytes)", out_path, len(data))
