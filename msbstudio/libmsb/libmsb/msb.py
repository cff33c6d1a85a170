"""libmsb.msb

The MSB aggregate: header plus six chained tables.

Header (16 bytes):
  "MSB ", s32 1, s32 0x10, u8 big endian flag, u8 0, u8 1, s8 -1

Tables follow in a fixed order, each linking to the next:
  MODEL_PARAM_ST, EVENT_PARAM_ST, POINT_PARAM_ST, ROUTE_PARAM_ST,
  LAYER_PARAM_ST, PARTS_PARAM_ST

Loading resolves raw indices into references (deindex). Saving runs two
passes before writing:
  stage 1  stable sort of every typed table by type, then type_index
           renumbered within each type
  stage 2  references turned back into indices (reindex), against the
           stage 1 order
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List

from .binary import BinaryReader, BinaryWriter
from .compression import Compression
from .errors import AuthoringError, UnsupportedVariantError
from .events import EventParam
from .layers import LayerParam
from .model import Param
from .models import ModelParam
from .parts import PartsParam
from .points import PointParam
from .routes import RouteParam

log = logging.getLogger(__name__)

MAGIC = "MSB "
HEADER_SIZE = 0x10
_ENDIAN_FLAG_OFS = 0xC


class MsbState(Enum):
    # raw indices only; references not resolved yet
    RAW = "raw"
    LINKED = "linked"
    REORDERING = "reordering"
    REINDEXED = "reindexed"
    SERIALIZED = "serialized"


class MSB:
    def __init__(self, big_endian: bool = False, compression: Compression = Compression.NONE):
        self.big_endian = big_endian
        self.compression = compression
        self.models = ModelParam()
        self.events = EventParam()
        self.points = PointParam()
        self.routes = RouteParam()
        self.layers = LayerParam()
        self.parts = PartsParam()
        # graphs built in memory have no raw indices to resolve
        self.state = MsbState.LINKED

    def __repr__(self) -> str:
        counts = ", ".join(f"{p.NAME}={len(p)}" for p in self.params)
        return f"MSB(big_endian={self.big_endian}, {counts})"

    @property
    def params(self) -> List[Param]:
        """Tables in file order."""
        return [self.models, self.events, self.points, self.routes, self.layers, self.parts]

    def _typed_params(self) -> List[Param]:
        return [self.models, self.events, self.points, self.routes, self.parts]

    def _linked_params(self) -> List[Param]:
        return [self.events, self.points, self.parts]

    # -----------------------------
    # Load
    # -----------------------------

    @classmethod
    def read(cls, br: BinaryReader) -> "MSB":
        br.seek(0)
        big_endian = _read_header(br)
        msb = cls(big_endian=big_endian)
        msb.state = MsbState.RAW

        msb.models = ModelParam.read(br, last=False)
        msb.events = EventParam.read(br, last=False)
        msb.points = PointParam.read(br, last=False)
        msb.routes = RouteParam.read(br, last=False)
        msb.layers = LayerParam.read(br, last=False)
        msb.parts = PartsParam.read(br, last=True)

        for param in msb._linked_params():
            param.deindex(msb)
        msb.state = MsbState.LINKED
        log.debug("loaded %r", msb)
        return msb

    @classmethod
    def from_bytes(cls, data: bytes) -> "MSB":
        """Parse an uncompressed MSB buffer."""
        return cls.read(BinaryReader(data))

    # -----------------------------
    # Save
    # -----------------------------

    def _set_state(self, state: MsbState) -> None:
        log.debug("state %s -> %s", self.state.value, state.value)
        self.state = state

    def assign_type_indices(self) -> None:
        """Stage 1: group entries by type and renumber type_index."""
        for param in self._typed_params():
            param.assign_type_indices()

    def reindex(self) -> None:
        """Stage 2: turn references back into raw indices."""
        for param in self._linked_params():
            param.reindex(self)

    def write(self, bw: BinaryWriter) -> None:
        """Write header and tables; raw indices must be current."""
        bw.big_endian = self.big_endian
        _write_header(bw, self.big_endian)
        params = self.params
        for i, param in enumerate(params):
            param.write(bw, last=i == len(params) - 1)

    def to_bytes(self) -> bytes:
        """Run the save pipeline and return the uncompressed file."""
        if self.state is not MsbState.LINKED:
            raise AuthoringError(f"Cannot save an MSB in state {self.state.value}")
        if self.layers.entries:
            raise UnsupportedVariantError(
                f"{self.layers.NAME} with {len(self.layers)} entries cannot be written"
            )
        try:
            self._set_state(MsbState.REORDERING)
            self.assign_type_indices()
            self.reindex()
            self._set_state(MsbState.REINDEXED)

            bw = BinaryWriter(self.big_endian)
            self.write(bw)
            data = bw.finalize()
            self._set_state(MsbState.SERIALIZED)
            log.debug("serialized %d bytes", len(data))
            return data
        finally:
            self._set_state(MsbState.LINKED)


def _read_header(br: BinaryReader) -> bool:
    br.assert_ascii(MAGIC)
    # the flag decides how the two s32 constants in front of it are read
    br.push(_ENDIAN_FLAG_OFS)
    big_endian = br.assert_u8(0, 1) == 1
    br.pop()
    br.big_endian = big_endian
    br.assert_s32(1)
    br.assert_s32(HEADER_SIZE)
    br.assert_u8(1 if big_endian else 0)
    br.assert_u8(0)
    br.assert_u8(1)
    br.assert_s8(-1)
    return big_endian


def _write_header(bw: BinaryWriter, big_endian: bool) -> None:
    bw.write(MAGIC.encode("ascii"))
    bw.write_s32(1)
    bw.write_s32(HEADER_SIZE)
    bw.write_u8(1 if big_endian else 0)
    bw.write_u8(0)
    bw.write_u8(1)
    bw.write_s8(-1)
