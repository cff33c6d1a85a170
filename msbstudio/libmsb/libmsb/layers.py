"""libmsb.layers

LAYER_PARAM_ST: always empty in shipped maps. The record layout is unknown,
so a table that actually holds entries is refused both ways.
"""

from __future__ import annotations

from dataclasses import dataclass

from .binary import BinaryReader, BinaryWriter
from .errors import UnsupportedVariantError
from .model import Entry, Param


@dataclass(eq=False, repr=False)
class Layer(Entry):
    name: str = ""

    @classmethod
    def read(cls, br: BinaryReader) -> "Layer":
        raise UnsupportedVariantError(f"Layer entries are not supported (entry at 0x{br.tell():X})")

    def write(self, bw: BinaryWriter) -> None:
        raise UnsupportedVariantError("Layer entries are not supported")


class LayerParam(Param[Layer]):
    NAME = "LAYER_PARAM_ST"
    ENTRY = Layer
    TYPED = False

    def write(self, bw: BinaryWriter, last: bool) -> None:
        if self.entries:
            raise UnsupportedVariantError(f"{self.NAME} with {len(self.entries)} entries cannot be written")
        super().write(bw, last)
