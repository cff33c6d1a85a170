"""libmsb.models

MODEL_PARAM_ST: the model files a map places instances of.

Record layout (offsets relative to the record start):
  s64 name offset
  u32 type
  s32 type index
  s64 file offset
  s32 instance count
  s32 x3 (always 0)
  name, file (UTF-16, null terminated)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from .binary import BinaryReader, BinaryWriter
from .model import Entry, Param


class ModelType(IntEnum):
    MAP = 0
    ENE = 2
    PLAYER = 4
    HIT = 5
    DUMMY_ENE = 8
    INVALID = 9
    GEOM = 10


@dataclass(eq=False, repr=False)
class Model(Entry):
    name: str = ""
    type: ModelType = ModelType.MAP
    type_index: int = 0
    file: str = ""
    instance_count: int = 0

    @classmethod
    def read(cls, br: BinaryReader) -> "Model":
        start = br.tell()
        m = cls()
        m.name = br.get_utf16(start + br.s64())
        m.type = br.read_enum32(ModelType)
        m.type_index = br.s32()
        m.file = br.get_utf16(start + br.s64())
        m.instance_count = br.s32()
        br.assert_s32s(0, 3)
        return m

    def write(self, bw: BinaryWriter) -> None:
        start = bw.tell()
        bw.reserve_s64("ModelNameOffset")
        bw.write_u32(self.type)
        bw.write_s32(self.type_index)
        bw.reserve_s64("ModelFileOffset")
        bw.write_s32(self.instance_count)
        bw.write_s32s([0, 0, 0])

        bw.fill("ModelNameOffset", bw.tell() - start)
        bw.write_utf16(self.name)

        bw.fill("ModelFileOffset", bw.tell() - start)
        bw.write_utf16(self.file)


class ModelParam(Param[Model]):
    NAME = "MODEL_PARAM_ST"
    ENTRY = Model
