"""libmsb.routes

ROUTE_PARAM_ST: links between two points, addressed by point number.

Record layout:
  s64 name offset, s32 parent point no, s32 child point no
  u32 type, s32 type index, s32 x26 (always 0)
  name
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from .binary import BinaryReader, BinaryWriter
from .model import Entry, Param

_RESERVED = 26


class RouteType(IntEnum):
    TYPE3 = 3
    TYPE4 = 4


@dataclass(eq=False, repr=False)
class Route(Entry):
    name: str = ""
    # point numbers, not table indices; nothing to resolve
    parent_point_no: int = 0
    child_point_no: int = 0
    type: RouteType = RouteType.TYPE3
    type_index: int = 0

    @classmethod
    def read(cls, br: BinaryReader) -> "Route":
        start = br.tell()
        r = cls()
        r.name = br.get_utf16(start + br.s64())
        r.parent_point_no = br.s32()
        r.child_point_no = br.s32()
        r.type = br.read_enum32(RouteType)
        r.type_index = br.s32()
        br.assert_s32s(0, _RESERVED)
        return r

    def write(self, bw: BinaryWriter) -> None:
        start = bw.tell()
        bw.reserve_s64("RouteNameOffset")
        bw.write_s32(self.parent_point_no)
        bw.write_s32(self.child_point_no)
        bw.write_u32(self.type)
        bw.write_s32(self.type_index)
        bw.write_s32s([0] * _RESERVED)

        bw.fill("RouteNameOffset", bw.tell() - start)
        bw.write_utf16(self.name)


class RouteParam(Param[Route]):
    NAME = "ROUTE_PARAM_ST"
    ENTRY = Route
