"""libmsb.parts

PARTS_PARAM_ST: placed instances of models (map pieces, enemies, collision,
player spawns, assets).

Record layout:
  s64 name offset, s32 part no, u32 type, s32 type index, s32 model index
  s64 file offset, vec3 position, vec3 angle, vec3 scale
  s32 unk44, u32 map studio layer, s32 0
  s64 offsets: struct50, struct58, common, type data, gparam, scene gparam,
               grass, struct88, struct90, struct98, structa0, structa8
  s64 0, s64 0
  name, file, pad(8), then the blocks in offset order

Optional blocks have offset 0 when absent. Type data is always present.

Most part references address the whole Parts table. Two do not:
  PartEneData.patrol_route      s16, index among PATROL_ROUTE events
  PartConnectHitData.parent_hit s32, index among HIT parts
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Dict, List, Optional, Type

from .binary import BinaryReader, BinaryWriter, Vector3
from .errors import MalformedStructureError
from .events import Event, EventType
from .model import Block, ConstantBlock, Entry, Param, check_type_data, index_field, read_type_data
from .models import Model
from .xref import filtered, find_entry, find_index, find_index_s16

if TYPE_CHECKING:
    from .msb import MSB


class PartType(IntEnum):
    MAP = 0
    ENE = 2
    PLAYER = 4
    HIT = 5
    DUMMY_OBJ = 9
    DUMMY_ENE = 10
    CONNECT_HIT = 11
    GEOM = 13


def _read_block(br: BinaryReader, start: int, offset: int, layout, required: bool = False):
    if offset == 0:
        if required:
            raise MalformedStructureError(f"{layout.__name__} is missing", start)
        return None
    br.push(start + offset)
    block = layout.read(br)
    br.pop()
    return block


# -----------------------------
# Fixed blocks
# -----------------------------

@dataclass
class PartStruct50(Block):
    disp_groups: List[int] = field(default_factory=lambda: [0] * 8)
    draw_groups: List[int] = field(default_factory=lambda: [0] * 8)
    hit_mask: List[int] = field(default_factory=lambda: [0] * 32)
    unkc0: bool = False
    unkc1: bool = False

    @classmethod
    def read(cls, br: BinaryReader) -> "PartStruct50":
        s = cls()
        s.disp_groups = br.u32s(8)
        s.draw_groups = br.u32s(8)
        s.hit_mask = br.u32s(32)
        s.unkc0 = br.boolean()
        s.unkc1 = br.boolean()
        br.assert_s16(0)
        br.assert_s16(-1)
        br.assert_s16(0)
        br.assert_s32s(0, 48)
        return s

    def write(self, bw: BinaryWriter) -> None:
        bw.write_u32s(self.disp_groups)
        bw.write_u32s(self.draw_groups)
        bw.write_u32s(self.hit_mask)
        bw.write_boolean(self.unkc0)
        bw.write_boolean(self.unkc1)
        bw.write_s16(0)
        bw.write_s16(-1)
        bw.write_s16(0)
        bw.write_s32s([0] * 48)


@dataclass
class PartStruct58(Block):
    unk00: int = -1
    disp_groups: List[int] = field(default_factory=lambda: [0] * 8)

    @classmethod
    def read(cls, br: BinaryReader) -> "PartStruct58":
        s = cls(unk00=br.s32(), disp_groups=br.u32s(8))
        br.assert_s16(0)
        br.assert_s16(-1)
        br.assert_s32s(0, 8)
        return s

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)
        bw.write_u32s(self.disp_groups)
        bw.write_s16(0)
        bw.write_s16(-1)
        bw.write_s32s([0] * 8)


@dataclass
class PartCommon(Block):
    entity_id: int = 0
    unk04: bool = False
    unk05: bool = True
    unk08: int = 0
    unk0c: bool = False
    unk0d: bool = False
    unk0e: bool = False
    unk0f: bool = False
    unk10: bool = False
    unk11: bool = True
    unk14: bool = False
    unk15: bool = False
    unk16: bool = False
    unk17: bool = False
    unk1a: bool = False
    unk1b: int = 0
    entity_group_ids: List[int] = field(default_factory=lambda: [0] * 8)
    unk3c: int = -1
    unk3e: int = 0
    unk40: int = 0
    variation: int = -1

    @classmethod
    def read(cls, br: BinaryReader) -> "PartCommon":
        c = cls()
        c.entity_id = br.u32()
        c.unk04 = br.boolean()
        c.unk05 = br.boolean()
        br.assert_s16(0)
        c.unk08 = br.s32()
        c.unk0c = br.boolean()
        c.unk0d = br.boolean()
        c.unk0e = br.boolean()
        c.unk0f = br.boolean()
        c.unk10 = br.boolean()
        c.unk11 = br.boolean()
        br.assert_s16(0)
        c.unk14 = br.boolean()
        c.unk15 = br.boolean()
        c.unk16 = br.boolean()
        c.unk17 = br.boolean()
        br.assert_s16(0)
        c.unk1a = br.boolean()
        c.unk1b = br.u8()
        c.entity_group_ids = br.u32s(8)
        c.unk3c = br.s16()
        c.unk3e = br.s16()
        c.unk40 = br.s32()
        c.variation = br.s32()
        br.assert_s32s(0, 2)
        return c

    def write(self, bw: BinaryWriter) -> None:
        bw.write_u32(self.entity_id)
        bw.write_boolean(self.unk04)
        bw.write_boolean(self.unk05)
        bw.write_s16(0)
        bw.write_s32(self.unk08)
        for flag in (self.unk0c, self.unk0d, self.unk0e, self.unk0f, self.unk10, self.unk11):
            bw.write_boolean(flag)
        bw.write_s16(0)
        for flag in (self.unk14, self.unk15, self.unk16, self.unk17):
            bw.write_boolean(flag)
        bw.write_s16(0)
        bw.write_boolean(self.unk1a)
        bw.write_u8(self.unk1b)
        bw.write_u32s(self.entity_group_ids)
        bw.write_s16(self.unk3c)
        bw.write_s16(self.unk3e)
        bw.write_s32(self.unk40)
        bw.write_s32(self.variation)
        bw.write_s32s([0, 0])


@dataclass
class PartGparam(Block):
    light_id: int = -1
    fog_id: int = -1

    @classmethod
    def read(cls, br: BinaryReader) -> "PartGparam":
        g = cls(light_id=br.s32(), fog_id=br.s32())
        br.assert_s32s(0, 6)
        return g

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.light_id)
        bw.write_s32(self.fog_id)
        bw.write_s32s([0] * 6)


@dataclass
class PartSceneGparam(Block):
    unk10: float = -1.0
    unk18: int = -1
    unk1d: int = -1
    unk20: int = -1

    @classmethod
    def read(cls, br: BinaryReader) -> "PartSceneGparam":
        g = cls()
        br.assert_s32s(0, 4)
        g.unk10 = br.f32()
        br.assert_s32(0)
        g.unk18 = br.s8()
        br.assert_s8(-1)
        br.assert_s16(-1)
        br.assert_s8(-1)
        g.unk1d = br.s8()
        br.assert_s16(0)
        g.unk20 = br.s16()
        br.assert_s16(0)
        br.assert_s32s(0, 11)
        return g

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32s([0] * 4)
        bw.write_f32(self.unk10)
        bw.write_s32(0)
        bw.write_s8(self.unk18)
        bw.write_s8(-1)
        bw.write_s16(-1)
        bw.write_s8(-1)
        bw.write_s8(self.unk1d)
        bw.write_s16(0)
        bw.write_s16(self.unk20)
        bw.write_s16(0)
        bw.write_s32s([0] * 11)


@dataclass
class PartGrass(Block):
    grass_types: List[int] = field(default_factory=lambda: [0] * 6)

    @classmethod
    def read(cls, br: BinaryReader) -> "PartGrass":
        g = cls(grass_types=br.s32s(6))
        br.assert_s32(-1)
        br.assert_s32(0)
        return g

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32s(self.grass_types)
        bw.write_s32(-1)
        bw.write_s32(0)


class PartStruct88(ConstantBlock):
    VALUES = (0,) * 8


@dataclass
class PartStruct90(Block):
    unk00: int = 0

    @classmethod
    def read(cls, br: BinaryReader) -> "PartStruct90":
        s = cls(unk00=br.s32())
        br.assert_s32s(0, 7)
        return s

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)
        bw.write_s32s([0] * 7)


@dataclass
class PartStruct98(Block):
    unk00: int = -1
    unk04: int = 0
    unk0c: int = -1
    unk14: int = -1

    @classmethod
    def read(cls, br: BinaryReader) -> "PartStruct98":
        s = cls()
        s.unk00 = br.s32()
        s.unk04 = br.s32()
        br.assert_s32(0)
        s.unk0c = br.s32()
        br.assert_s32(0)
        s.unk14 = br.s32()
        br.assert_s32s(0, 2)
        return s

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)
        bw.write_s32(self.unk04)
        bw.write_s32(0)
        bw.write_s32(self.unk0c)
        bw.write_s32(0)
        bw.write_s32(self.unk14)
        bw.write_s32s([0, 0])


class PartStructA0(ConstantBlock):
    VALUES = (0,) * 8


@dataclass
class PartStructA8(Block):
    unk00: int = -1
    unk02: int = -1
    unk04: int = -1

    @classmethod
    def read(cls, br: BinaryReader) -> "PartStructA8":
        s = cls(unk00=br.s16(), unk02=br.s16(), unk04=br.s16())
        br.assert_s16(0)
        br.assert_s32s(0, 2)
        return s

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s16(self.unk00)
        bw.write_s16(self.unk02)
        bw.write_s16(self.unk04)
        bw.write_s16(0)
        bw.write_s32s([0, 0])


# -----------------------------
# Type data
# -----------------------------

class PartTypeData(Block):
    pass


class PartMapData(ConstantBlock, PartTypeData):
    VALUES = (0, 0)


@dataclass
class PartEneStruct78(Block):
    @classmethod
    def read(cls, br: BinaryReader) -> "PartEneStruct78":
        br.assert_s32(0)
        br.assert_f32(1)
        for _ in range(5):
            br.assert_s32(-1)
            br.assert_s16(-1)
            br.assert_s16(10)
        br.assert_s32s(0, 4)
        return cls()

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(0)
        bw.write_f32(1)
        for _ in range(5):
            bw.write_s32(-1)
            bw.write_s16(-1)
            bw.write_s16(10)
        bw.write_s32s([0] * 4)


@dataclass
class PartEneData(PartTypeData):
    """Enemy placement; shared by ENE and DUMMY_ENE parts."""

    npc_think_param_id: int = 0
    npc_param_id: int = 0
    talk_id: int = 0
    unk15: bool = False
    unk16: int = 0
    chara_init_param_id: int = -1
    parent_part: Optional["Part"] = None
    # index among PATROL_ROUTE events, not the whole Events table
    patrol_route: Optional[Event] = None
    unk22: int = -1
    unk28: int = 0
    unk2c: int = 0
    unk30: int = 0
    unk34: int = 0
    unk38: int = -1
    unk3c: int = -1
    unk40: int = 0
    unk44: int = 0
    unk48: int = 0
    unk4c: int = 0
    struct78: PartEneStruct78 = field(default_factory=PartEneStruct78)
    _parent_part_index: int = index_field()
    _patrol_route_index: int = index_field()

    @classmethod
    def read(cls, br: BinaryReader) -> "PartEneData":
        start = br.tell()
        d = cls()
        br.assert_s32(-1)
        br.assert_s32(-1)
        d.npc_think_param_id = br.s32()
        d.npc_param_id = br.s32()
        d.talk_id = br.s32()
        br.assert_u8(0)
        d.unk15 = br.boolean()
        d.unk16 = br.s16()
        d.chara_init_param_id = br.s32()
        d._parent_part_index = br.s32()
        d._patrol_route_index = br.s16()
        d.unk22 = br.s16()
        br.assert_s32(-1)
        d.unk28 = br.s32()
        d.unk2c = br.s32()
        d.unk30 = br.s32()
        d.unk34 = br.s32()
        d.unk38 = br.s32()
        d.unk3c = br.s8()
        br.assert_u8(0)
        br.assert_s16(0)
        d.unk40 = br.s32()
        d.unk44 = br.s32()
        d.unk48 = br.s32()
        d.unk4c = br.s32()
        br.assert_s32s(0, 8)
        br.assert_s64(0)
        d.struct78 = _read_block(br, start, br.s64(), PartEneStruct78, required=True)
        return d

    def deindex(self, msb: "MSB") -> None:
        self.parent_part = find_entry(msb.parts.entries, self._parent_part_index, "PartEneData.parent_part")
        patrol_routes = filtered(msb.events.entries, EventType.PATROL_ROUTE)
        self.patrol_route = find_entry(patrol_routes, self._patrol_route_index, "PartEneData.patrol_route")

    def reindex(self, msb: "MSB") -> None:
        self._parent_part_index = find_index(msb.parts.entries, self.parent_part, "PartEneData.parent_part")
        patrol_routes = filtered(msb.events.entries, EventType.PATROL_ROUTE)
        self._patrol_route_index = find_index_s16(patrol_routes, self.patrol_route, "PartEneData.patrol_route")

    def write(self, bw: BinaryWriter) -> None:
        start = bw.tell()
        bw.write_s32(-1)
        bw.write_s32(-1)
        bw.write_s32(self.npc_think_param_id)
        bw.write_s32(self.npc_param_id)
        bw.write_s32(self.talk_id)
        bw.write_u8(0)
        bw.write_boolean(self.unk15)
        bw.write_s16(self.unk16)
        bw.write_s32(self.chara_init_param_id)
        bw.write_s32(self._parent_part_index)
        bw.write_s16(self._patrol_route_index)
        bw.write_s16(self.unk22)
        bw.write_s32(-1)
        bw.write_s32(self.unk28)
        bw.write_s32(self.unk2c)
        bw.write_s32(self.unk30)
        bw.write_s32(self.unk34)
        bw.write_s32(self.unk38)
        bw.write_s8(self.unk3c)
        bw.write_u8(0)
        bw.write_s16(0)
        bw.write_s32(self.unk40)
        bw.write_s32(self.unk44)
        bw.write_s32(self.unk48)
        bw.write_s32(self.unk4c)
        bw.write_s32s([0] * 8)
        bw.write_s64(0)
        bw.reserve_s64("PartEneStruct78Offset")

        bw.fill("PartEneStruct78Offset", bw.tell() - start)
        self.struct78.write(bw)


@dataclass
class PartPlayerData(PartTypeData):
    unk00: int = 0

    @classmethod
    def read(cls, br: BinaryReader) -> "PartPlayerData":
        d = cls(unk00=br.s32())
        br.assert_s32s(0, 3)
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)
        bw.write_s32s([0, 0, 0])


@dataclass
class PartHitData(PartTypeData):
    unk00: int = 0
    unk02: int = -1
    unk04: float = 0.0
    unk18: int = -1
    unk1c: int = -1
    unk26: bool = False
    unk27: bool = False
    unk34: int = 0
    unk35: int = -1
    unk3c: int = -1

    @classmethod
    def read(cls, br: BinaryReader) -> "PartHitData":
        d = cls()
        d.unk00 = br.u8()
        br.assert_s8(-1)
        d.unk02 = br.s8()
        br.assert_u8(0)
        d.unk04 = br.f32()
        br.assert_s32s(0, 3)
        br.assert_f32(-1)
        d.unk18 = br.s32()
        d.unk1c = br.s32()
        br.assert_s32(-1)
        br.assert_s16(-1)
        d.unk26 = br.boolean()
        d.unk27 = br.boolean()
        br.assert_s32(0)
        br.assert_s32(-1)
        br.assert_s32(-1)
        d.unk34 = br.u8()
        d.unk35 = br.s8()
        br.assert_s16(0)
        br.assert_s32(-1)
        d.unk3c = br.s16()
        br.assert_s16(-1)
        br.assert_s32s(0, 3)
        br.assert_s16(0)
        br.assert_s16(-1)
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_u8(self.unk00)
        bw.write_s8(-1)
        bw.write_s8(self.unk02)
        bw.write_u8(0)
        bw.write_f32(self.unk04)
        bw.write_s32s([0, 0, 0])
        bw.write_f32(-1)
        bw.write_s32(self.unk18)
        bw.write_s32(self.unk1c)
        bw.write_s32(-1)
        bw.write_s16(-1)
        bw.write_boolean(self.unk26)
        bw.write_boolean(self.unk27)
        bw.write_s32(0)
        bw.write_s32(-1)
        bw.write_s32(-1)
        bw.write_u8(self.unk34)
        bw.write_s8(self.unk35)
        bw.write_s16(0)
        bw.write_s32(-1)
        bw.write_s16(self.unk3c)
        bw.write_s16(-1)
        bw.write_s32s([0, 0, 0])
        bw.write_s16(0)
        bw.write_s16(-1)


class PartDummyObjData(ConstantBlock, PartTypeData):
    VALUES = (0, 0, -1, 0, -1, -1, -1, -1)


@dataclass
class PartConnectHitData(PartTypeData):
    # index among HIT parts, not the whole Parts table
    parent_hit: Optional["Part"] = None
    map_id: List[int] = field(default_factory=lambda: [0, 0, 0, 0])
    unk0a: int = -1
    unk0b: bool = False
    _parent_hit_index: int = index_field()

    @classmethod
    def read(cls, br: BinaryReader) -> "PartConnectHitData":
        d = cls()
        d._parent_hit_index = br.s32()
        d.map_id = br.s8s(4)
        br.assert_s16(0)
        d.unk0a = br.s8()
        d.unk0b = br.boolean()
        br.assert_s32(0)
        return d

    def deindex(self, msb: "MSB") -> None:
        hits = filtered(msb.parts.entries, PartType.HIT)
        self.parent_hit = find_entry(hits, self._parent_hit_index, "PartConnectHitData.parent_hit")

    def reindex(self, msb: "MSB") -> None:
        hits = filtered(msb.parts.entries, PartType.HIT)
        self._parent_hit_index = find_index(hits, self.parent_hit, "PartConnectHitData.parent_hit")

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self._parent_hit_index)
        bw.write_s8s(self.map_id)
        bw.write_s16(0)
        bw.write_s8(self.unk0a)
        bw.write_boolean(self.unk0b)
        bw.write_s32(0)


@dataclass
class PartGeomStruct68(Block):
    unk00: int = 0
    unk04: int = 0

    @classmethod
    def read(cls, br: BinaryReader) -> "PartGeomStruct68":
        s = cls()
        s.unk00 = br.s16()
        br.assert_s16(-1)
        s.unk04 = br.s16()
        br.assert_s16(-1)
        br.assert_s32s(0, 2)
        br.assert_s32s(-1, 4)
        br.assert_s32(0)
        br.assert_s32s(-1, 3)
        br.assert_s32s(0, 4)
        return s

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s16(self.unk00)
        bw.write_s16(-1)
        bw.write_s16(self.unk04)
        bw.write_s16(-1)
        bw.write_s32s([0, 0])
        bw.write_s32s([-1] * 4)
        bw.write_s32(0)
        bw.write_s32s([-1] * 3)
        bw.write_s32s([0] * 4)


@dataclass
class PartGeomStruct70(Block):
    unk04: int = -1
    unk1c: int = -1

    @classmethod
    def read(cls, br: BinaryReader) -> "PartGeomStruct70":
        s = cls()
        br.assert_s32(0)
        s.unk04 = br.s32()
        br.assert_s32(-1)
        br.assert_s32s(0, 2)
        br.assert_f32(-1)
        br.assert_s32(0)
        s.unk1c = br.s8()
        br.assert_s8(-1)
        br.assert_s16(-1)
        br.assert_s32s(0, 8)
        return s

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(0)
        bw.write_s32(self.unk04)
        bw.write_s32(-1)
        bw.write_s32s([0, 0])
        bw.write_f32(-1)
        bw.write_s32(0)
        bw.write_s8(self.unk1c)
        bw.write_s8(-1)
        bw.write_s16(-1)
        bw.write_s32s([0] * 8)


@dataclass
class PartGeomStruct78(Block):
    unk00: int = 0
    unk04: float = 0.0
    unk0a: int = 0
    unk0b: int = -1
    unk0c: int = -1

    @classmethod
    def read(cls, br: BinaryReader) -> "PartGeomStruct78":
        s = cls()
        s.unk00 = br.s32()
        s.unk04 = br.f32()
        br.assert_s16(-1)
        s.unk0a = br.u8()
        s.unk0b = br.s8()
        s.unk0c = br.s16()
        br.assert_s16(0)
        br.assert_f32(-1)
        br.assert_s32s(-1, 4)
        br.assert_s8(-1)
        br.assert_u8(0)
        br.assert_s16(0)
        br.assert_s32s(0, 6)
        return s

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)
        bw.write_f32(self.unk04)
        bw.write_s16(-1)
        bw.write_u8(self.unk0a)
        bw.write_s8(self.unk0b)
        bw.write_s16(self.unk0c)
        bw.write_s16(0)
        bw.write_f32(-1)
        bw.write_s32s([-1] * 4)
        bw.write_s8(-1)
        bw.write_u8(0)
        bw.write_s16(0)
        bw.write_s32s([0] * 6)


@dataclass
class PartGeomStruct80(Block):
    unk00: bool = False
    unk02: int = -1

    @classmethod
    def read(cls, br: BinaryReader) -> "PartGeomStruct80":
        s = cls()
        s.unk00 = br.boolean()
        br.assert_s8(-1)
        s.unk02 = br.s8()
        br.assert_u8(0)
        br.assert_s32s(0, 15)
        return s

    def write(self, bw: BinaryWriter) -> None:
        bw.write_boolean(self.unk00)
        bw.write_s8(-1)
        bw.write_s8(self.unk02)
        bw.write_u8(0)
        bw.write_s32s([0] * 15)


_GEOM_PART_SLOTS = ("part38", "part40", "part44", "part48", "part4c", "part54")


@dataclass
class PartGeomData(PartTypeData):
    """Asset placement."""

    unk00: int = 0
    unk01: int = 0
    unk04: int = -1
    unk10: int = 0
    unk11: int = 0
    unk12: int = -1
    unk14: int = 0
    unk1c: int = -1
    unk34: int = -1
    part38: Optional["Part"] = None
    part40: Optional["Part"] = None
    part44: Optional["Part"] = None
    part48: Optional["Part"] = None
    part4c: Optional["Part"] = None
    part54: Optional["Part"] = None
    unk58: int = -1
    struct68: PartGeomStruct68 = field(default_factory=PartGeomStruct68)
    struct70: PartGeomStruct70 = field(default_factory=PartGeomStruct70)
    struct78: PartGeomStruct78 = field(default_factory=PartGeomStruct78)
    struct80: PartGeomStruct80 = field(default_factory=PartGeomStruct80)
    # slot name -> raw index
    _part_indices: Dict[str, int] = field(
        default_factory=lambda: dict.fromkeys(_GEOM_PART_SLOTS, -1), init=False, repr=False, compare=False
    )

    @classmethod
    def read(cls, br: BinaryReader) -> "PartGeomData":
        start = br.tell()
        d = cls()
        d.unk00 = br.u8()
        d.unk01 = br.u8()
        br.assert_s16(0)
        d.unk04 = br.s32()
        br.assert_s32s(0, 2)
        d.unk10 = br.u8()
        d.unk11 = br.u8()
        d.unk12 = br.s8()
        br.assert_u8(0)
        d.unk14 = br.s32()
        br.assert_s32(0)
        d.unk1c = br.s16()
        br.assert_s16(-1)
        br.assert_s32s(-1, 2)
        br.assert_s32s(0, 2)
        br.assert_s32(-1)
        d.unk34 = br.s32()
        idx = d._part_indices
        idx["part38"] = br.s32()
        br.assert_s32(-1)
        idx["part40"] = br.s32()
        idx["part44"] = br.s32()
        idx["part48"] = br.s32()
        idx["part4c"] = br.s32()
        br.assert_s32(0)
        idx["part54"] = br.s32()
        d.unk58 = br.s32()
        br.assert_s32s(-1, 3)
        ofs68 = br.s64()
        ofs70 = br.s64()
        ofs78 = br.s64()
        ofs80 = br.s64()
        d.struct68 = _read_block(br, start, ofs68, PartGeomStruct68, required=True)
        d.struct70 = _read_block(br, start, ofs70, PartGeomStruct70, required=True)
        d.struct78 = _read_block(br, start, ofs78, PartGeomStruct78, required=True)
        d.struct80 = _read_block(br, start, ofs80, PartGeomStruct80, required=True)
        return d

    def deindex(self, msb: "MSB") -> None:
        for slot in _GEOM_PART_SLOTS:
            setattr(self, slot, find_entry(msb.parts.entries, self._part_indices[slot], f"PartGeomData.{slot}"))

    def reindex(self, msb: "MSB") -> None:
        for slot in _GEOM_PART_SLOTS:
            self._part_indices[slot] = find_index(msb.parts.entries, getattr(self, slot), f"PartGeomData.{slot}")

    def write(self, bw: BinaryWriter) -> None:
        start = bw.tell()
        idx = self._part_indices
        bw.write_u8(self.unk00)
        bw.write_u8(self.unk01)
        bw.write_s16(0)
        bw.write_s32(self.unk04)
        bw.write_s32s([0, 0])
        bw.write_u8(self.unk10)
        bw.write_u8(self.unk11)
        bw.write_s8(self.unk12)
        bw.write_u8(0)
        bw.write_s32(self.unk14)
        bw.write_s32(0)
        bw.write_s16(self.unk1c)
        bw.write_s16(-1)
        bw.write_s32s([-1, -1])
        bw.write_s32s([0, 0])
        bw.write_s32(-1)
        bw.write_s32(self.unk34)
        bw.write_s32(idx["part38"])
        bw.write_s32(-1)
        bw.write_s32(idx["part40"])
        bw.write_s32(idx["part44"])
        bw.write_s32(idx["part48"])
        bw.write_s32(idx["part4c"])
        bw.write_s32(0)
        bw.write_s32(idx["part54"])
        bw.write_s32(self.unk58)
        bw.write_s32s([-1] * 3)
        bw.reserve_s64("PartGeomStruct68Offset")
        bw.reserve_s64("PartGeomStruct70Offset")
        bw.reserve_s64("PartGeomStruct78Offset")
        bw.reserve_s64("PartGeomStruct80Offset")

        bw.fill("PartGeomStruct68Offset", bw.tell() - start)
        self.struct68.write(bw)
        bw.fill("PartGeomStruct70Offset", bw.tell() - start)
        self.struct70.write(bw)
        bw.fill("PartGeomStruct78Offset", bw.tell() - start)
        self.struct78.write(bw)
        bw.fill("PartGeomStruct80Offset", bw.tell() - start)
        self.struct80.write(bw)


PART_TYPE_DATA: Dict[PartType, Type[PartTypeData]] = {
    PartType.MAP: PartMapData,
    PartType.ENE: PartEneData,
    PartType.PLAYER: PartPlayerData,
    PartType.HIT: PartHitData,
    PartType.DUMMY_OBJ: PartDummyObjData,
    PartType.DUMMY_ENE: PartEneData,
    PartType.CONNECT_HIT: PartConnectHitData,
    PartType.GEOM: PartGeomData,
}


# optional blocks written straight after the type data
_TRAILING_BLOCKS = (
    ("gparam", "PartGparamOffset"),
    ("scene_gparam", "PartSceneGparamOffset"),
    ("grass", "PartGrassOffset"),
)


@dataclass(eq=False, repr=False)
class Part(Entry):
    name: str = ""
    part_no: int = -1
    type: PartType = PartType.MAP
    type_index: int = 0
    model: Optional[Model] = None
    file: str = ""
    position: Vector3 = (0.0, 0.0, 0.0)
    angle: Vector3 = (0.0, 0.0, 0.0)
    scale: Vector3 = (1.0, 1.0, 1.0)
    unk44: int = 0
    map_studio_layer: int = 0xFFFFFFFF
    struct50: PartStruct50 = field(default_factory=PartStruct50)
    struct58: Optional[PartStruct58] = None
    common: PartCommon = field(default_factory=PartCommon)
    type_data: Optional[PartTypeData] = None
    gparam: Optional[PartGparam] = None
    scene_gparam: Optional[PartSceneGparam] = None
    grass: Optional[PartGrass] = None
    struct88: PartStruct88 = field(default_factory=PartStruct88)
    struct90: Optional[PartStruct90] = None
    struct98: PartStruct98 = field(default_factory=PartStruct98)
    structa0: Optional[PartStructA0] = None
    structa8: Optional[PartStructA8] = None
    _model_index: int = index_field()

    def __post_init__(self) -> None:
        if self.type_data is None:
            self.type_data = PART_TYPE_DATA[self.type]()

    @classmethod
    def read(cls, br: BinaryReader) -> "Part":
        start = br.tell()
        p = cls()
        p.name = br.get_utf16(start + br.s64())
        p.part_no = br.s32()
        p.type = br.read_enum32(PartType)
        p.type_index = br.s32()
        p._model_index = br.s32()
        p.file = br.get_utf16(start + br.s64())
        p.position = br.vector3()
        p.angle = br.vector3()
        p.scale = br.vector3()
        p.unk44 = br.s32()
        p.map_studio_layer = br.u32()
        br.assert_s32(0)
        ofs50 = br.s64()
        ofs58 = br.s64()
        common_ofs = br.s64()
        type_ofs = br.s64()
        gparam_ofs = br.s64()
        scene_gparam_ofs = br.s64()
        grass_ofs = br.s64()
        ofs88 = br.s64()
        ofs90 = br.s64()
        ofs98 = br.s64()
        ofsa0 = br.s64()
        ofsa8 = br.s64()
        br.assert_s64(0)
        br.assert_s64(0)

        p.struct50 = _read_block(br, start, ofs50, PartStruct50, required=True)
        p.struct58 = _read_block(br, start, ofs58, PartStruct58)
        p.common = _read_block(br, start, common_ofs, PartCommon, required=True)
        p.type_data = read_type_data(br, start, type_ofs, p.type, PART_TYPE_DATA)
        if p.type_data is None:
            raise MalformedStructureError(f"{p!r} has no type data", start)
        p.gparam = _read_block(br, start, gparam_ofs, PartGparam)
        p.scene_gparam = _read_block(br, start, scene_gparam_ofs, PartSceneGparam)
        p.grass = _read_block(br, start, grass_ofs, PartGrass)
        p.struct88 = _read_block(br, start, ofs88, PartStruct88, required=True)
        p.struct90 = _read_block(br, start, ofs90, PartStruct90)
        p.struct98 = _read_block(br, start, ofs98, PartStruct98, required=True)
        p.structa0 = _read_block(br, start, ofsa0, PartStructA0)
        p.structa8 = _read_block(br, start, ofsa8, PartStructA8)
        return p

    def deindex(self, msb: "MSB") -> None:
        self.model = find_entry(msb.models.entries, self._model_index, "Part.model")
        self.type_data.deindex(msb)

    def reindex(self, msb: "MSB") -> None:
        check_type_data(self, PART_TYPE_DATA, required=True)
        self._model_index = find_index(msb.models.entries, self.model, "Part.model")
        self.type_data.reindex(msb)

    @staticmethod
    def _write_optional(bw: BinaryWriter, start: int, name: str, block: Optional[Block]) -> None:
        bw.fill(name, 0 if block is None else bw.tell() - start)
        if block is not None:
            block.write(bw)

    def write(self, bw: BinaryWriter) -> None:
        start = bw.tell()
        bw.reserve_s64("PartNameOffset")
        bw.write_s32(self.part_no)
        bw.write_u32(self.type)
        bw.write_s32(self.type_index)
        bw.write_s32(self._model_index)
        bw.reserve_s64("PartFileOffset")
        bw.write_vector3(self.position)
        bw.write_vector3(self.angle)
        bw.write_vector3(self.scale)
        bw.write_s32(self.unk44)
        bw.write_u32(self.map_studio_layer)
        bw.write_s32(0)
        for name in (
            "PartOffset50",
            "PartOffset58",
            "PartCommonOffset",
            "PartTypeOffset",
            "PartGparamOffset",
            "PartSceneGparamOffset",
            "PartGrassOffset",
            "PartOffset88",
            "PartOffset90",
            "PartOffset98",
            "PartOffsetA0",
            "PartOffsetA8",
        ):
            bw.reserve_s64(name)
        bw.write_s64(0)
        bw.write_s64(0)

        bw.fill("PartNameOffset", bw.tell() - start)
        bw.write_utf16(self.name)
        bw.fill("PartFileOffset", bw.tell() - start)
        bw.write_utf16(self.file)

        bw.pad(8)
        bw.fill("PartOffset50", bw.tell() - start)
        self.struct50.write(bw)
        self._write_optional(bw, start, "PartOffset58", self.struct58)
        bw.fill("PartCommonOffset", bw.tell() - start)
        self.common.write(bw)
        bw.fill("PartTypeOffset", bw.tell() - start)
        self.type_data.write(bw)
        for attr, name in _TRAILING_BLOCKS:
            self._write_optional(bw, start, name, getattr(self, attr))
        bw.fill("PartOffset88", bw.tell() - start)
        self.struct88.write(bw)
        self._write_optional(bw, start, "PartOffset90", self.struct90)
        bw.fill("PartOffset98", bw.tell() - start)
        self.struct98.write(bw)
        self._write_optional(bw, start, "PartOffsetA0", self.structa0)
        self._write_optional(bw, start, "PartOffsetA8", self.structa8)


class PartsParam(Param[Part]):
    NAME = "PARTS_PARAM_ST"
    ENTRY = Part
    DEFAULT_VERSION = 75
