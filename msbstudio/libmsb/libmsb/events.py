"""libmsb.events

EVENT_PARAM_ST: treasure, spawners, object actions, patrol routes, ...

Record layout:
  s64 name offset, s32 event no, u32 type, s32 type index, s32 0
  s64 common offset, s64 type data offset (0 = none), s64 struct28 offset
  name
  pad(8) common | type data | struct28

All point/part references here address the whole Points/Parts table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Dict, List, Optional, Type

from .binary import BinaryReader, BinaryWriter
from .model import Block, Entry, Param, check_type_data, index_field, index_list_field, read_type_data
from .xref import find_entries, find_entry, find_index, find_indices

if TYPE_CHECKING:
    from .msb import MSB
    from .parts import Part
    from .points import Point


class EventType(IntEnum):
    TREASURE = 4
    GENERATOR = 5
    OBJ_ACT = 7
    PLATOON_INFO = 15
    PATROL_ROUTE = 20
    RIDING = 21
    BIRD_ROUTE = 25
    TALK_INFO = 26
    TEAM_FIGHT = 27
    OTHER = 0xFFFFFFFF


@dataclass
class EventCommon(Block):
    point: Optional["Point"] = None
    entity_id: int = 0
    unk0c: int = -1
    _point_index: int = index_field()

    @classmethod
    def read(cls, br: BinaryReader) -> "EventCommon":
        c = cls()
        br.assert_s32(-1)
        c._point_index = br.s32()
        c.entity_id = br.u32()
        c.unk0c = br.s8()
        br.assert_u8(0)
        br.assert_s16(0)
        return c

    def deindex(self, msb: "MSB") -> None:
        self.point = find_entry(msb.points.entries, self._point_index, "EventCommon.point")

    def reindex(self, msb: "MSB") -> None:
        self._point_index = find_index(msb.points.entries, self.point, "EventCommon.point")

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(-1)
        bw.write_s32(self._point_index)
        bw.write_u32(self.entity_id)
        bw.write_s8(self.unk0c)
        bw.write_u8(0)
        bw.write_s16(0)


@dataclass
class EventStruct28(Block):
    unk00: int = -1
    unk04: int = 0
    unk0c: int = -1

    @classmethod
    def read(cls, br: BinaryReader) -> "EventStruct28":
        s = cls()
        s.unk00 = br.s32()
        s.unk04 = br.s32()
        br.assert_s32(0)
        s.unk0c = br.s32()
        br.assert_s32s(0, 4)
        return s

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)
        bw.write_s32(self.unk04)
        bw.write_s32(0)
        bw.write_s32(self.unk0c)
        bw.write_s32s([0] * 4)


# -----------------------------
# Type data
# -----------------------------

class EventTypeData(Block):
    pass


@dataclass
class EventTreasureData(EventTypeData):
    part: Optional["Part"] = None
    item_lot_param_id: int = -1
    unk40: int = 1
    unk41: bool = False
    unk44: int = -1
    _part_index: int = index_field()

    @classmethod
    def read(cls, br: BinaryReader) -> "EventTreasureData":
        d = cls()
        br.assert_s32s(0, 2)
        d._part_index = br.s32()
        br.assert_s32(0)
        d.item_lot_param_id = br.s32()
        br.assert_s32s(-1, 9)
        br.assert_s32(0)
        br.assert_s32(-1)
        d.unk40 = br.u8()
        d.unk41 = br.boolean()
        br.assert_s16(0)
        d.unk44 = br.s32()
        br.assert_s32s(0, 2)
        return d

    def deindex(self, msb: "MSB") -> None:
        self.part = find_entry(msb.parts.entries, self._part_index, "EventTreasureData.part")

    def reindex(self, msb: "MSB") -> None:
        self._part_index = find_index(msb.parts.entries, self.part, "EventTreasureData.part")

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32s([0, 0])
        bw.write_s32(self._part_index)
        bw.write_s32(0)
        bw.write_s32(self.item_lot_param_id)
        bw.write_s32s([-1] * 9)
        bw.write_s32(0)
        bw.write_s32(-1)
        bw.write_u8(self.unk40)
        bw.write_boolean(self.unk41)
        bw.write_s16(0)
        bw.write_s32(self.unk44)
        bw.write_s32s([0, 0])


@dataclass
class EventGeneratorData(EventTypeData):
    max_num: int = 1
    gen_type: int = 0
    limit_num: int = -1
    min_gen_num: int = 1
    max_gen_num: int = 1
    min_interval: float = 0.0
    max_interval: float = 0.0
    initial_spawn_count: int = -1
    unk14: float = 0.0
    unk18: float = 0.0
    # fixed 8 / 32 slots on disk
    points: List[Optional["Point"]] = field(default_factory=lambda: [None] * 8)
    parts: List[Optional["Part"]] = field(default_factory=lambda: [None] * 32)
    _point_indices: List[int] = index_list_field()
    _part_indices: List[int] = index_list_field()

    @classmethod
    def read(cls, br: BinaryReader) -> "EventGeneratorData":
        d = cls()
        d.max_num = br.u8()
        d.gen_type = br.u8()
        d.limit_num = br.s16()
        d.min_gen_num = br.s16()
        d.max_gen_num = br.s16()
        d.min_interval = br.f32()
        d.max_interval = br.f32()
        d.initial_spawn_count = br.s8()
        br.assert_u8(0)
        br.assert_s16(0)
        d.unk14 = br.f32()
        d.unk18 = br.f32()
        br.assert_s32s(0, 5)
        d._point_indices = br.s32s(8)
        br.assert_s32s(0, 4)
        d._part_indices = br.s32s(32)
        br.assert_s32s(0, 8)
        return d

    def deindex(self, msb: "MSB") -> None:
        self.points = find_entries(msb.points.entries, self._point_indices, "EventGeneratorData.points")
        self.parts = find_entries(msb.parts.entries, self._part_indices, "EventGeneratorData.parts")

    def reindex(self, msb: "MSB") -> None:
        self._point_indices = find_indices(msb.points.entries, self.points, "EventGeneratorData.points", count=8)
        self._part_indices = find_indices(msb.parts.entries, self.parts, "EventGeneratorData.parts", count=32)

    def write(self, bw: BinaryWriter) -> None:
        bw.write_u8(self.max_num)
        bw.write_u8(self.gen_type)
        bw.write_s16(self.limit_num)
        bw.write_s16(self.min_gen_num)
        bw.write_s16(self.max_gen_num)
        bw.write_f32(self.min_interval)
        bw.write_f32(self.max_interval)
        bw.write_s8(self.initial_spawn_count)
        bw.write_u8(0)
        bw.write_s16(0)
        bw.write_f32(self.unk14)
        bw.write_f32(self.unk18)
        bw.write_s32s([0] * 5)
        bw.write_s32s(self._point_indices)
        bw.write_s32s([0] * 4)
        bw.write_s32s(self._part_indices)
        bw.write_s32s([0] * 8)


@dataclass
class EventObjActData(EventTypeData):
    entity_id: int = 0
    part: Optional["Part"] = None
    obj_act_param_id: int = 0
    unk0c: int = 5
    event_flag_id: int = 0
    _part_index: int = index_field()

    @classmethod
    def read(cls, br: BinaryReader) -> "EventObjActData":
        d = cls()
        d.entity_id = br.u32()
        d._part_index = br.s32()
        d.obj_act_param_id = br.s32()
        d.unk0c = br.s32()
        d.event_flag_id = br.u32()
        br.assert_s32s(0, 3)
        return d

    def deindex(self, msb: "MSB") -> None:
        self.part = find_entry(msb.parts.entries, self._part_index, "EventObjActData.part")

    def reindex(self, msb: "MSB") -> None:
        self._part_index = find_index(msb.parts.entries, self.part, "EventObjActData.part")

    def write(self, bw: BinaryWriter) -> None:
        bw.write_u32(self.entity_id)
        bw.write_s32(self._part_index)
        bw.write_s32(self.obj_act_param_id)
        bw.write_s32(self.unk0c)
        bw.write_u32(self.event_flag_id)
        bw.write_s32s([0, 0, 0])


@dataclass
class EventPlatoonInfoData(EventTypeData):
    unk00: int = -1
    unk04: bool = False
    parts: List[Optional["Part"]] = field(default_factory=lambda: [None] * 32)
    _part_indices: List[int] = index_list_field()

    @classmethod
    def read(cls, br: BinaryReader) -> "EventPlatoonInfoData":
        d = cls()
        d.unk00 = br.s32()
        d.unk04 = br.boolean()
        br.assert_u8(0)
        br.assert_s16(0)
        br.assert_s32s(0, 2)
        d._part_indices = br.s32s(32)
        return d

    def deindex(self, msb: "MSB") -> None:
        self.parts = find_entries(msb.parts.entries, self._part_indices, "EventPlatoonInfoData.parts")

    def reindex(self, msb: "MSB") -> None:
        self._part_indices = find_indices(msb.parts.entries, self.parts, "EventPlatoonInfoData.parts", count=32)

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)
        bw.write_boolean(self.unk04)
        bw.write_u8(0)
        bw.write_s16(0)
        bw.write_s32s([0, 0])
        bw.write_s32s(self._part_indices)


@dataclass
class EventPatrolRouteData(EventTypeData):
    unk00: int = 0
    points: List[Optional["Point"]] = field(default_factory=lambda: [None] * 64)
    _point_indices: List[int] = index_list_field()

    @classmethod
    def read(cls, br: BinaryReader) -> "EventPatrolRouteData":
        d = cls()
        d.unk00 = br.u8()
        br.assert_u8(0)
        br.assert_u8(0)
        br.assert_u8(1)
        br.assert_s32(-1)
        br.assert_s32s(0, 2)
        d._point_indices = br.s16s(64)
        return d

    def deindex(self, msb: "MSB") -> None:
        self.points = find_entries(msb.points.entries, self._point_indices, "EventPatrolRouteData.points")

    def reindex(self, msb: "MSB") -> None:
        self._point_indices = find_indices(
            msb.points.entries, self.points, "EventPatrolRouteData.points", count=64, s16=True
        )

    def write(self, bw: BinaryWriter) -> None:
        bw.write_u8(self.unk00)
        bw.write_u8(0)
        bw.write_u8(0)
        bw.write_u8(1)
        bw.write_s32(-1)
        bw.write_s32s([0, 0])
        bw.write_s16s(self._point_indices)


@dataclass
class EventRidingData(EventTypeData):
    part0: Optional["Part"] = None
    part1: Optional["Part"] = None
    _part_index0: int = index_field()
    _part_index1: int = index_field()

    @classmethod
    def read(cls, br: BinaryReader) -> "EventRidingData":
        d = cls()
        d._part_index0 = br.s32()
        d._part_index1 = br.s32()
        return d

    def deindex(self, msb: "MSB") -> None:
        self.part0 = find_entry(msb.parts.entries, self._part_index0, "EventRidingData.part0")
        self.part1 = find_entry(msb.parts.entries, self._part_index1, "EventRidingData.part1")

    def reindex(self, msb: "MSB") -> None:
        self._part_index0 = find_index(msb.parts.entries, self.part0, "EventRidingData.part0")
        self._part_index1 = find_index(msb.parts.entries, self.part1, "EventRidingData.part1")

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self._part_index0)
        bw.write_s32(self._part_index1)


@dataclass
class EventBirdRouteData(EventTypeData):
    unk04: int = 0
    unk08: int = 0
    unk0c: int = 0
    points: List[Optional["Point"]] = field(default_factory=lambda: [None] * 32)
    _point_indices: List[int] = index_list_field()

    @classmethod
    def read(cls, br: BinaryReader) -> "EventBirdRouteData":
        d = cls()
        br.assert_s32(0)
        d.unk04 = br.s32()
        d.unk08 = br.s32()
        d.unk0c = br.s32()
        d._point_indices = br.s16s(32)
        return d

    def deindex(self, msb: "MSB") -> None:
        self.points = find_entries(msb.points.entries, self._point_indices, "EventBirdRouteData.points")

    def reindex(self, msb: "MSB") -> None:
        self._point_indices = find_indices(
            msb.points.entries, self.points, "EventBirdRouteData.points", count=32, s16=True
        )

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(0)
        bw.write_s32(self.unk04)
        bw.write_s32(self.unk08)
        bw.write_s32(self.unk0c)
        bw.write_s16s(self._point_indices)


@dataclass
class EventTalkInfoData(EventTypeData):
    unk00: int = 0
    unk04: int = 0
    unk08: int = 0
    unk0c: int = -1
    unk24: int = 0
    unk28: int = 0
    unk2c: int = 0
    unk44: int = 0
    unk45: bool = False

    @classmethod
    def read(cls, br: BinaryReader) -> "EventTalkInfoData":
        d = cls()
        d.unk00 = br.s32()
        d.unk04 = br.s32()
        d.unk08 = br.s32()
        d.unk0c = br.s32()
        br.assert_s32s(-1, 5)
        d.unk24 = br.s32()
        d.unk28 = br.s32()
        d.unk2c = br.s32()
        br.assert_s32s(0, 5)
        d.unk44 = br.u8()
        d.unk45 = br.boolean()
        br.assert_s16(0)
        br.assert_s32s(0, 14)
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)
        bw.write_s32(self.unk04)
        bw.write_s32(self.unk08)
        bw.write_s32(self.unk0c)
        bw.write_s32s([-1] * 5)
        bw.write_s32(self.unk24)
        bw.write_s32(self.unk28)
        bw.write_s32(self.unk2c)
        bw.write_s32s([0] * 5)
        bw.write_u8(self.unk44)
        bw.write_boolean(self.unk45)
        bw.write_s16(0)
        bw.write_s32s([0] * 14)


@dataclass
class EventTeamFightData(EventTypeData):
    unk00: int = 0
    unk04: int = 0
    unk08: int = -1
    unk0c: int = 0

    @classmethod
    def read(cls, br: BinaryReader) -> "EventTeamFightData":
        d = cls()
        d.unk00 = br.s32()
        d.unk04 = br.s32()
        d.unk08 = br.s32()
        d.unk0c = br.s32()
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)
        bw.write_s32(self.unk04)
        bw.write_s32(self.unk08)
        bw.write_s32(self.unk0c)


EVENT_TYPE_DATA: Dict[EventType, Type[EventTypeData]] = {
    EventType.TREASURE: EventTreasureData,
    EventType.GENERATOR: EventGeneratorData,
    EventType.OBJ_ACT: EventObjActData,
    EventType.PLATOON_INFO: EventPlatoonInfoData,
    EventType.PATROL_ROUTE: EventPatrolRouteData,
    EventType.RIDING: EventRidingData,
    EventType.BIRD_ROUTE: EventBirdRouteData,
    EventType.TALK_INFO: EventTalkInfoData,
    EventType.TEAM_FIGHT: EventTeamFightData,
}


@dataclass(eq=False, repr=False)
class Event(Entry):
    name: str = ""
    event_no: int = -1
    type: EventType = EventType.OTHER
    type_index: int = 0
    common: EventCommon = field(default_factory=EventCommon)
    type_data: Optional[EventTypeData] = None
    struct28: EventStruct28 = field(default_factory=EventStruct28)

    @classmethod
    def read(cls, br: BinaryReader) -> "Event":
        start = br.tell()
        e = cls()
        e.name = br.get_utf16(start + br.s64())
        e.event_no = br.s32()
        e.type = br.read_enum32(EventType)
        e.type_index = br.s32()
        br.assert_s32(0)
        common_ofs = br.s64()
        type_ofs = br.s64()
        ofs28 = br.s64()

        br.push(start + common_ofs)
        e.common = EventCommon.read(br)
        br.pop()

        e.type_data = read_type_data(br, start, type_ofs, e.type, EVENT_TYPE_DATA)

        br.push(start + ofs28)
        e.struct28 = EventStruct28.read(br)
        br.pop()
        return e

    def deindex(self, msb: "MSB") -> None:
        self.common.deindex(msb)
        if self.type_data is not None:
            self.type_data.deindex(msb)

    def reindex(self, msb: "MSB") -> None:
        check_type_data(self, EVENT_TYPE_DATA)
        self.common.reindex(msb)
        if self.type_data is not None:
            self.type_data.reindex(msb)

    def write(self, bw: BinaryWriter) -> None:
        start = bw.tell()
        bw.reserve_s64("EventNameOffset")
        bw.write_s32(self.event_no)
        bw.write_u32(self.type)
        bw.write_s32(self.type_index)
        bw.write_s32(0)
        bw.reserve_s64("EventCommonOffset")
        bw.reserve_s64("EventTypeOffset")
        bw.reserve_s64("EventOffset28")

        bw.fill("EventNameOffset", bw.tell() - start)
        bw.write_utf16(self.name)

        bw.pad(8)
        bw.fill("EventCommonOffset", bw.tell() - start)
        self.common.write(bw)

        bw.fill("EventTypeOffset", 0 if self.type_data is None else bw.tell() - start)
        if self.type_data is not None:
            self.type_data.write(bw)

        bw.fill("EventOffset28", bw.tell() - start)
        self.struct28.write(bw)


class EventParam(Param[Event]):
    NAME = "EVENT_PARAM_ST"
    ENTRY = Event
