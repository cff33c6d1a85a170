"""libmsb.points

POINT_PARAM_ST: regions, spawn points, sound/sfx emitters, map connections, ...

Record layout:
  s64 name offset, u32 type, s32 type index, u32 form type
  vec3 position, vec3 angle, s32 point no
  s64 parent list offset, s64 child list offset, s32 0, s32 -1
  s64 form offset (0 = none), s64 common offset, s64 type data offset (0 = none), s64 struct98 offset
  name
  pad(4) s16 count + s16 parent indices
  pad(4) s16 count + s16 child indices
  pad(8) form | common | type data | struct98

Type data of OTHER and of every tag from MUFFLING_BOX on is 8-aligned;
the older tags are written straight after the common block and the
padding goes after them instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Dict, List, Optional, Type

from .binary import BinaryReader, BinaryWriter, Vector3
from .errors import MalformedStructureError
from .model import Block, ConstantBlock, Entry, Param, check_type_data, index_field, index_list_field, read_type_data
from .shapes import PointForm, PointFormType, check_form, read_form
from .xref import find_entries, find_entry, find_index, find_indices

if TYPE_CHECKING:
    from .msb import MSB
    from .parts import Part


class PointType(IntEnum):
    ENV_MAP_POINT = 2
    RESPAWN_POINT = 3
    SOUND = 4
    SFX = 5
    WIND_SFX = 6
    RETURN_POINT = 8
    ENV_MAP_EFFECT_BOX = 17
    MAP_CONNECTION = 21
    MUFFLING_BOX = 28
    MUFFLING_PORTAL = 29
    SOUND_OVERRIDE = 30
    PATROL_POINT = 32
    MAP_POINT = 33
    MAP_INFO_OVERRIDE = 35
    MASS_PLACEMENT = 37
    HIT_SETTING = 40
    WEATHER_ASSET_GENERATION = 42
    MID_RANGE_ENV_MAP_OUTPUT = 44
    BIG_JUMP = 46
    SOUND_DUMMY = 48
    FALL_PREVENTION_OVERRIDE = 49
    SMALL_BASE_ATTACH = 54
    BIRD_ROUTE = 55
    CLEAR_INFO = 56
    RESPAWN_OVERRIDE = 57
    USER_EDGE_REMOVAL_INNER = 58
    USER_EDGE_REMOVAL_OUTER = 59
    BIG_JUMP_SEALABLE = 60
    OTHER = 0xFFFFFFFF


def type_data_aligned(point_type: PointType) -> bool:
    """True when the type data block starts on an 8-byte boundary."""
    return point_type == PointType.OTHER or point_type >= PointType.MUFFLING_BOX


@dataclass
class PointCommon(Block):
    part: Optional["Part"] = None
    entity_id: int = 0
    unk08: int = -1
    unk0c: int = 0
    variation: int = -1
    _part_index: int = index_field()

    @classmethod
    def read(cls, br: BinaryReader) -> "PointCommon":
        c = cls()
        c._part_index = br.s32()
        c.entity_id = br.u32()
        c.unk08 = br.s8()
        br.assert_u8(0)
        br.assert_s16(0)
        c.unk0c = br.s32()
        c.variation = br.s32()
        br.assert_s32s(0, 3)
        return c

    def deindex(self, msb: "MSB") -> None:
        self.part = find_entry(msb.parts.entries, self._part_index, "PointCommon.part")

    def reindex(self, msb: "MSB") -> None:
        self._part_index = find_index(msb.parts.entries, self.part, "PointCommon.part")

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self._part_index)
        bw.write_u32(self.entity_id)
        bw.write_s8(self.unk08)
        bw.write_u8(0)
        bw.write_s16(0)
        bw.write_s32(self.unk0c)
        bw.write_s32(self.variation)
        bw.write_s32s([0, 0, 0])


@dataclass
class PointStruct98(Block):
    unk00: int = -1
    unk04: int = 0
    unk0c: int = -1
    unk10: int = -1

    @classmethod
    def read(cls, br: BinaryReader) -> "PointStruct98":
        s = cls()
        s.unk00 = br.s32()
        s.unk04 = br.s32()
        br.assert_s32(0)
        s.unk0c = br.s32()
        s.unk10 = br.s32()
        br.assert_s32s(0, 3)
        return s

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)
        bw.write_s32(self.unk04)
        bw.write_s32(0)
        bw.write_s32(self.unk0c)
        bw.write_s32(self.unk10)
        bw.write_s32s([0, 0, 0])


# -----------------------------
# Type data
# -----------------------------

class PointTypeData(Block):
    pass


@dataclass
class PointEnvMapPointData(PointTypeData):
    unk00: float = 1.0
    unk04: int = 4
    unk0d: bool = True
    unk0e: bool = True
    unk0f: bool = True
    unk18: int = 0
    unk20: int = 0
    unk24: int = 0
    unk28: int = 0
    unk2c: int = 0
    unk2d: int = 0

    @classmethod
    def read(cls, br: BinaryReader) -> "PointEnvMapPointData":
        d = cls()
        d.unk00 = br.f32()
        d.unk04 = br.s32()
        br.assert_s32(-1)
        br.assert_u8(0)
        d.unk0d = br.boolean()
        d.unk0e = br.boolean()
        d.unk0f = br.boolean()
        br.assert_f32(1)
        br.assert_f32(1)
        d.unk18 = br.s32()
        br.assert_s32(0)
        d.unk20 = br.s32()
        d.unk24 = br.s32()
        d.unk28 = br.s32()
        d.unk2c = br.u8()
        d.unk2d = br.u8()
        br.assert_s16(0)
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_f32(self.unk00)
        bw.write_s32(self.unk04)
        bw.write_s32(-1)
        bw.write_u8(0)
        bw.write_boolean(self.unk0d)
        bw.write_boolean(self.unk0e)
        bw.write_boolean(self.unk0f)
        bw.write_f32(1)
        bw.write_f32(1)
        bw.write_s32(self.unk18)
        bw.write_s32(0)
        bw.write_s32(self.unk20)
        bw.write_s32(self.unk24)
        bw.write_s32(self.unk28)
        bw.write_u8(self.unk2c)
        bw.write_u8(self.unk2d)
        bw.write_s16(0)


@dataclass
class PointRespawnPointData(PointTypeData):
    unk00: int = 0

    @classmethod
    def read(cls, br: BinaryReader) -> "PointRespawnPointData":
        d = cls(unk00=br.s32())
        br.assert_s32(0)
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)
        bw.write_s32(0)


@dataclass
class PointSoundData(PointTypeData):
    sound_id: int = 0
    child_points: List[Optional["Point"]] = field(default_factory=lambda: [None] * 16)
    unk49: bool = False
    _child_point_indices: List[int] = index_list_field()

    @classmethod
    def read(cls, br: BinaryReader) -> "PointSoundData":
        d = cls()
        br.assert_s32(0)
        d.sound_id = br.s32()
        d._child_point_indices = br.s32s(16)
        br.assert_u8(0)
        d.unk49 = br.boolean()
        br.assert_s16(0)
        return d

    def deindex(self, msb: "MSB") -> None:
        self.child_points = find_entries(msb.points.entries, self._child_point_indices, "PointSoundData.child_points")

    def reindex(self, msb: "MSB") -> None:
        self._child_point_indices = find_indices(
            msb.points.entries, self.child_points, "PointSoundData.child_points", count=16
        )

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(0)
        bw.write_s32(self.sound_id)
        bw.write_s32s(self._child_point_indices)
        bw.write_u8(0)
        bw.write_boolean(self.unk49)
        bw.write_s16(0)


@dataclass
class PointSfxData(PointTypeData):
    effect_id: int = 0
    unk04: bool = False
    unk05: bool = False

    @classmethod
    def read(cls, br: BinaryReader) -> "PointSfxData":
        d = cls(effect_id=br.s32(), unk04=br.boolean(), unk05=br.boolean())
        br.assert_s16(0)
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.effect_id)
        bw.write_boolean(self.unk04)
        bw.write_boolean(self.unk05)
        bw.write_s16(0)


@dataclass
class PointWindSfxData(PointTypeData):
    effect_id: int = 808006
    wind_area: Optional["Point"] = None
    _wind_area_index: int = index_field()

    @classmethod
    def read(cls, br: BinaryReader) -> "PointWindSfxData":
        d = cls(effect_id=br.s32())
        d._wind_area_index = br.s32()
        br.assert_f32(-1)
        return d

    def deindex(self, msb: "MSB") -> None:
        self.wind_area = find_entry(msb.points.entries, self._wind_area_index, "PointWindSfxData.wind_area")

    def reindex(self, msb: "MSB") -> None:
        self._wind_area_index = find_index(msb.points.entries, self.wind_area, "PointWindSfxData.wind_area")

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.effect_id)
        bw.write_s32(self._wind_area_index)
        bw.write_f32(-1)


class PointReturnPointData(ConstantBlock, PointTypeData):
    VALUES = (-1, 0, 0, 0)


@dataclass
class PointEnvMapEffectBoxData(PointTypeData):
    unk00: float = 0.0
    unk04: float = 0.0
    unk08: bool = False
    unk0a: int = -1
    unk24: float = 1.0
    unk28: float = 1.0
    unk30: int = -1
    unk33: bool = True
    unk34: int = 0
    unk36: int = 1

    @classmethod
    def read(cls, br: BinaryReader) -> "PointEnvMapEffectBoxData":
        d = cls()
        d.unk00 = br.f32()
        d.unk04 = br.f32()
        d.unk08 = br.boolean()
        br.assert_u8(10)
        d.unk0a = br.s16()
        br.assert_s32s(0, 6)
        d.unk24 = br.f32()
        d.unk28 = br.f32()
        br.assert_s16(0)
        br.assert_u8(1)
        br.assert_u8(1)
        d.unk30 = br.s16()
        br.assert_u8(0)
        d.unk33 = br.boolean()
        d.unk34 = br.s16()
        d.unk36 = br.s16()
        br.assert_s32(0)
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_f32(self.unk00)
        bw.write_f32(self.unk04)
        bw.write_boolean(self.unk08)
        bw.write_u8(10)
        bw.write_s16(self.unk0a)
        bw.write_s32s([0] * 6)
        bw.write_f32(self.unk24)
        bw.write_f32(self.unk28)
        bw.write_s16(0)
        bw.write_u8(1)
        bw.write_u8(1)
        bw.write_s16(self.unk30)
        bw.write_u8(0)
        bw.write_boolean(self.unk33)
        bw.write_s16(self.unk34)
        bw.write_s16(self.unk36)
        bw.write_s32(0)


@dataclass
class PointMapConnectionData(PointTypeData):
    map_id: List[int] = field(default_factory=lambda: [0, 0, 0, 0])

    @classmethod
    def read(cls, br: BinaryReader) -> "PointMapConnectionData":
        d = cls(map_id=br.s8s(4))
        br.assert_s32s(0, 3)
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s8s(self.map_id)
        bw.write_s32s([0, 0, 0])


@dataclass
class PointMufflingBoxData(PointTypeData):
    unk00: int = 0

    @classmethod
    def read(cls, br: BinaryReader) -> "PointMufflingBoxData":
        d = cls(unk00=br.s32())
        br.assert_s32s(0, 5)
        br.assert_s64(0x20)
        br.assert_s32(0)
        br.assert_f32(100)
        br.assert_s32s(0, 3)
        br.assert_f32(100)
        br.assert_s32(0)
        for _ in range(3):
            br.assert_f32(-1)
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)
        bw.write_s32s([0] * 5)
        bw.write_s64(0x20)
        bw.write_s32(0)
        bw.write_f32(100)
        bw.write_s32s([0, 0, 0])
        bw.write_f32(100)
        bw.write_s32(0)
        for _ in range(3):
            bw.write_f32(-1)


@dataclass
class PointMufflingPortalData(PointTypeData):
    unk00: int = 0

    @classmethod
    def read(cls, br: BinaryReader) -> "PointMufflingPortalData":
        d = cls(unk00=br.s32())
        br.assert_s32s(0, 5)
        br.assert_s64(0x20)
        br.assert_s32s(0, 5)
        br.assert_s32(-1)
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)
        bw.write_s32s([0] * 5)
        bw.write_s64(0x20)
        bw.write_s32s([0] * 5)
        bw.write_s32(-1)


@dataclass
class PointSoundOverrideData(PointTypeData):
    unk00: int = -1
    unk01: int = 0
    unk02: int = 0
    unk03: int = -1
    unk04: int = -1
    unk08: int = -1
    unk0a: int = -1

    @classmethod
    def read(cls, br: BinaryReader) -> "PointSoundOverrideData":
        d = cls()
        d.unk00 = br.s8()
        d.unk01 = br.u8()
        d.unk02 = br.u8()
        d.unk03 = br.s8()
        d.unk04 = br.s32()
        d.unk08 = br.s16()
        d.unk0a = br.s16()
        br.assert_s8(-1)
        br.assert_u8(0)
        br.assert_s16(0)
        br.assert_s32s(0, 4)
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s8(self.unk00)
        bw.write_u8(self.unk01)
        bw.write_u8(self.unk02)
        bw.write_s8(self.unk03)
        bw.write_s32(self.unk04)
        bw.write_s16(self.unk08)
        bw.write_s16(self.unk0a)
        bw.write_s8(-1)
        bw.write_u8(0)
        bw.write_s16(0)
        bw.write_s32s([0] * 4)


@dataclass
class PointPatrolPointData(PointTypeData):
    unk00: int = -1

    @classmethod
    def read(cls, br: BinaryReader) -> "PointPatrolPointData":
        return cls(unk00=br.s32())

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)


@dataclass
class PointMapPointData(PointTypeData):
    unk00: int = -1

    @classmethod
    def read(cls, br: BinaryReader) -> "PointMapPointData":
        d = cls(unk00=br.s32())
        br.assert_s32(-1)
        br.assert_f32(-1)
        br.assert_f32(-1)
        br.assert_s32(-1)
        br.assert_f32(-1)
        br.assert_f32(-1)
        br.assert_s32(0)
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)
        bw.write_s32(-1)
        bw.write_f32(-1)
        bw.write_f32(-1)
        bw.write_s32(-1)
        bw.write_f32(-1)
        bw.write_f32(-1)
        bw.write_s32(0)


@dataclass
class PointMapInfoOverrideData(PointTypeData):
    unk00: int = 4000

    @classmethod
    def read(cls, br: BinaryReader) -> "PointMapInfoOverrideData":
        d = cls(unk00=br.s32())
        br.assert_s32(-1)
        br.assert_s32s(0, 6)
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)
        bw.write_s32(-1)
        bw.write_s32s([0] * 6)


@dataclass
class PointMassPlacementData(PointTypeData):
    unk20: int = -1
    unk58: int = -1

    @classmethod
    def read(cls, br: BinaryReader) -> "PointMassPlacementData":
        d = cls()
        br.assert_s32(0)
        br.assert_s32s(-1, 7)
        d.unk20 = br.s32()
        br.assert_s32s(-1, 13)
        d.unk58 = br.s32()
        br.assert_s32(0)
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(0)
        bw.write_s32s([-1] * 7)
        bw.write_s32(self.unk20)
        bw.write_s32s([-1] * 13)
        bw.write_s32(self.unk58)
        bw.write_s32(0)


@dataclass
class PointHitSettingData(PointTypeData):
    unk00: int = -1

    @classmethod
    def read(cls, br: BinaryReader) -> "PointHitSettingData":
        return cls(unk00=br.s32())

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)


class PointWeatherAssetGenerationData(ConstantBlock, PointTypeData):
    VALUES = (0,)


@dataclass
class PointBigJumpData(PointTypeData):
    unk00: float = 10.0
    unk04: int = 807100
    unk08: int = 200

    @classmethod
    def read(cls, br: BinaryReader) -> "PointBigJumpData":
        return cls(unk00=br.f32(), unk04=br.s32(), unk08=br.s32())

    def write(self, bw: BinaryWriter) -> None:
        bw.write_f32(self.unk00)
        bw.write_s32(self.unk04)
        bw.write_s32(self.unk08)


@dataclass
class PointSoundDummyData(PointTypeData):
    unk00: int = 0

    @classmethod
    def read(cls, br: BinaryReader) -> "PointSoundDummyData":
        d = cls(unk00=br.s32())
        br.assert_s32(0)
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)
        bw.write_s32(0)


class PointFallPreventionOverrideData(ConstantBlock, PointTypeData):
    VALUES = (0, 0)


class PointSmallBaseAttachData(ConstantBlock, PointTypeData):
    VALUES = (0, 0)


@dataclass
class PointBirdRouteData(PointTypeData):
    unk00: int = 0

    @classmethod
    def read(cls, br: BinaryReader) -> "PointBirdRouteData":
        d = cls(unk00=br.s32())
        br.assert_s32(0)
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)
        bw.write_s32(0)


@dataclass
class PointRespawnOverrideData(PointTypeData):
    unk00: int = 0

    @classmethod
    def read(cls, br: BinaryReader) -> "PointRespawnOverrideData":
        return cls(unk00=br.s32())

    def write(self, bw: BinaryWriter) -> None:
        bw.write_s32(self.unk00)


class PointUserEdgeRemovalInnerData(ConstantBlock, PointTypeData):
    VALUES = (0, 0)


class PointUserEdgeRemovalOuterData(ConstantBlock, PointTypeData):
    VALUES = (0, 0)


@dataclass
class PointBigJumpSealableData(PointTypeData):
    unk00: float = 20.0
    unk04: int = 807103
    unk08: int = 0
    unk0c: int = -1
    unk10: int = 200
    unk14: int = -1

    @classmethod
    def read(cls, br: BinaryReader) -> "PointBigJumpSealableData":
        d = cls()
        d.unk00 = br.f32()
        d.unk04 = br.s32()
        d.unk08 = br.s32()
        d.unk0c = br.s32()
        d.unk10 = br.s32()
        d.unk14 = br.s32()
        return d

    def write(self, bw: BinaryWriter) -> None:
        bw.write_f32(self.unk00)
        bw.write_s32(self.unk04)
        bw.write_s32(self.unk08)
        bw.write_s32(self.unk0c)
        bw.write_s32(self.unk10)
        bw.write_s32(self.unk14)


# MID_RANGE_ENV_MAP_OUTPUT, CLEAR_INFO and OTHER have no type data
POINT_TYPE_DATA: Dict[PointType, Type[PointTypeData]] = {
    PointType.ENV_MAP_POINT: PointEnvMapPointData,
    PointType.RESPAWN_POINT: PointRespawnPointData,
    PointType.SOUND: PointSoundData,
    PointType.SFX: PointSfxData,
    PointType.WIND_SFX: PointWindSfxData,
    PointType.RETURN_POINT: PointReturnPointData,
    PointType.ENV_MAP_EFFECT_BOX: PointEnvMapEffectBoxData,
    PointType.MAP_CONNECTION: PointMapConnectionData,
    PointType.MUFFLING_BOX: PointMufflingBoxData,
    PointType.MUFFLING_PORTAL: PointMufflingPortalData,
    PointType.SOUND_OVERRIDE: PointSoundOverrideData,
    PointType.PATROL_POINT: PointPatrolPointData,
    PointType.MAP_POINT: PointMapPointData,
    PointType.MAP_INFO_OVERRIDE: PointMapInfoOverrideData,
    PointType.MASS_PLACEMENT: PointMassPlacementData,
    PointType.HIT_SETTING: PointHitSettingData,
    PointType.WEATHER_ASSET_GENERATION: PointWeatherAssetGenerationData,
    PointType.BIG_JUMP: PointBigJumpData,
    PointType.SOUND_DUMMY: PointSoundDummyData,
    PointType.FALL_PREVENTION_OVERRIDE: PointFallPreventionOverrideData,
    PointType.SMALL_BASE_ATTACH: PointSmallBaseAttachData,
    PointType.BIRD_ROUTE: PointBirdRouteData,
    PointType.RESPAWN_OVERRIDE: PointRespawnOverrideData,
    PointType.USER_EDGE_REMOVAL_INNER: PointUserEdgeRemovalInnerData,
    PointType.USER_EDGE_REMOVAL_OUTER: PointUserEdgeRemovalOuterData,
    PointType.BIG_JUMP_SEALABLE: PointBigJumpSealableData,
}


def _read_index_list(br: BinaryReader, ofs: int) -> List[int]:
    br.push(ofs)
    count = br.s16()
    if count < 0:
        raise MalformedStructureError(f"Negative index list count {count}", ofs)
    indices = br.s16s(count)
    br.pop()
    return indices


def _write_index_list(bw: BinaryWriter, indices: List[int]) -> None:
    bw.write_s16(len(indices))
    if indices:
        bw.write_s16s(indices)


@dataclass(eq=False, repr=False)
class Point(Entry):
    name: str = ""
    type: PointType = PointType.OTHER
    type_index: int = 0
    form_type: PointFormType = PointFormType.POINT
    position: Vector3 = (0.0, 0.0, 0.0)
    angle: Vector3 = (0.0, 0.0, 0.0)
    point_no: int = -1
    parent_points: List["Point"] = field(default_factory=list)
    child_points: List["Point"] = field(default_factory=list)
    form: Optional[PointForm] = None
    common: PointCommon = field(default_factory=PointCommon)
    type_data: Optional[PointTypeData] = None
    struct98: PointStruct98 = field(default_factory=PointStruct98)
    _parent_point_indices: List[int] = index_list_field()
    _child_point_indices: List[int] = index_list_field()

    @classmethod
    def read(cls, br: BinaryReader) -> "Point":
        start = br.tell()
        p = cls()
        p.name = br.get_utf16(start + br.s64())
        p.type = br.read_enum32(PointType)
        p.type_index = br.s32()
        p.form_type = br.read_enum32(PointFormType)
        p.position = br.vector3()
        p.angle = br.vector3()
        p.point_no = br.s32()
        parent_ofs = br.s64()
        child_ofs = br.s64()
        br.assert_s32(0)
        br.assert_s32(-1)
        form_ofs = br.s64()
        common_ofs = br.s64()
        type_ofs = br.s64()
        ofs98 = br.s64()

        p._parent_point_indices = _read_index_list(br, start + parent_ofs)
        p._child_point_indices = _read_index_list(br, start + child_ofs)
        p.form = read_form(br, start, form_ofs, p.form_type)

        br.push(start + common_ofs)
        p.common = PointCommon.read(br)
        br.pop()

        p.type_data = read_type_data(br, start, type_ofs, p.type, POINT_TYPE_DATA)

        br.push(start + ofs98)
        p.struct98 = PointStruct98.read(br)
        br.pop()
        return p

    def deindex(self, msb: "MSB") -> None:
        points = msb.points.entries
        self.parent_points = find_entries(points, self._parent_point_indices, "Point.parent_points")
        self.child_points = find_entries(points, self._child_point_indices, "Point.child_points")
        if self.form is not None:
            self.form.deindex(msb)
        self.common.deindex(msb)
        if self.type_data is not None:
            self.type_data.deindex(msb)

    def reindex(self, msb: "MSB") -> None:
        check_type_data(self, POINT_TYPE_DATA)
        check_form(self.form, self.form_type, repr(self))
        points = msb.points.entries
        self._parent_point_indices = find_indices(points, self.parent_points, "Point.parent_points", s16=True)
        self._child_point_indices = find_indices(points, self.child_points, "Point.child_points", s16=True)
        if self.form is not None:
            self.form.reindex(msb)
        self.common.reindex(msb)
        if self.type_data is not None:
            self.type_data.reindex(msb)

    def write(self, bw: BinaryWriter) -> None:
        start = bw.tell()
        bw.reserve_s64("PointNameOffset")
        bw.write_u32(self.type)
        bw.write_s32(self.type_index)
        bw.write_u32(self.form_type)
        bw.write_vector3(self.position)
        bw.write_vector3(self.angle)
        bw.write_s32(self.point_no)
        bw.reserve_s64("PointParentListOffset")
        bw.reserve_s64("PointChildListOffset")
        bw.write_s32(0)
        bw.write_s32(-1)
        bw.reserve_s64("PointFormOffset")
        bw.reserve_s64("PointCommonOffset")
        bw.reserve_s64("PointTypeOffset")
        bw.reserve_s64("PointOffset98")

        bw.fill("PointNameOffset", bw.tell() - start)
        bw.write_utf16(self.name)

        bw.pad(4)
        bw.fill("PointParentListOffset", bw.tell() - start)
        _write_index_list(bw, self._parent_point_indices)

        bw.pad(4)
        bw.fill("PointChildListOffset", bw.tell() - start)
        _write_index_list(bw, self._child_point_indices)

        bw.pad(8)
        bw.fill("PointFormOffset", 0 if self.form is None else bw.tell() - start)
        if self.form is not None:
            self.form.write(bw)

        bw.fill("PointCommonOffset", bw.tell() - start)
        self.common.write(bw)

        aligned = type_data_aligned(self.type)
        if aligned:
            bw.pad(8)
        bw.fill("PointTypeOffset", 0 if self.type_data is None else bw.tell() - start)
        if self.type_data is not None:
            self.type_data.write(bw)

        if not aligned:
            bw.pad(8)
        bw.fill("PointOffset98", bw.tell() - start)
        self.struct98.write(bw)


class PointParam(Param[Point]):
    NAME = "POINT_PARAM_ST"
    ENTRY = Point
