from __future__ import annotations

import struct

import pytest

from conftest import POINTS, PARTS, assert_same_graph, entry_offset
from libmsb.errors import AuthoringError, MalformedStructureError, UnsupportedVariantError
from libmsb.events import (
    EVENT_TYPE_DATA,
    Event,
    EventBirdRouteData,
    EventGeneratorData,
    EventObjActData,
    EventPatrolRouteData,
    EventPlatoonInfoData,
    EventType,
)
from libmsb.models import Model, ModelType
from libmsb.msb import MSB
from libmsb.parts import (
    PART_TYPE_DATA,
    Part,
    PartGeomData,
    PartGparam,
    PartGrass,
    PartSceneGparam,
    PartStruct58,
    PartStruct90,
    PartStructA0,
    PartStructA8,
    PartType,
)
from libmsb.points import (
    POINT_TYPE_DATA,
    Point,
    PointSoundData,
    PointType,
    PointWindSfxData,
    type_data_aligned,
)
from libmsb.shapes import (
    BoxForm,
    CircleForm,
    CompositeForm,
    CompositeItem,
    CylinderForm,
    PointFormType,
    SphereForm,
    SquareForm,
)


def _round_trip(msb: MSB) -> MSB:
    loaded = MSB.from_bytes(msb.to_bytes())
    assert_same_graph(msb, loaded)
    return loaded


@pytest.mark.parametrize("event_type", list(EVENT_TYPE_DATA))
def test_every_event_payload(event_type):
    msb = MSB()
    msb.events.entries.append(Event(name="ev", type=event_type, type_data=EVENT_TYPE_DATA[event_type]()))
    loaded = _round_trip(msb)
    assert type(loaded.events[0].type_data) is EVENT_TYPE_DATA[event_type]


@pytest.mark.parametrize("point_type", list(POINT_TYPE_DATA))
def test_every_point_payload(point_type):
    msb = MSB()
    msb.points.entries.append(Point(name="pt", type=point_type, type_data=POINT_TYPE_DATA[point_type]()))
    loaded = _round_trip(msb)
    assert type(loaded.points[0].type_data) is POINT_TYPE_DATA[point_type]


@pytest.mark.parametrize("part_type", list(PartType))
def test_every_part_payload(part_type):
    msb = MSB()
    msb.parts.entries.append(Part(name="part", type=part_type))
    loaded = _round_trip(msb)
    assert type(loaded.parts[0].type_data) is PART_TYPE_DATA[part_type]


@pytest.mark.parametrize("point_type", [PointType.MID_RANGE_ENV_MAP_OUTPUT, PointType.CLEAR_INFO, PointType.OTHER])
def test_points_without_payload(point_type):
    msb = MSB()
    msb.points.entries.append(Point(name="pt", type=point_type))
    data = msb.to_bytes()
    assert struct.unpack_from("<q", data, entry_offset(data, POINTS, 0) + 88)[0] == 0
    assert MSB.from_bytes(data).points[0].type_data is None


def test_event_without_payload():
    msb = MSB()
    msb.events.entries.append(Event(name="other", event_no=3))
    loaded = _round_trip(msb)
    assert loaded.events[0].type is EventType.OTHER
    assert loaded.events[0].type_data is None
    assert loaded.events[0].event_no == 3


def test_point_type_data_alignment():
    assert not type_data_aligned(PointType.SOUND)
    assert not type_data_aligned(PointType.MAP_CONNECTION)
    assert type_data_aligned(PointType.MUFFLING_BOX)
    assert type_data_aligned(PointType.PATROL_POINT)
    assert type_data_aligned(PointType.OTHER)


def test_point_padding_follows_old_tags():
    msb = MSB()
    msb.points.entries.extend(
        [
            Point(name="sound", type=PointType.SOUND, type_data=PointSoundData()),
            Point(name="patrol", type=PointType.PATROL_POINT, type_data=POINT_TYPE_DATA[PointType.PATROL_POINT]()),
            Point(name="muffle", type=PointType.MUFFLING_BOX, type_data=POINT_TYPE_DATA[PointType.MUFFLING_BOX]()),
        ]
    )
    data = msb.to_bytes()

    def block_span(i):
        start = entry_offset(data, POINTS, i)
        type_ofs, ofs98 = struct.unpack_from("<qq", data, start + 88)
        return ofs98 - type_ofs

    # sound data is 76 bytes, padded to 80 before struct98
    assert block_span(0) == 80
    assert block_span(1) == 72
    assert block_span(2) == 4


def test_point_references():
    msb = MSB()
    part = Part(name="h0", type=PartType.HIT)
    msb.parts.entries.append(part)
    a = Point(name="a", type=PointType.OTHER, position=(1.0, 2.0, 3.0), angle=(0.0, 0.5, 0.0))
    b = Point(name="b", type=PointType.OTHER, parent_points=[a])
    a.child_points = [b]
    a.common.part = part
    wind = Point(name="wind", type=PointType.WIND_SFX, type_data=PointWindSfxData(wind_area=a))
    sound = Point(name="sound", type=PointType.SOUND, type_data=PointSoundData(sound_id=7))
    sound.type_data.child_points[3] = b
    msb.points.entries.extend([a, b, wind, sound])

    loaded = _round_trip(msb)
    by_name = {p.name: p for p in loaded.points}
    assert by_name["a"].child_points == [by_name["b"]]
    assert by_name["b"].parent_points == [by_name["a"]]
    assert by_name["a"].common.part is loaded.parts[0]
    assert by_name["wind"].type_data.wind_area is by_name["a"]
    assert by_name["sound"].type_data.child_points[3] is by_name["b"]
    assert by_name["a"].position == (1.0, 2.0, 3.0)


@pytest.mark.parametrize(
    "form",
    [
        CircleForm(radius=2.5),
        SphereForm(radius=1.0),
        CylinderForm(radius=1.5, height=3.0),
        SquareForm(width=4.0, depth=0.5),
        BoxForm(width=1.0, depth=2.0, height=0.25),
    ],
)
def test_point_forms(form):
    msb = MSB()
    msb.points.entries.append(Point(name="region", form_type=form.TYPE, form=form))
    loaded = _round_trip(msb)
    assert loaded.points[0].form == form
    assert loaded.points[0].form_type is form.TYPE


def test_composite_form_references_points():
    msb = MSB()
    inner = Point(name="inner", form_type=PointFormType.SPHERE, form=SphereForm(radius=1.0))
    composite = CompositeForm()
    composite.items[0] = CompositeItem(point=inner, unk04=2)
    outer = Point(name="outer", form_type=PointFormType.COMPOSITE, form=composite)
    msb.points.entries.extend([outer, inner])

    loaded = _round_trip(msb)
    item = loaded.points[0].form.items[0]
    assert item.point is loaded.points[1]
    assert item.unk04 == 2
    assert loaded.points[0].form.items[1].point is None


def test_form_kind_mismatch():
    msb = MSB()
    msb.points.entries.append(Point(name="region", form_type=PointFormType.SPHERE, form=BoxForm()))
    with pytest.raises(AuthoringError):
        msb.to_bytes()


def test_form_data_on_point_form_is_rejected():
    msb = MSB()
    msb.points.entries.append(Point(name="region", form_type=PointFormType.BOX, form=BoxForm(width=1.0)))
    data = bytearray(msb.to_bytes())
    struct.pack_into("<I", data, entry_offset(data, POINTS, 0) + 16, int(PointFormType.POINT))
    with pytest.raises(UnsupportedVariantError):
        MSB.from_bytes(bytes(data))


def test_event_payload_references():
    msb = MSB()
    points = [Point(name=f"p{i}") for i in range(3)]
    parts = [Part(name=f"h{i}", type=PartType.HIT) for i in range(2)]
    msb.points.entries.extend(points)
    msb.parts.entries.extend(parts)

    generator = EventGeneratorData(min_interval=0.5, max_interval=1.25)
    generator.points[0] = points[2]
    generator.parts[31] = parts[1]
    patrol = EventPatrolRouteData()
    patrol.points[:3] = points
    bird = EventBirdRouteData()
    bird.points[5] = points[1]
    platoon = EventPlatoonInfoData()
    platoon.parts[0] = parts[0]
    obj_act = EventObjActData(entity_id=1000, part=parts[1])
    msb.events.entries.extend(
        [
            Event(name="gen", type=EventType.GENERATOR, type_data=generator),
            Event(name="patrol", type=EventType.PATROL_ROUTE, type_data=patrol),
            Event(name="bird", type=EventType.BIRD_ROUTE, type_data=bird),
            Event(name="platoon", type=EventType.PLATOON_INFO, type_data=platoon),
            Event(name="objact", type=EventType.OBJ_ACT, type_data=obj_act),
        ]
    )
    msb.events[0].common.point = points[0]

    loaded = _round_trip(msb)
    events = {e.name: e for e in loaded.events}
    lpoints, lparts = loaded.points.entries, loaded.parts.entries
    assert events["gen"].common.point is lpoints[0]
    assert events["gen"].type_data.points[0] is lpoints[2]
    assert events["gen"].type_data.parts[31] is lparts[1]
    assert events["gen"].type_data.min_interval == 0.5
    assert events["patrol"].type_data.points[:4] == lpoints + [None]
    assert events["bird"].type_data.points[5] is lpoints[1]
    assert events["platoon"].type_data.parts[0] is lparts[0]
    assert events["objact"].type_data.part is lparts[1]


def test_fixed_slot_count_is_enforced():
    msb = MSB()
    generator = EventGeneratorData()
    generator.points.append(None)
    msb.events.entries.append(Event(name="gen", type=EventType.GENERATOR, type_data=generator))
    with pytest.raises(AuthoringError):
        msb.to_bytes()


def test_optional_part_blocks():
    msb = MSB()
    model = Model(name="m000000", type=ModelType.MAP, file="m000000.flver")
    msb.models.entries.append(model)
    full = Part(
        name="full",
        type=PartType.MAP,
        model=model,
        file="m000000.flver",
        scale=(2.0, 2.0, 2.0),
        struct58=PartStruct58(unk00=3),
        gparam=PartGparam(light_id=1, fog_id=2),
        scene_gparam=PartSceneGparam(unk10=0.5),
        grass=PartGrass(grass_types=[1, 2, 3, 4, 5, 6]),
        struct90=PartStruct90(unk00=9),
        structa0=PartStructA0(),
        structa8=PartStructA8(unk00=1, unk02=2, unk04=3),
    )
    bare = Part(name="bare", type=PartType.MAP, model=model)
    msb.parts.entries.extend([full, bare])

    data = msb.to_bytes()
    loaded = _round_trip(msb)
    assert loaded.parts[0].gparam == PartGparam(light_id=1, fog_id=2)
    assert loaded.parts[0].grass.grass_types == [1, 2, 3, 4, 5, 6]
    assert loaded.parts[1].struct58 is None
    assert loaded.parts[1].gparam is None
    assert loaded.parts[1].structa8 is None

    bare_start = entry_offset(data, PARTS, 1)
    # struct58, gparam, scene gparam, grass
    for field_ofs in (88, 112, 120, 128):
        assert struct.unpack_from("<q", data, bare_start + field_ofs)[0] == 0


def test_missing_required_part_block():
    msb = MSB()
    msb.parts.entries.append(Part(name="p", type=PartType.MAP))
    data = bytearray(msb.to_bytes())
    struct.pack_into("<q", data, entry_offset(data, PARTS, 0) + 80, 0)
    with pytest.raises(MalformedStructureError):
        MSB.from_bytes(bytes(data))


def test_missing_part_type_data():
    msb = MSB()
    msb.parts.entries.append(Part(name="p", type=PartType.MAP))
    data = bytearray(msb.to_bytes())
    struct.pack_into("<q", data, entry_offset(data, PARTS, 0) + 104, 0)
    with pytest.raises(MalformedStructureError):
        MSB.from_bytes(bytes(data))


def test_part_type_data_is_required_on_save():
    msb = MSB()
    part = Part(name="p", type=PartType.MAP)
    part.type_data = None
    msb.parts.entries.append(part)
    with pytest.raises(AuthoringError):
        msb.to_bytes()


def test_geom_part_slots():
    msb = MSB()
    target = Part(name="target", type=PartType.MAP)
    geom = PartGeomData(unk04=12)
    geom.part40 = target
    asset = Part(name="asset", type=PartType.GEOM, type_data=geom)
    msb.parts.entries.extend([asset, target])

    loaded = _round_trip(msb)
    loaded_geom = loaded.parts[1].type_data
    assert loaded_geom.part40 is loaded.parts[0]
    assert loaded_geom.part38 is None
    assert loaded_geom.unk04 == 12


def test_constant_payload_mismatch_is_malformed():
    msb = MSB()
    msb.parts.entries.append(Part(name="p", type=PartType.DUMMY_OBJ))
    data = bytearray(msb.to_bytes())
    type_start = entry_offset(data, PARTS, 0) + struct.unpack_from("<q", data, entry_offset(data, PARTS, 0) + 104)[0]
    struct.pack_into("<i", data, type_start, 5)
    with pytest.raises(MalformedStructureError):
        MSB.from_bytes(bytes(data))


def test_negative_index_list_count():
    msb = MSB()
    msb.points.entries.append(Point(name="pt"))
    data = bytearray(msb.to_bytes())
    start = entry_offset(data, POINTS, 0)
    parent_ofs = struct.unpack_from("<q", data, start + 48)[0]
    struct.pack_into("<h", data, start + parent_ofs, -3)
    with pytest.raises(MalformedStructureError) as ei:
        MSB.from_bytes(bytes(data))
    assert ei.value.offset == start + parent_ofs
