from __future__ import annotations

import struct

import pytest

from conftest import EVENTS, MODELS, PARTS, assert_same_graph, build_basic_msb, entry_offset
from libmsb.errors import AuthoringError, MalformedStructureError, UnsupportedVariantError
from libmsb.events import Event, EventPatrolRouteData, EventRidingData, EventTreasureData, EventType
from libmsb.layers import Layer
from libmsb.models import Model, ModelType
from libmsb.msb import MSB, MsbState
from libmsb.parts import Part, PartConnectHitData, PartEneData, PartType
from libmsb.routes import Route, RouteType


def _part_type_offset(data: bytes, index: int) -> int:
    start = entry_offset(data, PARTS, index)
    return start + struct.unpack_from("<q", data, start + 104)[0]


def test_load_save_load(basic_msb):
    data = basic_msb.to_bytes()
    loaded = MSB.from_bytes(data)
    assert loaded.state is MsbState.LINKED
    assert_same_graph(basic_msb, loaded)

    ride = loaded.events[0]
    assert ride.type_data.part0 is loaded.parts[0]
    assert ride.type_data.part1 is loaded.parts[1]
    assert loaded.parts[0].model is loaded.models[0]


def test_end_to_end_slot_numbers_and_ordinals():
    msb = build_basic_msb()
    hit, map_part = msb.parts.entries
    map_part.part_no = 10
    hit.part_no = 20
    loaded = MSB.from_bytes(msb.to_bytes())

    ride = loaded.events[0].type_data
    assert (ride.part0.part_no, ride.part1.part_no) == (10, 20)
    assert [(p.type, p.type_index) for p in loaded.parts] == [(PartType.MAP, 0), (PartType.HIT, 0)]
    assert all(p.model is loaded.models[0] for p in loaded.parts)


def test_save_regroups_by_type(basic_msb):
    hit, map_part = basic_msb.parts.entries
    basic_msb.to_bytes()
    assert basic_msb.parts.entries == [map_part, hit]
    # references follow the entries, not the old positions
    ride = basic_msb.events[0].type_data
    assert ride._part_index0 == 0
    assert ride._part_index1 == 1


def test_type_indices_written_per_type():
    msb = MSB()
    model = Model(name="m", type=ModelType.MAP)
    msb.models.entries.append(model)
    msb.parts.entries.extend(
        [
            Part(name="h0", type=PartType.HIT, model=model),
            Part(name="m0", type=PartType.MAP, model=model, type_index=7),
            Part(name="h1", type=PartType.HIT, model=model),
            Part(name="m1", type=PartType.MAP, model=model),
        ]
    )
    loaded = MSB.from_bytes(msb.to_bytes())
    assert [(p.name, p.type_index) for p in loaded.parts] == [("m0", 0), ("m1", 1), ("h0", 0), ("h1", 1)]


def test_canonical_bytes_are_stable(basic_msb):
    first = basic_msb.to_bytes()
    second = MSB.from_bytes(first).to_bytes()
    assert first == second
    assert basic_msb.to_bytes() == first


def test_connect_hit_indexes_hit_parts_only():
    msb = MSB()
    map_part = Part(name="map", type=PartType.MAP)
    hit_a = Part(name="hitA", type=PartType.HIT)
    hit_b = Part(name="hitB", type=PartType.HIT)
    connect = Part(name="connect", type=PartType.CONNECT_HIT, type_data=PartConnectHitData(parent_hit=hit_b))
    msb.parts.entries.extend([map_part, hit_a, hit_b, connect])

    data = msb.to_bytes()
    assert connect.type_data._parent_hit_index == 1
    assert struct.unpack_from("<i", data, _part_type_offset(data, 3))[0] == 1

    loaded = MSB.from_bytes(data)
    assert loaded.parts[3].type_data.parent_hit is loaded.parts[2]


def test_connect_hit_to_non_hit_part_is_rejected():
    msb = MSB()
    map_part = Part(name="map", type=PartType.MAP)
    connect = Part(name="connect", type=PartType.CONNECT_HIT, type_data=PartConnectHitData(parent_hit=map_part))
    msb.parts.entries.extend([map_part, connect])
    with pytest.raises(AuthoringError):
        msb.to_bytes()


def test_enemy_patrol_route_indexes_patrol_events_only():
    msb = MSB()
    treasure = Event(name="treasure", type=EventType.TREASURE, type_data=EventTreasureData())
    patrol_a = Event(name="patrolA", type=EventType.PATROL_ROUTE, type_data=EventPatrolRouteData())
    patrol_b = Event(name="patrolB", type=EventType.PATROL_ROUTE, type_data=EventPatrolRouteData())
    msb.events.entries.extend([patrol_a, treasure, patrol_b])
    enemy = Part(name="c1000_0000", type=PartType.ENE, type_data=PartEneData(patrol_route=patrol_b))
    msb.parts.entries.append(enemy)

    data = msb.to_bytes()
    assert msb.events.entries == [treasure, patrol_a, patrol_b]
    assert enemy.type_data._patrol_route_index == 1
    # s16 at +0x20 of the enemy payload
    assert struct.unpack_from("<h", data, _part_type_offset(data, 0) + 0x20)[0] == 1

    loaded = MSB.from_bytes(data)
    assert loaded.parts[0].type_data.patrol_route is loaded.events[2]


def test_null_references_survive():
    msb = MSB()
    msb.parts.entries.append(Part(name="orphan", type=PartType.MAP))
    msb.events.entries.append(Event(name="ride", type=EventType.RIDING, type_data=EventRidingData()))
    data = msb.to_bytes()
    assert struct.unpack_from("<i", data, entry_offset(data, PARTS, 0) + 20)[0] == -1

    loaded = MSB.from_bytes(data)
    assert loaded.parts[0].model is None
    assert loaded.events[0].type_data.part0 is None
    assert loaded.events[0].common.point is None


def test_reference_to_detached_entry_fails_and_unlocks():
    msb = build_basic_msb()
    msb.events[0].type_data.part1 = Part(name="not_in_msb", type=PartType.HIT)
    with pytest.raises(AuthoringError):
        msb.to_bytes()
    assert msb.state is MsbState.LINKED

    msb.events[0].type_data.part1 = None
    assert MSB.from_bytes(msb.to_bytes()).events[0].type_data.part1 is None


def test_type_data_mismatch_is_authoring_error(basic_msb):
    basic_msb.events[0].type_data = EventTreasureData()
    with pytest.raises(AuthoringError):
        basic_msb.to_bytes()


def test_save_requires_linked_state(basic_msb):
    basic_msb.state = MsbState.RAW
    with pytest.raises(AuthoringError):
        basic_msb.to_bytes()


def test_layers_with_entries_cannot_be_saved(basic_msb):
    basic_msb.layers.entries.append(Layer(name="layer"))
    with pytest.raises(UnsupportedVariantError):
        basic_msb.to_bytes()
    assert basic_msb.state is MsbState.LINKED


def test_routes_round_trip():
    msb = MSB()
    msb.routes.entries.extend(
        [
            Route(name="b", parent_point_no=4, child_point_no=5, type=RouteType.TYPE4),
            Route(name="a", parent_point_no=1, child_point_no=2, type=RouteType.TYPE3),
        ]
    )
    loaded = MSB.from_bytes(msb.to_bytes())
    assert [(r.name, r.parent_point_no, r.child_point_no, r.type) for r in loaded.routes] == [
        ("a", 1, 2, RouteType.TYPE3),
        ("b", 4, 5, RouteType.TYPE4),
    ]


def test_big_endian_round_trip():
    msb = build_basic_msb()
    msb.big_endian = True
    data = msb.to_bytes()
    assert data[:4] == b"MSB "
    assert struct.unpack_from(">ii", data, 4) == (1, 0x10)
    assert data[0xC] == 1

    loaded = MSB.from_bytes(data)
    assert loaded.big_endian
    assert_same_graph(msb, loaded)
    assert loaded.to_bytes() == data


def test_header_layout(basic_msb):
    data = basic_msb.to_bytes()
    assert data[:0x10] == b"MSB " + struct.pack("<ii", 1, 0x10) + bytes([0, 0, 1, 0xFF])


def test_bad_magic(basic_msb):
    data = b"MSX " + basic_msb.to_bytes()[4:]
    with pytest.raises(MalformedStructureError):
        MSB.from_bytes(data)


def test_bad_endian_flag(basic_msb):
    data = bytearray(basic_msb.to_bytes())
    data[0xC] = 2
    with pytest.raises(MalformedStructureError) as ei:
        MSB.from_bytes(bytes(data))
    assert ei.value.offset == 0xC


def test_truncated_file(basic_msb):
    data = basic_msb.to_bytes()
    with pytest.raises(MalformedStructureError):
        MSB.from_bytes(data[: len(data) // 2])


def test_unknown_model_type(basic_msb):
    data = bytearray(basic_msb.to_bytes())
    struct.pack_into("<I", data, entry_offset(data, MODELS, 0) + 8, 99)
    with pytest.raises(UnsupportedVariantError):
        MSB.from_bytes(bytes(data))


def test_payload_on_tag_without_layout(basic_msb):
    data = bytearray(basic_msb.to_bytes())
    struct.pack_into("<I", data, entry_offset(data, EVENTS, 0) + 12, 0xFFFFFFFF)
    with pytest.raises(UnsupportedVariantError):
        MSB.from_bytes(bytes(data))


def test_index_out_of_range_on_load(basic_msb):
    data = bytearray(basic_msb.to_bytes())
    # one past the last model
    struct.pack_into("<i", data, entry_offset(data, PARTS, 0) + 20, 1)
    with pytest.raises(MalformedStructureError):
        MSB.from_bytes(bytes(data))
