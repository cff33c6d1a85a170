from __future__ import annotations

from libmsb.events import Event, EventGeneratorData, EventType
from libmsb.parts import Part, PartGeomData, PartType
from libmsb.points import Point, PointType
from libmsb.shapes import CompositeForm, CompositeItem, PointFormType


def test_clone_copies_blocks_and_shares_references(basic_msb):
    ride = basic_msb.events[0]
    clone = ride.deep_clone()
    assert clone is not ride
    assert clone != ride
    assert clone.type_data is not ride.type_data
    assert clone.type_data == ride.type_data
    assert clone.type_data.part0 is ride.type_data.part0
    assert clone.common is not ride.common


def test_clone_lists_are_independent():
    part = Part(name="p", type=PartType.MAP)
    generator = EventGeneratorData()
    generator.parts[0] = part
    event = Event(name="gen", type=EventType.GENERATOR, type_data=generator)

    clone = event.deep_clone()
    clone.type_data.parts[1] = part
    assert event.type_data.parts[1] is None
    assert clone.type_data.parts[0] is part


def test_clone_raw_index_scratch_is_not_shared():
    geom = PartGeomData()
    clone = geom.deep_clone()
    clone._part_indices["part38"] = 4
    assert geom._part_indices["part38"] == -1


def test_clone_nested_form_items():
    target = Point(name="target")
    form = CompositeForm()
    form.items[0] = CompositeItem(point=target)
    point = Point(name="composite", type=PointType.OTHER, form_type=PointFormType.COMPOSITE, form=form)

    clone = point.deep_clone()
    assert clone.form.items[0] is not form.items[0]
    assert clone.form.items[0].point is target
    clone.form.items[0].unk04 = 3
    assert form.items[0].unk04 == 0


def test_entries_compare_by_identity():
    a = Part(name="same", type=PartType.MAP)
    b = Part(name="same", type=PartType.MAP)
    assert a != b
    assert a == a
