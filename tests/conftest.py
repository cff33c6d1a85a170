from __future__ import annotations

import struct

import pytest

from libmsb.events import Event, EventRidingData, EventType
from libmsb.graph import diff_graphs
from libmsb.models import Model, ModelType
from libmsb.msb import MSB
from libmsb.parts import Part, PartType

# file order of the tables
MODELS, EVENTS, POINTS, ROUTES, LAYERS, PARTS = range(6)


def build_basic_msb() -> MSB:
    """One model, a map part and a hit part, and a riding event linking both.

    Parts are stored HIT first so saving has something to regroup.
    """
    msb = MSB()
    model = Model(name="m000000", type=ModelType.MAP, file="m000000.flver")
    map_part = Part(name="m000000_0000", type=PartType.MAP, model=model)
    hit_part = Part(name="h000000_0000", type=PartType.HIT, model=model)
    riding = Event(
        name="ride",
        type=EventType.RIDING,
        type_data=EventRidingData(part0=map_part, part1=hit_part),
    )
    msb.models.entries.append(model)
    msb.parts.entries.extend([hit_part, map_part])
    msb.events.entries.append(riding)
    return msb


@pytest.fixture
def basic_msb() -> MSB:
    return build_basic_msb()


def assert_same_graph(a: MSB, b: MSB) -> None:
    diffs = diff_graphs(a, b)
    assert diffs == []


def entry_offset(data: bytes, table: int, index: int) -> int:
    """Absolute offset of entry `index` of table number `table` (little endian file)."""
    pos = 0x10
    for _ in range(table):
        count = struct.unpack_from("<i", data, pos + 4)[0] - 1
        pos = struct.unpack_from("<q", data, pos + 16 + 8 * count)[0]
    return struct.unpack_from("<q", data, pos + 16 + 8 * index)[0]
