from __future__ import annotations
import os
from collections import Counter
from typing import List

from .model import MsbSummary, Param, ParamSummary
from .msb import MSB
from .reader import read_msb


def _type_counts(param: Param) -> dict:
    # layers carry no type tag
    if not param.TYPED:
        return {}
    counts = Counter(entry.type.name for entry in param.entries)
    # keep the order types appear in the file
    return dict(counts)


def summarize_params(msb: MSB) -> List[ParamSummary]:
    return [
        ParamSummary(name=p.NAME, version=p.version, count=len(p), types=_type_counts(p))
        for p in msb.params
    ]


def summarize_msb(path: str) -> MsbSummary:
    size = os.path.getsize(path)
    msb = read_msb(path)

    return MsbSummary(
        path=path,
        file_size=size,
        big_endian=msb.big_endian,
        compression=msb.compression.value,
        params=summarize_params(msb),
    )
