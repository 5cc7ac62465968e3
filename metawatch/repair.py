"""Segment and index consistency checks used by the repair and inspect commands."""

from __future__ import annotations

import copy
from collections import Counter
from collections.abc import Iterable, MutableMapping
from dataclasses import dataclass, field

from metawatch.segments import SegmentInfo

BINARY_VECTOR = 100
FLOAT_VECTOR = 101


@dataclass
class FieldSchema:
    """One field of a collection schema."""

    field_id: int = 0
    name: str = ""
    data_type: int = 0
    is_primary_key: bool = False
    auto_id: bool = False
    type_params: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class IndexMeta:
    """Build record of an index: the field it covers and the binlogs it was built from."""

    index_build_id: int = 0
    field_id: int = 0
    data_paths: list[str] = field(default_factory=list)
    index_params: list[tuple[str, str]] = field(default_factory=list)


def check_binlog_index(segment: SegmentInfo, index_meta: IndexMeta) -> SegmentInfo | None:
    """Return a copy of ``segment`` without binlogs missing from the index, or None.

    Positions of the indexed field's binlogs that the index does not cover are
    removed from every field of the copy. None means every binlog is indexed.
    """
    indexed = set(index_meta.data_paths)
    excluded = {
        idx
        for field_log in segment.binlogs
        if field_log.field_id == index_meta.field_id
        for idx, binlog in enumerate(field_log.binlogs)
        if binlog.log_path not in indexed
    }
    if not excluded:
        return None

    update = copy.deepcopy(segment)
    for field_log in update.binlogs:
        field_log.binlogs = [
            binlog for idx, binlog in enumerate(field_log.binlogs) if idx not in excluded
        ]
    return update


def integrity_check(segment: SegmentInfo) -> bool:
    """Return whether every field's binlogs hold as many entries as the first field's."""
    if not segment.binlogs:
        raise ValueError(f"segment {segment.id} has no binlogs")
    totals = [sum(b.entries_num for b in fl.binlogs) for fl in segment.binlogs]
    return all(total == totals[0] for total in totals[1:])


def find_primary_key(fields: Iterable[FieldSchema]) -> int:
    """Return the id of the first primary-key field."""
    for schema in fields:
        if schema.is_primary_key:
            return schema.field_id
    raise ValueError("collection pk not found")


def ddup(ids: Iterable[int]) -> int:
    """Return how many ids repeat an id seen earlier in the same sequence."""
    return sum(count - 1 for count in Counter(ids).values())


def global_ddup(
    segment_id: int, ids: Iterable[int], seen: MutableMapping[int, int]
) -> tuple[dict[int, int], int]:
    """Check ``ids`` against ids already seen in other segments.

    New ids are recorded in ``seen`` as belonging to ``segment_id``. Returns the
    number of duplicates per owning segment and the total duplicate count.
    """
    distribution: Counter[int] = Counter()
    for pk in ids:
        origin = seen.get(pk)
        if origin is None:
            seen[pk] = segment_id
        else:
            distribution[origin] += 1
    return dict(distribution), sum(distribution.values())