"""Segment metadata: states, binlog layout, health checks and summaries."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any


class SegmentState(enum.IntEnum):
    """Lifecycle state of a data segment."""

    SegmentStateNone = 0
    NotExist = 1
    Growing = 2
    Sealed = 3
    Flushed = 4
    Flushing = 5
    Dropped = 6
    Importing = 7

    def __str__(self) -> str:
        return self.name


@dataclass
class Binlog:
    """One log file of a segment field."""

    entries_num: int = 0
    timestamp_from: int = 0
    timestamp_to: int = 0
    log_path: str = ""
    log_size: int = 0
    log_id: int = 0


@dataclass
class FieldBinlog:
    """All log files recorded for one field of a segment."""

    field_id: int = 0
    binlogs: list[Binlog] = field(default_factory=list)


@dataclass
class MsgPosition:
    """A position in a message channel."""

    channel_name: str = ""
    msg_id: bytes = b""
    msg_group: str = ""
    timestamp: int = 0


@dataclass
class SegmentInfo:
    """Data coordinator's record of one segment."""

    id: int = 0
    collection_id: int = 0
    partition_id: int = 0
    insert_channel: str = ""
    num_of_rows: int = 0
    state: SegmentState = SegmentState.SegmentStateNone
    max_row_num: int = 0
    last_expire_time: int = 0
    start_position: MsgPosition | None = None
    dml_position: MsgPosition | None = None
    binlogs: list[FieldBinlog] = field(default_factory=list)
    statslogs: list[FieldBinlog] = field(default_factory=list)
    deltalogs: list[FieldBinlog] = field(default_factory=list)
    compaction_from: list[int] = field(default_factory=list)
    dropped_at: int = 0


@dataclass
class VChannelInfo:
    """A virtual channel and the segments attached to it."""

    collection_id: int = 0
    channel_name: str = ""
    seek_position: MsgPosition | None = None
    flushed_segments: list[SegmentInfo] = field(default_factory=list)
    unflushed_segments: list[SegmentInfo] = field(default_factory=list)
    dropped_segments: list[SegmentInfo] = field(default_factory=list)
    flushed_segment_ids: list[int] = field(default_factory=list)
    unflushed_segment_ids: list[int] = field(default_factory=list)
    dropped_segment_ids: list[int] = field(default_factory=list)


@dataclass
class SegmentStats:
    """Totals over a list of segments, as the segment listing reports them."""

    healthy: int = 0
    total_rows: int = 0
    growing: int = 0
    sealed: int = 0
    flushed: int = 0
    statslog_size: int = 0


_UNHEALTHY = frozenset(
    {SegmentState.SegmentStateNone, SegmentState.NotExist, SegmentState.Dropped}
)


def is_segment_healthy(segment: SegmentInfo | None) -> bool:
    """Return whether the segment exists and is neither unset, missing nor dropped."""
    return segment is not None and segment.state not in _UNHEALTHY


def is_empty_segment(segment: SegmentInfo) -> bool:
    """Return whether the segment has no binlog, statslog or deltalog files at all."""
    groups = (segment.binlogs, segment.statslogs, segment.deltalogs)
    return not any(fb.binlogs for group in groups for fb in group)


def count_binlog_num(field_binlogs: Iterable[FieldBinlog]) -> int:
    """Return the number of log files across all fields."""
    return sum(len(fb.binlogs) for fb in field_binlogs)


def _dedupe(ids: Iterable[int]) -> list[int]:
    return list(dict.fromkeys(ids))


def revise_vchannel_info(vchannel: VChannelInfo | None) -> None:
    """Fold legacy embedded segment lists into id lists and drop duplicate ids, in place."""
    if vchannel is None:
        return
    for kind in ("flushed", "unflushed", "dropped"):
        segments = getattr(vchannel, f"{kind}_segments")
        ids = getattr(vchannel, f"{kind}_segment_ids")
        if segments:
            ids = [*ids, *(s.id for s in segments)]
            setattr(vchannel, f"{kind}_segments", [])
        setattr(vchannel, f"{kind}_segment_ids", _dedupe(ids))


def _pair_fields(pair: Any) -> tuple[Any, Any]:
    if isinstance(pair, tuple):
        return pair[0], pair[1]
    return pair.key, pair.value


def get_kv_pair(pairs: Iterable[Any], key: str) -> str:
    """Return the value of the first pair whose key is ``key``, or "" if there is none.

    Pairs may be ``(key, value)`` tuples or objects with ``key`` and ``value``.
    """
    for pair in pairs:
        k, v = _pair_fields(pair)
        if k == key:
            return v
    return ""


def sort_by_collection(items: list[Any]) -> None:
    """Sort items in place by their ``collection_id``."""
    items.sort(key=lambda item: item.collection_id)


def segment_stats(segments: Iterable[SegmentInfo]) -> SegmentStats:
    """Count segments by state and total the rows and statslog sizes of live ones."""
    stats = SegmentStats()
    for info in segments:
        if info.state != SegmentState.Dropped:
            stats.total_rows += info.num_of_rows
            stats.healthy += 1
            stats.statslog_size += sum(
                b.log_size for fb in info.statslogs for b in fb.binlogs
            )
        if info.state == SegmentState.Growing:
            stats.growing += 1
        elif info.state == SegmentState.Sealed:
            stats.sealed += 1
        elif info.state in (SegmentState.Flushing, SegmentState.Flushed):
            stats.flushed += 1
    return stats


def format_segment_line(segment: SegmentInfo) -> str:
    """Return the one-line summary of a segment."""
    return (
        f"SegmentID: {segment.id} State: {segment.state}, "
        f"Row Count:{segment.num_of_rows}"
    )