"""Channel checkpoints derived from segment positions and stored in the meta store."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from metawatch.kv import MemoryKV
from metawatch.pathutil import join_path, to_physical_channel
from metawatch.segments import MsgPosition, SegmentInfo, SegmentState

_CHECKPOINT_STATES = frozenset(
    {SegmentState.Flushed, SegmentState.Growing, SegmentState.Flushing}
)


def _segment_position(segment: SegmentInfo) -> MsgPosition | None:
    """Return the segment's DML position, else its start position, for usable states."""
    if segment.state not in _CHECKPOINT_STATES:
        return None
    if segment.dml_position is not None:
        return segment.dml_position
    return segment.start_position


def latest_checkpoint_by_pchannel(
    segments: Iterable[SegmentInfo],
) -> dict[str, MsgPosition]:
    """Return, per physical channel, the segment position with the latest timestamp."""
    latest: dict[str, MsgPosition] = {}
    for segment in segments:
        position = _segment_position(segment)
        if position is None:
            continue
        pchannel = to_physical_channel(segment.insert_channel)
        current = latest.get(pchannel)
        if current is None or position.timestamp > current.timestamp:
            latest[pchannel] = position
    return latest


def checkpoint_from_segments(
    segments: Iterable[SegmentInfo], collection_id: int, vchannel: str
) -> tuple[MsgPosition | None, int]:
    """Return the earliest position among a channel's segments and the segment holding it.

    Only segments of ``collection_id`` on ``vchannel`` count. When none has a
    position, returns ``(None, 0)``.
    """
    best: MsgPosition | None = None
    segment_id = 0
    for segment in segments:
        if segment.collection_id != collection_id or segment.insert_channel != vchannel:
            continue
        position = _segment_position(segment)
        if position is None:
            continue
        if best is None or position.timestamp < best.timestamp:
            best = position
            segment_id = segment.id
    return best, segment_id


def channel_checkpoint_key(base_path: str, channel: str) -> str:
    """Return the meta-store key of a channel's checkpoint."""
    return join_path(base_path, "datacoord-meta", "channel-cp", channel)


def save_channel_checkpoint(
    kv: MemoryKV,
    base_path: str,
    channel: str,
    position: MsgPosition,
    encode: Callable[[MsgPosition], bytes],
) -> str:
    """Store ``position`` as the channel's checkpoint; return the key written."""
    key = channel_checkpoint_key(base_path, channel)
    kv.put(key, encode(position))
    return key