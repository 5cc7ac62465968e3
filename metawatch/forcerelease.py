"""Removal of query coordinator load metadata from the meta store."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from metawatch.kv import MemoryKV
from metawatch.pathutil import join_path
from metawatch.segments import VChannelInfo

COLLECTION_LOAD_PREFIX = "queryCoord-collectionMeta"
SEGMENT_META_PREFIX = "queryCoord-segmentMeta"
QC_DM_CHANNEL_META_PREFIX = "queryCoord-dmChannelWatchInfo"
QC_DELTA_CHANNEL_META_PREFIX = "queryCoord-deltaChannel"


@dataclass
class LoadedSegment:
    """A segment the query coordinator records as loaded."""

    collection_id: int = 0
    partition_id: int = 0
    segment_id: int = 0


@dataclass
class DmChannel:
    """A DML channel the query coordinator records as watched."""

    collection_id: int = 0
    dm_channel: str = ""


def force_release(kv: MemoryKV, base_path: str) -> int:
    """Remove every query coordinator key; return how many were removed."""
    return kv.delete_prefix(join_path(base_path, "queryCoord-"))


def missing_collections(
    loaded_collection_ids: Iterable[int], existing_ids: Iterable[int]
) -> list[int]:
    """Return the loaded collection ids whose collection no longer exists, in order."""
    existing = set(existing_ids)
    return [cid for cid in loaded_collection_ids if cid not in existing]


def release_load_meta(
    kv: MemoryKV,
    base_path: str,
    collection_id: int,
    loaded_segments: Iterable[LoadedSegment],
    dm_channels: Iterable[DmChannel],
    delta_channels: Iterable[VChannelInfo],
) -> list[str]:
    """Delete a collection's load record and its segment and channel entries.

    Returns the keys that were present and removed.
    """
    keys = [join_path(base_path, COLLECTION_LOAD_PREFIX, str(collection_id))]
    keys += [
        join_path(
            base_path,
            SEGMENT_META_PREFIX,
            f"{s.collection_id}/{s.partition_id}/{s.segment_id}",
        )
        for s in loaded_segments
        if s.collection_id == collection_id
    ]
    keys += [
        join_path(base_path, QC_DM_CHANNEL_META_PREFIX, f"{c.collection_id}/{c.dm_channel}")
        for c in dm_channels
        if c.collection_id == collection_id
    ]
    keys += [
        join_path(
            base_path, QC_DELTA_CHANNEL_META_PREFIX, f"{c.collection_id}/{c.channel_name}"
        )
        for c in delta_channels
        if c.collection_id == collection_id
    ]
    return [key for key in keys if kv.delete(key)]