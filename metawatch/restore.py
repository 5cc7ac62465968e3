"""Reading the parts of a backup stream back into a store and into callbacks."""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from typing import BinaryIO

from metawatch.backup import BackupFormatError, iter_frames, read_frame
from metawatch.kv import MemoryKV
from metawatch.pathutil import parse_int64
from metawatch.session import Session


def _load_meta(meta: Mapping[str, str] | bytes | str) -> Mapping[str, str]:
    if isinstance(meta, (bytes, str)):
        loaded = json.loads(meta)
        if not isinstance(loaded, dict):
            raise ValueError("part metadata must be a JSON object")
        return loaded
    return meta


def restore_kv_part(
    kv: MemoryKV,
    stream: BinaryIO,
    meta: Mapping[str, str] | bytes | str,
    decode_pair: Callable[[bytes], tuple[str, bytes]],
) -> str:
    """Put every key-value frame of one part into ``kv``; return the instance name.

    ``meta`` is the part's metadata, as a mapping or its JSON text, and must hold
    an integer "cnt". Frames that ``decode_pair`` rejects with ``ValueError`` are
    skipped. Reading stops at the part's stopper or the end of the stream.
    """
    info = _load_meta(meta)
    try:
        parse_int64(str(info["cnt"]))
    except KeyError:
        raise ValueError("part metadata has no entry count") from None
    for frame in iter_frames(stream):
        try:
            key, value = decode_pair(frame)
        except ValueError:
            continue
        kv.put(key, value)
    return info.get("instance", "")


def _required_frame(stream: BinaryIO) -> bytes:
    frame = read_frame(stream)
    if frame is None:
        raise BackupFormatError("unexpected end of backup stream")
    return frame


def read_metrics_part(
    stream: BinaryIO, handler: Callable[[Session, bytes, bytes], None]
) -> int:
    """Read a metrics part and call ``handler(session, metrics, default_metrics)`` per record.

    Returns the number of records read.
    """
    count = 0
    for label in iter_frames(stream):
        session = Session.from_json(label)
        metrics = _required_frame(stream)
        default_metrics = _required_frame(stream)
        handler(session, metrics, default_metrics)
        count += 1
    return count


def read_labelled_part(stream: BinaryIO) -> list[tuple[str, bytes]]:
    """Read a part of (label, data) frame pairs, as configuration and app-metrics parts hold."""
    records = []
    for label in iter_frames(stream):
        data = _required_frame(stream)
        records.append((label.decode("utf-8", errors="replace"), data))
    return records