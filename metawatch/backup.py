"""Framed backup stream: length-prefixed records, part metadata and key-value dumps."""

from __future__ import annotations

import struct
from collections.abc import Callable, Iterator
from datetime import datetime
from typing import BinaryIO

from metawatch.kv import MemoryKV
from metawatch.pathutil import join_path
from metawatch.session import Component

_LENGTH = struct.Struct("<Q")

QUERYCOORD_PREFIX = "queryCoord-"


class BackupFormatError(Exception):
    """The backup stream is truncated or otherwise malformed."""


def write_frame(stream: BinaryIO, data: bytes | None) -> None:
    """Write ``data`` as one frame: its length as 8 little-endian bytes, then the bytes.

    Empty or ``None`` data writes a zero-length frame, which marks the end of a part.
    """
    payload = data or b""
    stream.write(_LENGTH.pack(len(payload)))
    if payload:
        stream.write(payload)


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_frame(stream: BinaryIO) -> bytes | None:
    """Read one frame and return its bytes; ``None`` when the stream is exhausted.

    A zero-length frame (a part stopper) comes back as ``b""``.
    """
    header = _read_exact(stream, _LENGTH.size)
    if not header:
        return None
    if len(header) < _LENGTH.size:
        raise BackupFormatError(
            f"fail to read next length {len(header)} instead of {_LENGTH.size} read"
        )
    (size,) = _LENGTH.unpack(header)
    data = _read_exact(stream, size)
    if len(data) != size:
        raise BackupFormatError(f"bytesRead({len(data)})is not equal to nextBytes({size})")
    return data


def iter_frames(stream: BinaryIO) -> Iterator[bytes]:
    """Yield frames of one part until its stopper or the end of the stream."""
    while True:
        frame = read_frame(stream)
        if not frame:
            return
        yield frame


def _component(component: Component | str) -> Component:
    return component if isinstance(component, Component) else Component.parse(component)


def backup_file_name(component: Component | str, now: datetime) -> str:
    """Return the name of the backup file made for ``component`` at ``now``."""
    comp = _component(component)
    return f"bw_etcd_{comp.value}.{now.strftime('%y%m%d-%H%M%S')}.bak.gz"


def backup_prefix(component: Component | str) -> str:
    """Return the key prefix, below the base path, that a component's backup covers."""
    comp = _component(component)
    if comp is Component.ALL:
        return ""
    if comp is Component.QUERYCOORD:
        return QUERYCOORD_PREFIX
    raise ValueError(
        f"component {comp.value} not supported for separate backup, use ALL instead"
    )


def backup_meta(base: str, count: int, revision: int) -> dict[str, str]:
    """Return the metadata stored with a key-value part.

    The base path's last element is the meta path; what precedes it names the instance.
    """
    parts = base.split("/")
    if len(parts) > 1:
        meta_path = parts[-1]
        instance = join_path(*parts[:-1])
    else:
        meta_path = ""
        instance = base
    return {
        "cnt": str(count),
        "instance": instance,
        "metaPath": meta_path,
        "rev": str(revision),
    }


def write_kv_part(
    kv: MemoryKV,
    base: str,
    prefix: str,
    stream: BinaryIO,
    encode_pair: Callable[[str, bytes], bytes],
) -> int:
    """Write every entry under ``base``/``prefix`` as a frame, then a stopper.

    Each entry is encoded with ``encode_pair(key, value)``. Returns how many
    entries were written.
    """
    entries = kv.get_prefix(join_path(base, prefix))
    for entry in entries:
        write_frame(stream, encode_pair(entry.key, entry.value))
    write_frame(stream, None)
    return len(entries)