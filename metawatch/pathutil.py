"""Helpers for meta-store keys, channel names and object-storage paths."""

from __future__ import annotations

import posixpath
import re

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def join_path(*args: str) -> str:
    """Join non-empty elements with "/" and clean the result; all empty gives ""."""
    parts = [a for a in args if a]
    if not parts:
        return ""
    cleaned = posixpath.normpath("/".join(parts))
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def parse_int64(text: str) -> int:
    """Parse a base-10 signed 64-bit integer, strictly."""
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"integer out of range: {text!r}")
    return value


def path_part(p: str, idx: int) -> str:
    """Return the ``idx``-th "/"-separated part of ``p``; negative counts from the end."""
    parts = p.split("/")
    if idx < 0:
        idx += len(parts)
    if not 0 <= idx < len(parts):
        raise IndexError("out of index")
    return parts[idx]


def path_part_int64(p: str, idx: int) -> int:
    """Return the ``idx``-th part of ``p`` parsed as a 64-bit integer."""
    return parse_int64(path_part(p, idx))


def to_physical_channel(vchannel: str) -> str:
    """Strip the last "_"-separated suffix from a virtual channel name."""
    index = vchannel.rfind("_")
    if index < 0:
        return vchannel
    return vchannel[:index]


def parse_segment_id_by_binlog(root_path: str, path: str) -> int:
    """Extract the segment id from a binlog path under ``root_path``.

    The path below the root must look like "kind/coll/part/segment/field/file".
    """
    if not path.startswith(root_path):
        raise ValueError(f'path:"{path}" does not contains rootPath:"{root_path}"')
    rest = path[len(root_path) :].lstrip("/")
    parts = rest.split("/")
    if len(parts) != 6:
        raise ValueError(f"{rest} is not a valid binlog path")
    return parse_int64(parts[-3])