"""A small ordered key-value store that serves the meta store's read and write calls."""

from __future__ import annotations

import bisect
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class KeyValue:
    """One stored entry: a string key and its raw value."""

    key: str
    value: bytes


def _to_bytes(value: bytes | str) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    raise TypeError(f"value must be bytes or str, not {type(value).__name__}")


class MemoryKV:
    """An in-memory key-value store with keys kept in byte order."""

    def __init__(
        self,
        items: Mapping[str, bytes | str] | Iterable[tuple[str, bytes | str]] | None = None,
    ) -> None:
        self._data: dict[str, bytes] = {}
        self._keys: list[str] = []
        if items is None:
            return
        pairs = items.items() if isinstance(items, Mapping) else items
        for key, value in pairs:
            self.put(key, value)

    def get(self, key: str) -> list[KeyValue]:
        """Return the entry stored under exactly ``key``, as a list of zero or one."""
        if key in self._data:
            return [KeyValue(key, self._data[key])]
        return []

    def get_prefix(self, prefix: str) -> list[KeyValue]:
        """Return every entry whose key starts with ``prefix``, in key order."""
        start = bisect.bisect_left(self._keys, prefix)
        result = []
        for key in self._keys[start:]:
            if not key.startswith(prefix):
                break
            result.append(KeyValue(key, self._data[key]))
        return result

    def get_from(self, key: str, limit: int | None = None) -> list[KeyValue]:
        """Return entries with keys at or after ``key``; a falsy ``limit`` means no limit."""
        start = bisect.bisect_left(self._keys, key)
        keys = self._keys[start:]
        if limit:
            keys = keys[:limit]
        return [KeyValue(k, self._data[k]) for k in keys]

    def put(self, key: str, value: bytes | str) -> None:
        """Store ``value`` under ``key``, replacing any earlier value."""
        if key not in self._data:
            bisect.insort(self._keys, key)
        self._data[key] = _to_bytes(value)

    def delete(self, key: str) -> int:
        """Remove ``key``; return the number of entries removed."""
        if key not in self._data:
            return 0
        del self._data[key]
        self._keys.pop(bisect.bisect_left(self._keys, key))
        return 1

    def delete_prefix(self, prefix: str) -> int:
        """Remove every key starting with ``prefix``; return how many were removed."""
        doomed = [kv.key for kv in self.get_prefix(prefix)]
        for key in doomed:
            del self._data[key]
        start = bisect.bisect_left(self._keys, prefix)
        del self._keys[start : start + len(doomed)]
        return len(doomed)

    def __len__(self) -> int:
        return len(self._keys)


def list_objects(
    kv: Any,
    prefix: str,
    decode: Callable[[bytes], T],
    *args: Callable[[T], bool],
) -> tuple[list[T], list[str]]:
    """Decode every value under ``prefix`` and keep those passing all filters in ``args``.

    Values that ``decode`` rejects with ``ValueError`` are skipped. Returns the
    decoded objects and their keys, in matching order.
    """
    results: list[T] = []
    keys: list[str] = []
    for entry in kv.get_prefix(prefix):
        try:
            obj = decode(entry.value)
        except ValueError:
            continue
        if all(check(obj) for check in args):
            results.append(obj)
            keys.append(entry.key)
    return results, keys