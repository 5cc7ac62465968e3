"""Component sessions registered in the meta store."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Any

from metawatch.kv import MemoryKV
from metawatch.pathutil import join_path

SESSION_PREFIX = "session"

_FIELDS = {"serverid": "ServerID", "servername": "ServerName", "address": "Address"}


class SessionError(Exception):
    """A session could not be found, parsed or removed as asked."""


@dataclass
class Session:
    """A component's registration: its id, name and address."""

    server_id: int = 0
    server_name: str = ""
    address: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: bytes | str) -> Session:
        """Parse a session from its JSON form; field names match case-insensitively."""
        obj = json.loads(data)
        if not isinstance(obj, dict):
            raise ValueError("session must be a JSON object")
        session = cls()
        for key, value in obj.items():
            name = _FIELDS.get(key.lower())
            if name is None:
                session.extra[key] = value
            elif value is None:
                continue
            elif name == "ServerID":
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ValueError(f"ServerID must be an integer, got {value!r}")
                session.server_id = value
            else:
                if not isinstance(value, str):
                    raise ValueError(f"{name} must be a string, got {value!r}")
                if name == "ServerName":
                    session.server_name = value
                else:
                    session.address = value
        return session

    def to_json(self) -> bytes:
        """Serialise the session to JSON."""
        obj = {
            "ServerID": self.server_id,
            "ServerName": self.server_name,
            "Address": self.address,
            **self.extra,
        }
        return json.dumps(obj).encode("utf-8")


class Component(str, enum.Enum):
    """A component kind that commands can target."""

    ALL = "ALL"
    QUERYCOORD = "QUERYCOORD"
    ROOTCOORD = "ROOTCOORD"
    DATACOORD = "DATACOORD"
    INDEXCOORD = "INDEXCOORD"
    QUERYNODE = "QUERYNODE"

    @classmethod
    def parse(cls, value: str) -> Component:
        """Parse a component name, ignoring case."""
        try:
            return cls(value.upper())
        except ValueError:
            raise ValueError(
                'must be one of "ALL", "QueryCoord", "DataCoord", "IndexCoord" or "RootCoord"'
            ) from None


def list_sessions(kv: MemoryKV, base_path: str) -> list[Session]:
    """Return every session registered under ``base_path``."""
    return list_sessions_by_prefix(kv, join_path(base_path, SESSION_PREFIX))


def list_sessions_by_prefix(kv: MemoryKV, prefix: str) -> list[Session]:
    """Return every parseable session stored under ``prefix``."""
    sessions = []
    for entry in kv.get_prefix(prefix):
        try:
            sessions.append(Session.from_json(entry.value))
        except ValueError:
            continue
    return sessions


def session_key(base_path: str, component: Component | str, server_id: int) -> str:
    """Return the key of the session a kill command targets."""
    comp = component if isinstance(component, Component) else Component.parse(component)
    if comp in (
        Component.QUERYCOORD,
        Component.DATACOORD,
        Component.INDEXCOORD,
        Component.ROOTCOORD,
    ):
        return join_path(base_path, SESSION_PREFIX, comp.value.lower())
    if comp is Component.QUERYNODE:
        return join_path(base_path, SESSION_PREFIX, f"{comp.value.lower()}-{server_id}")
    raise SessionError("need to specify component type for killing")


def kill_component(kv: MemoryKV, key: str, server_id: int) -> None:
    """Remove the session at ``key`` after checking that it belongs to ``server_id``."""
    entries = kv.get(key)
    if len(entries) != 1:
        raise SessionError("cannot find session")
    try:
        session = Session.from_json(entries[0].value)
    except ValueError as exc:
        raise SessionError(f"faild to parse session for key {key}, error: {exc}") from exc
    if session.server_id != server_id:
        raise SessionError("session id no match")
    kv.delete(key)


def find_milvus_instances(kv: MemoryKV) -> list[str]:
    """Return the distinct first path parts of all keys: the candidate root paths."""
    apps: list[str] = []
    current = ""
    while True:
        entries = kv.get_from(current, 1)
        if not entries:
            break
        first = entries[0].key.split("/")[0]
        if first:
            apps.append(first)
        # "0" follows "/" in ASCII, so this skips every key under the same root.
        current = first + "0"
    return apps