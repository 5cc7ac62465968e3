"""Dry-run garbage scan of object storage against segment metadata."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from metawatch.pathutil import parse_segment_id_by_binlog
from metawatch.segments import SegmentInfo, SegmentState, is_segment_healthy

INSERT_LOG_PREFIX = "insert_log"
STATS_LOG_PREFIX = "stats_log"
DELTA_LOG_PREFIX = "delta_log"

LOG_PREFIXES = (INSERT_LOG_PREFIX, STATS_LOG_PREFIX, DELTA_LOG_PREFIX)

RESULT_VALID = "result: valid key"
RESULT_GARBAGE = "not relate meta found, maybe garbage"


@dataclass
class GarbageReport:
    """The outcome of a scan: each object key with the verdict reached for it."""

    entries: list[tuple[str, str]] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.entries)

    def lines(self) -> list[str]:
        """Return the report lines, one per processed object."""
        return [f'Processing path: "{key}", {result}' for key, result in self.entries]


def collect_valid_logs(
    segments: Iterable[SegmentInfo],
) -> tuple[set[str], set[str], set[str]]:
    """Return the binlog, statslog and deltalog paths of all healthy segments."""
    binlogs: set[str] = set()
    statslogs: set[str] = set()
    deltalogs: set[str] = set()
    for segment in segments:
        if not is_segment_healthy(segment):
            continue
        for target, groups in (
            (binlogs, segment.binlogs),
            (statslogs, segment.statslogs),
            (deltalogs, segment.deltalogs),
        ):
            target.update(b.log_path for fb in groups for b in fb.binlogs)
    return binlogs, statslogs, deltalogs


def classify_object(
    key: str,
    root_path: str,
    valid_logs: set[str],
    segments_by_id: Mapping[int, SegmentInfo],
) -> str:
    """Return the verdict for one object key."""
    if key in valid_logs:
        return RESULT_VALID
    try:
        segment_id = parse_segment_id_by_binlog(root_path, key)
    except ValueError as exc:
        return f"failed to parse segmentID: {exc}"
    segment = segments_by_id.get(segment_id)
    if segment is not None and segment.state == SegmentState.Dropped:
        return f"segment {segment_id} is dropped, waiting for gc"
    return RESULT_GARBAGE


def scan_objects(
    keys_by_prefix: Mapping[str, Iterable[str]],
    root_path: str,
    segments: Iterable[SegmentInfo],
) -> GarbageReport:
    """Classify the object keys listed under each log prefix.

    ``keys_by_prefix`` maps a log kind ("insert_log", "stats_log" or
    "delta_log") to the object keys found under that prefix of ``root_path``.
    Kinds are processed in that order; missing kinds count as empty.
    """
    segment_list = list(segments)
    segments_by_id = {segment.id: segment for segment in segment_list}
    valid_by_kind = dict(zip(LOG_PREFIXES, collect_valid_logs(segment_list)))
    report = GarbageReport()
    for kind in LOG_PREFIXES:
        valid = valid_by_kind[kind]
        for key in keys_by_prefix.get(kind, ()):
            report.entries.append(
                (key, classify_object(key, root_path, valid, segments_by_id))
            )
    return report