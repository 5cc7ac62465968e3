# metawatch

A library for looking into the key-value metadata that a vector database
instance keeps: component sessions, segments and their binlogs, channel
checkpoints and query-coordinator load records. It also writes and reads a
framed, length-prefixed backup stream for snapshotting that metadata.

Every function that touches the store takes a store object with the interface
of `metawatch.kv.MemoryKV` (`get`, `get_prefix`, `get_from`, `put`, `delete`,
`delete_prefix`). `MemoryKV` itself is an in-memory store with keys kept in
sorted order; wrap your own client in the same methods to work against a live
store.

## Install

```
pip install .
pip install ".[test]"   # with pytest
```

The package has no runtime dependencies.

## Modules

- `metawatch.kv`: `KeyValue`, `MemoryKV`, and `list_objects(kv, prefix,
  decode, *filters)`, which decodes every value under a prefix, skips values
  the decoder rejects with `ValueError`, and returns the objects that pass all
  filters together with their keys.
- `metawatch.pathutil`: `join_path`, `parse_int64`, `path_part`,
  `path_part_int64`, `to_physical_channel` and `parse_segment_id_by_binlog`.
- `metawatch.session`: `Session` (with `from_json` / `to_json`), `Component`
  (with `parse`), `SessionError`, `list_sessions`, `list_sessions_by_prefix`,
  `session_key`, `kill_component` (removes a session after checking its server
  id) and `find_milvus_instances` (lists the distinct root paths in the store).
- `metawatch.segments`: the models `SegmentState`, `Binlog`, `FieldBinlog`,
  `MsgPosition`, `SegmentInfo`, `VChannelInfo` and `SegmentStats`, plus
  `is_segment_healthy`, `is_empty_segment`, `count_binlog_num`,
  `revise_vchannel_info`, `get_kv_pair`, `sort_by_collection`,
  `segment_stats` and `format_segment_line`.
- `metawatch.repair`: `FieldSchema`, `IndexMeta`, `check_binlog_index`,
  `integrity_check`, `find_primary_key`, `ddup` and `global_ddup`.
- `metawatch.forcerelease`: `LoadedSegment`, `DmChannel`, `force_release`,
  `missing_collections` and `release_load_meta`.
- `metawatch.checkpoint`: `latest_checkpoint_by_pchannel`,
  `checkpoint_from_segments`, `channel_checkpoint_key` and
  `save_channel_checkpoint`.
- `metawatch.gc`: `collect_valid_logs`, `classify_object`, `scan_objects` and
  `GarbageReport` (with `entries`, `count` and `lines()`), for finding
  object-storage keys that no live segment refers to.
- `metawatch.backup`: the frame format (`write_frame`, `read_frame`,
  `iter_frames`, `BackupFormatError`), `backup_file_name`, `backup_prefix`,
  `backup_meta` and `write_kv_part`.
- `metawatch.restore`: `restore_kv_part`, `read_metrics_part` and
  `read_labelled_part`.
- `metawatch.workspace`: `check_is_dir_or_create`, `check_file`,
  `create_workspace_folder`, `expand_backup_path` and `metrics_urls`.

## Examples

Listing sessions:

```python
from metawatch.kv import MemoryKV
from metawatch.session import list_sessions

kv = MemoryKV({
    "by-dev/meta/session/datacoord":
        b'{"ServerID": 1, "ServerName": "datacoord", "Address": "10.0.0.1:13333"}',
})
for session in list_sessions(kv, "by-dev/meta"):
    print(session.server_name, session.server_id)
```

Backing up a store into a frame stream and restoring it elsewhere. How a key
and value are encoded inside a frame is up to the caller:

```python
import io
import json

from metawatch.backup import backup_meta, write_kv_part
from metawatch.kv import MemoryKV
from metawatch.restore import restore_kv_part

def encode_pair(key, value):
    return json.dumps([key, value.decode()]).encode()

def decode_pair(frame):
    key, value = json.loads(frame)
    return key, value.encode()

source = MemoryKV({"by-dev/meta/a": b"1", "by-dev/meta/b": b"2"})
stream = io.BytesIO()
count = write_kv_part(source, "by-dev/meta", "", stream, encode_pair)
meta = backup_meta("by-dev/meta", count, 0)

stream.seek(0)
target = MemoryKV()
instance = restore_kv_part(target, stream, meta, decode_pair)
print(instance, len(target))   # by-dev 2
```

## What it does not do

- There is no command-line program or interactive shell; it is a library only.
- It has no client for a networked key-value store; you supply an object with
  the `MemoryKV` methods.
- It does not decode or encode the binary message formats stored as values;
  functions such as `list_objects`, `write_kv_part`, `restore_kv_part` and
  `save_channel_checkpoint` take the decoder or encoder as an argument.
- It does not list object storage itself: `scan_objects` is given the keys.
- It does not fetch metrics: `metrics_urls` only builds the two URLs.
- Backup streams are written and read as plain binary streams; compression
  and any file header or part header records are left to the caller.

## Tests

```
pytest
```