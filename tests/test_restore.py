import io

import pytest

from metawatch.backup import BackupFormatError, write_frame
from metawatch.kv import MemoryKV
from metawatch.restore import read_labelled_part, read_metrics_part, restore_kv_part
from metawatch.session import Session


def encode_pair(key, value):
    return key.encode() + b"\x00" + value


def decode_pair(data):
    if b"\x00" not in data:
        raise ValueError("bad pair")
    key, value = data.split(b"\x00", 1)
    return key.decode(), value


def make_stream(frames, stopper=True):
    buf = io.BytesIO()
    for frame in frames:
        write_frame(buf, frame)
    if stopper:
        write_frame(buf, None)
    buf.seek(0)
    return buf


def test_restore_kv_part_puts_entries_and_returns_instance():
    stream = make_stream([encode_pair("a/meta/x", b"1"), encode_pair("a/meta/y", b"2")])
    kv = MemoryKV()
    instance = restore_kv_part(kv, stream, {"cnt": "2", "instance": "a"}, decode_pair)
    assert instance == "a"
    assert kv.get("a/meta/x")[0].value == b"1"
    assert kv.get("a/meta/y")[0].value == b"2"
    assert len(kv) == 2


def test_restore_kv_part_skips_undecodable_frames():
    stream = make_stream([b"garbage", encode_pair("k", b"v")])
    kv = MemoryKV()
    restore_kv_part(kv, stream, {"cnt": "2", "instance": "i"}, decode_pair)
    assert [e.key for e in kv.get_prefix("")] == ["k"]


def test_restore_kv_part_stops_at_stopper():
    buf = io.BytesIO()
    write_frame(buf, encode_pair("k", b"v"))
    write_frame(buf, None)
    write_frame(buf, b"next part")
    buf.seek(0)
    kv = MemoryKV()
    restore_kv_part(kv, buf, b'{"cnt": "1", "instance": "inst"}', decode_pair)
    assert len(kv) == 1
    assert buf.read() == b"\x09\x00\x00\x00\x00\x00\x00\x00next part"


def test_restore_kv_part_ends_at_eof_without_stopper():
    stream = make_stream([encode_pair("k", b"v")], stopper=False)
    kv = MemoryKV()
    assert restore_kv_part(kv, stream, {"cnt": "1", "instance": "z"}, decode_pair) == "z"
    assert len(kv) == 1


def test_restore_kv_part_rejects_bad_count():
    with pytest.raises(ValueError):
        restore_kv_part(MemoryKV(), make_stream([]), {"cnt": "x"}, decode_pair)
    with pytest.raises(ValueError):
        restore_kv_part(MemoryKV(), make_stream([]), {"instance": "a"}, decode_pair)


def test_restore_kv_part_truncated_frame_raises():
    buf = io.BytesIO(b"\x10\x00\x00\x00\x00\x00\x00\x00abc")
    with pytest.raises(BackupFormatError):
        restore_kv_part(MemoryKV(), buf, {"cnt": "1"}, decode_pair)


def test_read_metrics_part_calls_handler():
    session = Session(server_id=3, server_name="querynode", address="host:1")
    stream = make_stream([session.to_json(), b"m", b"dm"])
    seen = []
    count = read_metrics_part(stream, lambda s, m, d: seen.append((s, m, d)))
    assert count == 1
    got, metrics, default_metrics = seen[0]
    assert (got.server_id, got.server_name, got.address) == (3, "querynode", "host:1")
    assert metrics == b"m"
    assert default_metrics == b"dm"


def test_read_metrics_part_truncated_raises():
    session = Session(server_id=1, server_name="datanode")
    stream = make_stream([session.to_json(), b"m"], stopper=False)
    with pytest.raises(BackupFormatError):
        read_metrics_part(stream, lambda s, m, d: None)


def test_read_metrics_part_bad_session_raises():
    stream = make_stream([b"not json", b"m", b"d"])
    with pytest.raises(ValueError):
        read_metrics_part(stream, lambda s, m, d: None)


def test_read_labelled_part_returns_pairs():
    stream = make_stream([b"label-1", b"data-1", b"label-2", b"data-2"])
    assert read_labelled_part(stream) == [("label-1", b"data-1"), ("label-2", b"data-2")]


def test_read_labelled_part_empty_part():
    assert read_labelled_part(make_stream([])) == []


def test_read_labelled_part_missing_data_raises():
    with pytest.raises(BackupFormatError):
        read_labelled_part(make_stream([b"label"], stopper=False))