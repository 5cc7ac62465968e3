import pytest

from metawatch.repair import (
    FieldSchema,
    IndexMeta,
    check_binlog_index,
    ddup,
    find_primary_key,
    global_ddup,
    integrity_check,
)
from metawatch.segments import Binlog, FieldBinlog, SegmentInfo


def _segment():
    return SegmentInfo(
        id=9,
        binlogs=[
            FieldBinlog(
                field_id=100,
                binlogs=[Binlog(log_path="a", entries_num=5), Binlog(log_path="b", entries_num=5),
                         Binlog(log_path="c", entries_num=5)],
            ),
            FieldBinlog(
                field_id=101,
                binlogs=[Binlog(log_path="x", entries_num=5), Binlog(log_path="y", entries_num=5),
                         Binlog(log_path="z", entries_num=5)],
            ),
        ],
    )


def test_check_binlog_index_all_indexed():
    seg = _segment()
    meta = IndexMeta(index_build_id=1, field_id=100, data_paths=["a", "b", "c"])
    assert check_binlog_index(seg, meta) is None


def test_check_binlog_index_removes_unindexed_positions():
    seg = _segment()
    meta = IndexMeta(index_build_id=1, field_id=100, data_paths=["a", "c"])
    updated = check_binlog_index(seg, meta)
    assert [b.log_path for b in updated.binlogs[0].binlogs] == ["a", "c"]
    assert [b.log_path for b in updated.binlogs[1].binlogs] == ["x", "z"]
    # the original segment is left untouched
    assert [b.log_path for b in seg.binlogs[0].binlogs] == ["a", "b", "c"]


def test_check_binlog_index_other_field_not_considered():
    seg = _segment()
    meta = IndexMeta(field_id=555, data_paths=[])
    assert check_binlog_index(seg, meta) is None


def test_integrity_check():
    seg = _segment()
    assert integrity_check(seg) is True
    seg.binlogs[1].binlogs.pop()
    assert integrity_check(seg) is False


def test_integrity_check_after_repair_stays_consistent():
    seg = _segment()
    updated = check_binlog_index(seg, IndexMeta(field_id=100, data_paths=["b"]))
    assert integrity_check(updated) is True


def test_integrity_check_without_binlogs():
    with pytest.raises(ValueError):
        integrity_check(SegmentInfo(id=1))


def test_find_primary_key():
    fields = [FieldSchema(field_id=100, name="vec", data_type=101),
              FieldSchema(field_id=101, name="pk", data_type=5, is_primary_key=True)]
    assert find_primary_key(fields) == 101


def test_find_primary_key_missing():
    with pytest.raises(ValueError):
        find_primary_key([FieldSchema(field_id=100)])


def test_ddup():
    assert ddup([1, 2, 1, 1]) == 2
    assert ddup([]) == 0


def test_global_ddup():
    seen = {}
    dist, count = global_ddup(7, [1, 2, 3], seen)
    assert (dist, count) == ({}, 0)
    assert seen == {1: 7, 2: 7, 3: 7}
    dist, count = global_ddup(8, [2, 3, 4], seen)
    assert dist == {7: count}
    assert count == 2
    assert seen[4] == 8
    assert seen[2] == 7