import json

from metawatch.checkpoint import (
    channel_checkpoint_key,
    checkpoint_from_segments,
    latest_checkpoint_by_pchannel,
    save_channel_checkpoint,
)
from metawatch.kv import MemoryKV
from metawatch.segments import MsgPosition, SegmentInfo, SegmentState


def _seg(seg_id, channel, state, dml=None, start=None, collection=1):
    return SegmentInfo(
        id=seg_id,
        collection_id=collection,
        insert_channel=channel,
        state=state,
        dml_position=dml,
        start_position=start,
    )


def _pos(ts, channel="ch"):
    return MsgPosition(channel_name=channel, timestamp=ts)


def test_latest_skips_unusable_states_and_empty_positions():
    segments = [
        _seg(1, "a_v0", SegmentState.Dropped, dml=_pos(99)),
        _seg(2, "b_v0", SegmentState.Sealed, dml=_pos(99)),
        _seg(3, "c_v0", SegmentState.Flushed),
    ]
    assert latest_checkpoint_by_pchannel(segments) == {}


def test_latest_prefers_dml_over_start_position():
    dml, start = _pos(5), _pos(50)
    result = latest_checkpoint_by_pchannel(
        [_seg(1, "p_v0", SegmentState.Flushing, dml=dml, start=start)]
    )
    assert result["p"] is dml


def test_latest_falls_back_to_start_position():
    start = _pos(7)
    result = latest_checkpoint_by_pchannel(
        [_seg(1, "p_v0", SegmentState.Growing, start=start)]
    )
    assert result["p"] is start


def test_checkpoint_from_segments_picks_earliest():
    first, second = _pos(30), _pos(15)
    segments = [
        _seg(11, "v", SegmentState.Flushed, dml=first),
        _seg(12, "v", SegmentState.Growing, dml=second),
        _seg(13, "other", SegmentState.Flushed, dml=_pos(1)),
        _seg(14, "v", SegmentState.Flushed, dml=_pos(1), collection=2),
    ]
    pos, segment_id = checkpoint_from_segments(segments, 1, "v")
    assert pos is second
    assert segment_id == 12


def test_checkpoint_from_segments_none_found():
    segments = [_seg(1, "v", SegmentState.Dropped, dml=_pos(3))]
    assert checkpoint_from_segments(segments, 1, "v") == (None, 0)


def test_channel_checkpoint_key():
    assert (
        channel_checkpoint_key("by-dev/meta", "ch_v0")
        == "by-dev/meta/datacoord-meta/channel-cp/ch_v0"
    )


def test_save_channel_checkpoint_round_trip():
    kv = MemoryKV()

    def encode(p):
        return json.dumps({"channel": p.channel_name, "ts": p.timestamp}).encode()

    position = _pos(42, "ch_v0")
    key = save_channel_checkpoint(kv, "root/meta", "ch_v0", position, encode)
    assert key == channel_checkpoint_key("root/meta", "ch_v0")
    stored = kv.get(key)
    assert len(stored) == 1
    decoded = json.loads(stored[0].value)
    assert decoded == {"channel": "ch_v0", "ts": 42}