import pytest

from sitewatch.tracker import ByteTracker, Detection

BOX = (100.0, 100.0, 50.0, 80.0)
OTHER_BOX = (400.0, 300.0, 60.0, 60.0)


def test_empty_frame_returns_nothing():
    assert ByteTracker().update([]) == []


def test_first_frame_activates_track():
    tracker = ByteTracker()
    out = tracker.update([Detection(BOX, 0.9, class_id=2, label_name="person")])
    assert len(out) == 1
    track = out[0]
    assert track.is_activated
    assert track.label_name == "person"
    assert track.class_id == 2
    assert track.tlwh == pytest.approx(list(BOX), abs=1e-3)


def test_identity_kept_across_frames():
    tracker = ByteTracker()
    first = tracker.update([Detection(BOX, 0.9)])
    ids = {first[0].track_id}
    for _ in range(5):
        out = tracker.update([Detection(BOX, 0.9)])
        assert len(out) == 1
        ids.add(out[0].track_id)
    assert len(ids) == 1


def test_two_objects_get_distinct_ids():
    tracker = ByteTracker()
    out = tracker.update([Detection(BOX, 0.9), Detection(OTHER_BOX, 0.8)])
    assert len(out) == 2
    assert len({t.track_id for t in out}) == 2
    out2 = tracker.update([Detection(OTHER_BOX, 0.8), Detection(BOX, 0.9)])
    assert {t.track_id for t in out2} == {t.track_id for t in out}


def test_low_score_detection_does_not_start_track():
    tracker = ByteTracker()
    assert tracker.update([Detection(BOX, 0.3)]) == []
    assert tracker.update([Detection(BOX, 0.55)]) == []


def test_later_track_needs_confirmation():
    tracker = ByteTracker()
    assert tracker.update([]) == []
    assert tracker.update([Detection(BOX, 0.9)]) == []
    out = tracker.update([Detection(BOX, 0.9)])
    assert len(out) == 1
    assert out[0].tlwh == pytest.approx(list(BOX), abs=1.0)


def test_low_score_detection_keeps_track_alive():
    tracker = ByteTracker()
    first = tracker.update([Detection(BOX, 0.9)])
    out = tracker.update([Detection(BOX, 0.3)])
    assert [t.track_id for t in out] == [first[0].track_id]
    assert out[0].score == pytest.approx(0.3)


def test_lost_track_recovered_with_same_id():
    tracker = ByteTracker()
    first = tracker.update([Detection(BOX, 0.9)])
    assert tracker.update([]) == []
    assert tracker.update([]) == []
    out = tracker.update([Detection(BOX, 0.9)])
    assert [t.track_id for t in out] == [first[0].track_id]


def test_track_removed_after_buffer():
    tracker = ByteTracker(track_buffer=2)
    first = tracker.update([Detection(BOX, 0.9)])
    for _ in range(8):
        tracker.update([])
    assert tracker.update([Detection(BOX, 0.9)]) == []
    out = tracker.update([Detection(BOX, 0.9)])
    assert len(out) == 1
    assert out[0].track_id > first[0].track_id