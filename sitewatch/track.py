"""Single-object track state carried between frames by the tracker."""

from __future__ import annotations

import threading
from enum import IntEnum
from typing import Iterable, Sequence

import numpy as np

from sitewatch.kalman import KalmanFilter

_id_state = threading.local()


class TrackState(IntEnum):
    """Life-cycle stage of a track."""

    NEW = 0
    TRACKED = 1
    LOST = 2
    REMOVED = 3


def tlbr_to_tlwh(tlbr: Sequence[float]) -> list[float]:
    """Convert (left, top, right, bottom) to (left, top, width, height)."""
    left, top, right, bottom = (float(v) for v in tlbr)
    return [left, top, right - left, bottom - top]


def tlwh_to_xyah(tlwh: Sequence[float]) -> list[float]:
    """Convert (left, top, width, height) to (centre x, centre y, aspect, height)."""
    left, top, width, height = (float(v) for v in tlwh)
    return [left + width / 2, top + height / 2, width / height, height]


def next_track_id() -> int:
    """Return the next track identifier for the calling thread, starting at 1."""
    count = getattr(_id_state, "count", 0) + 1
    _id_state.count = count
    return count


class Track:
    """A detection that may be followed over frames with a Kalman filter."""

    def __init__(
        self,
        tlwh: Sequence[float],
        score: float,
        class_id: int = 0,
        target_id: int = 0,
        label_name: str = "",
        color: Sequence[int] = (0, 0, 0, 0),
    ) -> None:
        box = [float(v) for v in tlwh]
        if len(box) != 4:
            raise ValueError("a box needs exactly four values")
        self._tlwh = box
        self.is_activated = False
        self.track_id = 0
        self.state = TrackState.NEW
        self.frame_id = 0
        self.tracklet_len = 0
        self.start_frame = 0
        self.score = float(score)
        self.class_id = class_id
        self.target_id = target_id
        self.label_name = label_name
        self.color = tuple(color)
        self.mean = np.zeros(8)
        self.covariance = np.zeros((8, 8))
        self.kalman_filter = KalmanFilter()
        self.tlwh: list[float] = []
        self.tlbr: list[float] = []
        self._refresh()

    def __repr__(self) -> str:
        return (
            f"Track(track_id={self.track_id}, state={self.state.name}, "
            f"label={self.label_name!r}, score={self.score:.3f}, tlwh={self.tlwh})"
        )

    def _refresh(self) -> None:
        if self.state == TrackState.NEW:
            self.tlwh = list(self._tlwh)
        else:
            cx, cy, aspect, height = (float(v) for v in self.mean[:4])
            width = aspect * height
            self.tlwh = [cx - width / 2, cy - height / 2, width, height]
        left, top, width, height = self.tlwh
        self.tlbr = [left, top, left + width, top + height]

    def _take_detection(self, new_track: Track) -> None:
        self.target_id = new_track.target_id
        self.class_id = new_track.class_id
        self.label_name = new_track.label_name
        self.color = new_track.color
        self.score = new_track.score

    def activate(self, kalman_filter: KalmanFilter, frame_id: int) -> None:
        """Start following this track with a fresh identifier."""
        self.kalman_filter = kalman_filter
        self.track_id = next_track_id()
        self.mean, self.covariance = kalman_filter.initiate(tlwh_to_xyah(self._tlwh))
        self._refresh()
        self.tracklet_len = 0
        self.state = TrackState.TRACKED
        if frame_id == 1:
            self.is_activated = True
        self.frame_id = frame_id
        self.start_frame = frame_id

    def re_activate(self, new_track: Track, frame_id: int, new_id: bool = False) -> None:
        """Resume a lost track with a matching detection."""
        self.mean, self.covariance = self.kalman_filter.update(
            self.mean, self.covariance, tlwh_to_xyah(new_track.tlwh)
        )
        self._refresh()
        self.tracklet_len = 0
        self.state = TrackState.TRACKED
        self.is_activated = True
        self.frame_id = frame_id
        self._take_detection(new_track)
        if new_id:
            self.track_id = next_track_id()

    def update(self, new_track: Track, frame_id: int) -> None:
        """Correct a tracked track with a matching detection."""
        self.frame_id = frame_id
        self.tracklet_len += 1
        self.mean, self.covariance = self.kalman_filter.update(
            self.mean, self.covariance, tlwh_to_xyah(new_track.tlwh)
        )
        self._refresh()
        self.state = TrackState.TRACKED
        self.is_activated = True
        self._take_detection(new_track)

    def to_xyah(self) -> list[float]:
        """Current box as (centre x, centre y, aspect, height)."""
        return tlwh_to_xyah(self.tlwh)

    def mark_lost(self) -> None:
        self.state = TrackState.LOST

    def mark_removed(self) -> None:
        self.state = TrackState.REMOVED


def multi_predict(tracks: Iterable[Track], kalman_filter: KalmanFilter) -> None:
    """Advance every track one step; tracks not being followed lose their height velocity."""
    for track in tracks:
        if track.state != TrackState.TRACKED:
            track.mean = np.array(track.mean, dtype=float)
            track.mean[7] = 0.0
        track.mean, track.covariance = kalman_filter.predict(track.mean, track.covariance)
        track._refresh()