"""Multi-object tracker that associates high and low scoring detections by IoU."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from sitewatch.kalman import KalmanFilter
from sitewatch.matching import (
    iou_distance,
    joint_tracks,
    linear_assignment,
    remove_duplicate_tracks,
    sub_tracks,
)
from sitewatch.track import Track, TrackState, multi_predict

_MAX_KEPT = 200


@dataclass
class Detection:
    """A detection handed to the tracker; ``rect`` is (left, top, width, height)."""

    rect: tuple[float, float, float, float]
    prob: float
    class_id: int = 0
    target_id: int = 0
    label_name: str = ""
    color: tuple[int, int, int, int] = (0, 0, 0, 0)


def _match(tracks: Sequence[Track], detections: Sequence[Track], thresh: float):
    cost = iou_distance(tracks, detections)
    return linear_assignment(cost, len(tracks), len(detections), thresh)


def _drop_oldest(tracks: list[Track]) -> None:
    if len(tracks) > _MAX_KEPT:
        oldest = min(range(len(tracks)), key=lambda i: tracks[i].frame_id)
        del tracks[oldest]


class ByteTracker:
    """Keeps track identities across frames."""

    def __init__(
        self,
        track_thresh: float = 0.5,
        high_thresh: float = 0.6,
        match_thresh: float = 0.8,
        track_buffer: int = 30,
    ) -> None:
        self.track_thresh = track_thresh
        self.high_thresh = high_thresh
        self.match_thresh = match_thresh
        self.max_time_lost = track_buffer
        self.frame_id = 0
        self.tracked_tracks: list[Track] = []
        self.lost_tracks: list[Track] = []
        self.removed_tracks: list[Track] = []
        self.kalman_filter = KalmanFilter()

    def _apply_matches(self, matches, tracks, detections, activated, refind) -> None:
        for i, j in matches:
            track, det = tracks[i], detections[j]
            if track.state == TrackState.TRACKED:
                track.update(det, self.frame_id)
                activated.append(track)
            else:
                track.re_activate(det, self.frame_id, False)
                refind.append(track)

    def update(self, objects: Iterable[Detection]) -> list[Track]:
        """Feed one frame of detections and return the confirmed tracks."""
        self.frame_id += 1
        activated: list[Track] = []
        refind: list[Track] = []
        lost: list[Track] = []
        removed: list[Track] = []

        detections: list[Track] = []
        detections_low: list[Track] = []
        for obj in objects:
            track = Track(obj.rect, obj.prob, obj.class_id, obj.target_id, obj.label_name, obj.color)
            if track.score >= self.track_thresh:
                detections.append(track)
            else:
                detections_low.append(track)

        unconfirmed = [t for t in self.tracked_tracks if not t.is_activated]
        tracked = [t for t in self.tracked_tracks if t.is_activated]

        # First association with high score detections.
        pool = joint_tracks(tracked, self.lost_tracks)
        multi_predict(pool, self.kalman_filter)
        matches, u_track, u_detection = _match(pool, detections, self.match_thresh)
        self._apply_matches(matches, pool, detections, activated, refind)

        # Second association with low score detections.
        remaining = [detections[j] for j in u_detection]
        r_tracked = [pool[i] for i in u_track if pool[i].state == TrackState.TRACKED]
        matches, u_track, _ = _match(r_tracked, detections_low, 0.5)
        self._apply_matches(matches, r_tracked, detections_low, activated, refind)

        for i in u_track:
            track = r_tracked[i]
            if track.state != TrackState.LOST:
                track.mark_lost()
                lost.append(track)

        # Tracks seen in only one frame so far.
        matches, u_unconfirmed, u_detection = _match(unconfirmed, remaining, 0.7)
        for i, j in matches:
            unconfirmed[i].update(remaining[j], self.frame_id)
            activated.append(unconfirmed[i])
        for i in u_unconfirmed:
            unconfirmed[i].mark_removed()
            removed.append(unconfirmed[i])

        # New tracks.
        for j in u_detection:
            track = remaining[j]
            if track.score < self.high_thresh:
                continue
            track.activate(self.kalman_filter, self.frame_id)
            activated.append(track)

        for track in self.lost_tracks:
            if self.frame_id - track.frame_id > self.max_time_lost:
                track.mark_removed()
                removed.append(track)

        self.tracked_tracks = [t for t in self.tracked_tracks if t.state == TrackState.TRACKED]
        self.tracked_tracks = joint_tracks(self.tracked_tracks, activated)
        self.tracked_tracks = joint_tracks(self.tracked_tracks, refind)

        self.lost_tracks = sub_tracks(self.lost_tracks, self.tracked_tracks) + lost
        self.lost_tracks = sub_tracks(self.lost_tracks, self.removed_tracks)
        self.removed_tracks.extend(removed)

        self.tracked_tracks, self.lost_tracks = remove_duplicate_tracks(self.tracked_tracks, self.lost_tracks)

        _drop_oldest(self.lost_tracks)
        _drop_oldest(self.removed_tracks)

        return [t for t in self.tracked_tracks if t.is_activated]