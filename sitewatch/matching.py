"""Association helpers: IoU costs, assignment and track list operations."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from sitewatch.lapjv import lapjv
from sitewatch.track import Track


def ious(atlbrs: Sequence[Sequence[float]], btlbrs: Sequence[Sequence[float]]) -> np.ndarray:
    """Pairwise IoU of two lists of (left, top, right, bottom) boxes, inclusive pixels."""
    a = np.asarray(atlbrs, dtype=float).reshape(-1, 4)
    b = np.asarray(btlbrs, dtype=float).reshape(-1, 4)
    if a.size == 0 or b.size == 0:
        return np.zeros((len(a), len(b)))

    iw = np.minimum(a[:, None, 2], b[None, :, 2]) - np.maximum(a[:, None, 0], b[None, :, 0]) + 1
    ih = np.minimum(a[:, None, 3], b[None, :, 3]) - np.maximum(a[:, None, 1], b[None, :, 1]) + 1
    area_a = (a[:, 2] - a[:, 0] + 1) * (a[:, 3] - a[:, 1] + 1)
    area_b = (b[:, 2] - b[:, 0] + 1) * (b[:, 3] - b[:, 1] + 1)
    overlap = iw * ih
    union = area_a[:, None] + area_b[None, :] - overlap
    valid = (iw > 0) & (ih > 0)
    result = np.zeros_like(overlap)
    np.divide(overlap, union, out=result, where=valid)
    return result


def iou_distance(atracks: Sequence[Track], btracks: Sequence[Track]) -> np.ndarray:
    """Cost matrix of ``1 - IoU`` between two track lists."""
    if not atracks or not btracks:
        return np.zeros((len(atracks), len(btracks)))
    return 1.0 - ious([t.tlbr for t in atracks], [t.tlbr for t in btracks])


def linear_assignment(
    cost_matrix, n_rows: int, n_cols: int, thresh: float
) -> tuple[list[tuple[int, int]], list[int], list[int]]:
    """Match rows to columns with cost below ``thresh``.

    Returns ``(matches, unmatched_rows, unmatched_cols)``.
    """
    if np.size(cost_matrix) == 0:
        return [], list(range(n_rows)), list(range(n_cols))

    result = lapjv(cost_matrix, extend_cost=True, cost_limit=thresh)
    matches = [(i, j) for i, j in enumerate(result.rowsol) if j >= 0]
    unmatched_a = [i for i, j in enumerate(result.rowsol) if j < 0]
    unmatched_b = [j for j, i in enumerate(result.colsol) if i < 0]
    return matches, unmatched_a, unmatched_b


def joint_tracks(tlista: Sequence[Track], tlistb: Sequence[Track]) -> list[Track]:
    """All of ``tlista`` followed by the tracks of ``tlistb`` whose id is new."""
    seen = {t.track_id for t in tlista}
    result = list(tlista)
    for track in tlistb:
        if track.track_id not in seen:
            seen.add(track.track_id)
            result.append(track)
    return result


def sub_tracks(tlista: Sequence[Track], tlistb: Sequence[Track]) -> list[Track]:
    """Tracks of ``tlista`` whose id is not in ``tlistb``, ordered by id."""
    by_id: dict[int, Track] = {}
    for track in tlista:
        by_id.setdefault(track.track_id, track)
    for track in tlistb:
        by_id.pop(track.track_id, None)
    return [by_id[key] for key in sorted(by_id)]


def remove_duplicate_tracks(
    tracksa: Sequence[Track], tracksb: Sequence[Track]
) -> tuple[list[Track], list[Track]]:
    """Drop near-identical tracks, keeping whichever of a pair has lived longer."""
    pdist = iou_distance(tracksa, tracksb)
    dupa: set[int] = set()
    dupb: set[int] = set()
    for i, j in zip(*np.nonzero(pdist < 0.15)):
        timep = tracksa[i].frame_id - tracksa[i].start_frame
        timeq = tracksb[j].frame_id - tracksb[j].start_frame
        if timep > timeq:
            dupb.add(int(j))
        else:
            dupa.add(int(i))
    resa = [t for i, t in enumerate(tracksa) if i not in dupa]
    resb = [t for j, t in enumerate(tracksb) if j not in dupb]
    return resa, resb


def track_color(idx: int) -> tuple[int, int, int]:
    """A stable drawing colour for a track index."""
    idx += 3
    return tuple(int(math.fmod(k * idx, 255)) for k in (37, 17, 29))