"""Rectangle geometry: crop scaling, overlap and grouping of covering objects."""

from __future__ import annotations

import math
from functools import reduce
from typing import AbstractSet, Sequence

from sitewatch.models import AlgoObject, Rect

CENTER = "中心"
VERTICAL = "上下"
HORIZONTAL = "左右"
DOWN = "向下"
UP = "向上"
LEFT = "向左"
RIGHT = "向右"


def _align(value: int, alignment: int) -> int:
    return (value + alignment - 1) & ~(alignment - 1)


def _cdiv(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def _cmod(a: int, b: int) -> int:
    return a - b * _cdiv(a, b)


def scale_crop_rect(
    img_w: int,
    img_h: int,
    rect: Rect,
    scale_factor: float = 1.0,
    scale_direction: str = CENTER,
    dilated_area_only: bool = False,
) -> Rect:
    """Grow ``rect`` by ``scale_factor`` in a direction and fit it to the image.

    Widths are aligned to 16 and heights to 2, sizes are at least 16, and the
    corner is moved to even coordinates inside the image.
    """
    x, y, width, height = rect.x, rect.y, rect.width, rect.height

    if scale_direction == CENTER:
        width = _align(int(rect.width * scale_factor), 16)
        height = _align(int(rect.height * scale_factor), 2)
        x -= _cdiv(width - rect.width, 2)
        y -= _cdiv(height - rect.height, 2)
    elif scale_direction == VERTICAL:
        height = _align(int(rect.height * scale_factor), 2)
        y -= _cdiv(height - rect.height, 2)
    elif scale_direction == HORIZONTAL:
        width = _align(int(rect.width * scale_factor), 16)
        x -= _cdiv(width - rect.width, 2)
    elif scale_direction == DOWN:
        height += _align(int(rect.height * (scale_factor - 1) * 0.5), 2)
        if dilated_area_only:
            y += min(height, rect.height)
            height = abs(height - rect.height)
    elif scale_direction == UP:
        height += _align(int(rect.height * (scale_factor - 1) * 0.5), 2)
        if dilated_area_only:
            y -= max(0, height - rect.height)
            height = abs(height - rect.height)
    elif scale_direction == LEFT:
        width += _align(int(rect.width * (scale_factor - 1) * 0.5), 16)
        if dilated_area_only:
            x -= max(0, width - rect.width)
            width = abs(width - rect.width)
    elif scale_direction == RIGHT:
        width += _align(int(rect.width * (scale_factor - 1) * 0.5), 16)
        if dilated_area_only:
            x += min(width, rect.width)
            width = abs(width - rect.width)

    width = max(min(width, img_w), 16)
    height = max(min(height, img_h), 16)

    x -= _cmod(x, 2)
    y -= _cmod(y, 2)

    x = max(x, 0)
    y = max(y, 0)
    if x + width > img_w:
        x = img_w - width
    if y + height > img_h:
        y = img_h - height

    return Rect(x, y, width, height)


def intersection_area(rect1: Rect, rect2: Rect) -> float:
    """Area shared by two rectangles."""
    w = min(rect1.x + rect1.width, rect2.x + rect2.width) - max(rect1.x, rect2.x)
    h = min(rect1.y + rect1.height, rect2.y + rect2.height) - max(rect1.y, rect2.y)
    if w <= 0 or h <= 0:
        return 0.0
    return float(w * h)


def area_cover_rate(rect1: Rect, rect2: Rect) -> float:
    """Shared area divided by the smaller rectangle's area; NaN if that area is zero."""
    inter = intersection_area(rect1, rect2)
    smaller = min(abs(rect1.area()), abs(rect2.area()))
    if smaller == 0:
        return math.nan
    return inter / smaller


def find_cover_objects(
    objects: Sequence[AlgoObject],
    include_labels: AbstractSet[str],
    exclude_labels: AbstractSet[str],
    map_label: str,
    cover_threshold: float = 0.5,
) -> list[AlgoObject]:
    """Merge groups of overlapping objects that together show every included label.

    A group is abandoned when an object with an excluded label overlaps its
    first member. Each merged group becomes one object labelled ``map_label``.
    """
    cover_targets: list[AlgoObject] = []
    used_ids: set[int] = set()

    for target_1 in objects:
        if (
            target_1.label not in include_labels
            or target_1.label in exclude_labels
            or target_1.target_id in used_ids
        ):
            continue

        current = {target_1.target_id: target_1}
        target_labels = {target_1.label}
        for target_2 in objects:
            if (
                target_2.label in target_labels
                or target_2.label not in include_labels
                or target_2.target_id in used_ids
            ):
                continue

            cover_rate = area_cover_rate(target_1.rect, target_2.rect)
            if cover_rate > 0 and target_2.label in exclude_labels:
                break
            if cover_rate >= cover_threshold:
                current[target_2.target_id] = target_2
                target_labels.add(target_2.label)

            if include_labels and len(current) >= len(include_labels):
                used_ids.update(current)
                members = [current[key] for key in sorted(current)]
                rect = reduce(lambda acc, item: acc.union(item.rect), members, Rect(0, 0, 0, 0))
                score = sum(item.score for item in members) / len(members)
                cover_targets.append(
                    AlgoObject(target_1.target_id, 0, map_label, score, rect, target_1.track_id)
                )
                break

    return cover_targets