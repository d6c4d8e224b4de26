"""Plain data types shared by the detection pipelines."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, Protocol, Sequence


@dataclass
class Rect:
    """Integer axis-aligned rectangle given by its top-left corner and size."""

    x: int
    y: int
    width: int
    height: int

    def area(self) -> int:
        return self.width * self.height

    def union(self, other: Rect) -> Rect:
        """Smallest rectangle holding both; an empty rectangle contributes nothing."""
        if self.width <= 0 or self.height <= 0:
            return Rect(other.x, other.y, other.width, other.height)
        if other.width <= 0 or other.height <= 0:
            return Rect(self.x, self.y, self.width, self.height)
        x1 = min(self.x, other.x)
        y1 = min(self.y, other.y)
        x2 = max(self.x + self.width, other.x + other.width)
        y2 = max(self.y + self.height, other.y + other.height)
        return Rect(x1, y1, x2 - x1, y2 - y1)


@dataclass(frozen=True)
class RawDetection:
    """One box as reported by an inference model, before any filtering."""

    class_id: int
    label: str
    score: float
    bbox: tuple[float, float, float, float]


@dataclass
class AlgoObject:
    """A detected object as reported by an algorithm."""

    target_id: int
    class_id: int
    label: str
    score: float
    rect: Rect
    track_id: int = 0


@dataclass(frozen=True)
class ModelConfig:
    """Where a model lives and how its results are filtered and cropped."""

    name: str
    path: str
    license: str
    threshold: float = 0.5
    labels: AbstractSet[str] = field(default_factory=frozenset)
    crop_scale_factor: float = 1.0
    max_crop_number: int = 10
    nms_threshold: float = 0.45

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", frozenset(self.labels))


class Detector(Protocol):
    """A loaded model: called with an image, returns the raw detections in it."""

    def __call__(self, image) -> Sequence[RawDetection]: ...


def _to_object(index: int, det: RawDetection) -> AlgoObject:
    x, y, w, h = det.bbox
    return AlgoObject(index, det.class_id, det.label, det.score, Rect(int(x), int(y), int(w), int(h)))


def parse_infer_result(detections: Iterable[RawDetection], threshold: float) -> list[AlgoObject]:
    """Keep detections scoring at least ``threshold``, numbered from 1."""
    kept = (det for det in detections if det.score >= threshold)
    return [_to_object(index, det) for index, det in enumerate(kept, start=1)]


def filter_infer_result(
    detections: Iterable[RawDetection], labels: AbstractSet[str], threshold: float = 0.0
) -> list[AlgoObject]:
    """Keep detections whose label is in ``labels`` and whose score reaches ``threshold``."""
    kept = (det for det in detections if det.label in labels and det.score >= threshold)
    return [_to_object(index, det) for index, det in enumerate(kept, start=1)]