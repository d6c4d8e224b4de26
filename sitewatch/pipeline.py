"""Shared model handling for the multi-stage detection algorithms."""

from __future__ import annotations

import threading
from functools import cmp_to_key
from typing import Callable, Iterable, Sequence

import numpy as np

from sitewatch.models import AlgoObject, Detector, ModelConfig, RawDetection, Rect

ModelLoader = Callable[[ModelConfig], Detector]


class ModelLoadError(RuntimeError):
    """Raised when a model cannot be loaded."""

    def __init__(self, model: ModelConfig) -> None:
        super().__init__(f"failed to load model: {model.name} - {model.path}")
        self.model = model


class DetectionPipeline:
    """Holds an ordered set of loaded models; subclasses chain them into stages."""

    def __init__(self, loader: ModelLoader) -> None:
        self._loader = loader
        self._lock = threading.Lock()
        self.model_configs: list[ModelConfig] = []
        self._detectors: list[Detector] = []

    def __enter__(self) -> DetectionPipeline:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def load_models(self, models: Iterable[ModelConfig]) -> None:
        """Load every model in order, replacing those loaded before."""
        with self._lock:
            self._detectors = []
            self.model_configs = list(models)
            for model in self.model_configs:
                try:
                    detector = self._loader(model)
                except Exception as exc:
                    raise ModelLoadError(model) from exc
                self._detectors.append(detector)

    def close(self) -> None:
        """Release the loaded models."""
        with self._lock:
            self._detectors = []

    @property
    def loaded(self) -> int:
        """Number of models currently loaded."""
        return len(self._detectors)

    def _config(self, index: int) -> ModelConfig:
        if index >= len(self._detectors):
            raise RuntimeError(f"model {index} is not loaded")
        return self.model_configs[index]

    def _detect(self, index: int, image) -> list[RawDetection]:
        self._config(index)
        return list(self._detectors[index](image))


def crop_image(image, rect: Rect) -> np.ndarray:
    """Copy of the part of ``image`` covered by ``rect``."""
    array = np.asarray(image)
    rows, cols = array.shape[:2]
    if (
        rect.x < 0
        or rect.y < 0
        or rect.width <= 0
        or rect.height <= 0
        or rect.x + rect.width > cols
        or rect.y + rect.height > rows
    ):
        raise ValueError(f"crop {rect} lies outside an image of {cols}x{rows}")
    return array[rect.y : rect.y + rect.height, rect.x : rect.x + rect.width].copy()


def _dominance(a: AlgoObject, b: AlgoObject) -> int:
    if a.score > b.score and a.rect.area() > b.rect.area():
        return -1
    if b.score > a.score and b.rect.area() > a.rect.area():
        return 1
    return 0


def rank_for_crop(objects: Sequence[AlgoObject]) -> list[AlgoObject]:
    """Order objects so that one both higher scoring and larger comes first."""
    return sorted(objects, key=cmp_to_key(_dominance))