"""Reports people working near a hoisted structure while the warning light is on."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterable, Optional

import numpy as np

from sitewatch.geometry import scale_crop_rect
from sitewatch.models import AlgoObject, ModelConfig, Rect, filter_infer_result
from sitewatch.pipeline import DetectionPipeline, ModelLoader, crop_image, rank_for_crop

MODEL_COUNT = 3

InferCallback = Callable[[int, object, list[AlgoObject]], None]


class HoistingOperationAlgo(DetectionPipeline):
    """Three stage pipeline: light, then hoisted structure, then people around each structure.

    The models are, in order, the light model, the structure model and the
    person model. The person model is run on a crop around every structure.
    """

    def __init__(self, loader: ModelLoader) -> None:
        super().__init__(loader)
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

    def load_models(self, models: Iterable[ModelConfig]) -> None:
        """Load exactly three models; raises ValueError for any other number."""
        models = list(models)
        if len(models) != MODEL_COUNT:
            raise ValueError("HoistingOperationAlgo requires exactly three models")
        super().load_models(models)

    def _stage(self, index: int, image) -> list[AlgoObject]:
        config = self._config(index)
        return filter_infer_result(self._detect(index, image), config.labels, config.threshold)

    def _infer(self, image) -> list[AlgoObject]:
        image = np.asarray(image)
        if not self._stage(0, image):
            return []

        structures = self._stage(1, image)
        if not structures:
            return []

        crop_config = self._config(2)
        structures = rank_for_crop(structures)[: crop_config.max_crop_number]
        rows, cols = image.shape[:2]

        matches: list[AlgoObject] = []
        for structure in structures:
            crop_rect = scale_crop_rect(cols, rows, structure.rect, crop_config.crop_scale_factor)
            for obj in self._stage(2, crop_image(image, crop_rect)):
                obj.rect = Rect(
                    obj.rect.x + crop_rect.x,
                    obj.rect.y + crop_rect.y,
                    obj.rect.width,
                    obj.rect.height,
                )
                matches.append(obj)
        return matches

    def sync_infer(self, image_id: int, image) -> list[AlgoObject]:
        """Run all stages on ``image`` and return the people found, in image coordinates."""
        return self._infer(image)

    def _pool(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1)
            return self._executor

    def async_infer(
        self, image_id: int, image, callback: Optional[InferCallback] = None
    ) -> Future:
        """Run the stages in the background.

        ``callback`` is called with ``(image_id, image, objects)`` when done; the
        returned future resolves to the same objects.
        """

        def task() -> list[AlgoObject]:
            objects = self._infer(image)
            if callback is not None:
                callback(image_id, image, objects)
            return objects

        return self._pool().submit(task)

    def close(self) -> None:
        """Wait for pending work, then release the loaded models."""
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)
        super().close()