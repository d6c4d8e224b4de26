"""Reports people detected without a helmet."""

from __future__ import annotations

from sitewatch.geometry import scale_crop_rect
from sitewatch.models import AlgoObject, Rect, parse_infer_result
from sitewatch.pipeline import DetectionPipeline, ModelLoader, crop_image, rank_for_crop

HELMET_LABEL = "helmet"


class HelmetAlgo(DetectionPipeline):
    """Finds people, then looks for heads without helmets inside each person crop."""

    def __init__(self, loader: ModelLoader, cover_threshold: float = 0.5) -> None:
        super().__init__(loader)
        self.cover_threshold = cover_threshold

    def sync_infer(self, image_id: int, image) -> list[AlgoObject]:
        """Return second-stage detections that are not helmets, in image coordinates."""
        person_config = self._config(0)
        people = parse_infer_result(self._detect(0, image), person_config.threshold)
        if not people:
            return []

        crop_config = self._config(1)
        people = rank_for_crop(people)[: crop_config.max_crop_number]
        rows, cols = image.shape[:2]

        results: list[AlgoObject] = []
        for person in people:
            rect = scale_crop_rect(cols, rows, person.rect, crop_config.crop_scale_factor)
            crop = crop_image(image, rect)
            for obj in parse_infer_result(self._detect(1, crop), crop_config.threshold):
                if obj.score > self.cover_threshold and obj.label != HELMET_LABEL:
                    # Offsets follow the person box rather than the crop.
                    obj.rect = Rect(
                        obj.rect.x + person.rect.x,
                        obj.rect.y + person.rect.y,
                        obj.rect.width,
                        obj.rect.height,
                    )
                    results.append(obj)
        return results