"""Reports plates left uncovered."""

from __future__ import annotations

from sitewatch.models import AlgoObject, parse_infer_result
from sitewatch.pipeline import DetectionPipeline

UNCOVER_LABEL = "uncover_plate"


class CoverPlateAlgo(DetectionPipeline):
    """Single model pipeline reporting every ``uncover_plate`` detection."""

    def sync_infer(self, image_id: int, image) -> list[AlgoObject]:
        """Run the model on ``image`` and return the uncovered plates."""
        config = self._config(0)
        objects = parse_infer_result(self._detect(0, image), config.threshold)
        return [obj for obj in objects if obj.label == UNCOVER_LABEL]