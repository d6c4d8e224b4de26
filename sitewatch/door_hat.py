"""Reports people without a hat while the door is closed."""

from __future__ import annotations

from sitewatch.models import AlgoObject, parse_infer_result
from sitewatch.pipeline import DetectionPipeline

DOOR_CLOSED_LABEL = "close"
NO_HAT_LABEL = "un_hat"


class DoorHatAlgo(DetectionPipeline):
    """Two model pipeline: a door model gates a hat model on the same image."""

    def sync_infer(self, image_id: int, image) -> list[AlgoObject]:
        """Return ``un_hat`` detections when the door is seen closed."""
        door_config = self._config(0)
        doors = parse_infer_result(self._detect(0, image), door_config.threshold)
        if not any(obj.label == DOOR_CLOSED_LABEL for obj in doors):
            return []

        hat_config = self._config(1)
        hats = parse_infer_result(self._detect(1, image), hat_config.threshold)
        return [obj for obj in hats if obj.label == NO_HAT_LABEL]