import numpy as np

from sitewatch.door_hat import DoorHatAlgo
from sitewatch.models import ModelConfig, RawDetection


class _Recorder:
    def __init__(self, detections):
        self.detections = detections
        self.calls = 0

    def __call__(self, image):
        self.calls += 1
        return self.detections


def _algo(door_dets, hat_dets):
    door, hat = _Recorder(door_dets), _Recorder(hat_dets)
    algo = DoorHatAlgo(lambda config: {"door": door, "hat": hat}[config.name])
    algo.load_models(
        [
            ModelConfig("door", "door.gdd", "lic", 0.3, {"close"}),
            ModelConfig("hat", "hat.gdd", "lic", 0.3, {"un_hat"}),
        ]
    )
    return algo, hat


HATS = [
    RawDetection(0, "hat", 0.9, (0, 0, 5, 5)),
    RawDetection(1, "un_hat", 0.7, (3, 4, 5, 6)),
    RawDetection(1, "un_hat", 0.1, (3, 4, 5, 6)),
]


def test_open_door_skips_hat_model():
    algo, hat = _algo([RawDetection(0, "open", 0.9, (0, 0, 5, 5))], HATS)
    assert algo.sync_infer(0, np.zeros((20, 20))) == []
    assert hat.calls == 0


def test_closed_door_reports_missing_hats():
    algo, hat = _algo([RawDetection(1, "close", 0.9, (0, 0, 5, 5))], HATS)
    objects = algo.sync_infer(0, np.zeros((20, 20)))
    assert hat.calls == 1
    assert [(o.label, o.score) for o in objects] == [("un_hat", 0.7)]


def test_low_scoring_close_does_not_trigger():
    algo, hat = _algo([RawDetection(1, "close", 0.2, (0, 0, 5, 5))], HATS)
    assert algo.sync_infer(0, np.zeros((20, 20))) == []
    assert hat.calls == 0