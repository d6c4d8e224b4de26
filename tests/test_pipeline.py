import numpy as np
import pytest

from sitewatch.models import AlgoObject, ModelConfig, RawDetection, Rect
from sitewatch.pipeline import DetectionPipeline, ModelLoadError, crop_image, rank_for_crop


def _loader(detectors):
    return lambda config: detectors[config.name]


def _obj(score, w, h):
    return AlgoObject(1, 0, "x", score, Rect(0, 0, w, h))


def test_load_models_keeps_configs_and_detectors():
    det = lambda image: [RawDetection(0, "a", 0.9, (0, 0, 1, 1))]
    pipeline = DetectionPipeline(_loader({"a": det, "b": det}))
    models = [ModelConfig("a", "a.gdd", "lic"), ModelConfig("b", "b.gdd", "lic")]
    pipeline.load_models(models)
    assert pipeline.model_configs == models
    assert pipeline.loaded == 2


def test_load_models_replaces_previous():
    det = lambda image: []
    pipeline = DetectionPipeline(_loader({"a": det, "b": det}))
    pipeline.load_models([ModelConfig("a", "a.gdd", "lic"), ModelConfig("b", "b.gdd", "lic")])
    pipeline.load_models([ModelConfig("b", "b.gdd", "lic")])
    assert [m.name for m in pipeline.model_configs] == ["b"]
    assert pipeline.loaded == 1


def test_load_failure_raises_model_load_error():
    pipeline = DetectionPipeline(_loader({}))
    model = ModelConfig("missing", "missing.gdd", "lic")
    with pytest.raises(ModelLoadError) as info:
        pipeline.load_models([model])
    assert info.value.model == model
    assert "missing.gdd" in str(info.value)


def test_close_releases_models_via_context_manager():
    pipeline = DetectionPipeline(_loader({"a": lambda image: []}))
    with pipeline:
        pipeline.load_models([ModelConfig("a", "a.gdd", "lic")])
        assert pipeline.loaded == 1
    assert pipeline.loaded == 0


def test_crop_image_copies_region():
    image = np.arange(20 * 30).reshape(20, 30)
    crop = crop_image(image, Rect(4, 2, 10, 6))
    assert crop.shape == (6, 10)
    assert crop[0, 0] == image[2, 4]
    crop[0, 0] = -1
    assert image[2, 4] != -1


def test_crop_image_outside_raises():
    image = np.zeros((20, 30))
    with pytest.raises(ValueError):
        crop_image(image, Rect(25, 0, 10, 5))


def test_rank_for_crop_puts_dominated_after_dominating():
    weak = _obj(0.5, 5, 10)
    strong = _obj(0.9, 10, 10)
    big = _obj(0.8, 20, 10)
    ranked = rank_for_crop([weak, strong, big])
    assert ranked[-1] is weak
    assert sorted(map(id, ranked)) == sorted(map(id, [weak, strong, big]))
    for i, earlier in enumerate(ranked):
        for later in ranked[i + 1 :]:
            assert not (later.score > earlier.score and later.rect.area() > earlier.rect.area())