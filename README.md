# sitewatch

Object tracking and staged detection pipelines that check safety rules on
industrial worksites. The pipelines report uncovered plates, people without
helmets, people without a hat while a door is closed, and people near a
hoisted structure while the warning light is on.

The package has two layers:

- a ByteTrack-style multi-object tracker, built from a constant-velocity
  Kalman filter, a Jonker–Volgenant linear-assignment solver and IoU
  matching helpers;
- detection pipelines that chain one or more detectors and pick out the
  objects that count as violations.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Tracking

`sitewatch.tracker.ByteTracker` takes the `Detection` objects of one frame
per call and returns the confirmed tracks as `sitewatch.track.Track`
objects. In a `Detection`, `rect` is `(left, top, width, height)`.

```python
from sitewatch.tracker import ByteTracker, Detection

tracker = ByteTracker(track_thresh=0.3, high_thresh=0.6, match_thresh=0.8, track_buffer=30)

frames = [
    [(10, 20, 40, 80, 0.9)],
    [(12, 21, 40, 80, 0.88)],
]
for boxes in frames:
    tracks = tracker.update([
        Detection(rect=(x, y, w, h), prob=score, target_id=i, label_name="person")
        for i, (x, y, w, h, score) in enumerate(boxes, start=1)
    ])
    for track in tracks:
        print(track.track_id, track.state.name, track.tlwh)
```

A new track is confirmed at once on the first frame. On later frames it is
confirmed when it matches again. A lost track is removed after
`track_buffer` frames without a match.

You can also use the parts on their own:

- `sitewatch.kalman.KalmanFilter`, with `initiate`, `predict`, `project`,
  `update` and `gating_distance`, over an 8-dimensional state of
  `(x, y, aspect, height)` and their velocities. `gating_distance` with
  `only_position=True` raises `ValueError`.
- `sitewatch.lapjv.solve_dense(cost)` solves a square assignment problem and
  returns `(x, y)`. `sitewatch.lapjv.lapjv(cost, extend_cost, cost_limit,
  return_cost)` solves rectangular problems and returns a `LapResult` of
  `(cost, rowsol, colsol)`, where `-1` marks a row or column left unassigned.
- `sitewatch.track`: `Track`, `TrackState`, `tlbr_to_tlwh`, `tlwh_to_xyah`,
  `next_track_id` (a per-thread counter starting at 1) and `multi_predict`.
- `sitewatch.matching`: `ious`, `iou_distance`, `linear_assignment`,
  `joint_tracks`, `sub_tracks`, `remove_duplicate_tracks` and `track_color`.

## Geometry helpers

`sitewatch.geometry` works on `sitewatch.models.Rect`:

- `scale_crop_rect(img_w, img_h, rect, scale_factor=1.0, scale_direction=CENTER,
  dilated_area_only=False)` grows a box around its centre (`CENTER`),
  vertically (`VERTICAL`), horizontally (`HORIZONTAL`) or towards one side
  (`UP`, `DOWN`, `LEFT`, `RIGHT`). It then aligns widths to 16 and heights
  to 2, makes both at least 16, and keeps the box inside the image.
- `intersection_area` and `area_cover_rate`. The cover rate is the shared
  area divided by the area of the smaller box, and NaN when that area is
  zero.
- `find_cover_objects` merges overlapping objects that together carry every
  included label into one object labelled `map_label`.

## Detection pipelines

The pipelines do not run models themselves. You give each pipeline a
*loader*: a callable that takes a `ModelConfig` and returns a detector. A
detector is any callable that matches the `sitewatch.models.Detector`
protocol. It takes an image (a numpy array) and returns a sequence of
`RawDetection(class_id, label, score, bbox)`, with `bbox` as
`(x, y, width, height)`.

```python
import numpy as np

from sitewatch.helmet import HelmetAlgo
from sitewatch.models import ModelConfig, RawDetection

def loader(config):
    def detect(image):
        if config.name == "person":
            return [RawDetection(0, "person", 0.9, (100, 50, 60, 120))]
        return [RawDetection(1, "head", 0.8, (10, 5, 20, 20))]
    return detect

frame = np.zeros((480, 640, 3), dtype=np.uint8)
with HelmetAlgo(loader, cover_threshold=0.5) as algo:
    algo.load_models([
        ModelConfig("person", "models/person.bin", "licenses/person", 0.2),
        ModelConfig("helmet", "models/helmet.bin", "licenses/helmet", 0.2,
                    crop_scale_factor=1.5, max_crop_number=8),
    ])
    violations = algo.sync_infer(0, frame)
```

A `ModelConfig` holds a name, a model path, a licence path, a score
`threshold`, the `labels` to keep, `crop_scale_factor`, `max_crop_number`
and `nms_threshold`. The paths are passed to your loader as they are.

The pipelines, all built on `sitewatch.pipeline.DetectionPipeline`:

- `sitewatch.cover_plate.CoverPlateAlgo` uses one model and returns the
  `uncover_plate` detections.
- `sitewatch.door_hat.DoorHatAlgo` uses a door model and a hat model. It
  runs the hat model only when the door model sees `close`, and then returns
  the `un_hat` detections.
- `sitewatch.helmet.HelmetAlgo` finds people, then runs the second model on
  a crop around each of them. It returns the detections that are not
  `helmet` and score above `cover_threshold`.
- `sitewatch.hoisting.HoistingOperationAlgo` uses three models: light,
  hoisted structure and person. Each stage keeps only its configured
  labels. It returns the people found in crops around each structure, in
  image coordinates. `load_models` raises `ValueError` unless it gets
  exactly three models. `async_infer(image_id, image, callback)` runs in the
  background and returns a `concurrent.futures.Future`. The callback
  receives `(image_id, image, objects)`. `close` waits for pending work.

`load_models` replaces any models loaded before. If the loader fails, it
raises `sitewatch.pipeline.ModelLoadError`. If you call `sync_infer` before
the needed models are loaded, it raises `RuntimeError`. The pipelines work
as context managers that call `close` on exit. `sitewatch.pipeline` also
provides `crop_image` and `rank_for_crop`.

## What this package does not do

- It has no inference engine and reads no model files. Detection comes only
  from the loader you supply.
- It has no command-line program, and it does not read video or write
  annotated images. You decode frames and draw boxes yourself.