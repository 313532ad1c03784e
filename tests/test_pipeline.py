"""Tests for the debounced grid -> sample -> quantize pipeline."""

from __future__ import annotations

import numpy as np
import pytest

import pixel_grid.pipeline as pipeline_mod
from tests.helpers import solid
from pixel_grid.core_types import DistanceMetric, SampleMethod
from pixel_grid.errors import InvalidParameter
from pixel_grid.pipeline import (
    ChangeKind,
    GridSettings,
    Pipeline,
    Recompute,
    should_recompute,
)
from pixel_grid.scheduler import Debouncer

RED = (255, 0, 0)
BLUE = (0, 0, 255)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def _pipe(img, clock, **settings) -> Pipeline:
    return Pipeline(
        img, GridSettings(**settings), scheduler=Debouncer(clock=clock), centre_point=False
    )


@pytest.mark.parametrize(
    "kind, expected",
    [
        (ChangeKind.GRID_SIZE, Recompute.RESAMPLE),
        (ChangeKind.OFFSET, Recompute.RESAMPLE),
        (ChangeKind.SAMPLE_METHOD, Recompute.RESAMPLE),
        (ChangeKind.SOURCE_PIXELS, Recompute.RESAMPLE),
        (ChangeKind.PALETTE_MEMBERSHIP, Recompute.RESAMPLE),
        (ChangeKind.PALETTE_CONTENT, Recompute.REQUANTIZE),
        (ChangeKind.PALETTE_PREVIEW, Recompute.REQUANTIZE),
        (ChangeKind.DISTANCE_METRIC, Recompute.REQUANTIZE),
    ],
)
def test_change_classification(kind, expected):
    assert should_recompute(kind) is expected


def test_every_change_kind_is_classified():
    for kind in ChangeKind:
        assert should_recompute(kind) in (Recompute.RESAMPLE, Recompute.REQUANTIZE)


def test_first_run_waits_for_debounce(split_red_blue, clock):
    pipe = _pipe(split_red_blue, clock, cells_across=4)
    assert pipe.poll() is None
    assert pipe.frame is None
    clock.now = 0.2
    frame = pipe.poll()
    assert frame is not None
    assert frame.resolution == (4, 4)


def test_empty_palette_renders_black(split_red_blue, clock):
    frame = _pipe(split_red_blue, clock, cells_across=4).flush()
    assert len(frame) == 16
    assert set(frame.cells.values()) == {(0, 0, 0)}


def test_rapid_changes_coalesce_and_keep_resample(split_red_blue, clock, monkeypatch):
    pipe = _pipe(split_red_blue, clock, cells_across=4)
    pipe.add_point(0, 0)
    pipe.flush()

    calls = []
    real = pipeline_mod.compute_blocks

    def counting(*args, **kwargs):
        calls.append(args[1].cells_across)
        return real(*args, **kwargs)

    monkeypatch.setattr(pipeline_mod, "compute_blocks", counting)

    clock.now = 1.0
    pipe.set_cells_across(2)
    clock.now = 1.1
    pipe.set_metric(DistanceMetric.RGB)
    clock.now = 1.2
    assert pipe.poll() is None
    clock.now = 1.3
    frame = pipe.poll()
    assert calls == [2]
    assert frame.resolution == (2, 2)
    assert pipe.settings.metric is DistanceMetric.RGB


def test_metric_change_only_requantizes(split_red_blue, clock, monkeypatch):
    pipe = _pipe(split_red_blue, clock, cells_across=4)
    pipe.add_point(0, 0)
    pipe.flush()
    monkeypatch.setattr(
        pipeline_mod, "compute_blocks", lambda *a, **k: pytest.fail("resampled")
    )
    pipe.set_metric("hsv")
    frame = pipe.flush()
    assert set(frame.cells.values()) == {RED}


def test_drag_requantizes_synchronously(split_red_blue, clock):
    pipe = _pipe(split_red_blue, clock, cells_across=4)
    point = pipe.add_point(0, 0)
    frame = pipe.flush()
    assert set(frame.cells.values()) == {RED}

    frame = pipe.drag_point(point.id, 0, 15)
    assert not pipe.scheduler.pending
    assert set(frame.cells.values()) == {BLUE}
    assert pipe.frame is frame


def test_preview_does_not_touch_palette(split_red_blue, clock):
    pipe = _pipe(split_red_blue, clock, cells_across=4)
    pipe.add_point(0, 0)
    before = pipe.flush()
    preview = pipe.preview(BLUE)
    assert preview.cells[(0, 3)] == BLUE
    assert preview.cells[(0, 0)] == RED
    assert pipe.palette.colours == [RED]
    assert pipe.frame is before
    assert set(before.cells.values()) == {RED}


def test_two_colour_palette_splits_image(split_red_blue, clock):
    pipe = _pipe(split_red_blue, clock, cells_across=4, method=SampleMethod.AVERAGE)
    pipe.add_point(3, 3)
    pipe.add_point(3, 12)
    frame = pipe.flush()
    for (bx, by), rgb in frame.cells.items():
        assert rgb == (RED if by < 2 else BLUE)


def test_palette_membership_marks_resample(split_red_blue, clock):
    pipe = _pipe(split_red_blue, clock, cells_across=4)
    pipe.add_point(0, 0)
    pipe.flush()
    assert not pipe.state.needs_resample
    assert pipe.remove_colour(RED) is not None
    assert pipe.state.needs_resample
    assert pipe.scheduler.pending
    frame = pipe.flush()
    assert set(frame.cells.values()) == {(0, 0, 0)}


def test_remove_point_by_id(split_red_blue, clock):
    pipe = _pipe(split_red_blue, clock, cells_across=4)
    a = pipe.add_point(0, 0)
    pipe.add_point(0, 0)
    pipe.remove_point(a.id)
    assert [p.id for p in pipe.palette.points] == [a.id + 1]


def test_blur_resamples_points_from_blurred_image(clock):
    img = solid(20, 20, (0, 0, 0))
    img[:, 10:] = (255, 255, 255)
    pipe = _pipe(img, clock, cells_across=2)
    point = pipe.add_point(10, 10)
    assert point.rgb == (255, 255, 255)
    pipe.set_blur(3)
    assert point.rgb != (255, 255, 255)
    assert point.rgb[0] < 255
    assert np.array_equal(pipe.state.source, img)
    assert pipe.state.needs_resample


def test_set_image_restarts_from_centre_point(split_red_blue, clock):
    pipe = _pipe(split_red_blue, clock, cells_across=4)
    pipe.add_point(0, 0)
    pipe.add_point(0, 15)
    grey = solid(8, 6, (50, 50, 50))
    grey[3, 4] = (90, 10, 10)
    pipe.set_image(grey)
    assert [(p.x, p.y, p.rgb) for p in pipe.palette.points] == [(4, 3, (90, 10, 10))]
    assert pipe.state.needs_resample
    frame = pipe.flush()
    assert frame.resolution == (4, 3)
    assert set(frame.cells.values()) == {(90, 10, 10)}


def test_new_pipeline_starts_with_centre_point(split_red_blue, clock):
    pipe = Pipeline(split_red_blue, GridSettings(cells_across=4), scheduler=Debouncer(clock=clock))
    assert [(p.x, p.y, p.rgb) for p in pipe.palette.points] == [(8, 8, BLUE)]
    assert set(pipe.flush().cells.values()) == {BLUE}


def test_flush_runs_pending_pass_once(split_red_blue, clock, monkeypatch):
    pipe = _pipe(split_red_blue, clock, cells_across=4)
    pipe.add_point(0, 0)
    first = pipe.flush()
    assert not pipe.scheduler.pending
    assert pipe.frame is first

    monkeypatch.setattr(pipe, "run", lambda *a, **k: pytest.fail("ran again"))
    assert pipe.flush() is first


def test_flush_returns_fresh_frame_for_pending_change(split_red_blue, clock):
    pipe = _pipe(split_red_blue, clock, cells_across=4)
    pipe.add_point(0, 0)
    first = pipe.flush()
    pipe.set_cells_across(2)
    second = pipe.flush()
    assert second is not first
    assert second is pipe.frame
    assert second.resolution == (2, 2)
    assert not pipe.scheduler.pending


def test_add_centre_point(split_red_blue, clock):
    pipe = _pipe(split_red_blue, clock)
    point = pipe.add_centre_point()
    assert (point.x, point.y) == (8, 8)
    assert point.rgb == BLUE


@pytest.mark.parametrize(
    "kwargs",
    [
        {"cells_across": 0},
        {"cells_across": -3},
        {"cells_across": 2.5},
        {"offset_x": 1.5},
        {"method": "bogus"},
        {"metric": "lab"},
        {"blur": -1},
        {"blur": float("nan")},
    ],
)
def test_invalid_settings_rejected(kwargs):
    with pytest.raises(InvalidParameter):
        GridSettings(**kwargs).validated()


def test_invalid_grid_change_leaves_state_untouched(split_red_blue, clock):
    pipe = _pipe(split_red_blue, clock, cells_across=4)
    with pytest.raises(InvalidParameter):
        pipe.set_cells_across(0)
    assert pipe.settings.cells_across == 4


def test_bad_pixel_buffers_rejected(clock):
    with pytest.raises(InvalidParameter):
        Pipeline(np.zeros((0, 4, 3), dtype=np.uint8))
    with pytest.raises(InvalidParameter):
        Pipeline(np.zeros((4, 4, 4), dtype=np.uint8))
    with pytest.raises(InvalidParameter):
        Pipeline(np.zeros((4, 4, 3), dtype=np.float32))


def test_settings_normalise_strings():
    settings = GridSettings(method="dominant", metric="hsv").validated()
    assert settings.method is SampleMethod.DOMINANT
    assert settings.metric is DistanceMetric.HSV
