"""Tests for center / average / dominant block sampling."""

from __future__ import annotations

import numpy as np
import pytest

from tests.helpers import row_image, solid
from pixel_grid.core_types import BlockColor, SampleMethod
from pixel_grid.grid import GridGeometry
from pixel_grid.sampling import compute_blocks, dominant_keys, sample_dominant


def _single_cell(img: np.ndarray):
    geom = GridGeometry(img.shape[1], img.shape[0], 1)
    cells = list(geom.cells())
    assert len(cells) == 1
    return cells[0]


def test_center_on_uniform_red_four_cells():
    img = solid(4, 4, (255, 0, 0))
    blocks = compute_blocks(img, GridGeometry(4, 4, 2), SampleMethod.CENTER)
    assert blocks == [
        BlockColor(0, 0, 255, 0, 0),
        BlockColor(1, 0, 255, 0, 0),
        BlockColor(0, 1, 255, 0, 0),
        BlockColor(1, 1, 255, 0, 0),
    ]


def test_center_picks_floored_centre_pixel():
    img = np.zeros((4, 4, 3), dtype=np.uint8)
    img[1, 1] = (9, 8, 7)
    img[1, 3] = (1, 2, 3)
    blocks = compute_blocks(img, GridGeometry(4, 4, 2), "center")
    assert blocks[0].rgb == (9, 8, 7)
    assert blocks[1].rgb == (1, 2, 3)


def test_center_drops_cells_whose_centre_is_offscreen():
    img = solid(4, 4, (0, 255, 0))
    geom = GridGeometry(4, 4, 2, offset_x=-1)
    center = {(b.bx, b.by) for b in compute_blocks(img, geom, "center")}
    average = {(b.bx, b.by) for b in compute_blocks(img, geom, "average")}
    assert (2, 0) in average
    assert (2, 0) not in center
    assert center < average


def test_average_rounds_half_up():
    img = row_image([(0, 0, 0), (255, 255, 255)])
    blocks = compute_blocks(img, GridGeometry(2, 1, 1), SampleMethod.AVERAGE)
    assert [b.rgb for b in blocks] == [(128, 128, 128)]


def test_average_mean_per_channel():
    img = row_image([(10, 0, 3), (20, 100, 4), (30, 50, 4)])
    blocks = compute_blocks(img, GridGeometry(3, 1, 1), "average")
    assert blocks[0].rgb == (20, 50, 4)


def test_dominant_uniform_cell_returns_exact_colour():
    img = solid(6, 6, (17, 99, 203))
    blocks = compute_blocks(img, GridGeometry(6, 6, 2), SampleMethod.DOMINANT)
    assert len(blocks) == 4
    assert all(b.rgb == (17, 99, 203) for b in blocks)


def test_dominant_merges_near_duplicates_and_keeps_first_seen():
    near_a = (100, 100, 100)
    near_b = (101, 101, 101)
    other = (0, 0, 0)
    img = row_image([near_a, other, near_b])
    assert sample_dominant(img, _single_cell(img)) == near_a


def test_dominant_tie_goes_to_first_bucket_reaching_max():
    a = (200, 0, 0)
    b = (0, 0, 200)
    img = row_image([a, b, b, a])
    assert sample_dominant(img, _single_cell(img)) == b
    img = row_image([a, b, a, b])
    assert sample_dominant(img, _single_cell(img)) == a


def test_dominant_majority_wins():
    a = (10, 10, 10)
    b = (240, 240, 240)
    img = row_image([a, b, b, b, a])
    assert sample_dominant(img, _single_cell(img)) == b


def test_dominant_keys_round_half_up():
    flat = np.array([[1, 2, 6], [255, 255, 255]], dtype=np.uint8)
    keys = dominant_keys(flat)
    assert keys[0] == (0 << 16) | (1 << 8) | 2
    assert keys[1] == (64 << 16) | (64 << 8) | 64


@pytest.mark.parametrize("method", list(SampleMethod))
def test_blocks_follow_enumeration_order(method):
    rng = np.random.RandomState(1)
    img = rng.randint(0, 256, (20, 30, 3)).astype(np.uint8)
    geom = GridGeometry(30, 20, 7, 2, -3)
    blocks = compute_blocks(img, geom, method)
    order = [(c.by, c.bx) for c in geom.cells()]
    got = [(b.by, b.bx) for b in blocks]
    assert got == [k for k in order if k in set(got)]
