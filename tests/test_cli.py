"""Smoke tests for the pixelart command-line script."""

from __future__ import annotations

import numpy as np
from PIL import Image

import pixelart
from tests.helpers import solid


def _write(path, img):
    Image.fromarray(img).save(path)
    return path


def test_cli_writes_logical_resolution(tmp_path, split_red_blue, capsys):
    src = _write(tmp_path / "sprite.png", split_red_blue)
    status = pixelart.main(
        [str(src), "--cells", "4", "--sample", "0,0", "--sample", "15,15", "--preview"]
    )
    assert status == 0
    out = tmp_path / "sprite_pixel_4x4.png"
    assert out.exists()
    arr = np.array(Image.open(out).convert("RGB"))
    assert arr.shape == (4, 4, 3)
    assert (arr[:2] == (255, 0, 0)).all()
    assert (arr[2:] == (0, 0, 255)).all()
    assert (tmp_path / "sprite_pixel_4x4_preview.png").exists()
    printed = capsys.readouterr().out
    assert "resolution=4x4" in printed
    assert "#ff0000" in printed


def test_cli_defaults_to_centre_sample(tmp_path):
    src = _write(tmp_path / "flat.png", solid(8, 8, (12, 200, 40)))
    assert pixelart.main([str(src), "--cells", "2", "--outdir", str(tmp_path)]) == 0
    arr = np.array(Image.open(tmp_path / "flat_pixel_2x2.png").convert("RGB"))
    assert (arr == (12, 200, 40)).all()


def test_cli_folder_skips_own_outputs(tmp_path):
    _write(tmp_path / "a.png", solid(4, 4, (1, 1, 1)))
    _write(tmp_path / "b_pixel_2x2.png", solid(2, 2, (1, 1, 1)))
    assert pixelart.main([str(tmp_path), "--cells", "2"]) == 0
    assert (tmp_path / "a_pixel_2x2.png").exists()
    assert not (tmp_path / "b_pixel_2x2_pixel_2x2.png").exists()


def test_cli_rejects_bad_grid(tmp_path, capsys):
    src = _write(tmp_path / "x.png", solid(4, 4, (0, 0, 0)))
    assert pixelart.main([str(src), "--cells", "0"]) == 2
    assert "cells_across" in capsys.readouterr().err


def test_cli_missing_input(tmp_path):
    assert pixelart.main([str(tmp_path / "nope.png")]) == 2


def test_parse_sample_point():
    assert pixelart.parse_sample_point("3, 4") == (3, 4)
