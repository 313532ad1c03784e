"""Synthetic-image builders shared by the pixel_grid tests."""

from __future__ import annotations

import numpy as np


def solid(width: int, height: int, rgb) -> np.ndarray:
    img = np.zeros((height, width, 3), dtype=np.uint8)
    img[...] = rgb
    return img


def row_image(colours) -> np.ndarray:
    """1-pixel-tall image whose pixels are `colours` left to right."""
    return np.array([colours], dtype=np.uint8)
