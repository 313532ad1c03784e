"""Shared fixtures for the pixel_grid tests."""

from __future__ import annotations

import numpy as np
import pytest

from tests.helpers import solid


@pytest.fixture
def split_red_blue() -> np.ndarray:
    """16x16: top half red, bottom half blue."""
    img = solid(16, 16, (255, 0, 0))
    img[8:] = (0, 0, 255)
    return img
