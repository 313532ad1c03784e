# pixel_grid/core_types.py
from __future__ import annotations

"""
Core type aliases, enums, small value objects, and lightweight helpers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from .errors import InvalidParameter

# Basic aliases

RGBTuple = Tuple[int, int, int]
HexStr = str
CellKey = Tuple[int, int]  # (bx, by)

U8Image = NDArray[np.uint8]  # (H, W, 3)
HSVArray = NDArray[np.float64]  # (..., 3) hue, saturation, value in 0..1

CellColours = Dict[CellKey, RGBTuple]


# Enumerations


class DistanceMetric(str, Enum):
    """Colour distance used by the quantizer."""

    RGB = "rgb"
    PERCEPTUAL = "perceptual"
    HSV = "hsv"


class SampleMethod(str, Enum):
    """How one representative colour is taken from a grid cell."""

    CENTER = "center"
    AVERAGE = "average"
    DOMINANT = "dominant"


class SortMode(str, Enum):
    """Presentation order of the palette. Cycles hsv -> luma -> rgb -> hsv."""

    HSV = "hsv"
    LUMA = "luma"
    RGB = "rgb"

    def next(self) -> "SortMode":
        members = list(SortMode)
        return members[(members.index(self) + 1) % len(members)]


# Value objects


@dataclass(frozen=True)
class GridCell:
    """One grid cell with its clamped pixel rectangle [start, end)."""

    bx: int
    by: int
    origin_x: float  # unclamped left edge in pixel space
    origin_y: float
    start_x: int
    end_x: int
    start_y: int
    end_y: int


@dataclass(frozen=True)
class BlockColor:
    """Sampled colour of one grid cell."""

    bx: int
    by: int
    r: int
    g: int
    b: int

    @property
    def rgb(self) -> RGBTuple:
        return (self.r, self.g, self.b)


@dataclass
class SamplePoint:
    """User-placed pixel location seeding one palette entry."""

    id: int
    x: int
    y: int
    rgb: RGBTuple


@dataclass(frozen=True)
class BoundingBox:
    """Inclusive block-coordinate bounds of a quantized frame."""

    min_bx: int
    max_bx: int
    min_by: int
    max_by: int

    @property
    def width(self) -> int:
        return self.max_bx - self.min_bx + 1

    @property
    def height(self) -> int:
        return self.max_by - self.min_by + 1


@dataclass(frozen=True)
class QuantizedFrame:
    """Sparse map (bx, by) -> palette colour, plus its bounding box."""

    cells: CellColours
    bbox: Optional[BoundingBox]

    @property
    def resolution(self) -> Tuple[int, int]:
        """Logical output size (width, height); (0, 0) for an empty frame."""
        if self.bbox is None:
            return (0, 0)
        return (self.bbox.width, self.bbox.height)

    def __len__(self) -> int:
        return len(self.cells)


# Small helpers


def clamp_value(value: int, lo: int, hi: int) -> int:
    """Clamp value to [lo, hi]."""
    return lo if value < lo else hi if value > hi else value


def round_half_up(value: float) -> int:
    """Round to nearest integer, .5 going up (not banker's rounding)."""
    return int(np.floor(value + 0.5))


def rgb_to_hex(rgb: RGBTuple) -> HexStr:
    """RGB tuple to lowercase hex string '#rrggbb'."""
    return f"#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


def coerce_to_rgb_tuple(value: Union[Sequence[int], NDArray[np.generic]]) -> RGBTuple:
    """
    Coerce a 3-length sequence or array to an (int, int, int) RGB tuple.
    Helpful when extracting values from NumPy rows.
    """
    if isinstance(value, np.ndarray):
        if value.size < 3:
            raise ValueError("array too small for RGB")
        flat = value.reshape(-1)
        return (int(flat[0]), int(flat[1]), int(flat[2]))
    if len(value) < 3:  # type: ignore[arg-type]
        raise ValueError("sequence too small for RGB")
    v = value  # type: ignore[assignment]
    return (int(v[0]), int(v[1]), int(v[2]))


def assert_u8_image_rgb(image: np.ndarray) -> U8Image:
    """Validate a non-empty uint8 (H,W,3) image and return it typed as U8Image."""
    if not isinstance(image, np.ndarray):
        raise InvalidParameter("expected a numpy pixel buffer")
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] != 3:
        raise InvalidParameter(f"expected uint8 (H,W,3) image, got {image.dtype} {image.shape}")
    if image.shape[0] <= 0 or image.shape[1] <= 0:
        raise InvalidParameter("image dimensions must be positive")
    return image  # type: ignore[return-value]


__all__ = [
    # aliases / types
    "RGBTuple",
    "HexStr",
    "CellKey",
    "U8Image",
    "HSVArray",
    "CellColours",
    # enums
    "DistanceMetric",
    "SampleMethod",
    "SortMode",
    # value objects
    "GridCell",
    "BlockColor",
    "SamplePoint",
    "BoundingBox",
    "QuantizedFrame",
    # helpers
    "clamp_value",
    "round_half_up",
    "rgb_to_hex",
    "coerce_to_rgb_tuple",
    "assert_u8_image_rgb",
]
