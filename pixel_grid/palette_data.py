# pixel_grid/palette_data.py
from __future__ import annotations

"""
Palette built from user-placed sample points.

Exports:
  sample_palette_color(x, y, pixels) -> RGBTuple
  sorted_palette(colours, mode)      -> list[RGBTuple]  (presentation order only)
  luma(rgb)                          -> float
  Palette
    .points / .colours
    .add_point(x, y, pixels)         -> SamplePoint
    .move_point(point_id, x, y, pixels) -> SamplePoint
    .remove_point(point_id)          -> SamplePoint
    .remove_colour(rgb)              -> SamplePoint | None
    .resample_points(pixels)
    .point_near(x, y, radius)        -> SamplePoint | None
    .sorted(mode)                    -> list[RGBTuple]

The palette owns no colour list of its own: colours are always read off the
live sample points in insertion order, so the two can never disagree.
"""

import math
from functools import cmp_to_key
from typing import Iterator, List, Optional, Sequence, Union

from .colour_convert import rgb_to_hsv
from .constants import (
    HSV_SORT_VALUE_GAP,
    HUE_SORT_BUCKETS,
    LUMA_WEIGHTS,
    MARKER_HIT_RADIUS,
)
from .core_types import (
    RGBTuple,
    SamplePoint,
    SortMode,
    U8Image,
    clamp_value,
    coerce_to_rgb_tuple,
    round_half_up,
)
from .errors import InvalidParameter


def sample_palette_color(x: int, y: int, pixels: U8Image) -> RGBTuple:
    """Colour of pixel (x, y). Raises InvalidParameter outside the image."""
    height, width = pixels.shape[0], pixels.shape[1]
    if not (0 <= x < width and 0 <= y < height):
        raise InvalidParameter(f"sample point ({x}, {y}) outside {width}x{height} image")
    return coerce_to_rgb_tuple(pixels[y, x])


# Sorting


def luma(rgb: RGBTuple) -> float:
    wr, wg, wb = LUMA_WEIGHTS
    return wr * rgb[0] + wg * rgb[1] + wb * rgb[2]


def _packed(rgb: RGBTuple) -> int:
    return (rgb[0] << 16) | (rgb[1] << 8) | rgb[2]


def _compare_hsv(a: RGBTuple, b: RGBTuple) -> float:
    h_a, s_a, v_a = rgb_to_hsv(a)
    h_b, s_b, v_b = rgb_to_hsv(b)
    bucket_a = round_half_up(h_a * HUE_SORT_BUCKETS)
    bucket_b = round_half_up(h_b * HUE_SORT_BUCKETS)
    if bucket_a != bucket_b:
        return bucket_a - bucket_b
    if abs(v_a - v_b) > HSV_SORT_VALUE_GAP:
        return v_b - v_a
    return s_b - s_a


def sorted_palette(
    colours: Sequence[RGBTuple], mode: Union[SortMode, str]
) -> List[RGBTuple]:
    """
    Return a sorted copy of colours. The input sequence is left untouched.

      hsv  : hue in 24 buckets ascending, then value descending (when the gap
             exceeds 0.1), then saturation descending
      luma : 0.299R + 0.587G + 0.114B descending
      rgb  : packed 24-bit value descending
    """
    snapshot = [coerce_to_rgb_tuple(c) for c in colours]
    mode = SortMode(mode)
    if mode is SortMode.HSV:
        return sorted(snapshot, key=cmp_to_key(_compare_hsv))
    if mode is SortMode.LUMA:
        return sorted(snapshot, key=lambda c: -luma(c))
    return sorted(snapshot, key=lambda c: -_packed(c))


# Palette


class Palette:
    """Ordered sample points; the palette is their colours in insertion order."""

    def __init__(self) -> None:
        self._points: List[SamplePoint] = []
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[RGBTuple]:
        return iter(self.colours)

    @property
    def points(self) -> List[SamplePoint]:
        return list(self._points)

    @property
    def colours(self) -> List[RGBTuple]:
        return [p.rgb for p in self._points]

    def get_point(self, point_id: int) -> SamplePoint:
        for p in self._points:
            if p.id == point_id:
                return p
        raise InvalidParameter(f"unknown sample point id {point_id}")

    def add_point(self, x: int, y: int, pixels: U8Image) -> SamplePoint:
        """Place a new sample point and append its colour."""
        rgb = sample_palette_color(x, y, pixels)
        point = SamplePoint(id=self._next_id, x=x, y=y, rgb=rgb)
        self._next_id += 1
        self._points.append(point)
        return point

    def move_point(self, point_id: int, x: int, y: int, pixels: U8Image) -> SamplePoint:
        """Drag a point; coordinates are clamped into the image."""
        point = self.get_point(point_id)
        height, width = pixels.shape[0], pixels.shape[1]
        point.x = clamp_value(int(x), 0, width - 1)
        point.y = clamp_value(int(y), 0, height - 1)
        point.rgb = sample_palette_color(point.x, point.y, pixels)
        return point

    def remove_point(self, point_id: int) -> SamplePoint:
        """Delete a point by identity."""
        point = self.get_point(point_id)
        self._points.remove(point)
        return point

    def remove_colour(self, rgb: RGBTuple) -> Optional[SamplePoint]:
        """
        Delete the first point whose colour equals rgb.
        Matching is by value: with duplicate colours the earliest point goes.
        """
        target = coerce_to_rgb_tuple(rgb)
        for idx, p in enumerate(self._points):
            if p.rgb == target:
                return self._points.pop(idx)
        return None

    def resample_points(self, pixels: U8Image) -> None:
        """Re-read every point's colour, e.g. after the source was blurred."""
        for p in self._points:
            p.rgb = sample_palette_color(p.x, p.y, pixels)

    def point_near(
        self, x: float, y: float, radius: float = MARKER_HIT_RADIUS
    ) -> Optional[SamplePoint]:
        """Closest point within radius of (x, y); earlier points win ties."""
        best: Optional[SamplePoint] = None
        best_dist = math.inf
        for p in self._points:
            dist = math.hypot(p.x - x, p.y - y)
            if dist <= radius and dist < best_dist:
                best_dist = dist
                best = p
        return best

    def sorted(self, mode: Union[SortMode, str]) -> List[RGBTuple]:
        return sorted_palette(self.colours, mode)


__all__ = ["sample_palette_color", "sorted_palette", "luma", "Palette"]
