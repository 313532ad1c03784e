# pixel_grid/colour_convert.py
from __future__ import annotations

"""
RGB <-> HSV conversion and the three palette distance metrics.

Exports:
  rgb_to_hsv(rgb)                 -> (h, s, v) floats, hue in [0, 1)
  rgb_to_hsv_batch(rgb)           -> float64 array[...,3]
  rgb_distance(a, b)              squared Euclidean
  perceptual_distance(a, b)       luma-weighted squared channel differences
  hsv_distance(a, b)              hue-wrapping cylinder distance
  colour_distance(a, b, metric)   dispatch by DistanceMetric

All distance functions accept RGB tuples or uint8/int arrays shaped (...,3)
and broadcast, so a single colour can be scored against a whole palette.
"""

from typing import Callable, Dict, Tuple, Union

import numpy as np

from .constants import (
    HSV_HUE_SCALE,
    HSV_MIN_HUE_WEIGHT,
    HSV_SAT_SCALE,
    HSV_VAL_SCALE,
    PERCEPTUAL_WEIGHTS,
)
from .core_types import DistanceMetric, HSVArray, RGBTuple

ColourLike = Union[RGBTuple, np.ndarray]
DistanceFn = Callable[[ColourLike, ColourLike], Union[float, np.ndarray]]


# RGB -> HSV


def rgb_to_hsv(rgb: RGBTuple) -> Tuple[float, float, float]:
    """
    Scalar RGB (0..255) -> HSV, all components in 0..1.
    Achromatic colours get hue 0 exactly.
    """
    r, g, b = rgb[0] / 255.0, rgb[1] / 255.0, rgb[2] / 255.0
    mx = max(r, g, b)
    mn = min(r, g, b)
    d = mx - mn
    s = 0.0 if mx == 0 else d / mx
    if mx == mn:
        h = 0.0
    elif mx == r:
        h = (g - b) / d + (6.0 if g < b else 0.0)
        h /= 6.0
    elif mx == g:
        h = ((b - r) / d + 2.0) / 6.0
    else:
        h = ((r - g) / d + 4.0) / 6.0
    return h, s, mx


def rgb_to_hsv_batch(rgb: ColourLike) -> HSVArray:
    """
    Vectorised RGB (0..255) -> HSV. Accepts any shape (...,3). Returns float64.
    Branch order matches rgb_to_hsv: red wins ties for max, then green.
    """
    arr = np.asarray(rgb, dtype=np.float64) / 255.0
    r, g, b = arr[..., 0], arr[..., 1], arr[..., 2]
    mx = np.maximum(np.maximum(r, g), b)
    mn = np.minimum(np.minimum(r, g), b)
    d = mx - mn
    d_safe = np.where(d == 0.0, 1.0, d)
    mx_safe = np.where(mx == 0.0, 1.0, mx)

    s = np.where(mx == 0.0, 0.0, d / mx_safe)

    h_r = (g - b) / d_safe + np.where(g < b, 6.0, 0.0)
    h_g = (b - r) / d_safe + 2.0
    h_b = (r - g) / d_safe + 4.0
    h = np.where(mx == r, h_r, np.where(mx == g, h_g, h_b)) / 6.0
    h = np.where(d == 0.0, 0.0, h)

    out = np.empty(arr.shape, dtype=np.float64)
    out[..., 0] = h
    out[..., 1] = s
    out[..., 2] = mx
    return out  # type: ignore[return-value]


# Distances


def _as_int(c: ColourLike) -> np.ndarray:
    return np.asarray(c, dtype=np.int64)


def _scalar_or_array(value: np.ndarray) -> Union[float, np.ndarray]:
    return float(value) if np.ndim(value) == 0 else value


def rgb_distance(a: ColourLike, b: ColourLike) -> Union[float, np.ndarray]:
    """Squared Euclidean distance over raw channels (no sqrt)."""
    diff = _as_int(a) - _as_int(b)
    return _scalar_or_array(np.sum(diff * diff, axis=-1).astype(np.float64))


def perceptual_distance(a: ColourLike, b: ColourLike) -> Union[float, np.ndarray]:
    """Squared channel differences weighted (0.3, 0.59, 0.11)."""
    diff = (_as_int(a) - _as_int(b)).astype(np.float64)
    wr, wg, wb = PERCEPTUAL_WEIGHTS
    dist = (
        diff[..., 0] * diff[..., 0] * wr
        + diff[..., 1] * diff[..., 1] * wg
        + diff[..., 2] * diff[..., 2] * wb
    )
    return _scalar_or_array(dist)


def hsv_distance(a: ColourLike, b: ColourLike) -> Union[float, np.ndarray]:
    """
    HSV cylinder distance.

    dh is the shortest arc on a period-1 hue circle. The hue term is scaled by
    sqrt(s1*s2), floored at 0.1, so greys barely care about hue.
    """
    hsv_a = rgb_to_hsv_batch(a)
    hsv_b = rgb_to_hsv_batch(b)

    dh = np.abs(hsv_a[..., 0] - hsv_b[..., 0])
    dh = np.where(dh > 0.5, 1.0 - dh, dh)
    ds = hsv_a[..., 1] - hsv_b[..., 1]
    dv = hsv_a[..., 2] - hsv_b[..., 2]

    weight = np.sqrt(hsv_a[..., 1] * hsv_b[..., 1])
    dist = (
        dh * dh * np.maximum(weight, HSV_MIN_HUE_WEIGHT) * HSV_HUE_SCALE
        + ds * ds * HSV_SAT_SCALE
        + dv * dv * HSV_VAL_SCALE
    )
    return _scalar_or_array(dist)


DISTANCE_FUNCTIONS: Dict[DistanceMetric, DistanceFn] = {
    DistanceMetric.RGB: rgb_distance,
    DistanceMetric.PERCEPTUAL: perceptual_distance,
    DistanceMetric.HSV: hsv_distance,
}


def distance_function(metric: Union[DistanceMetric, str]) -> DistanceFn:
    """Look up the distance callable for a metric name or enum."""
    return DISTANCE_FUNCTIONS[DistanceMetric(metric)]


def colour_distance(
    a: ColourLike, b: ColourLike, metric: Union[DistanceMetric, str]
) -> Union[float, np.ndarray]:
    """Distance between a and b under metric. Broadcasts over (...,3)."""
    return distance_function(metric)(a, b)


__all__ = [
    "rgb_to_hsv",
    "rgb_to_hsv_batch",
    "rgb_distance",
    "perceptual_distance",
    "hsv_distance",
    "DISTANCE_FUNCTIONS",
    "distance_function",
    "colour_distance",
]
