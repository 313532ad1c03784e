# pixel_grid/sampling.py
from __future__ import annotations

"""
Block sampling: one representative colour per grid cell.

Exports:
  sample_center(pixels, cell, size)  -> RGBTuple | None
  sample_average(pixels, cell)       -> RGBTuple | None
  sample_dominant(pixels, cell)      -> RGBTuple | None
  compute_blocks(pixels, geometry, method) -> list[BlockColor]

Notes:
  - Output order is the grid enumeration order (row-major). Cells that yield
    no colour are dropped without a placeholder.
  - Dominant keys coarsen each channel by DOMINANT_BUCKET_DIVISOR (rounded
    half up) so near-duplicate colours share a histogram bucket.
"""

import math
from typing import Callable, Dict, List, Optional, Union

import numpy as np

from .constants import DOMINANT_BUCKET_DIVISOR
from .core_types import (
    BlockColor,
    GridCell,
    RGBTuple,
    SampleMethod,
    U8Image,
    coerce_to_rgb_tuple,
)
from .grid import GridGeometry


def _cell_pixels(pixels: U8Image, cell: GridCell) -> np.ndarray:
    """Row-major (N,3) view of the cell's clamped rectangle."""
    block = pixels[cell.start_y : cell.end_y, cell.start_x : cell.end_x]
    return block.reshape(-1, 3)


def sample_center(pixels: U8Image, cell: GridCell, size: float) -> Optional[RGBTuple]:
    """Pixel at the floored cell centre; None when it falls outside the image."""
    height, width = pixels.shape[0], pixels.shape[1]
    cx = math.floor(cell.origin_x + size / 2)
    cy = math.floor(cell.origin_y + size / 2)
    if cx < 0 or cy < 0 or cx >= width or cy >= height:
        return None
    return coerce_to_rgb_tuple(pixels[cy, cx])


def sample_average(pixels: U8Image, cell: GridCell) -> Optional[RGBTuple]:
    """Per-channel mean over the cell, rounded half up."""
    flat = _cell_pixels(pixels, cell)
    count = flat.shape[0]
    if count == 0:
        return None
    sums = flat.astype(np.int64).sum(axis=0)
    # (2*sum + count) // (2*count) == floor(sum/count + 0.5) in exact integers
    means = (2 * sums + count) // (2 * count)
    return coerce_to_rgb_tuple(means)


def dominant_keys(flat: np.ndarray) -> np.ndarray:
    """Coarsened histogram key per pixel: round(c / divisor) packed as 8-bit fields."""
    div = DOMINANT_BUCKET_DIVISOR
    q = (flat.astype(np.int64) + div // 2) // div
    return (q[:, 0] << 16) | (q[:, 1] << 8) | q[:, 2]


def sample_dominant(pixels: U8Image, cell: GridCell) -> Optional[RGBTuple]:
    """
    Most frequent coarsened colour in the cell.

    Scanning row-major with a running maximum that only moves on a strictly
    greater count, the winning bucket is the one whose count reaches the final
    maximum first. The returned colour is the first exact pixel seen in it.
    """
    flat = _cell_pixels(pixels, cell)
    if flat.shape[0] == 0:
        return None

    keys = dominant_keys(flat)
    _uniq, first_idx, inverse, counts = np.unique(
        keys, return_index=True, return_inverse=True, return_counts=True
    )
    inverse = inverse.reshape(-1)
    top = int(counts.max())

    # Position where each top bucket gets its `top`-th member.
    order = np.argsort(inverse, kind="stable")
    starts = np.concatenate(([0], np.cumsum(counts)[:-1]))
    top_buckets = np.nonzero(counts == top)[0]
    reach_pos = order[starts[top_buckets] + top - 1]
    winner = int(top_buckets[int(np.argmin(reach_pos))])

    return coerce_to_rgb_tuple(flat[int(first_idx[winner])])


_SAMPLERS: Dict[SampleMethod, Callable[[U8Image, GridCell, float], Optional[RGBTuple]]] = {
    SampleMethod.CENTER: sample_center,
    SampleMethod.AVERAGE: lambda px, cell, _size: sample_average(px, cell),
    SampleMethod.DOMINANT: lambda px, cell, _size: sample_dominant(px, cell),
}


def compute_blocks(
    pixels: U8Image,
    geometry: GridGeometry,
    method: Union[SampleMethod, str],
) -> List[BlockColor]:
    """
    Sample every grid cell of geometry from pixels.

    Args:
      pixels  : uint8 [H,W,3], the (possibly blurred) working image
      geometry: GridGeometry sized to the same image
      method  : SampleMethod or its string value

    Returns:
      list[BlockColor] in row-major cell order, dropped cells omitted.
    """
    sampler = _SAMPLERS[SampleMethod(method)]
    size = geometry.size
    out: List[BlockColor] = []
    for cell in geometry.cells():
        rgb = sampler(pixels, cell, size)
        if rgb is None:
            continue
        out.append(BlockColor(cell.bx, cell.by, rgb[0], rgb[1], rgb[2]))
    return out


__all__ = [
    "sample_center",
    "sample_average",
    "sample_dominant",
    "dominant_keys",
    "compute_blocks",
]
