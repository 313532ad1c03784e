# pixel_grid/quantize.py
from __future__ import annotations

"""
Nearest-palette quantization of sampled blocks.

Exports:
  nearest(colour, palette, metric)          -> RGBTuple
  nearest_index(colour, palette, metric)    -> int (-1 for an empty palette)
  nearest_palette_indices(colours, pal, metric) -> (N,) palette indices
  quantize(block_colors, palette, metric, preview=None) -> QuantizedFrame
  bounding_box(block_colors)                -> BoundingBox | None

Notes:
  The scan keeps the first strictly-smallest distance, so equal candidates
  resolve to the earliest palette entry (np.argmin has the same rule).
  An empty palette maps everything to black.
  Blocks are reduced to their unique colours before scoring, and the unique
  colours are scored in fixed-size chunks, so the distance temporary stays
  bounded by chunk_rows x palette whatever the grid size.
"""

from typing import Iterable, List, Optional, Sequence, Union

import numpy as np

from .colour_convert import distance_function
from .constants import QUANTIZE_CHUNK_ROWS
from .core_types import (
    BlockColor,
    BoundingBox,
    CellColours,
    DistanceMetric,
    QuantizedFrame,
    RGBTuple,
    coerce_to_rgb_tuple,
)

BLACK: RGBTuple = (0, 0, 0)


def _palette_array(palette: Sequence[RGBTuple]) -> np.ndarray:
    return np.asarray(palette, dtype=np.int64).reshape(-1, 3)


def nearest_index(
    colour: RGBTuple,
    palette: Sequence[RGBTuple],
    metric: Union[DistanceMetric, str],
) -> int:
    """Index of the closest palette entry; -1 when the palette is empty."""
    if len(palette) == 0:
        return -1
    dist = np.atleast_1d(distance_function(metric)(colour, _palette_array(palette)))
    return int(np.argmin(dist))


def nearest(
    colour: RGBTuple,
    palette: Sequence[RGBTuple],
    metric: Union[DistanceMetric, str],
) -> RGBTuple:
    """Closest palette colour under metric; (0, 0, 0) for an empty palette."""
    idx = nearest_index(colour, palette, metric)
    if idx < 0:
        return BLACK
    return coerce_to_rgb_tuple(palette[idx])


def nearest_palette_indices(
    colours: np.ndarray,
    pal: np.ndarray,
    metric: Union[DistanceMetric, str],
    chunk_rows: int = QUANTIZE_CHUNK_ROWS,
) -> np.ndarray:
    """For each (N,3) colour row, index of the nearest (P,3) palette row."""
    dist_fn = distance_function(metric)
    best = np.empty(colours.shape[0], dtype=np.intp)
    for start in range(0, colours.shape[0], chunk_rows):
        chunk = colours[start : start + chunk_rows]
        dist = np.asarray(dist_fn(chunk[:, None, :], pal[None, :, :]))
        best[start : start + chunk.shape[0]] = np.argmin(dist, axis=1)
    return best


def bounding_box(block_colors: Iterable[BlockColor]) -> Optional[BoundingBox]:
    """Inclusive (bx, by) bounds of the blocks, None if there are none."""
    bxs: List[int] = []
    bys: List[int] = []
    for bc in block_colors:
        bxs.append(bc.bx)
        bys.append(bc.by)
    if not bxs:
        return None
    return BoundingBox(min(bxs), max(bxs), min(bys), max(bys))


def quantize(
    block_colors: Sequence[BlockColor],
    palette: Sequence[RGBTuple],
    metric: Union[DistanceMetric, str],
    preview: Optional[RGBTuple] = None,
) -> QuantizedFrame:
    """
    Map every block to its nearest palette colour.

    preview, when given, is scored as one extra palette entry for this call
    only; the caller's palette is never touched.
    """
    entries: List[RGBTuple] = [coerce_to_rgb_tuple(c) for c in palette]
    if preview is not None:
        entries.append(coerce_to_rgb_tuple(preview))

    cells: CellColours = {}
    if not block_colors:
        return QuantizedFrame(cells=cells, bbox=None)

    if not entries:
        for bc in block_colors:
            cells[(bc.bx, bc.by)] = BLACK
        return QuantizedFrame(cells=cells, bbox=bounding_box(block_colors))

    src = np.array([bc.rgb for bc in block_colors], dtype=np.int64)
    uniques, inverse = np.unique(src, axis=0, return_inverse=True)
    best = nearest_palette_indices(uniques, _palette_array(entries), metric)[inverse.reshape(-1)]

    for bc, j in zip(block_colors, best.tolist()):
        cells[(bc.bx, bc.by)] = entries[j]
    return QuantizedFrame(cells=cells, bbox=bounding_box(block_colors))


__all__ = [
    "BLACK",
    "nearest",
    "nearest_index",
    "nearest_palette_indices",
    "quantize",
    "bounding_box",
]
