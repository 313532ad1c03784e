# pixel_grid/render.py
from __future__ import annotations

"""
Rasterise a QuantizedFrame for export.

Exports:
  frame_to_array(frame)          -> uint8 [h,w,3] at logical resolution
  paint_frame(frame, geometry)   -> uint8 [H,W,3] full-size preview

Cells missing from the frame stay black.
"""

import numpy as np

from .core_types import QuantizedFrame, U8Image
from .grid import GridGeometry


def frame_to_array(frame: QuantizedFrame) -> U8Image:
    """One output pixel per block, origin at the frame's (min_bx, min_by)."""
    width, height = frame.resolution
    out = np.zeros((height, width, 3), dtype=np.uint8)
    if frame.bbox is None:
        return out
    for (bx, by), rgb in frame.cells.items():
        out[by - frame.bbox.min_by, bx - frame.bbox.min_bx] = rgb
    return out


def paint_frame(frame: QuantizedFrame, geometry: GridGeometry) -> U8Image:
    """Fill each block's clamped pixel rectangle with its quantized colour."""
    out = np.zeros((geometry.height, geometry.width, 3), dtype=np.uint8)
    for (bx, by), rgb in frame.cells.items():
        cell = geometry.cell_at(bx, by)
        if cell is None:
            continue
        out[cell.start_y : cell.end_y, cell.start_x : cell.end_x] = rgb
    return out


__all__ = ["frame_to_array", "paint_frame"]
