# pixel_grid/grid.py
from __future__ import annotations

"""
Grid geometry.

Exports:
  GridGeometry(width, height, cells_across, offset_x=0, offset_y=0)
    .size            real-valued cell edge length (width / cells_across)
    .index_range()   -> ((min_bx, max_bx), (min_by, max_by)), upper bounds exclusive
    .cell_at(bx, by) -> GridCell | None
    .cells()         -> Iterator[GridCell], row-major, empty cells filtered
    .axis_spans(axis) -> [(index, start, end)] non-empty spans along x or y
    .cell_bounds(bx, by) -> unclamped floored [start, end) bounds

Notes:
  Cell edges are not pixel aligned; boundary pixels are resolved by flooring
  offset + index * size, so neighbouring cells share their edge exactly and the
  emitted rectangles partition the image.
  Parameters are assumed validated by the caller (see pipeline.GridSettings).
"""

import math
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .core_types import GridCell


@dataclass(frozen=True)
class GridGeometry:
    width: int
    height: int
    cells_across: int
    offset_x: int = 0
    offset_y: int = 0

    @property
    def size(self) -> float:
        return self.width / self.cells_across

    def _axis_range(self, offset: int, extent: int) -> Tuple[int, int]:
        # One cell of slack either side so extreme offsets never lose a cell.
        size = self.size
        lo = math.floor(-offset / size) - 1
        hi = math.ceil((extent - offset) / size) + 1
        return lo, hi

    def index_range(self) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        """Candidate block index ranges, upper bounds exclusive."""
        return (
            self._axis_range(self.offset_x, self.width),
            self._axis_range(self.offset_y, self.height),
        )

    def origin(self, bx: int, by: int) -> Tuple[float, float]:
        """Unclamped top-left corner of block (bx, by) in pixel space."""
        size = self.size
        return self.offset_x + bx * size, self.offset_y + by * size

    def cell_bounds(self, bx: int, by: int) -> Tuple[int, int, int, int]:
        """Floored, unclamped (start_x, end_x, start_y, end_y)."""
        x0, y0 = self.origin(bx, by)
        x1, y1 = self.origin(bx + 1, by + 1)
        return (
            math.floor(x0),
            math.floor(x1),
            math.floor(y0),
            math.floor(y1),
        )

    def cell_at(self, bx: int, by: int) -> Optional[GridCell]:
        """Clamped cell for (bx, by), or None if it covers no pixels."""
        sx, ex, sy, ey = self.cell_bounds(bx, by)
        start_x = max(0, sx)
        start_y = max(0, sy)
        end_x = min(self.width, ex)
        end_y = min(self.height, ey)
        if start_x >= self.width or start_y >= self.height or end_x <= 0 or end_y <= 0:
            return None
        if start_x >= end_x or start_y >= end_y:
            return None
        origin_x, origin_y = self.origin(bx, by)
        return GridCell(
            bx=bx,
            by=by,
            origin_x=origin_x,
            origin_y=origin_y,
            start_x=start_x,
            end_x=end_x,
            start_y=start_y,
            end_y=end_y,
        )

    def axis_spans(self, axis: int) -> List[Tuple[int, int, int]]:
        """
        Non-empty clamped (index, start, end) spans along one axis (0 = x, 1 = y).

        A cell is non-empty exactly when both of its axis spans are, so the
        grid is the product of the two lists. With more cells than pixels most
        indices floor to an empty span and are dropped here.
        """
        if axis == 0:
            offset, extent = self.offset_x, self.width
        else:
            offset, extent = self.offset_y, self.height
        size = self.size
        lo, hi = self._axis_range(offset, extent)
        spans: List[Tuple[int, int, int]] = []
        for idx in range(lo, hi):
            start = max(0, math.floor(offset + idx * size))
            end = min(extent, math.floor(offset + (idx + 1) * size))
            if start < end:
                spans.append((idx, start, end))
        return spans

    def cells(self) -> Iterator[GridCell]:
        """Lazily yield every non-empty cell, row-major (by, then bx)."""
        columns = self.axis_spans(0)
        size = self.size
        for by, start_y, end_y in self.axis_spans(1):
            origin_y = self.offset_y + by * size
            for bx, start_x, end_x in columns:
                yield GridCell(
                    bx=bx,
                    by=by,
                    origin_x=self.offset_x + bx * size,
                    origin_y=origin_y,
                    start_x=start_x,
                    end_x=end_x,
                    start_y=start_y,
                    end_y=end_y,
                )


__all__ = ["GridGeometry"]
