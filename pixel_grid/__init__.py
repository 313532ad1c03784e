"""
pixel_grid package.

Purpose:
  Turn a continuous-tone image into palette-driven pixel art: split it into a
  grid, sample one colour per cell, then snap each cell to the nearest colour
  of a palette picked from sample points. See pixelart.py for the CLI.

Public API:
  Pipeline        : debounced grid -> sample -> quantize orchestrator.
  GridSettings    : validated grid / sampling / metric parameters.
  GridGeometry    : cell enumeration with clamped pixel bounds.
  compute_blocks  : sample every cell (center / average / dominant).
  quantize        : nearest-palette mapping of sampled blocks.
  Palette         : sample-point palette with value- and id-based removal.
  sorted_palette  : presentation-only palette orders (hsv / luma / rgb).
  colour_convert  : RGB <-> HSV and the three distance metrics.

Quick start:
  from pixel_grid import Pipeline, GridSettings
  pipe = Pipeline(pixels, GridSettings(cells_across=32))  # one centre point
  pipe.add_point(10, 20)
  frame = pipe.flush()
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import colour_convert
from . import core_types
from . import constants
from . import utils

from .core_types import (  # noqa: E402,F401
    BlockColor,
    BoundingBox,
    DistanceMetric,
    GridCell,
    QuantizedFrame,
    SampleMethod,
    SamplePoint,
    SortMode,
)
from .errors import InvalidParameter  # noqa: E402,F401
from .grid import GridGeometry  # noqa: E402,F401
from .sampling import compute_blocks  # noqa: E402,F401
from .quantize import nearest, quantize  # noqa: E402,F401
from .palette_data import Palette, sample_palette_color, sorted_palette  # noqa: E402,F401
from .pipeline import (  # noqa: E402,F401
    ChangeKind,
    GridSettings,
    Pipeline,
    Recompute,
    should_recompute,
)
from .scheduler import Debouncer  # noqa: E402,F401

__all__ = [
    "__version__",
    "colour_convert",
    "core_types",
    "constants",
    "utils",
    "BlockColor",
    "BoundingBox",
    "DistanceMetric",
    "GridCell",
    "QuantizedFrame",
    "SampleMethod",
    "SamplePoint",
    "SortMode",
    "InvalidParameter",
    "GridGeometry",
    "compute_blocks",
    "nearest",
    "quantize",
    "Palette",
    "sample_palette_color",
    "sorted_palette",
    "ChangeKind",
    "GridSettings",
    "Pipeline",
    "Recompute",
    "should_recompute",
    "Debouncer",
]
