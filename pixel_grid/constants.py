"""
Defaults and tunables used across the project.

- Pipeline timing and processing size
- Grid / sampling defaults
- Distance metric weights (calibrated, keep exact)
- Palette sort buckets
"""
from __future__ import annotations

from typing import Tuple

# =================
# Pipeline / timing
# =================
DEBOUNCE_SECONDS: float = 0.150
MAX_DIMENSION: int = 800

# ================
# Grid / sampling
# ================
DEFAULT_CELLS_ACROSS: int = 32
DEFAULT_METHOD: str = "center"
DEFAULT_METRIC: str = "perceptual"
DEFAULT_BLUR: float = 0.0
DOMINANT_BUCKET_DIVISOR: int = 4

# ===============
# Distance metric
# ===============
PERCEPTUAL_WEIGHTS: Tuple[float, float, float] = (0.3, 0.59, 0.11)
HSV_HUE_SCALE: float = 400.0
HSV_SAT_SCALE: float = 100.0
HSV_VAL_SCALE: float = 100.0
HSV_MIN_HUE_WEIGHT: float = 0.1

# ============
# Palette sort
# ============
HUE_SORT_BUCKETS: int = 24
HSV_SORT_VALUE_GAP: float = 0.1
LUMA_WEIGHTS: Tuple[float, float, float] = (0.299, 0.587, 0.114)
MARKER_HIT_RADIUS: float = 24.0

# ============
# Quantization
# ============
QUANTIZE_CHUNK_ROWS: int = 4096  # unique colours scored per distance call
