# pixel_grid/pipeline.py
from __future__ import annotations

"""
Pipeline orchestration: grid -> block sampling -> quantization.

Exports:
  GridSettings        validated grid / sampling / metric / blur parameters
  ChangeKind          every external change the pipeline reacts to
  Recompute           RESAMPLE | REQUANTIZE
  should_recompute(kind) -> Recompute
  PipelineState       everything the pipeline owns, in one place
  Pipeline            debounced orchestrator

Resampling is O(image pixels) and requantizing is O(cells x palette), so the
two are tracked separately: only grid, source and palette-membership changes
resample; palette colour, preview and metric changes only requantize.
Resample needs accumulate across coalesced changes until a run clears them.
"""

import math
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Union

from .core_types import (
    BlockColor,
    DistanceMetric,
    QuantizedFrame,
    RGBTuple,
    SampleMethod,
    SamplePoint,
    U8Image,
    assert_u8_image_rgb,
)
from .constants import (
    DEFAULT_BLUR,
    DEFAULT_CELLS_ACROSS,
    DEFAULT_METHOD,
    DEFAULT_METRIC,
)
from .errors import InvalidParameter
from .grid import GridGeometry
from .image_io import blur_rgb
from .palette_data import Palette
from .quantize import quantize
from .sampling import compute_blocks
from .scheduler import Debouncer
from .utils import debug_log, format_seconds_compact, key_value_pairs_to_string


# Settings


def _require_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameter(f"{name} must be an integer, got {value!r}")
    return value


@dataclass(frozen=True)
class GridSettings:
    cells_across: int = DEFAULT_CELLS_ACROSS
    offset_x: int = 0
    offset_y: int = 0
    method: SampleMethod = SampleMethod(DEFAULT_METHOD)
    metric: DistanceMetric = DistanceMetric(DEFAULT_METRIC)
    blur: float = DEFAULT_BLUR

    def validated(self) -> "GridSettings":
        """Return a normalised copy, or raise InvalidParameter."""
        cells = _require_int("cells_across", self.cells_across)
        if cells < 1:
            raise InvalidParameter(f"cells_across must be >= 1, got {cells}")
        offset_x = _require_int("offset_x", self.offset_x)
        offset_y = _require_int("offset_y", self.offset_y)
        try:
            method = SampleMethod(self.method)
        except ValueError as exc:
            raise InvalidParameter(f"unknown sample method {self.method!r}") from exc
        try:
            metric = DistanceMetric(self.metric)
        except ValueError as exc:
            raise InvalidParameter(f"unknown distance metric {self.metric!r}") from exc
        try:
            blur = float(self.blur)
        except (TypeError, ValueError) as exc:
            raise InvalidParameter(f"blur must be a number, got {self.blur!r}") from exc
        if not math.isfinite(blur) or blur < 0:
            raise InvalidParameter(f"blur must be finite and >= 0, got {self.blur!r}")
        return GridSettings(cells, offset_x, offset_y, method, metric, blur)

    def geometry(self, width: int, height: int) -> GridGeometry:
        return GridGeometry(width, height, self.cells_across, self.offset_x, self.offset_y)


# Change classification


class ChangeKind(Enum):
    GRID_SIZE = "grid_size"
    OFFSET = "offset"
    SAMPLE_METHOD = "sample_method"
    SOURCE_PIXELS = "source_pixels"
    PALETTE_MEMBERSHIP = "palette_membership"
    PALETTE_CONTENT = "palette_content"
    PALETTE_PREVIEW = "palette_preview"
    DISTANCE_METRIC = "distance_metric"


class Recompute(Enum):
    RESAMPLE = "resample"
    REQUANTIZE = "requantize"


_RESAMPLE_KINDS = frozenset(
    {
        ChangeKind.GRID_SIZE,
        ChangeKind.OFFSET,
        ChangeKind.SAMPLE_METHOD,
        ChangeKind.SOURCE_PIXELS,
        ChangeKind.PALETTE_MEMBERSHIP,
    }
)


def should_recompute(kind: ChangeKind) -> Recompute:
    """Map a change onto the cheapest recomputation that covers it."""
    if kind in _RESAMPLE_KINDS:
        return Recompute.RESAMPLE
    return Recompute.REQUANTIZE


# State


@dataclass
class PipelineState:
    source: U8Image  # unblurred processing-size image
    pixels: U8Image  # working image sampled by the grid and the points
    settings: GridSettings
    palette: Palette = field(default_factory=Palette)
    block_colors: List[BlockColor] = field(default_factory=list)
    frame: Optional[QuantizedFrame] = None
    needs_resample: bool = True

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def geometry(self) -> GridGeometry:
        return self.settings.geometry(self.width, self.height)


# Orchestrator


class Pipeline:
    """
    Owns the pipeline state and decides what to recompute.

    Parameter changes are debounced through a single-slot Debouncer; call
    poll() from the event loop or flush() to render right away. Dragging a
    sample point and previewing a colour requantize synchronously. A new image
    starts with one sample point at its centre unless centre_point is False.
    """

    def __init__(
        self,
        image: U8Image,
        settings: Optional[GridSettings] = None,
        *,
        scheduler: Optional[Debouncer] = None,
        debug: bool = False,
        centre_point: bool = True,
    ) -> None:
        source = assert_u8_image_rgb(image)
        settings = (settings or GridSettings()).validated()
        self.state = PipelineState(
            source=source,
            pixels=blur_rgb(source, settings.blur),
            settings=settings,
        )
        self.scheduler = scheduler if scheduler is not None else Debouncer()
        self.debug = debug
        if centre_point:
            self.add_centre_point()
        self.request(ChangeKind.SOURCE_PIXELS)

    # Read-only views

    @property
    def settings(self) -> GridSettings:
        return self.state.settings

    @property
    def palette(self) -> Palette:
        return self.state.palette

    @property
    def block_colors(self) -> List[BlockColor]:
        return list(self.state.block_colors)

    @property
    def frame(self) -> Optional[QuantizedFrame]:
        return self.state.frame

    @property
    def geometry(self) -> GridGeometry:
        return self.state.geometry

    # Scheduling

    def request(self, kind: ChangeKind) -> Recompute:
        """Record a change and (re)schedule the debounced run."""
        action = should_recompute(kind)
        if action is Recompute.RESAMPLE:
            self.state.needs_resample = True
        self.scheduler.schedule(self._run_scheduled)
        if self.debug:
            debug_log(f"change {kind.value} -> {action.value}")
        return action

    def _run_scheduled(self) -> None:
        self.run()

    def poll(self) -> Optional[QuantizedFrame]:
        """Run the pending pipeline pass if its debounce delay has elapsed."""
        if self.scheduler.poll():
            return self.state.frame
        return None

    def flush(self) -> QuantizedFrame:
        """Run any pending pass now and return the current frame."""
        if self.scheduler.pending or self.state.frame is None:
            self.scheduler.cancel()
            return self.run()
        return self.state.frame

    # Runs

    def run(self, resample: bool = False) -> QuantizedFrame:
        """Full pass: resample if needed (or forced), then requantize."""
        if resample or self.state.needs_resample:
            self._resample()
        frame = self._requantize()
        self.state.frame = frame
        return frame

    def _resample(self) -> None:
        t0 = time.perf_counter()
        state = self.state
        state.block_colors = compute_blocks(state.pixels, state.geometry, state.settings.method)
        state.needs_resample = False
        if self.debug:
            debug_log(
                key_value_pairs_to_string(
                    [
                        ("Resample", state.settings.method.value),
                        ("Blocks", len(state.block_colors)),
                        ("Time", format_seconds_compact(time.perf_counter() - t0)),
                    ]
                )
            )

    def _requantize(self, preview: Optional[RGBTuple] = None) -> QuantizedFrame:
        t0 = time.perf_counter()
        state = self.state
        frame = quantize(state.block_colors, state.palette.colours, state.settings.metric, preview)
        if self.debug:
            width, height = frame.resolution
            debug_log(
                key_value_pairs_to_string(
                    [
                        ("Requantize", state.settings.metric.value),
                        ("Palette", len(state.palette) + (preview is not None)),
                        ("Result", f"{width}x{height}"),
                        ("Time", format_seconds_compact(time.perf_counter() - t0)),
                    ]
                )
            )
        return frame

    # Parameter changes

    def _update_settings(self, kind: ChangeKind, **changes: object) -> None:
        self.state.settings = replace(self.state.settings, **changes).validated()  # type: ignore[arg-type]
        self.request(kind)

    def set_cells_across(self, cells_across: int) -> None:
        self._update_settings(ChangeKind.GRID_SIZE, cells_across=cells_across)

    def set_offset(self, offset_x: int, offset_y: int) -> None:
        self._update_settings(ChangeKind.OFFSET, offset_x=offset_x, offset_y=offset_y)

    def set_sample_method(self, method: Union[SampleMethod, str]) -> None:
        self._update_settings(ChangeKind.SAMPLE_METHOD, method=method)

    def set_metric(self, metric: Union[DistanceMetric, str]) -> None:
        self._update_settings(ChangeKind.DISTANCE_METRIC, metric=metric)

    def set_blur(self, radius: float) -> None:
        """Re-blur the working image and re-read every sample point from it."""
        settings = replace(self.state.settings, blur=radius).validated()
        self.state.settings = settings
        self.state.pixels = blur_rgb(self.state.source, settings.blur)
        self.state.palette.resample_points(self.state.pixels)
        self.request(ChangeKind.SOURCE_PIXELS)

    def set_image(self, image: U8Image) -> None:
        """Swap in a new source image; its points restart from one centre point."""
        source = assert_u8_image_rgb(image)
        self.state.source = source
        self.state.pixels = blur_rgb(source, self.state.settings.blur)
        self.state.palette = Palette()
        self.state.block_colors = []
        self.add_centre_point()
        self.request(ChangeKind.SOURCE_PIXELS)

    # Palette changes

    def add_point(self, x: int, y: int) -> SamplePoint:
        point = self.state.palette.add_point(x, y, self.state.pixels)
        self.request(ChangeKind.PALETTE_MEMBERSHIP)
        return point

    def add_centre_point(self) -> SamplePoint:
        """Default sample point placed at the middle of the image."""
        return self.add_point(self.state.width // 2, self.state.height // 2)

    def remove_point(self, point_id: int) -> SamplePoint:
        point = self.state.palette.remove_point(point_id)
        self.request(ChangeKind.PALETTE_MEMBERSHIP)
        return point

    def remove_colour(self, rgb: RGBTuple) -> Optional[SamplePoint]:
        point = self.state.palette.remove_colour(rgb)
        if point is not None:
            self.request(ChangeKind.PALETTE_MEMBERSHIP)
        return point

    def drag_point(self, point_id: int, x: int, y: int) -> QuantizedFrame:
        """Move a point and requantize immediately, skipping the debounce."""
        self.state.palette.move_point(point_id, x, y, self.state.pixels)
        frame = self._requantize()
        self.state.frame = frame
        return frame

    def preview(self, colour: RGBTuple) -> QuantizedFrame:
        """Frame quantized with colour as one extra, transient palette entry."""
        return self._requantize(preview=colour)


__all__ = [
    "GridSettings",
    "ChangeKind",
    "Recompute",
    "should_recompute",
    "PipelineState",
    "Pipeline",
]
