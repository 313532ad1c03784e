#!/usr/bin/env python3
"""
pixelart.py
Turn images into palette-driven pixel art on a configurable grid.

Usage:
  python pixelart.py INPUT --cells N --offset-x X --offset-y Y
      --method [center|average|dominant] --metric [rgb|perceptual|hsv]
      --blur R --sample X,Y [--sample X,Y ...] --sort [hsv|luma|rgb] --preview --debug

Methods:
  center   : colour of the pixel at each cell centre.
  average  : mean colour of each cell.
  dominant : most common colour of each cell (near-duplicates merged).

Input:
  Any Pillow-readable image, or a folder of them. Alpha is ignored. Images are
  fitted within --max-dim before processing.

Output:
  PNG at the logical grid resolution, <stem>_pixel_<w>x<h>.png next to INPUT
  (or in --outdir). --preview also writes the full-size painted result.

Notes:
  The palette is the colours under the --sample points (default: one point
  at the image centre). Sample points are read from the blurred image.
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from pixel_grid.constants import (
    DEFAULT_BLUR,
    DEFAULT_CELLS_ACROSS,
    DEFAULT_METHOD,
    DEFAULT_METRIC,
    MAX_DIMENSION,
)
from pixel_grid.core_types import DistanceMetric, SampleMethod, SortMode
from pixel_grid.errors import InvalidParameter
from pixel_grid.image_io import fit_within, load_image_rgb, save_png_rgb
from pixel_grid.pipeline import GridSettings, Pipeline
from pixel_grid.render import frame_to_array, paint_frame
from pixel_grid.utils import (
    colour_usage_report,
    debug_log,
    enable_line_buffered_stdout,
    error,
    format_seconds_compact,
    format_total_duration_compact,
    key_value_pairs_to_string,
    log,
    palette_hex_list,
    print_banner,
    print_config_line,
    warn,
)

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".gif"}
OUTPUT_MARKER = "_pixel_"


# CLI args & small helpers


def parse_sample_point(text: str) -> Tuple[int, int]:
    """Parse 'X,Y' into an integer pixel coordinate."""
    parts = text.replace(" ", "").split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected X,Y, got {text!r}")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected integer X,Y, got {text!r}") from exc


def parse_cli_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments.

    Returns:
      argparse.Namespace with:
        src: Path to image or folder
        outdir: optional Path for outputs
        cells: cells across the image width
        offset_x / offset_y: grid offset in pixels
        method: sample method name
        metric: distance metric name
        blur: Gaussian blur radius applied before sampling
        max_dim: processing size cap
        samples: list of (x, y) sample points
        sort: palette report order
        preview: also write the full-size painted result
        debug: bool for verbose timing details
    """
    parser = argparse.ArgumentParser(
        prog="pixelart",
        description="Turn an image into palette-driven pixel art.",
    )
    parser.add_argument("src", type=Path, help="Input image or folder")
    parser.add_argument(
        "--outdir", type=Path, default=None, help="Output directory (optional)"
    )
    parser.add_argument(
        "--cells",
        type=int,
        default=DEFAULT_CELLS_ACROSS,
        help="Grid cells across the image width.",
    )
    parser.add_argument("--offset-x", type=int, default=0, help="Grid X offset (px)")
    parser.add_argument("--offset-y", type=int, default=0, help="Grid Y offset (px)")
    parser.add_argument(
        "--method",
        choices=[m.value for m in SampleMethod],
        default=DEFAULT_METHOD,
        help="Per-cell sampling method.",
    )
    parser.add_argument(
        "--metric",
        choices=[m.value for m in DistanceMetric],
        default=DEFAULT_METRIC,
        help="Colour distance used to pick palette entries.",
    )
    parser.add_argument(
        "--blur", type=float, default=DEFAULT_BLUR, help="Blur radius before sampling (px)"
    )
    parser.add_argument(
        "--max-dim",
        type=int,
        default=MAX_DIMENSION,
        help="Fit images within this size before processing.",
    )
    parser.add_argument(
        "--sample",
        dest="samples",
        action="append",
        type=parse_sample_point,
        default=None,
        metavar="X,Y",
        help="Palette sample point in processing pixels. Repeatable.",
    )
    parser.add_argument(
        "--sort",
        choices=[m.value for m in SortMode],
        default=SortMode.HSV.value,
        help="Order of the palette report.",
    )
    parser.add_argument(
        "--preview", action="store_true", help="Also write the full-size painted result"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose timing details")
    return parser.parse_args(argv)


def _output_path(src_path: Path, outdir: Optional[Path], width: int, height: int) -> Path:
    folder = outdir if outdir is not None else src_path.parent
    return folder / f"{src_path.stem}{OUTPUT_MARKER}{width}x{height}.png"


def _collect_inputs(src: Path) -> List[Path]:
    if not src.is_dir():
        return [src]
    files = [
        p
        for p in src.iterdir()
        if p.is_file()
        and p.suffix.lower() in IMAGE_EXTENSIONS
        and OUTPUT_MARKER not in p.stem
    ]
    files.sort(key=lambda p: p.name.lower())
    return files


# Per-file processing


def _process_single_image(
    src_path: Path, settings: GridSettings, args: argparse.Namespace
) -> Optional[Path]:
    """
    Process a single image path end-to-end:
      load -> fit -> place samples -> sample grid -> quantize -> save -> report.
    """
    t_start = time.perf_counter()
    print_banner(src_path.name)

    rgb_in = load_image_rgb(src_path)
    height0, width0 = rgb_in.shape[0], rgb_in.shape[1]
    rgb = fit_within(rgb_in, args.max_dim)
    height, width = rgb.shape[0], rgb.shape[1]
    if args.debug:
        debug_log(
            key_value_pairs_to_string(
                [("Loaded", f"{width0}x{height0}"), ("Processing", f"{width}x{height}")]
            )
        )

    pipe = Pipeline(rgb, settings, debug=args.debug, centre_point=False)
    if args.samples:
        for x, y in args.samples:
            try:
                pipe.add_point(x, y)
            except InvalidParameter as exc:
                warn(f"skipped sample point: {exc}")
    if len(pipe.palette) == 0:
        pipe.add_centre_point()
    t_prep = time.perf_counter()

    frame = pipe.flush()
    t_run = time.perf_counter()

    res_w, res_h = frame.resolution
    if res_w <= 0 or res_h <= 0:
        warn("grid produced no cells; nothing written")
        return None

    out_path = save_png_rgb(_output_path(src_path, args.outdir, res_w, res_h), frame_to_array(frame))
    if args.preview:
        save_png_rgb(
            out_path.with_name(f"{out_path.stem}_preview.png"),
            paint_frame(frame, pipe.geometry),
        )
    t_save = time.perf_counter()

    log(f"Wrote {out_path.name} | resolution={res_w}x{res_h} | palette_size={len(pipe.palette)}")
    log(f"Palette ({args.sort}): " + " ".join(palette_hex_list(pipe.palette.sorted(args.sort))))
    log("Colours used:")
    for hex_code, count in colour_usage_report(frame.cells.values()):
        log(f"  {hex_code}: {count:,}")

    if args.debug:
        debug_log(
            f"Total {format_total_duration_compact(t_save - t_start)}  "
            f"(load={format_seconds_compact(t_prep - t_start)}, run={format_seconds_compact(t_run - t_prep)}, "
            f"save={format_seconds_compact(t_save - t_run)})"
        )
    else:
        log(f"Total time {format_total_duration_compact(t_save - t_start)}")
    return out_path


# Entry point


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    CLI entry point.

    Handles a single file or a folder (processed one file at a time).
    """
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)

    try:
        settings = GridSettings(
            cells_across=args.cells,
            offset_x=args.offset_x,
            offset_y=args.offset_y,
            method=SampleMethod(args.method),
            metric=DistanceMetric(args.metric),
            blur=args.blur,
        ).validated()
    except InvalidParameter as exc:
        error(str(exc))
        return 2

    print_config_line(
        "grid",
        [
            ("Cells", settings.cells_across),
            ("Offset", f"{settings.offset_x},{settings.offset_y}"),
            ("Method", settings.method.value),
            ("Metric", settings.metric.value),
            ("Blur", settings.blur),
        ],
        debug=False,
    )

    src = args.src
    if not src.exists():
        error(f"not found: {src}")
        return 2

    files = _collect_inputs(src)
    if args.debug:
        debug_log(key_value_pairs_to_string([("Images", len(files))]))

    status = 0
    for path in files:
        try:
            _process_single_image(path, settings, args)
        except InvalidParameter as exc:
            error(f"{path.name}: {exc}")
            status = 2
    return status


if __name__ == "__main__":
    sys.exit(main())
