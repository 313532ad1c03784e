from __future__ import annotations

import io
from pathlib import Path

import numpy as np
from PIL import Image, ImageFilter, ImageOps

from .constants import MAX_DIMENSION
from .core_types import U8Image, assert_u8_image_rgb

"""
Image I/O helpers (opaque RGB in sRGB), processing-size fit, and blur.
"""

try:
    from PIL import ImageCms  # ICC conversion if profile present
except Exception:  # pragma: no cover
    ImageCms = None  # type: ignore[assignment]


def _convert_to_srgb_rgb(im: Image.Image) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    icc_bytes = im.info.get("icc_profile")

    if icc_bytes and ImageCms is not None:
        try:
            src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
            dst_prof = ImageCms.createProfile("sRGB")
            im2 = ImageCms.profileToProfile(
                im.convert("RGB"),
                src_prof,
                dst_prof,
                renderingIntent=ImageCms.Intent.PERCEPTUAL,
                outputMode="RGB",
            )
            if im2 is None:
                return im.convert("RGB")
            return im2
        except (ImageCms.PyCMSError, OSError, ValueError):
            return im.convert("RGB")

    return im.convert("RGB")


def load_image_rgb(path: Path) -> U8Image:
    """Load any Pillow-readable image as uint8 (H,W,3). Alpha is discarded."""
    with Image.open(path) as im0:
        im = _convert_to_srgb_rgb(im0)
    return np.array(im, dtype=np.uint8)


def save_png_rgb(path: Path, rgb: U8Image) -> Path:
    if path.suffix.lower() != ".png":
        path = path.with_suffix(".png")
    Image.fromarray(np.ascontiguousarray(rgb)).save(path)
    return path


def fit_within(rgb: U8Image, max_dim: int = MAX_DIMENSION) -> U8Image:
    """Downscale so neither side exceeds max_dim; sides are floored."""
    H0, W0, _ = rgb.shape
    if max_dim <= 0 or (W0 <= max_dim and H0 <= max_dim):
        return rgb

    ratio = min(max_dim / W0, max_dim / H0)
    dst_w = max(1, int(W0 * ratio))
    dst_h = max(1, int(H0 * ratio))
    im = Image.fromarray(rgb)
    im2 = im.resize((dst_w, dst_h), resample=Image.Resampling.BILINEAR)
    return np.array(im2, dtype=np.uint8)


def blur_rgb(rgb: U8Image, radius: float) -> U8Image:
    """Gaussian blur of the working image. radius <= 0 returns rgb unchanged."""
    assert_u8_image_rgb(rgb)
    if radius <= 0:
        return rgb
    im = Image.fromarray(rgb).filter(ImageFilter.GaussianBlur(radius=radius))
    return np.array(im, dtype=np.uint8)


__all__ = [
    "load_image_rgb",
    "save_png_rgb",
    "fit_within",
    "blur_rgb",
]
