# img2map/image_io.py
from __future__ import annotations

from pathlib import Path
from typing import Literal

import numpy as np
from PIL import Image, ImageFilter, UnidentifiedImageError

from .core_types import U8Rgba
from .errors import ImageDecodeError

"""
Image I/O helpers (RGBA), resize filter names, and the tile-size pre-resize.
"""

ResizeFilter = Literal["nearest", "triangle", "catmull-rom", "gaussian", "lanczos3"]
RESIZE_FILTERS = ("nearest", "triangle", "catmull-rom", "gaussian", "lanczos3")

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".gif", ".tga"}


def resample_from_name(name: str) -> Image.Resampling:
    """Map a filter name to the Pillow resampling enum used for the resize."""
    if name == "nearest":
        return Image.Resampling.NEAREST
    if name == "triangle":
        return Image.Resampling.BILINEAR
    if name == "catmull-rom":
        return Image.Resampling.BICUBIC
    if name == "lanczos3":
        return Image.Resampling.LANCZOS
    if name == "gaussian":
        # blurred first in preprocess(), then point-sampled
        return Image.Resampling.NEAREST
    raise ValueError(f"unknown resize filter {name!r}; expected one of {RESIZE_FILTERS}")


def load_image_rgba(path: Path) -> U8Rgba:
    """Load an image with Pillow and return it as a uint8 (H,W,4) array."""
    try:
        with Image.open(path) as im0:
            # EXIF orientation is ignored; the grid follows the stored pixel layout
            im = im0.convert("RGBA")
    except FileNotFoundError as exc:
        raise ImageDecodeError(f"image not found: {path}") from exc
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ImageDecodeError(f"cannot decode image {path}: {exc}") from exc
    return np.array(im, dtype=np.uint8)


def preprocess(
    rgba: U8Rgba, tile_size: int = 1, resize_filter: str = "nearest"
) -> U8Rgba:
    """
    Downscale by an integer tile size before classification.

    tile_size == 1 returns the input unchanged. Otherwise the target is
    (W // t, H // t); trailing rows and columns that do not fill a whole tile
    are dropped by the truncation.
    """
    if tile_size < 1:
        raise ValueError(f"tile size must be >= 1, got {tile_size}")
    resample = resample_from_name(resize_filter)
    if tile_size == 1:
        return rgba

    H0, W0 = rgba.shape[0], rgba.shape[1]
    dst_w, dst_h = W0 // tile_size, H0 // tile_size
    if dst_w == 0 or dst_h == 0:
        raise ImageDecodeError(
            f"image {W0}x{H0} is smaller than tile size {tile_size}"
        )

    # per band: Pillow premultiplies RGBA by alpha when filtering
    bands = []
    for band in Image.fromarray(np.ascontiguousarray(rgba)).split():
        if resize_filter == "gaussian":
            band = band.filter(ImageFilter.GaussianBlur(radius=0.5 * tile_size))
        bands.append(band.resize((dst_w, dst_h), resample=resample))
    return np.array(Image.merge("RGBA", bands), dtype=np.uint8)


def is_image_path(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() in IMAGE_EXTENSIONS


__all__ = [
    "ResizeFilter",
    "RESIZE_FILTERS",
    "IMAGE_EXTENSIONS",
    "resample_from_name",
    "load_image_rgba",
    "preprocess",
    "is_image_path",
]
