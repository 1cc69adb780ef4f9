# img2map/__init__.py
"""
img2map package.

Purpose:
  Convert images into DDNet map game layers by classifying each pixel's
  colour against a palette. See img2map.py / img2map.cli for the CLI.

Public API:
  load_palette     : palette from a JSON file or the built-in default.
  build_classifier : "exact" or "nearest" colour classifier for a palette.
  build_tile_grid  : RGBA image -> (H, W) uint8 tile ids.
  convert_image    : one image end-to-end (load, resize, classify, write).
  convert_directory: every image in a directory, skipping unreadable files.
  core_types       : ColorKey, TileClass, Palette and the tile-id table.
  errors           : ConfigError, ImageDecodeError, DirectoryError, ...

Quick start:
  from img2map import load_palette, build_classifier, build_tile_grid
  classifier = build_classifier(load_palette(), "nearest")
"""

__version__ = "0.2.0"

from . import core_types
from . import errors
from . import utils

from .classify import build_classifier  # noqa: E402,F401
from .convert import convert_directory, convert_image  # noqa: E402,F401
from .grid import build_tile_grid  # noqa: E402,F401
from .palette_data import DEFAULT_MAPPINGS, load_palette  # noqa: E402,F401

__all__ = [
    "__version__",
    "core_types",
    "errors",
    "utils",
    "DEFAULT_MAPPINGS",
    "load_palette",
    "build_classifier",
    "build_tile_grid",
    "convert_image",
    "convert_directory",
]
