# img2map/grid.py
from __future__ import annotations

"""
Grid builder: RGBA pixels -> tile ids.

Exports:
- build_tile_grid(rgba, classifier) -> TileGrid   # (H, W) uint8, row-major
- tile_usage(grid) -> [(tile_id, count), ...]      # most used first
"""

from typing import List, Tuple

import numpy as np

from .classify import Classifier
from .core_types import TileGrid, U8Rgba, assert_u8_rgba


def build_tile_grid(rgba: U8Rgba, classifier: Classifier) -> TileGrid:
    """
    Classify every pixel and return the (height, width) tile id grid.

    Pixels are flattened in row-major order, so flat index y * W + x lands
    in cell (y, x). Tiles carry no flag bits.
    """
    rgba = assert_u8_rgba(np.asarray(rgba))
    H, W = rgba.shape[0], rgba.shape[1]
    flat = np.ascontiguousarray(rgba).reshape(-1, 4)
    ids = classifier.tile_ids(flat)
    if ids.shape[0] != H * W:
        raise ValueError(f"classifier returned {ids.shape[0]} ids for {H * W} pixels")

    grid: TileGrid = np.zeros((H, W), dtype=np.uint8)
    grid[...] = ids.reshape(H, W)
    return grid


def tile_usage(grid: TileGrid) -> List[Tuple[int, int]]:
    if grid.size == 0:
        return []
    ids, counts = np.unique(grid, return_counts=True)
    pairs = [(int(i), int(c)) for i, c in zip(ids.tolist(), counts.tolist())]
    return sorted(pairs, key=lambda kv: (-kv[1], kv[0]))


__all__ = ["build_tile_grid", "tile_usage"]
