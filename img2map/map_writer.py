# img2map/map_writer.py
from __future__ import annotations

"""
DDNet map output through the twmap bindings.

The container layout (headers, groups, compression) belongs to twmap. This
module only builds an empty map with a game layer and swaps in the tiles.
"""

from pathlib import Path

import numpy as np
import twmap

from .core_types import TileGrid
from .errors import TemplateError, WriteError

MAP_VERSION = "DDNet06"


def build_template(width: int = 1, height: int = 1) -> "twmap.Map":
    """Empty map: one physics group holding a width x height game layer."""
    try:
        tw_map = twmap.Map.empty(MAP_VERSION)
        group = tw_map.groups.new_physics()
        group.layers.new_game(width, height)
        tw_map.game_layer()
    except Exception as exc:
        raise TemplateError(f"cannot build empty map template: {exc}") from exc
    return tw_map


def write_map(grid: TileGrid, path: Path) -> Path:
    """Replace the template's game layer with grid and save it to path."""
    height, width = grid.shape
    tw_map = build_template(width, height)

    try:
        layer = tw_map.game_layer()
        current = np.asarray(layer.tiles)
        if current.shape[:2] != (height, width):
            raise WriteError(
                f"game layer is {current.shape[1]}x{current.shape[0]}, "
                f"grid is {width}x{height}"
            )
        tiles = np.zeros(current.shape, dtype=current.dtype)
        tiles[..., 0] = grid  # id; flags and the rest stay zero
        layer.tiles = tiles
        tw_map.save(str(path))
    except WriteError:
        raise
    except Exception as exc:
        raise WriteError(f"cannot write map {path}: {exc}") from exc
    return Path(path)


__all__ = ["MAP_VERSION", "build_template", "write_map"]
