"""Pytest fixtures for img2map tests."""
import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from img2map.core_types import FREEZE, HOOKABLE, Palette, PaletteEntry


def save_rgba(path, pixels):
    """Write an (H, W, 4) list/array of RGBA rows as a PNG."""
    arr = np.asarray(pixels, dtype=np.uint8)
    Image.fromarray(arr).save(path)
    return path


class RecordingWriter:
    """Stands in for the twmap writer: keeps grids, writes raw bytes."""

    def __init__(self):
        self.written = {}

    def __call__(self, grid, path):
        path = Path(path)
        self.written[path] = grid.copy()
        path.write_bytes(grid.tobytes())
        return path


@pytest.fixture
def writer():
    return RecordingWriter()


@pytest.fixture
def scenario_pixels():
    """2x2: red in the top-left, transparent black elsewhere."""
    return [
        [(255, 0, 0, 255), (0, 0, 0, 0)],
        [(0, 0, 0, 0), (0, 0, 0, 0)],
    ]


@pytest.fixture
def red_hookable():
    return Palette((PaletteEntry((255, 0, 0, 255), HOOKABLE),))


@pytest.fixture
def red_hookable_clear_freeze():
    return Palette(
        (
            PaletteEntry((255, 0, 0, 255), HOOKABLE),
            PaletteEntry((0, 0, 0, 0), FREEZE),
        )
    )
