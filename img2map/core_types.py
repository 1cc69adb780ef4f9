# img2map/core_types.py
from __future__ import annotations

"""
Core type aliases, tile classes, and palette value objects.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

# Basic aliases

ColorKey = Tuple[int, int, int, int]  # (r, g, b, a), each 0..255

U8Rgba = NDArray[np.uint8]  # (H, W, 4)
TileGrid = NDArray[np.uint8]  # (H, W) tile ids


class TileTag(Enum):
    EMPTY = "Empty"
    HOOKABLE = "Hookable"
    UNHOOKABLE = "Unhookable"
    FREEZE = "Freeze"
    SPAWN = "Spawn"
    START = "Start"
    FINISH = "Finish"
    CUSTOM = "Custom"


# Game layer ids. Custom carries its own id.
TILE_IDS: Dict[TileTag, int] = {
    TileTag.EMPTY: 0,
    TileTag.HOOKABLE: 1,
    TileTag.UNHOOKABLE: 2,
    TileTag.FREEZE: 9,
    TileTag.START: 33,
    TileTag.FINISH: 34,
    TileTag.SPAWN: 192,
}


# Value objects


@dataclass(frozen=True)
class TileClass:
    """Tile tag with an explicit id payload for the Custom tag."""

    tag: TileTag
    custom_id: Optional[int] = None

    def __post_init__(self) -> None:
        if self.tag is TileTag.CUSTOM:
            if (
                not isinstance(self.custom_id, int)
                or isinstance(self.custom_id, bool)
                or not 0 <= self.custom_id <= 255
            ):
                raise ValueError(f"custom tile id must be 0..255, got {self.custom_id!r}")
        elif self.custom_id is not None:
            raise ValueError(f"{self.tag.value} does not carry an id")

    @classmethod
    def custom(cls, tile_id: int) -> "TileClass":
        return cls(TileTag.CUSTOM, tile_id)

    @property
    def tile_id(self) -> int:
        if self.tag is TileTag.CUSTOM:
            return int(self.custom_id)  # type: ignore[arg-type]
        return TILE_IDS[self.tag]

    def __str__(self) -> str:
        if self.tag is TileTag.CUSTOM:
            return f"Custom({self.custom_id})"
        return self.tag.value


EMPTY = TileClass(TileTag.EMPTY)
HOOKABLE = TileClass(TileTag.HOOKABLE)
UNHOOKABLE = TileClass(TileTag.UNHOOKABLE)
FREEZE = TileClass(TileTag.FREEZE)
SPAWN = TileClass(TileTag.SPAWN)
START = TileClass(TileTag.START)
FINISH = TileClass(TileTag.FINISH)


@dataclass(frozen=True)
class PaletteEntry:
    color: ColorKey
    tile: TileClass


@dataclass(frozen=True)
class Palette:
    """Ordered palette. Duplicate colours are kept; order breaks ties."""

    entries: Tuple[PaletteEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[PaletteEntry]:
        return iter(self.entries)

    def colors_u8(self) -> NDArray[np.uint8]:
        """Palette colours as a (P, 4) uint8 array in insertion order."""
        if not self.entries:
            return np.zeros((0, 4), dtype=np.uint8)
        return np.array([e.color for e in self.entries], dtype=np.uint8)


# Small helpers


def coerce_color_key(value: Sequence[int]) -> ColorKey:
    """Coerce a 4-length sequence or array row to an (r, g, b, a) tuple."""
    if len(value) != 4:
        raise ValueError(f"expected 4 channels, got {len(value)}")
    r, g, b, a = (int(c) for c in value)
    for c in (r, g, b, a):
        if not 0 <= c <= 255:
            raise ValueError(f"channel out of range 0..255: {c}")
    return (r, g, b, a)


def color_to_hex(color: ColorKey) -> str:
    """RGBA tuple to lowercase hex string '#rrggbbaa'."""
    return f"#{color[0]:02x}{color[1]:02x}{color[2]:02x}{color[3]:02x}"


def assert_u8_rgba(image: np.ndarray) -> U8Rgba:
    """Validate a uint8 (H,W,4) image and return it typed as U8Rgba."""
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] != 4:
        raise TypeError("expected uint8 (H,W,4) image")
    return image  # type: ignore[return-value]


__all__ = [
    # aliases / types
    "ColorKey",
    "U8Rgba",
    "TileGrid",
    "TileTag",
    "TILE_IDS",
    # value objects
    "TileClass",
    "PaletteEntry",
    "Palette",
    "EMPTY",
    "HOOKABLE",
    "UNHOOKABLE",
    "FREEZE",
    "SPAWN",
    "START",
    "FINISH",
    # helpers
    "coerce_color_key",
    "color_to_hex",
    "assert_u8_rgba",
]
