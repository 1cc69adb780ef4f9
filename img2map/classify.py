# img2map/classify.py
from __future__ import annotations

"""
Colour classifiers.

Exports:
- Classifier                      : interface, classify(color) -> TileClass
- ExactClassifier(palette)        : dict lookup, unknown colours -> Empty
- NearestClassifier(palette)      : KD-tree over RGBA / 255, lowest index wins ties
- build_classifier(palette, mode) : pick one by name ("exact" | "nearest")

Notes:
- tile_ids(colors) classifies each distinct colour once and scatters the ids
  back, so per-pixel cost is a numpy gather.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Literal

import numpy as np
from numpy.typing import NDArray
from scipy.spatial import KDTree

from .core_types import EMPTY, ColorKey, Palette, TileClass

MatchMode = Literal["exact", "nearest"]
MATCH_MODES = ("exact", "nearest")


def pack_rgba(colors: NDArray[np.uint8]) -> NDArray[np.uint32]:
    """(N,4) uint8 -> (N,) uint32 keys, 0xRRGGBBAA."""
    c = colors.astype(np.uint32, copy=False)
    return (c[:, 0] << 24) | (c[:, 1] << 16) | (c[:, 2] << 8) | c[:, 3]


class Classifier(ABC):
    """Read-only after construction; safe to share across threads."""

    @abstractmethod
    def classify(self, color: ColorKey) -> TileClass:
        ...

    def tile_ids(self, colors: NDArray[np.uint8]) -> NDArray[np.uint8]:
        """Tile id per row of a (N,4) uint8 colour array, in input order."""
        colors = np.asarray(colors, dtype=np.uint8).reshape(-1, 4)
        if colors.shape[0] == 0:
            return np.zeros((0,), dtype=np.uint8)
        _uniq, first, inverse = np.unique(
            pack_rgba(colors), return_index=True, return_inverse=True
        )
        lut = self.unique_tile_ids(colors[first])
        return lut[inverse.reshape(-1)]

    def unique_tile_ids(self, colors: NDArray[np.uint8]) -> NDArray[np.uint8]:
        """Tile ids for distinct (N,4) colours. Subclasses may vectorise this."""
        lut = np.empty(colors.shape[0], dtype=np.uint8)
        for i, row in enumerate(colors.tolist()):
            lut[i] = self.classify(tuple(row)).tile_id
        return lut


class ExactClassifier(Classifier):
    def __init__(self, palette: Palette) -> None:
        table: Dict[ColorKey, TileClass] = {}
        for entry in palette:
            table[entry.color] = entry.tile  # later duplicates overwrite
        self._table = table

    def classify(self, color: ColorKey) -> TileClass:
        return self._table.get(tuple(color), EMPTY)  # type: ignore[arg-type]


class NearestClassifier(Classifier):
    """
    Nearest palette entry by squared Euclidean distance over r, g, b, a / 255.

    The tree only narrows the search. Candidates at the nearest distance are
    compared on exact integer distances and the lowest palette index wins, so
    ties never depend on tree traversal order.
    """

    def __init__(self, palette: Palette) -> None:
        self._tiles: List[TileClass] = [e.tile for e in palette]
        self._ids = np.array([t.tile_id for t in self._tiles], dtype=np.uint8)
        self._colors = palette.colors_u8().astype(np.int64)
        self._tree = (
            KDTree(self._colors.astype(np.float64) / 255.0) if len(self._tiles) else None
        )

    def nearest_index(self, color: ColorKey) -> int:
        """Palette index of the nearest entry. Requires a non-empty palette."""
        if self._tree is None:
            raise ValueError("empty palette")
        query = np.asarray(color, dtype=np.float64) / 255.0
        dist, _idx = self._tree.query(query, k=1)
        radius = float(dist) * (1.0 + 1e-9) + 1e-12
        candidates = self._tree.query_ball_point(query, r=radius, return_sorted=True)
        cand = np.asarray(sorted(candidates), dtype=np.int64)
        diff = self._colors[cand] - np.asarray(color, dtype=np.int64)
        d2 = np.sum(diff * diff, axis=1)
        # argmin returns the first minimum; cand is ascending
        return int(cand[int(np.argmin(d2))])

    def classify(self, color: ColorKey) -> TileClass:
        if self._tree is None:
            return EMPTY
        return self._tiles[self.nearest_index(color)]

    def nearest_indices(self, colors: NDArray[np.uint8]) -> NDArray[np.int64]:
        """Palette index per row of a (N,4) colour array, one batched tree query."""
        if self._tree is None:
            raise ValueError("empty palette")
        colors = np.asarray(colors, dtype=np.uint8).reshape(-1, 4)
        if colors.shape[0] == 0:
            return np.zeros((0,), dtype=np.int64)
        k = min(2, len(self._tiles))
        dist, idx = self._tree.query(colors.astype(np.float64) / 255.0, k=k)
        if k == 1:
            return np.asarray(idx, dtype=np.int64).reshape(-1)
        best = idx[:, 0].astype(np.int64)
        # rows whose runner-up is as close get the exact integer re-score
        tied = dist[:, 1] <= dist[:, 0] * (1.0 + 1e-9) + 1e-12
        for row in np.flatnonzero(tied).tolist():
            best[row] = self.nearest_index(tuple(colors[row].tolist()))
        return best

    def unique_tile_ids(self, colors: NDArray[np.uint8]) -> NDArray[np.uint8]:
        if self._tree is None:
            return np.full(colors.shape[0], EMPTY.tile_id, dtype=np.uint8)
        return self._ids[self.nearest_indices(colors)]


def build_classifier(palette: Palette, mode: MatchMode = "exact") -> Classifier:
    if mode == "exact":
        return ExactClassifier(palette)
    if mode == "nearest":
        return NearestClassifier(palette)
    raise ValueError(f"unknown match mode {mode!r}; expected one of {MATCH_MODES}")


__all__ = [
    "MatchMode",
    "MATCH_MODES",
    "pack_rgba",
    "Classifier",
    "ExactClassifier",
    "NearestClassifier",
    "build_classifier",
]
