# img2map/palette_data.py
from __future__ import annotations

"""
Palette definitions and loaders.

Exports:
  DEFAULT_MAPPINGS: str            # built-in palette, JSON text
  parse_palette(text, source)  -> Palette
  load_palette(path=None)      -> Palette
  default_palette()            -> Palette
  palette_to_text(palette)     -> str

Palette text shape:
  {"mapping": [{"color": [r, g, b, a], "tile": TILE}, ...]}
  TILE is a tag name ("Hookable"), {"Custom": n} or a bare integer n.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, List, Optional

from .core_types import (
    Palette,
    PaletteEntry,
    TileClass,
    TileTag,
    coerce_color_key,
)
from .errors import ConfigError


DEFAULT_MAPPINGS: str = """\
{
  "mapping": [
    {"color": [0, 0, 0, 0], "tile": "Empty"},
    {"color": [255, 255, 255, 255], "tile": "Empty"},
    {"color": [0, 0, 0, 255], "tile": "Hookable"},
    {"color": [128, 128, 128, 255], "tile": "Unhookable"},
    {"color": [0, 0, 255, 255], "tile": "Freeze"},
    {"color": [255, 255, 0, 255], "tile": "Spawn"},
    {"color": [0, 255, 0, 255], "tile": "Start"},
    {"color": [255, 0, 0, 255], "tile": "Finish"}
  ]
}
"""

_TAGS_BY_NAME = {t.value: t for t in TileTag if t is not TileTag.CUSTOM}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_tile(raw: Any, where: str) -> TileClass:
    if isinstance(raw, str):
        tag = _TAGS_BY_NAME.get(raw)
        if tag is None:
            raise ConfigError(f"{where}: unknown tile {raw!r}")
        return TileClass(tag)
    if isinstance(raw, dict) and list(raw.keys()) == ["Custom"]:
        raw = raw["Custom"]
    if _is_int(raw):
        if not 0 <= raw <= 255:
            raise ConfigError(f"{where}: custom tile id out of range 0..255: {raw}")
        return TileClass.custom(raw)
    raise ConfigError(f"{where}: tile must be a tag name, {{\"Custom\": n}} or an integer")


def _parse_entry(raw: Any, where: str) -> PaletteEntry:
    if not isinstance(raw, dict) or "color" not in raw or "tile" not in raw:
        raise ConfigError(f"{where}: expected an object with 'color' and 'tile'")
    color = raw["color"]
    if (
        not isinstance(color, list)
        or len(color) != 4
        or not all(_is_int(c) and 0 <= c <= 255 for c in color)
    ):
        raise ConfigError(f"{where}: color must be four integers in 0..255")
    return PaletteEntry(coerce_color_key(color), _parse_tile(raw["tile"], where))


def parse_palette(text: str, source: str = "<text>") -> Palette:
    """Parse palette JSON text. Raises ConfigError on any shape mismatch."""
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{source}: invalid JSON ({exc})") from exc

    if not isinstance(doc, dict) or not isinstance(doc.get("mapping"), list):
        raise ConfigError(f"{source}: expected an object with a 'mapping' list")

    entries: List[PaletteEntry] = []
    for i, raw in enumerate(doc["mapping"]):
        entries.append(_parse_entry(raw, f"{source}: mapping[{i}]"))
    return Palette(tuple(entries))


@lru_cache(maxsize=1)
def default_palette() -> Palette:
    return parse_palette(DEFAULT_MAPPINGS, "<default>")


def load_palette(path: Optional[Path] = None) -> Palette:
    """Built-in palette when path is None, otherwise the parsed file."""
    if path is None:
        return default_palette()
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"mappings file not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"cannot read mappings file {path}: {exc}") from exc
    return parse_palette(text, str(path))


def palette_to_text(palette: Palette) -> str:
    """Serialise a palette to the JSON shape accepted by parse_palette."""
    lines = []
    for entry in palette:
        tile = entry.tile
        tile_json = (
            json.dumps({"Custom": tile.custom_id})
            if tile.tag is TileTag.CUSTOM
            else json.dumps(tile.tag.value)
        )
        lines.append(f'    {{"color": {json.dumps(list(entry.color))}, "tile": {tile_json}}}')
    body = ",\n".join(lines)
    if not body:
        return '{\n  "mapping": []\n}\n'
    return '{\n  "mapping": [\n' + body + "\n  ]\n}\n"


__all__ = [
    "DEFAULT_MAPPINGS",
    "parse_palette",
    "load_palette",
    "default_palette",
    "palette_to_text",
]
