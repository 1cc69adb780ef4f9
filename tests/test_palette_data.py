"""Palette parsing, loading and the built-in default."""
import json

import pytest

from img2map.core_types import EMPTY, FREEZE, HOOKABLE, TileClass
from img2map.errors import ConfigError
from img2map.palette_data import (
    DEFAULT_MAPPINGS,
    default_palette,
    load_palette,
    palette_to_text,
    parse_palette,
)


def test_default_mappings_parse():
    palette = parse_palette(DEFAULT_MAPPINGS)
    assert len(palette) > 0
    assert load_palette() == palette
    assert default_palette() is default_palette()


def test_default_mappings_round_trip_verbatim():
    assert palette_to_text(default_palette()) == DEFAULT_MAPPINGS


def test_parse_all_tile_forms():
    text = json.dumps(
        {
            "mapping": [
                {"color": [255, 0, 0, 255], "tile": "Hookable"},
                {"color": [0, 0, 0, 0], "tile": "Freeze"},
                {"color": [1, 2, 3, 4], "tile": {"Custom": 42}},
                {"color": [5, 6, 7, 8], "tile": 200},
                {"color": [9, 9, 9, 9], "tile": "Empty"},
            ]
        }
    )
    palette = parse_palette(text)
    assert [e.color for e in palette] == [
        (255, 0, 0, 255),
        (0, 0, 0, 0),
        (1, 2, 3, 4),
        (5, 6, 7, 8),
        (9, 9, 9, 9),
    ]
    assert [e.tile for e in palette] == [
        HOOKABLE,
        FREEZE,
        TileClass.custom(42),
        TileClass.custom(200),
        EMPTY,
    ]


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[]",
        '{"mapping": {}}',
        '{"other": []}',
        '{"mapping": [{"color": [1, 2, 3], "tile": "Hookable"}]}',
        '{"mapping": [{"color": [1, 2, 3, 256], "tile": "Hookable"}]}',
        '{"mapping": [{"color": [1, 2, 3, true], "tile": "Hookable"}]}',
        '{"mapping": [{"color": "red", "tile": "Hookable"}]}',
        '{"mapping": [{"color": [1, 2, 3, 4], "tile": "Lava"}]}',
        '{"mapping": [{"color": [1, 2, 3, 4], "tile": {"Custom": 999}}]}',
        '{"mapping": [{"color": [1, 2, 3, 4], "tile": {"Custom": 1, "x": 2}}]}',
        '{"mapping": [{"color": [1, 2, 3, 4]}]}',
        '{"mapping": [[1, 2, 3, 4]]}',
    ],
)
def test_malformed_text_raises_config_error(text):
    with pytest.raises(ConfigError):
        parse_palette(text)


def test_error_message_names_source_and_entry():
    with pytest.raises(ConfigError, match=r"my\.json: mapping\[1\]"):
        parse_palette(
            '{"mapping": [{"color": [0,0,0,0], "tile": "Empty"}, {"color": 1, "tile": "Empty"}]}',
            "my.json",
        )


def test_load_from_file(tmp_path):
    path = tmp_path / "mappings.json"
    path.write_text('{"mapping": [{"color": [255, 0, 0, 255], "tile": "Hookable"}]}')
    palette = load_palette(path)
    assert [(e.color, e.tile) for e in palette] == [((255, 0, 0, 255), HOOKABLE)]


def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_palette(tmp_path / "nope.json")


def test_load_directory_is_config_error(tmp_path):
    with pytest.raises(ConfigError):
        load_palette(tmp_path)


def test_palette_to_text_round_trip_with_custom():
    text = '{"mapping": [{"color": [1, 2, 3, 4], "tile": {"Custom": 3}}]}'
    palette = parse_palette(text)
    assert parse_palette(palette_to_text(palette)) == palette
