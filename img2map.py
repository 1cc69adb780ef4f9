#!/usr/bin/env python3
"""
img2map.py
Convert images into DDNet map game layers by palette colour.

Usage:
  python img2map.py export-mappings
  python img2map.py convert INPUT [--output OUT.map] [--mappings FILE] [--tile-size N]
                            [--resize-filter nearest|triangle|catmull-rom|gaussian|lanczos3]
                            [--match exact|nearest] [--debug]
  python img2map.py convert-directory DIR [--output-dir OUT] [--jobs N] [same options]

Mappings:
  JSON: {"mapping": [{"color": [r, g, b, a], "tile": "Hookable"}, ...]}
  Tiles: Empty, Hookable, Unhookable, Freeze, Spawn, Start, Finish, {"Custom": n}.
  Run export-mappings for a starting template.

Output:
  <input>.map next to the input unless --output / --output-dir is given.
"""

from img2map.cli import run

if __name__ == "__main__":
    run()
