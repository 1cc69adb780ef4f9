# img2map/errors.py
"""
Error types raised by the conversion pipeline.

`fatal` errors affect every file of a run identically (palette, template,
directories) and abort a batch. The others are scoped to one input file.
"""


class Img2MapError(Exception):
    fatal = False


class ConfigError(Img2MapError):
    """Palette file missing, unreadable, or malformed."""

    fatal = True


class TemplateError(Img2MapError):
    """Empty map template could not be built."""

    fatal = True


class DirectoryError(Img2MapError):
    """Input directory unreadable or output directory uncreatable."""

    fatal = True


class ImageDecodeError(Img2MapError):
    """Input is not a readable image."""


class WriteError(Img2MapError):
    """Map could not be serialised or written."""


__all__ = [
    "Img2MapError",
    "ConfigError",
    "TemplateError",
    "DirectoryError",
    "ImageDecodeError",
    "WriteError",
]
