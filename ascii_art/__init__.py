"""
ASCII Art Generator - convert images to text art perfect for sharing

Converts an uploaded image to ASCII art with:
- A fixed 12-glyph density ramp and 60-column width cap
- Aspect correction for monospace character cells
- PNG export in dark or light themes
- Clipboard copy with status tracking
"""

__version__ = "1.0.0"

from .converter import (
    GLYPH_RAMP,
    ASCIIConverter,
    GlyphGrid,
    GlyphMapper,
    PixelBuffer,
    Rasterizer,
    brightness_to_index,
    luminance,
)
from .display import Display, OutputFile
from .errors import (
    ASCIIArtError,
    ClipboardError,
    ConversionError,
    ConversionInProgressError,
    DecodeError,
    InvalidImageError,
)
from .exporter import ExportImage, ImageExporter, Theme
from .session import ConverterSession, CopyStatus

__all__ = [
    # Core
    "GLYPH_RAMP",
    "ASCIIConverter",
    "GlyphGrid",
    "GlyphMapper",
    "PixelBuffer",
    "Rasterizer",
    "brightness_to_index",
    "luminance",
    # Export
    "ExportImage",
    "ImageExporter",
    "Theme",
    # Shell
    "ConverterSession",
    "CopyStatus",
    "Display",
    "OutputFile",
    # Errors
    "ASCIIArtError",
    "ClipboardError",
    "ConversionError",
    "ConversionInProgressError",
    "DecodeError",
    "InvalidImageError",
]
