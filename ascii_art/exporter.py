"""
Export module for ASCII art.

Renders ASCII text back into a PNG image using a monospace layout and
a dark or light color theme.
"""

import io
import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

from PIL import Image, ImageDraw, ImageFont

from .converter import GlyphGrid

logger = logging.getLogger(__name__)


class Theme(Enum):
    """Background and foreground colors for rendered output."""

    DARK = ("#111827", "#22c55e")
    LIGHT = ("#ffffff", "#1f2937")

    def __init__(self, background: str, foreground: str):
        self.background = background
        self.foreground = foreground

    @classmethod
    def from_name(cls, name: str) -> "Theme":
        return cls[name.upper()]

    def toggled(self) -> "Theme":
        return Theme.LIGHT if self is Theme.DARK else Theme.DARK


@dataclass(frozen=True)
class ExportImage:
    """An encoded image ready to be written to disk."""
    data: bytes
    width: int
    height: int
    filename: str = "ascii-art.png"

    def save(self, path: Optional[str] = None) -> str:
        """
        Write the image to disk.

        Args:
            path: Target file or directory (current directory if None)

        Returns:
            Path of the written file
        """
        if path is None:
            path = self.filename
        elif os.path.isdir(path):
            path = os.path.join(path, self.filename)

        with open(path, "wb") as f:
            f.write(self.data)

        logger.info("Saved %dx%d image to %s", self.width, self.height, path)
        return path


class ImageExporter:
    """
    Renders ASCII art to a PNG image.

    Glyph advance and line height are approximated from the font size
    rather than measured, so the canvas size depends only on the text.
    """

    FONT_SIZE = 8

    # Average monospace advance relative to the point size
    CHAR_WIDTH_RATIO = 0.6

    # Tight single-spaced line height
    LINE_HEIGHT_RATIO = 0.8

    FILENAME = "ascii-art.png"

    def __init__(
        self,
        font_size: int = FONT_SIZE,
        char_width_ratio: float = CHAR_WIDTH_RATIO,
        line_height_ratio: float = LINE_HEIGHT_RATIO,
        font_path: Optional[str] = None
    ):
        """
        Initialize the exporter.

        Args:
            font_size: Font size for rendering
            char_width_ratio: Glyph advance as a fraction of font_size
            line_height_ratio: Line height as a fraction of font_size
            font_path: Path to TTF font file (searches common fonts if None)
        """
        self.font_size = font_size
        self.char_width_ratio = char_width_ratio
        self.line_height_ratio = line_height_ratio
        self.font_path = font_path

        self.line_height = font_size * line_height_ratio

        self._font = self._load_font()

    def _load_font(self) -> Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]:
        """Load a monospace font."""
        if self.font_path:
            try:
                return ImageFont.truetype(self.font_path, self.font_size)
            except OSError:
                logger.warning("Could not load font %s, searching defaults", self.font_path)

        font_names = [
            "DejaVuSansMono.ttf",
            "LiberationMono-Regular.ttf",
            "UbuntuMono-R.ttf",
            "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
            "/usr/share/fonts/TTF/DejaVuSansMono.ttf",
            "Consolas",
            "Courier New",
        ]

        for font_name in font_names:
            try:
                return ImageFont.truetype(font_name, self.font_size)
            except OSError:
                continue

        logger.debug("No monospace TrueType font found, using Pillow default")
        try:
            # Pillow >= 10.1 can scale its bundled default font
            return ImageFont.load_default(size=self.font_size)
        except TypeError:
            return ImageFont.load_default()

    @staticmethod
    def _split_lines(grid: Union[GlyphGrid, str]) -> List[str]:
        if isinstance(grid, GlyphGrid):
            return list(grid.rows)
        # splitlines() drops the terminator after the last row
        return grid.splitlines()

    def canvas_size(self, lines: List[str]) -> Tuple[int, int]:
        """
        Compute the canvas size for the given lines, at least 1x1.

        Only real rows count toward the height. Splitting the text on
        every newline would add a blank row after the final terminator,
        which the browser widget this replaces did; here an L-row grid
        is exactly L line heights tall.
        """
        max_line_length = max((len(line) for line in lines), default=0)

        width = int(max_line_length * self.font_size * self.char_width_ratio)
        height = int(len(lines) * self.line_height)

        return max(1, width), max(1, height)

    def render_image(self, grid: Union[GlyphGrid, str], theme: Theme = Theme.DARK) -> Image.Image:
        """
        Render ASCII art to a PIL Image.

        Args:
            grid: GlyphGrid or its text
            theme: Color theme

        Returns:
            PIL Image of the rendered text
        """
        lines = self._split_lines(grid)
        width, height = self.canvas_size(lines)

        img = Image.new("RGB", (width, height), theme.background)
        draw = ImageDraw.Draw(img)

        # Default anchor is the top-left of the glyph box
        for index, line in enumerate(lines):
            draw.text((0, index * self.line_height), line, font=self._font, fill=theme.foreground)

        return img

    def render_to_image(self, grid: Union[GlyphGrid, str], theme: Theme = Theme.DARK) -> ExportImage:
        """
        Render ASCII art and encode it as PNG.

        Args:
            grid: GlyphGrid or its text
            theme: Color theme

        Returns:
            ExportImage named FILENAME
        """
        img = self.render_image(grid, theme)

        buf = io.BytesIO()
        img.save(buf, format="PNG")

        logger.debug("Rendered %dx%d PNG with %s theme", img.width, img.height, theme.name.lower())
        return ExportImage(data=buf.getvalue(), width=img.width, height=img.height, filename=self.FILENAME)
