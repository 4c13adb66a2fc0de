"""
Core ASCII conversion engine.

Converts images to ASCII art in two steps:
- Rasterizing the decoded image to a small RGBA pixel buffer
- Mapping each pixel's luminance to a glyph from a fixed ramp
"""

import asyncio
import io
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import DecodeError, InvalidImageError

logger = logging.getLogger(__name__)


# Glyphs ordered from densest (dark) to sparsest (light)
GLYPH_RAMP = "@#S%?*+;:,. "

# Rec. 601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


@dataclass(frozen=True)
class PixelBuffer:
    """Dense RGBA pixel data, 4 bytes per pixel in row-major order."""
    width: int
    height: int
    data: bytes

    def __post_init__(self):
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise ValueError(
                f"Pixel data length {len(self.data)} does not match "
                f"{self.width}x{self.height} RGBA ({expected})"
            )

    def as_array(self) -> np.ndarray:
        """Return a read-only (height, width, 4) uint8 view of the data."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape((self.height, self.width, 4))


@dataclass(frozen=True)
class GlyphGrid:
    """ASCII art as rows of equal length."""
    rows: Tuple[str, ...]

    @property
    def width(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    @property
    def height(self) -> int:
        return len(self.rows)

    @property
    def text(self) -> str:
        """Rows joined as plain text, each terminated by a newline."""
        return "".join(row + "\n" for row in self.rows)

    def __str__(self) -> str:
        return self.text

    @classmethod
    def from_text(cls, text: str) -> "GlyphGrid":
        return cls(rows=tuple(text.splitlines()))


def luminance(r: int, g: int, b: int) -> int:
    """Weighted brightness of an RGB sample, rounded half up to 0-255."""
    wr, wg, wb = LUMA_WEIGHTS
    return int(math.floor(wr * r + wg * g + wb * b + 0.5))


def brightness_to_index(brightness: int, ramp_length: int = len(GLYPH_RAMP)) -> int:
    """Map a brightness value (0-255) to a glyph ramp index."""
    return int(math.floor(brightness / 255 * (ramp_length - 1)))


class Rasterizer:
    """
    Decodes images and scales them down to a character-sized pixel buffer.

    Monospace character cells are taller than wide, so the height is
    squeezed by ASPECT_RATIO_CORRECTION to keep proportions on screen.
    """

    # Width cap in character columns, sized for messaging apps
    MAX_WIDTH = 60

    # Compensates for the tall aspect of monospace cells
    ASPECT_RATIO_CORRECTION = 0.4

    def __init__(
        self,
        max_width: int = MAX_WIDTH,
        aspect_correction: float = ASPECT_RATIO_CORRECTION
    ):
        """
        Initialize the rasterizer.

        Args:
            max_width: Maximum output width in pixels (one per character)
            aspect_correction: Vertical scale applied to the aspect ratio
        """
        self.max_width = max_width
        self.aspect_correction = aspect_correction

    def target_size(self, width: int, height: int) -> Tuple[int, int]:
        """
        Compute the output size for an image of the given natural size.

        Raises:
            InvalidImageError: If either dimension is zero
        """
        if width <= 0 or height <= 0:
            raise InvalidImageError(f"Image has no pixels ({width}x{height})")

        target_width = min(self.max_width, width)
        aspect_ratio = height / width
        target_height = math.floor(target_width * aspect_ratio * self.aspect_correction)

        # Very wide images would otherwise collapse to nothing
        return target_width, max(1, target_height)

    def decode(self, image_bytes: bytes) -> Image.Image:
        """
        Decode raw bytes into a fully loaded PIL Image.

        Raises:
            DecodeError: If the bytes are not a readable image
        """
        try:
            image = Image.open(io.BytesIO(image_bytes))
            # Force pixel decode so truncated data fails here
            image.load()
            image_format = image.format
            # Camera photos store rotation in EXIF; width and height follow it
            image = ImageOps.exif_transpose(image)
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            raise DecodeError(f"Could not decode image: {e}") from e

        logger.debug("Decoded %s image %dx%d", image_format, image.width, image.height)
        return image

    def rasterize_image(self, image: Image.Image) -> PixelBuffer:
        """
        Scale an already decoded image into an RGBA pixel buffer.

        Args:
            image: PIL Image to rasterize

        Returns:
            PixelBuffer at the target resolution
        """
        width, height = self.target_size(*image.size)

        resized = image.convert("RGBA").resize((width, height), Image.Resampling.BILINEAR)
        logger.debug("Rasterized %dx%d -> %dx%d", image.width, image.height, width, height)

        # Fully transparent pixels read as black, also when no resampling happened
        pixels = np.array(resized, dtype=np.uint8)
        pixels[pixels[..., 3] == 0, :3] = 0

        return PixelBuffer(width=width, height=height, data=pixels.tobytes())

    def rasterize(self, image_bytes: bytes) -> PixelBuffer:
        """
        Decode image bytes and rasterize them.

        Raises:
            DecodeError: If the bytes are not a readable image
            InvalidImageError: If the image has zero width or height
        """
        return self.rasterize_image(self.decode(image_bytes))

    def rasterize_file(self, filepath: str) -> PixelBuffer:
        """Read an image file and rasterize it."""
        try:
            with open(filepath, "rb") as f:
                data = f.read()
        except OSError as e:
            raise DecodeError(f"Could not read image file {filepath}: {e}") from e
        return self.rasterize(data)

    async def rasterize_async(
        self,
        image_bytes: bytes,
        timeout: Optional[float] = None
    ) -> PixelBuffer:
        """
        Rasterize in a worker thread without blocking the event loop.

        The worker gets its own executor, which is shut down without
        waiting, so a timed-out decode does not hold up asyncio.run().

        Args:
            image_bytes: Encoded image data
            timeout: Seconds to wait before giving up (None waits forever)

        Raises:
            DecodeError: If decoding fails or the timeout expires
        """
        loop = asyncio.get_running_loop()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ascii-art-decode")
        try:
            future = loop.run_in_executor(executor, self.rasterize, image_bytes)
            return await asyncio.wait_for(future, timeout)
        except asyncio.TimeoutError as e:
            raise DecodeError(f"Image decode timed out after {timeout}s") from e
        finally:
            executor.shutdown(wait=False)


class GlyphMapper:
    """Maps pixel luminance to characters from a dense-to-sparse ramp."""

    def __init__(self, ramp: str = GLYPH_RAMP):
        self.ramp = ramp
        self._glyphs = np.array(list(ramp))

    def index_for(self, brightness: int) -> int:
        return brightness_to_index(brightness, len(self.ramp))

    def glyph_for(self, r: int, g: int, b: int) -> str:
        """Map a single RGB sample to its glyph."""
        return self.ramp[self.index_for(luminance(r, g, b))]

    def map_to_glyphs(self, buffer: PixelBuffer) -> GlyphGrid:
        """
        Convert a pixel buffer to a grid of glyphs.

        Alpha is ignored. The result has one row per pixel row and one
        glyph per pixel.
        """
        pixels = buffer.as_array().astype(np.float64)
        wr, wg, wb = LUMA_WEIGHTS

        # Same operation order as luminance() so results match exactly
        luma = np.floor(wr * pixels[..., 0] + wg * pixels[..., 1] + wb * pixels[..., 2] + 0.5)
        indices = np.floor(luma / 255 * (len(self.ramp) - 1)).astype(np.intp)
        indices = np.clip(indices, 0, len(self.ramp) - 1)

        glyphs = self._glyphs[indices]
        rows = tuple("".join(row) for row in glyphs)

        return GlyphGrid(rows=rows)


class ASCIIConverter:
    """
    Converts images to ASCII art.

    Chains a Rasterizer and a GlyphMapper; holds no state between calls.
    """

    def __init__(
        self,
        rasterizer: Optional[Rasterizer] = None,
        mapper: Optional[GlyphMapper] = None
    ):
        self.rasterizer = rasterizer or Rasterizer()
        self.mapper = mapper or GlyphMapper()

    def convert(self, image_bytes: bytes) -> GlyphGrid:
        """
        Convert encoded image bytes to ASCII art.

        Args:
            image_bytes: Encoded image data (PNG, JPEG, GIF, ...)

        Returns:
            GlyphGrid with the ASCII art
        """
        return self.mapper.map_to_glyphs(self.rasterizer.rasterize(image_bytes))

    def convert_image(self, image: Image.Image) -> GlyphGrid:
        """Convert an already decoded PIL Image to ASCII art."""
        return self.mapper.map_to_glyphs(self.rasterizer.rasterize_image(image))

    def convert_from_file(self, filepath: str) -> GlyphGrid:
        """Load and convert an image file to ASCII art."""
        return self.mapper.map_to_glyphs(self.rasterizer.rasterize_file(filepath))

    async def convert_async(
        self,
        image_bytes: bytes,
        timeout: Optional[float] = None
    ) -> GlyphGrid:
        """Convert image bytes, awaiting the decode step."""
        buffer = await self.rasterizer.rasterize_async(image_bytes, timeout=timeout)
        grid = self.mapper.map_to_glyphs(buffer)
        logger.info("Converted image to %dx%d ASCII art", grid.width, grid.height)
        return grid
