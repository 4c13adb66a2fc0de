"""
Conversion session state.

Holds the current ASCII art, theme, loading flag and copy status for one
user, independent of how they are displayed.
"""

import logging
import time
from typing import Callable, Optional

from .converter import ASCIIConverter, GlyphGrid
from .errors import ASCIIArtError, ConversionInProgressError
from .exporter import ExportImage, ImageExporter, Theme

logger = logging.getLogger(__name__)


class CopyStatus:
    """Labels shown for the copy action."""
    IDLE = "Copy"
    COPIED = "Copied!"
    FAILED = "Failed"


class ConverterSession:
    """
    Keeps the latest conversion result and related UI state.

    A failed conversion never replaces an earlier result. Copy status
    reverts to idle STATUS_RESET_SECONDS after each copy attempt.
    """

    STATUS_RESET_SECONDS = 2.0

    def __init__(
        self,
        converter: Optional[ASCIIConverter] = None,
        exporter: Optional[ImageExporter] = None,
        theme: Theme = Theme.DARK,
        timeout: Optional[float] = None,
        status_reset_seconds: float = STATUS_RESET_SECONDS,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the session.

        Args:
            converter: Image to ASCII converter
            exporter: ASCII to PNG exporter (created on first export if None)
            theme: Initial color theme
            timeout: Decode timeout in seconds (None waits forever)
            status_reset_seconds: Delay before copy status reverts
            clock: Monotonic time source
        """
        self.converter = converter or ASCIIConverter()
        self._exporter = exporter
        self.theme = theme
        self.timeout = timeout
        self.status_reset_seconds = status_reset_seconds
        self._clock = clock

        self.grid: Optional[GlyphGrid] = None
        self.loading = False
        self._copy_status = CopyStatus.IDLE
        self._status_expires = 0.0

    @property
    def art(self) -> str:
        """Current ASCII art text, empty before the first conversion."""
        return self.grid.text if self.grid is not None else ""

    @property
    def exporter(self) -> ImageExporter:
        if self._exporter is None:
            self._exporter = ImageExporter()
        return self._exporter

    @property
    def copy_status(self) -> str:
        if self._copy_status != CopyStatus.IDLE and self._clock() >= self._status_expires:
            self._copy_status = CopyStatus.IDLE
        return self._copy_status

    def _set_copy_status(self, status: str):
        self._copy_status = status
        self._status_expires = self._clock() + self.status_reset_seconds

    async def convert(self, image_bytes: bytes) -> GlyphGrid:
        """
        Convert an image and store the result.

        Raises:
            ConversionInProgressError: If a conversion is already loading
            ConversionError: If the image cannot be converted; the
                previous result is kept
        """
        if self.loading:
            raise ConversionInProgressError("A conversion is already in progress")

        self.loading = True
        self._copy_status = CopyStatus.IDLE
        try:
            grid = await self.converter.convert_async(image_bytes, timeout=self.timeout)
        except ASCIIArtError as e:
            logger.error("Error processing image: %s", e)
            raise
        finally:
            self.loading = False

        self.grid = grid
        return grid

    def toggle_theme(self) -> Theme:
        self.theme = self.theme.toggled()
        return self.theme

    def copy(self, writer: Callable[[str], None]) -> str:
        """
        Copy the current art using the given clipboard writer.

        Args:
            writer: Callable that places text on a clipboard

        Returns:
            The new copy status
        """
        if not self.art:
            return self.copy_status

        # Any writer failure is a failed copy; the art itself is unaffected
        try:
            writer(self.art)
        except Exception as e:
            logger.warning("Clipboard write failed: %s", e)
            self._set_copy_status(CopyStatus.FAILED)
        else:
            self._set_copy_status(CopyStatus.COPIED)

        return self._copy_status

    def export_image(self) -> Optional[ExportImage]:
        """Render the current art as PNG with the current theme."""
        if self.grid is None:
            return None
        return self.exporter.render_to_image(self.grid, self.theme)
