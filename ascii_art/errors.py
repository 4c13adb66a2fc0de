"""
Exception hierarchy for ASCII art conversion and export.
"""


class ASCIIArtError(Exception):
    """Base class for all errors raised by this package."""


class ConversionError(ASCIIArtError):
    """An image could not be turned into ASCII art."""


class DecodeError(ConversionError):
    """Input bytes are not a decodable image."""


class InvalidImageError(ConversionError):
    """Decoded image has zero width or height."""


class ConversionInProgressError(ConversionError):
    """A conversion was started while another one is still loading."""


class ClipboardError(ASCIIArtError):
    """The clipboard could not be written."""
