#!/usr/bin/env python3
"""
Command-line interface for the ASCII Art Generator.

Converts an image file to ASCII art and optionally:
- Saves it as text or themed HTML
- Exports it as a rendered PNG
- Copies it to the clipboard
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .display import Display, OutputFile
from .errors import ASCIIArtError
from .exporter import ImageExporter, Theme
from .logging_setup import setup_logging
from .session import ConverterSession

logger = logging.getLogger(__name__)

# Advisory upload limit; larger files are converted but logged
MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class ASCIIArtApp:
    """
    Main application class for the ASCII Art Generator.

    Wires a ConverterSession to terminal output and files.
    """

    def __init__(
        self,
        theme: Theme = Theme.DARK,
        timeout: Optional[float] = None,
        display: Optional[Display] = None
    ):
        """
        Initialize the application.

        Args:
            theme: Color theme for PNG and HTML output
            timeout: Decode timeout in seconds
            display: Terminal display (stdout if None)
        """
        self.session = ConverterSession(theme=theme, timeout=timeout)
        self.display = display or Display()

    def load(self, image_path: str) -> bytes:
        with open(image_path, "rb") as f:
            data = f.read()

        if len(data) > MAX_UPLOAD_BYTES:
            logger.warning(
                "%s is %.1f MB, above the %d MB recommended limit",
                image_path, len(data) / (1024 * 1024), MAX_UPLOAD_BYTES // (1024 * 1024)
            )
        return data

    def convert_image(
        self,
        image_path: str,
        output_path: Optional[str] = None,
        html: bool = False,
        png_path: Optional[str] = None,
        copy: bool = False
    ) -> int:
        """
        Convert a single image file.

        Args:
            image_path: Path to input image
            output_path: Optional output file path
            html: Save as HTML instead of text
            png_path: Save a rendered PNG to this file or directory
            copy: Copy the text to the clipboard

        Returns:
            Exit code (0 for success)
        """
        try:
            data = self.load(image_path)
        except OSError as e:
            print(f"Error opening image: {e}", file=sys.stderr)
            return 1

        try:
            asyncio.run(self.session.convert(data))
        except ASCIIArtError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        ascii_art = self.session.art

        if output_path:
            if html:
                OutputFile.save_html(ascii_art, output_path, theme=self.session.theme)
            else:
                OutputFile.save_text(ascii_art, output_path)
            print(f"Saved to: {output_path}")
        else:
            self.display.render(ascii_art)

        if png_path is not None:
            export = self.session.export_image()
            try:
                saved = export.save(png_path)
            except OSError as e:
                print(f"Error saving image: {e}", file=sys.stderr)
                return 1
            print(f"Image saved to: {saved}")

        if copy:
            status = self.session.copy(self.display.copy_to_clipboard)
            print(status, file=sys.stderr)

        return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="ASCII Art Generator - Convert images to text art perfect for sharing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ascii-art photo.jpg                    Print ASCII art
  ascii-art photo.jpg -o art.txt         Save to a text file
  ascii-art photo.jpg --png              Export ascii-art.png
  ascii-art photo.jpg --png out/ --theme light
  ascii-art photo.jpg --copy             Copy to clipboard (OSC 52 terminals)
"""
    )

    parser.add_argument(
        "image",
        help="Image file to convert (PNG, JPG, GIF, ...)"
    )

    # Output options
    parser.add_argument(
        "-o", "--output",
        help="Output text file path"
    )
    parser.add_argument(
        "--html",
        action="store_true",
        help="Save as HTML styled with the theme"
    )
    parser.add_argument(
        "--png",
        nargs="?",
        const=ImageExporter.FILENAME,
        metavar="PATH",
        help=f"Export a rendered PNG (default: {ImageExporter.FILENAME})"
    )
    parser.add_argument(
        "--copy",
        action="store_true",
        help="Copy the ASCII art to the clipboard"
    )

    # Display options
    parser.add_argument(
        "-t", "--theme",
        choices=["dark", "light"],
        default="dark",
        help="Color theme for PNG and HTML output (default: dark)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Give up decoding after this many seconds"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else "WARNING")

    if args.html and not args.output:
        parser.error("--html requires --output")

    app = ASCIIArtApp(
        theme=Theme.from_name(args.theme),
        timeout=args.timeout
    )

    return app.convert_image(
        args.image,
        output_path=args.output,
        html=args.html,
        png_path=args.png,
        copy=args.copy
    )


if __name__ == "__main__":
    sys.exit(main())
