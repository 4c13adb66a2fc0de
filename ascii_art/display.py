"""
Terminal display module for ASCII art.

Handles terminal output, clipboard copy through terminal escape codes,
and saving the art as text or HTML.
"""

import base64
import html
import logging
import sys

from .errors import ClipboardError
from .exporter import Theme

logger = logging.getLogger(__name__)


class Display:
    """
    Terminal display manager for ASCII art output.
    """

    # OSC 52 sets the system clipboard via the terminal emulator
    CLIPBOARD_SET = "\033]52;c;{payload}\a"

    def __init__(self, output_stream=None):
        """
        Initialize display.

        Args:
            output_stream: Output stream (defaults to stdout)
        """
        self.output = output_stream or sys.stdout

    def render(self, content: str):
        """
        Write ASCII art to the output stream.

        Args:
            content: ASCII art string to display
        """
        self.output.write(content)
        if not content.endswith("\n"):
            self.output.write("\n")
        self.output.flush()

    def is_terminal(self) -> bool:
        isatty = getattr(self.output, "isatty", None)
        return bool(isatty and isatty())

    def copy_to_clipboard(self, text: str):
        """
        Copy text to the system clipboard.

        Uses the OSC 52 escape sequence, which most modern terminals
        (and tmux with set-clipboard on) forward to the clipboard.

        Raises:
            ClipboardError: If output is not a terminal or the write fails
        """
        if not self.is_terminal():
            raise ClipboardError("Clipboard copy needs an interactive terminal")

        payload = base64.b64encode(text.encode("utf-8")).decode("ascii")
        try:
            self.output.write(self.CLIPBOARD_SET.format(payload=payload))
            self.output.flush()
        except (OSError, ValueError) as e:
            # ValueError comes from a closed stream
            raise ClipboardError(f"Could not write to terminal: {e}") from e

        logger.debug("Copied %d characters to clipboard", len(text))


class OutputFile:
    """
    Save ASCII art to files.

    Supports plain text and HTML output.
    """

    @staticmethod
    def save_text(content: str, filepath: str):
        """
        Save ASCII art to a text file.

        Args:
            content: ASCII art string
            filepath: Output file path
        """
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(content)

    @staticmethod
    def save_html(
        content: str,
        filepath: str,
        theme: Theme = Theme.DARK,
        title: str = "ASCII Art",
        font_size: int = 8
    ):
        """
        Save ASCII art as an HTML page styled with the theme colors.

        Args:
            content: ASCII art string
            filepath: Output file path
            theme: Color theme for background and text
            title: HTML page title
            font_size: Font size in pixels
        """
        page = f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{html.escape(title)}</title>
    <style>
        body {{
            background-color: {theme.background};
            margin: 20px;
        }}
        pre.ascii-art {{
            color: {theme.foreground};
            font-family: 'Courier New', Consolas, monospace;
            font-size: {font_size}px;
            line-height: 1.0;
            white-space: pre;
        }}
    </style>
</head>
<body>
    <pre class="ascii-art">{html.escape(content)}</pre>
</body>
</html>"""

        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(page)
