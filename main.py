#!/usr/bin/env python3
"""
ASCII Art Generator - convert images to text art perfect for sharing.

Quick start:
    python main.py image.jpg                  # Print ASCII art
    python main.py image.jpg --png            # Export ascii-art.png
    python main.py image.jpg --theme light    # Light theme export

For more options: python main.py --help
"""

import sys

from ascii_art.cli import main

if __name__ == "__main__":
    sys.exit(main())
