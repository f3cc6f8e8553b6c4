#!/usr/bin/env python3
"""
main.py - quick-start entry point.

Drop images into ``images/`` and run:

    python main.py batch

Or use the full CLI:

    python -m material_dither.cli batch --help
    python -m material_dither.cli single my_photo.jpg --method bayer-8
"""

from material_dither.cli import app

if __name__ == "__main__":
    app()
