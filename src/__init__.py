"""Pointillism: approximate raster images with semi-transparent disks.

Stamps disks of sampled source color onto a 16-bit canvas, producing a
stippled reconstruction of the source image.

Architecture layers (strict one-way dependency):
    scripts/ → src/pointillism/ → src/utils/

Key invariants:
    - 16-bit channels end-to-end; 8-bit only for 8-bit sources and JPEG
    - Sources are premultiplied; paint colors are straight
    - Disk order is part of the output (overlaps composite in sequence)
    - Same seed + same parameters → byte-identical canvas
"""

__version__ = "1.0.0"
