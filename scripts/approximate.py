#!/usr/bin/env python3
"""Approximate an image with semi-transparent disks (script wrapper).

Same interface as the ``pointillism`` console command; see
src/pointillism/cli.py for the full option list.

Usage:
    python scripts/approximate.py --in photo.png --out approx.png -n 5000 -r 6 -a 0.5 -s 42
    python scripts/approximate.py --config configs/approximate_v1.yaml --in photo.jpg --out approx.jpg
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.pointillism.cli import main  # noqa: E402
from src.utils import logging_config  # noqa: E402


if __name__ == '__main__':
    logging_config.install_excepthook()
    sys.exit(main())
