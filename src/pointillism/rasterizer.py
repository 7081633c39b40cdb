"""Binary disk rasterization against image bounds.

A pixel (x, y) belongs to a disk centered at (cx, cy) with radius r iff

    sqrt((cx - x)^2 + (cy - y)^2) < r

Candidates come from the box [cx - R, cx + R] × [cy - R, cy + R] with
R = int(r), clipped to the image bounds. The box is inclusive on both ends:
every integer offset strictly inside the circle satisfies |dx| <= int(r), so
the box always covers the whole disk and membership stays symmetric about
the center.

No antialiasing and no randomness: membership is a pure function of
(center, radius, bounds).

Edge cases:
    - radius 0 → no pixels
    - disk fully outside bounds → no pixels after clipping
    - negative radius is not validated here (schedules reject it)
"""

from typing import Tuple

import numpy as np

from .types import Bounds, Disk


def _clipped_box(disk: Disk, bounds: Bounds) -> Tuple[int, int, int, int]:
    """Half-open [x0, x1) × [y0, y1) candidate box, clipped to bounds."""
    r = int(disk.radius)
    x0 = max(disk.x - r, bounds.min_x)
    y0 = max(disk.y - r, bounds.min_y)
    x1 = min(disk.x + r + 1, bounds.max_x)
    y1 = min(disk.y + r + 1, bounds.max_y)
    return x0, y0, max(x0, x1), max(y0, y1)


def disk_mask(disk: Disk, bounds: Bounds) -> Tuple[int, int, np.ndarray]:
    """Boolean coverage of a disk over its clipped bounding box.

    Parameters
    ----------
    disk : Disk
        Disk to rasterize
    bounds : Bounds
        Image bounds to clip against

    Returns
    -------
    tuple
        (x0, y0, mask) where mask has shape (h, w) and mask[j, i] tells
        whether pixel (x0 + i, y0 + j) is covered. mask may be empty.
    """
    x0, y0, x1, y1 = _clipped_box(disk, bounds)

    ys, xs = np.meshgrid(
        np.arange(y0, y1, dtype=np.int64),
        np.arange(x0, x1, dtype=np.int64),
        indexing='ij'
    )
    dx = disk.x - xs
    dy = disk.y - ys
    dist = np.sqrt((dx * dx + dy * dy).astype(np.float64))

    return x0, y0, dist < disk.radius


def points_in_disk(disk: Disk, bounds: Bounds) -> np.ndarray:
    """Pixel coordinates covered by a disk.

    Parameters
    ----------
    disk : Disk
        Disk to rasterize
    bounds : Bounds
        Image bounds to clip against

    Returns
    -------
    np.ndarray
        (N, 2) int64 array of (x, y) pairs, x-major order (x outer, y inner)
    """
    x0, y0, mask = disk_mask(disk, bounds)

    # argwhere on the transpose walks x first, then y
    points = np.argwhere(mask.T)
    points[:, 0] += x0
    points[:, 1] += y0
    return points
