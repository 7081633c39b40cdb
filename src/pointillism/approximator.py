"""Approximation driver: stamps sampled colors onto the canvas, disk by disk.

For each disk, in order:
    1. Sample the source's premultiplied color at the disk center
    2. Un-premultiply R, G, B (skipped when the sampled alpha is 0)
    3. Replace alpha with the run-wide global alpha
    4. Rasterize the disk against the canvas bounds
    5. Composite the paint over every covered canvas pixel

Ordering:
    - Disks are applied strictly in sequence; overlapping disks composite
      onto each other's results, so disk order is visible in the output
    - Pixels within one disk are disjoint and are composited as one
      vectorised batch

The canvas is passed in explicitly and mutated in place; nothing else writes
to it during a run.
"""

import logging
from typing import Iterable

import numpy as np

from src.utils.color import MAX_CHANNEL
from src.utils.profiler import TimerAccumulator
from .compositor import over
from .errors import InvalidParameterError
from .rasterizer import points_in_disk
from .types import Disk, Raster

logger = logging.getLogger(__name__)


def check_alpha(alpha: float) -> None:
    """Reject a global alpha outside [0, 1] (NaN included)."""
    if not 0.0 <= alpha <= 1.0:
        raise InvalidParameterError(f"Alpha must be between zero and one, got {alpha}")


def paint_color(sample: np.ndarray, alpha: float) -> np.ndarray:
    """Derive the straight paint color for one disk.

    Parameters
    ----------
    sample : np.ndarray
        Premultiplied (4,) uint16 source sample
    alpha : float
        Global alpha in [0, 1]

    Returns
    -------
    np.ndarray
        Straight (4,) uint16 paint color with alpha = trunc(alpha * 0xFFFF)

    Notes
    -----
    Un-premultiplying divides by ``a / 0xFFFF`` in float64 and truncates;
    the result is clipped to the channel range. A fully transparent sample
    keeps its (zero) color channels.
    """
    r, g, b, a = (int(v) for v in sample)

    if a > 0:
        factor = a / MAX_CHANNEL
        r = min(int(r / factor), MAX_CHANNEL)
        g = min(int(g / factor), MAX_CHANNEL)
        b = min(int(b / factor), MAX_CHANNEL)

    return np.array([r, g, b, int(alpha * MAX_CHANNEL)], dtype=np.uint16)


def stamp(canvas: Raster, disk: Disk, paint: np.ndarray) -> int:
    """Composite ``paint`` over every canvas pixel covered by ``disk``.

    Returns
    -------
    int
        Number of pixels written
    """
    points = points_in_disk(disk, canvas.bounds)
    if len(points) == 0:
        return 0

    cols = points[:, 0] - canvas.bounds.min_x
    rows = points[:, 1] - canvas.bounds.min_y
    canvas.pixels[rows, cols] = over(paint, canvas.pixels[rows, cols])
    return len(points)


def approximate(
    source: Raster,
    canvas: Raster,
    alpha: float,
    disks: Iterable[Disk]
) -> int:
    """Approximate ``source`` onto ``canvas`` with the given disks.

    Parameters
    ----------
    source : Raster
        Premultiplied 16-bit source image
    canvas : Raster
        Destination buffer, mutated in place
    alpha : float
        Global paint alpha in [0, 1], applied to every disk
    disks : Iterable[Disk]
        Disk sequence, consumed once in order

    Returns
    -------
    int
        Number of disks applied

    Raises
    ------
    InvalidParameterError
        If alpha is outside [0, 1] (raised before any disk is drawn)
    SampleOutOfBoundsError
        If a disk center lies outside the source bounds
    """
    check_alpha(alpha)

    logger.info(
        f"Approximating {source!r} onto {canvas!r} (alpha={alpha})"
    )

    disk_timer = TimerAccumulator("disk")
    applied = 0
    covered = 0

    for disk in disks:
        with disk_timer.measure():
            paint = paint_color(source.at(disk.x, disk.y), alpha)
            written = stamp(canvas, disk, paint)

        logger.debug(
            f"Disk {applied}: center=({disk.x}, {disk.y}) r={disk.radius:.3f} "
            f"paint={paint.tolist()} pixels={written}"
        )
        applied += 1
        covered += written

    logger.info(
        f"Applied {applied} disk(s), {covered} pixel composite(s), "
        f"mean {disk_timer.mean() * 1e3:.3f} ms/disk"
    )
    return applied
