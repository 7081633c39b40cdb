"""Disk placement schedules.

Policies:
    - uniform: n disks of one fixed radius at uniformly random centers
    - decreasing: n disks whose radius falls linearly from start to end

Both return a lazy, finite generator of Disk objects. Parameters are checked
eagerly, when the schedule is built, so an invalid request fails before the
first disk is drawn (and before any canvas work).

Centers are drawn uniformly over the full image rectangle, x first then y,
regardless of the current radius; disks near the edges are simply clipped
by the rasterizer.

Determinism:
    - All randomness comes from the supplied numpy RandomState
    - Same seed + same parameters → same disk sequence
"""

import logging
from typing import Iterator, Optional, Tuple

import numpy as np

from .errors import InvalidParameterError
from .types import Bounds, Disk

logger = logging.getLogger(__name__)

SCHEDULES = ('uniform', 'decreasing')


def _check_count(n: int) -> None:
    if n < 0:
        raise InvalidParameterError(f"Disk count must be nonnegative, got {n}")


def _check_radius(name: str, r: float) -> None:
    if not r >= 0:
        raise InvalidParameterError(f"{name} must be nonnegative, got {r}")


def _check_bounds(bounds: Bounds, n: int) -> None:
    if n > 0 and bounds.is_empty:
        raise InvalidParameterError(
            f"Cannot place {n} disk(s) on an empty {bounds.width}x{bounds.height} image"
        )


def uniform_point(bounds: Bounds, rng: np.random.RandomState) -> Tuple[int, int]:
    """Draw a pixel coordinate uniformly from bounds (x first, then y)."""
    x = bounds.min_x + int(rng.randint(0, bounds.width))
    y = bounds.min_y + int(rng.randint(0, bounds.height))
    return x, y


def uniform_disks(
    bounds: Bounds,
    n: int,
    radius: float,
    rng: np.random.RandomState
) -> Iterator[Disk]:
    """Schedule ``n`` disks of constant radius at random centers.

    Parameters
    ----------
    bounds : Bounds
        Image rectangle to draw centers from
    n : int
        Number of disks, >= 0
    radius : float
        Radius of every disk, >= 0
    rng : np.random.RandomState
        Seeded random source

    Returns
    -------
    Iterator[Disk]
        Lazy sequence of exactly ``n`` disks

    Raises
    ------
    InvalidParameterError
        If n < 0, radius < 0, or n > 0 on an empty image
    """
    _check_count(n)
    _check_radius("Radius", radius)
    _check_bounds(bounds, n)

    def generate() -> Iterator[Disk]:
        for _ in range(n):
            x, y = uniform_point(bounds, rng)
            yield Disk(x, y, float(radius))

    return generate()


def decreasing_disks(
    bounds: Bounds,
    n: int,
    start_radius: float,
    end_radius: float,
    rng: np.random.RandomState
) -> Iterator[Disk]:
    """Schedule ``n`` disks whose radius decreases linearly.

    Disk ``i`` gets radius ``start - i * (start - end) / (n - 1)``; the first
    disk has exactly ``start_radius`` and, when ``n > 1``, the last has
    exactly ``end_radius``. With ``n == 1`` the single disk uses
    ``start_radius``.

    Parameters
    ----------
    bounds : Bounds
        Image rectangle to draw centers from
    n : int
        Number of disks, >= 0
    start_radius, end_radius : float
        Radius of the first and last disk, both >= 0
    rng : np.random.RandomState
        Seeded random source

    Returns
    -------
    Iterator[Disk]
        Lazy sequence of exactly ``n`` disks

    Raises
    ------
    InvalidParameterError
        If n < 0, either radius < 0, or n > 0 on an empty image
    """
    _check_count(n)
    _check_radius("Start radius", start_radius)
    _check_radius("End radius", end_radius)
    _check_bounds(bounds, n)

    radii = np.linspace(start_radius, end_radius, n)

    def generate() -> Iterator[Disk]:
        for r in radii:
            x, y = uniform_point(bounds, rng)
            yield Disk(x, y, float(r))

    return generate()


def build_schedule(
    name: str,
    bounds: Bounds,
    n: int,
    rng: np.random.RandomState,
    radius: Optional[float] = None,
    start_radius: Optional[float] = None,
    end_radius: Optional[float] = None
) -> Iterator[Disk]:
    """Build a schedule by name ("uniform" or "decreasing").

    The uniform schedule needs ``radius``; the decreasing schedule needs
    ``start_radius`` and ``end_radius``.
    """
    if name == 'uniform':
        if radius is None:
            raise InvalidParameterError("Uniform schedule requires a radius")
        logger.debug(f"Uniform schedule: n={n}, r={radius}")
        return uniform_disks(bounds, n, radius, rng)

    if name == 'decreasing':
        if start_radius is None or end_radius is None:
            raise InvalidParameterError(
                "Decreasing schedule requires start_radius and end_radius"
            )
        logger.debug(f"Decreasing schedule: n={n}, r={start_radius}→{end_radius}")
        return decreasing_disks(bounds, n, start_radius, end_radius, rng)

    raise InvalidParameterError(f"Unknown schedule '{name}'; use one of {SCHEDULES}")
