"""Value types shared by the approximation core.

Types:
    - Bounds: integer pixel rectangle [min_x, max_x) × [min_y, max_y)
    - Disk: immutable (x, y, radius) paint mask
    - Raster: mutable (H, W, 4) uint16 RGBA buffer anchored at Bounds

Coordinate frame:
    - Image frame (top-left origin, +Y down), integer pixel coordinates
    - Raster.pixels is indexed [y - min_y, x - min_x]

Rasters store 16-bit channels; what those channels mean (straight or
premultiplied) is decided by whoever fills them. Sources are premultiplied;
canvases hold exactly what the compositor returns.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from src.utils.color import MAX_CHANNEL
from .errors import SampleOutOfBoundsError


@dataclass(frozen=True)
class Bounds:
    """Half-open integer pixel rectangle."""

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @classmethod
    def from_size(cls, width: int, height: int) -> 'Bounds':
        return cls(0, 0, width, height)

    @property
    def width(self) -> int:
        return max(0, self.max_x - self.min_x)

    @property
    def height(self) -> int:
        return max(0, self.max_y - self.min_y)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def contains(self, x: int, y: int) -> bool:
        return self.min_x <= x < self.max_x and self.min_y <= y < self.max_y


@dataclass(frozen=True)
class Disk:
    """Filled circle used as a binary paint mask.

    Attributes
    ----------
    x, y : int
        Center pixel coordinate
    radius : float
        Radius in pixels, >= 0 (validated by the schedules that create disks)
    """

    x: int
    y: int
    radius: float


class Raster:
    """Mutable 16-bit RGBA pixel buffer with explicit bounds.

    Attributes
    ----------
    pixels : np.ndarray
        (H, W, 4) uint16 channel data
    bounds : Bounds
        Pixel rectangle covered by the buffer
    """

    def __init__(self, pixels: np.ndarray, bounds: Optional[Bounds] = None):
        pixels = np.asarray(pixels)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Raster pixels must be (H, W, 4), got {pixels.shape}")
        if pixels.dtype != np.uint16:
            raise TypeError(f"Raster pixels must be uint16, got {pixels.dtype}")

        if bounds is None:
            bounds = Bounds.from_size(pixels.shape[1], pixels.shape[0])
        if (bounds.height, bounds.width) != pixels.shape[:2]:
            raise ValueError(
                f"Bounds {bounds.width}x{bounds.height} do not match pixels "
                f"{pixels.shape[1]}x{pixels.shape[0]}"
            )

        self.pixels = pixels
        self.bounds = bounds

    @classmethod
    def blank(cls, bounds: Bounds) -> 'Raster':
        """Transparent black raster, the state of a freshly allocated image."""
        return cls(np.zeros((bounds.height, bounds.width, 4), dtype=np.uint16), bounds)

    @classmethod
    def filled(cls, bounds: Bounds, rgba: Sequence[int]) -> 'Raster':
        """Raster with every pixel set to the same 16-bit sample."""
        pixels = np.empty((bounds.height, bounds.width, 4), dtype=np.uint16)
        pixels[...] = np.asarray(rgba, dtype=np.uint16)
        return cls(pixels, bounds)

    def at(self, x: int, y: int) -> np.ndarray:
        """Copy of the (4,) sample at (x, y)."""
        if not self.bounds.contains(x, y):
            raise SampleOutOfBoundsError(
                f"Pixel ({x}, {y}) outside bounds "
                f"[{self.bounds.min_x}, {self.bounds.max_x}) x "
                f"[{self.bounds.min_y}, {self.bounds.max_y})"
            )
        return self.pixels[y - self.bounds.min_y, x - self.bounds.min_x].copy()

    def set(self, x: int, y: int, rgba: Sequence[int]) -> None:
        if not self.bounds.contains(x, y):
            raise SampleOutOfBoundsError(f"Pixel ({x}, {y}) outside raster bounds")
        self.pixels[y - self.bounds.min_y, x - self.bounds.min_x] = np.asarray(rgba, dtype=np.uint16)

    def copy(self) -> 'Raster':
        return Raster(self.pixels.copy(), self.bounds)

    def is_opaque(self) -> bool:
        return bool(np.all(self.pixels[..., 3] == MAX_CHANNEL))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Raster):
            return NotImplemented
        return self.bounds == other.bounds and np.array_equal(self.pixels, other.pixels)

    __hash__ = None

    def __repr__(self) -> str:
        b = self.bounds
        return f"Raster({b.width}x{b.height} at ({b.min_x}, {b.min_y}))"
