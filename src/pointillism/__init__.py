"""Disk-stamping approximation core.

Modules:
    - types: Bounds, Disk, Raster
    - errors: InvalidParameterError, SampleOutOfBoundsError
    - compositor: the "over" operator (16-bit, bit-exact)
    - rasterizer: binary disk coverage against image bounds
    - placement: uniform and decreasing-radius schedules
    - approximator: the driver that samples, rasterizes and composites
    - config: approximate.v1 schema (pydantic)
    - image_io: Pillow decode/encode, patch mode, format selection
    - cli: command-line entry point

Data flow:
    placement → Disk → approximator → source sample → rasterizer → pixels
    → compositor → canvas
"""

from .approximator import approximate, paint_color
from .compositor import over
from .errors import ApproximationError, InvalidParameterError, SampleOutOfBoundsError
from .placement import build_schedule, decreasing_disks, uniform_disks
from .rasterizer import disk_mask, points_in_disk
from .types import Bounds, Disk, Raster

__all__ = [
    'approximate',
    'paint_color',
    'over',
    'ApproximationError',
    'InvalidParameterError',
    'SampleOutOfBoundsError',
    'build_schedule',
    'decreasing_disks',
    'uniform_disks',
    'disk_mask',
    'points_in_disk',
    'Bounds',
    'Disk',
    'Raster',
]
