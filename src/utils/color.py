"""16-bit channel conversions between straight and premultiplied alpha.

Provides:
    - expand_8bit(): 8-bit channels → 16-bit (v * 0x101)
    - premultiply(): straight 16-bit RGBA → premultiplied 16-bit RGBA
    - unpremultiply(): premultiplied 16-bit RGBA → straight 16-bit RGBA
    - to_8bit(): 16-bit channels → 8-bit (high byte)

Used by:
    - image_io: decoding sources into premultiplied rasters, encoding canvases
    - compositor: premultiplying the paint color before "over"

All functions operate on numpy arrays with channels last: (..., 4) for RGBA.
Integer arithmetic throughout (no floating point), so conversions are exact and
reproducible bit-for-bit.

Invariants:
    - Channel range [0, MAX_CHANNEL] (uint16 storage)
    - Premultiplied R/G/B never exceed A
    - premultiply(unpremultiply(x)) == x whenever R/G/B <= A
"""

import numpy as np

MAX_CHANNEL = 0xFFFF


def expand_8bit(img: np.ndarray) -> np.ndarray:
    """Widen 8-bit channels to 16-bit by byte replication.

    Parameters
    ----------
    img : np.ndarray
        Any shape, uint8 values [0, 255]

    Returns
    -------
    np.ndarray
        Same shape, uint16 values [0, 65535] (0xAB → 0xABAB)
    """
    return img.astype(np.uint16) * np.uint16(0x101)


def to_8bit(img: np.ndarray) -> np.ndarray:
    """Narrow 16-bit channels to 8-bit by keeping the high byte."""
    return (np.asarray(img, dtype=np.uint16) >> 8).astype(np.uint8)


def premultiply(rgba: np.ndarray) -> np.ndarray:
    """Convert straight RGBA to premultiplied RGBA.

    Parameters
    ----------
    rgba : np.ndarray
        Straight color, shape (..., 4), uint16

    Returns
    -------
    np.ndarray
        Premultiplied color, shape (..., 4), uint16

    Notes
    -----
    Each color channel becomes ``c * a // 0xFFFF`` (integer division, so
    results truncate). Alpha passes through unchanged.
    """
    rgba = np.asarray(rgba)
    wide = rgba.astype(np.uint64)
    out = np.empty(rgba.shape, dtype=np.uint16)
    out[..., :3] = (wide[..., :3] * wide[..., 3:4]) // MAX_CHANNEL
    out[..., 3] = rgba[..., 3]
    return out


def unpremultiply(rgba: np.ndarray) -> np.ndarray:
    """Convert premultiplied RGBA back to straight RGBA.

    Parameters
    ----------
    rgba : np.ndarray
        Premultiplied color, shape (..., 4), uint16

    Returns
    -------
    np.ndarray
        Straight color, shape (..., 4), uint16

    Notes
    -----
    Opaque samples pass through unchanged; fully transparent samples become
    (0, 0, 0, 0); everything else is ``ceil(c * 0xFFFF / a)``, clipped to the
    channel range.

    Rounding up makes this the exact inverse of premultiply() for valid
    premultiplied data (c <= a): premultiply(unpremultiply(x)) == x, so a
    canvas written as straight 16-bit color decodes back bit-for-bit.
    """
    rgba = np.asarray(rgba)
    wide = rgba.astype(np.uint64)
    alpha = wide[..., 3:4]

    safe_alpha = np.where(alpha == 0, 1, alpha)
    rgb = (wide[..., :3] * MAX_CHANNEL + safe_alpha - 1) // safe_alpha
    rgb = np.where(alpha == MAX_CHANNEL, wide[..., :3], rgb)
    rgb = np.where(alpha == 0, 0, rgb)

    out = np.empty(rgba.shape, dtype=np.uint16)
    out[..., :3] = np.minimum(rgb, MAX_CHANNEL)
    out[..., 3] = rgba[..., 3]
    return out
