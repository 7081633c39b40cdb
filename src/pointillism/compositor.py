"""The "over" operator used to stamp paint onto the canvas.

Painting color ``a`` over backdrop ``b`` (16-bit channels, normalised to
[0, 1] internally):

    a_pm = premultiply(a)              # integer, c * A // 0xFFFF
    oa   = aa + ba * (1 - aa)
    oc   = a_pm.c + b.c * (1 - aa)     # c in R, G, B
    out  = (trunc(0xFFFF * oc * oa), ..., trunc(0xFFFF * oa))

The final scaling of R, G, B by ``oa`` is not part of the textbook
premultiplied "over"; stored canvases and any image produced by earlier
runs (including patched outputs) depend on it, so it is kept as is.

Float64 evaluation order and truncation toward zero match the stored
reference outputs bit-for-bit. Inputs are not range-checked.
"""

import numpy as np

from src.utils.color import MAX_CHANNEL, premultiply


def over(paint: np.ndarray, backdrop: np.ndarray) -> np.ndarray:
    """Composite ``paint`` over ``backdrop``.

    Parameters
    ----------
    paint : np.ndarray
        Straight (unpremultiplied) RGBA, shape (4,) or (N, 4), uint16
    backdrop : np.ndarray
        Canvas samples, shape (4,) or (N, 4), uint16

    Returns
    -------
    np.ndarray
        Composited samples, broadcast shape of the inputs, uint16

    Notes
    -----
    Pure function. A single paint color broadcasts against a batch of
    backdrop pixels, which is how the driver applies one disk at a time.
    """
    a = premultiply(np.asarray(paint, dtype=np.uint16)).astype(np.float64) / MAX_CHANNEL
    b = np.asarray(backdrop, dtype=np.uint16).astype(np.float64) / MAX_CHANNEL

    aa = a[..., 3:4]
    ba = b[..., 3:4]

    oa = aa + ba * (1 - aa)
    oc = a[..., :3] + b[..., :3] * (1 - aa)

    out = np.empty(np.broadcast_shapes(a.shape, b.shape), dtype=np.uint16)
    out[..., :3] = (MAX_CHANNEL * oc * oa).astype(np.uint16)
    out[..., 3:4] = (MAX_CHANNEL * oa).astype(np.uint16)
    return out
