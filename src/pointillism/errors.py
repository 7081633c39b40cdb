"""Exceptions raised by the approximation core.

Parameter problems are reported before any canvas work begins, so a failed
run never leaves a partially painted canvas behind. Sampling outside the
source is a broken precondition (schedules only emit in-bounds centers) and
is never caught inside the core.
"""


class ApproximationError(Exception):
    """Base class for all approximation failures."""

    pass


class InvalidParameterError(ApproximationError, ValueError):
    """Raised for a negative count or radius, alpha outside [0, 1], an unknown
    schedule or output format, or an image that cannot host the request."""

    pass


class SampleOutOfBoundsError(ApproximationError, IndexError):
    """Raised when a pixel outside a raster's bounds is read or written."""

    pass
