"""Exception hierarchy for the image pipeline.

Every failure is terminal for the call that raised it. Most errors are
also ``ValueError`` subclasses so callers that only care about "bad
input" can catch that.
"""

from __future__ import annotations


class PagestripError(Exception):
    """Root of all pipeline errors."""


class DecodeError(PagestripError, ValueError):
    """Source bytes are not a recognised or well-formed image."""


class EncodeError(PagestripError, RuntimeError):
    """The PNG writer could not serialize a raster."""


class EmptyInputError(PagestripError, ValueError):
    """Vertical composition was called with no images."""


class PayloadError(PagestripError, ValueError):
    """A text-encoded payload at the binding boundary is malformed."""


class BoundsError(PagestripError, ValueError):
    """Crop rectangle exceeds the source raster.

    Attributes:
        rect: Requested (x, y, width, height)
        bounds: Actual (width, height) of the source
    """

    def __init__(
        self,
        rect: tuple[int, int, int, int],
        bounds: tuple[int, int],
    ) -> None:
        self.rect = rect
        self.bounds = bounds
        x, y, width, height = rect
        super().__init__(
            f"Crop area ({x},{y},{width},{height}) exceeds image bounds "
            f"({bounds[0]}x{bounds[1]})"
        )


class DegenerateRearrangeError(PagestripError, ValueError):
    """Strip count cannot produce a well-defined row permutation.

    Attributes:
        rows: Requested strip count
        height: Source height, or None when rejected before decoding
    """

    def __init__(self, rows: int, height: int | None = None) -> None:
        self.rows = rows
        self.height = height
        if height is None:
            message = f"rows must be >= 1, got {rows}"
        else:
            message = f"rows ({rows}) exceeds image height ({height})"
        super().__init__(message)
