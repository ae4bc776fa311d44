"""Raster arena: one bump-allocated buffer per pipeline call.

Components never hold pixel arrays. They hold RasterRefs, small frozen
handles (offset, height, width, row stride, generation) that resolve to
(H, W, 4) uint8 NumPy views of the arena buffer on demand.

Notes:
- reset() bumps the generation so stale refs are rejected, but it does
  NOT clear the buffer. A caller that needs a blank raster fills it.
- RasterRef.window() is a zero-copy rectangle; its rows keep the parent
  row stride.

Example:
    >>> arena = Arena(size_bytes=1 << 20)
    >>> ref = arena.alloc_raster(height=8, width=4)
    >>> arena.view(ref).shape
    (8, 4, 4)
    >>> arena.view(ref.window(2, 1, 3, 2)).shape
    (3, 2, 4)
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

RGBA_CHANNELS = 4


def raster_nbytes(height: int, width: int) -> int:
    """Bytes needed for one packed (H, W, 4) uint8 raster."""
    return height * width * RGBA_CHANNELS


@dataclass(frozen=True)
class RasterRef:
    """Handle to an RGBA8 raster inside an Arena.

    Attributes:
        offset: Byte offset of pixel (0, 0)
        height: Rows
        width: Pixels per row
        row_stride: Bytes from one row to the next
        generation: Arena generation the ref was issued in
    """

    offset: int
    height: int
    width: int
    row_stride: int
    generation: int

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ValueError(f"offset must be non-negative, got {self.offset}")
        if self.height < 0 or self.width < 0:
            raise ValueError(f"Raster size must be non-negative, got {self.width}x{self.height}")
        if self.row_stride < self.width * RGBA_CHANNELS:
            raise ValueError(
                f"row_stride {self.row_stride} is shorter than a {self.width}-pixel row"
            )

    @property
    def shape(self) -> tuple[int, int, int]:
        return (self.height, self.width, RGBA_CHANNELS)

    @property
    def nbytes(self) -> int:
        """Bytes spanned from the first pixel to the end of the last one."""
        if self.height == 0 or self.width == 0:
            return 0
        return (self.height - 1) * self.row_stride + self.width * RGBA_CHANNELS

    def window(self, y: int, x: int, height: int, width: int) -> RasterRef:
        """Zero-copy rectangle of this raster.

        Raises:
            IndexError: If the rectangle leaves the raster
        """
        if min(y, x, height, width) < 0 or y + height > self.height or x + width > self.width:
            raise IndexError(
                f"Window at ({x}, {y}) of {width}x{height} lies outside "
                f"{self.width}x{self.height} raster"
            )
        return RasterRef(
            offset=self.offset + y * self.row_stride + x * RGBA_CHANNELS,
            height=height,
            width=width,
            row_stride=self.row_stride,
            generation=self.generation,
        )


class Arena:
    """Contiguous bump allocator backing every raster of one call.

    Attributes:
        size: Total arena size in bytes
        offset: Bytes handed out so far
        generation: Incremented on reset() to invalidate old RasterRefs
    """

    def __init__(self, size_bytes: int):
        if size_bytes <= 0:
            raise ValueError(f"size_bytes must be positive, got {size_bytes}")

        self._buffer = bytearray(size_bytes)
        self._size = size_bytes
        self._offset = 0
        self._generation = 0

    @property
    def size(self) -> int:
        return self._size

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def generation(self) -> int:
        return self._generation

    def reset(self) -> None:
        """Reclaim all space and invalidate existing RasterRefs.

        Buffer contents are left as they are.
        """
        self._offset = 0
        self._generation += 1

    def alloc_raster(self, height: int, width: int) -> RasterRef:
        """Allocate an uninitialised, packed (H, W, 4) uint8 raster.

        Raises:
            ValueError: If the raster does not fit in the remaining space
        """
        nbytes = raster_nbytes(height, width)
        if self._offset + nbytes > self._size:
            raise ValueError(
                f"Arena out of memory: {width}x{height} raster needs {nbytes} bytes, "
                f"{self._size - self._offset} of {self._size} left"
            )

        ref = RasterRef(
            offset=self._offset,
            height=height,
            width=width,
            row_stride=width * RGBA_CHANNELS,
            generation=self._generation,
        )
        self._offset += nbytes
        return ref

    def view(self, ref: RasterRef) -> np.ndarray:
        """Resolve a ref to a writable (H, W, 4) uint8 view.

        Raises:
            ValueError: If the ref is stale or points outside the buffer
        """
        if ref.generation != self._generation:
            raise ValueError(
                f"Stale RasterRef: arena was reset (current generation {self._generation}, "
                f"ref is from generation {ref.generation})"
            )
        if ref.offset + ref.nbytes > self._size:
            raise ValueError(
                f"RasterRef out of bounds: offset={ref.offset}, nbytes={ref.nbytes}, "
                f"arena size={self._size}"
            )

        return np.ndarray(
            shape=ref.shape,
            dtype=np.uint8,
            buffer=self._buffer,
            offset=ref.offset,
            strides=(ref.row_stride, RGBA_CHANNELS, 1),
        )

    def copy_raster(self, pix: np.ndarray) -> RasterRef:
        """Allocate a raster and copy `pix` into it.

        Raises:
            ValueError: If pix is not (H, W, 4) uint8, or does not fit
        """
        if pix.ndim != 3 or pix.shape[2] != RGBA_CHANNELS or pix.dtype != np.uint8:
            raise ValueError(f"Expected (H, W, 4) uint8 raster, got {pix.shape} {pix.dtype}")
        ref = self.alloc_raster(pix.shape[0], pix.shape[1])
        self.view(ref)[...] = pix
        return ref

    def __repr__(self) -> str:
        return f"Arena(size={self._size}, offset={self._offset}, generation={self._generation})"
