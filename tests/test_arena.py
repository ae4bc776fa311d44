"""Tests for the raster Arena and RasterRef."""

import numpy as np
import pytest

from pagestrip_ecs.core.arena import Arena, RasterRef, raster_nbytes


class TestRasterRef:
    """Tests for RasterRef handles."""

    def test_creation(self) -> None:
        """A packed ref spans exactly H*W*4 bytes."""
        ref = RasterRef(offset=0, height=2, width=3, row_stride=12, generation=0)
        assert ref.shape == (2, 3, 4)
        assert ref.nbytes == raster_nbytes(2, 3) == 24

    def test_negative_offset(self) -> None:
        with pytest.raises(ValueError, match="offset must be non-negative"):
            RasterRef(offset=-1, height=1, width=1, row_stride=4, generation=0)

    def test_negative_size(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            RasterRef(offset=0, height=-1, width=1, row_stride=4, generation=0)

    def test_short_row_stride(self) -> None:
        """Rows may not overlap."""
        with pytest.raises(ValueError, match="row_stride"):
            RasterRef(offset=0, height=2, width=3, row_stride=8, generation=0)

    def test_empty_nbytes(self) -> None:
        """A zero-area ref spans no bytes."""
        ref = RasterRef(offset=0, height=0, width=5, row_stride=20, generation=0)
        assert ref.nbytes == 0

    def test_window_nbytes_skips_row_tail(self) -> None:
        """A window's last row ends at its own right edge, not the parent's."""
        parent = RasterRef(offset=0, height=4, width=10, row_stride=40, generation=0)
        window = parent.window(1, 2, 3, 5)
        assert window.offset == 40 + 8
        assert window.nbytes == 2 * 40 + 5 * 4


class TestWindow:
    """Tests for zero-copy rectangles."""

    def test_matches_numpy_slice(self) -> None:
        """A window views the same pixels as the equivalent numpy slice."""
        arena = Arena(size_bytes=4096)
        data = np.arange(6 * 5 * 4, dtype=np.uint8).reshape(6, 5, 4)
        ref = arena.copy_raster(data)

        window = ref.window(2, 1, 3, 3)
        assert window.shape == (3, 3, 4)
        np.testing.assert_array_equal(arena.view(window), data[2:5, 1:4])

    def test_writes_through(self) -> None:
        """Writing to a window modifies the parent raster only inside it."""
        arena = Arena(size_bytes=4096)
        ref = arena.alloc_raster(4, 4)
        arena.view(ref)[:] = 0
        arena.view(ref.window(1, 1, 2, 2))[:] = 9

        parent = arena.view(ref)
        assert parent[1:3, 1:3].min() == 9
        assert parent[0].max() == 0
        assert parent[:, 0].max() == 0

    def test_full_and_empty_windows(self) -> None:
        arena = Arena(size_bytes=1024)
        ref = arena.alloc_raster(3, 5)
        assert ref.window(0, 0, 3, 5) == ref
        assert ref.window(3, 5, 0, 0).nbytes == 0

    @pytest.mark.parametrize(
        "y, x, height, width",
        [(0, 0, 4, 5), (0, 1, 3, 5), (2, 0, 2, 1), (-1, 0, 1, 1), (0, 0, -1, 1)],
    )
    def test_outside_raster(self, y: int, x: int, height: int, width: int) -> None:
        arena = Arena(size_bytes=1024)
        ref = arena.alloc_raster(3, 5)
        with pytest.raises(IndexError, match="outside 5x3 raster"):
            ref.window(y, x, height, width)


class TestArena:
    """Tests for Arena allocator."""

    def test_creation(self) -> None:
        arena = Arena(size_bytes=1024)
        assert arena.size == 1024
        assert arena.offset == 0
        assert arena.generation == 0

    def test_invalid_size(self) -> None:
        with pytest.raises(ValueError, match="size_bytes must be positive"):
            Arena(size_bytes=0)

    def test_alloc_raster(self) -> None:
        """Rasters are packed (H, W, 4) uint8, allocated back to back."""
        arena = Arena(size_bytes=1024)
        first = arena.alloc_raster(height=3, width=5)
        second = arena.alloc_raster(height=1, width=1)

        assert first.shape == (3, 5, 4)
        assert arena.view(first).dtype == np.uint8
        assert second.offset == raster_nbytes(3, 5) == 60
        assert arena.offset == 64

    def test_out_of_memory(self) -> None:
        arena = Arena(size_bytes=100)
        with pytest.raises(ValueError, match="Arena out of memory"):
            arena.alloc_raster(10, 10)

    def test_exact_fit(self) -> None:
        arena = Arena(size_bytes=raster_nbytes(4, 4))
        arena.alloc_raster(4, 4)
        assert arena.offset == arena.size

    def test_stale_ref_after_reset(self) -> None:
        """Viewing a ref from a previous generation raises ValueError."""
        arena = Arena(size_bytes=1024)
        ref = arena.alloc_raster(2, 2)
        arena.reset()
        assert arena.generation == 1
        assert arena.offset == 0
        with pytest.raises(ValueError, match="Stale RasterRef"):
            arena.view(ref)

    def test_ref_past_end(self) -> None:
        arena = Arena(size_bytes=64)
        ref = RasterRef(offset=60, height=1, width=2, row_stride=8, generation=0)
        with pytest.raises(ValueError, match="out of bounds"):
            arena.view(ref)

    def test_reset_keeps_buffer_contents(self) -> None:
        """reset() does not clear memory; new allocations see old bytes."""
        arena = Arena(size_bytes=1024)
        ref = arena.alloc_raster(2, 2)
        arena.view(ref)[:] = 77
        arena.reset()
        again = arena.alloc_raster(2, 2)
        assert np.all(arena.view(again) == 77)

    def test_copy_raster(self) -> None:
        """copy_raster duplicates data into the arena."""
        arena = Arena(size_bytes=1024)
        src = np.full((2, 3, 4), 5, dtype=np.uint8)
        ref = arena.copy_raster(src)
        src[:] = 0
        assert np.all(arena.view(ref) == 5)

    def test_copy_raster_from_window_view(self) -> None:
        """Non-contiguous sources are packed on copy."""
        arena = Arena(size_bytes=1024)
        data = np.arange(4 * 4 * 4, dtype=np.uint8).reshape(4, 4, 4)
        ref = arena.copy_raster(arena.view(arena.copy_raster(data).window(1, 1, 2, 2)))
        assert ref.row_stride == 8
        np.testing.assert_array_equal(arena.view(ref), data[1:3, 1:3])

    @pytest.mark.parametrize(
        "pix",
        [np.zeros((2, 2, 3), dtype=np.uint8), np.zeros((2, 2, 4), dtype=np.float32)],
    )
    def test_copy_raster_rejects_other_layouts(self, pix: np.ndarray) -> None:
        arena = Arena(size_bytes=1024)
        with pytest.raises(ValueError, match=r"\(H, W, 4\) uint8"):
            arena.copy_raster(pix)

    def test_repr(self) -> None:
        arena = Arena(size_bytes=64)
        assert repr(arena) == "Arena(size=64, offset=0, generation=0)"
