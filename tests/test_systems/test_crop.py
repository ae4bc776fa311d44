"""Tests for the crop system."""

import numpy as np
import pytest

from conftest import row_coded
from pagestrip_ecs.components.image import RGBA, ImageFormat, ResultRGBA
from pagestrip_ecs.components.params import CropRect
from pagestrip_ecs.core.arena import Arena
from pagestrip_ecs.core.world import World
from pagestrip_ecs.errors import BoundsError
from pagestrip_ecs.systems.crop import Crop, crop_region


@pytest.fixture
def arena() -> Arena:
    return Arena(size_bytes=1 << 16)


class TestCropRegion:
    """crop_region on arena rasters."""

    def test_full_bounds_reproduces_source(self, arena: Arena, random_rgba) -> None:
        pix = random_rgba(6, 9)
        ref = arena.copy_raster(pix)
        out = crop_region(arena, ref, CropRect(x=0, y=0, width=9, height=6))
        np.testing.assert_array_equal(arena.view(out), pix)

    def test_interior(self, arena: Arena, random_rgba) -> None:
        pix = random_rgba(10, 10)
        ref = arena.copy_raster(pix)
        out = crop_region(arena, ref, CropRect(x=2, y=3, width=4, height=5))
        assert out.shape == (5, 4, 4)
        np.testing.assert_array_equal(arena.view(out), pix[3:8, 2:6])

    def test_result_is_a_copy(self, arena: Arena, random_rgba) -> None:
        ref = arena.copy_raster(random_rgba(4, 4))
        out = crop_region(arena, ref, CropRect(x=0, y=0, width=2, height=2))
        arena.view(ref)[:] = 0
        assert arena.view(out).any()

    @pytest.mark.parametrize(
        "rect",
        [(1, 0, 9, 1), (0, 1, 1, 6), (10, 0, 1, 1), (0, 0, 11, 6), (5, 5, 100, 100)],
    )
    def test_out_of_bounds(self, arena: Arena, rect: tuple[int, int, int, int]) -> None:
        """Never truncates: any overflow raises BoundsError with diagnostics."""
        ref = arena.alloc_raster(height=6, width=9)
        x, y, w, h = rect
        with pytest.raises(BoundsError) as info:
            crop_region(arena, ref, CropRect(x=x, y=y, width=w, height=h))
        assert info.value.rect == rect
        assert info.value.bounds == (9, 6)
        assert "exceeds image bounds (9x6)" in str(info.value)

    def test_edge_fit(self, arena: Arena) -> None:
        """A rectangle touching the right/bottom edges is valid."""
        ref = arena.copy_raster(row_coded(6, 9))
        out = crop_region(arena, ref, CropRect(x=8, y=5, width=1, height=1))
        assert out.shape == (1, 1, 4)
        assert arena.view(out)[0, 0, 0] == 5


class TestCropSystem:
    """Crop inside a World."""

    def test_run(self, random_rgba) -> None:
        world = World(arena_bytes=1 << 16)
        eid = world.new_entity()
        pix = random_rgba(8, 8)
        world.add_component(
            eid, RGBA(pix=world.arena.copy_raster(pix), source_format=ImageFormat.GIF)
        )

        Crop(x=1, y=2, width=3, height=4).run(world, [eid])
        result = world.get_component(eid, ResultRGBA)
        np.testing.assert_array_equal(world.arena.view(result.pix), pix[2:6, 1:4])

    def test_negative_coordinates_rejected(self) -> None:
        with pytest.raises(ValueError):
            Crop(x=-1, y=0, width=1, height=1)

    def test_rect_attribute(self) -> None:
        assert Crop(x=1, y=2, width=3, height=4).rect.as_tuple() == (1, 2, 3, 4)
