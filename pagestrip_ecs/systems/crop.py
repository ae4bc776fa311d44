"""Rectangular crop system."""

from __future__ import annotations

import logging

from pagestrip_ecs.components.image import RGBA, ResultRGBA
from pagestrip_ecs.components.params import CropRect
from pagestrip_ecs.core.arena import Arena, RasterRef
from pagestrip_ecs.core.system import System
from pagestrip_ecs.core.world import World
from pagestrip_ecs.errors import BoundsError

logger = logging.getLogger(__name__)


def crop_region(arena: Arena, source: RasterRef, rect: CropRect) -> RasterRef:
    """Copy `rect` out of a raster into a new allocation.

    Raises:
        BoundsError: If rect does not fit inside the source
    """
    if not rect.fits(source.width, source.height):
        raise BoundsError(rect.as_tuple(), (source.width, source.height))

    window = source.window(rect.y, rect.x, rect.height, rect.width)
    return arena.copy_raster(arena.view(window))


class Crop(System):
    """Extract a validated rectangle, no scaling.

    Input: RGBA
    Output: ResultRGBA of exactly (height, width)
    """

    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        self.rect = CropRect(x=x, y=y, width=width, height=height)

    def required_components(self) -> list[type]:
        return [RGBA]

    def produced_components(self) -> list[type]:
        return [ResultRGBA]

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            source = world.get_component(eid, RGBA)
            cropped = crop_region(world.arena, source.pix, self.rect)
            world.add_component(eid, ResultRGBA(pix=cropped))
            logger.debug(
                "Cropped entity %d: %dx%d -> %r",
                eid, source.width, source.height, self.rect.as_tuple(),
            )
