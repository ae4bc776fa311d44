"""Vertical composition system.

Stacks every input raster top-to-bottom, left-aligned, on one canvas of
width max(W_i) and height sum(H_i). Space to the right of narrower
inputs stays transparent black.
"""

from __future__ import annotations

import logging

import numpy as np

from pagestrip_ecs.components.image import RGBA, ResultRGBA
from pagestrip_ecs.core.system import System
from pagestrip_ecs.core.world import World
from pagestrip_ecs.errors import EmptyInputError

logger = logging.getLogger(__name__)


def canvas_shape(sizes: list[tuple[int, int]]) -> tuple[int, int]:
    """Return (height, width) of the canvas for (height, width) inputs.

    Raises:
        EmptyInputError: If sizes is empty
    """
    if not sizes:
        raise EmptyInputError("Image list is empty")
    return sum(h for h, _ in sizes), max(w for _, w in sizes)


def compose_rows(canvas: np.ndarray, sources: list[np.ndarray]) -> None:
    """Zero-fill `canvas`, then place each source below the previous one."""
    canvas.fill(0)
    current_y = 0
    for src in sources:
        height, width = src.shape[:2]
        canvas[current_y:current_y + height, :width] = src
        current_y += height


class VerticalCompose(System):
    """Stack the RGBA rasters of all pipe entities into one canvas.

    Input: RGBA on every entity, in pipe order
    Output: ResultRGBA on the first entity
    """

    def required_components(self) -> list[type]:
        return [RGBA]

    def produced_components(self) -> list[type]:
        return [ResultRGBA]

    def run(self, world: World, eids: list[int]) -> None:
        """Compose `eids` in order; the result is attached to eids[0].

        Raises:
            EmptyInputError: If eids is empty
        """
        if not eids:
            raise EmptyInputError("Image list is empty")

        rasters = [world.get_component(eid, RGBA) for eid in eids]
        height, width = canvas_shape([(r.height, r.width) for r in rasters])

        # Arena memory is reused across resets, so the fill must be explicit
        canvas_ref = world.arena.alloc_raster(height, width)
        compose_rows(
            world.arena.view(canvas_ref),
            [world.arena.view(r.pix) for r in rasters],
        )

        world.add_component(eids[0], ResultRGBA(pix=canvas_ref))
        logger.debug(
            "Composed %d images into %dx%d canvas on entity %d",
            len(eids), width, height, eids[0],
        )
