"""Row descrambling system.

Scrambled page images arrive cut into ``rows`` horizontal strips stacked
in reverse order. Reversing that is an exact row permutation:

    strip_height = H // rows, remainder = H % rows
    for i in 0..rows-1:
        block  = strip_height (+ remainder when i == 0)
        dest_y = strip_height * i (+ remainder when i != 0)
        src_y  = H - strip_height * (i + 1) - remainder

The first destination strip absorbs the remainder rows, so every source
row lands exactly once in the output.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

import numpy as np

from pagestrip_ecs.components.image import RGBA, ResultRGBA
from pagestrip_ecs.components.params import RearrangeSpec
from pagestrip_ecs.core.system import System
from pagestrip_ecs.core.world import World
from pagestrip_ecs.errors import DegenerateRearrangeError

logger = logging.getLogger(__name__)


class StripMove(NamedTuple):
    """One block copy: `height` rows from `src_y` to `dest_y`."""

    src_y: int
    dest_y: int
    height: int


def strip_layout(height: int, rows: int) -> list[StripMove]:
    """Compute the block copies that undo the strip shuffle.

    Args:
        height: Image height in rows
        rows: Number of strips the image was cut into

    Returns:
        One StripMove per strip, in strip order

    Raises:
        DegenerateRearrangeError: If rows < 1 or rows > height
    """
    if rows < 1:
        raise DegenerateRearrangeError(rows)
    if rows > height:
        raise DegenerateRearrangeError(rows, height)

    strip_height = height // rows
    remainder = height % rows

    moves = []
    for i in range(rows):
        block = strip_height
        dest_y = strip_height * i
        src_y = height - strip_height * (i + 1) - remainder
        if i == 0:
            block += remainder
        else:
            dest_y += remainder
        moves.append(StripMove(src_y, dest_y, block))
    return moves


def copy_strip(
    src: np.ndarray,
    dst: np.ndarray,
    src_y: int,
    dest_y: int,
    height: int,
    width: int,
) -> None:
    """Copy `height` full rows of `width` pixels from src to dst."""
    dst[dest_y:dest_y + height, :width] = src[src_y:src_y + height, :width]


class RowRearrange(System):
    """Undo horizontal strip scrambling.

    Input: RGBA
    Output: ResultRGBA with identical width and height
    """

    def __init__(self, rows: int) -> None:
        """Initialize descrambler.

        Args:
            rows: Strip count used by the scrambler (>= 1)

        Raises:
            DegenerateRearrangeError: If rows < 1
        """
        if rows < 1:
            raise DegenerateRearrangeError(rows)
        self.spec = RearrangeSpec(rows=rows)

    @property
    def rows(self) -> int:
        return self.spec.rows

    def required_components(self) -> list[type]:
        return [RGBA]

    def produced_components(self) -> list[type]:
        return [ResultRGBA]

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            source = world.get_component(eid, RGBA)
            height, width = source.height, source.width
            moves = strip_layout(height, self.rows)
            logger.debug(
                "Rearranging entity %d: %dx%d, rows=%d, remainder=%d",
                eid, width, height, self.rows, height % self.rows,
            )

            src = world.arena.view(source.pix)
            dst_ref = world.arena.alloc_raster(height, width)
            dst = world.arena.view(dst_ref)
            for move in moves:
                copy_strip(src, dst, move.src_y, move.dest_y, move.height, width)

            world.add_component(eid, ResultRGBA(pix=dst_ref))
