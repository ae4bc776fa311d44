"""System base class for ECS transformations.

Systems are the logic layer: they read required components from
entities and attach the components they produce. They hold only their
own parameters, never pixel data, so one instance can be reused across
worlds.

Example:
    >>> class Invert(System):
    ...     def required_components(self):
    ...         return [RGBA]
    ...     def produced_components(self):
    ...         return [ResultRGBA]
    ...     def run(self, world, eids):
    ...         for eid in eids:
    ...             src = world.arena.view(world.get_component(eid, RGBA).pix)
    ...             ref = world.arena.copy_raster(255 - src)
    ...             world.add_component(eid, ResultRGBA(pix=ref))
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pagestrip_ecs.core.world import World


class System(ABC):
    """Base class for all ECS systems.

    Systems declare:
    - required_components(): What inputs they need
    - produced_components(): What outputs they create
    - run(): The actual transformation logic
    """

    @abstractmethod
    def required_components(self) -> list[type]:
        """Return list of component types this system requires as input."""

    @abstractmethod
    def produced_components(self) -> list[type]:
        """Return list of component types this system produces as output."""

    @abstractmethod
    def run(self, world: World, eids: list[int]) -> None:
        """Execute system on given entities.

        Args:
            world: World instance with entities and components
            eids: Entity IDs to process, in order
        """

    def can_run(self, world: World, eid: int) -> bool:
        """Check if entity has all required components."""
        return all(world.has_component(eid, ct) for ct in self.required_components())

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in vars(self).items() if not k.startswith("_"))
        return f"{self.__class__.__name__}({params})"
