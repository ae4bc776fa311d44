"""World: Entity-Component-System manager.

The World is the per-call registry that owns:
- Entity creation (integer IDs)
- Component storage (type -> entity -> component mapping)
- The Arena every raster of the call lives in

Example:
    >>> world = World(arena_bytes=8 << 20)
    >>> eid = world.spawn_encoded(png_bytes)
    >>> world.pipe(eid).to(DecodeImage()).out(RGBA)
    >>> world.clear()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel

from pagestrip_ecs.core.arena import Arena

if TYPE_CHECKING:
    from pagestrip_ecs.core.pipeline import Pipe

Component = BaseModel

T = TypeVar("T", bound=Component)


class World:
    """Central ECS registry managing entities, components, and memory.

    Attributes:
        arena: Memory arena for raster allocation
    """

    def __init__(self, arena_bytes: int = 64 << 20):
        """Create World with specified arena size.

        Args:
            arena_bytes: Arena size in bytes (default 64 MB)
        """
        self.arena = Arena(size_bytes=arena_bytes)
        self._next_eid = 0
        self._components: dict[type[Component], dict[int, Component]] = {}
        self._entities: set[int] = set()

    def new_entity(self) -> int:
        """Create a new entity and return its ID."""
        eid = self._next_eid
        self._next_eid += 1
        self._entities.add(eid)
        return eid

    def spawn_encoded(self, data: bytes | bytearray | memoryview) -> int:
        """Ingest an encoded image payload into the world.

        Args:
            data: Image bytes in any supported container format

        Returns:
            Entity ID with EncodedImage component attached

        Raises:
            TypeError: If data is not bytes-like
        """
        from pagestrip_ecs.components.image import EncodedImage

        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"Expected bytes-like image payload, got {type(data).__name__}")

        eid = self.new_entity()
        self.add_component(eid, EncodedImage(data=bytes(data)))
        return eid

    def spawn_batch_encoded(self, payloads: list[bytes]) -> list[int]:
        """Ingest several payloads, preserving their order.

        Args:
            payloads: Encoded image payloads, top-to-bottom for composition

        Returns:
            Entity IDs in the same order
        """
        return [self.spawn_encoded(data) for data in payloads]

    def clear(self) -> None:
        """Reset arena and drop all entities/components.

        After clear(), all RasterRefs from previous entities are invalidated.
        """
        self.arena.reset()
        self._next_eid = 0
        self._components.clear()
        self._entities.clear()

    def add_component(self, eid: int, component: Component) -> None:
        """Attach a component to an entity, replacing one of the same type.

        Raises:
            ValueError: If entity does not exist
        """
        if eid not in self._entities:
            raise ValueError(f"Entity {eid} does not exist")

        self._components.setdefault(type(component), {})[eid] = component

    def get_component(self, eid: int, comp_type: type[T]) -> T:
        """Retrieve a component from an entity.

        Raises:
            KeyError: If entity does not have the component
        """
        if comp_type not in self._components:
            raise KeyError(f"No entities have component type {comp_type.__name__}")
        if eid not in self._components[comp_type]:
            raise KeyError(f"Entity {eid} does not have component {comp_type.__name__}")

        return self._components[comp_type][eid]  # type: ignore

    def has_component(self, eid: int, comp_type: type[Component]) -> bool:
        """Check if entity has a specific component type."""
        return (
            comp_type in self._components
            and eid in self._components[comp_type]
        )

    def pipe(self, *entities: int) -> Pipe:
        """Create a pipeline over the given entities (head first).

        Example:
            >>> png = (
            ...     world.pipe(*eids)
            ...     .to(DecodeImage())
            ...     .to(VerticalCompose())
            ...     .to(EncodePNG())
            ...     .out(PNGBytes)
            ... )
        """
        from pagestrip_ecs.core.pipeline import Pipe

        return Pipe(self, *entities)

    def __repr__(self) -> str:
        num_entities = len(self._entities)
        num_comp_types = len(self._components)
        return (
            f"World(entities={num_entities}, component_types={num_comp_types}, "
            f"arena={self.arena})"
        )
