"""Fluent pipeline over one or more entities.

A Pipe collects systems with `.to()` or `|` and runs them in order on
`.out()`. The first entity passed to the pipe is its head: `.out()`
reads the requested component from it, and multi-entity systems such
as VerticalCompose attach their result there.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel

if TYPE_CHECKING:
    from pagestrip_ecs.core.system import System
    from pagestrip_ecs.core.world import World

T = TypeVar("T", bound=BaseModel)


class Pipe:
    """Type-safe fluent pipeline builder.

    Example:
        >>> world = World()
        >>> entity = world.spawn_encoded(data)
        >>> png = (
        ...     world.pipe(entity)
        ...     .to(DecodeImage())
        ...     .to(RowRearrange(rows=10))
        ...     .to(EncodePNG())
        ...     .out(PNGBytes)
        ... )
    """

    def __init__(self, world: "World", *entities: int) -> None:
        """Initialize Pipe with world and entities.

        Args:
            world: The ECS world
            entities: Entity IDs to apply pipeline to, head first
        """
        if not entities:
            raise ValueError("Pipe needs at least one entity")
        self.world: Any = world
        self.entities = list(entities)
        self.systems: list[Any] = []

    @property
    def head(self) -> int:
        return self.entities[0]

    def to(self, system: "System") -> "Pipe":
        """Add system to pipeline and return self for chaining."""
        self.systems.append(system)
        return self

    def __or__(self, system: "System") -> "Pipe":
        """Pipe operator, equivalent to `.to(system)`."""
        return self.to(system)

    def out(self, component_type: type[T]) -> T:
        """Execute pipeline and return the head entity's component.

        Raises:
            RuntimeError: If any system cannot run (missing dependencies)
            KeyError: If the head lacks the requested component afterwards
        """
        self.execute()
        return self.world.get_component(self.head, component_type)  # type: ignore[no-any-return]

    def execute(self) -> None:
        """Run all systems in order with dependency checking.

        Raises:
            RuntimeError: If any system cannot run on any entity
        """
        for system in self.systems:
            runnable = [
                eid for eid in self.entities if system.can_run(self.world, eid)
            ]

            if not runnable:
                required = [ct.__name__ for ct in system.required_components()]
                raise RuntimeError(
                    f"System {type(system).__name__} cannot run: "
                    f"entities missing required components {required}. "
                    f"Available entities: {self.entities}"
                )

            system.run(self.world, runnable)
