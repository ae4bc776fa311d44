"""Core ECS machinery: arena, world, systems, pipelines."""

from pagestrip_ecs.core.arena import Arena, RasterRef
from pagestrip_ecs.core.pipeline import Pipe
from pagestrip_ecs.core.system import System
from pagestrip_ecs.core.world import World

__all__ = ["Arena", "Pipe", "RasterRef", "System", "World"]
