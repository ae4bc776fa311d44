"""Pipeline systems: decode, rearrange, crop, compose, encode."""

from pagestrip_ecs.systems.codec import DecodeImage, EncodePNG
from pagestrip_ecs.systems.compose import VerticalCompose
from pagestrip_ecs.systems.crop import Crop
from pagestrip_ecs.systems.rearrange import RowRearrange

__all__ = [
    "Crop",
    "DecodeImage",
    "EncodePNG",
    "RowRearrange",
    "VerticalCompose",
]
