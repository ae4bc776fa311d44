"""ECS components: plain pydantic data containers."""

from pagestrip_ecs.components.image import (
    RGBA,
    Component,
    EncodedImage,
    ImageFormat,
    ImageInfo,
    PNGBytes,
    Raster,
    ResultRGBA,
)
from pagestrip_ecs.components.params import CropRect, RearrangeSpec

__all__ = [
    "Component",
    "CropRect",
    "EncodedImage",
    "ImageFormat",
    "ImageInfo",
    "PNGBytes",
    "RGBA",
    "Raster",
    "RearrangeSpec",
    "ResultRGBA",
]
