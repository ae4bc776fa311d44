"""Image components: EncodedImage, RGBA, ResultRGBA, PNGBytes."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from pagestrip_ecs.core.arena import RasterRef


class Component(BaseModel):
    """Base class for all ECS components.

    Components are data containers using Pydantic for validation and type safety.
    Pixel data is stored as RasterRef handles pointing into the arena.
    """

    model_config = {"arbitrary_types_allowed": True}


class ImageFormat(str, Enum):
    """Container formats recognised by magic-byte sniffing.

    Values are the conventional file extension for each format.
    """

    PNG = "png"
    JPEG = "jpg"
    GIF = "gif"
    WEBP = "webp"
    BMP = "bmp"
    TIFF = "tiff"
    ICO = "ico"
    QOI = "qoi"
    DDS = "dds"
    PNM = "pnm"


class EncodedImage(Component):
    """Raw image payload as received from the caller.

    Attributes:
        data: Encoded image bytes in any supported container format
    """

    data: bytes


class Raster(Component):
    """Base for components that own an RGBA8 pixel buffer.

    Attributes:
        pix: RasterRef to (H, W, 4) uint8 pixels, row-major
    """

    pix: RasterRef

    @property
    def height(self) -> int:
        return self.pix.height

    @property
    def width(self) -> int:
        return self.pix.width


class RGBA(Raster):
    """Decoded source raster, normalised to RGBA8.

    Attributes:
        pix: RasterRef to (H, W, 4) uint8 pixels
        source_format: Container format the pixels were decoded from
    """

    source_format: ImageFormat


class ResultRGBA(Raster):
    """Raster produced by a transform (rearrange, crop or compose)."""


class PNGBytes(Component):
    """Encoded PNG output (8-bit RGBA).

    Attributes:
        data: PNG file bytes
    """

    data: bytes = Field(min_length=8)


class ImageInfo(BaseModel):
    """Metadata query result.

    Attributes:
        width: Image width in pixels
        height: Image height in pixels
        format: Format tag, e.g. 'png', 'jpg', 'gif'
    """

    width: int = Field(ge=0)
    height: int = Field(ge=0)
    format: str
