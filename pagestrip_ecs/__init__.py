"""Page image descrambling pipeline with ECS architecture.

Reverses row-strip scrambling of page images, crops rectangles and
stacks pages vertically. Every operation decodes once, transforms once
and encodes to 8-bit RGBA PNG:

- Decoder: magic-byte sniffing + Pillow, normalised to RGBA8
- RowRearrange / Crop / VerticalCompose: exact pixel-address remapping
- Encoder: lossless PNG
- Arena allocation per call, no state shared between calls

Quick Start:
    >>> from pagestrip_ecs import rearrange_image_rows, get_image_info
    >>> scrambled = open("page_001.webp", "rb").read()
    >>> get_image_info(scrambled).format
    'webp'
    >>> restored_png = rearrange_image_rows(scrambled, rows=10)

For more control, drive the systems directly:
    >>> from pagestrip_ecs import World
    >>> from pagestrip_ecs.components import PNGBytes
    >>> from pagestrip_ecs.systems import DecodeImage, Crop, EncodePNG
    >>>
    >>> world = World()
    >>> entity = world.spawn_encoded(scrambled)
    >>> png = (
    ...     world.pipe(entity)
    ...     .to(DecodeImage())
    ...     .to(Crop(x=0, y=0, width=100, height=50))
    ...     .to(EncodePNG())
    ...     .out(PNGBytes)
    ... )
"""

__version__ = "0.1.0"

from pagestrip_ecs.api import (
    compose_vertical,
    crop_image,
    get_image_info,
    rearrange_image_rows,
)
from pagestrip_ecs.core.world import World
from pagestrip_ecs.errors import (
    BoundsError,
    DecodeError,
    DegenerateRearrangeError,
    EmptyInputError,
    EncodeError,
    PagestripError,
    PayloadError,
)

__all__ = [
    "__version__",
    "BoundsError",
    "DecodeError",
    "DegenerateRearrangeError",
    "EmptyInputError",
    "EncodeError",
    "PagestripError",
    "PayloadError",
    "World",
    "compose_vertical",
    "crop_image",
    "get_image_info",
    "rearrange_image_rows",
]
