"""High-level API for descrambling and composing page images.

Each function is one stateless pipeline call: a fresh World sized for
the call, decode -> transform -> encode, and cleanup in ``finally``.
All transforming operations return 8-bit RGBA PNG bytes regardless of
the input format.
"""

from __future__ import annotations

import logging
from typing import Sequence

from pagestrip_ecs.components.image import RGBA, ImageInfo, PNGBytes
from pagestrip_ecs.config import Settings, load_settings
from pagestrip_ecs.core.arena import raster_nbytes
from pagestrip_ecs.core.world import World
from pagestrip_ecs.errors import EmptyInputError
from pagestrip_ecs.systems.codec import DecodeImage, EncodePNG, probe_size
from pagestrip_ecs.systems.compose import VerticalCompose, canvas_shape
from pagestrip_ecs.systems.crop import Crop
from pagestrip_ecs.systems.rearrange import RowRearrange

logger = logging.getLogger(__name__)

Payload = bytes | bytearray | memoryview


def _as_bytes(data: Payload) -> bytes:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"Expected bytes-like image payload, got {type(data).__name__}")
    return bytes(data)


def _arena_bytes(settings: Settings, *raster_sizes: int) -> int:
    """Arena size holding every raster of a call plus slack."""
    return max(settings.arena_min_bytes, sum(raster_sizes) + settings.arena_slack_bytes)


def get_image_info(data: Payload, config_path: str | None = None) -> ImageInfo:
    """Report width, height and format tag of an image.

    The image is fully decoded, so truncated or corrupt payloads fail
    here just as they would in a transform.

    Args:
        data: Encoded image bytes
        config_path: Path to pagestrip.toml (auto-detected if None)

    Returns:
        ImageInfo with the sniffed format tag ('png', 'jpg', 'gif', ...)

    Raises:
        DecodeError: If the payload is unrecognised or malformed

    Example:
        >>> info = get_image_info(open("page.jpg", "rb").read())
        >>> info.format, info.width, info.height
        ('jpg', 800, 1200)
    """
    data = _as_bytes(data)
    settings = load_settings(config_path)
    width, height = probe_size(data, settings.max_image_pixels)

    world = World(arena_bytes=_arena_bytes(settings, raster_nbytes(height, width)))
    try:
        entity = world.spawn_encoded(data)
        rgba: RGBA = (
            world.pipe(entity)
            .to(DecodeImage(max_pixels=settings.max_image_pixels))
            .out(RGBA)
        )
        return ImageInfo(
            width=rgba.width,
            height=rgba.height,
            format=rgba.source_format.value,
        )
    finally:
        world.clear()


def rearrange_image_rows(
    data: Payload,
    rows: int,
    config_path: str | None = None,
) -> bytes:
    """Undo strip scrambling and return the restored image as PNG.

    Args:
        data: Encoded scrambled image
        rows: Number of strips the image was cut into (1 <= rows <= height)
        config_path: Path to pagestrip.toml (auto-detected if None)

    Returns:
        PNG bytes with the same dimensions as the input

    Raises:
        DecodeError: If the payload is unrecognised or malformed
        DegenerateRearrangeError: If rows < 1 or rows > image height
        EncodeError: If PNG serialization fails

    Example:
        >>> restored = rearrange_image_rows(scrambled_bytes, rows=10)
    """
    data = _as_bytes(data)
    # Fail on a bad strip count before touching the payload
    rearrange = RowRearrange(rows=rows)
    settings = load_settings(config_path)
    logger.debug(
        "rearrange_image_rows called with rows=%d, payload=%d bytes", rows, len(data)
    )

    width, height = probe_size(data, settings.max_image_pixels)
    size = raster_nbytes(height, width)
    world = World(arena_bytes=_arena_bytes(settings, size, size))
    try:
        entity = world.spawn_encoded(data)
        png: PNGBytes = (
            world.pipe(entity)
            .to(DecodeImage(max_pixels=settings.max_image_pixels))
            .to(rearrange)
            .to(EncodePNG(compress_level=settings.png_compress_level))
            .out(PNGBytes)
        )
        logger.info(
            "Rearranged %dx%d image in %d strips (remainder %d), output %d bytes",
            width, height, rows, height % rows, len(png.data),
        )
        return png.data
    finally:
        world.clear()


def crop_image(
    data: Payload,
    x: int,
    y: int,
    width: int,
    height: int,
    config_path: str | None = None,
) -> bytes:
    """Crop a rectangle out of an image and return it as PNG.

    Args:
        data: Encoded source image
        x, y: Top-left corner of the crop
        width, height: Size of the crop
        config_path: Path to pagestrip.toml (auto-detected if None)

    Returns:
        PNG bytes of exactly width x height pixels

    Raises:
        DecodeError: If the payload is unrecognised or malformed
        BoundsError: If the rectangle exceeds the image
        EncodeError: If the rectangle is empty or PNG serialization fails
        ValueError: If any coordinate is negative
    """
    data = _as_bytes(data)
    crop = Crop(x=x, y=y, width=width, height=height)
    settings = load_settings(config_path)
    logger.debug("crop_image called with rect=%r", crop.rect.as_tuple())

    src_width, src_height = probe_size(data, settings.max_image_pixels)
    world = World(
        arena_bytes=_arena_bytes(
            settings,
            raster_nbytes(src_height, src_width),
            raster_nbytes(min(height, src_height), min(width, src_width)),
        )
    )
    try:
        entity = world.spawn_encoded(data)
        png: PNGBytes = (
            world.pipe(entity)
            .to(DecodeImage(max_pixels=settings.max_image_pixels))
            .to(crop)
            .to(EncodePNG(compress_level=settings.png_compress_level))
            .out(PNGBytes)
        )
        logger.info(
            "Cropped %dx%d image to %dx%d, output %d bytes",
            src_width, src_height, width, height, len(png.data),
        )
        return png.data
    finally:
        world.clear()


def compose_vertical(
    payloads: Sequence[Payload],
    config_path: str | None = None,
) -> bytes:
    """Stack images top-to-bottom into one PNG.

    Args:
        payloads: Encoded images in stacking order
        config_path: Path to pagestrip.toml (auto-detected if None)

    Returns:
        PNG bytes of width max(W_i) and height sum(H_i)

    Raises:
        EmptyInputError: If payloads is empty
        DecodeError: If any payload is unrecognised or malformed
        EncodeError: If PNG serialization fails
    """
    if isinstance(payloads, (bytes, bytearray, memoryview, str)):
        raise TypeError("compose_vertical expects a sequence of image payloads")
    if not payloads:
        raise EmptyInputError("Image list is empty")

    blobs = [_as_bytes(p) for p in payloads]
    settings = load_settings(config_path)
    logger.debug("compose_vertical called with %d images", len(blobs))

    # probe_size reports (width, height)
    sizes = [probe_size(b, settings.max_image_pixels)[::-1] for b in blobs]
    canvas_height, canvas_width = canvas_shape(sizes)
    world = World(
        arena_bytes=_arena_bytes(
            settings,
            raster_nbytes(canvas_height, canvas_width),
            *(raster_nbytes(h, w) for h, w in sizes),
        )
    )
    try:
        eids = world.spawn_batch_encoded(blobs)
        png: PNGBytes = (
            world.pipe(*eids)
            .to(DecodeImage(max_pixels=settings.max_image_pixels))
            .to(VerticalCompose())
            .to(EncodePNG(compress_level=settings.png_compress_level))
            .out(PNGBytes)
        )
        logger.info(
            "Composed %d images into %dx%d, output %d bytes",
            len(blobs), canvas_width, canvas_height, len(png.data),
        )
        return png.data
    finally:
        world.clear()
