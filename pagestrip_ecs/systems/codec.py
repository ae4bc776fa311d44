"""Decode and encode systems.

Decoding sniffs the container format from its magic bytes, then lets
Pillow decode that format only and normalises the pixels to RGBA8.
Encoding always writes 8-bit RGBA PNG.
"""

from __future__ import annotations

import io
import logging

import numpy as np
from PIL import Image as PILImage

from pagestrip_ecs.components.image import (
    RGBA,
    EncodedImage,
    ImageFormat,
    PNGBytes,
    Raster,
    ResultRGBA,
)
from pagestrip_ecs.core.system import System
from pagestrip_ecs.core.world import World
from pagestrip_ecs.errors import DecodeError, EncodeError

logger = logging.getLogger(__name__)

# (prefix, offset, format); first match wins
_MAGIC: list[tuple[bytes, int, ImageFormat]] = [
    (b"\x89PNG\r\n\x1a\n", 0, ImageFormat.PNG),
    (b"\xff\xd8\xff", 0, ImageFormat.JPEG),
    (b"GIF87a", 0, ImageFormat.GIF),
    (b"GIF89a", 0, ImageFormat.GIF),
    (b"WEBP", 8, ImageFormat.WEBP),
    (b"II*\x00", 0, ImageFormat.TIFF),
    (b"MM\x00*", 0, ImageFormat.TIFF),
    (b"II+\x00", 0, ImageFormat.TIFF),
    (b"MM\x00+", 0, ImageFormat.TIFF),
    (b"\x00\x00\x01\x00", 0, ImageFormat.ICO),
    (b"qoif", 0, ImageFormat.QOI),
    (b"DDS ", 0, ImageFormat.DDS),
    (b"BM", 0, ImageFormat.BMP),
]
_PNM_PREFIXES = tuple(f"P{n}".encode() for n in range(1, 7))

# Pillow plugin name per format, so a payload is only parsed as what it claims to be
_PIL_FORMATS: dict[ImageFormat, str] = {
    ImageFormat.PNG: "PNG",
    ImageFormat.JPEG: "JPEG",
    ImageFormat.GIF: "GIF",
    ImageFormat.WEBP: "WEBP",
    ImageFormat.BMP: "BMP",
    ImageFormat.TIFF: "TIFF",
    ImageFormat.ICO: "ICO",
    ImageFormat.QOI: "QOI",
    ImageFormat.DDS: "DDS",
    ImageFormat.PNM: "PPM",
}

_PIL_ERRORS = (
    OSError,
    ValueError,
    SyntaxError,
    EOFError,
    PILImage.DecompressionBombError,
)

_HIGH_DEPTH_MODES = ("I;16", "I;16B", "I;16L", "I;16N", "I")


def sniff_format(data: bytes) -> ImageFormat:
    """Identify the container format from leading magic bytes.

    Raises:
        DecodeError: If no known signature matches
    """
    for magic, offset, fmt in _MAGIC:
        if fmt is ImageFormat.WEBP and not data.startswith(b"RIFF"):
            continue
        if data[offset:offset + len(magic)] == magic:
            return fmt
    if len(data) > 2 and data[:2] in _PNM_PREFIXES and data[2:3].isspace():
        return ImageFormat.PNM
    raise DecodeError(
        f"Unrecognised image format (leading bytes {bytes(data[:8])!r})"
    )


def _open(data: bytes, fmt: ImageFormat) -> PILImage.Image:
    try:
        return PILImage.open(io.BytesIO(data), formats=[_PIL_FORMATS[fmt]])
    except _PIL_ERRORS as exc:
        raise DecodeError(f"Malformed {fmt.value} payload: {exc}") from exc


def _check_pixels(size: tuple[int, int], max_pixels: int | None) -> None:
    width, height = size
    if max_pixels is not None and width * height > max_pixels:
        raise DecodeError(
            f"Image is {width}x{height} ({width * height} pixels), "
            f"limit is {max_pixels}"
        )


def probe_size(data: bytes, max_pixels: int | None = None) -> tuple[int, int]:
    """Read (width, height) from the header without decoding pixels.

    Raises:
        DecodeError: If the format is unknown or the header is malformed
    """
    fmt = sniff_format(data)
    with _open(data, fmt) as img:
        size = img.size
    _check_pixels(size, max_pixels)
    return size


def _to_rgba(img: PILImage.Image) -> PILImage.Image:
    if img.mode in _HIGH_DEPTH_MODES:
        # 16-bit samples: keep the high byte
        wide = np.clip(np.asarray(img).astype(np.int64), 0, 0xFFFF)
        img = PILImage.fromarray((wide >> 8).astype(np.uint8))
    if img.mode == "RGBA":
        return img
    return img.convert("RGBA")


def decode_rgba(
    data: bytes, max_pixels: int | None = None
) -> tuple[np.ndarray, ImageFormat]:
    """Fully decode a payload to an (H, W, 4) uint8 array.

    Multi-frame inputs yield their first frame. Missing alpha becomes 255.

    Args:
        data: Encoded image bytes
        max_pixels: Reject images with more than this many pixels

    Returns:
        Tuple of (pixels, sniffed format)

    Raises:
        DecodeError: If the format is unknown, the payload is malformed,
            or the image exceeds max_pixels
    """
    fmt = sniff_format(data)
    with _open(data, fmt) as img:
        _check_pixels(img.size, max_pixels)
        try:
            img.load()
            rgba = _to_rgba(img)
        except _PIL_ERRORS as exc:
            raise DecodeError(f"Malformed {fmt.value} payload: {exc}") from exc
        pix = np.asarray(rgba, dtype=np.uint8)
    return pix, fmt


def encode_png(pix: np.ndarray, compress_level: int = 6) -> bytes:
    """Serialize an (H, W, 4) uint8 raster as 8-bit RGBA PNG.

    Raises:
        EncodeError: If the raster is empty or the writer fails
    """
    if pix.ndim != 3 or pix.shape[2] != 4 or pix.dtype != np.uint8:
        raise EncodeError(f"Expected (H, W, 4) uint8 raster, got {pix.shape} {pix.dtype}")
    height, width = pix.shape[:2]
    if width == 0 or height == 0:
        raise EncodeError(f"Cannot encode empty {width}x{height} image as PNG")

    buf = io.BytesIO()
    try:
        PILImage.fromarray(np.ascontiguousarray(pix)).save(
            buf, format="PNG", compress_level=compress_level
        )
    except (OSError, ValueError) as exc:
        raise EncodeError(f"PNG encoding failed: {exc}") from exc
    return buf.getvalue()


class DecodeImage(System):
    """Decode EncodedImage payloads into RGBA rasters.

    Input: EncodedImage
    Output: RGBA with pixels copied into the world arena
    """

    def __init__(self, max_pixels: int | None = None) -> None:
        """Initialize decoder.

        Args:
            max_pixels: Largest W*H accepted (None disables the check)
        """
        self.max_pixels = max_pixels

    def required_components(self) -> list[type]:
        return [EncodedImage]

    def produced_components(self) -> list[type]:
        return [RGBA]

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            encoded = world.get_component(eid, EncodedImage)
            pix, fmt = decode_rgba(encoded.data, self.max_pixels)
            pix_ref = world.arena.copy_raster(pix)
            world.add_component(eid, RGBA(pix=pix_ref, source_format=fmt))
            logger.debug(
                "Decoded entity %d: %s %dx%d (%d bytes)",
                eid, fmt.value, pix.shape[1], pix.shape[0], len(encoded.data),
            )


class EncodePNG(System):
    """Encode a raster component to PNGBytes.

    By default encodes the transform output (ResultRGBA); pass
    ``source=RGBA`` to re-encode decoded input unchanged.
    """

    def __init__(
        self,
        compress_level: int = 6,
        source: type[Raster] = ResultRGBA,
    ) -> None:
        """Initialize encoder.

        Args:
            compress_level: zlib level 0-9
            source: Raster component type to encode
        """
        if not 0 <= compress_level <= 9:
            raise ValueError(f"compress_level must be in [0, 9], got {compress_level}")
        self.compress_level = compress_level
        self.source = source

    def required_components(self) -> list[type]:
        return [self.source]

    def produced_components(self) -> list[type]:
        return [PNGBytes]

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            raster = world.get_component(eid, self.source)
            pix = world.arena.view(raster.pix)
            data = encode_png(pix, self.compress_level)
            world.add_component(eid, PNGBytes(data=data))
            logger.debug(
                "Encoded entity %d: %dx%d -> %d PNG bytes",
                eid, raster.width, raster.height, len(data),
            )
