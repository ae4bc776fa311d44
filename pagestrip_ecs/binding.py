"""Text-safe boundary for hosts that cannot pass raw bytes.

Images cross this boundary as standard base64 strings; the composition
list is a JSON array of base64 strings and the metadata query answers
with a JSON object. Core errors propagate unchanged; only malformed
transport payloads raise PayloadError.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from pagestrip_ecs import api
from pagestrip_ecs.errors import PayloadError


def _decode_b64(text: str) -> bytes:
    if not isinstance(text, str):
        raise PayloadError(f"Expected base64 string, got {type(text).__name__}")
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise PayloadError(f"Invalid base64 image payload: {exc}") from exc


def _encode_b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def get_image_info_b64(image_b64: str, config_path: str | None = None) -> str:
    """Return ``{"width", "height", "format"}`` as a JSON string."""
    info = api.get_image_info(_decode_b64(image_b64), config_path=config_path)
    return info.model_dump_json()


def rearrange_image_rows_b64(
    image_b64: str, rows: int, config_path: str | None = None
) -> str:
    """Base64 wrapper around api.rearrange_image_rows; returns base64 PNG."""
    png = api.rearrange_image_rows(_decode_b64(image_b64), rows, config_path=config_path)
    return _encode_b64(png)


def crop_image_b64(
    image_b64: str,
    x: int,
    y: int,
    width: int,
    height: int,
    config_path: str | None = None,
) -> str:
    """Base64 wrapper around api.crop_image; returns base64 PNG."""
    png = api.crop_image(
        _decode_b64(image_b64), x, y, width, height, config_path=config_path
    )
    return _encode_b64(png)


def compose_vertical_b64(image_list_json: str, config_path: str | None = None) -> str:
    """Compose a JSON array of base64 images; returns base64 PNG.

    Raises:
        PayloadError: If the JSON is invalid or not an array of strings
        EmptyInputError: If the array is empty
    """
    try:
        items: Any = json.loads(image_list_json)
    except (json.JSONDecodeError, TypeError) as exc:
        raise PayloadError(f"Failed to parse image list JSON: {exc}") from exc
    if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
        raise PayloadError("Image list must be a JSON array of base64 strings")

    png = api.compose_vertical([_decode_b64(i) for i in items], config_path=config_path)
    return _encode_b64(png)
