"""Runtime configuration loaded from ``pagestrip.toml``.

Resolution order: ``PAGESTRIP_CONFIG`` env var, explicit path,
``./pagestrip.toml``, ``~/pagestrip.toml``. Without any file the
defaults below apply.

Example ``pagestrip.toml``::

    [pagestrip]
    png_compress_level = 1
    max_image_pixels = 50000000
    max_workers = 4
"""

from __future__ import annotations

import os
from typing import Any, cast

from PIL import Image as PILImage
from pydantic import BaseModel, Field, field_validator

# TOML loading for Python 3.11+ and older
try:
    import tomllib  # type: ignore[import-not-found, unused-ignore]
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found, no-redef, unused-ignore]

CONFIG_ENV = "PAGESTRIP_CONFIG"
CONFIG_FILENAME = "pagestrip.toml"


def pillow_pixel_ceiling() -> int | None:
    """Largest W*H Pillow opens before raising DecompressionBombError."""
    if PILImage.MAX_IMAGE_PIXELS is None:
        return None
    return int(PILImage.MAX_IMAGE_PIXELS) * 2


class Settings(BaseModel):
    """Validated pipeline settings.

    Attributes:
        png_compress_level: zlib level used by the PNG writer (0-9)
        max_image_pixels: Largest W*H accepted by the decoder, capped at
            pillow_pixel_ceiling()
        arena_min_bytes: Lower bound for a per-call arena
        arena_slack_bytes: Headroom added on top of the computed arena size
        max_workers: Default ImagePool size (None means CPU count)
    """

    model_config = {"extra": "forbid"}

    png_compress_level: int = Field(default=6, ge=0, le=9)
    max_image_pixels: int = Field(default=178_956_970, gt=0)
    arena_min_bytes: int = Field(default=1 << 20, gt=0)
    arena_slack_bytes: int = Field(default=64 << 10, ge=0)
    max_workers: int | None = Field(default=None, ge=1)

    @field_validator("max_image_pixels")
    @classmethod
    def _within_pillow_ceiling(cls, value: int) -> int:
        ceiling = pillow_pixel_ceiling()
        if ceiling is not None and value > ceiling:
            raise ValueError(
                f"max_image_pixels {value} exceeds Pillow's decompression-bomb "
                f"ceiling {ceiling}; raise PIL.Image.MAX_IMAGE_PIXELS first"
            )
        return value


def _resolve_config_path(config_path: str | None) -> str | None:
    """Resolve configuration path from env, explicit path, or defaults."""
    env_config = os.environ.get(CONFIG_ENV)
    if env_config:
        return env_config
    if config_path:
        return config_path
    candidates = [
        CONFIG_FILENAME,
        os.path.expanduser(f"~/{CONFIG_FILENAME}"),
    ]
    for candidate in candidates:
        if os.path.exists(candidate):
            return candidate
    return None


def load_settings(config_path: str | None = None) -> Settings:
    """Load settings, falling back to defaults when no file is found.

    Args:
        config_path: Path to pagestrip.toml (auto-detected if None)

    Returns:
        Settings instance

    Raises:
        FileNotFoundError: If an explicitly named config file is missing
        ValueError: If the file contains invalid values
    """
    resolved_path = _resolve_config_path(config_path)
    if resolved_path is None:
        return Settings()
    if not os.path.exists(resolved_path):
        raise FileNotFoundError(
            f"Config file not found at {resolved_path}. "
            f"Set {CONFIG_ENV} or create {CONFIG_FILENAME}"
        )
    with open(resolved_path, "rb") as f:
        config = cast(dict[str, Any], tomllib.load(f))
    section = config.get("pagestrip", {})
    if not isinstance(section, dict):
        raise ValueError(f"[pagestrip] in {resolved_path} must be a table")
    return Settings(**section)
