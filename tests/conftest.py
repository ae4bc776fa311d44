"""Shared image factories for the test suite."""

from __future__ import annotations

import io
from typing import Callable

import numpy as np
import pytest
from PIL import Image


def row_coded(height: int, width: int) -> np.ndarray:
    """(H, W, 4) uint8 image whose every row has a distinct solid colour.

    Row r is (r % 256, r // 256, 200, 255), so row identity survives a
    lossless round trip and can be read back from the red/green channels.
    """
    pix = np.zeros((height, width, 4), dtype=np.uint8)
    rows = np.arange(height)
    pix[:, :, 0] = (rows % 256)[:, None]
    pix[:, :, 1] = (rows // 256)[:, None]
    pix[:, :, 2] = 200
    pix[:, :, 3] = 255
    return pix


def row_ids(pix: np.ndarray) -> list[int]:
    """Recover the source row index of every row of a row_coded image."""
    return [int(r) + 256 * int(g) for r, g in zip(pix[:, 0, 0], pix[:, 0, 1])]


def encode(pix: np.ndarray, fmt: str = "PNG", **params: object) -> bytes:
    """Encode an array with Pillow."""
    buf = io.BytesIO()
    Image.fromarray(pix).save(buf, format=fmt, **params)
    return buf.getvalue()


def decode(data: bytes) -> np.ndarray:
    """Decode bytes to an (H, W, 4) array with Pillow."""
    with Image.open(io.BytesIO(data)) as img:
        return np.asarray(img.convert("RGBA")).copy()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def random_rgba(rng: np.random.Generator) -> Callable[[int, int], np.ndarray]:
    """Factory for random (H, W, 4) uint8 images."""

    def _make(height: int, width: int) -> np.ndarray:
        return rng.integers(0, 256, (height, width, 4), dtype=np.uint8)

    return _make


@pytest.fixture
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Make sure no stray pagestrip.toml or env var leaks into a test."""
    monkeypatch.delenv("PAGESTRIP_CONFIG", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
