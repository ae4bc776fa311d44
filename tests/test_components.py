"""Tests for component types."""

import numpy as np
import pytest

from pagestrip_ecs.components import (
    RGBA,
    CropRect,
    EncodedImage,
    ImageFormat,
    ImageInfo,
    PNGBytes,
    RearrangeSpec,
    ResultRGBA,
)
from pagestrip_ecs.core.arena import Arena


class TestImageComponents:
    """Tests for image components."""

    def test_rgba_dimensions(self) -> None:
        """RGBA exposes width/height from its RasterRef."""
        arena = Arena(size_bytes=4096)
        ref = arena.alloc_raster(height=7, width=5)
        rgba = RGBA(pix=ref, source_format=ImageFormat.JPEG)

        assert rgba.height == 7
        assert rgba.width == 5
        assert rgba.source_format == "jpg"

    def test_rgba_requires_format(self) -> None:
        """source_format is mandatory and validated."""
        arena = Arena(size_bytes=4096)
        ref = arena.alloc_raster(2, 2)
        with pytest.raises(ValueError):
            RGBA(pix=ref)  # type: ignore[call-arg]
        with pytest.raises(ValueError):
            RGBA(pix=ref, source_format="xcf")  # type: ignore[arg-type]

    def test_result_rgba(self) -> None:
        arena = Arena(size_bytes=4096)
        ref = arena.alloc_raster(3, 4)
        result = ResultRGBA(pix=ref)
        assert (result.height, result.width) == (3, 4)

    def test_encoded_image(self) -> None:
        assert EncodedImage(data=b"\x89PNG").data == b"\x89PNG"

    def test_png_bytes_minimum_length(self) -> None:
        """PNGBytes must at least hold the signature."""
        with pytest.raises(ValueError):
            PNGBytes(data=b"short")

    def test_image_info_json(self) -> None:
        """ImageInfo serializes to the metadata JSON shape."""
        info = ImageInfo(width=3, height=4, format="png")
        assert info.model_dump() == {"width": 3, "height": 4, "format": "png"}

    def test_format_tags(self) -> None:
        """At least PNG, JPEG and GIF tags are available."""
        assert {f.value for f in ImageFormat} >= {"png", "jpg", "gif"}


class TestParamComponents:
    """Tests for RearrangeSpec and CropRect."""

    def test_rearrange_spec_positive(self) -> None:
        assert RearrangeSpec(rows=3).rows == 3
        with pytest.raises(ValueError):
            RearrangeSpec(rows=0)

    def test_crop_rect_negative(self) -> None:
        with pytest.raises(ValueError):
            CropRect(x=-1, y=0, width=1, height=1)

    @pytest.mark.parametrize(
        "rect, fits",
        [
            ((0, 0, 10, 8), True),
            ((5, 3, 5, 5), True),
            ((6, 0, 5, 1), False),
            ((0, 4, 1, 5), False),
            ((10, 8, 0, 0), True),
        ],
    )
    def test_crop_rect_fits(self, rect: tuple[int, int, int, int], fits: bool) -> None:
        """fits() checks x+width <= W and y+height <= H."""
        x, y, w, h = rect
        assert CropRect(x=x, y=y, width=w, height=h).fits(10, 8) is fits

    def test_crop_rect_as_tuple(self) -> None:
        assert CropRect(x=1, y=2, width=3, height=4).as_tuple() == (1, 2, 3, 4)
