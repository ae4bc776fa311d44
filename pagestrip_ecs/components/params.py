"""Parameter components for the pixel transforms."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RearrangeSpec(BaseModel):
    """Number of horizontal strips the scrambler cut the image into.

    Attributes:
        rows: Strip count, need not divide the image height
    """

    rows: int = Field(ge=1)


class CropRect(BaseModel):
    """Rectangle to extract from a raster.

    Attributes:
        x: Left column
        y: Top row
        width: Columns to keep
        height: Rows to keep
    """

    x: int = Field(ge=0)
    y: int = Field(ge=0)
    width: int = Field(ge=0)
    height: int = Field(ge=0)

    def fits(self, bounds_width: int, bounds_height: int) -> bool:
        """Return True if the rectangle lies inside a raster of that size."""
        return (
            self.x + self.width <= bounds_width
            and self.y + self.height <= bounds_height
        )

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)
