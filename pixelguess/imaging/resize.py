"""
Purpose:
- Deterministic downsizing of a source picture (nearest neighbour, so the
  result looks pixelated rather than blurred).
- Parse/validate the ratio / pixelwidth request parameters into a ResizeSpec.

Notes:
- The pipeline itself accepts any positive ratio. "Downscale only" is enforced
  by parse_resize_spec and by the picture service, not here.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Optional
from PIL import Image

from ..core.errors import InvalidSpec

NEAREST = Image.Resampling.NEAREST

def _scaled(size: int, ratio: float) -> int:
    # never round down to an empty image
    return max(1, int(round(ratio * size)))

def resize_by_ratio(src: Image.Image, ratio: float) -> Image.Image:
    """
    Scale both axes by the same ratio. Always returns a new image.
    """
    if not ratio > 0 or math.isinf(ratio):
        raise ValueError(f"ratio must be positive, got {ratio!r}")
    width, height = src.size
    new_size = (_scaled(width, ratio), _scaled(height, ratio))
    return src.resize(new_size, resample=NEAREST)

def resize_by_width(src: Image.Image, new_width: int) -> Image.Image:
    if new_width <= 0:
        raise ValueError(f"width must be positive, got {new_width!r}")
    ratio = new_width / src.width
    return resize_by_ratio(src, ratio)

@dataclass(frozen=True)
class ResizeSpec:
    ratio: Optional[float] = None
    width: Optional[int] = None

    def __post_init__(self):
        if self.ratio is None and self.width is None:
            raise InvalidSpec("ratio or pixelwidth is required")

    def ratio_for(self, src_width: int) -> float:
        # pixel width wins when both are present
        if self.width is not None:
            return self.width / src_width
        return float(self.ratio)

    def apply(self, src: Image.Image) -> Image.Image:
        if self.width is not None:
            return resize_by_width(src, self.width)
        return resize_by_ratio(src, self.ratio)

def parse_resize_spec(ratio: Optional[str], pixel_width: Optional[str]) -> ResizeSpec:
    """
    Turn raw query values into a ResizeSpec, raising InvalidSpec on bad input.
    Empty strings count as missing, like HTML form values.
    """
    ratio = (ratio or "").strip()
    pixel_width = (pixel_width or "").strip()
    if not ratio and not pixel_width:
        raise InvalidSpec("ratio or pixelwidth is required")

    parsed_ratio: Optional[float] = None
    if ratio:
        try:
            parsed_ratio = float(ratio)
        except ValueError:
            raise InvalidSpec("ratio must be a number", ratio=ratio)
        if not (0.0 < parsed_ratio <= 1.0):  # also rejects nan
            raise InvalidSpec("ratio must be between 0.0 and 1.0", ratio=parsed_ratio)

    parsed_width: Optional[int] = None
    if pixel_width:
        # plain ASCII digits only: int() would also take "1_000" or non-ASCII digits
        digits = pixel_width[1:] if pixel_width[0] in "+-" else pixel_width
        if not (digits.isascii() and digits.isdigit()):
            raise InvalidSpec("pixelwidth must be an integer number", pixelwidth=pixel_width)
        parsed_width = int(pixel_width)
        if parsed_width <= 0:
            raise InvalidSpec("pixelwidth must be a positive integer", pixelwidth=parsed_width)

    return ResizeSpec(ratio=parsed_ratio, width=parsed_width)
