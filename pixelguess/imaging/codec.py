"""
Purpose:
- Decode uploaded/bundled bytes into PIL images.
- Encode PIL images to JPEG for the browser and the captioning model.

Notes:
- Image.open is lazy; we call load() so truncated uploads fail at decode time,
  not later inside resize or encode.
"""

from __future__ import annotations
from io import BytesIO
from pathlib import Path
from typing import Union
from PIL import Image

from ..core.errors import DecodeError, ImageEncodingError

JPEG_MIME = "image/jpeg"

def decode_image(data: bytes) -> Image.Image:
    if not data:
        raise DecodeError("empty image data")
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except Exception as e:  # Pillow raises many kinds on hostile input
        raise DecodeError(f"unable to decode image: {e}") from e
    return img

def load_image_file(path: Union[str, Path]) -> Image.Image:
    """
    Read and decode an image file. I/O errors propagate as OSError.
    """
    data = Path(path).read_bytes()
    return decode_image(data)

def _jpeg_ready(img: Image.Image) -> Image.Image:
    # JPEG has no alpha; composite transparent pixels over black
    if img.mode in ("RGB", "L", "CMYK"):
        return img
    if img.mode in ("RGBA", "LA", "P", "PA"):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, (0, 0, 0))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return img.convert("RGB")

def encode_jpeg(img: Image.Image, quality: int = 75) -> bytes:
    buffer = BytesIO()
    try:
        _jpeg_ready(img).save(buffer, format="JPEG", quality=quality)
    except (OSError, ValueError, KeyError) as e:
        raise ImageEncodingError(f"failed at encoding a JPEG: {e!r}", width=img.width, height=img.height) from e
    return buffer.getvalue()
