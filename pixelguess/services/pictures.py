"""
Purpose:
- The "service" orchestrates upload -> store, and source -> resize -> encode -> caption.
- Route handlers stay thin: they map query params in and errors to HTTP codes out.

Notes:
- Resize parameters are validated before any picture is loaded or resized.
- imgid wins over sample when a request carries both.
"""

from __future__ import annotations
import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional
from PIL import Image

from ..core.errors import DecodeError, ImageNotFound, InvalidSpec
from ..imaging.codec import decode_image, encode_jpeg
from ..imaging.resize import ResizeSpec, parse_resize_spec
from ..store.user_images import UserImageStore
from .samples import SampleLibrary

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class UploadResult:
    image_id: str
    width: int
    height: int

    def as_response(self) -> dict:
        return {"imageID": self.image_id, "width": self.width, "height": self.height}

class PictureService:
    def __init__(self, store: UserImageStore, captioner: Any, samples: SampleLibrary, jpeg_quality: int = 75):
        self.store = store
        self.captioner = captioner
        self.samples = samples
        self.jpeg_quality = jpeg_quality

    def upload(self, data: bytes) -> UploadResult:
        logger.info("Receiving user picture of size %d", len(data))
        try:
            img = decode_image(data)
        except DecodeError as e:
            logger.info("decoding user provided image: %s", e)
            raise
        width, height = img.size
        image_id = self.store.put(img)
        return UploadResult(image_id=image_id, width=width, height=height)

    def source_image(self, image_id: Optional[str] = None, sample: Optional[str] = None) -> Image.Image:
        if image_id:
            # Referencing a picture already uploaded by the user
            logger.info("Resizing picture %s", image_id)
            img = self.store.get(image_id)
            if img is None:
                raise ImageNotFound(image_id)
            return img
        if sample:
            # User has clicked one of the sample pictures
            return self.samples.load(sample)
        raise InvalidSpec("imgid or sample is required")

    def resized(self, image_id: Optional[str] = None, sample: Optional[str] = None,
                ratio: Optional[str] = None, pixel_width: Optional[str] = None) -> Image.Image:
        spec = parse_resize_spec(ratio, pixel_width)
        src = self.source_image(image_id=image_id, sample=sample)
        return self.resize(src, spec)

    def resize(self, src: Image.Image, spec: ResizeSpec) -> Image.Image:
        if spec.width is not None:
            if spec.width > src.width:
                raise InvalidSpec(f"pixelwidth must not exceed the original width ({src.width})",
                                  pixelwidth=spec.width)
            logger.info("Resizing with width %d => ratio %.4f", spec.width, spec.ratio_for(src.width))
        else:
            logger.info("Resizing with ratio %s", spec.ratio)
        return spec.apply(src)

    def resized_jpeg(self, image_id: Optional[str] = None, sample: Optional[str] = None,
                     ratio: Optional[str] = None, pixel_width: Optional[str] = None) -> bytes:
        img = self.resized(image_id=image_id, sample=sample, ratio=ratio, pixel_width=pixel_width)
        return encode_jpeg(img, quality=self.jpeg_quality)

    def guess(self, image_id: Optional[str] = None, sample: Optional[str] = None,
              ratio: Optional[str] = None, pixel_width: Optional[str] = None,
              cancel: Optional[threading.Event] = None) -> str:
        """
        Resize, encode to JPEG, and ask the captioning model what it sees.
        """
        jpeg_data = self.resized_jpeg(image_id=image_id, sample=sample, ratio=ratio, pixel_width=pixel_width)
        return self.captioner.caption(jpeg_data, cancel=cancel)
