"""
Purpose:
- Resolve bundled sample pictures named like "samples/sample18.jpg".
- Path-safety: only names under samples/, ending in .jpg, without "..".
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import List
from PIL import Image

from ..core.errors import DecodeError, InvalidSample, SampleUnavailable
from ..imaging.codec import load_image_file

logger = logging.getLogger(__name__)

SAMPLE_PREFIX = "samples/"
SAMPLE_SUFFIX = ".jpg"

def validate_sample_name(name: str) -> str:
    if not name.startswith(SAMPLE_PREFIX) or not name.endswith(SAMPLE_SUFFIX) or ".." in name:
        raise InvalidSample("invalid sample", sample=name)
    return name

class SampleLibrary:
    def __init__(self, samples_dir: Path):
        # "samples/x.jpg" maps to <samples_dir>/x.jpg
        self.samples_dir = Path(samples_dir)

    def path_for(self, name: str) -> Path:
        validate_sample_name(name)
        return self.samples_dir / name[len(SAMPLE_PREFIX):]

    def load(self, name: str) -> Image.Image:
        path = self.path_for(name)
        try:
            return load_image_file(path)
        except (OSError, DecodeError) as e:
            logger.error("unable to open sample %r: %s", name, e)
            raise SampleUnavailable("unable to open sample", sample=name) from e

    def list_samples(self) -> List[str]:
        if not self.samples_dir.is_dir():
            return []
        return [SAMPLE_PREFIX + p.name for p in sorted(self.samples_dir.glob("*" + SAMPLE_SUFFIX))]
