"""
Purpose:
- Keep user-uploaded pictures in memory under short random ids, so the page can
  then call /resized?imgid=abcd&pixelwidth=8, /guess?imgid=abcd&pixelwidth=8, ...
- Bounded: once max_images is reached, the oldest picture is dropped.

Notes:
- Nothing is persisted; a restart forgets every upload.
- One lock guards the size check, eviction, id generation and insertion.
- Ids are not crypto secure, and the id space is small (62**4). Entries are
  short-lived, and we re-draw on collision with a live or recently evicted id.
"""

from __future__ import annotations
import logging
import random
import string
import threading
from collections import OrderedDict, deque
from typing import List, Optional

import psutil
from PIL import Image

logger = logging.getLogger(__name__)

ALPHANUM = string.ascii_uppercase + string.ascii_lowercase + string.digits
# how many evicted ids we refuse to hand out again
RETIRED_IDS = 1000

def log_memory_usage() -> None:
    # We let the GC do its work; this only reports.
    mem = psutil.Process().memory_info()
    logger.info("Mem RSS = %d MiB, VMS = %d MiB", mem.rss // (1024 * 1024), mem.vms // (1024 * 1024))

class UserImageStore:
    def __init__(self, max_images: int = 20, id_length: int = 4, rng: Optional[random.Random] = None):
        if max_images < 1:
            raise ValueError("max_images must be at least 1")
        id_space = len(ALPHANUM) ** id_length
        if id_space <= max_images:
            raise ValueError(f"{id_length}-character ids cannot address {max_images} images")
        self.max_images = max_images
        self.id_length = id_length
        self._rng = rng or random.Random()
        self._images: "OrderedDict[str, Image.Image]" = OrderedDict()
        # leave at least one id free, or _new_id would spin forever
        self._retired: "deque[str]" = deque(maxlen=min(RETIRED_IDS, id_space - max_images - 1))
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._images)

    def __contains__(self, image_id: object) -> bool:
        with self._lock:
            return image_id in self._images

    def ids(self) -> List[str]:
        """Live ids, oldest first."""
        with self._lock:
            return list(self._images)

    def put(self, img: Image.Image) -> str:
        with self._lock:
            evicted = []
            while len(self._images) >= self.max_images:
                evicted.append(self._evict_oldest())
            image_id = self._new_id()
            self._images[image_id] = img
        for old_id in evicted:
            logger.info("Deleting stored image %s", old_id)
        logger.info("Storing image %s", image_id)
        log_memory_usage()
        return image_id

    def get(self, image_id: str) -> Optional[Image.Image]:
        """Return the stored picture, or None if the id is unknown or evicted."""
        with self._lock:
            img = self._images.get(image_id)
        if img is None:
            logger.info("Could not find stored image %s", image_id)
        else:
            logger.info("Found stored image %s", image_id)
        return img

    def clear(self) -> None:
        with self._lock:
            self._images.clear()

    # caller holds the lock
    def _evict_oldest(self) -> str:
        image_id, _ = self._images.popitem(last=False)
        self._retired.append(image_id)
        return image_id

    def _random_id(self) -> str:
        return "".join(self._rng.choice(ALPHANUM) for _ in range(self.id_length))

    def _new_id(self) -> str:
        image_id = self._random_id()
        while image_id in self._images or image_id in self._retired:
            logger.debug("Image id collision on %s, drawing again", image_id)
            image_id = self._random_id()
        return image_id
