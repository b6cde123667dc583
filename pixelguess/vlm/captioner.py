"""
Purpose:
- Small interface for image captioning: JPEG bytes in, short caption out.
- Wraps any CaptionEndpoint with the fixed retry policy (3 attempts, 500ms apart).
- Stub captioner for local runs without Vertex AI credentials.

Notes:
- Every failure is retried the same way. We sometimes get
  "Request contains an invalid argument" from the model on perfectly good
  input, so there is no retryable / non-retryable split.
"""

from __future__ import annotations
import logging
import threading
import time
from dataclasses import dataclass
from io import BytesIO
from typing import Callable, List, Optional, Protocol

from PIL import Image

from ..core.errors import InferenceCancelled, InferenceError
from ..core.settings import DEFAULT_PROMPT
from ..imaging.codec import JPEG_MIME

logger = logging.getLogger(__name__)

class CaptionEndpoint(Protocol):
    def generate(self, image_bytes: bytes, mime_type: str, prompt: str, temperature: float) -> List[str]:
        """Return the model's candidate answers, best first."""
        ...

@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    delay: float = 0.5   # seconds, fixed; no backoff, no jitter

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must not be negative")

class Captioner:
    def __init__(
        self,
        endpoint: CaptionEndpoint,
        *,
        prompt: str = DEFAULT_PROMPT,
        temperature: float = 0.4,
        policy: RetryPolicy = RetryPolicy(),
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.endpoint = endpoint
        self.prompt = prompt
        self.temperature = temperature
        self.policy = policy
        self._sleep = sleep

    def _wait(self, cancel: Optional[threading.Event]) -> None:
        if self._sleep is not None:
            self._sleep(self.policy.delay)
        elif cancel is not None:
            cancel.wait(self.policy.delay)
        else:
            time.sleep(self.policy.delay)

    def caption(self, image_bytes: bytes, prompt: Optional[str] = None,
                cancel: Optional[threading.Event] = None) -> str:
        """
        Ask the model what the picture looks like and return its first answer.
        Raises InferenceError once every attempt failed, InferenceCancelled if
        cancel gets set while we are still trying.
        """
        prompt = prompt or self.prompt
        attempts = self.policy.max_attempts
        for attempt in range(1, attempts + 1):
            if cancel is not None and cancel.is_set():
                raise InferenceCancelled("caption request cancelled", attempts=attempt - 1)
            try:
                candidates = self.endpoint.generate(image_bytes, JPEG_MIME, prompt, self.temperature)
                if not candidates:
                    raise ValueError("model returned no candidates")
                return candidates[0]
            except Exception as e:
                logger.warning("Error calling GenerateContent: %s", e)
                if attempt == attempts:
                    logger.error("Giving up on caption after %d attempts to call GenerateContent", attempts)
                    raise InferenceError(attempts=attempts) from e
                logger.info("Attempt %d failed, retrying GenerateContent", attempt)
                self._wait(cancel)
        # unreachable: the last attempt either returns or raises
        raise InferenceError(attempts=attempts)

class StubCaptioner:
    """
    Offline placeholder: describes the picture by its size only.
    """

    def __init__(self, reason: Optional[str] = None):
        self.reason = reason

    def caption(self, image_bytes: bytes, prompt: Optional[str] = None,
                cancel: Optional[threading.Event] = None) -> str:
        with Image.open(BytesIO(image_bytes)) as img:
            w, h = img.size
        return f"Photo ({w}x{h}); captioning model not wired."
