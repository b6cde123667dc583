"""
Purpose:
- Gemini (Vertex AI) endpoint behind the Captioner retry wrapper.
- get_captioner(): cached captioner built from settings, with a clean stub
  fallback when Vertex AI is disabled or the client cannot be created.
"""

from __future__ import annotations
import logging
import threading
from typing import List, Optional

from google.genai.client import Client
from google.genai.types import GenerateContentConfig, Part

from ..core.settings import Settings, settings
from .captioner import Captioner, RetryPolicy, StubCaptioner

logger = logging.getLogger(__name__)

_CAPTIONER_SINGLETON = None  # cached instance
_SINGLETON_LOCK = threading.Lock()

class GeminiEndpoint:
    """Gemini client calling Vertex AI for one image + one text prompt."""

    def __init__(self, *, project: Optional[str], location: str, model_name: str, client: Optional[Client] = None):
        self.project = project
        self.location = location
        self.model_name = model_name
        self.client = client or Client(vertexai=True, project=project, location=location)
        logger.info("Using Gemini model %s in %s", self.model_name, self.location)

    def generate(self, image_bytes: bytes, mime_type: str, prompt: str, temperature: float) -> List[str]:
        contents = [Part.from_bytes(data=image_bytes, mime_type=mime_type), prompt]
        response = self.client.models.generate_content(
            model=self.model_name,
            contents=contents,
            config=GenerateContentConfig(temperature=temperature),
        )
        answers: List[str] = []
        for candidate in (response.candidates or []):
            parts = candidate.content.parts if candidate.content else None
            if parts and parts[0].text:
                answers.append(parts[0].text.strip())
        if not answers:
            raise RuntimeError("Gemini response has no text candidates")
        return answers

def build_captioner(cfg: Settings):
    """
    Build a fresh captioner from settings (no caching).
    """
    if cfg.use_stub_captioner:
        return StubCaptioner(reason="disabled by configuration")
    endpoint = GeminiEndpoint(
        project=cfg.google_cloud_project,
        location=cfg.location,
        model_name=cfg.model_name,
    )
    return Captioner(
        endpoint,
        prompt=cfg.prompt,
        temperature=cfg.temperature,
        policy=RetryPolicy(max_attempts=cfg.caption_max_attempts, delay=cfg.caption_retry_delay),
    )

def get_captioner():
    """
    Return the cached process-wide captioner.
    """
    global _CAPTIONER_SINGLETON
    with _SINGLETON_LOCK:
        if _CAPTIONER_SINGLETON is not None:
            return _CAPTIONER_SINGLETON
        try:
            _CAPTIONER_SINGLETON = build_captioner(settings)
        except Exception as e:
            logger.error("Unable to create Vertex AI client, using stub captioner: %s", e)
            _CAPTIONER_SINGLETON = StubCaptioner(reason=str(e))
        return _CAPTIONER_SINGLETON
