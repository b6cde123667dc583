"""
Purpose:
- Centralized configuration using pydantic-settings.
- Reads from environment variables and optional .env file.
- Keeps the model endpoint, store capacity and paths tunable without code changes.
"""

from typing import List, Optional
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PROMPT = "What does this picture look like? Provide a short answer in less than 8 words."

class Settings(BaseSettings):
    # Pydantic v2 config (env file + ignore unexpected env vars)
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),  # allows the model_name field
    )

    # API bind address/port (ADDR and PORT, like Cloud Run)
    addr: str = Field(default="", description="Bind address; empty means all interfaces")
    port: int = Field(default=8080, description="Port for FastAPI/Uvicorn")
    log_level: str = Field(default="INFO")

    # CORS
    cors_allow_origins: List[str] = Field(default=["*"], description="Allowed origins for browser apps")

    # ---- Vertex AI / Gemini ----
    google_cloud_project: Optional[str] = Field(default=None, description="GCP project hosting Vertex AI")
    model_name: str = Field(default="gemini-2.0-flash")
    location: str = Field(default="us-central1")
    temperature: float = Field(default=0.4)
    prompt: str = Field(default=DEFAULT_PROMPT)

    # retry policy for the captioning call
    caption_max_attempts: int = Field(default=3, ge=1)
    caption_retry_delay: float = Field(default=0.5, ge=0.0, description="Fixed wait between attempts, seconds")

    # toggle: if true, never call Vertex AI and describe the image locally
    use_stub_captioner: bool = Field(default=False)

    # ---- User image store ----
    # We don't wish to keep many user images in memory.
    max_images: int = Field(default=20, ge=1)
    image_id_length: int = Field(default=4, ge=1)

    # ---- Encoding / files ----
    jpeg_quality: int = Field(default=75, ge=1, le=95)
    base_dir: Path = Field(default=Path("."), description="Directory holding samples/, static/ and index.html")
    samples_dir: str = Field(default="samples")
    static_dir: str = Field(default="static")
    index_html: str = Field(default="index.html")

    @property
    def host(self) -> str:
        return self.addr or "0.0.0.0"

    @property
    def samples_path(self) -> Path:
        return Path(self.base_dir) / self.samples_dir

    @property
    def static_path(self) -> Path:
        return Path(self.base_dir) / self.static_dir

    @property
    def index_path(self) -> Path:
        return Path(self.base_dir) / self.index_html

settings = Settings()
