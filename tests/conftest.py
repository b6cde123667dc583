import io
import random
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from pixelguess.core.settings import Settings
from pixelguess.main import create_app
from pixelguess.services.pictures import PictureService
from pixelguess.services.samples import SampleLibrary
from pixelguess.store.user_images import UserImageStore
from pixelguess.vlm.captioner import StubCaptioner


def make_image(width=100, height=50, mode="RGB", color=(200, 30, 30)):
    if mode == "L":
        color = 128
    elif mode == "RGBA":
        color = (*color[:3], 128)
    return Image.new(mode, (width, height), color)


def image_bytes(img, fmt="PNG"):
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


class FakeEndpoint:
    """Caption endpoint that fails a fixed number of times before answering."""

    def __init__(self, failures=0, answers=("a red rectangle",), error=RuntimeError):
        self.failures = failures
        self.answers = list(answers)
        self.error = error
        self.calls = []

    def generate(self, image_bytes, mime_type, prompt, temperature):
        self.calls.append((image_bytes, mime_type, prompt, temperature))
        if len(self.calls) <= self.failures:
            raise self.error(f"attempt {len(self.calls)} failed")
        return list(self.answers)


@pytest.fixture
def png_100x50():
    return image_bytes(make_image(100, 50))


@pytest.fixture
def samples_dir(tmp_path):
    directory = tmp_path / "samples"
    directory.mkdir()
    make_image(80, 60, color=(10, 120, 200)).save(directory / "sample1.jpg", format="JPEG")
    (directory / "broken.jpg").write_bytes(b"not a jpeg at all")
    return directory


@pytest.fixture
def store():
    return UserImageStore(max_images=3, rng=random.Random(1234))


@pytest.fixture
def service(store, samples_dir):
    return PictureService(store=store, captioner=StubCaptioner(), samples=SampleLibrary(samples_dir))


@pytest.fixture
def app_settings(tmp_path, samples_dir):
    (tmp_path / "index.html").write_text("<html><body>pixel guess</body></html>", encoding="utf-8")
    return Settings(base_dir=Path(tmp_path), max_images=3, use_stub_captioner=True)


@pytest.fixture
def client(app_settings, store):
    app = create_app(app_settings, store=store, captioner=StubCaptioner(reason="tests"))
    with TestClient(app) as c:
        yield c
