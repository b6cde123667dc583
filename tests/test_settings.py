import logging
from pathlib import Path

from pixelguess.core.logconfig import configure_logging
from pixelguess.core.settings import DEFAULT_PROMPT, Settings


def test_defaults(monkeypatch):
    for var in ("PORT", "ADDR", "GOOGLE_CLOUD_PROJECT", "MAX_IMAGES"):
        monkeypatch.delenv(var, raising=False)
    cfg = Settings(_env_file=None)
    assert cfg.port == 8080
    assert cfg.host == "0.0.0.0"
    assert cfg.max_images == 20
    assert cfg.image_id_length == 4
    assert cfg.caption_max_attempts == 3
    assert cfg.caption_retry_delay == 0.5
    assert cfg.temperature == 0.4
    assert cfg.prompt == DEFAULT_PROMPT


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PORT", "9090")
    monkeypatch.setenv("ADDR", "127.0.0.1")
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "my-project")
    monkeypatch.setenv("MAX_IMAGES", "5")
    cfg = Settings(_env_file=None)
    assert (cfg.host, cfg.port) == ("127.0.0.1", 9090)
    assert cfg.google_cloud_project == "my-project"
    assert cfg.max_images == 5


def test_paths():
    cfg = Settings(_env_file=None, base_dir=Path("/srv/app"))
    assert cfg.samples_path == Path("/srv/app/samples")
    assert cfg.static_path == Path("/srv/app/static")
    assert cfg.index_path == Path("/srv/app/index.html")


def test_configure_logging(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
    configure_logging("debug")
    configure_logging("nonsense")
    assert calls[0]["level"] == logging.DEBUG
    assert calls[1]["level"] == logging.INFO
