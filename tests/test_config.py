import logging

import pytest

from storebot.config import DEFAULT_ALLOWED_ORIGINS, load_settings
from storebot.utils import normalize_text, unique_in_order


def test_defaults(monkeypatch):
    for name in ("MODEL_PROVIDER", "MODEL_TIMEOUT", "MAX_IMAGES", "WEBSITE_URL", "MONGODB_DB"):
        monkeypatch.delenv(name, raising=False)

    settings = load_settings()

    assert settings.model_provider == "ollama"
    assert settings.model_timeout == 120.0
    assert settings.max_images == 12
    assert settings.max_prompt_products == 30
    assert settings.scrape_max_chars == 4000
    assert settings.mongodb_db == "Sr_web_2"
    assert settings.allowed_origins == DEFAULT_ALLOWED_ORIGINS


def test_overrides(monkeypatch):
    monkeypatch.setenv("MODEL_PROVIDER", "Gemini")
    monkeypatch.setenv("WEBSITE_URL", "https://srrobot.pe")
    monkeypatch.setenv("OLLAMA_BASE_URL", "https://ollama.example/")
    monkeypatch.setenv("MAX_IMAGES", "10")

    settings = load_settings()

    assert settings.model_provider == "gemini"
    assert settings.max_images == 10
    assert settings.ollama_base_url == "https://ollama.example"
    assert settings.allowed_origins[-1] == "https://srrobot.pe"


def test_invalid_number_fails_fast(monkeypatch):
    monkeypatch.setenv("MAX_IMAGES", "muchas")

    with pytest.raises(ValueError):
        load_settings()


def test_missing_credentials_are_not_startup_errors(monkeypatch):
    monkeypatch.delenv("OLLAMA_API_KEY", raising=False)
    monkeypatch.delenv("MONGODB_URI", raising=False)

    settings = load_settings()

    assert settings.ollama_api_key == ""
    assert settings.mongodb_uri == ""


def test_normalize_text_strips_accents_and_punctuation():
    assert normalize_text("¿Muéstrame el CATÁLOGO?") == "muestrame el catalogo"
    assert normalize_text("") == ""


def test_unique_in_order():
    assert unique_in_order(["a", "b", "a", "c", "b"]) == ["a", "b", "c"]


def test_log_level_from_env_file_is_applied(tmp_path, monkeypatch):
    from storebot.app import configure_logging, load_environment

    monkeypatch.delenv("LOG_LEVEL", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("LOG_LEVEL=DEBUG\n", encoding="utf-8")
    previous = logging.getLogger("storebot").level

    load_environment(env_file)
    try:
        configure_logging()
        assert logging.getLogger("storebot").level == logging.DEBUG
    finally:
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        logging.getLogger("storebot").setLevel(previous)
