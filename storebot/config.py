from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple

DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:5173",
    "http://localhost:5174",
    "http://localhost:3000",
)


@dataclass(frozen=True)
class Settings:
    """Configuration container for the store, scraper, model gateway, and limits."""
    mongodb_uri: str
    mongodb_db: str
    mongodb_timeout_ms: int
    store_timeout: float
    jwt_secret: str
    jwt_expires_minutes: int
    website_url: str
    scrape_timeout: float
    scrape_max_chars: int
    model_provider: str
    ollama_api_key: str
    ollama_base_url: str
    ollama_model: str
    gemini_api_key: str
    gemini_model: str
    model_timeout: float
    max_images: int
    image_policy: str
    max_prompt_products: int
    allowed_origins: Tuple[str, ...]


def load_settings() -> Settings:
    """Purpose: Load configuration from environment variables and defaults.
    Inputs/Outputs: No inputs; returns a Settings instance.
    Side Effects / State: Reads environment variables.
    Dependencies: Uses os.getenv; callers load .env beforehand.
    Failure Modes: Invalid numeric env values raise ValueError. Missing credentials
        are accepted here and surface later as gateway errors.
    If Removed: App cannot configure the store, scraper, or model and fails at startup.
    Testing Notes: Verify defaults and overrides via environment variables.
    """
    # Collect the website origin alongside the fixed local dev origins.
    website_url = os.getenv("WEBSITE_URL", "http://localhost:5173").strip()
    origins = list(DEFAULT_ALLOWED_ORIGINS)
    if website_url and website_url not in origins:
        origins.append(website_url)

    return Settings(
        mongodb_uri=os.getenv("MONGODB_URI", "").strip(),
        mongodb_db=os.getenv("MONGODB_DB", "Sr_web_2"),
        mongodb_timeout_ms=int(os.getenv("MONGODB_TIMEOUT_MS", "5000")),
        store_timeout=float(os.getenv("STORE_TIMEOUT", "10")),
        jwt_secret=os.getenv("JWT_SECRET") or "fallback_secret_change_in_production",
        jwt_expires_minutes=int(os.getenv("JWT_EXPIRES_MINUTES", "120")),
        website_url=website_url,
        scrape_timeout=float(os.getenv("SCRAPE_TIMEOUT", "8")),
        scrape_max_chars=int(os.getenv("SCRAPE_MAX_CHARS", "4000")),
        model_provider=os.getenv("MODEL_PROVIDER", "ollama").strip().lower(),
        ollama_api_key=os.getenv("OLLAMA_API_KEY", ""),
        ollama_base_url=os.getenv("OLLAMA_BASE_URL", "https://ollama.com").rstrip("/"),
        ollama_model=os.getenv("OLLAMA_MODEL", "qwen3-coder:480b-cloud"),
        gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        model_timeout=float(os.getenv("MODEL_TIMEOUT", "120")),
        max_images=int(os.getenv("MAX_IMAGES", "12")),
        image_policy=os.getenv("IMAGE_POLICY", "keyword").strip().lower(),
        max_prompt_products=int(os.getenv("MAX_PROMPT_PRODUCTS", "30")),
        allowed_origins=tuple(origins),
    )
