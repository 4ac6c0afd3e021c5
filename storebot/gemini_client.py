from __future__ import annotations

from typing import Dict, Optional

import google.generativeai as genai

DEFAULT_SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_NONE"},
]


class GeminiClient:
    """Thin async wrapper around the Gemini SDK with model caching and safety settings."""

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.7,
        max_output_tokens: int = 500,
    ) -> None:
        """Purpose: Store Gemini credentials and generation options.
        Inputs/Outputs: Inputs are API key, model name and generation limits; no return.
        Side Effects / State: None until the first call; the SDK is configured lazily.
        Dependencies: google.generativeai.
        Failure Modes: None at init; missing key or model raise ValueError on use.
        If Removed: MODEL_PROVIDER=gemini has no backend.
        Testing Notes: complete() with an empty key raises ValueError without network.
        """
        self._api_key = api_key
        self._model_name = _normalize_model_name(model)
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._configured = False
        self._models: Dict[str, genai.GenerativeModel] = {}

    async def complete(self, prompt: str) -> str:
        """Purpose: Generate a single text response from a string prompt.
        Inputs/Outputs: Input is the prompt; returns the stripped text (may be empty).
        Side Effects / State: Configures the SDK once and caches the model instance.
        Dependencies: genai.GenerativeModel.generate_content_async.
        Failure Modes: ValueError when key or model is missing; SDK errors propagate.
        If Removed: Gemini-backed chat answers stop working.
        Testing Notes: Ensure missing credentials fail before any SDK call.
        """
        if not self._api_key:
            raise ValueError("GEMINI_API_KEY is required")
        if not self._model_name:
            raise ValueError("Gemini model name is required")
        if not self._configured:
            genai.configure(api_key=self._api_key)
            self._configured = True
        if self._model_name not in self._models:
            self._models[self._model_name] = genai.GenerativeModel(self._model_name)
        response = await self._models[self._model_name].generate_content_async(
            prompt,
            generation_config={
                "temperature": self._temperature,
                "max_output_tokens": self._max_output_tokens,
            },
            safety_settings=DEFAULT_SAFETY_SETTINGS,
        )
        text: Optional[str] = getattr(response, "text", None)
        return (text or "").strip()


def _normalize_model_name(name: Optional[str]) -> str:
    """Strip the "models/" prefix and whitespace from a model name."""
    if not name:
        return ""
    cleaned = name.strip()
    if cleaned.startswith("models/"):
        return cleaned.split("/", 1)[1]
    return cleaned
