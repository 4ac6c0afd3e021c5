from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

import httpx

from .config import Settings
from .gemini_client import GeminiClient

logger = logging.getLogger("storebot.model")

UNAVAILABLE_MESSAGE = "Asistente no disponible. Intenta más tarde."
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 500


class AssistantUnavailableError(Exception):
    """The only error the gateway raises; the message is safe to show to users."""

    def __init__(self, message: str = UNAVAILABLE_MESSAGE) -> None:
        super().__init__(message)


class ModelBackend(Protocol):
    async def complete(self, prompt: str) -> str:
        ...


class OllamaClient:
    """Client for the Ollama Cloud ``/api/generate`` endpoint (non-streaming)."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._transport = transport

    async def complete(self, prompt: str) -> str:
        """Purpose: Send one prompt and return the generated text.
        Inputs/Outputs: Input is the prompt; output is the raw ``response`` field.
        Side Effects / State: One HTTP POST per call.
        Dependencies: httpx.AsyncClient; the overall time budget is enforced by
            ModelGateway.
        Failure Modes: ValueError for missing key or model; httpx.HTTPStatusError for
            non-2xx; other httpx errors propagate.
        If Removed: The default model provider has no backend.
        Testing Notes: Use httpx.MockTransport and assert the bearer header and body.
        """
        if not self._api_key:
            raise ValueError("OLLAMA_API_KEY no configurada")
        if not self._model:
            raise ValueError("OLLAMA_MODEL no configurado")

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        body = {
            "model": self._model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self._temperature,
                "num_predict": self._max_tokens,
            },
        }
        async with httpx.AsyncClient(timeout=None, transport=self._transport) as client:
            res = await client.post(f"{self._base_url}/api/generate", headers=headers, json=body)
        res.raise_for_status()
        data = res.json()
        if not isinstance(data, dict):
            return ""
        return str(data.get("response") or "")


class ModelGateway:
    """Sends prompts to the hosted model and hides every upstream failure."""

    def __init__(self, backend: ModelBackend, timeout: float = 120.0) -> None:
        self._backend = backend
        self._timeout = timeout

    @property
    def backend(self) -> ModelBackend:
        return self._backend

    async def generate(self, prompt: str) -> str:
        """Purpose: Return the model's answer for a composed prompt.
        Inputs/Outputs: Input is the prompt string; output is the trimmed answer.
        Side Effects / State: One backend call; logs the raw cause on failure.
        Dependencies: ModelBackend.complete under asyncio.wait_for.
        Failure Modes: Missing credentials, timeouts, non-2xx, empty bodies and any
            other backend error all raise AssistantUnavailableError. No retries.
        If Removed: /chat cannot produce answers.
        Testing Notes: Every failure type must surface as the same exception and message.
        """
        try:
            text = await asyncio.wait_for(self._backend.complete(prompt), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.error("model call timed out after %.0fs", self._timeout)
            raise AssistantUnavailableError() from None
        except httpx.HTTPStatusError as exc:
            logger.error(
                "model call failed status=%s body=%s",
                exc.response.status_code,
                exc.response.text[:500],
            )
            raise AssistantUnavailableError() from None
        except Exception as exc:
            logger.error("model call failed: %s", exc)
            raise AssistantUnavailableError() from None

        answer = (text or "").strip()
        if not answer:
            logger.error("model returned an empty response")
            raise AssistantUnavailableError()
        return answer


def build_gateway(settings: Settings) -> ModelGateway:
    """Purpose: Construct the gateway for the configured MODEL_PROVIDER.
    Inputs/Outputs: Input is Settings; output is a ModelGateway.
    Side Effects / State: None; credentials are checked on each call, not here.
    Dependencies: OllamaClient or GeminiClient.
    Failure Modes: Unknown providers raise ValueError at startup.
    If Removed: The app cannot wire a model backend.
    Testing Notes: "gemini" yields a GeminiClient backend, "ollama" an OllamaClient.
    """
    if settings.model_provider == "gemini":
        backend: ModelBackend = GeminiClient(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            temperature=DEFAULT_TEMPERATURE,
            max_output_tokens=DEFAULT_MAX_TOKENS,
        )
    elif settings.model_provider == "ollama":
        backend = OllamaClient(
            base_url=settings.ollama_base_url,
            api_key=settings.ollama_api_key,
            model=settings.ollama_model,
        )
    else:
        raise ValueError(f"Unsupported MODEL_PROVIDER: {settings.model_provider}")
    return ModelGateway(backend, timeout=settings.model_timeout)
