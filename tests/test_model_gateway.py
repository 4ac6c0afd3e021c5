import asyncio
import json
from dataclasses import replace

import httpx
import pytest

from storebot.gemini_client import GeminiClient
from storebot.model_gateway import (
    UNAVAILABLE_MESSAGE,
    AssistantUnavailableError,
    ModelGateway,
    OllamaClient,
    build_gateway,
)


def ollama_gateway(handler, api_key="secret", model="qwen3-coder:480b-cloud", timeout=5.0):
    client = OllamaClient(
        base_url="https://ollama.example",
        api_key=api_key,
        model=model,
        transport=httpx.MockTransport(handler),
    )
    return ModelGateway(client, timeout=timeout)


def test_returns_trimmed_answer_and_sends_expected_request():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"response": "  🤖 Hola, tenemos laptops.  "})

    answer = asyncio.run(ollama_gateway(handler).generate("prompt de prueba"))

    assert answer == "🤖 Hola, tenemos laptops."
    assert seen["url"] == "https://ollama.example/api/generate"
    assert seen["auth"] == "Bearer secret"
    assert seen["body"]["prompt"] == "prompt de prueba"
    assert seen["body"]["stream"] is False
    assert seen["body"]["options"] == {"temperature": 0.7, "num_predict": 500}


def _raise_timeout(request):
    raise httpx.ReadTimeout("timed out", request=request)


@pytest.mark.parametrize(
    "handler, kwargs",
    [
        (lambda request: httpx.Response(500, json={"error": "model overloaded"}), {}),
        (lambda request: httpx.Response(401, json={"error": "unauthorized"}), {}),
        (lambda request: httpx.Response(200, json={"response": ""}), {}),
        (lambda request: httpx.Response(200, json={}), {}),
        (lambda request: httpx.Response(200, text="not json"), {}),
        (_raise_timeout, {}),
        (lambda request: httpx.Response(200, json={"response": "ok"}), {"api_key": ""}),
        (lambda request: httpx.Response(200, json={"response": "ok"}), {"model": ""}),
    ],
)
def test_every_failure_is_assistant_unavailable(handler, kwargs):
    with pytest.raises(AssistantUnavailableError) as info:
        asyncio.run(ollama_gateway(handler, **kwargs).generate("hola"))

    assert str(info.value) == UNAVAILABLE_MESSAGE


def test_upstream_details_are_not_exposed():
    handler = lambda request: httpx.Response(500, json={"error": "internal stack trace"})

    with pytest.raises(AssistantUnavailableError) as info:
        asyncio.run(ollama_gateway(handler).generate("hola"))

    assert "stack trace" not in str(info.value)
    assert info.value.__cause__ is None


def test_gateway_timeout_budget():
    class SlowBackend:
        async def complete(self, prompt):
            await asyncio.sleep(1)
            return "tarde"

    with pytest.raises(AssistantUnavailableError):
        asyncio.run(ModelGateway(SlowBackend(), timeout=0.05).generate("hola"))


def test_gemini_backend_without_key_is_unavailable():
    gateway = ModelGateway(GeminiClient(api_key="", model="gemini-2.5-flash"), timeout=1.0)

    with pytest.raises(AssistantUnavailableError):
        asyncio.run(gateway.generate("hola"))


def test_build_gateway_selects_provider(settings):
    assert isinstance(build_gateway(settings).backend, OllamaClient)
    assert isinstance(build_gateway(replace(settings, model_provider="gemini")).backend, GeminiClient)
    with pytest.raises(ValueError):
        build_gateway(replace(settings, model_provider="unknown"))
