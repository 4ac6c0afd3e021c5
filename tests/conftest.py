from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List, Optional

import pytest

from storebot.config import load_settings


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]], error: Optional[Exception] = None) -> None:
        self._docs = docs
        self._error = error

    async def to_list(self, length=None):
        if self._error is not None:
            raise self._error
        return list(self._docs)


class FakeCollection:
    def __init__(self, docs: List[Dict[str, Any]], error: Optional[Exception] = None) -> None:
        self._docs = docs
        self._error = error
        self.filters: List[Dict[str, Any]] = []

    def find(self, filter=None):
        self.filters.append(filter)
        return FakeCursor(self._docs, self._error)


class FakeDatabase:
    """Mimics the parts of pymongo's AsyncDatabase the aggregator touches."""

    def __init__(
        self,
        collections: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        ping_error: Optional[Exception] = None,
        query_error: Optional[Exception] = None,
    ) -> None:
        self.collections = {
            name: FakeCollection(docs, query_error) for name, docs in (collections or {}).items()
        }
        self._ping_error = ping_error
        self._query_error = query_error
        self.pings = 0

    async def command(self, name: str):
        self.pings += 1
        if self._ping_error is not None:
            raise self._ping_error
        return {"ok": 1.0}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection([], self._query_error)
        return self.collections[name]


class FakeGateway:
    def __init__(self, answer: str = "🤖 Tenemos laptops desde S/. 1,500.00.", error: Optional[Exception] = None):
        self.answer = answer
        self.error = error
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer


class FakeFetcher:
    def __init__(self, text: str = "Sr Robot Huánuco tienda de tecnología") -> None:
        self.text = text
        self.calls = 0

    async def fetch(self) -> str:
        self.calls += 1
        return self.text


@pytest.fixture
def settings(monkeypatch):
    for name in ("MONGODB_URI", "OLLAMA_API_KEY", "GEMINI_API_KEY", "JWT_SECRET", "MODEL_PROVIDER"):
        monkeypatch.delenv(name, raising=False)
    return replace(load_settings(), jwt_secret="test-secret-0123456789abcdef0123456789")


@pytest.fixture
def raw_products() -> List[Dict[str, Any]]:
    return [
        {
            "_id": "665f1c",
            "nombre": "Impresora Canon G110",
            "precio": 500,
            "imagen": "https://img.example/canon.jpg",
            "contrasena": "hunter2",
        },
        {
            "id": 2,
            "nombre": "Pantalla Gamer",
            "precio": "157",
            "imagenes": ["https://img.example/pantalla-1.jpg", "https://img.example/canon.jpg"],
            "characteristics": "24 pulgadas, 144Hz",
        },
        {
            "id": 3,
            "name": "Batería para Laptop L16M2PB12",
            "price": 88.5,
            "image": "https://img.example/bateria.jpg",
        },
    ]


@pytest.fixture
def raw_categories() -> List[Dict[str, Any]]:
    return [
        {"id_categoria": 10, "nombre": "Impresoras", "descripcion": "Tinta continua", "password": "x"},
        {"id_categoria": 11, "nombre": "Monitores", "description": "Pantallas"},
    ]
