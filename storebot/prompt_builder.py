from __future__ import annotations

"""Prompt composition for the Sr. Robot assistant.

The composer is a pure function: same inputs, same string. All phrasing rules and
size limits are module constants so they can be tuned without touching the template.
"""

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .documents import Category, Product
from .store_profile import StoreProfile

CURRENCY_SYMBOL = "S/."
MAX_PROMPT_PRODUCTS = 30
MAX_WEB_CONTEXT_CHARS = 600
MAX_ANSWER_LINES = 3
TRUNCATION_MARK = "..."

ASSISTANT_NAME = "Sr. Robot"
IMAGE_REPLY = "Aquí tienes las imágenes adjuntas."
NOT_FOUND_REPLY = "Lo siento, no tengo ese producto."
OFF_TOPIC_REPLY = "Solo puedo ayudarte con productos, precios, garantías e información de la tienda."

RULES = [
    "Usa SOLO los datos reales de productos y categorías de abajo.",
    f"Precios siempre en {CURRENCY_SYMBOL} (por ejemplo {CURRENCY_SYMBOL} 150.00).",
    f'Si piden imagen o foto → "{IMAGE_REPLY}"',
    "Si piden todos los productos → lista breve: nombre + precio + (ver imagen).",
    f'Si el producto no existe → "{NOT_FOUND_REPLY}"',
    f'Si la pregunta no trata de la tienda → "{OFF_TOPIC_REPLY}"',
    f"Máximo {MAX_ANSWER_LINES} líneas.",
    "1 emoji al inicio.",
    "Español claro.",
]


def format_price(price: Optional[float]) -> str:
    """Render a price in soles, or a fixed phrase when the store has none."""
    if price is None:
        return "Precio no disponible"
    return f"{CURRENCY_SYMBOL} {price:,.2f}"


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARK


def compose_prompt(
    products: Sequence[Product],
    categories: Sequence[Category],
    warranties: Mapping[str, str],
    store_profile: StoreProfile,
    external_text: str,
    user_message: str,
    max_products: int = MAX_PROMPT_PRODUCTS,
) -> str:
    """Purpose: Render store data, policy tables and page context into one prompt.
    Inputs/Outputs: Inputs are normalized products/categories, the warranty table,
        the store profile, scraped text and the user message; output is the prompt.
    Side Effects / State: None; pure function.
    Dependencies: build_product_entries, format_price, truncate, RULES.
    Failure Modes: None; empty inputs render as empty JSON lists.
    If Removed: The model gateway has nothing grounded to answer from.
    Testing Notes: The literal user message must be present and at most max_products
        product entries may appear, in store order.
    """
    # Cap the catalog in store order so the prompt cannot grow without bound.
    product_entries = build_product_entries(products[: max(max_products, 0)])
    category_entries = [category.to_dict() for category in categories]
    rules = "\n".join(f"- {rule}" for rule in RULES)

    sections = [
        f"Eres {ASSISTANT_NAME}, asistente de {store_profile.name} en {store_profile.location}.",
        "REGLAS:",
        rules,
        "",
        "Datos:",
        f"Productos: {_to_json(product_entries)}",
        f"Categorías: {_to_json(category_entries)}",
        f"Garantías: {_to_json(dict(warranties))}",
        f"Dirección: {store_profile.address}",
        f"Horario: {store_profile.hours}",
        f"Web: {truncate(external_text or '', MAX_WEB_CONTEXT_CHARS)}",
        "",
        f"Pregunta: {user_message}",
        "",
        "Respuesta:",
    ]
    return "\n".join(sections)


def build_product_entries(products: Sequence[Product]) -> List[Dict[str, Any]]:
    """Serialize products for the prompt, adding the preformatted price text."""
    entries: List[Dict[str, Any]] = []
    for product in products:
        entry = product.to_dict()
        entry["precio_texto"] = format_price(product.price)
        entries.append(entry)
    return entries


def _to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2, default=str)
