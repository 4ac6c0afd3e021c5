from __future__ import annotations

"""Store data aggregation over the Mongo ``productos`` and ``categorias`` collections.

Every call re-reads both collections in full. When the database is not configured,
not reachable, fails a query, or holds no documents at all, callers receive the
same fallback catalog: no products and four fixed categories.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .documents import Category, Product, normalize_category, normalize_product

logger = logging.getLogger("storebot.store")

PRODUCTS_COLLECTION = "productos"
CATEGORIES_COLLECTION = "categorias"
SOURCE_DATABASE = "MongoDB"
SOURCE_FALLBACK = "Fallback"

FALLBACK_CATEGORIES = (
    {"id_categoria": 1, "nombre": "Laptops", "descripcion": "Computadoras portátiles"},
    {"id_categoria": 2, "nombre": "Smartphones", "descripcion": "Teléfonos inteligentes"},
    {"id_categoria": 3, "nombre": "Tablets", "descripcion": "Tabletas y iPads"},
    {"id_categoria": 4, "nombre": "Accesorios", "descripcion": "Accesorios tecnológicos"},
)


class StoreUnavailableError(RuntimeError):
    """Raised internally when the database cannot serve a read."""


@dataclass
class StoreData:
    """Aggregated catalog handed to the prompt composer and image selector."""
    products: List[Product] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    source: str = SOURCE_DATABASE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "products": [product.to_dict() for product in self.products],
            "categories": [category.to_dict() for category in self.categories],
        }


def fallback_store_data() -> StoreData:
    """Purpose: Build the static catalog used when live data is missing.
    Inputs/Outputs: No inputs; returns a fresh StoreData.
    Side Effects / State: None; a new object per call so callers cannot share state.
    Dependencies: FALLBACK_CATEGORIES and normalize_category.
    Failure Modes: None.
    If Removed: The chat pipeline has nothing to describe during outages.
    Testing Notes: Always zero products and exactly four categories.
    """
    return StoreData(
        products=[],
        categories=[normalize_category(doc) for doc in FALLBACK_CATEGORIES],
        source=SOURCE_FALLBACK,
    )


class StoreDataAggregator:
    """Loads and normalizes the full catalog from an async Mongo database handle."""

    def __init__(self, database: Optional[Any], timeout: float = 10.0) -> None:
        """Purpose: Bind the aggregator to a database handle.
        Inputs/Outputs: Inputs are an async database (or None when MONGODB_URI is unset)
            and a per-fetch timeout in seconds; no return value.
        Side Effects / State: Stores references only; no I/O.
        Dependencies: Any object exposing ``command`` and ``__getitem__`` like
            pymongo's AsyncDatabase.
        Failure Modes: None at init.
        If Removed: The chat and catalog endpoints lose their data source.
        Testing Notes: Pass a fake database and inspect fetch() results.
        """
        self._database = database
        self._timeout = timeout

    async def fetch(self) -> StoreData:
        """Purpose: Return the current catalog, or the fallback catalog.
        Inputs/Outputs: No inputs; returns StoreData.
        Side Effects / State: Reads both collections; logs counts or the failure cause.
        Dependencies: Uses _load within asyncio.wait_for.
        Failure Modes: Never raises; every failure maps to fallback_store_data().
        If Removed: Chat prompts contain no catalog.
        Testing Notes: Disconnected and empty stores must give identical payloads.
        """
        # Any failure or an entirely empty store gives the same fallback catalog.
        try:
            products, categories = await asyncio.wait_for(self._load(), timeout=self._timeout)
        except Exception as exc:
            logger.error("store read failed, using fallback catalog: %s", exc)
            return fallback_store_data()

        if not products and not categories:
            logger.warning("store is empty, using fallback catalog")
            return fallback_store_data()

        logger.info("loaded store data products=%d categories=%d", len(products), len(categories))
        return StoreData(products=products, categories=categories, source=SOURCE_DATABASE)

    async def is_ready(self) -> bool:
        """Ping the database; False when unconfigured or unreachable."""
        if self._database is None:
            return False
        try:
            await asyncio.wait_for(self._database.command("ping"), timeout=self._timeout)
        except Exception as exc:
            logger.warning("store ping failed: %s", exc)
            return False
        return True

    async def _load(self) -> tuple:
        if not await self.is_ready():
            raise StoreUnavailableError("MongoDB no conectado")
        raw_products, raw_categories = await asyncio.gather(
            self._read_all(PRODUCTS_COLLECTION),
            self._read_all(CATEGORIES_COLLECTION),
        )
        products = [normalize_product(doc) for doc in raw_products]
        categories = [normalize_category(doc) for doc in raw_categories]
        return products, categories

    async def _read_all(self, collection_name: str) -> List[Dict[str, Any]]:
        # Full scan: empty filter, no projection, no pagination.
        cursor = self._database[collection_name].find({})
        return await cursor.to_list(length=None)
