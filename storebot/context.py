from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from pymongo import AsyncMongoClient

from .assistant import StoreAssistant
from .config import Settings
from .image_selector import ImagePolicy
from .model_gateway import ModelGateway, build_gateway
from .store_data import StoreDataAggregator
from .store_profile import STORE_PROFILE, WARRANTIES
from .web_context import WebContextFetcher

logger = logging.getLogger("storebot.context")


@dataclass(frozen=True)
class AppContext:
    """Process-scoped dependencies, created once at startup and read-only afterwards."""
    settings: Settings
    aggregator: StoreDataAggregator
    fetcher: WebContextFetcher
    gateway: ModelGateway
    assistant: StoreAssistant
    mongo_client: Optional[Any] = None

    async def close(self) -> None:
        if self.mongo_client is not None:
            await self.mongo_client.close()


def build_context(settings: Settings) -> AppContext:
    """Purpose: Construct the store connection and pipeline components.
    Inputs/Outputs: Input is Settings; output is an AppContext.
    Side Effects / State: Creates an AsyncMongoClient (it connects lazily).
    Dependencies: pymongo, build_gateway, StoreAssistant.
    Failure Modes: Unknown MODEL_PROVIDER or IMAGE_POLICY raise ValueError. A missing
        MONGODB_URI is not an error; the aggregator then serves the fallback catalog.
    If Removed: The app has no dependencies to serve requests with.
    Testing Notes: Tests build AppContext directly with fakes instead.
    """
    mongo_client = None
    database = None
    if settings.mongodb_uri:
        mongo_client = AsyncMongoClient(
            settings.mongodb_uri,
            serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
        )
        database = mongo_client[settings.mongodb_db]
    else:
        logger.warning("MONGODB_URI is not set; serving the fallback catalog")

    aggregator = StoreDataAggregator(database, timeout=settings.store_timeout)
    fetcher = WebContextFetcher(
        settings.website_url,
        timeout=settings.scrape_timeout,
        max_chars=settings.scrape_max_chars,
    )
    gateway = build_gateway(settings)
    assistant = StoreAssistant(
        aggregator=aggregator,
        fetcher=fetcher,
        gateway=gateway,
        warranties=WARRANTIES,
        store_profile=STORE_PROFILE,
        max_prompt_products=settings.max_prompt_products,
        max_images=settings.max_images,
        image_policy=ImagePolicy(settings.image_policy),
    )
    return AppContext(
        settings=settings,
        aggregator=aggregator,
        fetcher=fetcher,
        gateway=gateway,
        assistant=assistant,
        mongo_client=mongo_client,
    )
