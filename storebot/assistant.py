"""Chat pipeline for the Sr. Robot assistant.

Role:
    Orchestrates one stateless chat turn. Store aggregation and page scraping run
    concurrently because neither depends on the other and both degrade to their own
    fallbacks. Their results feed the prompt composer and the model gateway; the image
    selector looks at the same catalog and the original message independently.

Known limitation:
    A client that disconnects does not cancel the in-flight model call; it runs until
    it completes or hits the gateway timeout.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Mapping

from .image_selector import ImagePolicy, select_images
from .model_gateway import ModelGateway
from .prompt_builder import compose_prompt
from .store_data import StoreDataAggregator
from .store_profile import StoreProfile
from .web_context import WebContextFetcher

logger = logging.getLogger("storebot.assistant")


@dataclass
class ChatResult:
    """Outcome of one chat turn before it is wrapped in the HTTP response."""
    answer: str
    images: List[str] = field(default_factory=list)
    show_images: bool = False


class StoreAssistant:
    def __init__(
        self,
        aggregator: StoreDataAggregator,
        fetcher: WebContextFetcher,
        gateway: ModelGateway,
        warranties: Mapping[str, str],
        store_profile: StoreProfile,
        max_prompt_products: int,
        max_images: int,
        image_policy: ImagePolicy = ImagePolicy.KEYWORD,
    ) -> None:
        """Purpose: Wire the pipeline components and limits.
        Inputs/Outputs: Inputs are the aggregator, web fetcher, gateway, static tables
            and limits; no return value.
        Side Effects / State: Stores references; holds no per-request state.
        Dependencies: Built once by context.build_context.
        Failure Modes: None at init.
        If Removed: /chat has no pipeline to run.
        Testing Notes: Construct with fakes and call reply().
        """
        self._aggregator = aggregator
        self._fetcher = fetcher
        self._gateway = gateway
        self._warranties = warranties
        self._store_profile = store_profile
        self._max_prompt_products = max_prompt_products
        self._max_images = max_images
        self._image_policy = image_policy

    async def reply(self, message: str) -> ChatResult:
        """Purpose: Run the full pipeline for one user message.
        Inputs/Outputs: Input is the message text; output is a ChatResult.
        Side Effects / State: Reads the store, fetches the web page, calls the model.
        Dependencies: StoreDataAggregator, WebContextFetcher, compose_prompt,
            ModelGateway, select_images.
        Failure Modes: AssistantUnavailableError from the gateway propagates; store and
            scraper failures never do.
        If Removed: Chat requests cannot be answered.
        Testing Notes: With a failing store the prompt still contains the fallback
            categories and the user message.
        """
        logger.info("chat question=%s", message)
        store_data, web_text = await asyncio.gather(
            self._aggregator.fetch(),
            self._fetcher.fetch(),
        )
        prompt = compose_prompt(
            store_data.products,
            store_data.categories,
            self._warranties,
            self._store_profile,
            web_text,
            message,
            max_products=self._max_prompt_products,
        )
        logger.debug("prompt chars=%d source=%s", len(prompt), store_data.source)
        answer = await self._gateway.generate(prompt)

        selection = select_images(
            message,
            store_data.products,
            mode=self._image_policy,
            cap=self._max_images,
        )
        logger.info(
            "chat answered chars=%d images=%d attached=%s",
            len(answer),
            len(selection.images),
            selection.attached,
        )
        return ChatResult(answer=answer, images=selection.images, show_images=selection.attached)
