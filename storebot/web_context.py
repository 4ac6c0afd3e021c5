from __future__ import annotations

import logging
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from .utils import collapse_whitespace

logger = logging.getLogger("storebot.web")

WEB_PLACEHOLDER = "Sitio web no disponible."
DEFAULT_MAX_CHARS = 4000
HIDDEN_TAGS = ["script", "style", "noscript", "template"]


class WebContextFetcher:
    """Fetches the visible text of the store's public page as advisory prompt context."""

    def __init__(
        self,
        url: str,
        timeout: float = 8.0,
        max_chars: int = DEFAULT_MAX_CHARS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._max_chars = max_chars
        self._transport = transport

    async def fetch(self) -> str:
        """Purpose: Download the configured page and return its trimmed body text.
        Inputs/Outputs: No inputs; returns up to max_chars of text.
        Side Effects / State: One HTTP GET per call; logs failures.
        Dependencies: httpx.AsyncClient and extract_visible_text.
        Failure Modes: Never raises; timeouts, non-2xx, network errors, malformed and
            empty URLs all return WEB_PLACEHOLDER.
        If Removed: Prompts lose page context; the rest of the pipeline is unaffected.
        Testing Notes: Use httpx.MockTransport for success, 500 and timeout cases.
        """
        if not self._url:
            return WEB_PLACEHOLDER
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                res = await client.get(self._url)
                res.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("scrape failed url=%s error=%s", self._url, exc)
            return WEB_PLACEHOLDER

        text = extract_visible_text(res.text)
        if not text:
            logger.warning("scrape returned no text url=%s", self._url)
            return WEB_PLACEHOLDER
        return text[: self._max_chars]


def extract_visible_text(html: str) -> str:
    """Return the whitespace-collapsed text of <body>, without scripts and styles."""
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup(HIDDEN_TAGS):
        tag.decompose()
    root = soup.body or soup
    return collapse_whitespace(root.get_text(separator=" "))
