"""
Web collaborators: Google search via Serper and page reading via Jina Reader.

Thin async wrappers over the provider HTTP APIs. They raise on failure; retry
and fallback policy lives in the search service.
"""

import logging

import httpx

from app.core.config import (
    JINA_API_KEY,
    JINA_READER_URL,
    READER_API_TIMEOUT,
    SEARCH_API_TIMEOUT,
    SERPER_API_KEY,
    SERPER_NUM_RESULTS,
    SERPER_SEARCH_URL,
)
from app.core.errors import RetrievalError
from app.schemas.search import SearchResult

logger = logging.getLogger(__name__)


class WebClient:
    """Search and page-read provider client."""

    def __init__(
        self,
        serper_api_key: str = SERPER_API_KEY,
        jina_api_key: str = JINA_API_KEY,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.serper_api_key = serper_api_key
        self.jina_api_key = jina_api_key
        self._transport = transport

    async def search(self, query: str) -> list[SearchResult]:
        """Return organic Google results for query, in ranking order."""
        if not self.serper_api_key:
            raise RetrievalError("SERPER_API_KEY is missing")
        headers = {"X-API-KEY": self.serper_api_key, "Content-Type": "application/json"}
        payload = {"q": query, "num": SERPER_NUM_RESULTS}
        async with httpx.AsyncClient(timeout=SEARCH_API_TIMEOUT, transport=self._transport) as client:
            response = await client.post(SERPER_SEARCH_URL, json=payload, headers=headers)
        if response.status_code != 200:
            raise RetrievalError(f"Serper API error: {response.status_code} {response.reason_phrase}")
        organic = response.json().get("organic") or []
        logger.info("[web_client:search] OUT query=%r results=%d", query, len(organic))
        return [SearchResult.model_validate(item) for item in organic]

    async def fetch_page(self, url: str) -> str:
        """
        Read url through Jina Reader as markdown.
        Raises httpx.HTTPStatusError on non-2xx so callers can tell 4xx from 5xx.
        """
        headers = {
            "X-Engine": "direct",
            "Content-Type": "application/json",
            "X-Retain-Images": "none",
            "X-Return-Format": "markdown",
            "X-Timeout": "60",
        }
        if self.jina_api_key:
            headers["Authorization"] = f"Bearer {self.jina_api_key}"
        async with httpx.AsyncClient(timeout=READER_API_TIMEOUT, transport=self._transport) as client:
            response = await client.post(JINA_READER_URL, json={"url": url}, headers=headers)
        response.raise_for_status()
        logger.info("[web_client:fetch_page] OUT url=%s len=%d", url, len(response.text))
        return response.text
