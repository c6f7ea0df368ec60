"""
Search and browse: retry, fallback and formatting on top of the web collaborators.

Responsibility: Turn provider results into the text the tools return. Provider
failures never propagate from here; after the local retry budget they become a
short apology string the agent can read.
"""

import logging

import httpx
import tenacity

from app.core.config import BROWSE_MAX_RETRY, RETRY_BACKOFF_BASE, SEARCH_MAX_RETRY
from app.core.retry import retrying
from app.schemas.search import SearchResult
from app.services.answerer import Answerer
from app.services.web_client import WebClient

logger = logging.getLogger(__name__)

EMPTY_SEARCH_MESSAGE = "Search result is empty. Please try again."
BROWSE_ERROR_MESSAGE = "Browse error. Please try again."
ACCESS_DENIED_MESSAGE = "Access to this URL is denied. Please try again."
DEFAULT_BROWSE_QUERY = "Detailed summary of the page."


def get_brief_text(results: list[SearchResult]) -> str:
    """Format search hits as <title>/<url>/<snippet> blocks separated by blank lines."""
    blocks = []
    for r in results:
        if r.extra_snippets:
            snippet = "\n".join(r.extra_snippets)
        else:
            snippet = r.snippet or r.description or ""
        url = r.url or r.link or ""
        blocks.append(f"<title>{r.title}</title>\n<url>{url}</url>\n<snippet>\n{snippet}\n</snippet>")
    return "\n\n".join(blocks).strip()


def fallback_message(query: str) -> str:
    return f"Search result for query [{query}] is empty. Return search result for cleaned query instead."


def _is_empty(text: str) -> bool:
    return not text


def _is_retryable(exc: BaseException) -> bool:
    # client errors are final
    return not (isinstance(exc, httpx.HTTPStatusError) and exc.response.is_client_error)


def _gave_up(state: tenacity.RetryCallState) -> str:
    outcome = state.outcome
    if outcome is not None and outcome.failed:
        logger.error("[search_service:_gave_up] %d attempts failed: %s", state.attempt_number, outcome.exception())
    return ""


class SearchService:
    def __init__(
        self,
        web: WebClient,
        answerer: Answerer,
        backoff_base: float = RETRY_BACKOFF_BASE,
    ) -> None:
        self.web = web
        self.answerer = answerer
        self.backoff_base = backoff_base

    async def _search_once(self, query: str) -> str:
        return get_brief_text(await self.web.search(query))

    async def _search_text(self, query: str, max_retry: int) -> str:
        """Formatted results for query, or "" when every attempt failed or came back empty."""
        retryer = retrying(
            max_retry,
            self.backoff_base,
            logger,
            retry=tenacity.retry_if_exception_type() | tenacity.retry_if_result(_is_empty),
            retry_error_callback=_gave_up,
        )
        return await retryer(self._search_once, query)

    async def get_search_results(self, query: str, max_retry: int = SEARCH_MAX_RETRY) -> str:
        """
        Search with retries. When a quoted query comes back empty, retry once with
        the quotes removed and say so in the result.
        """
        logger.info("[search:get_search_results] IN  query=%r", query)
        if not query.strip():
            return EMPTY_SEARCH_MESSAGE

        text = await self._search_text(query, max_retry)
        if text:
            return text
        if '"' not in query:
            return EMPTY_SEARCH_MESSAGE

        cleaned = query.replace('"', "")
        logger.info("[search:get_search_results] empty for quoted query, retrying with %r", cleaned)
        fallback = await self._search_text(cleaned, max_retry) if cleaned.strip() else ""
        if not fallback:
            return EMPTY_SEARCH_MESSAGE
        return f"{fallback_message(query)}\n\n{fallback}"

    async def _read_page(self, url: str, max_retry: int) -> str | None:
        """Page text ("" when unreadable), or None when the reader refused the URL with a 4xx."""
        retryer = retrying(
            max_retry,
            self.backoff_base,
            logger,
            retry=tenacity.retry_if_exception(_is_retryable) | tenacity.retry_if_result(_is_empty),
            retry_error_callback=_gave_up,
        )
        try:
            return await retryer(self.web.fetch_page, url)
        except httpx.HTTPStatusError as e:
            logger.error("[browse:_read_page] reader refused %s: %s", url, e)
            return None

    async def get_browse_results(self, url: str, query: str = "", max_retry: int = BROWSE_MAX_RETRY) -> str:
        """Read url and answer query (or summarize the page) from its content."""
        logger.info("[browse:get_browse_results] IN  url=%s query=%r", url, query)
        source_text = await self._read_page(url, max_retry)
        if source_text is None:
            return ACCESS_DENIED_MESSAGE
        if not source_text.strip():
            return BROWSE_ERROR_MESSAGE

        output = await self.answerer.answer(source_text, query or DEFAULT_BROWSE_QUERY, max_retry)
        output = (output or "").strip()
        logger.info("[browse:get_browse_results] OUT url=%s answer_len=%d", url, len(output))
        return output or BROWSE_ERROR_MESSAGE
