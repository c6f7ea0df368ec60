"""
Answerer: answer a question about a source text of any length.

Texts within the model's character budget get one completion. Longer texts are
split into overlapping chunks, every chunk is answered concurrently, and the
per-chunk answers are returned together as one labelled composite. A composite
is all-or-nothing: if any chunk's completion exhausts its retries or comes back
empty the result is None.
"""

import asyncio
import logging

from app.agent.llm import CompletionClient
from app.core.config import (
    ANSWER_TOKEN_LIMIT,
    CHARS_PER_TOKEN,
    CHUNK_OVERLAP,
    LLM_MAX_RETRY,
    RETRY_BACKOFF_BASE,
)
from app.core.retry import retrying
from app.services.text_processing import char_budget, split_with_overlap, strip_reasoning

logger = logging.getLogger(__name__)

SPLIT_NOTE = (
    "Since the content is too long, the result is split and answered separately. "
    "Please combine the results to get the complete answer.\n"
)


def build_prompt(source_text: str, question: str, spaced_markers: bool = False) -> str:
    """Prompt asking for an evidence-quoting answer, or an explicit refusal when nothing is relevant."""
    if spaced_markers:
        begin, end = "--- begin of source content ---", "--- end of source content ---"
    else:
        begin, end = "---begin of source content---", "---end of source content---"
    return (
        "Please read the source content and answer a following question:\n"
        f"{begin}\n{source_text}\n{end}\n\n"
        "If there is no relevant information, please clearly refuse to answer.\n"
        "When answering, please identify and extract the original content as the evidence. "
        f"Now answer the question based on the above content:\n{question}"
    )


class Answerer:
    """Map-reduce question answering over a completion client with a bounded context."""

    def __init__(
        self,
        completion: CompletionClient,
        token_limit: int = ANSWER_TOKEN_LIMIT,
        chars_per_token: int = CHARS_PER_TOKEN,
        overlap: int = CHUNK_OVERLAP,
        backoff_base: float = RETRY_BACKOFF_BASE,
    ) -> None:
        self.completion = completion
        self.char_limit = char_budget(token_limit, chars_per_token)
        self.overlap = overlap
        self.backoff_base = backoff_base

    async def get_ai_response(self, prompt: str, max_retry: int = LLM_MAX_RETRY) -> str | None:
        """One completion with exponential backoff between attempts. None when every attempt failed."""
        retryer = retrying(max_retry, self.backoff_base, logger, retry_error_callback=self._give_up)
        content = await retryer(self.completion.complete, prompt)
        return None if content is None else strip_reasoning(content)

    @staticmethod
    def _give_up(retry_state) -> None:
        logger.error(
            "[answerer:get_ai_response] giving up after %d attempts: %s",
            retry_state.attempt_number,
            retry_state.outcome.exception(),
        )
        return None

    async def answer(self, source_text: str, question: str, max_retry: int = LLM_MAX_RETRY) -> str | None:
        logger.info("[answerer:answer] IN  source_len=%d question=%r", len(source_text), question)
        if len(source_text) <= self.char_limit:
            return await self.get_ai_response(build_prompt(source_text, question), max_retry)

        chunks = split_with_overlap(source_text, self.char_limit, self.overlap)
        logger.info(
            "[answerer:answer] content too long (%d chars), splitting into %d parts",
            len(source_text),
            len(chunks),
        )
        parts = await asyncio.gather(
            *(self.get_ai_response(build_prompt(chunk, question, spaced_markers=True), max_retry) for chunk in chunks)
        )
        if not all(parts):
            failed = [i + 1 for i, part in enumerate(parts) if not part]
            logger.warning("[answerer:answer] OUT parts %s failed; no composite", failed)
            return None

        combined = SPLIT_NOTE
        for i, part in enumerate(parts, 1):
            combined += f"--- begin of result part {i} ---\n{part}\n--- end of result part {i} ---\n\n"
        return combined
