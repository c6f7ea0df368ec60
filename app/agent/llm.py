"""
Completion LLM: MiniMax through its OpenAI-compatible chat completions API.
One bounded-context completion per call; retries are the caller's concern.
"""

import logging

from openai import AsyncOpenAI

from app.core.config import LLM_API_TIMEOUT, MINIMAX_API_KEY, MINIMAX_BASE_URL, MINIMAX_MODEL

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a helpful assistant."


class CompletionClient:
    def __init__(
        self,
        api_key: str = MINIMAX_API_KEY,
        base_url: str = MINIMAX_BASE_URL,
        model: str = MINIMAX_MODEL,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=LLM_API_TIMEOUT)

    async def complete(self, prompt: str) -> str:
        """Send prompt as the user turn. Returns raw message content ("" when the model sent none)."""
        logger.info("[llm:complete] IN  prompt_len=%d", len(prompt))
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        )
        msg = response.choices[0].message if response.choices else None
        out = (msg.content if msg else None) or ""
        logger.info("[llm:complete] OUT response_len=%d", len(out))
        return out
