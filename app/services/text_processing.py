"""
Text processing for the answerer: budget math, overlapping splits, reply cleanup.

Splitting is purely positional. Pages come back from the reader as markdown of
any shape, so chunks are sized as evenly as integer division allows and each
one reads a fixed distance into the next so evidence sitting on a boundary is
still seen whole by at least one chunk.
"""

import math
import re

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL)


def char_budget(token_limit: int, chars_per_token: int = 4) -> int:
    """Character budget for a token budget, using a fixed chars-per-token estimate."""
    return token_limit * chars_per_token


def split_with_overlap(text: str, limit: int, overlap: int = 1024) -> list[str]:
    """
    Split text into ceil(len/limit) near-equal chunks, each extended by overlap
    characters into the next. Text within limit comes back as a single chunk.
    """
    if limit <= 0:
        raise ValueError("limit must be positive")
    length = len(text)
    if length <= limit:
        return [text]
    num_split = math.ceil(length / limit)
    chunk_len = math.ceil(length / num_split)
    return [text[i * chunk_len:(i + 1) * chunk_len + overlap] for i in range(num_split)]


def strip_reasoning(text: str) -> str:
    """Drop <think>...</think> scratchpad blocks from a model reply."""
    return _THINK_BLOCK.sub("", text or "").strip()
