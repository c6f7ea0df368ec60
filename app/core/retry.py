"""
Retry policy for provider calls: bounded attempts with exponential backoff.

Each caller supplies its own retry predicate and the value to return once the
budget is spent, so failures surface as sentinels rather than exceptions.
"""

import logging
from typing import Any

import tenacity


def retrying(max_retry: int, backoff_base: float, logger: logging.Logger, **kwargs: Any) -> tenacity.AsyncRetrying:
    """AsyncRetrying that waits backoff_base * 2**(attempt - 1) seconds between attempts."""
    return tenacity.AsyncRetrying(
        stop=tenacity.stop_after_attempt(max_retry),
        wait=tenacity.wait_exponential(multiplier=backoff_base),
        before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
        **kwargs,
    )
