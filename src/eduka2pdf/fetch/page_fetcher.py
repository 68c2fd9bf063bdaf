"""Single page retrieval with retry.

A page is requested with a plain GET and only a successful (2xx) response is
persisted. The payload is written beside the target and renamed into place,
so a failed or interrupted attempt never leaves a partial image behind.

Retry behavior is driven by ``RetryPolicy``:
- bounded (default): full-jitter exponential backoff, ``FetchExhausted`` once
  ``max_attempts`` attempts have failed;
- unbounded (``RetryPolicy.unbounded()``): immediate re-attempt forever.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    stop_never,
    wait_none,
    wait_random_exponential,
)

from eduka2pdf.errors import FetchExhausted
from eduka2pdf.io_utils import atomic_write_bytes
from eduka2pdf.model.options import RetryPolicy

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (httpx.TransportError, httpx.HTTPStatusError)


def _log_retry(url: str) -> Callable[[RetryCallState], None]:
    def _before_sleep(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome is not None else None
        logger.warning("Retrying %s (attempt %d failed: %s)", url, state.attempt_number, exc)

    return _before_sleep


def build_retrying(policy: RetryPolicy, url: str) -> AsyncRetrying:
    """Create the tenacity controller for one page fetch."""
    stop: Any = stop_never if policy.max_attempts is None else stop_after_attempt(policy.max_attempts)
    if policy.initial_backoff <= 0:
        wait: Any = wait_none()
    else:
        wait = wait_random_exponential(multiplier=policy.initial_backoff, max=policy.max_backoff)
    return AsyncRetrying(
        stop=stop,
        wait=wait,
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        before_sleep=_log_retry(url),
    )


async def _get_bytes(client: httpx.AsyncClient, url: str) -> bytes:
    response = await client.get(url)
    response.raise_for_status()
    return response.content


async def fetch_page(
    client: httpx.AsyncClient,
    url: str,
    target: Path,
    retry: RetryPolicy | None = None,
) -> int:
    """Download ``url`` into ``target`` and return the number of bytes written.

    The parent directory of ``target`` must already exist. Transport errors and
    non-2xx responses are retried according to ``retry``; anything else (for
    example a filesystem error) propagates immediately.

    Raises:
        FileNotFoundError: If the target directory does not exist
        FetchExhausted: If the retry ceiling is reached
    """
    if not target.parent.is_dir():
        raise FileNotFoundError(f"Target directory does not exist: {target.parent}")

    policy = retry or RetryPolicy()
    attempts = 0
    written = 0
    try:
        async for attempt in build_retrying(policy, url):
            with attempt:
                attempts = attempt.retry_state.attempt_number
                data = await _get_bytes(client, url)
                await asyncio.to_thread(atomic_write_bytes, target, data)
                written = len(data)
    except RetryError as exc:
        cause = exc.last_attempt.exception()
        raise FetchExhausted(url, target, attempts, cause) from cause

    logger.debug("Saved %s (%d bytes, %d attempt(s))", target.name, written, attempts)
    return written


__all__ = ["RETRYABLE_ERRORS", "build_retrying", "fetch_page"]
