"""Exponential backoff retry for transient Gemini / Veo API errors."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .config import ServerConfig, get_config

logger = logging.getLogger(__name__)

T = TypeVar("T")

_RETRYABLE_PATTERNS: tuple[str, ...] = (
    "429",
    "quota",
    "resource_exhausted",
    "timeout",
    "503",
    "service unavailable",
)


def _is_retryable(exc: Exception) -> bool:
    """Check if an exception message matches known transient patterns."""
    msg = str(exc).lower()
    return any(p in msg for p in _RETRYABLE_PATTERNS)


async def with_retry(
    coro_factory: Callable[[], Awaitable[T]],
    *,
    label: str = "gemini call",
    config: ServerConfig | None = None,
) -> T:
    """Execute an async callable with exponential backoff on transient errors.

    Args:
        coro_factory: Zero-arg callable that returns a fresh awaitable each attempt.
        label: Name used in retry log lines.
        config: Config carrying retry settings (defaults to the live config).

    Returns:
        The result of the first successful call.

    Raises:
        The last exception if all attempts are exhausted or non-retryable.
    """
    cfg = config or get_config()
    max_attempts = cfg.retry_max_attempts

    for attempt in range(max_attempts):
        try:
            return await coro_factory()
        except Exception as exc:
            if not _is_retryable(exc) or attempt == max_attempts - 1:
                raise
            delay = min(cfg.retry_base_delay * (2 ** attempt) + random.random(), cfg.retry_max_delay)
            logger.warning(
                "%s: retry %d/%d after %.1fs: %s", label, attempt + 1, max_attempts, delay, exc,
            )
            await asyncio.sleep(delay)
    raise RuntimeError(f"{label}: retry loop exited without a result")
