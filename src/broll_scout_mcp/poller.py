"""Long-Running Operation Poller for Veo video jobs.

State machine: ``submitted → polling → {completed, failed}``. Each cycle
sleeps ``interval`` seconds then issues one status check. A status check that
raises, or a job that finishes with an error, ends polling immediately; the
check itself is never retried.

Polling is bounded by ``max_attempts`` status checks and, when non-zero, by
``timeout`` seconds of wall-clock time. The last sleep is shortened so the
time budget is never overrun, and the check counter restarts on every
``wait``. An ``asyncio.Event`` may be passed as a cancellation token; setting
it stops polling before the next check (the backend job itself is left
running).
"""

from __future__ import annotations

import asyncio
import logging
import time

from .builder import RequestDescriptor
from .errors import VideoCancelledError, VideoGenerationError, VideoTimeoutError
from .media import MediaResolver
from .models.media import ResolvedMedia, VideoOperation

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 5.0
DEFAULT_MAX_ATTEMPTS = 120


class VideoPoller:
    """Drive a video job to completion and resolve its media.

    Args:
        backend: Object with ``submit_video`` / ``check_video`` coroutines.
        resolver: Turns the completed locator into a fetched local file.
        interval: Seconds between status checks.
        max_attempts: Upper bound on status checks.
        timeout: Wall-clock budget in seconds; 0 disables it.
    """

    def __init__(
        self,
        backend,
        resolver: MediaResolver | None = None,
        *,
        interval: float = DEFAULT_INTERVAL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        timeout: float = 0.0,
    ) -> None:
        self._backend = backend
        self._resolver = resolver
        self.interval = interval
        self.max_attempts = max_attempts
        self.timeout = timeout
        self.checks = 0

    async def submit(self, request: RequestDescriptor) -> VideoOperation:
        operation = await self._backend.submit_video(request)
        logger.info("Video job submitted (done=%s)", operation.done)
        return operation

    async def wait(
        self, operation: VideoOperation, cancel: asyncio.Event | None = None
    ) -> VideoOperation:
        """Poll until *operation* completes.

        Returns:
            The completed operation, guaranteed to carry a ``media_uri``.

        Raises:
            VideoGenerationError: Job finished with an error or without media.
            VideoTimeoutError: Attempt or time budget exhausted.
            VideoCancelledError: *cancel* was set.
        """
        self.checks = 0
        deadline = time.monotonic() + self.timeout if self.timeout else None
        while not operation.done:
            if self.checks >= self.max_attempts:
                raise VideoTimeoutError(
                    f"Video job not done after {self.checks} status checks"
                )
            delay = self.interval
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise VideoTimeoutError(
                        f"Video job not done after {self.timeout:.0f}s"
                    )
                delay = min(delay, remaining)
            await asyncio.sleep(delay)
            if cancel is not None and cancel.is_set():
                raise VideoCancelledError("Video polling cancelled")
            self.checks += 1
            operation = await self._backend.check_video(operation)
            logger.debug("Video status check %d: done=%s", self.checks, operation.done)

        if operation.error:
            raise VideoGenerationError(f"Video job failed: {operation.error}")
        if not operation.media_uri:
            raise VideoGenerationError("No video URI returned from Veo.")
        logger.info("Video job completed after %d status check(s)", self.checks)
        return operation

    async def run(
        self, request: RequestDescriptor, cancel: asyncio.Event | None = None
    ) -> ResolvedMedia:
        """Submit, poll to completion, and fetch the finished video."""
        if self._resolver is None:
            raise ValueError("VideoPoller.run needs a MediaResolver")
        operation = await self.wait(await self.submit(request), cancel)
        return await self._resolver.resolve(operation.media_uri)
