"""Per-call aggregator wiring shared by every tool module.

Each tool invocation gets its own backend and aggregator; nothing is cached
between calls, so overlapping searches never share client state.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from ..aggregator import CreativeAggregator
from ..client import GeminiBackend
from ..config import get_config
from ..dotenv import DEFAULT_ENV_PATH, read_dotenv_value

logger = logging.getLogger(__name__)


def _fresh_video_backend() -> GeminiBackend:
    """Build a video backend from the Veo key as it stands right now.

    The config file is re-read on every call, so a key replaced there after a
    credential rejection is used by the next video job. The live config is
    left untouched.
    """
    return GeminiBackend.for_video(get_config(), api_key=read_dotenv_value("VEO_API_KEY"))


def _refresh_video_credential() -> None:
    """Tell the user where to put a billing-enabled Veo key."""
    logger.warning(
        "Veo credential rejected; set VEO_API_KEY in %s to a billing-enabled key and retry",
        DEFAULT_ENV_PATH,
    )


@asynccontextmanager
async def open_aggregator() -> AsyncIterator[CreativeAggregator]:
    """Yield an aggregator bound to a fresh backend; closes it afterwards."""
    cfg = get_config()
    backend = GeminiBackend.from_config(cfg)
    try:
        yield CreativeAggregator(
            backend,
            video_backend_factory=_fresh_video_backend,
            on_credential_reselect=_refresh_video_credential,
            config=cfg,
        )
    finally:
        await backend.aclose()
