"""Main FastMCP server — mounts all sub-servers."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from . import tracing
from .tools.infra import infra_server
from .tools.locations import locations_server
from .tools.media import media_server
from .tools.scout import scout_server

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(server: FastMCP):
    """Startup/shutdown hook — tracing setup and flush."""
    tracing.setup()
    yield {}
    tracing.shutdown()
    logger.info("Lifespan shutdown complete")


app = FastMCP(
    "broll-scout",
    instructions=(
        "B-roll scouting assistant — grounded stock-footage search, DoP "
        "analysis (palette, tech specs, camera settings, lighting), storyboard "
        "stills, Veo motion previews, location scouting, and narration audio."
    ),
    lifespan=_lifespan,
)

app.mount(scout_server)
app.mount(media_server)
app.mount(locations_server)
app.mount(infra_server)


def main() -> None:
    """Entry-point for ``broll-scout-mcp`` console script."""
    app.run()


if __name__ == "__main__":
    main()
