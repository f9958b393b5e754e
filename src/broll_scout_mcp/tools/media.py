"""Media generation tools — 4 tools on a FastMCP sub-server."""

from __future__ import annotations

import logging
from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..errors import make_tool_error
from ..local_path_policy import load_reference_image
from ..media import save_speech
from ..tracing import trace
from ..types import LensPreset, ReferenceImageParam, ShotQuery
from ._session import open_aggregator

logger = logging.getLogger(__name__)
media_server = FastMCP("media")


@media_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
@trace(name="broll_preview", capability="image")
async def broll_preview(
    description: ShotQuery,
    focal_length: LensPreset | None = None,
    reference_image: ReferenceImageParam = None,
) -> dict:
    """Generate a storyboard still for a shot.

    Args:
        description: What the frame shows.
        focal_length: Lens preset — "16mm", "35mm", "50mm", or "85mm".
        reference_image: Optional style reference (path or data URI).

    Returns:
        Dict with the image as a data URI and its MIME type.
    """
    try:
        image = load_reference_image(reference_image) if reference_image else None
        async with open_aggregator() as aggregator:
            preview = await aggregator.generate_preview(description, focal_length, image)
        return {
            "description": description,
            "focal_length": focal_length,
            "mime_type": preview.mime_type,
            "image": preview.data_uri,
        }
    except Exception as exc:
        return make_tool_error(exc)


@media_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
@trace(name="broll_variations", capability="image")
async def broll_variations(query: ShotQuery) -> dict:
    """Generate four framings of a shot (cinematic, close-up, wide, artistic).

    Framings that fail are omitted rather than failing the call.

    Returns:
        Dict with the list of data URIs.
    """
    try:
        async with open_aggregator() as aggregator:
            images = await aggregator.generate_variations(query)
        return {"query": query, "variations": [img.data_uri for img in images]}
    except Exception as exc:
        return make_tool_error(exc)


@media_server.tool(annotations=ToolAnnotations(readOnlyHint=False, openWorldHint=True))
@trace(name="broll_video", capability="video")
async def broll_video(description: ShotQuery) -> dict:
    """Generate a short 720p 16:9 motion preview with Veo.

    Polls the job until it completes (bounded by BROLL_VIDEO_POLL_MAX_ATTEMPTS
    and BROLL_VIDEO_POLL_TIMEOUT), downloads the clip into the media directory,
    and returns its location. If the key's project lacks Veo access the error
    category is CREDENTIAL_RESELECT.

    Returns:
        Dict with path, uri, mime_type, and size_bytes of the clip.
    """
    try:
        async with open_aggregator() as aggregator:
            media = await aggregator.generate_video(description)
        return {"description": description, **media.model_dump(mode="json")}
    except Exception as exc:
        return make_tool_error(exc)


@media_server.tool(annotations=ToolAnnotations(readOnlyHint=False, openWorldHint=True))
@trace(name="broll_speech", capability="speech")
async def broll_speech(
    text: Annotated[str, Field(min_length=1, max_length=5000, description="Narration to speak")],
    voice: Annotated[str | None, Field(description="Prebuilt voice name (default: BROLL_TTS_VOICE)")] = None,
) -> dict:
    """Read a narration line aloud and save it as a WAV file.

    Returns:
        Dict with path, uri, mime_type, and size_bytes of the WAV.
    """
    try:
        async with open_aggregator() as aggregator:
            audio = await aggregator.synthesize_speech(text, voice)
        return save_speech(audio).model_dump(mode="json")
    except Exception as exc:
        return make_tool_error(exc)
