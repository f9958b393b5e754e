"""Scouting tools — 5 tools on a FastMCP sub-server."""

from __future__ import annotations

import logging
from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..errors import make_tool_error
from ..local_path_policy import load_reference_image
from ..models.creative import AggregateResult, CreativeQuery, SearchMode
from ..tracing import trace
from ..types import ReferenceImageParam, ScriptText, SearchModeParam, ShotQuery, coerce_json_param
from ._session import open_aggregator

logger = logging.getLogger(__name__)
scout_server = FastMCP("scout")


def _dump(result) -> dict:
    if isinstance(result, list):
        return {"segments": [s.model_dump(mode="json") for s in result]}
    return result.model_dump(mode="json")


@scout_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
@trace(name="broll_search", capability="search")
async def broll_search(
    query: ShotQuery,
    mode: SearchModeParam = "single",
    reference_image: ReferenceImageParam = None,
) -> dict:
    """Find B-roll for a shot, or break down a scene or script.

    In ``single`` mode runs a grounded footage search, a DoP analysis
    (palette, tech specs, camera settings, lighting diagram, audio) and four
    storyboard thumbnails concurrently, then merges them. ``scene`` returns
    a four-shot list; ``script`` returns narration/visual beats.

    Args:
        query: Shot idea, scene description, or script.
        mode: "single", "scene", or "script".
        reference_image: Optional style reference (path or data URI), single mode only.

    Returns:
        Dict with the aggregate result, scene breakdown, or script segments.
    """
    try:
        image = load_reference_image(reference_image) if reference_image else None
        creative_query = CreativeQuery(text=query, mode=SearchMode(mode), reference_image=image)
        async with open_aggregator() as aggregator:
            return _dump(await aggregator.run(creative_query))
    except Exception as exc:
        return make_tool_error(exc)


@scout_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
@trace(name="broll_scene", capability="structured")
async def broll_scene(description: ShotQuery) -> dict:
    """Break a scene description into four distinct B-roll shots.

    Args:
        description: The scene to cover.

    Returns:
        Dict with description and shots.
    """
    try:
        async with open_aggregator() as aggregator:
            return _dump(await aggregator.scene_breakdown(description))
    except Exception as exc:
        return make_tool_error(exc)


@scout_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
@trace(name="broll_script", capability="structured")
async def broll_script(script: ScriptText) -> dict:
    """Split a narration script into beats, each with a B-roll visual prompt.

    Args:
        script: Full narration text.

    Returns:
        Dict with segments (id, narration, visual_prompt, estimated_duration).
    """
    try:
        async with open_aggregator() as aggregator:
            return _dump(await aggregator.script_breakdown(script))
    except Exception as exc:
        return make_tool_error(exc)


@scout_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
@trace(name="broll_enhance", capability="text")
async def broll_enhance(query: ShotQuery) -> dict:
    """Rewrite a rough shot idea as a Director of Photography prompt.

    Returns the original query unchanged if the rewrite fails.
    """
    try:
        async with open_aggregator() as aggregator:
            enhanced = await aggregator.enhance_prompt(query)
        return {"query": query, "enhanced": enhanced}
    except Exception as exc:
        return make_tool_error(exc)


def _coerce_shot(shot: str | dict) -> AggregateResult:
    if isinstance(shot, str):
        return AggregateResult(query=shot, summary="")
    return AggregateResult.model_validate({"summary": "", **shot})


@scout_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
@trace(name="broll_schedule", capability="text")
async def broll_schedule(
    shots: Annotated[list[str | dict], Field(
        min_length=1,
        description="Saved shots: query strings or broll_search results",
    )],
) -> dict:
    """Draft a one-day call sheet grouping shots by lighting setup.

    Args:
        shots: Shot queries, or full search results (their lighting spec is used).

    Returns:
        Dict with the schedule as a Markdown table.
    """
    shots = coerce_json_param(shots, list)

    try:
        parsed = [_coerce_shot(s) for s in shots]
        async with open_aggregator() as aggregator:
            schedule = await aggregator.production_schedule(parsed)
        return {"shot_count": len(parsed), "schedule": schedule}
    except Exception as exc:
        return make_tool_error(exc)
