"""Location and grading tools — 2 tools on a FastMCP sub-server."""

from __future__ import annotations

from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..errors import make_tool_error
from ..grading import LUT_TITLE, build_cube_lut
from ..tracing import trace
from ..types import Latitude, Longitude, ShotQuery, coerce_json_param
from ._session import open_aggregator

locations_server = FastMCP("locations")


@locations_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
@trace(name="broll_locations", capability="search")
async def broll_locations(
    query: ShotQuery,
    lat: Latitude = None,
    lng: Longitude = None,
) -> dict:
    """Scout real-world places that match a shot's look via Google Maps grounding.

    Sun windows on each location are placeholder values, not computed for
    the coordinates.

    Args:
        query: The shot or vibe to match.
        lat: Optional latitude to search near (requires lng).
        lng: Optional longitude to search near (requires lat).

    Returns:
        Dict with query and locations (title, uri, sun_data).
    """
    try:
        async with open_aggregator() as aggregator:
            locations = await aggregator.scout_locations(query, lat, lng)
        return {
            "query": query,
            "locations": [loc.model_dump(mode="json") for loc in locations],
        }
    except Exception as exc:
        return make_tool_error(exc)


@locations_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=False))
@trace(name="broll_lut")
async def broll_lut(
    palette: Annotated[list[str], Field(description="Hex colours from a search result's vibe palette")],
) -> dict:
    """Export a small .cube LUT tinted toward the palette.

    Returns:
        Dict with filename and the .cube file contents.
    """
    palette = coerce_json_param(palette, list)

    try:
        return {"filename": f"{LUT_TITLE}.cube", "content": build_cube_lut(palette)}
    except Exception as exc:
        return make_tool_error(exc)
