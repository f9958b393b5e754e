"""Shared type aliases and helpers for tool parameters."""

from __future__ import annotations

import json
from typing import Annotated, Literal

from pydantic import Field


def coerce_json_param(value: str | dict | list | None, expected_type: type) -> dict | list | None:
    """Parse MCP JSON-RPC string params back to dict/list.

    Some MCP hosts serialise dict/list arguments as JSON strings, which
    Pydantic v2 rejects. Non-strings and unparsable strings pass through.
    """
    if not isinstance(value, str):
        return value
    try:
        parsed = json.loads(value)
        if isinstance(parsed, expected_type):
            return parsed
    except (json.JSONDecodeError, TypeError):
        pass
    return value

# ── Literal enums ────────────────────────────────────────────────────────────

SearchModeParam = Literal["single", "scene", "script"]
LensPreset = Literal["16mm", "35mm", "50mm", "85mm"]
ModelPreset = Literal["fast", "quality"]

# ── Annotated aliases ────────────────────────────────────────────────────────

ShotQuery = Annotated[str, Field(min_length=2, max_length=2000, description="Shot, scene, or B-roll description")]
ScriptText = Annotated[str, Field(min_length=2, max_length=20000, description="Full narration script")]
ReferenceImageParam = Annotated[str | None, Field(
    description="Style reference: local image path or base64 data URI",
)]
Latitude = Annotated[float | None, Field(ge=-90, le=90, description="Latitude to search near")]
Longitude = Annotated[float | None, Field(ge=-180, le=180, description="Longitude to search near")]
