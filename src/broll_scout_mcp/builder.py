"""Prompt Builder — pure mapping from user input to backend request descriptors.

Nothing here touches the network. Each ``build_*`` function returns a
``RequestDescriptor`` that names a capability class, the instruction text
and, where relevant, the output schema, an attached image, grounding tools,
a retrieval location, a voice, or video output settings. ``client.py`` turns
descriptors into google-genai calls.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .models.creative import (
    AggregateResult,
    ReferenceImage,
    ScriptBeat,
    StructuredAnalysis,
)
from .prompts.creative import (
    CALL_SHEET,
    DOP_ANALYSIS,
    ENHANCE_QUERY,
    FOOTAGE_RESEARCHER_SYSTEM,
    FOOTAGE_SEARCH,
    LENS_HINTS,
    LOCATION_ANYWHERE,
    LOCATION_NEAR,
    PREVIEW_FRAME,
    REFERENCE_MATCH_SUFFIX,
    REFERENCE_STYLE_DIRECTIVE,
    SCRIPT_BEATS,
    SHOT_LIST,
    VARIATION_FRAMINGS,
    VIDEO_CLIP,
)

SHOTS_PER_SCENE = 4


class Capability(str, Enum):
    """Backend capability class a request targets."""

    TEXT = "text"
    STRUCTURED = "structured"
    GROUNDED_SEARCH = "grounded_search"
    IMAGE = "image"
    VIDEO = "video"
    SPEECH = "speech"


class GroundingTool(str, Enum):
    GOOGLE_SEARCH = "google_search"
    GOOGLE_MAPS = "google_maps"


@dataclass(frozen=True)
class VideoSpec:
    """Output settings for a video synthesis job."""

    resolution: str = "720p"
    aspect_ratio: str = "16:9"
    count: int = 1


@dataclass(frozen=True)
class RequestDescriptor:
    """Backend-agnostic description of one call.

    ``schema`` is a pydantic model class or a ``list[...]`` type; its JSON
    schema constrains the response of STRUCTURED requests.
    """

    capability: Capability
    instruction: str
    system_instruction: str | None = None
    schema: Any = None
    attachment: ReferenceImage | None = None
    tools: tuple[GroundingTool, ...] = ()
    location: tuple[float, float] | None = None
    voice: str | None = None
    video: VideoSpec | None = None


def build_search_request(query: str) -> RequestDescriptor:
    """Grounded footage search for a single shot."""
    return RequestDescriptor(
        capability=Capability.GROUNDED_SEARCH,
        instruction=FOOTAGE_SEARCH.format(query=query),
        system_instruction=FOOTAGE_RESEARCHER_SYSTEM,
        tools=(GroundingTool.GOOGLE_SEARCH,),
    )


def build_analysis_request(
    query: str, reference_image: ReferenceImage | None = None
) -> RequestDescriptor:
    """Schema-constrained DoP analysis, style-matched to *reference_image* if given."""
    instruction = DOP_ANALYSIS.format(query=query)
    if reference_image is not None:
        instruction = f"{REFERENCE_STYLE_DIRECTIVE}\n\n{instruction}"
    return RequestDescriptor(
        capability=Capability.STRUCTURED,
        instruction=instruction,
        schema=StructuredAnalysis,
        attachment=reference_image,
    )


def build_preview_request(
    description: str,
    focal_length: str | None = None,
    reference_image: ReferenceImage | None = None,
) -> RequestDescriptor:
    """Storyboard still, steered by a lens preset and an optional reference."""
    parts = [PREVIEW_FRAME.format(description=description)]
    hint = LENS_HINTS.get(focal_length or "")
    if hint:
        parts.append(hint)
    if reference_image is not None:
        parts.append(REFERENCE_MATCH_SUFFIX)
    return RequestDescriptor(
        capability=Capability.IMAGE,
        instruction=" ".join(parts),
        attachment=reference_image,
    )


def build_variation_requests(query: str) -> list[RequestDescriptor]:
    """One preview request per framing, in a fixed order."""
    return [build_preview_request(f.format(query=query)) for f in VARIATION_FRAMINGS]


def build_video_request(description: str, spec: VideoSpec | None = None) -> RequestDescriptor:
    return RequestDescriptor(
        capability=Capability.VIDEO,
        instruction=VIDEO_CLIP.format(description=description),
        video=spec or VideoSpec(),
    )


def build_shot_list_request(description: str) -> RequestDescriptor:
    return RequestDescriptor(
        capability=Capability.STRUCTURED,
        instruction=SHOT_LIST.format(description=description, count=SHOTS_PER_SCENE),
        schema=list[str],
    )


def build_script_request(script: str) -> RequestDescriptor:
    return RequestDescriptor(
        capability=Capability.STRUCTURED,
        instruction=SCRIPT_BEATS.format(script=script),
        schema=list[ScriptBeat],
    )


def build_location_request(
    query: str, lat: float | None = None, lng: float | None = None
) -> RequestDescriptor:
    """Maps-grounded scouting; coordinates bias retrieval when both are given."""
    if lat is not None and lng is not None:
        return RequestDescriptor(
            capability=Capability.GROUNDED_SEARCH,
            instruction=LOCATION_NEAR.format(lat=lat, lng=lng, query=query),
            tools=(GroundingTool.GOOGLE_MAPS,),
            location=(lat, lng),
        )
    return RequestDescriptor(
        capability=Capability.GROUNDED_SEARCH,
        instruction=LOCATION_ANYWHERE.format(query=query),
        tools=(GroundingTool.GOOGLE_MAPS,),
    )


def build_speech_request(text: str, voice: str) -> RequestDescriptor:
    return RequestDescriptor(capability=Capability.SPEECH, instruction=text, voice=voice)


def build_enhance_request(query: str) -> RequestDescriptor:
    return RequestDescriptor(capability=Capability.TEXT, instruction=ENHANCE_QUERY.format(query=query))


def build_schedule_request(shots: Sequence[AggregateResult]) -> RequestDescriptor:
    """Call-sheet request; each shot line carries its lighting spec for grouping."""
    lines = []
    for i, shot in enumerate(shots, start=1):
        lighting = shot.tech_specs.lighting if shot.tech_specs and shot.tech_specs.lighting else "Standard"
        lines.append(f"{i}. {shot.query} (Specs: {lighting})")
    return RequestDescriptor(
        capability=Capability.TEXT,
        instruction=CALL_SHEET.format(shot_lines="\n".join(lines)),
    )
