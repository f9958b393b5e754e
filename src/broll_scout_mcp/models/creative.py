"""Creative domain models: queries, structured analysis, citations, aggregates.

``StructuredAnalysis`` and ``ScriptBeat`` double as structured-output
schemas for Gemini (sent via ``response_json_schema``). Everything else is
assembled locally by the merger and returned to the caller.
"""

from __future__ import annotations

import base64
import binascii
import uuid
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

SUPPORTED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp"}


def new_id() -> str:
    """Aggregator-assigned identifier (never taken from the backend)."""
    return uuid.uuid4().hex


class SearchMode(str, Enum):
    """What the user typed: one shot, a scene to break down, or a full script."""

    SINGLE = "single"
    SCENE = "scene"
    SCRIPT = "script"


class ReferenceImage(BaseModel):
    """Opaque style-reference image attached to a query."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: str = "image/jpeg"

    @field_validator("mime_type")
    @classmethod
    def validate_mime_type(cls, value: str) -> str:
        if value not in SUPPORTED_IMAGE_TYPES:
            raise ValueError(f"Unsupported image type '{value}'")
        return value

    @classmethod
    def from_data_uri(cls, uri: str) -> ReferenceImage:
        """Parse a ``data:<mime>;base64,<payload>`` URI."""
        header, sep, payload = uri.partition(",")
        if not sep or not header.startswith("data:") or ";base64" not in header:
            raise ValueError("Reference image must be a base64 data URI")
        mime_type = header[len("data:"):].split(";", 1)[0] or "image/jpeg"
        try:
            data = base64.b64decode(payload, validate=True)
        except binascii.Error as exc:
            raise ValueError("Reference image payload is not valid base64") from exc
        return cls(data=data, mime_type=mime_type)


class CreativeQuery(BaseModel):
    """A submitted request. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(min_length=1)
    mode: SearchMode = SearchMode.SINGLE
    reference_image: ReferenceImage | None = None


# ── Structured analysis (schema-constrained output) ─────────────────────────


class VibeMetadata(BaseModel):
    """Colour palette and mood tags."""

    palette: list[str] = Field(default_factory=list, description="Hex colour tokens, dominant first")
    moods: list[str] = Field(default_factory=list)


class TechSpecs(BaseModel):
    lens: str = ""
    lighting: str = ""
    frame_rate: str = ""
    movement: str = ""


class CameraSettings(BaseModel):
    """Human-readable camera jargon, kept as text (e.g. ``T2.8``, ``180°``)."""

    iso: str = Field(default="", description="e.g. 800")
    aperture: str = Field(default="", description="e.g. T2.8")
    shutter: str = Field(default="", description="e.g. 180°")
    white_balance: str = Field(default="", description="e.g. 5600K")


class LightNode(BaseModel):
    """One light in a top-down lighting diagram."""

    role: Literal["Key", "Fill", "Back", "Background"]
    angle: float = Field(default=0.0, description="Degrees around the subject, 0-360")
    distance: float = Field(default=5.0, description="Relative distance, 1-10")
    color: str = Field(default="#FFFFFF", description="Hex colour")

    @field_validator("angle")
    @classmethod
    def wrap_angle(cls, value: float) -> float:
        return value % 360


class AudioSpecs(BaseModel):
    sfx: list[str] = Field(default_factory=list)
    music_mood: str = ""


class StructuredAnalysis(BaseModel):
    """Director-of-photography breakdown of a shot idea.

    Every field is optional; the backend may omit any of them. Validation is
    all-or-nothing: a payload that fails to parse yields no analysis at all.
    """

    vibe: VibeMetadata | None = None
    tech_specs: TechSpecs | None = None
    camera_settings: CameraSettings | None = None
    lighting_diagram: list[LightNode] | None = Field(
        default=None, description="3-4 lights"
    )
    audio: AudioSpecs | None = None


class ScriptBeat(BaseModel):
    """Structured-output row for script breakdown (before ids are assigned)."""

    narration: str = Field(default="", description="The specific line from the script")
    visual_prompt: str = Field(default="", description="A detailed B-roll search query for this line")
    estimated_duration: str = Field(default="", description="e.g. 3s")


# ── Citations (tagged union) ─────────────────────────────────────────────────


class WebCitation(BaseModel):
    kind: Literal["web"] = "web"
    title: str = ""
    uri: str


class MapCitation(BaseModel):
    kind: Literal["map"] = "map"
    title: str = ""
    uri: str
    place_id: str | None = None


Citation = Annotated[Union[WebCitation, MapCitation], Field(discriminator="kind")]


# ── Aggregate ────────────────────────────────────────────────────────────────


class FoundClip(BaseModel):
    """A citation presented as a clip card with a generated thumbnail."""

    id: str = Field(default_factory=new_id)
    title: str
    url: str
    domain: str
    thumbnail: str | None = None


class DirectLink(BaseModel):
    """Quick-search deep link into a footage platform."""

    platform: str
    url: str
    type: Literal["free", "paid", "social"]


class AggregateResult(BaseModel):
    """Output of a single-shot search.

    Structured fields are either all taken from one parsed analysis or all
    ``None``.
    """

    id: str = Field(default_factory=new_id)
    query: str
    summary: str
    sources: list[Citation] = Field(default_factory=list)
    found_clips: list[FoundClip] = Field(default_factory=list)
    direct_links: list[DirectLink] = Field(default_factory=list)
    vibe: VibeMetadata | None = None
    tech_specs: TechSpecs | None = None
    camera_settings: CameraSettings | None = None
    lighting_diagram: list[LightNode] | None = None
    audio: AudioSpecs | None = None
    current_focal_length: str = "50mm"
    generated_preview_url: str | None = None
    generated_video_url: str | None = None
    variations: list[str] = Field(default_factory=list)


class ScriptSegment(BaseModel):
    id: str = Field(default_factory=new_id)
    narration: str
    visual_prompt: str
    estimated_duration: str = ""


class SceneBreakdown(BaseModel):
    description: str
    shots: list[str] = Field(default_factory=list)


# ── Locations ────────────────────────────────────────────────────────────────


class SunData(BaseModel):
    """Golden/blue hour windows. Placeholder values, not computed per location."""

    sunrise: str = "06:15 AM"
    golden_hour_morning: str = "06:15 AM - 07:00 AM"
    golden_hour_evening: str = "06:45 PM - 07:30 PM"
    sunset: str = "07:30 PM"
    blue_hour: str = "07:30 PM - 07:50 PM"


class MapLocation(BaseModel):
    title: str
    uri: str
    address: str | None = None
    rating: float | None = None
    sun_data: SunData | None = None
