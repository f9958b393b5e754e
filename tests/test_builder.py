"""Tests for the prompt builder — pure request descriptors."""

from __future__ import annotations

import pytest

from broll_scout_mcp.builder import (
    Capability,
    GroundingTool,
    VideoSpec,
    build_analysis_request,
    build_enhance_request,
    build_location_request,
    build_preview_request,
    build_schedule_request,
    build_script_request,
    build_search_request,
    build_shot_list_request,
    build_speech_request,
    build_variation_requests,
    build_video_request,
)
from broll_scout_mcp.models.creative import (
    AggregateResult,
    ReferenceImage,
    ScriptBeat,
    StructuredAnalysis,
    TechSpecs,
)
from broll_scout_mcp.prompts.creative import LENS_HINTS, REFERENCE_MATCH_SUFFIX, REFERENCE_STYLE_DIRECTIVE

REF = ReferenceImage(data=b"\xff\xd8jpeg", mime_type="image/jpeg")


class TestSearchAndAnalysis:
    def test_search_request_embeds_query_verbatim(self):
        req = build_search_request("rainy neon alley")
        assert "rainy neon alley" in req.instruction
        assert req.capability is Capability.GROUNDED_SEARCH
        assert req.tools == (GroundingTool.GOOGLE_SEARCH,)
        assert "footage researcher" in req.system_instruction

    def test_analysis_request_without_reference(self):
        req = build_analysis_request("rainy neon alley")
        assert req.capability is Capability.STRUCTURED
        assert req.schema is StructuredAnalysis
        assert req.attachment is None
        assert "rainy neon alley" in req.instruction
        assert not req.instruction.startswith(REFERENCE_STYLE_DIRECTIVE)

    def test_analysis_request_with_reference_prefixes_directive(self):
        """GIVEN a reference image THEN the directive leads and the image rides as attachment."""
        req = build_analysis_request("rainy neon alley", REF)
        assert req.instruction.startswith(REFERENCE_STYLE_DIRECTIVE)
        assert req.attachment is REF
        assert "base64" not in req.instruction

    def test_builder_is_deterministic(self):
        assert build_analysis_request("q", REF) == build_analysis_request("q", REF)


class TestPreview:
    @pytest.mark.parametrize("lens", ["16mm", "35mm", "50mm", "85mm"])
    def test_lens_hint_appended(self, lens):
        req = build_preview_request("chef cooking", lens)
        assert req.instruction.endswith(LENS_HINTS[lens])
        assert req.capability is Capability.IMAGE

    def test_unknown_lens_adds_nothing(self):
        assert build_preview_request("x", "200mm") == build_preview_request("x")

    def test_reference_image_appends_match_sentence(self):
        req = build_preview_request("x", "85mm", REF)
        assert req.instruction.endswith(REFERENCE_MATCH_SUFFIX)
        assert LENS_HINTS["85mm"] in req.instruction
        assert req.attachment is REF

    def test_variations_are_four_distinct_framings(self):
        reqs = build_variation_requests("chef cooking macro")
        assert len(reqs) == 4
        assert len({r.instruction for r in reqs}) == 4
        assert all("chef cooking macro" in r.instruction for r in reqs)
        assert reqs[1].instruction.startswith("Cinematic b-roll still frame: Close-up detail:")


class TestOtherBuilders:
    def test_video_request_defaults(self):
        req = build_video_request("drone over dunes")
        assert req.capability is Capability.VIDEO
        assert req.video == VideoSpec(resolution="720p", aspect_ratio="16:9", count=1)
        assert "drone over dunes" in req.instruction

    def test_shot_list_is_list_of_strings(self):
        req = build_shot_list_request("morning market")
        assert req.schema == list[str]
        assert "4 distinct" in req.instruction

    def test_script_request_schema(self):
        req = build_script_request("Once upon a time.")
        assert req.schema == list[ScriptBeat]
        assert "Once upon a time." in req.instruction

    def test_location_with_coordinates(self):
        req = build_location_request("brutalist stairwell", 34.05, -118.25)
        assert req.location == (34.05, -118.25)
        assert req.tools == (GroundingTool.GOOGLE_MAPS,)
        assert "34.05, -118.25" in req.instruction

    def test_location_without_coordinates(self):
        req = build_location_request("brutalist stairwell")
        assert req.location is None
        assert "Los Angeles" in req.instruction

    def test_location_needs_both_coordinates(self):
        assert build_location_request("q", lat=10.0).location is None

    def test_speech_request_carries_voice(self):
        req = build_speech_request("Hello there", "Kore")
        assert req.capability is Capability.SPEECH
        assert req.voice == "Kore"
        assert req.instruction == "Hello there"

    def test_enhance_request(self):
        req = build_enhance_request("dog running")
        assert req.capability is Capability.TEXT
        assert 'Input: "dog running"' in req.instruction

    def test_schedule_lists_lighting_or_standard(self):
        shots = [
            AggregateResult(query="sunrise beach", summary="", tech_specs=TechSpecs(lighting="Day Exterior")),
            AggregateResult(query="bar interior", summary=""),
        ]
        req = build_schedule_request(shots)
        assert "1. sunrise beach (Specs: Day Exterior)" in req.instruction
        assert "2. bar interior (Specs: Standard)" in req.instruction
