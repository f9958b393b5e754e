"""Tests for creative models and reference-image loading."""

from __future__ import annotations

import base64

import pytest
from pydantic import TypeAdapter, ValidationError

from broll_scout_mcp.local_path_policy import load_reference_image
from broll_scout_mcp.models.creative import (
    AggregateResult,
    Citation,
    CreativeQuery,
    LightNode,
    MapCitation,
    ReferenceImage,
    StructuredAnalysis,
    WebCitation,
)


class TestReferenceImage:
    def test_from_data_uri(self):
        uri = "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()
        ref = ReferenceImage.from_data_uri(uri)
        assert ref.mime_type == "image/png"
        assert ref.data == b"\x89PNG"

    @pytest.mark.parametrize("uri", ["data:image/png,rawtext", "image/png;base64,AAAA", "data:image/png;base64,@@@"])
    def test_malformed_data_uri(self, uri):
        with pytest.raises(ValueError):
            ReferenceImage.from_data_uri(uri)

    def test_unsupported_type(self):
        with pytest.raises(ValidationError, match="Unsupported image type"):
            ReferenceImage(data=b"x", mime_type="image/gif")

    def test_query_is_frozen(self):
        q = CreativeQuery(text="chef cooking macro")
        with pytest.raises(ValidationError):
            q.text = "other"


class TestStructuredAnalysis:
    def test_partial_payload_parses(self):
        result = TypeAdapter(StructuredAnalysis).validate_json('{"audio": {"sfx": ["rain"]}}')
        assert result.audio.sfx == ["rain"]
        assert result.vibe is None

    def test_light_angle_wraps(self):
        assert LightNode(role="Key", angle=405).angle == 45

    def test_unknown_light_role_rejected(self):
        with pytest.raises(ValidationError):
            LightNode(role="Rim")


class TestCitations:
    def test_discriminated_on_kind(self):
        adapter = TypeAdapter(list[Citation])
        parsed = adapter.validate_python([
            {"kind": "web", "uri": "https://a.test"},
            {"kind": "map", "uri": "https://maps.google.com/?cid=1", "place_id": "p"},
        ])
        assert isinstance(parsed[0], WebCitation)
        assert isinstance(parsed[1], MapCitation)

    def test_aggregate_serialises_citation_kind(self):
        result = AggregateResult(query="q", summary="s", sources=[WebCitation(uri="https://a.test")])
        dumped = result.model_dump(mode="json")
        assert dumped["sources"] == [{"kind": "web", "title": "", "uri": "https://a.test"}]
        assert dumped["current_focal_length"] == "50mm"


class TestLoadReferenceImage:
    def test_local_path(self, tmp_path):
        path = tmp_path / "ref.png"
        path.write_bytes(b"\x89PNG")
        ref = load_reference_image(str(path))
        assert ref.mime_type == "image/png"

    def test_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_reference_image(str(tmp_path / "missing.jpg"))

    def test_outside_access_root(self, tmp_path, monkeypatch):
        outside = tmp_path / "outside.jpg"
        outside.write_bytes(b"jpeg")
        root = tmp_path / "allowed"
        root.mkdir()
        monkeypatch.setenv("LOCAL_FILE_ACCESS_ROOT", str(root))
        with pytest.raises(PermissionError):
            load_reference_image(str(outside))

    def test_data_uri_passthrough(self):
        uri = "data:image/webp;base64," + base64.b64encode(b"RIFF").decode()
        assert load_reference_image(uri).mime_type == "image/webp"
