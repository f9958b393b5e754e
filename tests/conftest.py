"""Shared test fixtures for broll-scout-mcp."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from broll_scout_mcp.models.creative import (
    AudioSpecs,
    CameraSettings,
    LightNode,
    StructuredAnalysis,
    TechSpecs,
    VibeMetadata,
)
from broll_scout_mcp.models.media import GeneratedImage, VideoOperation


def unwrap_tool(tool: Any) -> Any:
    """Extract the raw coroutine from a FastMCP FunctionTool, if wrapped."""
    return getattr(tool, "fn", tool)


@pytest.fixture(autouse=True, scope="session")
def _unwrap_fastmcp_tools():
    """Patch tool modules so FunctionTool objects become directly callable.

    FastMCP 2.x wraps @server.tool in FunctionTool (not callable); 3.x
    preserves the function. Unwrapping at module level lets tests
    ``await tool_func(...)`` regardless of FastMCP version.
    """
    import importlib
    import pkgutil

    import broll_scout_mcp.tools as tools_pkg

    modules = [
        importlib.import_module(info.name)
        for info in pkgutil.walk_packages(tools_pkg.__path__, tools_pkg.__name__ + ".")
    ]
    for mod in modules:
        for name in list(vars(mod)):
            obj = getattr(mod, name, None)
            if obj is not None and hasattr(obj, "fn") and not callable(obj):
                setattr(mod, name, obj.fn)


@pytest.fixture(autouse=True)
def _set_dummy_api_key(monkeypatch):
    """Ensure tests never hit the real Gemini API."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key-not-real")
    monkeypatch.delenv("VEO_API_KEY", raising=False)


@pytest.fixture(autouse=True)
def _disable_tracing(monkeypatch):
    monkeypatch.setenv("GEMINI_TRACING_ENABLED", "false")


@pytest.fixture(autouse=True)
def _isolate_dotenv(tmp_path, monkeypatch):
    """Prevent tests from loading the user's real ~/.config/broll-scout-mcp/.env."""
    monkeypatch.setattr(
        "broll_scout_mcp.dotenv.DEFAULT_ENV_PATH",
        tmp_path / "nonexistent.env",
    )


@pytest.fixture(autouse=True)
def _isolate_media_dir(tmp_path, monkeypatch):
    """Write generated media under tmp_path."""
    monkeypatch.setenv("BROLL_MEDIA_DIR", str(tmp_path / "media"))


@pytest.fixture(autouse=True)
def clean_config():
    """Reset the config singleton between tests."""
    import broll_scout_mcp.config as cfg_mod

    cfg_mod._config = None
    yield
    cfg_mod._config = None


def web_chunk(title: str, uri: str) -> SimpleNamespace:
    return SimpleNamespace(web=SimpleNamespace(title=title, uri=uri), maps=None)


def maps_chunk(title: str, uri: str, place_id: str | None = None) -> SimpleNamespace:
    return SimpleNamespace(web=None, maps=SimpleNamespace(title=title, uri=uri, place_id=place_id))


def full_analysis() -> StructuredAnalysis:
    return StructuredAnalysis(
        vibe=VibeMetadata(palette=["#1A1A2E", "#E94560"], moods=["warm", "intimate"]),
        tech_specs=TechSpecs(lens="100mm macro", lighting="soft key", frame_rate="60fps", movement="slider"),
        camera_settings=CameraSettings(iso="800", aperture="T2.8", shutter="180°", white_balance="3200K"),
        lighting_diagram=[
            LightNode(role="Key", angle=45, distance=3, color="#FFD8A8"),
            LightNode(role="Back", angle=200, distance=5, color="#A8C8FF"),
        ],
        audio=AudioSpecs(sfx=["sizzle", "knife chop"], music_mood="upbeat jazz"),
    )


def png(tag: bytes = b"img") -> GeneratedImage:
    return GeneratedImage(data=b"\x89PNG" + tag, mime_type="image/png")


@pytest.fixture()
def stub_backend():
    """Backend double exposing the six capability coroutines.

    Defaults: search returns text with no chunks, analysis succeeds,
    every image call returns a PNG, video completes immediately.
    """
    backend = MagicMock()
    backend.api_key = "stub-key"
    backend.grounded_search = AsyncMock(
        return_value=SimpleNamespace(text="Summary text", chunks=[])
    )
    backend.generate_structured = AsyncMock(return_value=full_analysis())
    backend.generate_image = AsyncMock(return_value=png())
    backend.generate_text = AsyncMock(return_value="text")
    backend.synthesize_speech = AsyncMock()
    backend.submit_video = AsyncMock(
        return_value=VideoOperation(handle="op", done=True, media_uri="https://media.test/v.mp4")
    )
    backend.check_video = AsyncMock()
    return backend
