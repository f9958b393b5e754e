"""Infrastructure tools — 1 tool on a FastMCP sub-server."""

from __future__ import annotations

from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..config import MODEL_PRESETS, get_config, update_config
from ..errors import make_tool_error
from ..tracing import trace
from ..types import ModelPreset

infra_server = FastMCP("infra")
_SENSITIVE_CONFIG_FIELDS = {"gemini_api_key", "video_api_key"}


def _redacted_config() -> dict:
    """Return runtime config with secret-bearing fields removed."""
    return get_config().model_dump(exclude=_SENSITIVE_CONFIG_FIELDS)


@infra_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
@trace(name="infra_configure")
async def infra_configure(
    preset: Annotated[ModelPreset | None, Field(
        description='Named preset: "fast" (Veo 3.1 Fast) or "quality" (2.5 Pro + Veo 3.1)',
    )] = None,
    video_model: Annotated[str | None, Field(description="Veo model ID override (takes precedence over preset)")] = None,
    tts_voice: Annotated[str | None, Field(description="Default prebuilt voice for narration")] = None,
    video_poll_max_attempts: Annotated[int | None, Field(ge=1, le=1000, description="Max Veo status checks")] = None,
) -> dict:
    """Inspect or reconfigure the server at runtime.

    Changes take effect for all subsequent tool calls. Call with no
    arguments to read the current (redacted) config.

    Returns:
        Dict with current_config, active_preset, and available_presets.
    """
    try:
        overrides: dict[str, object] = {}

        if preset is not None:
            if preset not in MODEL_PRESETS:
                valid = ", ".join(sorted(MODEL_PRESETS))
                raise ValueError(f"Unknown preset '{preset}'. Available: {valid}")
            p = MODEL_PRESETS[preset]
            overrides["text_model"] = p["text_model"]
            overrides["video_model"] = p["video_model"]

        if video_model is not None:
            overrides["video_model"] = video_model
        if tts_voice is not None:
            overrides["tts_voice"] = tts_voice
        if video_poll_max_attempts is not None:
            overrides["video_poll_max_attempts"] = video_poll_max_attempts

        cfg = update_config(**overrides) if overrides else get_config()

        active = None
        for name, p in MODEL_PRESETS.items():
            if cfg.text_model == p["text_model"] and cfg.video_model == p["video_model"]:
                active = name
                break

        return {
            "current_config": _redacted_config(),
            "active_preset": active,
            "available_presets": {k: v["label"] for k, v in MODEL_PRESETS.items()},
        }
    except Exception as exc:
        return make_tool_error(exc)
