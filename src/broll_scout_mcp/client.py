"""Gemini / Veo backend: the six capability calls behind the aggregator.

``GeminiBackend`` owns one ``genai.Client`` and is passed explicitly into the
aggregator; nothing here is process-global. ``from_config`` builds a fresh
instance, so a credential change only needs a new backend, not a mutation.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from typing import Any

from google import genai
from google.genai import types
from pydantic import TypeAdapter

from .builder import Capability, GroundingTool, RequestDescriptor
from .config import ServerConfig, get_config
from .models.media import GeneratedImage, SpeechAudio, VideoOperation
from .retry import with_retry

logger = logging.getLogger(__name__)


@dataclass
class GroundedResponse:
    """Free text plus the raw grounding chunks (web or maps variants)."""

    text: str
    chunks: list[Any] = field(default_factory=list)


def _first_parts(response: Any) -> list[Any]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    content = getattr(candidates[0], "content", None)
    return list(getattr(content, "parts", None) or [])


def _visible_text(response: Any) -> str:
    """Join non-thought text parts, falling back to ``response.text``."""
    text_parts = [
        p.text for p in _first_parts(response)
        if getattr(p, "text", None) and not getattr(p, "thought", False)
    ]
    return "\n".join(text_parts) if text_parts else (getattr(response, "text", None) or "")


def _contents(request: RequestDescriptor) -> Any:
    """Plain text, or image part + text part when an attachment is present."""
    if request.attachment is None:
        return request.instruction
    return types.Content(
        role="user",
        parts=[
            types.Part.from_bytes(
                data=request.attachment.data, mime_type=request.attachment.mime_type
            ),
            types.Part.from_text(text=request.instruction),
        ],
    )


def _grounding_tools(request: RequestDescriptor) -> list[types.Tool]:
    tools = []
    for tool in request.tools:
        if tool is GroundingTool.GOOGLE_SEARCH:
            tools.append(types.Tool(google_search=types.GoogleSearch()))
        elif tool is GroundingTool.GOOGLE_MAPS:
            tools.append(types.Tool(google_maps=types.GoogleMaps()))
    return tools


def _to_video_operation(operation: Any) -> VideoOperation:
    """Snapshot an SDK ``GenerateVideosOperation``."""
    error = getattr(operation, "error", None)
    media_uri = None
    response = getattr(operation, "response", None) or getattr(operation, "result", None)
    videos = getattr(response, "generated_videos", None) or []
    if videos:
        video = getattr(videos[0], "video", None)
        media_uri = getattr(video, "uri", None)
    return VideoOperation(
        handle=operation,
        done=bool(getattr(operation, "done", False)),
        error=str(error) if error else None,
        media_uri=media_uri,
    )


class GeminiBackend:
    """google-genai implementation of the aggregator's backend contract."""

    def __init__(self, client: genai.Client, config: ServerConfig, *, api_key: str = "") -> None:
        self._client = client
        self._config = config
        self.api_key = api_key

    @classmethod
    def from_config(
        cls, config: ServerConfig | None = None, *, api_key: str | None = None
    ) -> GeminiBackend:
        """Create a backend with its own client.

        Raises:
            ValueError: If no API key is available.
        """
        cfg = config or get_config()
        key = api_key or cfg.gemini_api_key
        if not key:
            raise ValueError("No Gemini API key — set GEMINI_API_KEY or pass api_key explicitly")
        logger.info("Created Gemini client (key …%s)", key[-4:])
        return cls(genai.Client(api_key=key), cfg, api_key=key)

    @classmethod
    def for_video(
        cls, config: ServerConfig | None = None, *, api_key: str | None = None
    ) -> GeminiBackend:
        """Backend bound to the Veo billing key.

        *api_key* (a freshly re-read key) wins over ``VEO_API_KEY`` from the
        config, which in turn falls back to the default key.
        """
        cfg = config or get_config()
        return cls.from_config(cfg, api_key=api_key or cfg.resolved_video_api_key)

    @property
    def config(self) -> ServerConfig:
        return self._config

    async def aclose(self) -> None:
        """Close the underlying HTTP sessions."""
        try:
            await self._client.aio.aclose()
        except Exception:
            logger.debug("Async client close failed", exc_info=True)
        try:
            self._client.close()
        except Exception:
            logger.debug("Sync client close failed", exc_info=True)

    async def _generate(self, model: str, contents: Any, config: types.GenerateContentConfig, label: str) -> Any:
        return await with_retry(
            lambda: self._client.aio.models.generate_content(
                model=model, contents=contents, config=config,
            ),
            label=label,
            config=self._config,
        )

    # ── 1. text ──────────────────────────────────────────────────────────

    async def generate_text(self, request: RequestDescriptor) -> str:
        """Free-text completion."""
        config = types.GenerateContentConfig()
        if request.system_instruction:
            config.system_instruction = request.system_instruction
        response = await self._generate(
            self._config.text_model, _contents(request), config, "generate_text"
        )
        return _visible_text(response)

    # ── 2. schema-constrained ───────────────────────────────────────────

    async def generate_structured(self, request: RequestDescriptor) -> Any:
        """Schema-constrained completion, validated against ``request.schema``.

        Raises:
            pydantic.ValidationError: If the response does not match the schema.
        """
        if request.capability is not Capability.STRUCTURED or request.schema is None:
            raise ValueError("generate_structured needs a STRUCTURED request with a schema")
        adapter = TypeAdapter(request.schema)
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_json_schema=adapter.json_schema(),
        )
        if request.system_instruction:
            config.system_instruction = request.system_instruction
        response = await self._generate(
            self._config.text_model, _contents(request), config, "generate_structured"
        )
        return adapter.validate_json(_visible_text(response))

    # ── 3. grounded search ──────────────────────────────────────────────

    async def grounded_search(self, request: RequestDescriptor) -> GroundedResponse:
        """Search/Maps-grounded completion returning text and raw chunks."""
        config = types.GenerateContentConfig(tools=_grounding_tools(request))
        if request.system_instruction:
            config.system_instruction = request.system_instruction
        if request.location is not None:
            lat, lng = request.location
            config.tool_config = types.ToolConfig(
                retrieval_config=types.RetrievalConfig(
                    lat_lng=types.LatLng(latitude=lat, longitude=lng),
                ),
            )
        response = await self._generate(
            self._config.text_model, request.instruction, config, "grounded_search"
        )
        chunks: list[Any] = []
        candidates = getattr(response, "candidates", None) or []
        if candidates:
            gm = getattr(candidates[0], "grounding_metadata", None)
            if gm:
                chunks = list(getattr(gm, "grounding_chunks", None) or [])
        return GroundedResponse(text=getattr(response, "text", None) or "", chunks=chunks)

    # ── 4. image ────────────────────────────────────────────────────────

    async def generate_image(self, request: RequestDescriptor) -> GeneratedImage | None:
        """Return the first inline image part, or None if the model sent none."""
        config = types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"])
        response = await self._generate(
            self._config.image_model, _contents(request), config, "generate_image"
        )
        for part in _first_parts(response):
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                return GeneratedImage(data=inline.data, mime_type=inline.mime_type or "image/png")
        return None

    # ── 5. video ────────────────────────────────────────────────────────

    async def submit_video(self, request: RequestDescriptor) -> VideoOperation:
        """Start a Veo job and return its first snapshot."""
        spec = request.video
        config = types.GenerateVideosConfig(
            number_of_videos=spec.count if spec else 1,
            resolution=spec.resolution if spec else "720p",
            aspect_ratio=spec.aspect_ratio if spec else "16:9",
        )
        operation = await with_retry(
            lambda: self._client.aio.models.generate_videos(
                model=self._config.video_model,
                prompt=request.instruction,
                config=config,
            ),
            label="submit_video",
            config=self._config,
        )
        return _to_video_operation(operation)

    async def check_video(self, operation: VideoOperation) -> VideoOperation:
        """One status check, not retried."""
        refreshed = await self._client.aio.operations.get(operation.handle)
        return _to_video_operation(refreshed)

    # ── 6. speech ───────────────────────────────────────────────────────

    async def synthesize_speech(self, request: RequestDescriptor) -> SpeechAudio:
        """Text-to-speech with a prebuilt voice; returns decoded PCM.

        Raises:
            ValueError: If the response carries no audio.
        """
        config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(
                        voice_name=request.voice or self._config.tts_voice,
                    ),
                ),
            ),
        )
        response = await self._generate(
            self._config.tts_model, request.instruction, config, "synthesize_speech"
        )
        parts = _first_parts(response)
        inline = getattr(parts[0], "inline_data", None) if parts else None
        if inline is None or not inline.data:
            raise ValueError("No audio data returned")
        return SpeechAudio(data=decode_audio(inline.data), mime_type=inline.mime_type or "audio/L16;rate=24000")


def decode_audio(payload: bytes | str) -> bytes:
    """Accept raw bytes or a base64 string and return raw audio bytes."""
    if isinstance(payload, str):
        return base64.b64decode(payload)
    return payload
