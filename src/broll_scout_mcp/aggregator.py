"""Creative Request Aggregator: the entry operations behind every tool.

``CreativeAggregator`` composes the builder, fan-out executor, poller and
merger. The backend is injected; each call works only on its own locals, so
concurrent searches on one aggregator never share mutable state.

Every public operation converts internal failures into ``ScoutError`` with a
fixed, user-readable message. The original exception is logged and chained.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable, Sequence
from typing import Any

from .builder import (
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
from .config import ServerConfig, get_config
from .errors import (
    CredentialReselectRequired,
    ErrorCategory,
    ScoutError,
    VideoCancelledError,
    VideoTimeoutError,
    needs_credential_reselect,
)
from .fanout import degradable, fan_out, required
from .media import MediaResolver, resolver_for
from .merger import extract_map_citations, merge_aggregate
from .models.creative import (
    AggregateResult,
    CreativeQuery,
    MapLocation,
    ReferenceImage,
    SceneBreakdown,
    ScriptSegment,
    SearchMode,
    SunData,
)
from .models.media import GeneratedImage, ResolvedMedia, SpeechAudio
from .poller import VideoPoller

logger = logging.getLogger(__name__)

SEARCH_FAILED = "Failed to search for B-roll resources. Please try again."
SHOT_LIST_FAILED = "Could not generate shot list."
SCRIPT_FAILED = "Could not analyze script."
PREVIEW_FAILED = "Failed to generate preview image."
VIDEO_FAILED = "Failed to generate motion preview."
VIDEO_CANCELLED = "Motion preview was cancelled."
RESELECT_CREDENTIAL = "Please select a billing project and try again."
LOCATIONS_FAILED = "Could not find locations."
SPEECH_FAILED = "Failed to generate speech."
SCHEDULE_FAILED = "Error generating schedule."
SCHEDULE_EMPTY = "Could not generate schedule."


def user_facing(message: str, category: ErrorCategory = ErrorCategory.GENERATION_FAILED):
    """Decorate an async operation so any failure surfaces as ``ScoutError(message)``."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except ScoutError:
                raise
            except Exception as exc:
                logger.error("%s failed: %s", func.__name__, exc, exc_info=True)
                raise ScoutError(message, category=category) from exc

        return wrapper

    return decorator


def _strip_quotes(text: str) -> str:
    text = text.strip()
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return text.strip()


class CreativeAggregator:
    """Entry point for search, breakdowns, previews, video, locations, and speech.

    Args:
        backend: Gemini backend (or a stub with the same coroutines).
        video_backend_factory: Credential-refresh hook; returns the backend to
            use for each video job. Defaults to *backend*.
        resolver_factory: Builds the media resolver for a video backend.
        on_credential_reselect: Called when the video backend reports that the
            credential lacks video entitlement.
        config: Poll/voice settings (defaults to the live config).
    """

    def __init__(
        self,
        backend: Any,
        *,
        video_backend_factory: Callable[[], Any] | None = None,
        resolver_factory: Callable[[Any], MediaResolver] | None = None,
        on_credential_reselect: Callable[[], None] | None = None,
        config: ServerConfig | None = None,
    ) -> None:
        self._backend = backend
        self._config = config or get_config()
        self._video_backend_factory = video_backend_factory or (lambda: backend)
        self._resolver_factory = resolver_factory or (
            lambda b: resolver_for(self._config, getattr(b, "api_key", "") or self._config.gemini_api_key)
        )
        self._on_credential_reselect = on_credential_reselect

    # ── dispatch ─────────────────────────────────────────────────────────

    async def run(self, query: CreativeQuery) -> AggregateResult | SceneBreakdown | list[ScriptSegment]:
        """Route a query by mode: single shot, scene breakdown, or script breakdown."""
        if query.mode is SearchMode.SCENE:
            return await self.scene_breakdown(query.text)
        if query.mode is SearchMode.SCRIPT:
            return await self.script_breakdown(query.text)
        return await self.search(query.text, query.reference_image)

    # ── single-shot search ───────────────────────────────────────────────

    @user_facing(SEARCH_FAILED, ErrorCategory.SEARCH_FAILED)
    async def search(self, query: str, reference_image: ReferenceImage | None = None) -> AggregateResult:
        """Grounded search + structured analysis + variation thumbnails, merged.

        Only the grounded search is required; the analysis and each thumbnail
        degrade to absent on failure.
        """
        backend = self._backend
        search_request = build_search_request(query)
        analysis_request = build_analysis_request(query, reference_image)
        variation_requests = build_variation_requests(query)

        settled = await fan_out(
            required("grounded_search", lambda: backend.grounded_search(search_request)),
            degradable("structured_analysis", lambda: backend.generate_structured(analysis_request)),
            *(
                degradable(f"variation_{i}", functools.partial(backend.generate_image, req))
                for i, req in enumerate(variation_requests)
            ),
        )
        search_response, analysis, *images = settled
        thumbnails = [img.data_uri for img in images if img is not None]

        result = merge_aggregate(
            query=query,
            summary=search_response.text,
            chunks=search_response.chunks,
            analysis=analysis,
            thumbnails=thumbnails,
        )
        logger.info(
            "Search %r: %d source(s), %d clip(s), analysis=%s, %d thumbnail(s)",
            query, len(result.sources), len(result.found_clips), analysis is not None, len(thumbnails),
        )
        return result

    # ── breakdowns ───────────────────────────────────────────────────────

    @user_facing(SHOT_LIST_FAILED)
    async def scene_breakdown(self, description: str) -> SceneBreakdown:
        shots = await self._backend.generate_structured(build_shot_list_request(description))
        return SceneBreakdown(description=description, shots=list(shots or []))

    @user_facing(SCRIPT_FAILED)
    async def script_breakdown(self, script: str) -> list[ScriptSegment]:
        beats = await self._backend.generate_structured(build_script_request(script))
        return [
            ScriptSegment(
                narration=beat.narration,
                visual_prompt=beat.visual_prompt,
                estimated_duration=beat.estimated_duration,
            )
            for beat in beats or []
        ]

    # ── images ───────────────────────────────────────────────────────────

    @user_facing(PREVIEW_FAILED)
    async def generate_preview(
        self,
        description: str,
        focal_length: str | None = None,
        reference_image: ReferenceImage | None = None,
    ) -> GeneratedImage:
        image = await self._backend.generate_image(
            build_preview_request(description, focal_length, reference_image)
        )
        if image is None:
            raise ValueError("No image data returned from API")
        return image

    async def generate_variations(self, query: str) -> list[GeneratedImage]:
        """Four framings of *query*; failed framings are dropped."""
        backend = self._backend
        settled = await fan_out(
            *(
                degradable(f"variation_{i}", functools.partial(backend.generate_image, req))
                for i, req in enumerate(build_variation_requests(query))
            )
        )
        return [img for img in settled if img is not None]

    # ── video ────────────────────────────────────────────────────────────

    async def generate_video(
        self, description: str, cancel: asyncio.Event | None = None
    ) -> ResolvedMedia:
        """Submit a Veo job, poll it to completion, and fetch the clip.

        Raises:
            CredentialReselectRequired: The backend reported the key's project
                has no video entitlement.
            ScoutError: Any other failure.
        """
        request = build_video_request(description)
        backend = None
        try:
            backend = self._video_backend_factory()
            poller = VideoPoller(
                backend,
                self._resolver_factory(backend),
                interval=self._config.video_poll_interval,
                max_attempts=self._config.video_poll_max_attempts,
                timeout=self._config.video_poll_timeout,
            )
            return await poller.run(request, cancel)
        except Exception as exc:
            if needs_credential_reselect(exc):
                logger.warning("Video backend rejected the credential: %s", exc)
                if self._on_credential_reselect is not None:
                    self._on_credential_reselect()
                raise CredentialReselectRequired(RESELECT_CREDENTIAL) from exc
            logger.error("generate_video failed: %s", exc, exc_info=True)
            if isinstance(exc, VideoCancelledError):
                raise ScoutError(VIDEO_CANCELLED, category=ErrorCategory.VIDEO_FAILED) from exc
            category = ErrorCategory.VIDEO_TIMEOUT if isinstance(exc, VideoTimeoutError) else ErrorCategory.VIDEO_FAILED
            raise ScoutError(VIDEO_FAILED, category=category) from exc
        finally:
            if backend is not None and backend is not self._backend and hasattr(backend, "aclose"):
                await backend.aclose()

    # ── locations ────────────────────────────────────────────────────────

    @user_facing(LOCATIONS_FAILED)
    async def scout_locations(
        self, query: str, lat: float | None = None, lng: float | None = None
    ) -> list[MapLocation]:
        """Maps-grounded places matching the shot's vibe, deduplicated by URI."""
        response = await self._backend.grounded_search(build_location_request(query, lat, lng))
        return [
            MapLocation(title=c.title, uri=c.uri, sun_data=SunData())
            for c in extract_map_citations(response.chunks)
        ]

    # ── speech ───────────────────────────────────────────────────────────

    @user_facing(SPEECH_FAILED)
    async def synthesize_speech(self, text: str, voice: str | None = None) -> SpeechAudio:
        return await self._backend.synthesize_speech(
            build_speech_request(text, voice or self._config.tts_voice)
        )

    # ── text helpers ─────────────────────────────────────────────────────

    async def enhance_prompt(self, query: str) -> str:
        """Rewrite *query* as a DoP prompt; falls back to *query* on any failure."""
        try:
            text = await self._backend.generate_text(build_enhance_request(query))
        except Exception as exc:
            logger.warning("Prompt enhancement failed, keeping original query: %s", exc)
            return query
        return _strip_quotes(text) or query

    @user_facing(SCHEDULE_FAILED)
    async def production_schedule(self, shots: Sequence[AggregateResult]) -> str:
        """Markdown call sheet grouping *shots* by lighting setup."""
        text = await self._backend.generate_text(build_schedule_request(shots))
        return text or SCHEDULE_EMPTY
