"""Media locator resolution: authenticated fetch + local file reference.

Veo returns a download URI that is only fetchable with an API key. The
``MediaResolver`` implementations hide how the credential is attached, so the
poller never string-concatenates secrets itself. Fetched bodies are written
to the configured media directory and returned as ``ResolvedMedia``.
"""

from __future__ import annotations

import logging
import mimetypes
import uuid
import wave
from abc import ABC, abstractmethod
from pathlib import Path

import httpx

from .config import ServerConfig, get_config
from .models.media import ResolvedMedia, SpeechAudio

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = httpx.Timeout(120.0, connect=10.0)
# Bodies that mean the locator returned file metadata or an error page.
_NON_MEDIA_TYPES = {"application/json"}


def media_dir(config: ServerConfig | None = None) -> Path:
    """Return (creating if needed) the directory for generated media."""
    cfg = config or get_config()
    path = Path(cfg.media_dir).expanduser()
    path.mkdir(parents=True, exist_ok=True)
    return path


def _store(data: bytes, mime_type: str, directory: Path, stem: str) -> ResolvedMedia:
    ext = mimetypes.guess_extension(mime_type.split(";", 1)[0].strip()) or ".bin"
    path = directory / f"{stem}{ext}"
    path.write_bytes(data)
    return ResolvedMedia(
        path=str(path),
        uri=path.resolve().as_uri(),
        mime_type=mime_type,
        size_bytes=len(data),
    )


class MediaResolver(ABC):
    """Fetch a backend media locator and keep a local reference to it.

    Subclasses decide how the credential travels with the request. The
    locator's own query string (e.g. ``alt=media``) is always preserved.
    """

    def __init__(
        self,
        api_key: str,
        *,
        directory: Path | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._directory = directory
        self._transport = transport

    @abstractmethod
    def _authorize(self, url: httpx.URL) -> tuple[httpx.URL, dict[str, str]]:
        """Return the URL to fetch and the headers to send with it."""

    async def resolve(self, locator: str) -> ResolvedMedia:
        """Download *locator* and write it under the media directory.

        Raises:
            httpx.HTTPStatusError: If the download is rejected.
            ValueError: If the body is a JSON or text document, not media.
        """
        url, headers = self._authorize(httpx.URL(locator))
        async with httpx.AsyncClient(
            transport=self._transport, timeout=_DEFAULT_TIMEOUT, follow_redirects=True,
        ) as http:
            response = await http.get(url, headers=headers)
            response.raise_for_status()
        mime_type = response.headers.get("content-type", "video/mp4").split(";", 1)[0].strip()
        if mime_type in _NON_MEDIA_TYPES or mime_type.startswith("text/"):
            raise ValueError(f"Media download returned {mime_type}, not a media file")
        directory = self._directory or media_dir()
        media = _store(response.content, mime_type, directory, f"broll-{uuid.uuid4().hex[:12]}")
        logger.info("Resolved media to %s (%d bytes)", media.path, media.size_bytes)
        return media


class ApiKeyQueryResolver(MediaResolver):
    """Attach the key as a ``key`` query parameter (Veo download default)."""

    def _authorize(self, url: httpx.URL) -> tuple[httpx.URL, dict[str, str]]:
        return url.copy_merge_params({"key": self._api_key}), {}


class ApiKeyHeaderResolver(MediaResolver):
    """Attach the key as an ``x-goog-api-key`` header."""

    def _authorize(self, url: httpx.URL) -> tuple[httpx.URL, dict[str, str]]:
        return url, {"x-goog-api-key": self._api_key}


def resolver_for(config: ServerConfig, api_key: str) -> MediaResolver:
    """Pick the resolver named by ``config.media_auth``."""
    if config.media_auth == "header":
        return ApiKeyHeaderResolver(api_key)
    return ApiKeyQueryResolver(api_key)


def save_speech(audio: SpeechAudio, directory: Path | None = None) -> ResolvedMedia:
    """Wrap raw PCM in a WAV container and store it."""
    directory = directory or media_dir()
    path = directory / f"narration-{uuid.uuid4().hex[:12]}.wav"
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(audio.sample_rate)
        wav.writeframes(audio.data)
    return ResolvedMedia(
        path=str(path),
        uri=path.resolve().as_uri(),
        mime_type="audio/wav",
        size_bytes=path.stat().st_size,
    )
