"""Generated-media models: images, speech, video operations, resolved files."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel


class GeneratedImage(BaseModel):
    """Inline image returned by the image model."""

    data: bytes
    mime_type: str = "image/png"

    @property
    def data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


class SpeechAudio(BaseModel):
    """Raw PCM returned by the TTS model (16-bit little-endian mono)."""

    data: bytes
    mime_type: str = "audio/L16;rate=24000"
    sample_rate: int = 24000


@dataclass
class VideoOperation:
    """Snapshot of a Veo job.

    ``handle`` is the SDK's own operation object and is passed back verbatim
    on every status check.
    """

    handle: Any
    done: bool = False
    error: str | None = None
    media_uri: str | None = None


class ResolvedMedia(BaseModel):
    """A fetched media file written to the local media directory."""

    path: str
    uri: str
    mime_type: str
    size_bytes: int
