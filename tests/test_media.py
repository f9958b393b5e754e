"""Tests for media locator resolution and speech file output."""

from __future__ import annotations

import wave

import httpx
import pytest

from broll_scout_mcp.config import ServerConfig
from broll_scout_mcp.media import (
    ApiKeyHeaderResolver,
    ApiKeyQueryResolver,
    MediaResolver,
    media_dir,
    resolver_for,
    save_speech,
)
from broll_scout_mcp.models.media import SpeechAudio

LOCATOR = "https://generativelanguage.test/v1beta/files/abc:download?alt=media"


def recording_transport(
    seen: list[httpx.Request], status: int = 200, content_type: str = "video/mp4",
) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status, content=b"\x00\x00\x00\x18ftypmp42", headers={"content-type": content_type})

    return httpx.MockTransport(handler)


class TestResolvers:
    async def test_query_resolver_appends_key(self, tmp_path):
        seen: list[httpx.Request] = []
        resolver = ApiKeyQueryResolver("secret", directory=tmp_path, transport=recording_transport(seen))

        media = await resolver.resolve(LOCATOR)

        assert seen[0].url.params["key"] == "secret"
        assert seen[0].url.params["alt"] == "media"
        assert "x-goog-api-key" not in seen[0].headers
        assert media.mime_type == "video/mp4"
        assert media.path.endswith(".mp4")
        assert media.uri.startswith("file://")
        assert (tmp_path / media.path.rsplit("/", 1)[-1]).read_bytes().endswith(b"ftypmp42")

    async def test_header_resolver_keeps_key_out_of_url(self, tmp_path):
        seen: list[httpx.Request] = []
        resolver = ApiKeyHeaderResolver("secret", directory=tmp_path, transport=recording_transport(seen))

        await resolver.resolve(LOCATOR)

        assert seen[0].headers["x-goog-api-key"] == "secret"
        assert "secret" not in str(seen[0].url)

    async def test_rejected_download_raises(self, tmp_path):
        resolver = ApiKeyQueryResolver("bad", directory=tmp_path, transport=recording_transport([], status=403))
        with pytest.raises(httpx.HTTPStatusError):
            await resolver.resolve(LOCATOR)
        assert list(tmp_path.iterdir()) == []

    async def test_query_resolver_on_bare_locator(self, tmp_path):
        seen: list[httpx.Request] = []
        resolver = ApiKeyQueryResolver("secret", directory=tmp_path, transport=recording_transport(seen))

        await resolver.resolve("https://generativelanguage.test/v1beta/files/abc")

        assert dict(seen[0].url.params) == {"key": "secret"}

    @pytest.mark.parametrize("content_type", ["application/json; charset=UTF-8", "text/html"])
    async def test_metadata_body_is_not_saved(self, tmp_path, content_type):
        transport = recording_transport([], content_type=content_type)
        resolver = ApiKeyQueryResolver("secret", directory=tmp_path, transport=transport)

        with pytest.raises(ValueError, match="not a media file"):
            await resolver.resolve(LOCATOR)
        assert list(tmp_path.iterdir()) == []

    def test_base_resolver_is_abstract(self):
        with pytest.raises(TypeError):
            MediaResolver("k")

    def test_resolver_for_picks_mode(self):
        assert isinstance(resolver_for(ServerConfig(media_auth="header"), "k"), ApiKeyHeaderResolver)
        assert isinstance(resolver_for(ServerConfig(), "k"), ApiKeyQueryResolver)


class TestMediaDir:
    def test_created_from_env(self, tmp_path):
        path = media_dir()
        assert path == tmp_path / "media"
        assert path.is_dir()


class TestSaveSpeech:
    def test_wav_container(self, tmp_path):
        pcm = b"\x01\x00" * 480
        media = save_speech(SpeechAudio(data=pcm), tmp_path)

        assert media.mime_type == "audio/wav"
        with wave.open(media.path, "rb") as wav:
            assert wav.getnchannels() == 1
            assert wav.getsampwidth() == 2
            assert wav.getframerate() == 24000
            assert wav.readframes(wav.getnframes()) == pcm
        assert media.size_bytes > len(pcm)
