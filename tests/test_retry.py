"""Tests for retry logic with exponential backoff."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from broll_scout_mcp.config import ServerConfig
from broll_scout_mcp.retry import _is_retryable, with_retry


class TestIsRetryable:
    @pytest.mark.parametrize("msg", [
        "429 Too Many Requests",
        "Quota exceeded for this project",
        "RESOURCE_EXHAUSTED: rate limit",
        "Request timeout after 30s",
        "503 Service Temporarily Unavailable",
    ])
    def test_transient(self, msg: str):
        assert _is_retryable(Exception(msg)) is True

    @pytest.mark.parametrize("msg", [
        "400 Bad Request",
        "Permission denied",
        "Requested entity was not found.",
    ])
    def test_permanent(self, msg: str):
        assert _is_retryable(Exception(msg)) is False


@patch("broll_scout_mcp.retry.asyncio.sleep", new_callable=AsyncMock)
class TestWithRetry:
    async def test_success_first_attempt(self, mock_sleep):
        factory = AsyncMock(return_value="ok")
        assert await with_retry(factory) == "ok"
        factory.assert_awaited_once()
        mock_sleep.assert_not_awaited()

    async def test_recovers_after_quota_error(self, mock_sleep):
        factory = AsyncMock(side_effect=[Exception("429 rate limit"), "recovered"])
        assert await with_retry(factory) == "recovered"
        assert factory.await_count == 2
        mock_sleep.assert_awaited_once()

    async def test_exhausts_attempts(self, mock_sleep):
        factory = AsyncMock(side_effect=Exception("503 unavailable"))
        with pytest.raises(Exception, match="503"):
            await with_retry(factory)
        assert factory.await_count == 3
        assert mock_sleep.await_count == 2

    async def test_credential_error_is_not_retried(self, mock_sleep):
        factory = AsyncMock(side_effect=RuntimeError("Requested entity was not found."))
        with pytest.raises(RuntimeError):
            await with_retry(factory)
        factory.assert_awaited_once()

    @patch("broll_scout_mcp.retry.random.random", return_value=0.0)
    async def test_backoff_from_explicit_config(self, _mock_random, mock_sleep):
        """base=0.5 doubles per attempt and is capped at max_delay=1.5."""
        cfg = ServerConfig(retry_max_attempts=4, retry_base_delay=0.5, retry_max_delay=1.5)
        factory = AsyncMock(side_effect=[Exception("503")] * 3 + ["ok"])

        assert await with_retry(factory, config=cfg) == "ok"
        assert [c.args[0] for c in mock_sleep.await_args_list] == [0.5, 1.0, 1.5]

    async def test_single_attempt_config_disables_retry(self, mock_sleep, monkeypatch):
        monkeypatch.setenv("GEMINI_RETRY_MAX_ATTEMPTS", "1")
        factory = AsyncMock(side_effect=Exception("429"))
        with pytest.raises(Exception, match="429"):
            await with_retry(factory)
        mock_sleep.assert_not_awaited()

    async def test_label_in_retry_log(self, mock_sleep, caplog):
        factory = AsyncMock(side_effect=[Exception("429"), "ok"])
        with caplog.at_level("WARNING", logger="broll_scout_mcp.retry"):
            await with_retry(factory, label="veo submit")
        assert "veo submit: retry 1/3" in caplog.text
