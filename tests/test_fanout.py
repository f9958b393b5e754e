"""Tests for the fan-out executor and its degradation policy."""

from __future__ import annotations

import asyncio

import pytest

from broll_scout_mcp.fanout import degradable, fan_out, required


async def _value(v, delay=0.0):
    await asyncio.sleep(delay)
    return v


async def _boom(msg="boom", delay=0.0):
    await asyncio.sleep(delay)
    raise RuntimeError(msg)


class TestFanOut:
    async def test_results_follow_call_order_not_completion_order(self):
        results = await fan_out(
            required("slow", lambda: _value("a", 0.03)),
            degradable("fast", lambda: _value("b", 0.0)),
            degradable("mid", lambda: _value("c", 0.01)),
        )
        assert results == ["a", "b", "c"]

    async def test_calls_overlap(self):
        """GIVEN three calls that each wait on a shared barrier THEN all must be in flight together."""
        barrier = asyncio.Barrier(3)

        async def meet(v):
            await asyncio.wait_for(barrier.wait(), timeout=1)
            return v

        results = await fan_out(*(degradable(str(i), lambda i=i: meet(i)) for i in range(3)))
        assert results == [0, 1, 2]

    async def test_degradable_failure_becomes_none(self):
        results = await fan_out(
            required("search", lambda: _value("ok")),
            degradable("analysis", lambda: _boom()),
        )
        assert results == ["ok", None]

    async def test_required_failure_raises_after_siblings_settle(self):
        finished = []

        async def slow_sibling():
            await asyncio.sleep(0.02)
            finished.append("sibling")
            return "late"

        with pytest.raises(RuntimeError, match="search down"):
            await fan_out(
                required("search", lambda: _boom("search down")),
                degradable("thumb", slow_sibling),
            )
        assert finished == ["sibling"]

    async def test_first_required_failure_in_call_order_wins(self):
        with pytest.raises(RuntimeError, match="first"):
            await fan_out(
                required("a", lambda: _boom("first", 0.02)),
                required("b", lambda: _boom("second", 0.0)),
            )

    async def test_failure_logged(self, caplog):
        with caplog.at_level("WARNING", logger="broll_scout_mcp.fanout"):
            await fan_out(degradable("analysis", lambda: _boom("bad json")))
        assert "analysis" in caplog.text
        assert "bad json" in caplog.text

    async def test_empty_fan_out(self):
        assert await fan_out() == []
