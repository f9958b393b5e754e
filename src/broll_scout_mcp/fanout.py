"""Fan-Out Executor: concurrent independent calls joined on a barrier.

Each ``SubCall`` is awaited concurrently; ``fan_out`` returns only after every
call has settled, with results in call order. Failures are isolated: a
raising call never cancels its siblings. Once all calls have settled the
degradation policy applies:

- degradable failure → logged, slot becomes ``None``
- non-degradable failure → re-raised (first one in call order)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubCall:
    """One independent backend call inside a fan-out."""

    label: str
    factory: Callable[[], Awaitable[Any]]
    degradable: bool = True


def degradable(label: str, factory: Callable[[], Awaitable[Any]]) -> SubCall:
    return SubCall(label=label, factory=factory, degradable=True)


def required(label: str, factory: Callable[[], Awaitable[Any]]) -> SubCall:
    return SubCall(label=label, factory=factory, degradable=False)


async def _settle(call: SubCall) -> Any:
    return await call.factory()


async def fan_out(*calls: SubCall) -> list[Any]:
    """Run *calls* concurrently and apply the degradation policy.

    Returns:
        One entry per call, in order; ``None`` for degraded failures.

    Raises:
        The first non-degradable call's exception, after all calls settle.
    """
    settled = await asyncio.gather(*(_settle(c) for c in calls), return_exceptions=True)

    results: list[Any] = []
    fatal: BaseException | None = None
    for call, outcome in zip(calls, settled):
        if not isinstance(outcome, BaseException):
            results.append(outcome)
            continue
        if call.degradable:
            logger.warning("Sub-call %s failed, omitting its contribution: %s", call.label, outcome)
            results.append(None)
            continue
        logger.error("Sub-call %s failed: %s", call.label, outcome)
        if fatal is None:
            fatal = outcome
        results.append(None)

    if fatal is not None:
        raise fatal
    return results
