"""Optional MLflow tracing for the B-roll tools.

Inert unless ``mlflow-tracing`` is installed and ``MLFLOW_TRACKING_URI`` is
configured. When active:

* ``mlflow.gemini.autolog()`` records each google-genai call (search,
  analysis, stills, Veo, TTS) as a ``CHAT_MODEL`` span.
* ``trace()`` opens one ``TOOL`` span per tool call, tagged with the server
  name and the capability the tool drives, so the fan-out of a single
  ``broll_search`` nests under one root.

Env vars (all optional):
    MLFLOW_TRACKING_URI: Where to store traces. Empty = tracing disabled.
    MLFLOW_EXPERIMENT_NAME: Experiment name (default ``broll-scout-mcp``).
    GEMINI_TRACING_ENABLED: Set to ``"false"`` to force-disable even with a URI.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

try:
    import mlflow
    import mlflow.gemini

    _HAS_MLFLOW = True
except ImportError:
    _HAS_MLFLOW = False

SERVER_NAME = "broll-scout-mcp"


def _active_config():
    """Return the config when tracing should run, else None."""
    if not _HAS_MLFLOW:
        return None
    from .config import get_config

    cfg = get_config()
    return cfg if cfg.tracing_enabled else None


def is_enabled() -> bool:
    return _active_config() is not None


def trace(
    func: Callable | None = None,
    *,
    name: str | None = None,
    span_type: str = "TOOL",
    capability: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Callable:
    """Wrap a tool in an MLflow span; identity when tracing is off.

    Usage::

        @trace(name="broll_video", capability="video")
        async def broll_video(...): ...
    """
    if not is_enabled():
        return func if func is not None else (lambda f: f)
    span_attributes: dict[str, Any] = {"server": SERVER_NAME}
    if capability:
        span_attributes["capability"] = capability
    span_attributes.update(attributes or {})
    return mlflow.trace(func, name=name, span_type=span_type, attributes=span_attributes)


def setup() -> None:
    """Point MLflow at the tracking server and turn on Gemini autologging.

    Failures are logged; tracing never blocks server start-up.
    """
    cfg = _active_config()
    if cfg is None:
        return
    try:
        mlflow.set_tracking_uri(cfg.mlflow_tracking_uri)
        mlflow.set_experiment(cfg.mlflow_experiment_name)
        mlflow.gemini.autolog()
    except Exception:
        logger.warning("MLflow tracing setup failed, continuing without tracing", exc_info=True)
        return
    logger.info(
        "Tracing %s tools to %s (experiment=%s)",
        SERVER_NAME, cfg.mlflow_tracking_uri, cfg.mlflow_experiment_name,
    )


def shutdown() -> None:
    """Flush spans still queued for async logging (called from the lifespan)."""
    if not is_enabled():
        return
    try:
        mlflow.flush_trace_async_logging()
    except Exception:
        logger.warning("MLflow trace flush failed", exc_info=True)
