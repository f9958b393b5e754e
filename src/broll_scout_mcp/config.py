"""Server configuration via environment variables."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator

VALID_MEDIA_AUTH = {"query", "header"}

MODEL_PRESETS: dict[str, dict[str, str]] = {
    "fast": {
        "text_model": "gemini-2.5-flash",
        "video_model": "veo-3.1-fast-generate-preview",
        "label": "Fast previews — Veo 3.1 Fast (lower cost, quicker turnaround)",
    },
    "quality": {
        "text_model": "gemini-2.5-pro",
        "video_model": "veo-3.1-generate-preview",
        "label": "Max quality — 2.5 Pro analysis + Veo 3.1 (slower, higher spend)",
    },
}


def _resolve_tracing_enabled(flag_value: str, tracking_uri: str) -> bool:
    """Derive tracing_enabled from env vars.

    - ``GEMINI_TRACING_ENABLED=false`` → always disabled (explicit opt-out).
    - Otherwise enabled when ``MLFLOW_TRACKING_URI`` is non-empty.
    """
    if flag_value.lower() == "false":
        return False
    return bool(tracking_uri)


class ServerConfig(BaseModel):
    """Runtime configuration resolved from environment."""

    gemini_api_key: str = Field(default="")
    video_api_key: str = Field(default="")
    text_model: str = Field(default="gemini-2.5-flash")
    image_model: str = Field(default="gemini-2.5-flash-image")
    video_model: str = Field(default="veo-3.1-fast-generate-preview")
    tts_model: str = Field(default="gemini-2.5-flash-preview-tts")
    tts_voice: str = Field(default="Kore")
    media_dir: str = Field(default="")
    media_auth: str = Field(default="query")
    video_poll_interval: float = Field(default=5.0)
    video_poll_max_attempts: int = Field(default=120)
    video_poll_timeout: float = Field(default=0.0)
    retry_max_attempts: int = Field(default=3)
    retry_base_delay: float = Field(default=1.0)
    retry_max_delay: float = Field(default=60.0)
    local_file_access_root: str = Field(default="")
    tracing_enabled: bool = Field(default=False)
    mlflow_tracking_uri: str = Field(default="")
    mlflow_experiment_name: str = Field(default="broll-scout-mcp")

    @field_validator("media_auth")
    @classmethod
    def validate_media_auth(cls, value: str) -> str:
        mode = value.strip().lower()
        if mode not in VALID_MEDIA_AUTH:
            allowed = ", ".join(sorted(VALID_MEDIA_AUTH))
            raise ValueError(f"Invalid media auth mode '{value}'. Allowed: {allowed}")
        return mode

    @field_validator("retry_max_attempts", "video_poll_max_attempts")
    @classmethod
    def validate_attempts(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Attempt counts must be >= 1")
        return value

    @field_validator("retry_base_delay", "retry_max_delay", "video_poll_interval")
    @classmethod
    def validate_delays(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Delays and intervals must be > 0")
        return value

    @field_validator("video_poll_timeout")
    @classmethod
    def validate_poll_timeout(cls, value: float) -> float:
        if value < 0:
            raise ValueError("video_poll_timeout must be >= 0 (0 disables it)")
        return value

    @property
    def resolved_video_api_key(self) -> str:
        """Key used for Veo calls: the dedicated billing key when configured."""
        return self.video_api_key or self.gemini_api_key

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Build config from environment variables."""
        from pathlib import Path

        media_default = str(Path.home() / ".cache" / "broll-scout-mcp" / "media")
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            video_api_key=os.getenv("VEO_API_KEY", ""),
            text_model=os.getenv("BROLL_TEXT_MODEL", "gemini-2.5-flash"),
            image_model=os.getenv("BROLL_IMAGE_MODEL", "gemini-2.5-flash-image"),
            video_model=os.getenv("BROLL_VIDEO_MODEL", "veo-3.1-fast-generate-preview"),
            tts_model=os.getenv("BROLL_TTS_MODEL", "gemini-2.5-flash-preview-tts"),
            tts_voice=os.getenv("BROLL_TTS_VOICE", "Kore"),
            media_dir=os.getenv("BROLL_MEDIA_DIR", media_default),
            media_auth=os.getenv("BROLL_MEDIA_AUTH", "query"),
            video_poll_interval=float(os.getenv("BROLL_VIDEO_POLL_INTERVAL", "5.0")),
            video_poll_max_attempts=int(os.getenv("BROLL_VIDEO_POLL_MAX_ATTEMPTS", "120")),
            video_poll_timeout=float(os.getenv("BROLL_VIDEO_POLL_TIMEOUT", "0")),
            retry_max_attempts=int(os.getenv("GEMINI_RETRY_MAX_ATTEMPTS", "3")),
            retry_base_delay=float(os.getenv("GEMINI_RETRY_BASE_DELAY", "1.0")),
            retry_max_delay=float(os.getenv("GEMINI_RETRY_MAX_DELAY", "60.0")),
            local_file_access_root=os.getenv("LOCAL_FILE_ACCESS_ROOT", ""),
            tracing_enabled=_resolve_tracing_enabled(
                os.getenv("GEMINI_TRACING_ENABLED", ""),
                os.getenv("MLFLOW_TRACKING_URI", ""),
            ),
            mlflow_tracking_uri=os.getenv("MLFLOW_TRACKING_URI", ""),
            mlflow_experiment_name=os.getenv("MLFLOW_EXPERIMENT_NAME", "broll-scout-mcp"),
        )


# Singleton — initialised lazily on first access.
_config: ServerConfig | None = None


def get_config() -> ServerConfig:
    """Return the global config singleton, creating it on first access.

    Loads ``~/.config/broll-scout-mcp/.env`` before reading env vars.
    Process environment always takes precedence over the config file.
    """
    global _config
    if _config is None:
        import logging

        from .dotenv import load_dotenv

        injected = load_dotenv()
        if injected:
            logger = logging.getLogger(__name__)
            logger.info(
                "Loaded %d var(s) from config: %s",
                len(injected),
                ", ".join(injected.keys()),
            )
        _config = ServerConfig.from_env()
    return _config


def update_config(**overrides: object) -> ServerConfig:
    """Patch the live config (used by ``infra_configure`` tool)."""
    global _config
    cfg = get_config()
    data = cfg.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    _config = ServerConfig(**data)
    return _config
