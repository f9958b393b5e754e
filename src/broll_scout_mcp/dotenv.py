"""Auto-load environment variables from a shared config file.

Lets the server pick up ``GEMINI_API_KEY`` / ``VEO_API_KEY`` from
``~/.config/broll-scout-mcp/.env`` when the MCP host does not forward
them. At startup values already present in the process environment win;
``read_dotenv_value`` re-reads a single key (the Veo billing key) with the
file taking precedence.
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_ENV_PATH = Path.home() / ".config" / "broll-scout-mcp" / ".env"


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def _needs_value(key: str, current: str | None) -> bool:
    """Return True when *current* should be replaced from the file.

    Blank values and unresolved self-references such as ``${GEMINI_API_KEY}``
    (left behind by hosts that do not expand placeholders) count as unset.
    """
    if current is None:
        return True
    normalized = _strip_quotes(current.strip()).strip()
    if not normalized:
        return True
    if normalized in {f"${key}", f"${{{key}}}"}:
        return True
    return normalized.startswith(f"${{{key}:-") and normalized.endswith("}")


def parse_dotenv(path: Path) -> dict[str, str]:
    """Parse a ``.env`` file into a dict.

    Understands ``KEY=VALUE``, quoted values, an ``export`` prefix, blank
    lines and ``#`` comments. No variable expansion.
    """
    result: dict[str, str] = {}
    if not path.is_file():
        return result

    for raw_line in path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        line = line.removeprefix("export ")
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if key:
            result[key] = _strip_quotes(value.strip())
    return result


def load_dotenv(path: Path | None = None) -> dict[str, str]:
    """Copy vars from *path* into ``os.environ`` where they are unset.

    Returns:
        Dict of the vars that were actually injected.
    """
    parsed = parse_dotenv(path or DEFAULT_ENV_PATH)
    injected: dict[str, str] = {}
    for key, value in parsed.items():
        if _needs_value(key, os.environ.get(key)):
            os.environ[key] = value
            injected[key] = value
    return injected


def read_dotenv_value(key: str, path: Path | None = None) -> str:
    """Read *key* straight from the file, ignoring ``os.environ``.

    Video backends call this per job so that a ``VEO_API_KEY`` edited in
    the config file after a credential rejection takes effect without a
    restart. Here the file wins; an absent or placeholder value returns "".
    """
    value = parse_dotenv(path or DEFAULT_ENV_PATH).get(key, "")
    return "" if _needs_value(key, value) else value
