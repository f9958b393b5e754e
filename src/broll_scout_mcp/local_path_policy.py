"""Local file access for reference images, bounded by LOCAL_FILE_ACCESS_ROOT."""

from __future__ import annotations

import mimetypes
from pathlib import Path

from .config import get_config
from .models.creative import ReferenceImage


def resolve_path(path_value: str) -> Path:
    """Resolve a user-supplied path to an absolute filesystem path."""
    return Path(path_value).expanduser().resolve()


def enforce_local_access_root(path: Path) -> Path:
    """Enforce LOCAL_FILE_ACCESS_ROOT boundary when configured.

    Raises:
        PermissionError: If the path falls outside the configured access root.
    """
    cfg = get_config()
    if not cfg.local_file_access_root:
        return path

    root = Path(cfg.local_file_access_root).expanduser().resolve()
    if not path.is_relative_to(root):
        raise PermissionError(
            f"Path '{path}' is outside LOCAL_FILE_ACCESS_ROOT '{root}'"
        )
    return path


def load_reference_image(value: str) -> ReferenceImage:
    """Build a ReferenceImage from a ``data:`` URI or a local image path.

    Raises:
        FileNotFoundError: If the path does not exist.
        PermissionError: If the path is outside the access root.
        ValueError: If the data URI or image type is not supported.
    """
    if value.startswith("data:"):
        return ReferenceImage.from_data_uri(value)

    path = enforce_local_access_root(resolve_path(value))
    if not path.is_file():
        raise FileNotFoundError(f"Reference image not found: {path}")
    mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return ReferenceImage(data=path.read_bytes(), mime_type=mime_type)
