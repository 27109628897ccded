"""Shared helpers for the text scanners."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..logging import get_logger

_LOGGER = get_logger("scanners")


def read_text(path: Path) -> Optional[str]:
    """Return the file contents, or None when the file cannot be read as UTF-8 text."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _LOGGER.debug("Skipping unreadable file %s: %s", path, exc)
        return None


__all__ = ["read_text"]
