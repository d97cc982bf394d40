"""Utility helpers shared by the mddoclet configuration loader."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from mddoclet._constants import EXTENSION_ALIASES, EXTENSION_NAMES

from .models import DocletConfigError


def _canonical_extension(name: str) -> str:
    """Return the canonical name for one extension spelling."""
    cleaned = name.strip().lower().replace("_", "-")
    cleaned = EXTENSION_ALIASES.get(cleaned, cleaned)
    if cleaned not in EXTENSION_NAMES:
        known = ", ".join(EXTENSION_NAMES)
        msg = f"Unknown Markdown extension '{name}'. Known extensions: {known}"
        raise DocletConfigError(msg)
    return cleaned


def parse_extensions(value: str | typ.Iterable[object] | None) -> frozenset[str] | None:
    """Parse a comma-separated string or a list of extension names.

    Returns ``None`` when ``value`` is ``None`` so callers can keep defaults;
    an empty string or list disables every extension.

    Examples
    --------
    >>> sorted(parse_extensions("TABLES, wikilinks"))
    ['tables', 'wiki-links']
    """
    if value is None:
        return None
    if isinstance(value, str):
        items = [segment for segment in value.split(",") if segment.strip()]
    else:
        items = [str(segment) for segment in value if str(segment).strip()]
    return frozenset(_canonical_extension(item) for item in items)


def parse_seconds(value: object, *, field: str) -> float:
    """Return ``value`` as a positive number of seconds."""
    if isinstance(value, bool):
        msg = f"'{field}' must be a number of seconds, got {value!r}"
        raise DocletConfigError(msg)
    try:
        seconds = float(str(value).strip())
    except (TypeError, ValueError) as exc:
        msg = f"'{field}' must be a number of seconds, got {value!r}"
        raise DocletConfigError(msg) from exc
    if seconds <= 0:
        msg = f"'{field}' must be positive, got {seconds:g}"
        raise DocletConfigError(msg)
    return seconds


def _optional_path(value: object | None, base_dir: Path) -> Path | None:
    """Return a path resolved against ``base_dir``, or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    path = Path(text).expanduser()
    return path if path.is_absolute() else base_dir / path


def _command(value: object) -> list[str]:
    """Normalize a command given as a string or a list of arguments."""
    if isinstance(value, str):
        parts = value.split()
    elif isinstance(value, list):
        parts = [str(part) for part in value]
    else:
        parts = []
    if not parts:
        msg = f"Diagram command must be a non-empty string or list, got {value!r}"
        raise DocletConfigError(msg)
    return parts


__all__ = [
    "_command",
    "_optional_path",
    "parse_extensions",
    "parse_seconds",
]
