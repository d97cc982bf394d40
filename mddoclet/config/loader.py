"""Load doclet configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from mddoclet._constants import (
    DEFAULT_DIAGRAM_TIMEOUT,
    DEFAULT_PARSE_TIMEOUT,
    DEFAULT_TODO_TITLE,
)

from .helpers import _command, _optional_path, parse_extensions, parse_seconds
from .models import DiagramConfig, DocletConfig, DocletConfigError, HighlightConfig


def load_doclet_config(path: Path) -> DocletConfig:
    """Load the YAML file describing Markdown, highlighting, and diagram options.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration (for example,
        ``mddoclet.yaml``). Relative paths inside it are resolved against the
        file's directory.

    Returns
    -------
    DocletConfig
        Parsed configuration with defaults applied for missing keys.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    DocletConfigError
        If the top-level structure is not a mapping or a value is invalid.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from mddoclet.config import load_doclet_config
    >>> config = load_doclet_config(Path("mddoclet.yaml"))  # doctest: +SKIP
    >>> config.parse_timeout  # doctest: +SKIP
    2.0
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise DocletConfigError(msg)
    return build_doclet_config(loaded, base_dir=path.parent)


def build_doclet_config(
    raw: typ.Mapping[str, typ.Any], *, base_dir: Path | None = None
) -> DocletConfig:
    """Build a :class:`DocletConfig` from an already parsed mapping."""
    base = base_dir or Path.cwd()
    extensions = parse_extensions(raw.get("extensions"))
    parse_timeout = parse_seconds(
        raw.get("parse_timeout", DEFAULT_PARSE_TIMEOUT), field="parse_timeout"
    )
    workers = raw.get("workers", 1)
    if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
        msg = f"'workers' must be a positive integer, got {workers!r}"
        raise DocletConfigError(msg)
    todo_title = raw.get("todo_title", DEFAULT_TODO_TITLE)
    if not isinstance(todo_title, str):
        msg = f"'todo_title' must be a string, got {todo_title!r}"
        raise DocletConfigError(msg)

    config = DocletConfig(
        parse_timeout=parse_timeout,
        overview_path=_optional_path(raw.get("overview"), base),
        diagrams=_build_diagram_config(_section(raw, "plantuml"), base),
        highlight=_build_highlight_config(_section(raw, "highlight"), base),
        workers=workers,
        todo_title=todo_title,
    )
    if extensions is not None:
        config.extensions = extensions
    return config


def _section(raw: typ.Mapping[str, typ.Any], key: str) -> typ.Mapping[str, typ.Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        msg = f"'{key}' must be a mapping."
        raise DocletConfigError(msg)
    return value


def _build_diagram_config(
    payload: typ.Mapping[str, typ.Any], base_dir: Path
) -> DiagramConfig:
    """Build a DiagramConfig from the ``plantuml`` section."""
    defaults = DiagramConfig()
    image_dir = _optional_path(payload.get("image_dir"), base_dir)
    image_format = str(payload.get("format", defaults.image_format)).lower()
    if image_format not in ("png", "svg"):
        msg = f"Unsupported diagram format '{image_format}'; use png or svg."
        raise DocletConfigError(msg)
    command = payload.get("command")
    return DiagramConfig(
        preamble_path=_optional_path(payload.get("config"), base_dir),
        command=_command(command) if command is not None else defaults.command,
        timeout=parse_seconds(
            payload.get("timeout", DEFAULT_DIAGRAM_TIMEOUT), field="plantuml.timeout"
        ),
        image_dir=image_dir or defaults.image_dir,
        image_url_prefix=str(
            payload.get("image_url_prefix", defaults.image_url_prefix)
        ),
        image_format=image_format,
    )


def _build_highlight_config(
    payload: typ.Mapping[str, typ.Any], base_dir: Path
) -> HighlightConfig:
    """Build a HighlightConfig from the ``highlight`` section."""
    base = HighlightConfig()
    return HighlightConfig(
        style=str(payload.get("style", base.style)),
        enabled=bool(payload.get("enabled", base.enabled)),
        auto=bool(payload.get("auto", base.auto)),
        stylesheet_path=_optional_path(payload.get("stylesheet"), base_dir),
    )


__all__ = ["build_doclet_config", "load_doclet_config"]
