"""Typed dataclasses describing mddoclet configuration."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

from mddoclet._constants import (
    DEFAULT_DIAGRAM_TIMEOUT,
    DEFAULT_EXTENSIONS,
    DEFAULT_HIGHLIGHT_STYLE,
    DEFAULT_IMAGE_DIR,
    DEFAULT_PARSE_TIMEOUT,
    DEFAULT_TODO_TITLE,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

TagHandler = typ.Callable[[str], str]


class DocletConfigError(ValueError):
    """Raised when the doclet configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class DiagramConfig:
    """Settings for the PlantUML diagram tags."""

    preamble_path: Path | None = None
    command: list[str] = dc.field(default_factory=lambda: ["plantuml"])
    timeout: float = DEFAULT_DIAGRAM_TIMEOUT
    image_dir: Path = Path(DEFAULT_IMAGE_DIR)
    image_url_prefix: str = f"{DEFAULT_IMAGE_DIR}/"
    image_format: str = "png"


@dc.dataclass(slots=True)
class HighlightConfig:
    """Syntax highlighting switches for fenced code blocks."""

    style: str = DEFAULT_HIGHLIGHT_STYLE
    enabled: bool = True
    auto: bool = False
    stylesheet_path: Path | None = None


@dc.dataclass(slots=True)
class DocletConfig:
    """A fully resolved configuration consumed by the comment processor.

    Attributes
    ----------
    extensions : frozenset[str]
        Canonical Markdown extension names to enable.
    parse_timeout : float
        Seconds allowed for one Markdown conversion.
    overview_path : Path | None
        Optional overview page rendered without leading-space stripping.
    diagrams : DiagramConfig
        PlantUML settings.
    highlight : HighlightConfig
        Pygments settings.
    workers : int
        Number of units processed concurrently.
    todo_title : str
        Heading of the box rendered for each ``@todo`` tag.
    tag_handlers : Mapping[str, TagHandler]
        Custom block tag handlers keyed by tag name; only settable from code.
    """

    extensions: frozenset[str] = DEFAULT_EXTENSIONS
    parse_timeout: float = DEFAULT_PARSE_TIMEOUT
    overview_path: Path | None = None
    diagrams: DiagramConfig = dc.field(default_factory=DiagramConfig)
    highlight: HighlightConfig = dc.field(default_factory=HighlightConfig)
    workers: int = 1
    todo_title: str = DEFAULT_TODO_TITLE
    tag_handlers: cabc.Mapping[str, TagHandler] = dc.field(default_factory=dict)


__all__ = [
    "DiagramConfig",
    "DocletConfig",
    "DocletConfigError",
    "HighlightConfig",
    "TagHandler",
]
