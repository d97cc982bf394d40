"""Load and validate mddoclet configuration.

This subpackage parses an optional ``mddoclet.yaml`` file into the typed
dataclasses consumed by :class:`~mddoclet.pipeline.CommentProcessor`: the
Markdown extension set, the conversion timeout, the overview page, syntax
highlighting switches, and PlantUML settings. Command line options are
applied on top of the loaded values by :mod:`mddoclet.cli`.

Examples
--------
>>> from mddoclet.config import build_doclet_config
>>> config = build_doclet_config({"extensions": "tables,smartypants", "parse_timeout": 2.5})
>>> sorted(config.extensions)
['smartypants', 'tables']
>>> config.parse_timeout
2.5
"""

from .helpers import parse_extensions, parse_seconds
from .loader import build_doclet_config, load_doclet_config
from .models import (
    DiagramConfig,
    DocletConfig,
    DocletConfigError,
    HighlightConfig,
    TagHandler,
)

__all__ = [
    "DiagramConfig",
    "DocletConfig",
    "DocletConfigError",
    "HighlightConfig",
    "TagHandler",
    "build_doclet_config",
    "load_doclet_config",
    "parse_extensions",
    "parse_seconds",
]
