"""Markdown preprocessor for documentation comments.

This package rewrites the comments of a documentation tree from Markdown into
HTML before a downstream generator assembles the final documentation. Inline
tags survive the conversion untouched, ``@see`` values gain Markdown-style
link forms, and ``@uml`` tags are rendered to diagrams with PlantUML.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``CommentProcessor``: the comment rewriting pipeline.

Examples
--------
>>> from mddoclet import app
>>> app(["process", "tree.yaml", "--output", "processed.yaml"])  # doctest: +SKIP
wrote processed.yaml
"""

from __future__ import annotations

from .cli import app, main
from .pipeline import CommentProcessor

__all__ = ["CommentProcessor", "app", "main"]
