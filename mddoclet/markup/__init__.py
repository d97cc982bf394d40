"""Markdown to HTML conversion and the link extensions it registers."""

from .converter import MarkupConverter, scan_fences
from .extensions import AutolinkExtension, WikiLinkExtension

__all__ = [
    "AutolinkExtension",
    "MarkupConverter",
    "WikiLinkExtension",
    "scan_fences",
]
