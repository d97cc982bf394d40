"""Python-Markdown extensions for bare URLs and wiki links.

Python-Markdown only links URLs written in angle brackets. Doc comments also
rely on two shorthand link syntaxes, provided here as regular Markdown
extensions:

* :class:`AutolinkExtension` turns bare ``http://``, ``https://``,
  ``ftp://`` and ``www.`` URLs into anchors.
* :class:`WikiLinkExtension` renders ``[[url]]`` and ``[[url label]]`` as
  anchors, matching the quoted ``@see`` wiki form.
"""

from __future__ import annotations

import typing as typ
import xml.etree.ElementTree as etree

from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor

if typ.TYPE_CHECKING:
    import re

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any

# A bare URL only starts after whitespace, an opening parenthesis, or at the
# start of a text run; text following a stashed raw HTML tag is skipped.
AUTOLINK_RE = (
    r"(?<![^\s(])(?P<url>(?:(?:https?|ftp)://|www\.)"
    r"[^\s<>\"'`]*[^\s<>\"'`.,;:!?)\]])"
)
WIKI_LINK_RE = r"\[\[(?P<url>[^\]\s]+)(?:\s+(?P<label>[^\]]+?))?\s*\]\]"


def _anchor(href: str, label: str) -> etree.Element:
    element = etree.Element("a")
    element.set("href", href)
    element.text = label
    return element


class AutolinkInlineProcessor(InlineProcessor):
    """Link bare URLs found in paragraph text."""

    ANCESTOR_EXCLUDES = ("a",)

    def handleMatch(  # type: ignore[override]  # noqa: N802
        self, m: re.Match[str], data: str
    ) -> tuple[etree.Element, int, int]:
        """Return an anchor for the matched URL."""
        url = m.group("url")
        href = f"http://{url}" if url.startswith("www.") else url
        return _anchor(href, url), m.start(0), m.end(0)


class WikiLinkInlineProcessor(InlineProcessor):
    """Render ``[[url label]]`` as an anchor labelled with ``label`` or ``url``."""

    ANCESTOR_EXCLUDES = ("a",)

    def handleMatch(  # type: ignore[override]  # noqa: N802
        self, m: re.Match[str], data: str
    ) -> tuple[etree.Element, int, int]:
        """Return an anchor for the matched wiki link."""
        url = m.group("url")
        label = (m.group("label") or "").strip() or url
        return _anchor(url, label), m.start(0), m.end(0)


class AutolinkExtension(Extension):
    """Register :class:`AutolinkInlineProcessor` after raw HTML handling."""

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the bare-URL processor on the Markdown instance."""
        processor = AutolinkInlineProcessor(AUTOLINK_RE, md)
        md.inlinePatterns.register(processor, "mddoclet_autolink", 85)


class WikiLinkExtension(Extension):
    """Register :class:`WikiLinkInlineProcessor` ahead of reference links."""

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the wiki-link processor on the Markdown instance."""
        processor = WikiLinkInlineProcessor(WIKI_LINK_RE, md)
        md.inlinePatterns.register(processor, "mddoclet_wikilink", 175)


__all__ = [
    "AutolinkExtension",
    "AutolinkInlineProcessor",
    "WikiLinkExtension",
    "WikiLinkInlineProcessor",
]
