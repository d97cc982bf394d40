r"""Normalise the textual variants of the ``@see`` tag into HTML anchors.

Javadoc knows three ``@see`` forms: a program element reference
(``@see Foo#bar()``), a ready-made anchor (``@see <a href="...">...</a>``),
and a quoted string originally meant for printed citations. The quoted form
may additionally carry one of several link shapes, all of which are rendered
as ``<a href="URL">LABEL</a>`` with the label falling back to the URL.

Example
-------
>>> from mddoclet.pipeline.references import rewrite_reference
>>> rewrite_reference('"Example <http://www.example.com/>"')
'<a href="http://www.example.com/">Example</a>'
>>> rewrite_reference("Foo#bar()")
'Foo#bar()'
"""

from __future__ import annotations

import dataclasses as dc
import enum
import re
from html import escape

from mddoclet.errors import MalformedReferenceTag

QUOTE = '"'

MARKDOWN_LINK_PATTERN = re.compile(r"^\[(?P<label>[^\]]*)\]\((?P<url>[^()\s]+)\)$")
ANGLE_URL_PATTERN = re.compile(r"^<(?P<url>[^<>\s]+)>$")
LABELLED_URL_PATTERN = re.compile(r"^(?P<label>.+?)\s*<(?P<url>[^<>\s]+)>$", re.DOTALL)
WIKI_LINK_PATTERN = re.compile(r"^\[\[(?P<url>[^\]\s]+)(?:\s+(?P<label>[^\]]+?))?\s*\]\]$")


class ReferenceForm(enum.StrEnum):
    """Shape recognised for one ``@see`` value."""

    HTML = "html"
    CLASSIC = "classic"
    MARKDOWN_LINK = "markdown-link"
    ANGLE_URL = "angle-url"
    LABELLED_URL = "labelled-url"
    WIKI_LINK = "wiki-link"
    CITATION = "citation"


@dc.dataclass(frozen=True, slots=True)
class ReferenceEntry:
    """Parsed ``@see`` value.

    Attributes
    ----------
    form : ReferenceForm
        Recognised variant.
    text : str
        Pass-through text for the classic, HTML and citation forms.
    url : str | None
        Link target for the quoted link forms.
    label : str | None
        Display label, already defaulted to the URL when absent.
    """

    form: ReferenceForm
    text: str
    url: str | None = None
    label: str | None = None

    def render(self) -> str:
        """Return the output markup for this entry."""
        if self.url is None:
            return self.text
        label = self.label or self.url
        return f'<a href="{escape(self.url, quote=True)}">{escape(label, quote=False)}</a>'


def _link(form: ReferenceForm, text: str, url: str, label: str | None) -> ReferenceEntry:
    cleaned = (label or "").strip()
    return ReferenceEntry(form=form, text=text, url=url, label=cleaned or url)


def _parse_quoted(raw: str, interior: str) -> ReferenceEntry:
    """Classify the interior of a quoted ``@see`` value; first match wins."""
    if match := MARKDOWN_LINK_PATTERN.match(interior):
        return _link(ReferenceForm.MARKDOWN_LINK, raw, match["url"], match["label"])
    if match := ANGLE_URL_PATTERN.match(interior):
        return _link(ReferenceForm.ANGLE_URL, raw, match["url"], None)
    if match := LABELLED_URL_PATTERN.match(interior):
        return _link(ReferenceForm.LABELLED_URL, raw, match["url"], match["label"])
    if match := WIKI_LINK_PATTERN.match(interior):
        return _link(ReferenceForm.WIKI_LINK, raw, match["url"], match["label"])
    if interior.startswith("[["):
        msg = f"Unparseable wiki link in @see value: {raw!r}"
        raise MalformedReferenceTag(msg)
    return ReferenceEntry(form=ReferenceForm.CITATION, text=interior)


def parse_reference(raw: str) -> ReferenceEntry:
    """Parse one ``@see`` value into a :class:`ReferenceEntry`.

    Parameters
    ----------
    raw : str
        Text of the ``@see`` tag, without the tag name.

    Returns
    -------
    ReferenceEntry
        The recognised form together with its URL and label.

    Raises
    ------
    MalformedReferenceTag
        If a quoted value is not terminated, or opens a wiki link that does
        not match any supported shape.
    """
    stripped = raw.strip()
    if stripped.startswith("<"):
        return ReferenceEntry(form=ReferenceForm.HTML, text=raw)
    if not stripped.startswith(QUOTE):
        return ReferenceEntry(form=ReferenceForm.CLASSIC, text=raw)
    if len(stripped) < 2 or not stripped.endswith(QUOTE):  # noqa: PLR2004
        msg = f"Unterminated quoted @see value: {raw!r}"
        raise MalformedReferenceTag(msg)
    return _parse_quoted(raw, stripped[1:-1].strip())


def rewrite_reference(raw: str) -> str:
    """Return the output markup for the ``@see`` value ``raw``."""
    return parse_reference(raw).render()


__all__ = [
    "ReferenceEntry",
    "ReferenceForm",
    "parse_reference",
    "rewrite_reference",
]
