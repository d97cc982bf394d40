"""Convert comment Markdown into HTML with a bounded running time.

:class:`MarkupConverter` wraps Python-Markdown. The enabled extension names
select which constructs are translated; anything left disabled stays plain
text. Fenced code blocks are highlighted by Pygments through ``codehilite``
and tagged with their language.

Every conversion runs on a daemon thread and is abandoned with
:class:`~mddoclet.errors.ConversionTimeout` once the configured timeout
expires. Python threads cannot be killed, so an abandoned conversion keeps
running in the background until it finishes or the interpreter exits; as a
daemon it never delays that exit.
"""

from __future__ import annotations

import concurrent.futures as cf
import dataclasses as dc
import itertools
import re
import threading
import typing as typ
from html import escape

from markdown import Markdown
from pygments.formatters.html import HtmlFormatter

from mddoclet._constants import (
    CODEHILITE_CSS_CLASS,
    DEFAULT_EXTENSIONS,
    DEFAULT_HIGHLIGHT_STYLE,
    DEFAULT_PARSE_TIMEOUT,
)
from mddoclet.errors import ConversionTimeout
from mddoclet.markup.extensions import AutolinkExtension, WikiLinkExtension

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from markdown.extensions import Extension
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

# A fence line: up to three spaces, a run of backticks or tildes, then the
# info string.
FENCE_LINE_PATTERN = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")
FENCE_LANGUAGE_PATTERN = re.compile(r"\s*\{?\s*\.?([A-Za-z0-9_+#-][A-Za-z0-9_+#.-]*)")
HIGHLIGHT_OPEN_TAG = f'<div class="{CODEHILITE_CSS_CLASS}">'

# Extension name -> Python-Markdown extensions it enables.
SIMPLE_EXTENSIONS: dict[str, tuple[str, ...]] = {
    "definition-lists": ("def_list",),
    "smartypants": ("smarty",),
    "tables": ("tables",),
    "fenced-code-blocks": ("fenced_code", "codehilite"),
}

_thread_ids = itertools.count(1)


@dc.dataclass(slots=True)
class FencedSource:
    """Markdown with normalized fence lines and the languages they declare.

    ``languages`` lists one entry per closed fenced block, in document order,
    with ``"text"`` for blocks that name no language.
    """

    text: str
    languages: list[str] = dc.field(default_factory=list)


def scan_fences(text: str) -> FencedSource:
    """Normalize fence lines so ``fenced_code`` recognizes them.

    Fence lines lose their indentation, and opening fences drop anything
    after a comma in the info string (``python,linenums`` becomes
    ``python``). Lines inside a block are never touched, so a shorter or
    different fence inside code stays code.

    Examples
    --------
    >>> source = scan_fences("  ~~~java,numbered\\nint x;\\n  ~~~\\n")
    >>> source.text
    '~~~java\\nint x;\\n~~~\\n'
    >>> source.languages
    ['java']
    """
    lines: list[str] = []
    languages: list[str] = []
    opener: str | None = None
    pending = "text"
    for line in text.splitlines(keepends=True):
        content = line.rstrip("\r\n")
        ending = line[len(content) :]
        match = FENCE_LINE_PATTERN.match(content)
        if match is None:
            lines.append(line)
            continue
        fence, info = match.groups()
        if opener is None:
            label = info.split(",", 1)[0].rstrip()
            language = FENCE_LANGUAGE_PATTERN.match(label)
            pending = language.group(1) if language else "text"
            opener = fence
            lines.append(f"{fence}{label}{ending}")
        elif fence[0] == opener[0] and len(fence) >= len(opener) and not info.strip():
            languages.append(pending)
            opener = None
            lines.append(f"{fence}{ending}")
        else:
            lines.append(line)
    return FencedSource("".join(lines), languages)


def label_highlighted_blocks(html: str, languages: cabc.Sequence[str]) -> str:
    """Add a ``data-language`` attribute to each highlighted block in order."""
    if not languages:
        return html
    remaining = iter(languages)
    pieces = html.split(HIGHLIGHT_OPEN_TAG)
    labelled = [pieces[0]]
    for piece in pieces[1:]:
        language = escape(next(remaining, "text"), quote=True)
        labelled.append(
            f'<div class="{CODEHILITE_CSS_CLASS}" data-language="{language}">{piece}'
        )
    return "".join(labelled)


class MarkupConverter:
    """Render Markdown into HTML using a configurable set of extensions."""

    def __init__(
        self,
        extensions: cabc.Iterable[str] = DEFAULT_EXTENSIONS,
        *,
        timeout: float = DEFAULT_PARSE_TIMEOUT,
        highlight_style: str = DEFAULT_HIGHLIGHT_STYLE,
        highlight_enabled: bool = True,
        auto_highlight: bool = False,
    ) -> None:
        """Initialize a converter.

        Parameters
        ----------
        extensions : Iterable[str], optional
            Canonical extension names (see
            :data:`mddoclet._constants.EXTENSION_NAMES`); defaults to all.
        timeout : float, optional
            Seconds a single conversion may take. Defaults to ``2.0``.
        highlight_style : str, optional
            Pygments style used for fenced code blocks.
        highlight_enabled : bool, optional
            ``False`` leaves fenced code blocks unhighlighted.
        auto_highlight : bool, optional
            Let Pygments guess the language of unlabelled code blocks.
        """
        self.extensions = frozenset(extensions)
        self.timeout = timeout
        self.highlight_style = highlight_style
        self.highlight_enabled = highlight_enabled
        self.auto_highlight = auto_highlight
        self._formatter = HtmlFormatter(
            style=highlight_style, cssclass=CODEHILITE_CSS_CLASS
        )

    @property
    def stylesheet(self) -> str:
        """Return the CSS that colours highlighted code blocks."""
        return self._formatter.get_style_defs(f".{CODEHILITE_CSS_CLASS}")

    def convert(self, text: str) -> str:
        """Render ``text`` into HTML within the configured timeout.

        Raises
        ------
        ConversionTimeout
            If the conversion does not complete within :attr:`timeout`.
        """
        if not text.strip():
            return ""
        future: cf.Future[str] = cf.Future()

        def _work() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(self._convert(text))
            except Exception as exc:  # noqa: BLE001
                future.set_exception(exc)

        worker = threading.Thread(
            target=_work,
            name=f"mddoclet-markdown-{next(_thread_ids)}",
            daemon=True,
        )
        worker.start()
        try:
            return future.result(timeout=self.timeout)
        except cf.TimeoutError as exc:
            msg = (
                f"Markdown conversion did not finish within {self.timeout:g}s "
                f"({len(text)} characters); raise the parse timeout if the "
                "input is legitimate."
            )
            raise ConversionTimeout(msg) from exc

    def _convert(self, text: str) -> str:
        fenced = "fenced-code-blocks" in self.extensions
        source = scan_fences(text) if fenced else FencedSource(text)
        md = Markdown(
            extensions=self._build_extensions(),
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": self.auto_highlight,
                    "use_pygments": self.highlight_enabled,
                    "css_class": CODEHILITE_CSS_CLASS,
                    "pygments_style": self.highlight_style,
                }
            },
        )
        html = md.convert(source.text)
        if self.highlight_enabled:
            html = label_highlighted_blocks(html, source.languages)
        return html

    def _build_extensions(self) -> list[Extension | str]:
        extensions: list[Extension | str] = ["sane_lists"]
        for name in sorted(self.extensions):
            extensions.extend(SIMPLE_EXTENSIONS.get(name, ()))
        if "autolinks" in self.extensions:
            extensions.append(AutolinkExtension())
        if "wiki-links" in self.extensions:
            extensions.append(WikiLinkExtension())
        return extensions


__all__ = [
    "FencedSource",
    "MarkupConverter",
    "label_highlighted_blocks",
    "scan_fences",
]
