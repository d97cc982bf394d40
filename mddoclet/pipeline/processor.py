r"""Drive every comment of a documentation tree through the rewrite pipeline.

:class:`CommentProcessor` is the single entry point tying the pipeline
together. For each unit and each tag slot it runs, strictly in order:

1. leading-space normalization,
2. inline tag extraction,
3. the tag-specific rewrite (``@see`` links, ``@uml`` diagrams, or a custom
   handler; a no-op for free-text tags),
4. Markdown conversion (skipped for diagram tags, which already produce
   HTML); an ``@todo`` tag is then wrapped in a titled box,
5. inline tag reinsertion,

and stores the result back into the unit. Once the whole tree is processed,
:meth:`CommentProcessor.run` hands it to the downstream renderer in one call.

Example
-------
>>> from mddoclet.config import DocletConfig
>>> from mddoclet.doctree import DocumentationTree, DocumentationUnit, TagSlot
>>> from mddoclet.pipeline import CommentProcessor
>>> unit = DocumentationUnit(
...     "com.example.Foo",
...     slots=[
...         TagSlot("", " Uses {@link Bar} *twice*."),
...         TagSlot("see", '"<http://x>"'),
...     ],
... )
>>> CommentProcessor(DocletConfig()).process_tree(DocumentationTree([unit]))
>>> unit.slots[0].text
'<p>Uses {@link Bar} <em>twice</em>.</p>'
>>> unit.slots[1].text
'<a href="http://x">http://x</a>'
"""

from __future__ import annotations

import concurrent.futures as cf
import logging
import re
import typing as typ
from html import escape

from mddoclet._constants import TODO_CSS_CLASS
from mddoclet.config.models import DocletConfig, DocletConfigError
from mddoclet.doctree import DIAGRAM_KINDS, TagKind
from mddoclet.errors import DocletError, MalformedReferenceTag
from mddoclet.markup.converter import MarkupConverter
from mddoclet.plantuml import PlantUmlRenderer

from .diagrams import DiagramRewriter, UnitContext
from .references import ReferenceForm, parse_reference
from .regions import extract_regions, reinsert_regions
from .whitespace import normalize_leading_space

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from mddoclet.config.models import TagHandler
    from mddoclet.doctree import DocumentationTree, DocumentationUnit, TagSlot
    from mddoclet.plantuml import DiagramRenderer

logger = logging.getLogger(__name__)

SINGLE_PARAGRAPH_PATTERN = re.compile(r"\A<p>(?P<body>.*)</p>\Z", re.DOTALL)
RESERVED_TAG_NAMES = frozenset({"", "see", "todo", "uml", "startuml", "enduml"})
# Program element references and ready-made anchors belong to the renderer.
VERBATIM_REFERENCE_FORMS = frozenset({ReferenceForm.CLASSIC, ReferenceForm.HTML})


class TreeRenderer(typ.Protocol):
    """Downstream collaborator that turns the processed tree into output."""

    def render(self, tree: DocumentationTree) -> object:
        """Render the complete, already rewritten tree."""
        ...


def _unwrap_paragraph(html: str) -> str:
    """Return the content of ``html`` when it is exactly one paragraph."""
    match = SINGLE_PARAGRAPH_PATTERN.match(html.strip())
    if match and "<p>" not in match["body"]:
        return match["body"]
    return html


def _resolve_handlers(
    handlers: cabc.Mapping[str, TagHandler],
) -> dict[str, TagHandler]:
    """Normalize handler names and reject names with built-in behaviour."""
    resolved: dict[str, TagHandler] = {}
    for name, handler in handlers.items():
        key = name.strip().lstrip("@").lower()
        if key in RESERVED_TAG_NAMES:
            msg = f"Tag '@{key}' has built-in handling and cannot be overridden."
            raise DocletConfigError(msg)
        if not callable(handler):
            msg = f"Handler for '@{key}' must be callable, got {handler!r}"
            raise DocletConfigError(msg)
        resolved[key] = handler
    return resolved


class CommentProcessor:
    """Rewrite every documentation comment of a tree from Markdown to HTML."""

    def __init__(
        self,
        config: DocletConfig,
        *,
        converter: MarkupConverter | None = None,
        diagram_renderer: DiagramRenderer | None = None,
        tag_handlers: cabc.Mapping[str, TagHandler] | None = None,
    ) -> None:
        """Initialize the processor.

        Parameters
        ----------
        config : DocletConfig
            Resolved configuration.
        converter : MarkupConverter, optional
            Markdown converter; built from ``config`` when omitted.
        diagram_renderer : DiagramRenderer, optional
            Diagram backend; defaults to :class:`~mddoclet.plantuml.PlantUmlRenderer`.
        tag_handlers : Mapping[str, TagHandler], optional
            Extra custom tag handlers, merged over ``config.tag_handlers``.

        Raises
        ------
        DocletConfigError
            If a handler targets a tag with built-in handling.
        OSError
            If the configured PlantUML preamble file cannot be read.
        """
        self.config = config
        self.converter = converter or MarkupConverter(
            config.extensions,
            timeout=config.parse_timeout,
            highlight_style=config.highlight.style,
            highlight_enabled=config.highlight.enabled,
            auto_highlight=config.highlight.auto,
        )
        diagrams = config.diagrams
        renderer = diagram_renderer or PlantUmlRenderer(
            diagrams.command, timeout=diagrams.timeout
        )
        self.diagrams = DiagramRewriter(
            renderer,
            image_dir=diagrams.image_dir,
            image_url_prefix=diagrams.image_url_prefix,
            preamble=self._load_preamble(),
            image_format=diagrams.image_format,
        )
        merged = dict(config.tag_handlers)
        merged.update(tag_handlers or {})
        self.tag_handlers = _resolve_handlers(merged)

    def _load_preamble(self) -> str:
        path = self.config.diagrams.preamble_path
        if path is None:
            return ""
        return path.read_text(encoding="utf-8")

    def run(self, tree: DocumentationTree, renderer: TreeRenderer) -> object:
        """Process ``tree`` in place, then forward it to ``renderer`` once."""
        self.process_tree(tree)
        return renderer.render(tree)

    def process_tree(self, tree: DocumentationTree) -> None:
        """Rewrite the overview and every unit of ``tree`` in place.

        Raises
        ------
        DocletError
            For fatal errors (conversion timeout, internal inconsistency);
            the error names the unit and tag that triggered it.
        """
        if tree.overview is not None:
            tree.overview = self.process_overview(tree.overview)
        workers = max(1, self.config.workers)
        if workers == 1 or len(tree.units) < 2:  # noqa: PLR2004
            for unit in tree.units:
                self.process_unit(unit)
        else:
            pool = cf.ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix="mddoclet-unit"
            )
            try:
                for future in [pool.submit(self.process_unit, u) for u in tree.units]:
                    future.result()
            finally:
                # Units still queued behind a fatal error are never started.
                pool.shutdown(wait=True, cancel_futures=True)
        logger.info("processed %d documentation units", len(tree.units))

    def process_unit(self, unit: DocumentationUnit) -> None:
        """Rewrite every slot of ``unit`` in place."""
        context = UnitContext(unit)
        for index, slot in enumerate(unit.get_slots()):
            unit.set_slot_text(index, self.process_slot(slot, context))

    def process_overview(self, text: str) -> str:
        """Render the overview page; its leading spaces are significant."""
        try:
            return self._convert_body(text, is_overview=True)
        except DocletError as exc:
            exc.locate("overview")
            raise

    def process_slot(self, slot: TagSlot, context: UnitContext) -> str:
        """Return the rewritten text of ``slot`` within ``context``."""
        try:
            return self._process_slot(slot, context)
        except DocletError as exc:
            exc.locate(context.unit.display_name, slot.label)
            raise

    def _process_slot(self, slot: TagSlot, context: UnitContext) -> str:
        kind = slot.kind
        text = normalize_leading_space(slot.text)
        if kind in DIAGRAM_KINDS:
            # Diagram descriptions go to the renderer verbatim, unconverted.
            return self.diagrams.rewrite(slot.name.lstrip("@"), text, context)

        sanitized, regions = extract_regions(text)
        if kind is TagKind.SEE:
            rewritten = self._rewrite_see(sanitized, slot, context)
            if rewritten is None:
                return reinsert_regions(sanitized, regions)
        else:
            handler = self.tag_handlers.get(slot.name.lstrip("@").lower())
            rewritten = handler(sanitized) if handler else sanitized
        html = self.converter.convert(rewritten)
        if kind is TagKind.TODO:
            html = self._todo_box(html)
        elif kind is not TagKind.MAIN:
            html = _unwrap_paragraph(html)
        return reinsert_regions(html, regions)

    def _convert_body(self, text: str, *, is_overview: bool) -> str:
        normalized = normalize_leading_space(text, is_overview=is_overview)
        sanitized, regions = extract_regions(normalized)
        return reinsert_regions(self.converter.convert(sanitized), regions)

    def _todo_box(self, html: str) -> str:
        title = escape(self.config.todo_title)
        return (
            f'<div class="{TODO_CSS_CLASS}">'
            f'<div class="{TODO_CSS_CLASS}-title">{title}</div>'
            f'<div class="{TODO_CSS_CLASS}-content">{html}</div>'
            "</div>"
        )

    @staticmethod
    def _rewrite_see(text: str, slot: TagSlot, context: UnitContext) -> str | None:
        """Return Markdown for a quoted ``@see`` value, or None to keep it verbatim."""
        try:
            entry = parse_reference(text)
        except MalformedReferenceTag as exc:
            exc.locate(context.unit.display_name, slot.label)
            logger.warning("%s; keeping the text as written", exc)
            return None
        if entry.form in VERBATIM_REFERENCE_FORMS:
            return None
        return entry.render()


__all__ = ["CommentProcessor", "TreeRenderer"]
