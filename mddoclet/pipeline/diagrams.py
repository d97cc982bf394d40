r"""Turn ``@uml``/``@startuml`` tag bodies into embedded diagram images.

``@uml`` and ``@startuml`` are synonyms; their body is a PlantUML
description. ``@enduml`` only exists for compatibility with tools that expect
the ``@startuml``/``@enduml`` pair, so it always renders as nothing. Each
diagram is written to the image directory under a name derived from the
documentation unit and a per-unit ordinal, and the slot is replaced by an
``<img>`` reference. A failing diagram never aborts the run: the slot shows an
inline error marker instead.

Example
-------
>>> from pathlib import Path
>>> from mddoclet.doctree import DocumentationUnit
>>> from mddoclet.pipeline.diagrams import DiagramRewriter, UnitContext
>>> class FakeRenderer:
...     def render(self, source, image_format="png"):
...         return b"PNG"
>>> rewriter = DiagramRewriter(FakeRenderer(), image_dir=Path("/tmp/mddoclet-doctest"))
>>> context = UnitContext(DocumentationUnit("com.example.Foo"))
>>> rewriter.rewrite("uml", "Alice -> Bob: hi", context)  # doctest: +SKIP
'<img class="uml-diagram" src="com-example-foo-fd6456309afc-uml-1.png" alt="com.example.Foo diagram 1">'
>>> rewriter.rewrite("enduml", "anything", context)
''
"""

from __future__ import annotations

import dataclasses as dc
import logging
import re
import typing as typ
from html import escape
from pathlib import Path, PurePosixPath

from mddoclet._constants import (
    DIAGRAM_CSS_CLASS,
    DIAGRAM_ERROR_CSS_CLASS,
    DIAGRAM_FILE_TEMPLATE,
)
from mddoclet.doctree import DocumentationUnit, TagKind
from mddoclet.errors import DiagramRenderError

if typ.TYPE_CHECKING:
    from mddoclet.plantuml import DiagramRenderer

logger = logging.getLogger(__name__)

IMAGE_NAME_PATTERN = re.compile(
    r"\A[ \t]*(?P<name>[\w.-]+\.(?:png|svg))[ \t]*(?:\r\n|\r|\n|\Z)"
)


@dc.dataclass(slots=True)
class UnitContext:
    """Per-unit processing state threaded through the tag rewriters.

    Attributes
    ----------
    unit : DocumentationUnit
        The unit whose slots are being processed.
    diagram_count : int
        Number of diagrams rendered so far for this unit.
    """

    unit: DocumentationUnit
    diagram_count: int = 0

    def next_diagram_ordinal(self) -> int:
        """Advance and return the 1-based diagram ordinal."""
        self.diagram_count += 1
        return self.diagram_count


@dc.dataclass(frozen=True, slots=True)
class DiagramRequest:
    """One diagram to render: full source text and target file name."""

    body: str
    preamble: str
    file_name: str

    @property
    def source(self) -> str:
        """Return the text passed to the renderer: preamble, newline, body."""
        return f"{self.preamble}\n{self.body}"

    @property
    def image_format(self) -> str:
        """Return the image format implied by :attr:`file_name`."""
        return PurePosixPath(self.file_name).suffix.lstrip(".") or "png"


def error_marker(message: str) -> str:
    """Return the inline markup shown in place of a diagram that failed."""
    return (
        f'<span class="{DIAGRAM_ERROR_CSS_CLASS}">'
        f"Diagram error: {escape(message, quote=False)}</span>"
    )


class DiagramRewriter:
    """Render diagram tag bodies and splice back image references."""

    def __init__(
        self,
        renderer: DiagramRenderer,
        *,
        image_dir: Path,
        image_url_prefix: str = "",
        preamble: str = "",
        image_format: str = "png",
    ) -> None:
        """Initialize the rewriter.

        Parameters
        ----------
        renderer : DiagramRenderer
            Backend producing image bytes from a diagram description.
        image_dir : Path
            Directory receiving the rendered images.
        image_url_prefix : str, optional
            Prefix prepended to the file name in the ``src`` attribute.
        preamble : str, optional
            Shared text inserted before every diagram (for example skin
            parameters); loaded once by the caller.
        image_format : str, optional
            Format used when the tag body does not name its own file.
        """
        self.renderer = renderer
        self.image_dir = image_dir
        self.image_url_prefix = image_url_prefix
        self.preamble = preamble
        self.image_format = image_format

    def rewrite(self, tag_name: str, body: str, context: UnitContext) -> str:
        """Return the output markup for one diagram slot.

        Parameters
        ----------
        tag_name : str
            ``uml``, ``startuml`` or ``enduml``.
        body : str
            Diagram description taken from the tag slot.
        context : UnitContext
            State of the enclosing unit; its diagram counter is advanced.

        Returns
        -------
        str
            An ``<img>`` reference, an inline error marker, or ``""`` for
            ``@enduml``.
        """
        if TagKind.from_name(tag_name) is TagKind.ENDUML:
            return ""
        request = self.build_request(body, context)
        try:
            image = self.renderer.render(request.source, request.image_format)
            self._write_image(request.file_name, image)
        except DiagramRenderError as exc:
            exc.locate(context.unit.display_name, f"@{tag_name}")
            logger.warning("%s", exc)
            return error_marker(exc.message)
        alt = f"{context.unit.name} diagram {context.diagram_count}"
        src = f"{self.image_url_prefix}{request.file_name}"
        return (
            f'<img class="{DIAGRAM_CSS_CLASS}" src="{escape(src, quote=True)}" '
            f'alt="{escape(alt, quote=True)}">'
        )

    def build_request(self, body: str, context: UnitContext) -> DiagramRequest:
        """Build the :class:`DiagramRequest` for ``body`` within ``context``."""
        ordinal = context.next_diagram_ordinal()
        match = IMAGE_NAME_PATTERN.match(body)
        if match:
            file_name = PurePosixPath(match["name"]).name
            body = body[match.end() :]
        else:
            file_name = DIAGRAM_FILE_TEMPLATE.format(
                unit=context.unit.slug, ordinal=ordinal, ext=self.image_format
            )
        return DiagramRequest(body=body, preamble=self.preamble, file_name=file_name)

    def _write_image(self, file_name: str, image: bytes) -> None:
        target = self.image_dir / file_name
        try:
            self.image_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(image)
        except OSError as exc:
            msg = f"Could not write diagram image {target}: {exc}"
            raise DiagramRenderError(msg) from exc


__all__ = [
    "DiagramRequest",
    "DiagramRewriter",
    "UnitContext",
    "error_marker",
]
