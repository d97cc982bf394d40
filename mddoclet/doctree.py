r"""In-memory documentation tree handed over by the host framework.

The host (a source parser or API extractor) builds one
:class:`DocumentationUnit` per package, type, or member. Each unit carries an
ordered list of :class:`TagSlot` objects: the implicit main body first,
followed by the block tags in source order. The pipeline mutates slot text in
place and never creates or removes units.

Example
-------
>>> from mddoclet.doctree import DocumentationUnit, TagSlot, UnitKind
>>> unit = DocumentationUnit(
...     name="com.example.Foo",
...     kind=UnitKind.TYPE,
...     slots=[TagSlot("", "Body"), TagSlot("see", "Bar#baz()")],
... )
>>> [slot.kind.value for slot in unit.get_slots()]
['main', 'see']
"""

from __future__ import annotations

import dataclasses as dc
import enum
import hashlib
import re
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class UnitKind(enum.StrEnum):
    """Kind of documentation unit; used for reporting and file naming."""

    PACKAGE = "package"
    TYPE = "type"
    MEMBER = "member"
    OVERVIEW = "overview"


class TagKind(enum.StrEnum):
    """Recognised tag slot kinds."""

    MAIN = "main"
    AUTHOR = "author"
    VERSION = "version"
    RETURN = "return"
    DEPRECATED = "deprecated"
    SINCE = "since"
    PARAM = "param"
    THROWS = "throws"
    SEE = "see"
    TODO = "todo"
    UML = "uml"
    STARTUML = "startuml"
    ENDUML = "enduml"
    OTHER = "other"

    @classmethod
    def from_name(cls, name: str) -> TagKind:
        """Map a tag name (with or without ``@``) onto its kind."""
        cleaned = name.strip().lstrip("@").lower()
        if not cleaned:
            return cls.MAIN
        if cleaned == "exception":
            return cls.THROWS
        try:
            kind = cls(cleaned)
        except ValueError:
            return cls.OTHER
        if kind in (cls.MAIN, cls.OTHER):
            return cls.OTHER
        return kind


FREE_TEXT_KINDS = frozenset(
    {
        TagKind.AUTHOR,
        TagKind.VERSION,
        TagKind.RETURN,
        TagKind.DEPRECATED,
        TagKind.SINCE,
        TagKind.PARAM,
        TagKind.THROWS,
    }
)
DIAGRAM_KINDS = frozenset({TagKind.UML, TagKind.STARTUML, TagKind.ENDUML})
SLUG_DIGEST_LENGTH = 12


@dc.dataclass(slots=True)
class TagSlot:
    """One text slot of a documentation unit.

    Attributes
    ----------
    name : str
        Tag name without the leading ``@``; empty for the main body.
    text : str
        Raw comment text, replaced by rendered HTML after processing.
    argument : str | None
        Leading argument of ``@param``/``@throws`` (the parameter or
        exception name), kept apart from the Markdown text.
    """

    name: str
    text: str
    argument: str | None = None

    @property
    def kind(self) -> TagKind:
        """Return the :class:`TagKind` derived from :attr:`name`."""
        return TagKind.from_name(self.name)

    @property
    def label(self) -> str:
        """Return a short human-readable label used in log and error messages."""
        if self.kind is TagKind.MAIN:
            return "main body"
        label = f"@{self.name.lstrip('@')}"
        if self.argument:
            label = f"{label} {self.argument}"
        return label


@dc.dataclass(slots=True)
class DocumentationUnit:
    """A package, type, or member with its comment slots."""

    name: str
    kind: UnitKind = UnitKind.TYPE
    slots: list[TagSlot] = dc.field(default_factory=list)
    location: str | None = None

    def get_slots(self) -> list[TagSlot]:
        """Return the ordered slots, main body first."""
        return list(self.slots)

    def set_slot_text(self, index: int, text: str) -> None:
        """Replace the text of the slot at ``index``."""
        self.slots[index].text = text

    @property
    def display_name(self) -> str:
        """Return the unit name with its source location, when known."""
        if self.location:
            return f"{self.name} ({self.location})"
        return self.name

    @property
    def slug(self) -> str:
        """Return a filesystem-safe identifier unique to the exact unit name.

        The readable part folds case and punctuation, so overloads such as
        ``Foo#bar(int)`` and ``Foo#bar(int[])`` share it; the trailing digest
        of the untouched name keeps them apart.
        """
        readable = re.sub(r"[^a-z0-9]+", "-", self.name.lower()).strip("-")
        digest = hashlib.sha256(self.name.encode("utf-8")).hexdigest()
        return f"{readable or self.kind.value}-{digest[:SLUG_DIGEST_LENGTH]}"


@dc.dataclass(slots=True)
class DocumentationTree:
    """Root of the documentation model: ordered units plus an overview page."""

    units: list[DocumentationUnit] = dc.field(default_factory=list)
    overview: str | None = None

    def __iter__(self) -> cabc.Iterator[DocumentationUnit]:
        return iter(self.units)

    def __len__(self) -> int:
        return len(self.units)


__all__ = [
    "DIAGRAM_KINDS",
    "FREE_TEXT_KINDS",
    "DocumentationTree",
    "DocumentationUnit",
    "TagKind",
    "TagSlot",
    "UnitKind",
]
