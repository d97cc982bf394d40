"""Read and write documentation trees in the YAML interchange format.

A host framework (a source parser, an API extractor) exports its comments as
YAML; :func:`load_tree` builds the in-memory model from it, and
:class:`YamlTreeWriter` is the downstream renderer collaborator used by the
command line: it serializes the processed tree for the document generator.

The format is::

    overview: |
      Optional overview page in Markdown.
    units:
      - name: com.example.Foo
        kind: type
        location: com/example/Foo.java:12
        comment: |
          Main body.
        tags:
          - name: param
            argument: value
            text: the value to use
          - name: see
            text: '"[Example](http://www.example.com/)"'
"""

from __future__ import annotations

import logging
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap
from ruamel.yaml.scalarstring import LiteralScalarString

from mddoclet.config.models import DocletConfigError
from mddoclet.doctree import DocumentationTree, DocumentationUnit, TagSlot, UnitKind

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


def load_tree(path: Path) -> DocumentationTree:
    """Load a documentation tree from the YAML file at ``path``.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    DocletConfigError
        If the document does not follow the interchange format.
    """
    if not path.exists():
        msg = f"Documentation tree '{path}' not found."
        raise FileNotFoundError(msg)
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure of the documentation tree must be a mapping."
        raise DocletConfigError(msg)
    units_raw = loaded.get("units") or []
    if not isinstance(units_raw, list):
        msg = "'units' must be a list."
        raise DocletConfigError(msg)
    units = [_build_unit(index, payload) for index, payload in enumerate(units_raw)]
    overview = loaded.get("overview")
    tree = DocumentationTree(
        units=units, overview=None if overview is None else str(overview)
    )
    logger.debug("loaded %d units from %s", len(units), path)
    return tree


def _build_unit(index: int, payload: object) -> DocumentationUnit:
    if not isinstance(payload, dict) or not payload.get("name"):
        msg = f"Unit #{index} must be a mapping with a 'name'."
        raise DocletConfigError(msg)
    try:
        kind = UnitKind(str(payload.get("kind", UnitKind.TYPE.value)).lower())
    except ValueError as exc:
        known = ", ".join(member.value for member in UnitKind)
        msg = f"Unit '{payload['name']}' has unknown kind; expected one of {known}."
        raise DocletConfigError(msg) from exc
    slots = [TagSlot("", str(payload.get("comment") or ""))]
    for tag in payload.get("tags") or []:
        if not isinstance(tag, dict) or not tag.get("name"):
            msg = f"Tags of unit '{payload['name']}' need a 'name'."
            raise DocletConfigError(msg)
        argument = tag.get("argument")
        slots.append(
            TagSlot(
                name=str(tag["name"]).lstrip("@"),
                text=str(tag.get("text") or ""),
                argument=None if argument is None else str(argument),
            )
        )
    location = payload.get("location")
    return DocumentationUnit(
        name=str(payload["name"]),
        kind=kind,
        slots=slots,
        location=None if location is None else str(location),
    )


def _scalar(text: str) -> str:
    """Return ``text`` as a literal block scalar when it spans several lines."""
    return LiteralScalarString(text) if "\n" in text else text


def dump_tree(tree: DocumentationTree) -> CommentedMap:
    """Return the interchange mapping for ``tree``."""
    document = CommentedMap()
    if tree.overview is not None:
        document["overview"] = _scalar(tree.overview)
    units = []
    for unit in tree.units:
        entry = CommentedMap()
        entry["name"] = unit.name
        entry["kind"] = unit.kind.value
        if unit.location:
            entry["location"] = unit.location
        slots = unit.get_slots()
        entry["comment"] = _scalar(slots[0].text) if slots else ""
        tags = []
        for slot in slots[1:]:
            tag = CommentedMap()
            tag["name"] = slot.name
            if slot.argument is not None:
                tag["argument"] = slot.argument
            tag["text"] = _scalar(slot.text)
            tags.append(tag)
        if tags:
            entry["tags"] = tags
        units.append(entry)
    document["units"] = units
    return document


class YamlTreeWriter:
    """Downstream renderer that writes the processed tree as YAML."""

    def __init__(self, output: Path) -> None:
        self.output = output

    def render(self, tree: DocumentationTree) -> Path:
        """Serialize ``tree`` to :attr:`output` and return the path."""
        yaml = YAML()
        yaml.width = 120
        yaml.indent(mapping=2, sequence=4, offset=2)
        self.output.parent.mkdir(parents=True, exist_ok=True)
        with self.output.open("w", encoding="utf-8") as handle:
            yaml.dump(dump_tree(tree), handle)
        return self.output


__all__ = ["YamlTreeWriter", "dump_tree", "load_tree"]
