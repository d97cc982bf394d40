"""Tests for the YAML documentation tree interchange format."""

from __future__ import annotations

import typing as typ

import pytest
from ruamel.yaml import YAML

from mddoclet.config import DocletConfigError
from mddoclet.doctree import TagKind, UnitKind
from mddoclet.tree_io import YamlTreeWriter, load_tree

if typ.TYPE_CHECKING:
    from pathlib import Path

SAMPLE_TREE = """
overview: |
  Project overview.
units:
  - name: com.example.Foo
    kind: type
    location: com/example/Foo.java:12
    comment: |
      Main body.
    tags:
      - name: param
        argument: value
        text: the value
      - name: "@see"
        text: Bar#baz()
      - name: exception
        argument: IOException
        text: on failure
  - name: com.example
    kind: package
"""


def _write_tree(tmp_path: Path, body: str = SAMPLE_TREE) -> Path:
    path = tmp_path / "tree.yaml"
    path.write_text(body.lstrip(), encoding="utf-8")
    return path


def test_load_tree_builds_units(tmp_path: Path) -> None:
    tree = load_tree(_write_tree(tmp_path))

    assert tree.overview == "Project overview.\n"
    assert len(tree) == 2
    foo, package = tree.units
    assert foo.kind is UnitKind.TYPE
    assert foo.display_name == "com.example.Foo (com/example/Foo.java:12)"
    assert [slot.kind for slot in foo.get_slots()] == [
        TagKind.MAIN,
        TagKind.PARAM,
        TagKind.SEE,
        TagKind.THROWS,
    ]
    assert foo.slots[1].argument == "value"
    assert foo.slots[2].name == "see", "leading @ is stripped from tag names"
    assert package.kind is UnitKind.PACKAGE
    assert package.slots[0].text == ""


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("- just a list\n", "must be a mapping"),
        ("units: nope\n", "'units' must be a list"),
        ("units:\n  - kind: type\n", "with a 'name'"),
        ("units:\n  - name: x\n    kind: widget\n", "unknown kind"),
        ("units:\n  - name: x\n    tags:\n      - text: t\n", "need a 'name'"),
    ],
)
def test_invalid_trees_rejected(tmp_path: Path, body: str, message: str) -> None:
    with pytest.raises(DocletConfigError, match=message):
        load_tree(_write_tree(tmp_path, body))


def test_missing_tree_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_tree(tmp_path / "absent.yaml")


def test_writer_emits_loadable_yaml(tmp_path: Path) -> None:
    tree = load_tree(_write_tree(tmp_path))
    tree.units[0].set_slot_text(0, "<p>Main\nbody.</p>")
    output = tmp_path / "out" / "processed.yaml"

    written = YamlTreeWriter(output).render(tree)

    assert written == output
    data = YAML(typ="safe").load(output.read_text(encoding="utf-8"))
    assert data["overview"] == "Project overview.\n"
    foo = data["units"][0]
    assert foo["comment"] == "<p>Main\nbody.</p>"
    assert foo["tags"][0] == {"name": "param", "argument": "value", "text": "the value"}
    assert "tags" not in data["units"][1]
    assert load_tree(output).units[0].slots[2].text == "Bar#baz()"
