"""Tests for the ``mddoclet`` command line entry points."""

from __future__ import annotations

import os
import subprocess
import sys
import typing as typ
from pathlib import Path

import pytest
from ruamel.yaml import YAML

from mddoclet import cli
from mddoclet._constants import EXTENSION_NAMES
from mddoclet.doctree import DocumentationUnit
from mddoclet.plantuml import PlantUmlRenderer

ROOT = Path(__file__).resolve().parents[1]

TREE = """
units:
  - name: com.example.Foo
    comment: |2
       Summary with {@link Bar}.

       | a | b |
       |---|---|
       | 1 | 2 |
    tags:
      - name: see
        text: '"Docs <http://docs.test/>"'
      - name: uml
        text: Alice -> Bob
"""


@pytest.fixture
def tree_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        PlantUmlRenderer, "render", lambda self, source, image_format="png": b"PNG"
    )
    path = tmp_path / "tree.yaml"
    path.write_text(TREE.lstrip(), encoding="utf-8")
    return path


def _load(path: Path) -> dict[str, typ.Any]:
    return YAML(typ="safe").load(path.read_text(encoding="utf-8"))


def test_process_writes_rewritten_tree(
    tree_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    output = tmp_path / "out.yaml"

    cli.process(tree_path, output=output, image_dir=tmp_path / "images")

    unit = _load(output)["units"][0]
    assert "<table>" in unit["comment"]
    assert "{@link Bar}" in unit["comment"]
    assert unit["tags"][0]["text"] == '<a href="http://docs.test/">Docs</a>'
    image = f"{DocumentationUnit('com.example.Foo').slug}-uml-1.png"
    assert image in unit["tags"][1]["text"]
    assert (tmp_path / "images" / image).read_bytes() == b"PNG"
    assert "wrote out.yaml" in capsys.readouterr().out


def test_extension_override_disables_tables(tree_path: Path, tmp_path: Path) -> None:
    output = tmp_path / "out.yaml"

    cli.process(
        tree_path,
        output=output,
        extensions="autolinks",
        image_dir=tmp_path / "images",
    )

    assert "<table>" not in _load(output)["units"][0]["comment"]


def test_config_file_is_picked_up(tree_path: Path, tmp_path: Path) -> None:
    (tmp_path / "overview.md").write_text(" Overview *page*\n", encoding="utf-8")
    (tmp_path / "mddoclet.yaml").write_text(
        "overview: overview.md\nextensions: [smartypants]\n", encoding="utf-8"
    )
    output = tmp_path / "out.yaml"

    cli.process(tree_path, output=output, image_dir=tmp_path / "images")

    document = _load(output)
    assert document["overview"] == "<p>Overview <em>page</em></p>"
    assert "<table>" not in document["units"][0]["comment"]


def test_todo_title_and_stylesheet_options(
    tree_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    tree_path.write_text(
        TREE.lstrip() + "      - name: todo\n        text: Split this class\n",
        encoding="utf-8",
    )
    output = tmp_path / "out.yaml"
    css = tmp_path / "site" / "code.css"

    cli.process(
        tree_path,
        output=output,
        image_dir=tmp_path / "images",
        todo_title="Later",
        highlight_style="monokai",
        stylesheet=css,
    )

    todo = _load(output)["units"][0]["tags"][2]["text"]
    assert '<div class="todo-title">Later</div>' in todo
    assert "<p>Split this class</p>" in todo
    assert ".codehilite" in css.read_text(encoding="utf-8")
    assert "#272822" in css.read_text(encoding="utf-8"), "monokai colours expected"
    assert "wrote site/code.css" in capsys.readouterr().out


def test_invalid_options_exit_with_status_one(
    tree_path: Path, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.process(tree_path, output=tmp_path / "out.yaml", extensions="footnotes")

    assert excinfo.value.code == 1
    assert "Unknown Markdown extension" in caplog.text


def test_non_positive_workers_rejected(tree_path: Path, tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        cli.process(tree_path, output=tmp_path / "out.yaml", workers=0)


def test_missing_tree_exits(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SystemExit):
        cli.process(tmp_path / "absent.yaml", output=tmp_path / "out.yaml")


def test_extensions_command_lists_names(capsys: pytest.CaptureFixture[str]) -> None:
    cli.list_extensions()

    assert capsys.readouterr().out.split() == list(EXTENSION_NAMES)


def test_runaway_conversion_exits_with_status_one(tmp_path: Path) -> None:
    """A conversion timeout ends the command promptly instead of hanging."""
    comment = "[" * 20000 + "x" + "](" * 2000
    YAML(typ="safe").dump(
        {"units": [{"name": "com.example.Slow", "comment": comment}]},
        tmp_path / "tree.yaml",
    )
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        path for path in (str(ROOT), env.get("PYTHONPATH")) if path
    )

    result = subprocess.run(
        [
            sys.executable,
            "-m",
            "mddoclet.cli",
            "process",
            "tree.yaml",
            "--output",
            "out.yaml",
            "--parse-timeout",
            "0.05",
        ],
        cwd=tmp_path,
        env=env,
        text=True,
        capture_output=True,
        check=False,
        timeout=60,
    )

    assert result.returncode == 1, result.stderr
    assert "did not finish within 0.05s" in result.stderr
    assert "com.example.Slow" in result.stderr
    assert not (tmp_path / "out.yaml").exists()
