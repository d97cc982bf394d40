"""Cyclopts CLI entrypoint for rewriting documentation comments.

The ``mddoclet`` console script loads a documentation tree exported by a host
framework, rewrites every comment from Markdown into HTML (expanding ``@see``
links and rendering ``@uml`` diagrams along the way), and writes the result
for the downstream document generator. Options cover the extension list,
the parse timeout, the overview page, the PlantUML preamble, the title of
``@todo`` boxes and the syntax highlighting switches, including where to
write the highlighting stylesheet.

Examples
--------
Process a tree with the default settings:

>>> from mddoclet.cli import app
>>> app(["process", "tree.yaml", "--output", "out.yaml"])  # doctest: +SKIP

Restrict the Markdown extensions and raise the timeout:

>>> app(
...     ["process", "tree.yaml", "--output", "out.yaml",
...      "--extensions", "tables,fenced-code-blocks", "--parse-timeout", "5.5"]
... )  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from ._constants import EXTENSION_NAMES
from .config import (
    DocletConfig,
    DocletConfigError,
    load_doclet_config,
    parse_extensions,
    parse_seconds,
)
from .errors import DocletError
from .pipeline import CommentProcessor
from .tree_io import YamlTreeWriter, load_tree

DEFAULT_CONFIG = Path("mddoclet.yaml")

logger = logging.getLogger(__name__)

app = App(name="mddoclet", config=cyclopts.config.Env("MDDOCLET_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _load_config(config: Path | None) -> DocletConfig:
    """Load ``config`` when given, the default file when present, else defaults."""
    if config is not None:
        return load_doclet_config(config)
    if DEFAULT_CONFIG.exists():
        return load_doclet_config(DEFAULT_CONFIG)
    return DocletConfig()


def _apply_overrides(
    config: DocletConfig,
    *,
    extensions: str | None,
    parse_timeout: float | None,
    overview: Path | None,
    plantuml_config: Path | None,
    highlight_style: str | None,
    disable_highlight: bool,
    enable_auto_highlight: bool,
    image_dir: Path | None,
    workers: int | None,
    todo_title: str | None = None,
    stylesheet: Path | None = None,
) -> DocletConfig:
    """Return ``config`` with command line options applied on top."""
    parsed_extensions = parse_extensions(extensions)
    if parsed_extensions is not None:
        config.extensions = parsed_extensions
    if parse_timeout is not None:
        config.parse_timeout = parse_seconds(parse_timeout, field="parse-timeout")
    if overview is not None:
        config.overview_path = overview
    diagrams = config.diagrams
    if plantuml_config is not None:
        diagrams = dc.replace(diagrams, preamble_path=plantuml_config)
    if image_dir is not None:
        diagrams = dc.replace(diagrams, image_dir=image_dir)
    config.diagrams = diagrams
    if highlight_style is not None:
        config.highlight.style = highlight_style
    if disable_highlight:
        config.highlight.enabled = False
    if enable_auto_highlight:
        config.highlight.auto = True
    if stylesheet is not None:
        config.highlight.stylesheet_path = stylesheet
    if todo_title is not None:
        config.todo_title = todo_title
    if workers is not None:
        if workers < 1:
            msg = f"'workers' must be a positive integer, got {workers}"
            raise DocletConfigError(msg)
        config.workers = workers
    return config


@app.command(help="Rewrite Markdown doc comments of a documentation tree into HTML.")
def process(
    tree: typ.Annotated[Path, Parameter(help="Documentation tree exported by the host")],
    *,
    output: typ.Annotated[Path, Parameter(help="Where to write the processed tree")],
    config: typ.Annotated[
        Path | None, Parameter(help="Path to an mddoclet.yaml configuration")
    ] = None,
    extensions: typ.Annotated[
        str | None,
        Parameter(help="Comma separated Markdown extensions (see `extensions`)"),
    ] = None,
    parse_timeout: typ.Annotated[
        float | None, Parameter(help="Seconds allowed per Markdown conversion")
    ] = None,
    overview: typ.Annotated[
        Path | None, Parameter(help="Overview page rendered with Markdown")
    ] = None,
    plantuml_config: typ.Annotated[
        Path | None, Parameter(help="File included before each PlantUML diagram")
    ] = None,
    highlight_style: typ.Annotated[
        str | None, Parameter(help="Pygments style for fenced code blocks")
    ] = None,
    disable_highlight: typ.Annotated[
        bool, Parameter(help="Disable syntax highlighting entirely")
    ] = False,
    enable_auto_highlight: typ.Annotated[
        bool, Parameter(help="Guess the language of unlabelled code blocks")
    ] = False,
    stylesheet: typ.Annotated[
        Path | None, Parameter(help="Write the code highlighting CSS to this file")
    ] = None,
    todo_title: typ.Annotated[
        str | None, Parameter(help="Heading of the boxes rendered for @todo tags")
    ] = None,
    image_dir: typ.Annotated[
        Path | None, Parameter(help="Directory receiving rendered diagrams")
    ] = None,
    workers: typ.Annotated[
        int | None, Parameter(help="Number of units processed concurrently")
    ] = None,
    verbose: typ.Annotated[bool, Parameter(help="Log progress messages")] = False,
) -> None:
    """Process a documentation tree and hand it to the YAML tree writer.

    Parameters
    ----------
    tree : Path
        YAML documentation tree exported by the host framework.
    output : Path
        Destination of the processed tree.
    config : Path or None, optional
        Configuration file; ``mddoclet.yaml`` in the working directory is
        used when present and no path is given.
    extensions, parse_timeout, overview, plantuml_config, highlight_style,
    disable_highlight, enable_auto_highlight, stylesheet, todo_title,
    image_dir, workers
        Overrides applied on top of the configuration file.
    verbose : bool, optional
        Log at ``INFO`` instead of ``WARNING``.

    Raises
    ------
    SystemExit
        With status 1 when configuration is invalid or a fatal pipeline error
        (conversion timeout, internal inconsistency) aborts the run.
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        doclet_config = _apply_overrides(
            _load_config(config),
            extensions=extensions,
            parse_timeout=parse_timeout,
            overview=overview,
            plantuml_config=plantuml_config,
            highlight_style=highlight_style,
            disable_highlight=disable_highlight,
            enable_auto_highlight=enable_auto_highlight,
            image_dir=image_dir,
            workers=workers,
            todo_title=todo_title,
            stylesheet=stylesheet,
        )
        documentation = load_tree(tree)
        if doclet_config.overview_path is not None:
            documentation.overview = doclet_config.overview_path.read_text(
                encoding="utf-8"
            )
        processor = CommentProcessor(doclet_config)
        written = processor.run(documentation, YamlTreeWriter(output))
        css_path = doclet_config.highlight.stylesheet_path
        if css_path is not None:
            css_path.parent.mkdir(parents=True, exist_ok=True)
            css_path.write_text(processor.converter.stylesheet, encoding="utf-8")
    except (DocletError, DocletConfigError, OSError) as exc:
        logger.error("%s", exc)  # noqa: TRY400
        raise SystemExit(1) from exc
    print(f"wrote {_format_path(typ.cast('Path', written))}")
    if css_path is not None:
        print(f"wrote {_format_path(css_path)}")


@app.command(name="extensions", help="List the recognised Markdown extension names.")
def list_extensions() -> None:
    """Print one recognised extension name per line."""
    for name in EXTENSION_NAMES:
        print(name)


def main() -> None:
    """Invoke the Cyclopts application that powers the `mddoclet` console command."""
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
