"""Tests for ``mddoclet.markup.MarkupConverter``."""

from __future__ import annotations

import os
import subprocess
import sys
import textwrap
import time
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from mddoclet.errors import ConversionTimeout
from mddoclet.markup import MarkupConverter, scan_fences

ROOT = Path(__file__).resolve().parents[1]
FENCED_SAMPLE = "Intro\n\n```python\nprint('hi')\n```\n"


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def test_basic_markdown_is_converted() -> None:
    html = MarkupConverter().convert("Title\n=====\n\nSome *emphasis*.")

    soup = _soup(html)
    assert soup.find("h1").get_text() == "Title"
    assert soup.find("em").get_text() == "emphasis"


def test_blank_input_converts_to_empty_string() -> None:
    assert MarkupConverter().convert("  \n\t") == ""


def test_tables_extension_toggles_tables() -> None:
    table = "| a | b |\n|---|---|\n| 1 | 2 |\n"

    enabled = _soup(MarkupConverter({"tables"}).convert(table))
    disabled = _soup(MarkupConverter(set()).convert(table))

    assert enabled.find("table") is not None
    assert disabled.find("table") is None, "disabled tables stay plain text"


def test_definition_lists_extension() -> None:
    html = MarkupConverter({"definition-lists"}).convert("Term\n: Definition\n")

    soup = _soup(html)
    assert soup.find("dt").get_text() == "Term"
    assert soup.find("dd").get_text().strip() == "Definition"


def test_smartypants_extension() -> None:
    html = MarkupConverter({"smartypants"}).convert('"quoted" -- dash')

    assert "&ldquo;" in html
    assert "&ndash;" in html


def test_autolinks_extension_links_bare_urls() -> None:
    html = MarkupConverter({"autolinks"}).convert(
        "Visit http://example.com/docs. Or www.example.org today"
    )

    hrefs = [a["href"] for a in _soup(html).find_all("a")]
    assert hrefs == ["http://example.com/docs", "http://www.example.org"]


def test_autolinks_leave_existing_anchors_alone() -> None:
    html = MarkupConverter({"autolinks"}).convert(
        "[docs](http://example.com/) and <http://example.net/>"
    )

    anchors = _soup(html).find_all("a")
    assert [a["href"] for a in anchors] == [
        "http://example.com/",
        "http://example.net/",
    ]
    assert all(a.find("a") is None for a in anchors), "links must not nest"


def test_autolinks_disabled_keeps_plain_text() -> None:
    html = MarkupConverter(set()).convert("Visit http://example.com/ now")

    assert _soup(html).find("a") is None


def test_wiki_links_extension() -> None:
    html = MarkupConverter({"wiki-links"}).convert(
        "See [[http://wiki.test/Page Page title]] or [[http://wiki.test/Other]]."
    )

    anchors = [(a["href"], a.get_text()) for a in _soup(html).find_all("a")]
    assert anchors == [
        ("http://wiki.test/Page", "Page title"),
        ("http://wiki.test/Other", "http://wiki.test/Other"),
    ]


def test_fenced_code_blocks_are_highlighted() -> None:
    html = MarkupConverter({"fenced-code-blocks"}).convert(FENCED_SAMPLE)

    block = _soup(html).find("div", class_="codehilite")
    assert block is not None, "fenced code renders through codehilite"
    assert block.get("data-language") == "python"
    assert "print" in block.get_text()


def test_disabled_highlighting_keeps_plain_code() -> None:
    html = MarkupConverter(
        {"fenced-code-blocks"}, highlight_enabled=False
    ).convert(FENCED_SAMPLE)

    soup = _soup(html)
    assert soup.find("div", class_="codehilite") is None
    assert "print('hi')" in soup.find("code").get_text()


def test_stylesheet_uses_configured_style() -> None:
    css = MarkupConverter(highlight_style="monokai").stylesheet

    assert ".codehilite" in css
    assert "#272822" in css, "monokai background colour expected"


def test_slow_conversion_raises_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    converter = MarkupConverter(timeout=0.05)

    def _slow(text: str) -> str:
        time.sleep(0.5)
        return f"<p>{text}</p>"

    monkeypatch.setattr(converter, "_convert", _slow)

    with pytest.raises(ConversionTimeout, match=r"within 0\.05s"):
        converter.convert("anything")


def test_tilde_fences_and_fence_options_are_labelled() -> None:
    text = "~~~java,numbered\nint x = 1;\n~~~\n\n  ```\nplain\n  ```\n"

    html = MarkupConverter({"fenced-code-blocks"}).convert(text)

    blocks = _soup(html).find_all("div", class_="codehilite")
    assert [block.get("data-language") for block in blocks] == ["java", "text"]
    assert "numbered" not in html, "fence options are dropped before conversion"


def test_scan_fences_leaves_code_lines_alone() -> None:
    text = "````md\n```python,linenums\n````\n"

    source = scan_fences(text)

    assert source.text == text
    assert source.languages == ["md"]


def test_scan_fences_ignores_unclosed_blocks() -> None:
    assert scan_fences("```python\nno closing fence\n").languages == []


# Nested link openers send Python-Markdown's inline parser into a very long
# backtracking search.
PATHOLOGICAL = '"[" * 20000 + "x" + "](" * 2000'


def _run_python(source: str) -> subprocess.CompletedProcess[str]:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        path for path in (str(ROOT), env.get("PYTHONPATH")) if path
    )
    return subprocess.run(
        [sys.executable, "-c", textwrap.dedent(source)],
        env=env,
        text=True,
        capture_output=True,
        check=False,
        timeout=60,
    )


def test_pathological_input_times_out_and_process_exits() -> None:
    """A real runaway conversion is abandoned and never blocks interpreter exit."""
    result = _run_python(
        f"""
        import time

        from mddoclet.errors import ConversionTimeout
        from mddoclet.markup import MarkupConverter

        started = time.monotonic()
        try:
            MarkupConverter(timeout=0.05).convert({PATHOLOGICAL})
        except ConversionTimeout as exc:
            print("timeout", round(time.monotonic() - started, 1), exc)
        else:
            print("finished")
        """
    )

    assert result.returncode == 0, result.stderr
    words = result.stdout.split()
    assert words[0] == "timeout", f"expected a timeout, got {result.stdout!r}"
    assert float(words[1]) < 5, "the timeout fires promptly"
    assert "within 0.05s" in result.stdout
