"""Unit tests for leading-space normalization."""

from __future__ import annotations

import pytest

from mddoclet.pipeline.whitespace import normalize_leading_space


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        (" Title\n =====", "Title\n====="),
        ("  indented", " indented"),
        ("\tTabbed\n\ttext", "\tTabbed\n\ttext"),
        (" a\r\n b\r c", "a\r\nb\rc"),
        ("no space\n yes", "no space\nyes"),
        ("", ""),
        ("\n \n", "\n\n"),
    ],
)
def test_one_leading_space_removed_per_line(body: str, expected: str) -> None:
    assert normalize_leading_space(body) == expected


def test_heading_recognisable_after_normalisation() -> None:
    """A setext heading written inside a doc comment starts at column zero."""
    body = " Overview\n ========\n\n Details follow."

    lines = normalize_leading_space(body).splitlines()

    assert lines[0] == "Overview"
    assert lines[1].startswith("="), "underline must start at column zero"


def test_overview_is_left_untouched() -> None:
    body = " keep\n    code block"

    assert normalize_leading_space(body, is_overview=True) == body
