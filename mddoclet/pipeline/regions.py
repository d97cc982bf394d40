r"""Sandbox inline tags so Markdown conversion never sees them.

Javadoc-style inline tags (``{@link Foo#bar()}``, ``{@code a < b}``) must
reach the downstream renderer byte for byte. :func:`extract_regions` swaps
each of them for an opaque token made only of ASCII letters and digits, which
Markdown treats as an ordinary word; :func:`reinsert_regions` swaps the
originals back into the converted HTML.

Example
-------
>>> from mddoclet.pipeline.regions import extract_regions, reinsert_regions
>>> text = "Use {@link Foo} *now*"
>>> sanitized, regions = extract_regions(text)
>>> "{@" in sanitized
False
>>> reinsert_regions(sanitized, regions) == text
True
"""

from __future__ import annotations

import dataclasses as dc
import re
import secrets

from mddoclet.errors import ConsistencyError

REGION_OPEN = "{@"
TOKEN_PREFIX = "mdd"
TOKEN_SUFFIX = "r"
ORDINAL_WIDTH = 6


@dc.dataclass(slots=True)
class RegionMap:
    """Placeholder tokens of one extraction pass and the text they replace.

    Attributes
    ----------
    prefix : str
        Random prefix shared by every token of the pass.
    regions : dict[str, str]
        Mapping of placeholder token to the original region text, in the
        order the regions appear.
    """

    prefix: str
    regions: dict[str, str] = dc.field(default_factory=dict)

    def token(self, ordinal: int) -> str:
        """Return the fixed-width token for ``ordinal``."""
        return f"{self.prefix}{ordinal:0{ORDINAL_WIDTH}d}"

    def add(self, original: str) -> str:
        """Record ``original`` under a fresh token and return the token."""
        token = self.token(len(self.regions))
        self.regions[token] = original
        return token

    @property
    def pattern(self) -> re.Pattern[str]:
        """Return a regex matching any token of this pass."""
        return re.compile(re.escape(self.prefix) + rf"\d{{{ORDINAL_WIDTH}}}")

    def __len__(self) -> int:
        return len(self.regions)


def _new_prefix(text: str) -> str:
    """Return a random token prefix that does not occur in ``text``."""
    while True:
        prefix = f"{TOKEN_PREFIX}{secrets.token_hex(8)}{TOKEN_SUFFIX}"
        if prefix not in text:
            return prefix


def _region_end(text: str, start: int) -> int:
    """Return the index just past the region opened at ``start``.

    Braces nest; an unterminated region runs to the end of ``text``.
    """
    depth = 0
    for index in range(start, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1
    return len(text)


def extract_regions(text: str) -> tuple[str, RegionMap]:
    """Replace every inline tag region in ``text`` with a placeholder token.

    Parameters
    ----------
    text : str
        Raw comment text.

    Returns
    -------
    tuple[str, RegionMap]
        The sanitized text and the map needed to restore it.
    """
    regions = RegionMap(prefix=_new_prefix(text))
    pieces: list[str] = []
    cursor = 0
    while True:
        start = text.find(REGION_OPEN, cursor)
        if start < 0:
            break
        end = _region_end(text, start)
        pieces.append(text[cursor:start])
        pieces.append(regions.add(text[start:end]))
        cursor = end
    pieces.append(text[cursor:])
    return "".join(pieces), regions


def reinsert_regions(text: str, regions: RegionMap) -> str:
    """Restore the original region text for every token in ``text``.

    Raises
    ------
    ConsistencyError
        If ``text`` holds a token of this pass that was never recorded.
    """
    if not regions.regions:
        return text

    def _restore(match: re.Match[str]) -> str:
        token = match.group(0)
        try:
            return regions.regions[token]
        except KeyError as exc:
            msg = f"Placeholder {token!r} has no recorded inline tag."
            raise ConsistencyError(msg) from exc

    return regions.pattern.sub(_restore, text)


__all__ = ["REGION_OPEN", "RegionMap", "extract_regions", "reinsert_regions"]
