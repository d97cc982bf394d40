"""Strip the one-space indentation that doc comment syntax leaves behind.

A comment written as ``/**`` followed by `` * Title`` lines reaches the
pipeline with one leading space on every line, which stops Markdown from
recognising headings and shifts code blocks. Removing exactly one U+0020 per
line compensates. The overview document is written as plain Markdown and is
left alone.
"""

from __future__ import annotations

import re

LEADING_SPACE_PATTERN = re.compile(r"(\A|\r\n|\r|\n) ")


def normalize_leading_space(body: str, *, is_overview: bool = False) -> str:
    """Remove one leading space character from every line of ``body``.

    Parameters
    ----------
    body : str
        Comment text; line separators (``\\n``, ``\\r\\n``, ``\\r``) are kept.
    is_overview : bool, optional
        When ``True`` the text is returned unchanged.

    Returns
    -------
    str
        The normalized comment text.

    Examples
    --------
    >>> normalize_leading_space(" Title\\n =====\\n\\n  code")
    'Title\\n=====\\n\\n code'
    >>> normalize_leading_space(" Title", is_overview=True)
    ' Title'
    """
    if is_overview:
        return body
    return LEADING_SPACE_PATTERN.sub(r"\1", body)


__all__ = ["normalize_leading_space"]
