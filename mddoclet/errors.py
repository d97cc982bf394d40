"""Exception hierarchy shared by the comment rewriting pipeline.

Errors fall into two groups. Fatal errors (:class:`ConversionTimeout`,
:class:`ConsistencyError`) abort the whole run, because continuing would
silently emit incomplete documentation. Recoverable errors
(:class:`DiagramRenderError`, :class:`MalformedReferenceTag`) are caught by
:class:`~mddoclet.pipeline.processor.CommentProcessor`, logged with the
offending unit and tag, and replaced by a local fallback.

Examples
--------
>>> from mddoclet.errors import ConversionTimeout
>>> err = ConversionTimeout("Markdown conversion exceeded 2.0s")
>>> err.locate("com.example.Foo (Foo.java:12)", "@return")
>>> str(err)
'Markdown conversion exceeded 2.0s [unit: com.example.Foo (Foo.java:12), tag: @return]'
"""

from __future__ import annotations


class DocletError(RuntimeError):
    """Base class for pipeline errors that can name their origin."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.unit: str | None = None
        self.slot: str | None = None

    def locate(self, unit: str, slot: str | None = None) -> None:
        """Record the documentation unit and tag slot that triggered the error.

        The first recorded location wins so that re-raising through nested
        handlers keeps the innermost context.
        """
        if self.unit is None:
            self.unit = unit
            self.slot = slot

    def __str__(self) -> str:
        if self.unit is None:
            return self.message
        where = f"unit: {self.unit}"
        if self.slot:
            where = f"{where}, tag: {self.slot}"
        return f"{self.message} [{where}]"


class ConversionTimeout(DocletError):
    """Raised when Markdown conversion does not finish within its time bound."""


class DiagramRenderError(DocletError):
    """Raised when the external diagram renderer fails for one diagram."""


class MalformedReferenceTag(DocletError, ValueError):
    """Raised for a quoted ``@see`` value that cannot be parsed."""


class ConsistencyError(DocletError):
    """Raised when an internal pipeline invariant is violated."""


__all__ = [
    "ConsistencyError",
    "ConversionTimeout",
    "DiagramRenderError",
    "DocletError",
    "MalformedReferenceTag",
]
