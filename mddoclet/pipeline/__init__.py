"""Comment rewriting pipeline: normalization, sandboxing, tag rewrites, conversion."""

from .diagrams import DiagramRequest, DiagramRewriter, UnitContext
from .processor import CommentProcessor, TreeRenderer
from .references import ReferenceEntry, ReferenceForm, parse_reference, rewrite_reference
from .regions import RegionMap, extract_regions, reinsert_regions
from .whitespace import normalize_leading_space

__all__ = [
    "CommentProcessor",
    "DiagramRequest",
    "DiagramRewriter",
    "ReferenceEntry",
    "ReferenceForm",
    "RegionMap",
    "TreeRenderer",
    "UnitContext",
    "extract_regions",
    "normalize_leading_space",
    "parse_reference",
    "reinsert_regions",
    "rewrite_reference",
]
