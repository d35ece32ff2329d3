"""Markdown parsing with frontmatter and link extraction."""

from .links import (
    extract_frontmatter_links,
    extract_link_occurrences,
    flatten_property,
    parse_link_reference,
    strip_alias,
    strip_subpath,
)
from .markdown import ParseError, collect_tags, extract_headings, normalize_tag, parse_note

__all__ = [
    "parse_note",
    "ParseError",
    "collect_tags",
    "extract_headings",
    "normalize_tag",
    "extract_link_occurrences",
    "extract_frontmatter_links",
    "flatten_property",
    "parse_link_reference",
    "strip_alias",
    "strip_subpath",
]
