"""Link extraction from note bodies and frontmatter."""

import re
from typing import Any
from urllib.parse import unquote

from ..models import LinkOccurrence

# Pattern for [[link]] syntax (and ![[embed]]) - captures content between double brackets
WIKILINK_PATTERN = re.compile(r"!?\[\[([^\[\]]+)\]\]")

# Pattern for [text](target) markdown links
MARKDOWN_LINK_PATTERN = re.compile(r"!?\[[^\[\]]*\]\(<?([^()<>\s]+)>?\)")

ALIAS_PATTERN = re.compile(r"\|.*$", re.DOTALL)

FENCE_PATTERN = re.compile(r"^\s*(```|~~~)")


def strip_alias(reference: str) -> str:
    """Drop an alias suffix: "Target|Alias" -> "Target"."""
    return ALIAS_PATTERN.sub("", reference)


def strip_subpath(reference: str) -> str:
    """Drop a heading or block suffix: "Target#Section" -> "Target"."""
    return reference.split("#", 1)[0]


def parse_link_reference(value: Any) -> str | None:
    """Turn a frontmatter property value into a bare link reference.

    "[[Target|Alias]]" -> "Target". Values that are not strings cannot be
    link references and yield None.
    """
    if not isinstance(value, str):
        return None
    reference = strip_alias(value).replace("[[", "", 1).replace("]]", "", 1).strip()
    return reference or None


def _is_local_target(target: str) -> bool:
    return "://" not in target and not target.startswith(("mailto:", "#"))


def iter_body_lines(content: str):
    """Yield (line_number, line) for lines outside fenced code blocks."""
    in_fence = False
    for number, line in enumerate(content.splitlines()):
        if FENCE_PATTERN.match(line):
            in_fence = not in_fence
            continue
        if not in_fence:
            yield number, line


def extract_link_occurrences(content: str) -> list[LinkOccurrence]:
    """Extract every outgoing link from markdown content, in document order.

    Args:
        content: Markdown body (without frontmatter).

    Returns:
        List of LinkOccurrence with 0-based line numbers.
    """
    occurrences: list[LinkOccurrence] = []
    for number, line in iter_body_lines(content):
        found: list[tuple[int, LinkOccurrence]] = []
        for match in WIKILINK_PATTERN.finditer(line):
            target = strip_alias(match.group(1)).strip()
            if target:
                found.append(
                    (match.start(), LinkOccurrence(link=target, original=match.group(0), line=number))
                )
        for match in MARKDOWN_LINK_PATTERN.finditer(line):
            target = unquote(match.group(1)).strip()
            if target and _is_local_target(target):
                found.append(
                    (match.start(), LinkOccurrence(link=target, original=match.group(0), line=number))
                )
        occurrences.extend(occurrence for _, occurrence in sorted(found, key=lambda item: item[0]))
    return occurrences


def flatten_property(value: Any) -> list[Any]:
    """Flatten a frontmatter property value into its individual items.

    An unquoted ``up: [[Target]]`` is read by YAML as ``[["Target"]]``, so
    nested lists are unwrapped down to their scalar items.
    """
    if isinstance(value, list):
        return [item for sub in value for item in flatten_property(sub)]
    if value is None or value == "":
        return []
    return [value]


def _iter_strings(value: Any, list_depth: int = 0):
    if isinstance(value, str):
        yield value, list_depth
    elif isinstance(value, list):
        for item in value:
            yield from _iter_strings(item, list_depth + 1)
    elif isinstance(value, dict):
        for item in value.values():
            yield from _iter_strings(item, list_depth)


def extract_frontmatter_links(metadata: dict[str, Any]) -> list[LinkOccurrence]:
    """Extract wikilinks written as frontmatter property values.

    Text two lists deep is an unquoted ``[[Target]]`` and counts as a link.
    """
    occurrences: list[LinkOccurrence] = []
    for value in metadata.values():
        for text, list_depth in _iter_strings(value):
            matches = list(WIKILINK_PATTERN.finditer(text))
            for match in matches:
                target = strip_alias(match.group(1)).strip()
                if target:
                    occurrences.append(LinkOccurrence(link=target, original=match.group(0), line=-1))
            if not matches and list_depth >= 2:
                target = strip_alias(text).strip()
                if target:
                    occurrences.append(LinkOccurrence(link=target, original=f"[[{text}]]", line=-1))
    return occurrences
