"""Markdown note parsing with YAML frontmatter support."""

import re
from pathlib import Path
from typing import Any

import frontmatter

from ..models import Document, DocumentId, Heading
from .links import extract_frontmatter_links, extract_link_occurrences, iter_body_lines

# ATX headings: "## Title" with optional closing hashes
HEADING_PATTERN = re.compile(r"^(#{1,6})[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$")

# Inline tags: "#tag", "#nested/tag"; must contain at least one non-digit
INLINE_TAG_PATTERN = re.compile(r"(?:^|(?<=\s))#([\w/-]*[^\W\d][\w/-]*)")


class ParseError(Exception):
    """Raised when a note cannot be read or parsed."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


def normalize_tag(tag: Any) -> str:
    """Lower-case and trim a tag, dropping a leading '#'."""
    text = str(tag).strip()
    if text.startswith("#"):
        text = text[1:]
    return text.strip().lower()


def frontmatter_tags(metadata: dict[str, Any]) -> list[str]:
    """Return the frontmatter ``tags`` property as a list.

    A single string becomes a one-element list; nested lists are flattened.
    """
    raw = metadata.get("tags")
    if raw is None:
        return []
    if not isinstance(raw, list):
        raw = [raw]

    tags: list[str] = []
    for item in raw:
        if isinstance(item, list):
            tags.extend(str(sub) for sub in item if sub is not None)
        elif item is not None:
            tags.append(str(item))
    return tags


def collect_tags(metadata: dict[str, Any], content: str) -> set[str]:
    """Union of frontmatter and inline tags, normalized."""
    tags = {normalize_tag(tag) for tag in frontmatter_tags(metadata)}
    for _, line in iter_body_lines(content):
        for match in INLINE_TAG_PATTERN.finditer(line):
            tags.add(normalize_tag(match.group(1)))
    tags.discard("")
    return tags


def extract_headings(content: str) -> list[Heading]:
    """Extract ATX headings with their level and line, in document order."""
    headings: list[Heading] = []
    for number, line in iter_body_lines(content):
        match = HEADING_PATTERN.match(line)
        if match:
            headings.append(Heading(heading=match.group(2).strip(), level=len(match.group(1)), line=number))
    return headings


def parse_note(path: Path, doc_id: DocumentId) -> Document:
    """Parse a markdown note into a Document.

    Args:
        path: Path to the markdown file.
        doc_id: Vault-relative id for the note.

    Returns:
        Document with frontmatter, tags, headings and links.

    Raises:
        ParseError: If the file cannot be read or has malformed frontmatter.
    """
    if not path.is_file():
        raise ParseError(path, "Path is not a file")

    try:
        post = frontmatter.load(str(path))
    except Exception as e:
        raise ParseError(path, f"Failed to parse frontmatter: {e}") from e

    metadata = dict(post.metadata) if isinstance(post.metadata, dict) else {}
    content = post.content

    return Document(
        id=doc_id,
        frontmatter=metadata,
        tags=collect_tags(metadata, content),
        headings=extract_headings(content),
        links=extract_link_occurrences(content),
        frontmatter_links=extract_frontmatter_links(metadata),
    )
