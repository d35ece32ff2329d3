"""Contract for the host that stores notes and indexes their links."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from .models import CorpusEntry, DocumentId, Heading, LinkOccurrence


@runtime_checkable
class Corpus(Protocol):
    """Read-only view of a note collection.

    Every lookup for an unknown id returns an empty value rather than raising.
    """

    def get_entry(self, doc_id: DocumentId) -> CorpusEntry | None: ...

    def document_exists(self, doc_id: DocumentId) -> bool: ...

    def resolve_link(self, reference: str, source_id: DocumentId) -> DocumentId | None:
        """Resolve a link reference written in ``source_id``.

        Tries the reference as written, then with ``.md`` appended when it
        has no markdown extension.
        """
        ...

    def get_frontmatter(self, doc_id: DocumentId) -> dict[str, Any] | None: ...

    def get_tags(self, doc_id: DocumentId) -> set[str]: ...

    def get_backlinks(self, doc_id: DocumentId) -> list[DocumentId]: ...

    def get_headings(self, doc_id: DocumentId) -> list[Heading]: ...

    def get_outgoing_links(self, doc_id: DocumentId) -> list[LinkOccurrence]: ...
