"""Resolution of a note's immediate parents.

A parent is derived from four independent rules, each toggled in settings:

1. property-up: the note's own "up" properties link to the parent.
2. property-down: a backlinking note lists this note in its "down" properties.
3. MOC tag: a backlinking note carries one of the MOC tags.
4. header: a backlinking note links here under one of the configured headings.

Parents that are excluded never enter the result.
"""

from __future__ import annotations

import logging
from typing import Any

from .cache import KeyedCache, NullCache
from .config import PathSettings
from .corpus import Corpus
from .exclusion import ExclusionFilter
from .models import Document, DocumentId, Heading, LinkOccurrence
from .parser import flatten_property, parse_link_reference, strip_subpath

log = logging.getLogger(__name__)

ParentSet = tuple[DocumentId, ...]


def _property_values(frontmatter: dict[str, Any], name: str) -> list[Any]:
    return flatten_property(frontmatter.get(name))


def _under_header(line: int, headings: list[Heading], header_names: list[str]) -> bool:
    """True if ``line`` falls inside a section titled with one of the names."""
    for index, heading in enumerate(headings):
        if heading.heading not in header_names:
            continue
        next_heading = headings[index + 1] if index + 1 < len(headings) else None
        if heading.line < line and (next_heading is None or line < next_heading.line):
            return True
    return False


def _add(parents: list[DocumentId], doc_id: DocumentId) -> None:
    if doc_id not in parents:
        parents.append(doc_id)


class ParentResolver:
    """Computes (and memoizes) the parent set of a note."""

    def __init__(
        self,
        corpus: Corpus,
        settings: PathSettings,
        exclusion: ExclusionFilter,
        cache: KeyedCache[DocumentId, ParentSet] | None = None,
    ) -> None:
        self._corpus = corpus
        self._settings = settings
        self._exclusion = exclusion
        self._cache = cache if cache is not None else NullCache("parent cache")

    def get_parents(self, doc_id: DocumentId) -> ParentSet:
        """Return the parents of ``doc_id`` in rule order, without duplicates."""
        if not self._settings.enable_caching:
            return self._compute(doc_id)
        return self._cache.get_or_compute(doc_id, lambda: self._compute(doc_id))

    def _compute(self, doc_id: DocumentId) -> ParentSet:
        entry = self._corpus.get_entry(doc_id)
        if not isinstance(entry, Document):
            return ()

        parents: list[DocumentId] = []
        if self._settings.enable_property_up:
            for parent in self.property_up_parents(entry):
                _add(parents, parent)
        if self._settings.enable_property_down:
            for parent in self.property_down_parents(entry):
                _add(parents, parent)
        if self._settings.enable_moc_tags:
            for parent in self.moc_tag_parents(entry):
                _add(parents, parent)
        if self._settings.enable_header_name:
            for parent in self.header_parents(entry):
                _add(parents, parent)
        return tuple(parents)

    # ─────────────────────────────────────────────────────────────────────
    # Rules
    # ─────────────────────────────────────────────────────────────────────

    def property_up_parents(self, doc: Document) -> list[DocumentId]:
        """Notes linked from this note's up properties."""
        parents: list[DocumentId] = []
        frontmatter = self._corpus.get_frontmatter(doc.id) or {}
        for name in self._settings.up_properties:
            for value in _property_values(frontmatter, name):
                target = self._resolve_reference(value, doc.id)
                if target and not self._exclusion.is_excluded(target):
                    _add(parents, target)
        return parents

    def property_down_parents(self, doc: Document) -> list[DocumentId]:
        """Backlinking notes whose down properties point at this note."""
        parents: list[DocumentId] = []
        for source_id in self._candidate_sources(doc):
            frontmatter = self._corpus.get_frontmatter(source_id) or {}
            for name in self._settings.down_properties:
                values = _property_values(frontmatter, name)
                if any(self._resolve_reference(value, source_id) == doc.id for value in values):
                    _add(parents, source_id)
                    break
        return parents

    def moc_tag_parents(self, doc: Document) -> list[DocumentId]:
        """Backlinking notes tagged as MOCs.

        A MOC that itself names this note as its up-parent is skipped, so a
        tagged hub filed beneath a note does not also become its parent.
        """
        moc_tags = self._settings.moc_tag_set
        if not moc_tags:
            return []

        parents: list[DocumentId] = []
        for source_id in self._candidate_sources(doc):
            if not moc_tags & self._corpus.get_tags(source_id):
                continue
            if not self._is_linked_as_up(source_id, doc.id):
                _add(parents, source_id)
        return parents

    def header_parents(self, doc: Document) -> list[DocumentId]:
        """Backlinking notes that link here under a configured heading."""
        header_names = self._settings.header_names
        if not header_names:
            return []

        parents: list[DocumentId] = []
        for source_id in self._candidate_sources(doc):
            headings = self._corpus.get_headings(source_id)
            if not headings:
                continue
            for link in self._corpus.get_outgoing_links(source_id):
                if self._links_to(link, doc, source_id) and _under_header(link.line, headings, header_names):
                    _add(parents, source_id)
                    break
        return parents

    # ─────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────

    def _candidate_sources(self, doc: Document) -> list[DocumentId]:
        try:
            backlinks = self._corpus.get_backlinks(doc.id)
        except Exception as e:
            log.warning("Could not read backlinks for %s: %s", doc.id, e)
            return []
        return [source_id for source_id in backlinks if not self._exclusion.is_excluded(source_id)]

    def _resolve_reference(self, value: Any, source_id: DocumentId) -> DocumentId | None:
        """Resolve one property value; failures yield None and are logged."""
        reference = parse_link_reference(value)
        if reference is None:
            log.warning("Skipping non-link value %r in %s", value, source_id)
            return None
        try:
            target = self._corpus.resolve_link(reference, source_id)
        except Exception as e:
            log.warning("Error resolving link %r in %s: %s", reference, source_id, e)
            return None
        if target is None:
            log.debug("Unresolved link %r in %s", reference, source_id)
        return target

    def _is_linked_as_up(self, source_id: DocumentId, target_id: DocumentId) -> bool:
        frontmatter = self._corpus.get_frontmatter(source_id) or {}
        for name in self._settings.up_properties:
            for value in _property_values(frontmatter, name):
                if self._resolve_reference(value, source_id) == target_id:
                    return True
        return False

    def _links_to(self, link: LinkOccurrence, doc: Document, source_id: DocumentId) -> bool:
        name = strip_subpath(link.link).strip()
        if name in (doc.basename, doc.name):
            return True
        try:
            return self._corpus.resolve_link(link.link, source_id) == doc.id
        except Exception as e:
            log.warning("Error resolving link %r in %s: %s", link.link, source_id, e)
            return False
