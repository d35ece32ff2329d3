"""Core entry point wiring the corpus, settings and caches together.

Presentation layers (CLI, watchers) should only talk to :class:`MocPaths`.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from .cache import PathCaches
from .config import PathSettings, apply_settings_update
from .corpus import Corpus
from .exclusion import ExclusionFilter
from .models import DocumentId, NotePath
from .parents import ParentResolver, ParentSet
from .paths import PathEnumerator

log = logging.getLogger(__name__)


class MocPaths:
    """Paths-to-MOC service for one corpus."""

    def __init__(
        self,
        corpus: Corpus,
        settings: PathSettings | None = None,
        caches: PathCaches | None = None,
    ) -> None:
        self.corpus = corpus
        self.caches = caches or PathCaches()
        self._settings_lock = threading.Lock()
        self._configure(settings or PathSettings())

    def _configure(self, settings: PathSettings) -> None:
        self._settings = settings
        self._exclusion = ExclusionFilter(self.corpus, settings)
        self._resolver = ParentResolver(self.corpus, settings, self._exclusion, self.caches.parents)
        self._enumerator = PathEnumerator(settings, self._exclusion, self._resolver, self.caches.paths)

    @property
    def settings(self) -> PathSettings:
        return self._settings

    def is_excluded(self, doc_id: DocumentId) -> bool:
        return self._exclusion.is_excluded(doc_id)

    def get_parents(self, doc_id: DocumentId) -> ParentSet:
        return self._resolver.get_parents(doc_id)

    def calculate_paths(self, doc_id: DocumentId) -> list[NotePath]:
        return self._enumerator.calculate_paths(doc_id)

    def invalidate(self) -> None:
        """Drop every cached parent set and path."""
        self.caches.clear()
        log.debug("Path caches invalidated")

    def refresh(self, active_id: DocumentId | None = None) -> list[NotePath]:
        """Clear caches and recompute paths for the active note, if any."""
        self.invalidate()
        if active_id is None or self.is_excluded(active_id):
            return []
        return self.calculate_paths(active_id)

    def update_settings(self, **changes: Any) -> PathSettings:
        """Apply validated setting changes.

        Any effective change clears both caches, since parents and paths
        computed under the old rules are no longer valid.
        """
        with self._settings_lock:
            updated = apply_settings_update(self._settings, changes)
            if updated != self._settings:
                self._configure(updated)
                self.invalidate()
        return self._settings
