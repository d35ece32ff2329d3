"""Enumeration of every ancestry path from a note up to its root MOCs."""

from __future__ import annotations

import logging
from collections import deque

from .cache import KeyedCache, NullCache
from .config import PathSettings
from .exclusion import ExclusionFilter
from .models import DocumentId, NotePath
from .parents import ParentResolver

log = logging.getLogger(__name__)


def filter_sub_paths(paths: list[NotePath]) -> list[NotePath]:
    """Drop duplicates and any path that is a trailing suffix of another.

    Paths are root-first, so ``(B, A)`` is dropped when ``(C, B, A)`` is
    present. Order of the surviving paths is preserved.
    """
    unique = list(dict.fromkeys(paths))
    return [
        path
        for index, path in enumerate(unique)
        if not any(
            other_index != index and len(other) >= len(path) and other[len(other) - len(path):] == path
            for other_index, other in enumerate(unique)
        )
    ]


class PathEnumerator:
    """Breadth-first search from a note through its parents to the roots."""

    def __init__(
        self,
        settings: PathSettings,
        exclusion: ExclusionFilter,
        resolver: ParentResolver,
        cache: KeyedCache[DocumentId, list[NotePath]] | None = None,
    ) -> None:
        self._settings = settings
        self._exclusion = exclusion
        self._resolver = resolver
        self._cache = cache if cache is not None else NullCache("path cache")

    def calculate_paths(self, start_id: DocumentId) -> list[NotePath]:
        """Return every maximal root-first path ending at ``start_id``.

        Excluded notes have no paths. A note without parents has no paths
        either: a path needs at least one ancestor.
        """
        if self._exclusion.is_excluded(start_id):
            return []
        if not self._settings.enable_caching:
            return self._search(start_id)
        return list(self._cache.get_or_compute(start_id, lambda: self._search(start_id)))

    def _search(self, start_id: DocumentId) -> list[NotePath]:
        max_depth = self._settings.max_depth
        found: list[NotePath] = []
        # Each chain is root-first: the note being expanded comes first
        queue: deque[tuple[DocumentId, NotePath]] = deque([(start_id, (start_id,))])

        while queue:
            current_id, chain = queue.popleft()
            if len(chain) > max_depth:
                continue

            parents = self._resolver.get_parents(current_id)
            for parent_id in parents:
                if parent_id not in chain:
                    queue.append((parent_id, (parent_id, *chain)))
            if not parents and len(chain) > 1:
                found.append(chain)

        paths = filter_sub_paths(found)
        log.debug("Found %d path(s) for %s", len(paths), start_id)
        return paths
