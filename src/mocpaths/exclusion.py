"""Folder and tag based exclusion of notes from path calculation."""

from __future__ import annotations

from .config import PathSettings
from .corpus import Corpus
from .models import Document, DocumentId


class ExclusionFilter:
    """Decides whether a note takes part in any graph operation."""

    def __init__(self, corpus: Corpus, settings: PathSettings) -> None:
        self._corpus = corpus
        self._settings = settings

    def is_excluded(self, doc_id: DocumentId) -> bool:
        """Check folder prefixes and tags for ``doc_id``.

        Notes missing from the corpus are never excluded.
        """
        entry = self._corpus.get_entry(doc_id)
        if not isinstance(entry, Document):
            return False

        folder = entry.folder
        if any(folder.startswith(prefix) for prefix in self._settings.excluded_folder_list):
            return True

        excluded_tags = self._settings.excluded_tag_set
        if excluded_tags and excluded_tags & self._corpus.get_tags(doc_id):
            return True

        return False
