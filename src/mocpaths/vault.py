"""Filesystem corpus: a directory of markdown notes."""

from __future__ import annotations

import logging
import posixpath
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .models import Document, DocumentId, Folder, Heading, LinkOccurrence
from .parser import ParseError, parse_note, strip_subpath

log = logging.getLogger(__name__)

ROOT_FOLDER = "/"


@dataclass(frozen=True)
class _Snapshot:
    documents: dict[DocumentId, Document] = field(default_factory=dict)
    folders: dict[DocumentId, Folder] = field(default_factory=dict)
    backlinks: dict[DocumentId, list[DocumentId]] = field(default_factory=dict)
    # Lower-cased path suffix ("note.md", "sub/note.md", ...) -> ids ending in it
    suffixes: dict[str, list[DocumentId]] = field(default_factory=dict)


def _is_hidden(rel_path: Path) -> bool:
    return any(part.startswith(".") for part in rel_path.parts)


def build_suffix_index(doc_ids: list[DocumentId]) -> dict[str, list[DocumentId]]:
    """Map every whole-segment path suffix of each id to the ids carrying it.

    "a/b/Note.md" is filed under "note.md", "b/note.md" and "a/b/note.md".
    """
    index: dict[str, list[DocumentId]] = {}
    for doc_id in doc_ids:
        parts = doc_id.lower().split("/")
        for start in range(len(parts)):
            index.setdefault("/".join(parts[start:]), []).append(doc_id)
    return index


class VaultCorpus:
    """Corpus backed by markdown files under a root directory.

    Document ids are vault-relative POSIX paths including the ``.md``
    extension. The index is built eagerly and replaced as a whole by
    :meth:`reload`.
    """

    def __init__(self, root: Path) -> None:
        self._root = Path(root)
        self._lock = threading.Lock()
        self._snapshot = _Snapshot()
        self.reload()

    @property
    def root(self) -> Path:
        return self._root

    def reload(self) -> None:
        """Re-scan the vault and swap in a fresh index."""
        snapshot = self._build_snapshot()
        with self._lock:
            self._snapshot = snapshot
        log.debug("Indexed %d notes under %s", len(snapshot.documents), self._root)

    def _build_snapshot(self) -> _Snapshot:
        documents: dict[DocumentId, Document] = {}
        folders: dict[DocumentId, Folder] = {ROOT_FOLDER: Folder(id=ROOT_FOLDER)}

        if not self._root.is_dir():
            log.warning("Vault root does not exist: %s", self._root)
            return _Snapshot(folders=folders)

        for md_file in sorted(self._root.rglob("*.md")):
            rel_path = md_file.relative_to(self._root)
            if _is_hidden(rel_path):
                continue
            doc_id = rel_path.as_posix()
            try:
                documents[doc_id] = parse_note(md_file, doc_id)
            except (ParseError, OSError, UnicodeDecodeError) as e:
                log.warning("Indexing %s without metadata: %s", doc_id, e)
                documents[doc_id] = Document(id=doc_id)
            self._register_folders(folders, doc_id)

        snapshot = _Snapshot(
            documents=documents,
            folders=folders,
            suffixes=build_suffix_index(list(documents)),
        )
        return _Snapshot(
            documents=documents,
            folders=folders,
            backlinks=self._build_backlinks(snapshot),
            suffixes=snapshot.suffixes,
        )

    @staticmethod
    def _register_folders(folders: dict[DocumentId, Folder], doc_id: DocumentId) -> None:
        child = doc_id
        parent = posixpath.dirname(doc_id) or ROOT_FOLDER
        while True:
            folder = folders.setdefault(parent, Folder(id=parent))
            if child not in folder.children:
                folder.children.append(child)
            if parent == ROOT_FOLDER:
                break
            child = parent
            parent = posixpath.dirname(parent) or ROOT_FOLDER

    def _build_backlinks(self, snapshot: _Snapshot) -> dict[DocumentId, list[DocumentId]]:
        backlinks: dict[DocumentId, set[DocumentId]] = {}
        for doc in snapshot.documents.values():
            for occurrence in [*doc.links, *doc.frontmatter_links]:
                target = self._resolve(snapshot, occurrence.link, doc.id)
                if target is None or target == doc.id:
                    continue
                backlinks.setdefault(target, set()).add(doc.id)
        return {target: sorted(sources) for target, sources in backlinks.items()}

    # ─────────────────────────────────────────────────────────────────────
    # Link resolution
    # ─────────────────────────────────────────────────────────────────────

    @staticmethod
    def _lookup(snapshot: _Snapshot, linkpath: str, source_id: DocumentId) -> DocumentId | None:
        """First note matching ``linkpath`` as seen from ``source_id``."""
        linkpath = linkpath.replace("\\", "/").strip()
        if linkpath.startswith(("./", "../")):
            source_dir = posixpath.dirname(source_id)
            linkpath = posixpath.normpath(posixpath.join(source_dir, linkpath))
        linkpath = linkpath.lstrip("/")
        if not linkpath:
            return None

        # Bare names go through the folder preference below
        if "/" in linkpath and linkpath in snapshot.documents:
            return linkpath

        candidates = snapshot.suffixes.get(linkpath.lower())
        if not candidates:
            return None

        source_dir = posixpath.dirname(source_id)
        return min(candidates, key=lambda doc_id: (posixpath.dirname(doc_id) != source_dir, len(doc_id), doc_id))

    def _resolve(self, snapshot: _Snapshot, reference: str, source_id: DocumentId) -> DocumentId | None:
        linkpath = strip_subpath(reference)
        dest = self._lookup(snapshot, linkpath, source_id)
        if dest is None and not linkpath.endswith(".md"):
            dest = self._lookup(snapshot, linkpath + ".md", source_id)
        return dest

    def resolve_link(self, reference: str, source_id: DocumentId) -> DocumentId | None:
        return self._resolve(self._snapshot, reference, source_id)

    # ─────────────────────────────────────────────────────────────────────
    # Corpus lookups
    # ─────────────────────────────────────────────────────────────────────

    def get_entry(self, doc_id: DocumentId) -> Document | Folder | None:
        snapshot = self._snapshot
        return snapshot.documents.get(doc_id) or snapshot.folders.get(doc_id)

    def document_exists(self, doc_id: DocumentId) -> bool:
        return doc_id in self._snapshot.documents

    def get_frontmatter(self, doc_id: DocumentId) -> dict[str, Any] | None:
        doc = self._snapshot.documents.get(doc_id)
        return doc.frontmatter if doc else None

    def get_tags(self, doc_id: DocumentId) -> set[str]:
        doc = self._snapshot.documents.get(doc_id)
        return set(doc.tags) if doc else set()

    def get_backlinks(self, doc_id: DocumentId) -> list[DocumentId]:
        return list(self._snapshot.backlinks.get(doc_id, []))

    def get_headings(self, doc_id: DocumentId) -> list[Heading]:
        doc = self._snapshot.documents.get(doc_id)
        return list(doc.headings) if doc else []

    def get_outgoing_links(self, doc_id: DocumentId) -> list[LinkOccurrence]:
        doc = self._snapshot.documents.get(doc_id)
        return list(doc.links) if doc else []

    def document_ids(self) -> list[DocumentId]:
        return sorted(self._snapshot.documents)
