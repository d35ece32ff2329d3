"""Shared test fixtures for mocpaths test suite.

Design:
- tmp_vault: isolated vault directory in a temp directory
- write_note: writes a markdown note with YAML frontmatter
- make_service: builds a MocPaths service over tmp_vault
"""

import os
from pathlib import Path
from typing import Any, Callable, Generator

import pytest
import yaml

from mocpaths.config import PathSettings
from mocpaths.core import MocPaths
from mocpaths.vault import VaultCorpus


# ─────────────────────────────────────────────────────────────────────────────
# Core Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def tmp_vault(tmp_path: Path) -> Generator[Path, None, None]:
    """Create isolated vault directory.

    Clears MOCPATHS_* environment overrides for the duration of the test.
    """
    vault = tmp_path / "vault"
    vault.mkdir()

    saved = {key: os.environ.pop(key) for key in list(os.environ) if key.startswith("MOCPATHS_")}

    yield vault

    for key in [key for key in os.environ if key.startswith("MOCPATHS_")]:
        os.environ.pop(key)
    os.environ.update(saved)


@pytest.fixture
def make_service(tmp_vault: Path) -> Callable[..., MocPaths]:
    """Factory for a service over tmp_vault.

    Usage:
        def test_something(tmp_vault, make_service):
            write_note(tmp_vault, "A.md", up="[[B]]")
            service = make_service(max_depth=5)
    """
    def _make(**settings: Any) -> MocPaths:
        return MocPaths(VaultCorpus(tmp_vault), PathSettings(**settings))
    return _make


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions (for test code, not fixtures)
# ─────────────────────────────────────────────────────────────────────────────


def write_note(vault: Path, path: str, content: str = "", **frontmatter: Any) -> Path:
    """Helper to create a note, with frontmatter when keywords are given.

    Usage in tests:
        from conftest import write_note
        write_note(tmp_vault, "A.md", "Body", up="[[B]]", tags=["project"])
    """
    note_path = vault / path
    note_path.parent.mkdir(parents=True, exist_ok=True)

    text = content
    if frontmatter:
        header = yaml.safe_dump(frontmatter, sort_keys=False, allow_unicode=True)
        text = f"---\n{header}---\n\n{content}"
    note_path.write_text(text, encoding="utf-8")
    return note_path
