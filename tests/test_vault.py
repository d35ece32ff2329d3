"""Tests for the filesystem corpus: parsing, link resolution and backlinks."""

from pathlib import Path

from conftest import write_note
from mocpaths.corpus import Corpus
from mocpaths.models import Document, Folder
from mocpaths.parser import (
    collect_tags,
    extract_frontmatter_links,
    extract_headings,
    extract_link_occurrences,
    flatten_property,
    parse_link_reference,
)
from mocpaths.vault import VaultCorpus, build_suffix_index


class TestParsing:
    def test_headings_with_levels_and_lines(self) -> None:
        content = "# Title\ntext\n## Subprojects ##\n\n###### Deep\n"

        headings = extract_headings(content)

        assert [(h.heading, h.level, h.line) for h in headings] == [
            ("Title", 1, 0),
            ("Subprojects", 2, 2),
            ("Deep", 6, 4),
        ]

    def test_code_fences_are_ignored(self) -> None:
        content = "```\n# not a heading\n[[NotALink]] #nottag\n```\n## Real\n[[Link]]\n"

        assert [h.heading for h in extract_headings(content)] == ["Real"]
        assert [occ.link for occ in extract_link_occurrences(content)] == ["Link"]
        assert collect_tags({}, content) == set()

    def test_link_forms(self) -> None:
        content = "See [[A|alias]] and ![[B#Part]]\n[C](Folder/C.md) [web](https://example.com)\n"

        links = extract_link_occurrences(content)

        assert [(occ.link, occ.line) for occ in links] == [
            ("A", 0),
            ("B#Part", 0),
            ("Folder/C.md", 1),
        ]
        assert links[0].original == "[[A|alias]]"

    def test_tags_union(self) -> None:
        tags = collect_tags({"tags": ["Project", "#MOC", ["Nested"]]}, "body #Inline/Sub and #2024 x#no")

        assert tags == {"project", "moc", "nested", "inline/sub"}

    def test_unquoted_wikilinks_in_frontmatter(self) -> None:
        # up: [[B]] parses as [["B"]]; tags: [x] stays a plain list
        links = extract_frontmatter_links({"up": [["B|Alias"]], "tags": ["x"], "related": "[[C]]"})

        assert [occ.link for occ in links] == ["B", "C"]
        assert flatten_property([[["B"]], "C", None]) == ["B", "C"]
        assert flatten_property(None) == []

    def test_parse_link_reference(self) -> None:
        assert parse_link_reference("[[Target|Alias]]") == "Target"
        assert parse_link_reference("Target") == "Target"
        assert parse_link_reference("[[ ]]") is None
        assert parse_link_reference(12) is None
        assert parse_link_reference(None) is None


class TestResolution:
    def test_bare_and_extension(self, tmp_vault: Path) -> None:
        write_note(tmp_vault, "Folder/Note.md", "")
        corpus = VaultCorpus(tmp_vault)

        assert corpus.resolve_link("Note", "Other.md") == "Folder/Note.md"
        assert corpus.resolve_link("Note.md", "Other.md") == "Folder/Note.md"
        assert corpus.resolve_link("Folder/Note", "Other.md") == "Folder/Note.md"
        assert corpus.resolve_link("Note#Heading", "Other.md") == "Folder/Note.md"
        assert corpus.resolve_link("Missing", "Other.md") is None

    def test_prefers_source_folder_then_shortest(self, tmp_vault: Path) -> None:
        write_note(tmp_vault, "Index.md", "")
        write_note(tmp_vault, "a/Index.md", "")
        write_note(tmp_vault, "b/c/Index.md", "")
        corpus = VaultCorpus(tmp_vault)

        assert corpus.resolve_link("Index", "a/Note.md") == "a/Index.md"
        assert corpus.resolve_link("Index", "b/c/Note.md") == "b/c/Index.md"
        assert corpus.resolve_link("Index", "z/Note.md") == "Index.md"

    def test_partial_paths_match_whole_segments_only(self, tmp_vault: Path) -> None:
        write_note(tmp_vault, "Area/Sub/Note.md", "")
        write_note(tmp_vault, "Other/Sub/Note.md", "")
        corpus = VaultCorpus(tmp_vault)

        assert corpus.resolve_link("sub/note", "Other/Sub/X.md") == "Other/Sub/Note.md"
        assert corpus.resolve_link("SUB/NOTE", "Z.md") == "Area/Sub/Note.md"
        assert corpus.resolve_link("ub/Note", "Z.md") is None

    def test_suffix_index(self) -> None:
        index = build_suffix_index(["a/b/Note.md", "Note.md"])

        assert index == {
            "note.md": ["a/b/Note.md", "Note.md"],
            "b/note.md": ["a/b/Note.md"],
            "a/b/note.md": ["a/b/Note.md"],
        }

    def test_resolution_order_in_a_large_vault(self, tmp_vault: Path) -> None:
        for i in range(200):
            write_note(tmp_vault, f"f{i}/Hub.md", "")
        write_note(tmp_vault, "Hub.md", "")
        write_note(tmp_vault, "f150/Child.md", "", up="[[Hub]]")
        corpus = VaultCorpus(tmp_vault)

        assert corpus.resolve_link("Hub", "f150/Child.md") == "f150/Hub.md"
        assert corpus.resolve_link("Hub", "elsewhere/Child.md") == "Hub.md"
        assert corpus.get_backlinks("f150/Hub.md") == ["f150/Child.md"]

    def test_relative_reference(self, tmp_vault: Path) -> None:
        write_note(tmp_vault, "a/Target.md", "")
        corpus = VaultCorpus(tmp_vault)

        assert corpus.resolve_link("../a/Target", "b/Note.md") == "a/Target.md"


class TestIndex:
    def test_backlinks_from_body_and_frontmatter(self, tmp_vault: Path) -> None:
        write_note(tmp_vault, "A.md", "")
        write_note(tmp_vault, "B.md", "Links to [[A]]")
        write_note(tmp_vault, "C.md", "", down=["[[A]]"])
        write_note(tmp_vault, "D.md", "Self [[D]] and nothing else")
        corpus = VaultCorpus(tmp_vault)

        assert corpus.get_backlinks("A.md") == ["B.md", "C.md"]
        assert corpus.get_backlinks("D.md") == []
        assert corpus.get_backlinks("Missing.md") == []

    def test_entries_are_documents_or_folders(self, tmp_vault: Path) -> None:
        write_note(tmp_vault, "Projects/Garden.md", "")
        corpus = VaultCorpus(tmp_vault)

        doc = corpus.get_entry("Projects/Garden.md")
        folder = corpus.get_entry("Projects")

        assert isinstance(doc, Document)
        assert doc.folder == "Projects"
        assert doc.basename == "Garden"
        assert isinstance(folder, Folder)
        assert folder.children == ["Projects/Garden.md"]
        assert corpus.get_entry("Nope.md") is None
        assert not corpus.document_exists("Projects")

    def test_hidden_directories_skipped(self, tmp_vault: Path) -> None:
        write_note(tmp_vault, ".obsidian/plugin.md", "")
        write_note(tmp_vault, "Visible.md", "")

        assert VaultCorpus(tmp_vault).document_ids() == ["Visible.md"]

    def test_broken_frontmatter_indexed_without_metadata(self, tmp_vault: Path) -> None:
        (tmp_vault / "Broken.md").write_text("---\ntags: [unclosed\n---\n\nBody [[A]]\n")
        write_note(tmp_vault, "A.md", "")
        corpus = VaultCorpus(tmp_vault)

        assert corpus.document_exists("Broken.md")
        assert corpus.get_frontmatter("Broken.md") == {}
        assert corpus.get_tags("Broken.md") == set()

    def test_reload_picks_up_new_notes(self, tmp_vault: Path) -> None:
        corpus = VaultCorpus(tmp_vault)
        assert not corpus.document_exists("New.md")

        write_note(tmp_vault, "New.md", "", tags="fresh")
        corpus.reload()

        assert corpus.document_exists("New.md")
        assert corpus.get_tags("New.md") == {"fresh"}

    def test_satisfies_corpus_contract(self, tmp_vault: Path) -> None:
        assert isinstance(VaultCorpus(tmp_vault), Corpus)
