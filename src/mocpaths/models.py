"""Pydantic models for corpus entries."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

# Vault-relative POSIX path, e.g. "Projects/Garden.md"
DocumentId = str

# Root-first chain of documents ending at the start document
NotePath = tuple[DocumentId, ...]


class Heading(BaseModel):
    """A section header inside a note."""

    heading: str
    level: int = Field(ge=1, le=6)
    line: int  # 0-based line within the note body


class LinkOccurrence(BaseModel):
    """An outgoing link found in a note."""

    link: str  # Link target as written, alias removed (may carry a #subpath)
    original: str  # Raw source text, e.g. "[[Target|Alias]]"
    line: int  # 0-based line within the note body; -1 for frontmatter links


class Document(BaseModel):
    """A markdown note in the corpus."""

    kind: Literal["document"] = "document"
    id: DocumentId
    frontmatter: dict[str, Any] = Field(default_factory=dict)
    tags: set[str] = Field(default_factory=set)  # Normalized frontmatter + inline tags
    headings: list[Heading] = Field(default_factory=list)
    links: list[LinkOccurrence] = Field(default_factory=list)
    frontmatter_links: list[LinkOccurrence] = Field(default_factory=list)

    @property
    def name(self) -> str:
        return self.id.rsplit("/", 1)[-1]

    @property
    def basename(self) -> str:
        name = self.name
        return name[:-3] if name.endswith(".md") else name

    @property
    def folder(self) -> str:
        if "/" not in self.id:
            return "/"
        return self.id.rsplit("/", 1)[0]


class Folder(BaseModel):
    """A directory in the corpus."""

    kind: Literal["folder"] = "folder"
    id: DocumentId
    children: list[DocumentId] = Field(default_factory=list)


CorpusEntry = Annotated[Document | Folder, Field(discriminator="kind")]
