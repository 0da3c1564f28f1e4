"""Data models for citation formatting and disambiguation workflows."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

NO_RESULTS_TEXT = "No results found"
DECLINED_TEXT = "Multiple references found"


@dataclass(frozen=True)
class Author:
    """A single author in canonical form."""

    family_name: str = "Unknown"
    given_name: Optional[str] = None


@dataclass(frozen=True)
class BibliographicRecord:
    """One resolved paper as returned by the lookup service."""

    title: Optional[str] = None
    year: Optional[str] = None
    venue_name: Optional[str] = None
    authors: Tuple[Author, ...] = ()


@dataclass(frozen=True)
class Candidate:
    """A possible match for an ambiguous reference line."""

    record: BibliographicRecord
    formatted: str = ""


@dataclass(frozen=True)
class Formatted:
    text: str
    record: Optional[BibliographicRecord] = None

    @property
    def display_text(self) -> str:
        return self.text


@dataclass(frozen=True)
class NotFound:
    query: str

    @property
    def display_text(self) -> str:
        return NO_RESULTS_TEXT


@dataclass(frozen=True)
class PendingChoice:
    """A reference that matched several papers and awaits a user decision."""

    query: str
    candidates: Tuple[Candidate, ...]
    current_index: int = 0
    current_formatted_text: str = ""

    @property
    def current(self) -> Candidate:
        return self.candidates[self.current_index]

    @property
    def display_text(self) -> str:
        return self.current_formatted_text


@dataclass(frozen=True)
class Declined:
    query: str = ""

    @property
    def display_text(self) -> str:
        return DECLINED_TEXT


ReferenceSlot = Union[Formatted, NotFound, PendingChoice, Declined]


@dataclass
class NotFoundEntry:
    index: int
    query: str


@dataclass
class MultipleMatch:
    index: int
    query: str
    options: List[Candidate] = field(default_factory=list)


@dataclass
class LookupResult:
    """Container for a lookup service response, indexed by submitted line."""

    formatted: List[str] = field(default_factory=list)
    papers: List[Optional[BibliographicRecord]] = field(default_factory=list)
    not_found: List[NotFoundEntry] = field(default_factory=list)
    multiple_matches: List[MultipleMatch] = field(default_factory=list)


@dataclass
class ExportArtifact:
    content: bytes
    file_name: str
