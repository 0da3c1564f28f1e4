"""Wire models for the citation backend API."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import BibliographicRecord, Candidate, LookupResult, MultipleMatch, NotFoundEntry
from .normalization import normalize_record

RECORD_FIELDS = {"title", "year", "journal", "venue", "authors"}


class PaperPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: Optional[str] = None
    year: Optional[str] = None
    journal: Optional[str] = None
    venue: Optional[str] = None
    authors: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("year", mode="before")
    @classmethod
    def coerce_year(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("authors", mode="before")
    @classmethod
    def drop_null_authors(cls, value: Any) -> List[Dict[str, Any]]:
        return [author for author in value or [] if isinstance(author, dict)]

    def to_record(self) -> Optional[BibliographicRecord]:
        fields = self.model_dump(include=RECORD_FIELDS)
        # An all-empty paper is the "No results found" placeholder, not a record.
        if not any(fields.values()):
            return None
        return normalize_record(fields)


class MatchOptionPayload(PaperPayload):
    formatted: Optional[str] = ""

    def to_candidate(self) -> Candidate:
        return Candidate(record=self.to_record() or BibliographicRecord(), formatted=self.formatted or "")


class NotFoundPayload(BaseModel):
    index: int
    query: str = ""


class MultipleMatchPayload(BaseModel):
    index: int
    query: str = ""
    options: List[MatchOptionPayload] = Field(default_factory=list)


class FormatResponsePayload(BaseModel):
    """Response body of ``POST /api/format``."""

    model_config = ConfigDict(populate_by_name=True)

    formatted: List[str] = Field(default_factory=list)
    papers: List[Optional[PaperPayload]] = Field(default_factory=list)
    not_found: List[NotFoundPayload] = Field(default_factory=list, alias="notFound")
    multiple_matches: List[MultipleMatchPayload] = Field(
        default_factory=list, alias="multipleMatches"
    )

    def to_result(self) -> LookupResult:
        return LookupResult(
            formatted=list(self.formatted),
            papers=[paper.to_record() if paper else None for paper in self.papers],
            not_found=[NotFoundEntry(index=it.index, query=it.query) for it in self.not_found],
            multiple_matches=[
                MultipleMatch(
                    index=it.index,
                    query=it.query,
                    options=[option.to_candidate() for option in it.options],
                )
                for it in self.multiple_matches
            ],
        )


class FormatRequestPayload(BaseModel):
    references: str
    format: str


class SelectMatchPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reference_index: int = Field(alias="referenceIndex")
    selected_option_index: int = Field(alias="selectedOptionIndex")
