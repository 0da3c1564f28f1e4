"""Collaborator interfaces used by the resolution coordinator."""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .models import (
    BibliographicRecord,
    Candidate,
    ExportArtifact,
    LookupResult,
    MultipleMatch,
    NotFoundEntry,
)
from .formatter import CitationFormatter
from .styles import CitationStyle


class LookupService:
    """Resolves raw reference lines into records."""

    name: str = "base"

    def resolve(
        self, references: Sequence[str], style: CitationStyle
    ) -> LookupResult:  # pragma: no cover - interface
        raise NotImplementedError


class ExportSerializer:
    """Turns reference lines into a downloadable file."""

    def export(self, references: Sequence[str], fmt: str) -> ExportArtifact:  # pragma: no cover - interface
        raise NotImplementedError


class SelectionNotifier:
    """Informed whenever a user picks one of several candidates."""

    def notify_selection(
        self, reference_index: int, selected_option_index: int
    ) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class StaticLookupService(LookupService):
    """Simple lookup suitable for tests and offline use.

    ``records`` maps a reference line to a record; ``candidates`` maps a line to
    several records. Lines found in neither are reported as not found.
    """

    def __init__(
        self,
        records: Optional[Dict[str, BibliographicRecord]] = None,
        candidates: Optional[Dict[str, List[BibliographicRecord]]] = None,
        formatter: Optional[CitationFormatter] = None,
    ):
        self.records = records or {}
        self.candidates = candidates or {}
        self.formatter = formatter or CitationFormatter()
        self.name = "static"
        self.calls: List[List[str]] = []

    def resolve(self, references: Sequence[str], style: CitationStyle) -> LookupResult:
        self.calls.append(list(references))
        result = LookupResult()
        for index, query in enumerate(references):
            options = self.candidates.get(query) or []
            if len(options) > 1:
                result.formatted.append(self.formatter.format(options[0], style))
                result.papers.append(options[0])
                result.multiple_matches.append(
                    MultipleMatch(
                        index=index,
                        query=query,
                        options=[
                            Candidate(record=option, formatted=self.formatter.format(option, style))
                            for option in options
                        ],
                    )
                )
                continue
            record = self.records.get(query) or (options[0] if options else None)
            if record is None:
                result.not_found.append(NotFoundEntry(index=index, query=query))
            result.formatted.append(self.formatter.format(record, style))
            result.papers.append(record)
        return result


__all__ = ["LookupService", "ExportSerializer", "SelectionNotifier", "StaticLookupService"]
