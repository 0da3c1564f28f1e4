"""Formatting utilities for bibliographic records."""
from __future__ import annotations

import re
from typing import Optional, Sequence

from .models import NO_RESULTS_TEXT, Author, BibliographicRecord
from .styles import CitationStyle, StyleRule, rule_for

CONFERENCE_MARKERS = ("proceedings", "conference", "cvpr", "iccv", "eccv", "nips", "icml")
PROCEEDINGS_PREFIX = "Proceedings of the "


class CitationFormatter:
    """Render records as citation strings in one of the supported styles.

    Formatting never fails: missing fields are replaced by ``Unknown ...``
    placeholders and a missing record renders as ``No results found``.
    """

    SUPPORTED_STYLES = {style.value for style in CitationStyle}

    def format(
        self, record: Optional[BibliographicRecord], style: CitationStyle | str = CitationStyle.APA
    ) -> str:
        if record is None:
            return NO_RESULTS_TEXT
        rule = rule_for(style)
        year = record.year or "Unknown year"
        return rule.template.format(
            authors=self.format_authors(record.authors, style),
            title=record.title or "Unknown title",
            venue=self._venue(record),
            year=year,
        )

    def format_authors(
        self, authors: Sequence[Author], style: CitationStyle | str = CitationStyle.APA
    ) -> str:
        if not authors:
            return "Unknown author"
        rule = rule_for(style)
        names = [self._format_author(author, rule) for author in authors]
        if len(names) == 1:
            return names[0]
        return rule.separator.join(names[:-1]) + rule.final_separator + names[-1]

    @staticmethod
    def _format_author(author: Author, rule: StyleRule) -> str:
        if not author.given_name:
            return author.family_name
        return rule.author_with_given.format(
            family=author.family_name,
            given=author.given_name,
            initial=author.given_name[0],
        )

    @staticmethod
    def _venue(record: BibliographicRecord) -> str:
        venue = record.venue_name or "Unknown journal"
        if not is_conference(venue):
            return venue
        cleaned = strip_year(venue, record.year)
        if cleaned.lower().startswith("proceedings"):
            return cleaned
        return f"{PROCEEDINGS_PREFIX}{cleaned}"


def is_conference(venue: str) -> bool:
    lowered = venue.lower()
    return any(marker in lowered for marker in CONFERENCE_MARKERS)


def strip_year(venue: str, year: Optional[str]) -> str:
    """Remove the first occurrence of ``year`` and its neighbouring commas/whitespace."""
    if not year or year not in venue:
        return venue
    cleaned = re.sub(rf"\s*,?\s*{re.escape(year)}\s*,?\s*", " ", venue, count=1)
    return re.sub(r"\s+", " ", cleaned).strip(" ,")


_default_formatter = CitationFormatter()


def format_citation(
    record: Optional[BibliographicRecord], style: CitationStyle | str = CitationStyle.APA
) -> str:
    return _default_formatter.format(record, style)


__all__ = ["CitationFormatter", "format_citation", "is_conference", "strip_year"]
