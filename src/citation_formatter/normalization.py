"""Normalization helpers turning loosely-typed lookup payloads into canonical records."""
from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from .models import Author, BibliographicRecord

FAMILY_KEYS = ("family", "lastName", "familyName")
GIVEN_KEYS = ("given", "firstName", "givenName")


def _first_text(raw: Mapping[str, Any], keys: Iterable[str]) -> Optional[str]:
    for key in keys:
        value = raw.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def normalize_author(raw: Mapping[str, Any] | Author) -> Author:
    """Accept any of the known author encodings and return a canonical ``Author``."""
    if isinstance(raw, Author):
        return raw
    family = _first_text(raw, FAMILY_KEYS) or "Unknown"
    given = _first_text(raw, GIVEN_KEYS)
    return Author(family_name=family, given_name=given)


def normalize_year(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_record(raw: Optional[Mapping[str, Any]]) -> Optional[BibliographicRecord]:
    """Build a record from a paper payload; empty or missing payloads yield ``None``."""
    if not raw:
        return None
    authors = tuple(normalize_author(author) for author in raw.get("authors") or [])
    return BibliographicRecord(
        title=_first_text(raw, ("title",)),
        year=normalize_year(raw.get("year")),
        venue_name=_first_text(raw, ("journal", "venue", "venueName")),
        authors=authors,
    )


def split_references(text: str | Iterable[str]) -> List[str]:
    """Split pasted text (or clean a list of lines) into non-blank reference lines."""
    lines = text.splitlines() if isinstance(text, str) else list(text)
    return [line.strip() for line in lines if line and line.strip()]


__all__ = [
    "normalize_author",
    "normalize_record",
    "normalize_year",
    "split_references",
]
