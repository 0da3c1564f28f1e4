"""Citation style identifiers and their rendering rules."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class CitationStyle(str, Enum):
    APA = "apa"
    MLA = "mla"
    CHICAGO = "chicago"
    HARVARD = "harvard"
    VANCOUVER = "vancouver"
    IEEE = "ieee"
    AMA = "ama"
    ASA = "asa"

    @classmethod
    def parse(cls, value: Optional[str]) -> "CitationStyle":
        """Return the style named by ``value``, falling back to APA."""
        if isinstance(value, cls):
            return value
        key = (value or "").strip().lower()
        for style in cls:
            if style.value == key:
                return style
        return cls.APA


@dataclass(frozen=True)
class StyleRule:
    """How one style renders author names, joins them, and assembles the citation.

    ``author_with_given`` may use ``{family}``, ``{given}`` and ``{initial}``; the
    assembly template uses ``{authors}``, ``{title}``, ``{venue}`` and ``{year}``.
    """

    author_with_given: str
    final_separator: str
    template: str
    separator: str = ", "


_INITIAL_WITH_PERIOD = "{family}, {initial}."

STYLE_RULES: Dict[CitationStyle, StyleRule] = {
    CitationStyle.APA: StyleRule(
        _INITIAL_WITH_PERIOD, " & ", "{authors} ({year}). {title}. {venue}."
    ),
    CitationStyle.MLA: StyleRule(
        "{family}, {given}", ", and ", '{authors}. "{title}." {venue}, {year}.'
    ),
    CitationStyle.CHICAGO: StyleRule(
        _INITIAL_WITH_PERIOD, " & ", '{authors}. "{title}." {venue} {year}.'
    ),
    CitationStyle.HARVARD: StyleRule(
        _INITIAL_WITH_PERIOD, " & ", "{authors} ({year}) '{title}', {venue}."
    ),
    CitationStyle.VANCOUVER: StyleRule(
        "{family} {initial}", ", ", "{authors}. {title}. {venue}. {year}."
    ),
    CitationStyle.IEEE: StyleRule(
        _INITIAL_WITH_PERIOD, " & ", '{authors}, "{title}," {venue}, {year}.'
    ),
    CitationStyle.AMA: StyleRule(
        _INITIAL_WITH_PERIOD, " & ", "{authors}. {title}. {venue}. {year}."
    ),
    CitationStyle.ASA: StyleRule(
        _INITIAL_WITH_PERIOD, " & ", '{authors}. {year}. "{title}." {venue}.'
    ),
}

EXPORT_FORMATS = frozenset([style.value for style in CitationStyle] + ["bibtex", "endnote"])


def rule_for(style: CitationStyle | str | None) -> StyleRule:
    return STYLE_RULES[CitationStyle.parse(style)]


__all__ = ["CitationStyle", "StyleRule", "STYLE_RULES", "EXPORT_FORMATS", "rule_for"]
