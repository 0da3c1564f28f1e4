"""Citation formatting and disambiguation toolkit."""

from .client import CitationApiClient
from .coordinator import ResolutionCoordinator
from .errors import EmptyInput, ExportFailure, InvalidSelection, LookupFailure
from .formatter import CitationFormatter, format_citation
from .models import (
    Author,
    BibliographicRecord,
    Candidate,
    Declined,
    Formatted,
    NotFound,
    PendingChoice,
)
from .services import StaticLookupService
from .styles import CitationStyle

__all__ = [
    "CitationApiClient",
    "ResolutionCoordinator",
    "EmptyInput",
    "ExportFailure",
    "InvalidSelection",
    "LookupFailure",
    "CitationFormatter",
    "format_citation",
    "Author",
    "BibliographicRecord",
    "Candidate",
    "Declined",
    "Formatted",
    "NotFound",
    "PendingChoice",
    "StaticLookupService",
    "CitationStyle",
]
