"""Exceptions raised by the citation formatter."""
from __future__ import annotations


class CitationFormatterError(Exception):
    """Base class for all citation formatter errors."""


class EmptyInput(CitationFormatterError, ValueError):
    """Raised when there are no references to submit or export."""

    def __init__(self, message: str = "Please enter some references to format.") -> None:
        super().__init__(message)


class LookupFailure(CitationFormatterError):
    """The lookup service could not be reached or answered with garbage.

    Local state is never modified when this is raised, so callers may simply retry.
    """


class ExportFailure(CitationFormatterError):
    """The export serializer failed to produce a file."""


class InvalidSelection(CitationFormatterError, ValueError):
    """A selection referred to a slot or candidate that cannot be selected."""


__all__ = [
    "CitationFormatterError",
    "EmptyInput",
    "LookupFailure",
    "ExportFailure",
    "InvalidSelection",
]
