"""Per-session resolution state for submitted references."""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from .errors import EmptyInput, InvalidSelection, LookupFailure
from .formatter import CitationFormatter
from .models import (
    Declined,
    ExportArtifact,
    Formatted,
    LookupResult,
    NotFound,
    PendingChoice,
    ReferenceSlot,
)
from .normalization import split_references
from .services import ExportSerializer, LookupService, SelectionNotifier
from .styles import EXPORT_FORMATS, CitationStyle

logger = logging.getLogger(__name__)


class ResolutionCoordinator:
    """Coordinates lookup, restyling and candidate selection for one user session.

    Slots are addressed by the 0-based index of the submitted line and are
    replaced wholesale on every applied submission. Restyling and selection
    work only on records already held, never on the lookup service.
    """

    def __init__(
        self,
        lookup: LookupService,
        exporter: ExportSerializer | None = None,
        notifier: SelectionNotifier | None = None,
        style: CitationStyle | str = CitationStyle.APA,
        formatter: CitationFormatter | None = None,
    ):
        self.lookup = lookup
        self.exporter = exporter
        self.notifier = notifier
        self.formatter = formatter or CitationFormatter()
        self.active_style = CitationStyle.parse(style)
        self.references: List[str] = []
        self._slots: List[ReferenceSlot] = []
        self._resolved_style = self.active_style
        self._generation = 0

    @property
    def slots(self) -> Tuple[ReferenceSlot, ...]:
        return tuple(self._slots)

    @property
    def formatted_results(self) -> List[str]:
        return [slot.display_text for slot in self._slots]

    @property
    def pending_indices(self) -> List[int]:
        return [idx for idx, slot in enumerate(self._slots) if isinstance(slot, PendingChoice)]

    @property
    def awaiting_selection(self) -> Dict[int, PendingChoice]:
        return {idx: slot for idx, slot in enumerate(self._slots) if isinstance(slot, PendingChoice)}

    @property
    def not_found(self) -> Dict[int, NotFound]:
        return {idx: slot for idx, slot in enumerate(self._slots) if isinstance(slot, NotFound)}

    def submit(self, lines: str | Iterable[str]) -> bool:
        references = self._prepare(lines)
        generation = self._begin_submission()
        style = self.active_style
        result = self.lookup.resolve(references, style)
        return self._apply(generation, references, style, result)

    async def submit_async(self, lines: str | Iterable[str]) -> bool:
        """Submit without blocking the event loop.

        A submission started later supersedes this one; if that happens while the
        lookup is in flight, the late result is discarded and ``False`` returned.
        """
        references = self._prepare(lines)
        generation = self._begin_submission()
        style = self.active_style
        result = await asyncio.to_thread(self.lookup.resolve, references, style)
        return self._apply(generation, references, style, result)

    def cancel_pending(self) -> None:
        self._generation += 1

    def clear(self) -> None:
        self.cancel_pending()
        self.references = []
        self._slots = []

    def change_style(self, style: CitationStyle | str) -> None:
        self.active_style = CitationStyle.parse(style)
        self._slots = [self._restyle(slot) for slot in self._slots]

    def select_candidate(self, slot_index: int, candidate_index: int) -> Formatted:
        slot = self._pending_slot(slot_index)
        if not 0 <= candidate_index < len(slot.candidates):
            raise InvalidSelection(
                f"Candidate {candidate_index} out of range for reference {slot_index} "
                f"({len(slot.candidates)} candidates)"
            )
        candidate = slot.candidates[candidate_index]
        if candidate.formatted and self.active_style == self._resolved_style:
            text = candidate.formatted
        else:
            text = self.formatter.format(candidate.record, self.active_style)
        resolved = Formatted(text=text, record=candidate.record)
        self._slots[slot_index] = resolved
        self._notify(slot_index, candidate_index)
        return resolved

    def decline_all(self, slot_index: int) -> Declined:
        slot = self._pending_slot(slot_index)
        declined = Declined(query=slot.query)
        self._slots[slot_index] = declined
        return declined

    def download(self, fmt: str | None = None) -> ExportArtifact:
        """Request an export of the submitted references; never touches slot state."""
        target = (fmt or self.active_style.value).strip().lower()
        if target not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format: {fmt}")
        if not self.references:
            raise EmptyInput("Please enter some references to download.")
        if self.exporter is None:
            raise RuntimeError("No export serializer configured")
        return self.exporter.export(list(self.references), target)

    @staticmethod
    def _prepare(lines: str | Iterable[str]) -> List[str]:
        references = split_references(lines)
        if not references:
            raise EmptyInput()
        return references

    def _begin_submission(self) -> int:
        self._generation += 1
        return self._generation

    def _apply(
        self, generation: int, references: List[str], style: CitationStyle, result: LookupResult
    ) -> bool:
        if generation != self._generation:
            logger.info("Discarding stale lookup result for submission %d", generation)
            return False
        slots = self._build_slots(references, style, result)
        self.references = references
        self._slots = slots
        self._resolved_style = style
        if style != self.active_style:
            self._slots = [self._restyle(slot) for slot in self._slots]
        logger.info(
            "Applied submission %d: %d references, %d pending, %d not found",
            generation,
            len(slots),
            len(self.pending_indices),
            len(self.not_found),
        )
        return True

    def _build_slots(
        self, references: Sequence[str], style: CitationStyle, result: LookupResult
    ) -> List[ReferenceSlot]:
        count = len(references)
        if len(result.formatted) != count:
            raise LookupFailure(
                f"Lookup returned {len(result.formatted)} results for {count} references"
            )
        for entry in [*result.not_found, *result.multiple_matches]:
            if not 0 <= entry.index < count:
                raise LookupFailure(f"Lookup returned out-of-range index {entry.index}")

        papers = list(result.papers) + [None] * (count - len(result.papers))
        slots: List[ReferenceSlot] = [
            Formatted(text=text, record=papers[idx]) for idx, text in enumerate(result.formatted)
        ]
        for entry in result.not_found:
            slots[entry.index] = NotFound(query=entry.query or references[entry.index])
        for match in result.multiple_matches:
            query = match.query or references[match.index]
            if not match.options:
                slots[match.index] = NotFound(query=query)
                continue
            first = match.options[0]
            slots[match.index] = PendingChoice(
                query=query,
                candidates=tuple(match.options),
                current_index=0,
                current_formatted_text=first.formatted
                or self.formatter.format(first.record, style),
            )
        return slots

    def _restyle(self, slot: ReferenceSlot) -> ReferenceSlot:
        if isinstance(slot, Formatted) and slot.record is not None:
            return Formatted(
                text=self.formatter.format(slot.record, self.active_style), record=slot.record
            )
        if isinstance(slot, PendingChoice):
            return PendingChoice(
                query=slot.query,
                candidates=slot.candidates,
                current_index=slot.current_index,
                current_formatted_text=self.formatter.format(slot.current.record, self.active_style),
            )
        return slot

    def _pending_slot(self, slot_index: int) -> PendingChoice:
        if not 0 <= slot_index < len(self._slots):
            raise InvalidSelection(f"No reference at index {slot_index}")
        slot = self._slots[slot_index]
        if not isinstance(slot, PendingChoice):
            raise InvalidSelection(
                f"Reference {slot_index} is not awaiting selection ({type(slot).__name__})"
            )
        return slot

    def _notify(self, slot_index: int, candidate_index: int) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify_selection(slot_index, candidate_index)
        except Exception as exc:
            logger.warning("Selection notification for reference %d failed: %s", slot_index, exc)


__all__ = ["ResolutionCoordinator"]
