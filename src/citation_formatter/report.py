"""Plain-text reporting utilities."""
from __future__ import annotations

from typing import List

from .coordinator import ResolutionCoordinator
from .models import Candidate


def _author_summary(candidate: Candidate) -> str:
    return ", ".join(author.family_name for author in candidate.record.authors)


def render_report(coordinator: ResolutionCoordinator) -> str:
    """Return a human-readable summary of the current resolution state."""

    lines: List[str] = [f"Formatted References ({coordinator.active_style.value.upper()})"]
    if not coordinator.slots:
        lines.append("No references submitted.")
        return "\n".join(lines)

    for idx, text in enumerate(coordinator.formatted_results, start=1):
        lines.append(f"{idx}. {text}")

    not_found = coordinator.not_found
    if not_found:
        lines.append("")
        lines.append("References Not Found:")
        for idx, slot in not_found.items():
            lines.append(f"- Reference {idx + 1}: \"{slot.query}\"")
            lines.append("  Suggestion: Try using the full title, DOI, or check for typos")

    pending = coordinator.awaiting_selection
    if pending:
        lines.append("")
        lines.append("Multiple Matches Found:")
        for idx, slot in pending.items():
            lines.append(f"- Reference {idx + 1}: \"{slot.query}\"")
            for opt_idx, candidate in enumerate(slot.candidates):
                marker = "* Currently Selected:" if opt_idx == slot.current_index else f"  {opt_idx + 1}."
                record = candidate.record
                details = " | ".join(
                    part
                    for part in [_author_summary(candidate), record.year, record.venue_name]
                    if part
                )
                lines.append(f"  {marker} {record.title or 'Unknown title'}")
                if details:
                    lines.append(f"      {details}")
    return "\n".join(lines)
