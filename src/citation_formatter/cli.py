"""Command line interface for formatting reference lists."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Tuple

from .client import CitationApiClient
from .config import Settings
from .coordinator import ResolutionCoordinator
from .errors import CitationFormatterError, EmptyInput, InvalidSelection
from .models import BibliographicRecord, Declined, Formatted, NotFound, PendingChoice, ReferenceSlot
from .report import render_report
from .styles import EXPORT_FORMATS, CitationStyle

logger = logging.getLogger(__name__)

STYLE_CHOICES = [style.value for style in CitationStyle]


def _serialize_record(record: BibliographicRecord | None) -> Dict[str, Any] | None:
    if record is None:
        return None
    return {
        "title": record.title,
        "year": record.year,
        "venue": record.venue_name,
        "authors": [
            {"family": author.family_name, "given": author.given_name} for author in record.authors
        ],
    }


def _serialize_slot(index: int, slot: ReferenceSlot) -> Dict[str, Any]:
    data: Dict[str, Any] = {"index": index, "text": slot.display_text}
    if isinstance(slot, Formatted):
        data.update(kind="formatted", record=_serialize_record(slot.record))
    elif isinstance(slot, NotFound):
        data.update(kind="not_found", query=slot.query)
    elif isinstance(slot, PendingChoice):
        data.update(
            kind="pending",
            query=slot.query,
            current_index=slot.current_index,
            candidates=[
                {"formatted": candidate.formatted, "record": _serialize_record(candidate.record)}
                for candidate in slot.candidates
            ],
        )
    elif isinstance(slot, Declined):
        data.update(kind="declined", query=slot.query)
    return data


def _build_result(coordinator: ResolutionCoordinator) -> Dict[str, Any]:
    return {
        "style": coordinator.active_style.value,
        "references": coordinator.references,
        "slots": [_serialize_slot(idx, slot) for idx, slot in enumerate(coordinator.slots)],
        "pending": coordinator.pending_indices,
    }


def _parse_selection(value: str) -> Tuple[int, int]:
    """Parse ``REF:OPTION`` (both 1-based, as shown in the report) into 0-based indices."""
    try:
        ref, option = value.split(":", 1)
        return int(ref) - 1, int(option) - 1
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected REF:OPTION, got {value!r}") from exc


def _read_references(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def main(argv: List[str] | None = None) -> int:
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(description="Format references in a citation style")
    parser.add_argument("input", help="Text file with one reference per line, or - for stdin")
    parser.add_argument(
        "--style",
        default=settings.default_style.value,
        choices=STYLE_CHOICES,
        help="Citation style used when formatting references",
    )
    parser.add_argument("--api-url", default=settings.api_url, help="Base URL of the citation backend")
    parser.add_argument("--timeout", type=float, default=settings.timeout, help="Request timeout in seconds")
    parser.add_argument(
        "--select",
        action="append",
        type=_parse_selection,
        default=[],
        metavar="REF:OPTION",
        help="Choose option OPTION for ambiguous reference REF (can be repeated)",
    )
    parser.add_argument(
        "--decline",
        action="append",
        type=int,
        default=[],
        metavar="REF",
        help="Reject every candidate for ambiguous reference REF (can be repeated)",
    )
    parser.add_argument(
        "--restyle",
        choices=STYLE_CHOICES,
        help="Reformat the resolved references in another style without a new lookup",
    )
    parser.add_argument("--json-output", type=Path, help="Write the resolution state to a JSON file")
    parser.add_argument(
        "--download",
        choices=sorted(EXPORT_FORMATS),
        help="Download the references from the backend in this format",
    )
    parser.add_argument(
        "--download-dir",
        type=Path,
        default=Path("."),
        help="Directory for the downloaded file",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    client = CitationApiClient.from_settings(
        replace(settings, api_url=args.api_url, timeout=args.timeout)
    )
    try:
        coordinator = ResolutionCoordinator(
            lookup=client, exporter=client, notifier=client, style=args.style
        )
        return _run(args, coordinator)
    finally:
        client.close()


def _run(args: argparse.Namespace, coordinator: ResolutionCoordinator) -> int:
    try:
        coordinator.submit(_read_references(args.input))
        for ref_index, option_index in args.select:
            coordinator.select_candidate(ref_index, option_index)
        for ref_number in args.decline:
            coordinator.decline_all(ref_number - 1)
        if args.restyle:
            coordinator.change_style(args.restyle)
    except (EmptyInput, InvalidSelection) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except CitationFormatterError as exc:
        print(f"error: {exc} Please try again.", file=sys.stderr)
        return 1

    print(render_report(coordinator))

    if args.json_output:
        args.json_output.write_text(json.dumps(_build_result(coordinator), indent=2))

    if args.download:
        try:
            artifact = coordinator.download(args.download)
        except CitationFormatterError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
        target = args.download_dir / artifact.file_name
        target.write_bytes(artifact.content)
        logger.info("Wrote %s", target)

    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    raise SystemExit(main())
