import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

import pytest

from citation_formatter.errors import ExportFailure
from citation_formatter.models import Author, BibliographicRecord, ExportArtifact
from citation_formatter.services import ExportSerializer, SelectionNotifier, StaticLookupService


@pytest.fixture()
def smith_doe() -> BibliographicRecord:
    return BibliographicRecord(
        title="Deep Learning",
        year="2020",
        venue_name="Nature",
        authors=(Author("Smith", "John"), Author("Doe", "Jane")),
    )


@pytest.fixture()
def candidates() -> list:
    return [
        BibliographicRecord(
            title="Attention Is All You Need",
            year="2017",
            venue_name="NIPS 2017",
            authors=(Author("Vaswani", "Ashish"),),
        ),
        BibliographicRecord(
            title="Attention Is Not All You Need",
            year="2021",
            venue_name="ICML",
            authors=(Author("Dong", "Yihe"), Author("Cordonnier", "Jean-Baptiste")),
        ),
        BibliographicRecord(
            title="Attention Mechanisms",
            year="2019",
            venue_name="Journal of Testing",
            authors=(Author("Roe", "Richard"),),
        ),
    ]


@pytest.fixture()
def lookup(smith_doe, candidates) -> StaticLookupService:
    return StaticLookupService(
        records={"Deep learning paper": smith_doe},
        candidates={"attention": candidates},
    )


class RecordingExporter(ExportSerializer):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    def export(self, references, fmt):
        self.calls.append((list(references), fmt))
        if self.fail:
            raise ExportFailure("serializer unavailable")
        return ExportArtifact(content=b"@article{x}", file_name=f"references.{fmt}")


class RecordingNotifier(SelectionNotifier):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    def notify_selection(self, reference_index, selected_option_index):
        self.calls.append((reference_index, selected_option_index))
        if self.fail:
            raise RuntimeError("notifier down")


@pytest.fixture()
def exporter() -> RecordingExporter:
    return RecordingExporter()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
