import json
from pathlib import Path

from citation_formatter import cli
from citation_formatter.errors import LookupFailure
from citation_formatter.models import ExportArtifact
from citation_formatter.services import StaticLookupService


def _install_fake_client(monkeypatch, lookup: StaticLookupService, fail: bool = False):
    created = {}

    class FakeClient:
        def __init__(self, settings):
            self.settings = settings
            self.exports = []
            self.selections = []
            self.closed = False

        @classmethod
        def from_settings(cls, settings, **_kwargs):
            created["client"] = cls(settings)
            return created["client"]

        def resolve(self, references, style):
            if fail:
                raise LookupFailure("HTTP error! status: 502")
            return lookup.resolve(references, style)

        def export(self, references, fmt):
            self.exports.append((list(references), fmt))
            return ExportArtifact(content=b"@article{x}", file_name=f"references.{fmt}")

        def notify_selection(self, reference_index, selected_option_index):
            self.selections.append((reference_index, selected_option_index))

        def close(self):
            self.closed = True

    monkeypatch.setattr(cli, "CitationApiClient", FakeClient)
    return created


def test_cli_formats_selects_and_writes_outputs(monkeypatch, tmp_path: Path, lookup, capsys):
    created = _install_fake_client(monkeypatch, lookup)
    refs = tmp_path / "refs.txt"
    refs.write_text("Deep learning paper\nattention\nattention\nnothing\n")
    json_out = tmp_path / "results.json"

    exit_code = cli.main(
        [
            str(refs),
            "--api-url",
            "http://backend.test",
            "--select",
            "2:3",
            "--decline",
            "3",
            "--restyle",
            "mla",
            "--json-output",
            str(json_out),
            "--download",
            "bibtex",
            "--download-dir",
            str(tmp_path),
        ]
    )

    assert exit_code == 0
    client = created["client"]
    assert client.settings.api_url == "http://backend.test"
    assert client.selections == [(1, 2)]
    assert client.closed
    assert client.exports == [(["Deep learning paper", "attention", "attention", "nothing"], "bibtex")]
    assert (tmp_path / "references.bibtex").read_bytes() == b"@article{x}"

    result = json.loads(json_out.read_text())
    assert result["style"] == "mla"
    assert [slot["kind"] for slot in result["slots"]] == ["formatted", "formatted", "declined", "not_found"]
    assert result["slots"][1]["record"]["title"] == "Attention Mechanisms"
    assert result["pending"] == []

    report = capsys.readouterr().out
    assert "Formatted References (MLA)" in report
    assert "Multiple references found" in report
    assert "References Not Found" in report


def test_cli_reports_pending_matches(monkeypatch, tmp_path: Path, lookup, capsys):
    _install_fake_client(monkeypatch, lookup)
    refs = tmp_path / "refs.txt"
    refs.write_text("attention\n")

    assert cli.main([str(refs)]) == 0

    report = capsys.readouterr().out
    assert "Multiple Matches Found" in report
    assert "* Currently Selected: Attention Is All You Need" in report
    assert "2. Attention Is Not All You Need" in report


def test_cli_rejects_empty_input_and_bad_selection(monkeypatch, tmp_path: Path, lookup, capsys):
    created = _install_fake_client(monkeypatch, lookup)
    empty = tmp_path / "empty.txt"
    empty.write_text("\n\n")

    assert cli.main([str(empty)]) == 2
    assert created["client"].closed

    refs = tmp_path / "refs.txt"
    refs.write_text("Deep learning paper\n")
    assert cli.main([str(refs), "--select", "1:1"]) == 2
    assert "not awaiting selection" in capsys.readouterr().err


def test_cli_surfaces_lookup_failure(monkeypatch, tmp_path: Path, lookup, capsys):
    created = _install_fake_client(monkeypatch, lookup, fail=True)
    refs = tmp_path / "refs.txt"
    refs.write_text("Deep learning paper\n")

    assert cli.main([str(refs)]) == 1
    assert "Please try again" in capsys.readouterr().err
    assert created["client"].closed
