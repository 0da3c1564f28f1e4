from citation_formatter.models import Author
from citation_formatter.normalization import normalize_author, normalize_record, split_references
from citation_formatter.schemas import FormatResponsePayload


def test_author_aliases_are_accepted():
    assert normalize_author({"family": "Smith", "given": "John"}) == Author("Smith", "John")
    assert normalize_author({"lastName": "Doe", "firstName": "Jane"}) == Author("Doe", "Jane")
    assert normalize_author({"family": "", "lastName": "Roe"}) == Author("Roe", None)


def test_author_family_defaults_to_unknown():
    assert normalize_author({}) == Author("Unknown", None)
    assert normalize_author({"given": "Ada"}) == Author("Unknown", "Ada")


def test_record_prefers_journal_over_venue_and_stringifies_year():
    record = normalize_record(
        {
            "title": "Sample",
            "year": 2021,
            "journal": "Journal of Samples",
            "venue": "Ignored venue",
            "authors": [{"lastName": "Doe"}],
        }
    )
    assert record.venue_name == "Journal of Samples"
    assert record.year == "2021"
    assert record.authors == (Author("Doe", None),)


def test_record_falls_back_to_venue_and_empty_payload_is_none():
    assert normalize_record({"title": "T", "venue": "ICML"}).venue_name == "ICML"
    assert normalize_record(None) is None
    assert normalize_record({}) is None


def test_split_references_drops_blank_lines():
    assert split_references("  first \n\n second\n   \n") == ["first", "second"]
    assert split_references(["a", "", "  b  "]) == ["a", "b"]


def test_format_response_payload_parses_camel_case_fields():
    payload = FormatResponsePayload.model_validate(
        {
            "formatted": ["Doe (2020). T. J.", "No results found", "Multiple matches found - please select one"],
            "papers": [
                {"title": "T", "year": 2020, "journal": "J", "authors": [{"lastName": "Doe"}]},
                None,
                None,
            ],
            "notFound": [{"index": 1, "query": "missing ref"}],
            "multipleMatches": [
                {
                    "index": 2,
                    "query": "ambiguous",
                    "options": [
                        {"title": "A", "year": "2019", "authors": [], "formatted": "A (2019)."},
                        {"title": "B", "venue": "ICML", "authors": [None, {"family": "Lee"}]},
                    ],
                }
            ],
        }
    )
    result = payload.to_result()

    assert result.papers[0].year == "2020"
    assert result.papers[0].authors[0].family_name == "Doe"
    assert result.papers[1] is None
    assert result.not_found[0].index == 1
    options = result.multiple_matches[0].options
    assert options[0].formatted == "A (2019)."
    assert options[1].record.venue_name == "ICML"
    assert options[1].record.authors == (Author("Lee", None),)
