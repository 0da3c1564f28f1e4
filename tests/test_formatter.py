import pytest

from citation_formatter.formatter import CitationFormatter, format_citation, strip_year
from citation_formatter.models import Author, BibliographicRecord
from citation_formatter.styles import CitationStyle


@pytest.mark.parametrize("style", list(CitationStyle) + ["unknown"])
def test_missing_record_renders_placeholder(style):
    assert format_citation(None, style) == "No results found"


def test_author_lists_follow_style_rules(smith_doe):
    formatter = CitationFormatter()
    assert formatter.format_authors(smith_doe.authors, "mla") == "Smith, John, and Doe, Jane"
    assert formatter.format_authors(smith_doe.authors, "vancouver") == "Smith J, Doe J"
    assert formatter.format_authors(smith_doe.authors, "apa") == "Smith, J. & Doe, J."


def test_three_authors_use_commas_before_final_separator():
    authors = (Author("Smith", "John"), Author("Doe", "Jane"), Author("Roe", "Richard"))
    formatter = CitationFormatter()
    assert formatter.format_authors(authors, "apa") == "Smith, J., Doe, J. & Roe, R."
    assert formatter.format_authors(authors, "mla") == "Smith, John, Doe, Jane, and Roe, Richard"
    assert formatter.format_authors(authors, "vancouver") == "Smith J, Doe J, Roe R"


def test_authors_without_given_name_and_empty_list():
    formatter = CitationFormatter()
    assert formatter.format_authors((Author("Smith"),), "apa") == "Smith"
    assert formatter.format_authors((Author("Smith"),), "vancouver") == "Smith"
    assert formatter.format_authors((), "mla") == "Unknown author"


@pytest.mark.parametrize(
    "style, expected",
    [
        ("apa", "Smith, J. & Doe, J. (2020). Deep Learning. Nature."),
        ("mla", 'Smith, John, and Doe, Jane. "Deep Learning." Nature, 2020.'),
        ("chicago", 'Smith, J. & Doe, J.. "Deep Learning." Nature 2020.'),
        ("harvard", "Smith, J. & Doe, J. (2020) 'Deep Learning', Nature."),
        ("vancouver", "Smith J, Doe J. Deep Learning. Nature. 2020."),
        ("ieee", 'Smith, J. & Doe, J., "Deep Learning," Nature, 2020.'),
        ("ama", "Smith, J. & Doe, J.. Deep Learning. Nature. 2020."),
        ("asa", 'Smith, J. & Doe, J.. 2020. "Deep Learning." Nature.'),
    ],
)
def test_style_templates(smith_doe, style, expected):
    assert format_citation(smith_doe, style) == expected


def test_unrecognized_style_falls_back_to_apa(smith_doe):
    assert format_citation(smith_doe, "turabian") == format_citation(smith_doe, CitationStyle.APA)


def test_missing_fields_use_placeholders():
    assert format_citation(BibliographicRecord()) == (
        "Unknown author (Unknown year). Unknown title. Unknown journal."
    )


def test_conference_venue_is_prefixed_and_year_removed():
    record = BibliographicRecord(title="ResNet", year="2016", venue_name="CVPR 2016")
    assert format_citation(record) == "Unknown author (2016). ResNet. Proceedings of the CVPR."


def test_existing_proceedings_prefix_is_not_doubled():
    record = BibliographicRecord(title="T", year="2020", venue_name="Proceedings of CVPR 2020")
    assert format_citation(record).endswith(" Proceedings of CVPR.")


def test_conference_without_year_in_venue_keeps_name():
    record = BibliographicRecord(title="T", year="2021", venue_name="International Conference on Learning")
    assert format_citation(record).endswith(
        " Proceedings of the International Conference on Learning."
    )


def test_journal_venue_is_used_verbatim():
    record = BibliographicRecord(title="T", year="2020", venue_name="Nature 2020")
    assert format_citation(record).endswith(" Nature 2020.")


def test_strip_year_removes_adjacent_commas():
    assert strip_year("ICML, 2019, Long Beach", "2019") == "ICML Long Beach"
    assert strip_year("2019 IEEE Conference", "2019") == "IEEE Conference"
    assert strip_year("ICML", None) == "ICML"


def test_title_matching_sentinel_is_formatted_normally():
    record = BibliographicRecord(title="No results found", year="2000", venue_name="Journal")
    assert format_citation(record, "apa") == "Unknown author (2000). No results found. Journal."
