from baselinegate.mappings.loader import default_mapping_tables
from baselinegate.mappings.resolver import resolve_all
from baselinegate.models.occurrence import OccurrenceKind
from baselinegate.scanners.markup import MarkupScanner

from fixtures.web_sources import PAGE_HTML


def _scan(html, path="index.html"):
    return MarkupScanner().scan(html, path)


def test_page_features_including_embedded_blocks():
    occurrences = _scan(PAGE_HTML).occurrences
    feature_ids = {r.feature_id for r in resolve_all(occurrences, default_mapping_tables())}

    assert feature_ids == {
        "link-rel-preload",
        "link-rel-modulepreload",
        "dialog",
        "input-color",
        "loading-lazy",
        "js-modules",
        "grid",
        "optional-chaining",
    }


def test_element_positions():
    occurrences = _scan(PAGE_HTML).occurrences

    dialog = next(o for o in occurrences if o.kind == OccurrenceKind.ELEMENT and o.name == "dialog")
    assert (dialog.line, dialog.column) == (10, 3)


def test_input_carries_its_type():
    occurrences = _scan(PAGE_HTML).occurrences

    element = next(o for o in occurrences if o.kind == OccurrenceKind.ELEMENT and o.name == "input")
    assert element.associated_value == "color"


def test_token_list_attributes_are_split():
    occurrences = _scan(PAGE_HTML).occurrences

    rel = [o for o in occurrences if o.kind == OccurrenceKind.ATTRIBUTE and o.name == "rel"]
    assert [o.associated_value for o in rel] == ["preload", "modulepreload"]
    assert all(o.enclosing_context == "link" for o in rel)


def test_embedded_style_and_script_map_to_document_positions():
    occurrences = _scan(PAGE_HTML).occurrences

    display = next(o for o in occurrences if o.kind == OccurrenceKind.PROPERTY)
    assert (display.name, display.line, display.column) == ("display", 6, 14)

    chaining = next(o for o in occurrences if o.name == "optional-chaining")
    assert (chaining.line, chaining.column) == (14, 16)


def test_single_line_embedded_block_shifts_column():
    occurrences = _scan("<p><style>.a { display: grid; }</style>").occurrences

    display = next(o for o in occurrences if o.kind == OccurrenceKind.PROPERTY)
    assert (display.line, display.column) == (1, 16)


def test_embedded_errors_are_reported_in_document_coordinates():
    result = _scan("<style>\n.a { display grid; }\n</style>", "page.html")

    assert len(result.errors) == 1
    error = result.errors[0]
    assert error.parser == "css"
    assert error.file == "page.html"
    assert (error.line, error.column) == (2, 6)


def test_non_script_types_are_not_scanned_as_javascript():
    html = '<script type="application/ld+json">{"a": 1}</script>\n<script>const y = a ?? b;</script>'
    occurrences = _scan(html).occurrences

    assert [o.name for o in occurrences if o.kind == OccurrenceKind.SYNTAX] == ["nullish-coalescing"]


def test_tag_names_are_case_insensitive():
    occurrences = _scan("<DIALOG OPEN>hi</DIALOG>").occurrences

    assert [(o.kind, o.name) for o in occurrences] == [
        (OccurrenceKind.ELEMENT, "dialog"),
        (OccurrenceKind.ATTRIBUTE, "open"),
    ]


def test_empty_document():
    result = _scan("")

    assert result.occurrences == []
    assert result.errors == []
