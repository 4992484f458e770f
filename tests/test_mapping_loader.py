import json

import pytest

from baselinegate.mappings.loader import build_mapping_tables, default_mapping_tables, load_mapping_tables
from baselinegate.mappings.tables import ByValue, Direct


def test_default_tables_are_shared_and_read_only():
    tables = default_mapping_tables()

    assert default_mapping_tables() is tables
    with pytest.raises(TypeError):
        tables.css_property["display"] = Direct("nope")


def test_default_tables_cover_every_source_language():
    tables = default_mapping_tables()

    assert isinstance(tables.css_property["display"], ByValue)
    assert tables.css_selector[":has"] == Direct("has")
    assert tables.js_api["IntersectionObserver"] == Direct("intersection-observer")
    assert tables.html_element["dialog"] == Direct("dialog")
    assert "container-queries" in tables.feature_ids()


def test_file_entries_are_layered_over_defaults(tmp_path):
    path = tmp_path / "mappings.json"
    path.write_text(json.dumps({
        "css_property": {"display": {"ruby": "ruby-layout"}},
        "js_api": {"Temporal": "temporal"},
    }))

    tables = load_mapping_tables(path)

    # the file's entry replaces the whole default entry for that key
    assert tables.css_property["display"].values == {"ruby": "ruby-layout"}
    assert tables.css_property["gap"] == Direct("flexbox-gap")
    assert tables.js_api["Temporal"] == Direct("temporal")
    assert tables.js_api["fetch"] == Direct("fetch")


def test_file_can_replace_defaults(tmp_path):
    path = tmp_path / "mappings.json"
    path.write_text(json.dumps({"css_selector": {":has": "has"}}))

    tables = load_mapping_tables(path, extend_defaults=False)

    assert dict(tables.css_selector) == {":has": Direct("has")}
    assert len(tables.css_property) == 0


def test_unknown_table_is_rejected(tmp_path):
    path = tmp_path / "mappings.json"
    path.write_text(json.dumps({"python_api": {"print": "print"}}))

    with pytest.raises(ValueError, match="python_api"):
        load_mapping_tables(path)


def test_missing_file_is_reported(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_mapping_tables(tmp_path / "absent.json")


def test_invalid_entries_are_rejected():
    with pytest.raises(ValueError):
        build_mapping_tables({"css_property": {"display": ["grid"]}})

    with pytest.raises(ValueError):
        build_mapping_tables({"css_property": {"display": {"grid": 1}}})
