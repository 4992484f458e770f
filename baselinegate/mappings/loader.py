import json
import logging
from pathlib import Path
from typing import Dict, Optional

from baselinegate.mappings import feature_map
from baselinegate.mappings.tables import MappingTables, build_table

logger = logging.getLogger("baselinegate.mappings")

TABLE_KEYS = (
    "css_property",
    "css_selector",
    "css_function",
    "css_at_rule",
    "js_api",
    "js_syntax",
    "html_element",
    "html_attribute",
)

CASE_SENSITIVE_TABLES = ("js_api", "js_syntax")

DEFAULT_RAW_TABLES = {
    "css_property": feature_map.CSS_PROPERTY_MAPPING,
    "css_selector": feature_map.CSS_SELECTOR_MAPPING,
    "css_function": feature_map.CSS_FUNCTION_MAPPING,
    "css_at_rule": feature_map.CSS_AT_RULE_MAPPING,
    "js_api": feature_map.JS_API_MAPPING,
    "js_syntax": feature_map.JS_SYNTAX_MAPPING,
    "html_element": feature_map.HTML_ELEMENT_MAPPING,
    "html_attribute": feature_map.HTML_ATTRIBUTE_MAPPING,
}

_default_tables: Optional[MappingTables] = None


def build_mapping_tables(raw_tables: Dict[str, Dict]) -> MappingTables:
    unknown = set(raw_tables) - set(TABLE_KEYS)
    if unknown:
        raise ValueError(f"Unknown mapping tables: {sorted(unknown)}")
    return MappingTables(**{
        key: build_table(raw, case_sensitive=key in CASE_SENSITIVE_TABLES)
        for key, raw in raw_tables.items()
    })


def default_mapping_tables() -> MappingTables:
    """
    Bundled tables, built once per process.
    """
    global _default_tables
    if _default_tables is None:
        _default_tables = build_mapping_tables(DEFAULT_RAW_TABLES)
        logger.debug(f"Loaded {len(_default_tables.feature_ids())} mapped feature ids")
    return _default_tables


def load_mapping_tables(path: Path, extend_defaults: bool = True) -> MappingTables:
    """
    Load mapping tables from a JSON file.
    With `extend_defaults`, entries in the file are layered over the bundled
    tables key by key; otherwise the file replaces them.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Mapping table file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, dict):
        raise ValueError("Invalid mapping file: top level must be an object")

    if not extend_defaults:
        return build_mapping_tables(raw)

    merged = {}
    for key in TABLE_KEYS:
        table = dict(DEFAULT_RAW_TABLES[key])
        table.update(raw.get(key, {}))
        merged[key] = table
    unknown = set(raw) - set(TABLE_KEYS)
    if unknown:
        raise ValueError(f"Unknown mapping tables: {sorted(unknown)}")
    return build_mapping_tables(merged)
