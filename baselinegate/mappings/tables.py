from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from baselinegate.models.occurrence import OccurrenceKind


@dataclass(frozen=True)
class Direct:
    feature_id: str


@dataclass(frozen=True)
class ByValue:
    """
    Entry keyed by the occurrence's associated value.
    `default` is used when no value-specific entry exists.
    """
    values: Mapping[str, str]
    default: Optional[str] = None


MappingEntry = Union[Direct, ByValue]
MappingTable = Mapping[str, MappingEntry]

# Key used in raw (dict / JSON) tables for ByValue.default
DEFAULT_VALUE_KEY = "*"


# Script identifiers are case-sensitive; CSS and HTML names are not.
CASE_SENSITIVE_KINDS = frozenset({OccurrenceKind.API_REFERENCE, OccurrenceKind.SYNTAX})


def normalize_key(text: str, case_sensitive: bool = False) -> str:
    """Collapse whitespace, drop a trailing !important, lower-case unless case_sensitive."""
    collapsed = " ".join(text.split())
    if not case_sensitive:
        collapsed = collapsed.lower()
    if collapsed.lower().endswith("!important"):
        collapsed = collapsed[: -len("!important")].rstrip()
    return collapsed


def build_entry(raw: Any, case_sensitive: bool = False) -> MappingEntry:
    if isinstance(raw, str):
        return Direct(raw)
    if isinstance(raw, dict):
        for k, v in raw.items():
            if not isinstance(v, str):
                raise ValueError(f"Unsupported mapping value for {k!r}: {v!r}")
        values = {
            normalize_key(k, case_sensitive): v
            for k, v in raw.items()
            if k != DEFAULT_VALUE_KEY
        }
        return ByValue(
            values=MappingProxyType(values),
            default=raw.get(DEFAULT_VALUE_KEY),
        )
    raise ValueError(f"Unsupported mapping entry: {raw!r}")


def build_table(raw: Dict[str, Any], case_sensitive: bool = False) -> MappingTable:
    return MappingProxyType({
        normalize_key(k, case_sensitive): build_entry(v, case_sensitive)
        for k, v in raw.items()
    })


def _empty() -> MappingTable:
    return MappingProxyType({})


@dataclass(frozen=True)
class MappingTables:
    """
    Immutable lookup tables, loaded once per process and shared read-only
    across every scan.
    """
    css_property: MappingTable = field(default_factory=_empty)
    css_selector: MappingTable = field(default_factory=_empty)
    css_function: MappingTable = field(default_factory=_empty)
    css_at_rule: MappingTable = field(default_factory=_empty)
    js_api: MappingTable = field(default_factory=_empty)
    js_syntax: MappingTable = field(default_factory=_empty)
    html_element: MappingTable = field(default_factory=_empty)
    html_attribute: MappingTable = field(default_factory=_empty)

    def table_for(self, kind: OccurrenceKind) -> MappingTable:
        if kind in (OccurrenceKind.PROPERTY, OccurrenceKind.VALUE):
            return self.css_property
        if kind == OccurrenceKind.SELECTOR:
            return self.css_selector
        if kind in (OccurrenceKind.FUNCTION, OccurrenceKind.CUSTOM_PROPERTY):
            return self.css_function
        if kind == OccurrenceKind.AT_RULE:
            return self.css_at_rule
        if kind == OccurrenceKind.API_REFERENCE:
            return self.js_api
        if kind == OccurrenceKind.SYNTAX:
            return self.js_syntax
        if kind == OccurrenceKind.ELEMENT:
            return self.html_element
        if kind == OccurrenceKind.ATTRIBUTE:
            return self.html_attribute
        raise ValueError(f"No mapping table for occurrence kind {kind!r}")

    def feature_ids(self) -> set:
        ids = set()
        for table in (
            self.css_property, self.css_selector, self.css_function, self.css_at_rule,
            self.js_api, self.js_syntax, self.html_element, self.html_attribute,
        ):
            for entry in table.values():
                if isinstance(entry, Direct):
                    ids.add(entry.feature_id)
                else:
                    ids.update(entry.values.values())
                    if entry.default:
                        ids.add(entry.default)
        return ids
