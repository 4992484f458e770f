from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OccurrenceKind(str, Enum):
    PROPERTY = "property"
    VALUE = "value"
    SELECTOR = "selector"
    FUNCTION = "function"
    AT_RULE = "at-rule"
    CUSTOM_PROPERTY = "custom-property"
    API_REFERENCE = "api-reference"
    SYNTAX = "syntax"
    ELEMENT = "element"
    ATTRIBUTE = "attribute"


@dataclass(frozen=True)
class Occurrence:
    """
    One syntactic appearance of a candidate feature in scanned text.
    Line and column are 1-based.
    """
    kind: OccurrenceKind
    name: str
    file: str
    line: int
    column: int
    associated_value: Optional[str] = None
    enclosing_context: Optional[str] = None

    def shifted(self, line_offset: int, column_offset: int) -> "Occurrence":
        """
        Relocate an occurrence found in an embedded block (e.g. a <style>
        body) into the coordinates of the host document.
        """
        column = self.column + column_offset if self.line == 1 else self.column
        return Occurrence(
            kind=self.kind,
            name=self.name,
            file=self.file,
            line=self.line + line_offset,
            column=column,
            associated_value=self.associated_value,
            enclosing_context=self.enclosing_context,
        )
