from html.parser import HTMLParser
from typing import List, Optional, Tuple

from baselinegate.errors import ParseError
from baselinegate.models.occurrence import Occurrence, OccurrenceKind
from baselinegate.scanners.base import ScanResult, SourceScanner
from baselinegate.scanners.css import CSSScanner
from baselinegate.scanners.script import ScriptScanner

# Attributes whose value is a space-separated token list
TOKEN_LIST_ATTRIBUTES = frozenset({"rel", "sandbox", "blocking"})

SCRIPT_TYPES = frozenset({"", "module", "text/javascript", "application/javascript"})


class _MarkupCollector(HTMLParser):
    def __init__(self, file_path: str, result: ScanResult) -> None:
        super().__init__(convert_charrefs=True)
        self.file_path = file_path
        self.result = result
        # (language, (line, offset), text) for each <style>/<script> body
        self.embedded: List[Tuple[str, Tuple[int, int], str]] = []
        self._raw_tag: Optional[str] = None
        self._raw_language: Optional[str] = None
        self._raw_start: Optional[Tuple[int, int]] = None
        self._raw_chunks: List[str] = []

    def _emit(self, kind, name, line, column, value=None, context=None):
        self.result.occurrences.append(
            Occurrence(kind, name, self.file_path, line, column, value, context)
        )

    def handle_starttag(self, tag, attrs):
        line, offset = self.getpos()
        column = offset + 1
        attributes = dict(attrs)

        element_value = attributes.get("type") if tag == "input" else None
        self._emit(OccurrenceKind.ELEMENT, tag, line, column, element_value)

        for name, value in attrs:
            if name in TOKEN_LIST_ATTRIBUTES and value:
                for token in value.split():
                    self._emit(OccurrenceKind.ATTRIBUTE, name, line, column, token.lower(), tag)
            else:
                self._emit(OccurrenceKind.ATTRIBUTE, name, line, column, value, tag)

        if tag == "style":
            self._open_raw(tag, "css")
        elif tag == "script":
            script_type = (attributes.get("type") or "").strip().lower()
            self._open_raw(tag, "javascript" if script_type in SCRIPT_TYPES else None)

    def _open_raw(self, tag: str, language: Optional[str]):
        self._raw_tag = tag
        self._raw_language = language
        self._raw_start = None
        self._raw_chunks = []

    def handle_data(self, data):
        if self._raw_tag is None:
            return
        if self._raw_start is None:
            self._raw_start = self.getpos()
        self._raw_chunks.append(data)

    def handle_endtag(self, tag):
        if self._raw_tag == tag:
            self._close_raw()

    def finish(self):
        """Report a <style>/<script> left open at end of input, keeping its body."""
        if self._raw_tag is None:
            return
        line, offset = self._raw_start or self.getpos()
        self.result.errors.append(
            ParseError(self.file_path, line, offset + 1, f"unclosed <{self._raw_tag}> element", "html")
        )
        self._close_raw()

    def _close_raw(self):
        if self._raw_language and self._raw_start and self._raw_chunks:
            self.embedded.append((self._raw_language, self._raw_start, "".join(self._raw_chunks)))
        self._raw_tag = None
        self._raw_language = None
        self._raw_start = None
        self._raw_chunks = []


class MarkupScanner(SourceScanner):
    """
    HTML scanner.

    Every element and attribute is reported; `input` carries its `type`
    and token-list attributes such as `rel` are split into one occurrence
    per token. Inline <style> and <script> bodies are handed to the
    stylesheet and script scanners and their findings are mapped back to
    document positions.
    """

    language = "html"
    extensions = (".html", ".htm", ".xhtml")

    def __init__(self, css_scanner: Optional[CSSScanner] = None, script_scanner: Optional[ScriptScanner] = None):
        super().__init__()
        self.embedded_scanners = {
            "css": css_scanner or CSSScanner(),
            "javascript": script_scanner or ScriptScanner(),
        }

    def _scan(self, source_text: str, file_path: str, result: ScanResult) -> None:
        collector = _MarkupCollector(file_path, result)
        collector.feed(source_text)
        collector.close()
        collector.finish()

        for language, (line, offset), text in collector.embedded:
            embedded = self.embedded_scanners[language].scan(text, file_path)
            result.occurrences.extend(o.shifted(line - 1, offset) for o in embedded.occurrences)
            for error in embedded.errors:
                shifted_column = error.column + offset if error.line == 1 else error.column
                result.errors.append(
                    ParseError(file_path, error.line + line - 1, shifted_column, error.reason, error.parser)
                )
