import re
from typing import Optional, Tuple

from baselinegate.errors import ParseError
from baselinegate.models.occurrence import Occurrence, OccurrenceKind
from baselinegate.scanners.base import LineIndex, ScanResult, SourceScanner

VENDOR_PREFIX = re.compile(r"^-(webkit|moz|ms|o)-")
PROPERTY_NAME = re.compile(r"-{0,2}[a-zA-Z_][\w-]*")
FUNCTION_CALL = re.compile(r"(?<![\w-])(-?[a-zA-Z][\w-]*)\(")
VAR_ARGUMENT = re.compile(r"var\(\s*(--[\w-]+)", re.IGNORECASE)
PSEUDO = re.compile(r"(::?)([a-zA-Z][\w-]*)")
AT_RULE_NAME = re.compile(r"@([a-zA-Z-][\w-]*)")
MEDIA_FEATURE = re.compile(r"\(\s*([a-zA-Z][\w-]*)\s*(?=[:)<>=])")
SUPPORTS_DECLARATION = re.compile(
    r"\(\s*(-{0,2}[a-zA-Z][\w-]*)\s*:\s*([^()]*(?:\([^()]*\)[^()]*)*)\)"
)
SUPPORTS_SELECTOR = re.compile(r"selector\(([^()]*(?:\([^()]*\)[^()]*)*)\)", re.IGNORECASE)
STRING = re.compile(r"\"(?:\\.|[^\"\\\n])*\"?|'(?:\\.|[^'\\\n])*'?")
ATTRIBUTE_SELECTOR = re.compile(r"\[[^\]]*\]")
IMPORTANT = re.compile(r"\s*!\s*important\s*$", re.IGNORECASE)

LINE_COMMENT_EXTENSIONS = (".scss", ".less")


def _blank(match) -> str:
    return re.sub(r"[^\n]", " ", match.group(0))


def blank_comments(text: str, line_comments: bool = False) -> Tuple[str, Optional[int]]:
    """
    Replace comments with spaces, keeping newlines so offsets still map to
    the original text. Returns the blanked text and the offset of an
    unterminated comment, if one was found.
    """
    out = list(text)
    n = len(text)
    i = 0
    quote = None

    while i < n:
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote or ch == "\n":
                quote = None
            i += 1
            continue
        if ch in "\"'":
            quote = ch
            i += 1
            continue
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            stop = n if end == -1 else end + 2
            for j in range(i, stop):
                if out[j] != "\n":
                    out[j] = " "
            if end == -1:
                return "".join(out), i
            i = stop
            continue
        # `//` after ':' is a URL scheme, not a comment
        if line_comments and text.startswith("//", i) and (i == 0 or text[i - 1] != ":"):
            end = text.find("\n", i)
            stop = n if end == -1 else end
            for j in range(i, stop):
                out[j] = " "
            i = stop
            continue
        i += 1

    return "".join(out), None


class _StylesheetWalker:
    """Single-use walker holding the per-scan state for one stylesheet."""

    def __init__(self, src: str, file_path: str, index: LineIndex, result: ScanResult):
        self.src = src
        self.file_path = file_path
        self.index = index
        self.result = result

    def emit(self, kind, name, offset, value=None, context=None):
        line, column = self.index.position(offset)
        self.result.occurrences.append(
            Occurrence(kind, name, self.file_path, line, column, value, context)
        )

    def error(self, offset: int, reason: str):
        line, column = self.index.position(offset)
        self.result.errors.append(ParseError(self.file_path, line, column, reason, "css"))

    def _skip_space(self, pos: int, end: int) -> int:
        while pos < end and self.src[pos].isspace():
            pos += 1
        return pos

    def _find_stop(self, pos: int, end: int) -> Tuple[int, Optional[str]]:
        """Next `;`, `{` or `}` outside strings; `;` also has to be outside parens."""
        src = self.src
        quote = None
        depth = 0
        while pos < end:
            ch = src[pos]
            if quote:
                if ch == "\\":
                    pos += 2
                    continue
                if ch == quote or ch == "\n":
                    quote = None
            elif ch in "\"'":
                quote = ch
            elif ch == "(":
                depth += 1
            elif ch == ")":
                depth = max(0, depth - 1)
            elif ch in "{}":
                return pos, ch
            elif ch == ";" and depth == 0:
                return pos, ch
            pos += 1
        return end, None

    def _find_block_end(self, pos: int, end: int) -> int:
        src = self.src
        quote = None
        depth = 1
        while pos < end:
            ch = src[pos]
            if quote:
                if ch == "\\":
                    pos += 2
                    continue
                if ch == quote or ch == "\n":
                    quote = None
            elif ch in "\"'":
                quote = ch
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return pos
            pos += 1
        return -1

    @staticmethod
    def _top_level_colon(text: str) -> int:
        cleaned = STRING.sub(_blank, text)
        depth = 0
        for i, ch in enumerate(cleaned):
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth = max(0, depth - 1)
            elif ch == ":" and depth == 0:
                return i
        return -1

    def walk(self, start: int, end: int, context: Optional[str] = None, top_level: bool = True):
        pos = start
        while pos < end:
            pos = self._skip_space(pos, end)
            if pos >= end:
                break

            stop, ch = self._find_stop(pos, end)

            if ch == "{":
                close = self._find_block_end(stop + 1, end)
                if close == -1:
                    # Unclosed block: everything up to `end` belongs to it
                    self.error(pos, "unclosed block")
                    return
                self._rule(pos, stop, close, context)
                pos = close + 1
            elif ch == "}":
                self.error(stop, "unexpected '}'")
                pos = stop + 1
            elif ch == ";":
                self._statement(pos, stop, context)
                pos = stop + 1
            else:
                # The last declaration of a block may omit its ';'
                if top_level:
                    self.error(pos, "missing terminator")
                else:
                    self._statement(pos, end, context)
                pos = end

    def _statement(self, start: int, stop: int, context: Optional[str]):
        text = self.src[start:stop].strip()
        if not text:
            return
        if text.startswith("@"):
            match = AT_RULE_NAME.match(text)
            if not match:
                self.error(start, "invalid at-rule")
                return
            params = " ".join(text[match.end():].split())
            self.emit(OccurrenceKind.AT_RULE, "@" + match.group(1).lower(), start, params or None, context)
            return
        if text.startswith("$"):
            # preprocessor variable
            return
        self._declaration(text, start, context)

    def _declaration(self, text: str, offset: int, context: Optional[str]):
        colon = self._top_level_colon(text)
        if colon == -1:
            self.error(offset, f"expected ':' in declaration {text[:40]!r}")
            return

        name = text[:colon].strip()
        raw_value = text[colon + 1:]

        if name.startswith("--"):
            # Custom property definition: only var() references inside count
            self._functions(raw_value, offset, context)
            return

        if not PROPERTY_NAME.fullmatch(name):
            self.error(offset, f"invalid property name {name[:40]!r}")
            return

        if self._top_level_colon(raw_value) != -1:
            self.error(offset, f"missing ';' after declaration {name!r}")
            return

        prop = name.lower()
        value = IMPORTANT.sub("", " ".join(raw_value.split()))

        self.emit(OccurrenceKind.PROPERTY, prop, offset, value, context)
        prefix = VENDOR_PREFIX.match(prop)
        if prefix:
            self.emit(OccurrenceKind.PROPERTY, prop[prefix.end():], offset, value, context)

        self._functions(raw_value, offset, context)

    def _functions(self, value_text: str, offset: int, context: Optional[str]):
        cleaned = STRING.sub(_blank, value_text)
        for match in FUNCTION_CALL.finditer(cleaned):
            name = match.group(1).lower()
            if name == "var":
                argument = VAR_ARGUMENT.match(cleaned, match.start())
                self.emit(
                    OccurrenceKind.CUSTOM_PROPERTY, "var", offset,
                    argument.group(1) if argument else None, context,
                )
                continue
            self.emit(OccurrenceKind.FUNCTION, name, offset, None, context)
            prefix = VENDOR_PREFIX.match(name)
            if prefix:
                self.emit(OccurrenceKind.FUNCTION, name[prefix.end():], offset, None, context)

    def _selectors(self, selector: str, offset: int, context: Optional[str]):
        cleaned = ATTRIBUTE_SELECTOR.sub(" ", STRING.sub(_blank, selector))
        for match in PSEUDO.finditer(cleaned):
            name = (match.group(1) + match.group(2)).lower()
            self.emit(OccurrenceKind.SELECTOR, name, offset, None, context or selector)

    def _rule(self, start: int, brace: int, close: int, context: Optional[str]):
        prelude = " ".join(self.src[start:brace].split())

        if not prelude.startswith("@"):
            self._selectors(prelude, start, prelude)
            self.walk(brace + 1, close, prelude, top_level=False)
            return

        match = AT_RULE_NAME.match(prelude)
        if not match:
            self.error(start, "invalid at-rule")
            return

        name = "@" + match.group(1).lower()
        params = prelude[match.end():].strip()
        self.emit(OccurrenceKind.AT_RULE, name, start, params or None, context)

        if name == "@media":
            for feature in MEDIA_FEATURE.finditer(params):
                self.emit(OccurrenceKind.AT_RULE, name, start, feature.group(1).lower(), context)
        elif name == "@supports":
            for condition in SUPPORTS_DECLARATION.finditer(params):
                value = IMPORTANT.sub("", " ".join(condition.group(2).split()))
                self.emit(OccurrenceKind.VALUE, condition.group(1).lower(), start, value, name)
            for selector in SUPPORTS_SELECTOR.finditer(params):
                self._selectors(selector.group(1), start, name)

        self.walk(brace + 1, close, f"{name} {params}".strip(), top_level=False)


class CSSScanner(SourceScanner):
    """
    Tolerant stylesheet scanner.

    Reports properties (with their values), pseudo-class and pseudo-element
    selectors, value functions, var() references and at-rules, including
    the media features of @media and the declarations tested by @supports.
    A malformed rule is reported and skipped; scanning resumes after it.
    """

    language = "css"
    extensions = (".css", ".scss", ".less", ".pcss")

    def _scan(self, source_text: str, file_path: str, result: ScanResult) -> None:
        line_comments = file_path.lower().endswith(LINE_COMMENT_EXTENSIONS)
        src, unterminated = blank_comments(source_text, line_comments)

        index = LineIndex(source_text)
        walker = _StylesheetWalker(src, file_path, index, result)
        if unterminated is not None:
            walker.error(unterminated, "unterminated comment")

        walker.walk(0, len(src))
