import re
from typing import Iterable, List, Optional

from baselinegate.errors import ParseError
from baselinegate.models.occurrence import Occurrence, OccurrenceKind
from baselinegate.scanners.base import LineIndex, ScanResult, SourceScanner

IDENT = "ident"
PRIVATE = "private"
PUNCT = "punct"
STRING = "string"
TEMPLATE = "template"
NUMBER = "number"
REGEX = "regex"

IDENTIFIER = re.compile(r"[A-Za-z_$\u00c0-\uffff][\w$\u00c0-\uffff]*")
NUMBER_LITERAL = re.compile(
    r"0[xXoObB][\da-fA-F_]+n?|(?:\d[\d_]*\.?[\d_]*|\.\d[\d_]*)(?:[eE][+-]?\d[\d_]*)?n?"
)

PUNCTUATORS = (
    ">>>=", "...", "===", "!==", "**=", "<<=", ">>=", ">>>", "&&=", "||=", "??=",
    "=>", "==", "!=", "<=", ">=", "&&", "||", "??", "?.", "++", "--", "+=", "-=",
    "*=", "/=", "%=", "&=", "|=", "^=", "**", "<<", ">>",
)

# After one of these keywords a `/` starts a regular expression
REGEX_KEYWORDS = frozenset({
    "return", "typeof", "instanceof", "in", "of", "new", "delete", "void",
    "throw", "case", "do", "else", "yield", "await",
})

PUNCT_SYNTAX = {
    "?.": ("optional-chaining",),
    "??": ("nullish-coalescing",),
    "??=": ("nullish-coalescing", "logical-assignment"),
    "&&=": ("logical-assignment",),
    "||=": ("logical-assignment",),
    "**": ("exponentiation",),
    "**=": ("exponentiation",),
    "...": ("spread",),
    "=>": ("arrow-functions",),
}

GLOBAL_OBJECTS = frozenset({"window", "globalThis", "self"})
DECLARATION_KEYWORDS = frozenset({"function", "class", "const", "let", "var"})
MAX_CHAIN = 4

# `if (...) {` and friends are not method definitions
CONTROL_KEYWORDS = frozenset({"if", "for", "while", "switch", "with", "catch", "return", "typeof"})
# A `[` after one of these (or at the start of input) begins a statement
STATEMENT_START = frozenset({";", "{", "}", "("})
BRACKETS = {"(": ")", "[": "]", "{": "}"}


class Token:
    __slots__ = ("kind", "value", "offset", "flags")

    def __init__(self, kind: str, value: str, offset: int):
        self.kind = kind
        self.value = value
        self.offset = offset
        self.flags = set()

    def is_punct(self, *values) -> bool:
        return self.kind == PUNCT and self.value in values


class _Tokenizer:
    """
    Splits script source into tokens. Unterminated strings and regular
    expressions are reported and skipped to the end of their line; an
    unterminated comment or template literal stops tokenization.
    """

    def __init__(self, src: str, file_path: str, index: LineIndex, errors: List[ParseError]):
        self.src = src
        self.file_path = file_path
        self.index = index
        self.errors = errors
        self.tokens: List[Token] = []
        # None for a plain `{`, the template token for a `${`
        self.braces: List[Optional[Token]] = []

    def _error(self, offset: int, reason: str) -> ParseError:
        line, column = self.index.position(offset)
        return ParseError(self.file_path, line, column, reason, "javascript")

    def run(self) -> List[Token]:
        src = self.src
        n = len(src)
        pos = 0

        if src.startswith("#!"):
            newline = src.find("\n")
            pos = n if newline == -1 else newline

        while pos < n:
            ch = src[pos]

            if ch.isspace():
                pos += 1
                continue

            if src.startswith("//", pos):
                newline = src.find("\n", pos)
                pos = n if newline == -1 else newline
                continue

            if src.startswith("/*", pos):
                end = src.find("*/", pos + 2)
                if end == -1:
                    raise self._error(pos, "unterminated comment")
                pos = end + 2
                continue

            if ch in "\"'":
                pos = self._string(pos)
                continue

            if ch == "`":
                token = Token(TEMPLATE, "`", pos)
                self.tokens.append(token)
                pos = self._template(token, pos + 1)
                continue

            if ch == "#":
                match = IDENTIFIER.match(src, pos + 1)
                if match:
                    self.tokens.append(Token(PRIVATE, "#" + match.group(0), pos))
                    pos = match.end()
                    continue

            if ch.isdigit() or (ch == "." and src[pos + 1:pos + 2].isdigit()):
                match = NUMBER_LITERAL.match(src, pos)
                self.tokens.append(Token(NUMBER, match.group(0), pos))
                pos = match.end()
                continue

            match = IDENTIFIER.match(src, pos)
            if match:
                self.tokens.append(Token(IDENT, match.group(0), pos))
                pos = match.end()
                continue

            if ch == "/" and self._regex_allowed():
                pos = self._regex(pos)
                continue

            if ch == "}" and self.braces:
                owner = self.braces.pop()
                if owner is not None:
                    pos = self._template(owner, pos + 1)
                    continue

            if ch == "{":
                self.braces.append(None)

            pos = self._punct(pos)

        return self.tokens

    def _punct(self, pos: int) -> int:
        src = self.src
        for punct in PUNCTUATORS:
            if src.startswith(punct, pos):
                # `a?.5:b` is a conditional, not optional chaining
                if punct == "?." and src[pos + 2:pos + 3].isdigit():
                    continue
                self.tokens.append(Token(PUNCT, punct, pos))
                return pos + len(punct)
        self.tokens.append(Token(PUNCT, src[pos], pos))
        return pos + 1

    def _string(self, pos: int) -> int:
        src = self.src
        quote = src[pos]
        i = pos + 1
        while i < len(src):
            ch = src[i]
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                self.tokens.append(Token(STRING, src[pos:i + 1], pos))
                return i + 1
            if ch == "\n":
                break
            i += 1
        self.errors.append(self._error(pos, "unterminated string literal"))
        return i

    def _template(self, token: Token, pos: int) -> int:
        src = self.src
        while pos < len(src):
            ch = src[pos]
            if ch == "\\":
                pos += 2
                continue
            if ch == "`":
                return pos + 1
            if ch == "\n":
                token.flags.add("multiline")
            if src.startswith("${", pos):
                token.flags.add("interpolation")
                self.braces.append(token)
                return pos + 2
            pos += 1
        raise self._error(token.offset, "unterminated template literal")

    def _regex_allowed(self) -> bool:
        if not self.tokens:
            return True
        prev = self.tokens[-1]
        if prev.kind == PUNCT:
            return prev.value not in (")", "]")
        if prev.kind == IDENT:
            return prev.value in REGEX_KEYWORDS
        return False

    def _regex(self, pos: int) -> int:
        src = self.src
        i = pos + 1
        in_class = False
        while i < len(src):
            ch = src[i]
            if ch == "\\":
                i += 2
                continue
            if ch == "\n":
                break
            if in_class:
                if ch == "]":
                    in_class = False
            elif ch == "[":
                in_class = True
            elif ch == "/":
                i += 1
                while i < len(src) and src[i].isalnum():
                    i += 1
                self.tokens.append(Token(REGEX, src[pos:i], pos))
                return i
            i += 1
        self.errors.append(self._error(pos, "unterminated regular expression"))
        return i


def _match_brackets(tokens: List[Token]):
    """Map each opening bracket to its closer and each token to its enclosing opener."""
    closers = {}
    parents: List[Optional[int]] = []
    stack: List[int] = []
    for i, token in enumerate(tokens):
        if token.kind == PUNCT and token.value in (")", "]", "}"):
            if stack and BRACKETS[tokens[stack[-1]].value] == token.value:
                closers[stack.pop()] = i
        parents.append(stack[-1] if stack else None)
        if token.kind == PUNCT and token.value in BRACKETS:
            stack.append(i)
    return closers, parents


def _is_parameter_list(tokens: List[Token], opener: int, closers) -> bool:
    close = closers.get(opener)
    after = tokens[close + 1] if close is not None and close + 1 < len(tokens) else None
    if after is not None and after.is_punct("=>"):
        return True

    before = tokens[opener - 1] if opener > 0 else None
    if before is None or before.kind != IDENT:
        return False
    if before.value in ("catch", "function"):
        return True
    # function name(...) and function* name(...)
    keywords = [t.value for t in tokens[max(opener - 3, 0):opener - 1]]
    if keywords[-1:] == ["function"] or keywords == ["function", "*"]:
        return True
    # method shorthand: name(...) {
    return (
        before.value not in CONTROL_KEYWORDS
        and after is not None
        and after.is_punct("{")
    )


def _is_pattern(tokens: List[Token], i: int, closers, parents) -> bool:
    """
    True when the bracket at `i` opens a destructuring pattern outside a
    declaration: a function, arrow or catch parameter, or the target of
    `({a} = obj)` / `[a, b] = [b, a]`.
    """
    close = closers.get(i)
    if close is None:
        return False
    prev = tokens[i - 1] if i > 0 else None
    after = tokens[close + 1] if close + 1 < len(tokens) else None

    if after is not None and after.is_punct("="):
        if prev is None or prev.is_punct("("):
            return True
        if tokens[i].value == "[" and prev.kind == PUNCT and prev.value in STATEMENT_START:
            return True

    if prev is None or not prev.is_punct("(", ","):
        return False
    opener = parents[i]
    if opener is None or not tokens[opener].is_punct("("):
        return False
    return _is_parameter_list(tokens, opener, closers)


class ScriptScanner(SourceScanner):
    """
    Tolerant script scanner for JavaScript and TypeScript sources.

    Reports syntax constructs (optional chaining, private members, static
    blocks, destructuring and so on) and references to global APIs whose
    dotted names appear in `api_names`. Identifiers reached through member
    access are not treated as globals, so `obj.fetch` is not `fetch`.
    """

    language = "javascript"
    extensions = (".js", ".mjs", ".cjs", ".jsx", ".ts", ".mts", ".cts", ".tsx")

    def __init__(self, api_names: Optional[Iterable[str]] = None):
        super().__init__()
        if api_names is None:
            from baselinegate.mappings.loader import default_mapping_tables
            api_names = default_mapping_tables().js_api.keys()
        self.api_names = frozenset(api_names)

    def _scan(self, source_text: str, file_path: str, result: ScanResult) -> None:
        index = LineIndex(source_text)
        tokenizer = _Tokenizer(source_text, file_path, index, result.errors)
        try:
            tokens = tokenizer.run()
        except ParseError as e:
            result.errors.append(e)
            tokens = tokenizer.tokens

        for occurrence in self._analyze(tokens, file_path, index):
            result.occurrences.append(occurrence)

    def _analyze(self, tokens: List[Token], file_path: str, index: LineIndex):
        def occurrence(kind, name, token):
            line, column = index.position(token.offset)
            return Occurrence(kind, name, file_path, line, column)

        closers, parents = _match_brackets(tokens)

        for i, token in enumerate(tokens):
            prev = tokens[i - 1] if i > 0 else None
            nxt = tokens[i + 1] if i + 1 < len(tokens) else None

            if token.kind == PUNCT:
                for syntax in PUNCT_SYNTAX.get(token.value, ()):
                    yield occurrence(OccurrenceKind.SYNTAX, syntax, token)
                if token.is_punct("{", "[") and _is_pattern(tokens, i, closers, parents):
                    yield occurrence(OccurrenceKind.SYNTAX, "destructuring", token)

            elif token.kind == PRIVATE:
                yield occurrence(OccurrenceKind.SYNTAX, "private-class-members", token)

            elif token.kind == TEMPLATE:
                if token.flags:
                    yield occurrence(OccurrenceKind.SYNTAX, "template-literals", token)

            elif token.kind == NUMBER:
                if "_" in token.value:
                    yield occurrence(OccurrenceKind.SYNTAX, "numeric-separators", token)
                if token.value.endswith("n"):
                    yield occurrence(OccurrenceKind.SYNTAX, "bigint", token)

            elif token.kind == IDENT:
                if prev is not None and prev.is_punct(".", "?."):
                    continue

                syntax = self._keyword_syntax(token, nxt)
                if syntax:
                    yield occurrence(OccurrenceKind.SYNTAX, syntax, token)
                    continue

                name = self._api_name(tokens, i, prev, nxt)
                if name:
                    yield occurrence(OccurrenceKind.API_REFERENCE, name, token)

    @staticmethod
    def _keyword_syntax(token: Token, nxt: Optional[Token]) -> Optional[str]:
        value = token.value
        if nxt is None:
            return "async-await" if value == "await" else None
        if value == "static" and nxt.is_punct("{"):
            return "static-initialization-block"
        if value in ("const", "let", "var") and nxt.is_punct("{", "["):
            return "destructuring"
        if value == "await":
            return "async-await"
        if value == "async" and (nxt.kind == IDENT or nxt.is_punct("(")):
            return "async-await"
        if value == "class" and (nxt.kind == IDENT or nxt.is_punct("{")):
            return "classes"
        return None

    def _api_name(self, tokens: List[Token], i: int, prev: Optional[Token], nxt: Optional[Token]) -> Optional[str]:
        if prev is not None:
            if prev.kind == IDENT and prev.value in DECLARATION_KEYWORDS:
                return None
            # object literal key
            if prev.is_punct("{", ",") and nxt is not None and nxt.is_punct(":"):
                return None

        parts = [tokens[i].value]
        j = i
        while (
            len(parts) < MAX_CHAIN
            and j + 2 < len(tokens)
            and tokens[j + 1].is_punct(".", "?.")
            and tokens[j + 2].kind == IDENT
        ):
            parts.append(tokens[j + 2].value)
            j += 2

        if len(parts) > 1 and parts[0] in GLOBAL_OBJECTS:
            parts = parts[1:]

        for k in range(len(parts), 0, -1):
            name = ".".join(parts[:k])
            if name in self.api_names:
                return name
        return None
