"""
Lossless token stream for JavaScript / TypeScript / JSX sources.

The stream is the syntax representation rewrite rules operate on: every
character of the source belongs to exactly one token, so
``tokenize(src).to_source() == src`` always holds. Strings and comments are
single tokens, which keeps rewrites from touching text inside them.

A template literal is split at its substitutions: the literal parts are
TEMPLATE tokens (``"`a ${"``, ``"} b ${"``, ``"} c`"``) and the code inside
``${...}`` is tokenized like any other code.

A quote that cannot open a string literal is a one-character PUNCT token.
That covers apostrophes in JSX text (``<p>Don't {x}</p>``): a quote glued to
a preceding word, a quote with no closing partner on its line, and a quote
after a JSX ``>`` or ``}`` whose would-be string runs into ``{`` or ``<``.

Known limit: regex literals are not recognised (``/`` is punctuation).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, NamedTuple, Optional, Sequence, Tuple

from nextmig.errors import TokenizeError

WS = "ws"
COMMENT = "comment"
STRING = "string"
TEMPLATE = "template"
NAME = "name"
NUMBER = "number"
PUNCT = "punct"

_TRIVIA = frozenset({WS, COMMENT})

_WS_RE = re.compile(r"\s+")
_NAME_RE = re.compile(r"[A-Za-z_$][\w$]*")
_NUMBER_RE = re.compile(r"(?:\d[\w.]*|\.\d[\w]*)")
_PUNCTS = (
    ">>>=", "...", "===", "!==", "**=", "<<=", ">>=", ">>>", "&&=", "||=", "??=",
    "=>", "?.", "??", "==", "!=", "<=", ">=", "&&", "||", "++", "--",
    "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "**", "<<", ">>",
)
_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset(_OPENERS.values())


class Token(NamedTuple):
    kind: str
    text: str


def name(text: str) -> Token:
    return Token(NAME, text)


def punct(text: str) -> Token:
    return Token(PUNCT, text)


def space(text: str = " ") -> Token:
    return Token(WS, text)


def string(value: str, quote: str = "'") -> Token:
    return Token(STRING, f"{quote}{value}{quote}")


@dataclass(frozen=True)
class TokenStream:
    """Immutable token sequence; every edit returns a new stream."""

    tokens: Tuple[Token, ...]

    def __len__(self) -> int:
        return len(self.tokens)

    def __getitem__(self, index: int) -> Token:
        return self.tokens[index]

    def __iter__(self) -> Iterator[Token]:
        return iter(self.tokens)

    def to_source(self) -> str:
        return "".join(t.text for t in self.tokens)

    def is_trivia(self, index: int) -> bool:
        return self.tokens[index].kind in _TRIVIA

    def prev_significant(self, index: int) -> Optional[int]:
        i = index - 1
        while i >= 0:
            if not self.is_trivia(i):
                return i
            i -= 1
        return None

    def next_significant(self, index: int) -> Optional[int]:
        i = index + 1
        while i < len(self.tokens):
            if not self.is_trivia(i):
                return i
            i += 1
        return None

    def text_at(self, index: Optional[int]) -> str:
        return "" if index is None else self.tokens[index].text

    def find_names(self, text: str) -> Iterator[int]:
        for i, tok in enumerate(self.tokens):
            if tok.kind == NAME and tok.text == text:
                yield i

    def matching_close(self, index: int) -> int:
        """Index of the bracket closing the opener at index."""
        opener = self.tokens[index].text
        if opener not in _OPENERS:
            raise ValueError(f"token {index} is not an opening bracket: {opener!r}")
        depth = 0
        for i in range(index, len(self.tokens)):
            tok = self.tokens[i]
            if tok.kind != PUNCT:
                continue
            if tok.text in _OPENERS:
                depth += 1
            elif tok.text in _CLOSERS:
                depth -= 1
                if depth == 0:
                    return i
        raise TokenizeError(f"unbalanced {opener!r} at token {index}")

    def matching_open(self, index: int) -> int:
        """Index of the bracket opening the closer at index."""
        closer = self.tokens[index].text
        if closer not in _CLOSERS:
            raise ValueError(f"token {index} is not a closing bracket: {closer!r}")
        depth = 0
        for i in range(index, -1, -1):
            tok = self.tokens[i]
            if tok.kind != PUNCT:
                continue
            if tok.text in _CLOSERS:
                depth += 1
            elif tok.text in _OPENERS:
                depth -= 1
                if depth == 0:
                    return i
        raise TokenizeError(f"unbalanced {closer!r} at token {index}")

    def top_level_commas(self, open_index: int, close_index: int) -> list[int]:
        """Commas directly inside the bracket pair (not nested deeper)."""
        commas: list[int] = []
        depth = 0
        for i in range(open_index + 1, close_index):
            tok = self.tokens[i]
            if tok.kind != PUNCT:
                continue
            if tok.text in _OPENERS:
                depth += 1
            elif tok.text in _CLOSERS:
                depth -= 1
            elif tok.text == "," and depth == 0:
                commas.append(i)
        return commas

    def splice(self, edits: Iterable[Tuple[int, int, Sequence[Token]]]) -> "TokenStream":
        """Replace [start, stop) ranges with new tokens. Ranges must not overlap."""
        ordered = sorted(edits, key=lambda e: (e[0], e[1]))
        out: list[Token] = []
        cursor = 0
        for start, stop, new in ordered:
            if start < cursor:
                raise ValueError(f"overlapping edit at token {start}")
            out.extend(self.tokens[cursor:start])
            out.extend(new)
            cursor = stop
        out.extend(self.tokens[cursor:])
        return TokenStream(tuple(out))


# Words a string literal may directly follow; any other word glued to a quote
# is prose (``Don't``).
_KEYWORDS_BEFORE_EXPR = frozenset({
    "return", "typeof", "case", "in", "of", "instanceof", "new", "delete",
    "void", "throw", "yield", "await", "else", "do", "from", "import", "export",
    "default", "extends",
})


def _scan_string(source: str, start: int) -> Optional[int]:
    """End offset of the string literal at start, or None if it does not close on its line."""
    quote = source[start]
    i = start + 1
    n = len(source)
    while i < n:
        ch = source[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n":
            return None
        i += 1
    return None


def _scan_template_chunk(source: str, start: int, opened_at: int) -> Tuple[int, bool]:
    """
    Scan literal template text from start.

    Returns (end, opens_substitution): end is just past the closing backtick
    or just past ``${``.
    """
    i = start
    n = len(source)
    while i < n:
        ch = source[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "`":
            return i + 1, False
        if ch == "$" and source.startswith("{", i + 1):
            return i + 2, True
        i += 1
    raise TokenizeError(f"unterminated template literal at offset {opened_at}")


def _last_significant(tokens: Sequence[Token]) -> Optional[Token]:
    for tok in reversed(tokens):
        if tok.kind not in _TRIVIA:
            return tok
    return None


def _is_prose_quote(source: str, start: int, end: Optional[int], tokens: Sequence[Token]) -> bool:
    if end is None:
        return True
    if tokens and tokens[-1].kind in (NAME, NUMBER) and tokens[-1].text not in _KEYWORDS_BEFORE_EXPR:
        return True
    prev = _last_significant(tokens)
    if prev is not None and prev.kind == PUNCT and prev.text in (">", "}"):
        body = source[start + 1:end - 1]
        return "{" in body or "<" in body
    return False


def tokenize(source: str) -> TokenStream:
    """Split source into a lossless TokenStream."""
    tokens: list[Token] = []
    # brace depth inside each open ${...}, innermost last
    substitutions: list[int] = []
    i = 0
    n = len(source)
    while i < n:
        ch = source[i]
        if ch == "}" and substitutions and substitutions[-1] == 0:
            substitutions.pop()
            end, opens = _scan_template_chunk(source, i + 1, i)
            if opens:
                substitutions.append(0)
            kind = TEMPLATE
        elif ch.isspace():
            m = _WS_RE.match(source, i)
            end = m.end()
            kind = WS
        elif source.startswith("//", i):
            end = source.find("\n", i)
            end = n if end == -1 else end
            kind = COMMENT
        elif source.startswith("/*", i):
            end = source.find("*/", i + 2)
            if end == -1:
                raise TokenizeError(f"unterminated block comment at offset {i}")
            end += 2
            kind = COMMENT
        elif ch in "'\"":
            end = _scan_string(source, i)
            if _is_prose_quote(source, i, end, tokens):
                end = i + 1
                kind = PUNCT
            else:
                kind = STRING
        elif ch == "`":
            end, opens = _scan_template_chunk(source, i + 1, i)
            if opens:
                substitutions.append(0)
            kind = TEMPLATE
        elif _NAME_RE.match(source, i):
            end = _NAME_RE.match(source, i).end()
            kind = NAME
        elif ch.isdigit() or (ch == "." and i + 1 < n and source[i + 1].isdigit()):
            end = _NUMBER_RE.match(source, i).end()
            kind = NUMBER
        else:
            end = i + 1
            for p in _PUNCTS:
                if source.startswith(p, i):
                    end = i + len(p)
                    break
            kind = PUNCT
            if substitutions and ch == "{":
                substitutions[-1] += 1
            elif substitutions and ch == "}":
                substitutions[-1] -= 1
        tokens.append(Token(kind, source[i:end]))
        i = end
    if substitutions:
        raise TokenizeError("unterminated template substitution at end of input")
    return TokenStream(tuple(tokens))
