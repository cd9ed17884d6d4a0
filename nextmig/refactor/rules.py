"""
Next.js 16 rewrite rules.

Each rule pairs a detection predicate over raw text with a rewrite over a
TokenStream. Detection is deliberately textual and cheap; it is tuned so that
a successful rewrite makes the predicate false again.

The async-accessor rewrites also mark the innermost enclosing ``function``
or arrow function ``async`` so the inserted ``await`` is valid. Object and
class methods are not recognised as scopes.

Heuristic limit kept on purpose: the async-accessor predicates only check
whether an awaited form appears *anywhere* in the file. A file with several
call sites where one is already awaited is not tagged, and matches inside
strings or comments tag a file whose rewrite then changes nothing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Callable, Iterable, Iterator, List, Optional

from .tokens import NAME, PUNCT, STRING, Token, TokenStream, name, punct, space, string


@dataclass(frozen=True)
class TransformRule:
    tag: str
    description: str
    detect: Callable[[str], bool]
    rewrite: Callable[[TokenStream], TokenStream]
    # Optional on-disk rename applied after a successful content rewrite.
    rename: Optional[Callable[[str], Optional[str]]] = None


_MEMBER_ACCESS = frozenset({".", "?.", "["})
_PROPERTY_PREFIX = frozenset({".", "?."})


def _is_property(stream: TokenStream, index: int) -> bool:
    return stream.text_at(stream.prev_significant(index)) in _PROPERTY_PREFIX


# --- middleware-to-proxy ---------------------------------------------------

_MIDDLEWARE_EXPORT_RE = re.compile(
    r"\bexport\s+(?:default\s+)?(?:async\s+)?function\s*\*?\s*middleware\b"
    r"|\bexport\s+(?:const|let|var)\s+middleware\b"
)
_MIDDLEWARE_DECL_RE = re.compile(r"\b(?:function\s*\*?\s*|(?:const|let|var)\s+)middleware\b")
_MIDDLEWARE_DEFAULT_RE = re.compile(r"\bexport\s+default\s+middleware\b")


def detect_middleware_export(text: str) -> bool:
    """File exports a function named middleware."""
    if _MIDDLEWARE_EXPORT_RE.search(text):
        return True
    return bool(_MIDDLEWARE_DECL_RE.search(text) and _MIDDLEWARE_DEFAULT_RE.search(text))


def rewrite_middleware_to_proxy(stream: TokenStream) -> TokenStream:
    """Rename the middleware function and its bare references to proxy."""
    edits = []
    for i in stream.find_names("middleware"):
        if _is_property(stream, i):
            continue
        prev_text = stream.text_at(stream.prev_significant(i))
        next_text = stream.text_at(stream.next_significant(i))
        if next_text == ":" and prev_text in ("{", ","):
            continue  # object key
        edits.append((i, i + 1, [name("proxy")]))
    return stream.splice(edits)


def rename_middleware_file(path: str) -> Optional[str]:
    """middleware.ts → proxy.ts for the root or src/ entry file only."""
    p = PurePosixPath(path)
    if p.stem != "middleware" or p.suffix not in (".ts", ".js"):
        return None
    if str(p.parent) not in (".", "src"):
        return None
    return str(p.with_name(f"proxy{p.suffix}"))


# --- update-revalidate-tag -------------------------------------------------

_CACHE_PROFILE = "max"


def _call_argument_counts(text: str, func: str) -> Iterator[int]:
    """Yield the argument count of every bare call to func in raw text."""
    for m in re.finditer(rf"(?<![\w$.]){re.escape(func)}\s*\(", text):
        depth = 1
        commas = 0
        has_content = False
        i = m.end()
        while i < len(text) and depth:
            ch = text[i]
            if ch in "'\"`":
                end = text.find(ch, i + 1)
                i = len(text) if end == -1 else end + 1
                has_content = True
                continue
            if ch in "([{":
                depth += 1
            elif ch in ")]}":
                depth -= 1
            elif ch == "," and depth == 1:
                commas += 1
            if depth and not ch.isspace():
                has_content = True
            i += 1
        yield commas + 1 if has_content else 0


def detect_revalidate_tag(text: str) -> bool:
    """Single-argument revalidateTag call with no cacheLife profile in the file."""
    if "cacheLife" in text:
        return False
    return any(count == 1 for count in _call_argument_counts(text, "revalidateTag"))


def rewrite_revalidate_tag(stream: TokenStream) -> TokenStream:
    """revalidateTag(tag) → revalidateTag(tag, 'max')."""
    edits = []
    for i in stream.find_names("revalidateTag"):
        if _is_property(stream, i):
            continue
        open_idx = stream.next_significant(i)
        if open_idx is None or stream[open_idx].text != "(":
            continue
        close_idx = stream.matching_close(open_idx)
        last_arg = stream.prev_significant(close_idx)
        if last_arg is None or last_arg == open_idx:
            continue  # no arguments
        if stream.top_level_commas(open_idx, close_idx):
            continue  # already has a profile (or more arguments)
        first_arg = stream.next_significant(open_idx)
        quote = "'"
        if first_arg is not None and stream[first_arg].kind == STRING:
            quote = stream[first_arg].text[0]
        edits.append((last_arg + 1, last_arg + 1, [punct(","), space(), string(_CACHE_PROFILE, quote)]))
    return stream.splice(edits)


# --- update-next-image -----------------------------------------------------

_LEGACY_IMAGE = "next/legacy/image"
_LEGACY_IMAGE_RE = re.compile(r"""(['"])next/legacy/image\1""")


def detect_legacy_image(text: str) -> bool:
    return bool(_LEGACY_IMAGE_RE.search(text))


def rewrite_legacy_image(stream: TokenStream) -> TokenStream:
    """Point next/legacy/image module specifiers at next/image."""
    edits = []
    for i, tok in enumerate(stream):
        if tok.kind == STRING and len(tok.text) >= 2 and tok.text[1:-1] == _LEGACY_IMAGE:
            edits.append((i, i + 1, [string("next/image", tok.text[0])]))
    return stream.splice(edits)


# --- enclosing async scope -------------------------------------------------

# Tokens after which a `{` belongs to a type, not a function body.
_TYPE_CONTEXT = frozenset({":", "|", "&", "<", ",", "?", "=>"})


@dataclass(frozen=True)
class _Scope:
    start: int
    end: int
    # where `async ` goes; None when already async or not safely adjustable
    insert_at: Optional[int]


def _body_after_params(stream: TokenStream, close_idx: int) -> Optional[int]:
    """Index of the `{` opening a function body, skipping a return type annotation."""
    i = stream.next_significant(close_idx)
    if i is None or stream[i].text not in ("{", ":"):
        return None
    while i is not None:
        text = stream[i].text
        if text == ";":
            return None  # overload signature
        if text == "{":
            if stream.text_at(stream.prev_significant(i)) not in _TYPE_CONTEXT:
                return i
            i = stream.matching_close(i)
        elif text in ("(", "["):
            i = stream.matching_close(i)
        i = stream.next_significant(i)
    return None


def _expression_end(stream: TokenStream, start: int) -> int:
    depth = 0
    for j in range(start, len(stream)):
        tok = stream[j]
        if tok.kind != PUNCT:
            continue
        if tok.text in ("(", "[", "{"):
            depth += 1
        elif tok.text in (")", "]", "}"):
            if depth == 0:
                return j
            depth -= 1
        elif tok.text in (",", ";") and depth == 0:
            return j
    return len(stream)


def _function_scope(stream: TokenStream, index: int) -> Optional[_Scope]:
    j = stream.next_significant(index)
    if stream.text_at(j) == "*":
        j = stream.next_significant(j)
    if j is not None and stream[j].kind == NAME:
        j = stream.next_significant(j)
    if j is None or stream[j].text != "(":
        return None
    body = _body_after_params(stream, stream.matching_close(j))
    if body is None:
        return None
    insert_at = None if stream.text_at(stream.prev_significant(index)) == "async" else index
    return _Scope(body, stream.matching_close(body), insert_at)


def _arrow_scope(stream: TokenStream, index: int) -> Optional[_Scope]:
    params_end = stream.prev_significant(index)
    if params_end is None:
        return None
    if stream[params_end].text == ")":
        params_start = stream.matching_open(params_end)
    elif stream[params_end].kind == NAME:
        params_start = params_end
    else:
        return None
    before = stream.text_at(stream.prev_significant(params_start))
    # `async` already there, or a return type / generic list we do not rewrite around
    insert_at = None if before in ("async", ":", ">") else params_start
    body = stream.next_significant(index)
    if body is None:
        return None
    end = stream.matching_close(body) if stream[body].text == "{" else _expression_end(stream, body)
    return _Scope(index, end, insert_at)


def _function_scopes(stream: TokenStream) -> List[_Scope]:
    scopes: List[_Scope] = []
    for i, tok in enumerate(stream):
        scope = None
        if tok.kind == NAME and tok.text == "function" and not _is_property(stream, i):
            scope = _function_scope(stream, i)
        elif tok.kind == PUNCT and tok.text == "=>":
            scope = _arrow_scope(stream, i)
        if scope is not None:
            scopes.append(scope)
    return scopes


def _async_scope_edits(stream: TokenStream, sites: Iterable[int]) -> list:
    """Insert `async ` on the innermost function around each site that now awaits."""
    scopes = _function_scopes(stream)
    inserts = set()
    for site in sites:
        enclosing = [s for s in scopes if s.start < site < s.end]
        if not enclosing:
            continue  # module level: top-level await
        inner = max(enclosing, key=lambda s: s.start)
        if inner.insert_at is not None:
            inserts.add(inner.insert_at)
    return [(k, k, [name("async"), space()]) for k in sorted(inserts)]


# --- make-params-async / make-search-params-async --------------------------

def _accessor_detector(ident: str) -> Callable[[str], bool]:
    access_re = re.compile(rf"(?<![\w$.]){ident}\s*(?:\?\.|\.(?!\.)|\[)")
    awaited_re = re.compile(rf"\bawait\s+{ident}\b")

    def detect(text: str) -> bool:
        return bool(access_re.search(text)) and not awaited_re.search(text)

    detect.__name__ = f"detect_{ident}_access"
    return detect


def _accessor_rewriter(ident: str) -> Callable[[TokenStream], TokenStream]:
    def rewrite(stream: TokenStream) -> TokenStream:
        edits = []
        for i in stream.find_names(ident):
            prev_text = stream.text_at(stream.prev_significant(i))
            if prev_text in _PROPERTY_PREFIX or prev_text in ("...", "await"):
                continue
            if stream.text_at(stream.next_significant(i)) not in _MEMBER_ACCESS:
                continue
            edits.append((i, i + 1, [punct("("), name("await"), space(), name(ident), punct(")")]))
        return stream.splice(edits + _async_scope_edits(stream, [start for start, _, _ in edits]))

    rewrite.__name__ = f"rewrite_{ident}_access"
    return rewrite


detect_params_access = _accessor_detector("params")
rewrite_params_access = _accessor_rewriter("params")
detect_search_params_access = _accessor_detector("searchParams")
rewrite_search_params_access = _accessor_rewriter("searchParams")


# --- make-cookies-headers-async --------------------------------------------

_REQUEST_API_CALL_RE = re.compile(r"(?<![\w$.])(?:cookies|headers)\s*\(\s*\)(?!\s*[{:])")
_REQUEST_API_AWAITED_RE = re.compile(r"\bawait\s+(?:cookies|headers)\s*\(\s*\)")
_DECLARATION_PREFIX = frozenset({"function", "async", "get", "set", "static"})


def detect_request_api_calls(text: str) -> bool:
    return bool(_REQUEST_API_CALL_RE.search(text)) and not _REQUEST_API_AWAITED_RE.search(text)


def rewrite_request_api_calls(stream: TokenStream) -> TokenStream:
    """cookies().get(x) → (await cookies()).get(x); bare cookies() → await cookies()."""
    edits = []
    for i, tok in enumerate(stream):
        if tok.kind != NAME or tok.text not in ("cookies", "headers"):
            continue
        prev_text = stream.text_at(stream.prev_significant(i))
        if prev_text in _PROPERTY_PREFIX or prev_text == "await" or prev_text in _DECLARATION_PREFIX:
            continue
        open_idx = stream.next_significant(i)
        if open_idx is None or stream[open_idx].text != "(":
            continue
        close_idx = stream.next_significant(open_idx)
        if close_idx is None or stream[close_idx].text != ")":
            continue
        after = stream.text_at(stream.next_significant(close_idx))
        if after in ("{", ":"):
            continue  # method declaration or type annotation
        call: list[Token] = list(stream.tokens[i:close_idx + 1])
        if after in _MEMBER_ACCESS:
            new = [punct("("), name("await"), space(), *call, punct(")")]
        else:
            new = [name("await"), space(), *call]
        edits.append((i, close_idx + 1, new))
    return stream.splice(edits + _async_scope_edits(stream, [start for start, _, _ in edits]))


DEFAULT_RULES: tuple[TransformRule, ...] = (
    TransformRule(
        tag="middleware-to-proxy",
        description="Convert middleware.ts to proxy.ts",
        detect=detect_middleware_export,
        rewrite=rewrite_middleware_to_proxy,
        rename=rename_middleware_file,
    ),
    TransformRule(
        tag="update-revalidate-tag",
        description="Update revalidateTag calls with cacheLife profile",
        detect=detect_revalidate_tag,
        rewrite=rewrite_revalidate_tag,
    ),
    TransformRule(
        tag="update-next-image",
        description="Update next/image imports and usage",
        detect=detect_legacy_image,
        rewrite=rewrite_legacy_image,
    ),
    TransformRule(
        tag="make-params-async",
        description="Make params usage async",
        detect=detect_params_access,
        rewrite=rewrite_params_access,
    ),
    TransformRule(
        tag="make-search-params-async",
        description="Make searchParams usage async",
        detect=detect_search_params_access,
        rewrite=rewrite_search_params_access,
    ),
    TransformRule(
        tag="make-cookies-headers-async",
        description="Make cookies/headers usage async",
        detect=detect_request_api_calls,
        rewrite=rewrite_request_api_calls,
    ),
)
