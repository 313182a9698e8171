"""JavaScript fetch() call parser."""

import re

from reqsmith.models.draft import ImportResult, KeyValuePair
from reqsmith.parsers.base import build_result, join_lines, pretty_json

_URL = re.compile(r"""fetch\s*\(\s*['"`]([^'"`]+)['"`]""")
_METHOD = re.compile(r"""(?<![\w-])['"]?method['"]?\s*:\s*['"]([^'"]+)['"]""", re.IGNORECASE)
_HEADERS_BLOCK = re.compile(r"""(?<![\w-])['"]?headers['"]?\s*:\s*\{([^}]+)\}""", re.IGNORECASE)
_HEADER_PAIR = re.compile(r"""['"]?([^'"\s:,]+)['"]?\s*:\s*['"]([^'"]+)['"]""")
_BODY = re.compile(
    r"""(?<![\w-])['"]?body['"]?\s*:\s*"""
    r"""(?:'((?:[^'\\]|\\.)*)'|"((?:[^"\\]|\\.)*)"|`((?:[^`\\]|\\.)*)`)"""
)
_ESCAPE = re.compile(r"""\\(['"`\\])""")

# Browser-generated snippets add this; it is not something the user asked for
_IGNORED_HEADERS = frozenset({"referrer"})


def matches(lowered: str) -> bool:
    return lowered.startswith("fetch")


def _extract_headers(text: str) -> list[KeyValuePair]:
    block = _HEADERS_BLOCK.search(text)
    if block is None:
        return []
    headers: list[KeyValuePair] = []
    for key, value in _HEADER_PAIR.findall(block.group(1)):
        if key.lower() in _IGNORED_HEADERS:
            continue
        headers.append(KeyValuePair(key=key, value=value))
    return headers


def _extract_body(text: str) -> str:
    match = _BODY.search(text)
    if match is None:
        return ""
    raw = next((g for g in match.groups() if g is not None), "")
    return _ESCAPE.sub(r"\1", raw)


def parse(text: str) -> ImportResult:
    """Parse a fetch(url, init) call into a draft."""
    clean = join_lines(text)

    url_match = _URL.search(clean)
    method_match = _METHOD.search(clean)

    return build_result(
        "fetch",
        url=url_match.group(1) if url_match else "",
        method=method_match.group(1).upper() if method_match else None,
        headers=_extract_headers(clean),
        body=pretty_json(_extract_body(clean)),
    )
