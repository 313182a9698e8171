"""cURL command parser.

Handles the bash flavour (backslash line continuations) and the Windows cmd
flavour produced by "Copy as cURL (cmd)" (caret continuations and escapes).
"""

import re

from reqsmith.models.draft import ImportResult, KeyValuePair
from reqsmith.parsers.base import build_result, join_lines, pretty_json

_CMD_CONTINUATION = re.compile(r"\^\s*[\r\n]+")
_CMD_ESCAPE = re.compile(r"\^(.)")
_BASH_CONTINUATION = re.compile(r"\\\s*[\r\n]+")

_URL = re.compile(r"""['"]?(https?://[^\s'"]+)['"]?""")
_METHOD = re.compile(r"""(?<!\S)(?:-X\s*|--request\s+)['"]?([a-zA-Z]+)['"]?""")
# Longer flags come first so --data-raw is never read as --data
_DATA = re.compile(
    r"""(?<!\S)(?:--data-binary|--data-urlencode|--data-ascii|--data-raw|--data|-d)"""
    r"""\s*=?\s*(?:\$'((?:[^'\\]|\\.)*)'|'([^']*)'|"((?:[^"\\]|\\.)*)"|([^'"\s]+))"""
)
_HEADER = re.compile(r"""(?<!\S)(?:-H|--header)\s+(?:'([^']+)'|"([^"]+)")""")
_DOUBLE_QUOTED_ESCAPE = re.compile(r"""\\(["\\])""")
_ANSI_C_ESCAPE = re.compile(r"""\\(['\\])""")


def matches(lowered: str) -> bool:
    return lowered.startswith("curl")


def normalize(text: str) -> str:
    """Fold line continuations into a single logical line."""
    if "^" in text:
        text = _CMD_CONTINUATION.sub(" ", text)
        text = _CMD_ESCAPE.sub(r"\1", text)
    else:
        text = _BASH_CONTINUATION.sub(" ", text)
    return join_lines(text)


def _extract_body(text: str) -> str | None:
    match = _DATA.search(text)
    if match is None:
        return None
    ansi_c, single, double, bare = match.groups()
    if ansi_c is not None:
        return _ANSI_C_ESCAPE.sub(r"\1", ansi_c)
    if single is not None:
        return single
    if double is not None:
        return _DOUBLE_QUOTED_ESCAPE.sub(r"\1", double)
    return bare


def _extract_headers(text: str) -> list[KeyValuePair]:
    headers: list[KeyValuePair] = []
    for match in _HEADER.finditer(text):
        raw = match.group(1) or match.group(2)
        key, sep, value = raw.partition(":")
        if sep and key.strip():
            headers.append(KeyValuePair(key=key.strip(), value=value.strip()))
    return headers


def parse(text: str) -> ImportResult:
    """Parse a cURL invocation into a draft."""
    clean = normalize(text)

    url_match = _URL.search(clean)
    url = url_match.group(1) if url_match else ""

    method_match = _METHOD.search(clean)
    method = method_match.group(1).upper() if method_match else None

    body = _extract_body(clean)
    if body is not None and method is None:
        method = "POST"

    return build_result(
        "curl",
        url=url,
        method=method,
        headers=_extract_headers(clean),
        body=pretty_json(body or ""),
    )
