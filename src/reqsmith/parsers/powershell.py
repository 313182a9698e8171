"""PowerShell Invoke-WebRequest / Invoke-RestMethod parser."""

import re

from reqsmith.models.draft import ImportResult, KeyValuePair
from reqsmith.parsers.base import build_result, join_lines, pretty_json

# Backticks that are not line continuations are escapes inside strings
_CONTINUATION = re.compile(r"`\s*[\r\n]+")

_MARKERS = ("invoke-webrequest", "invoke-restmethod", "new-object microsoft.powershell")
_ALIASES = ("iwr ", "irm ")

# A PowerShell string literal: 'verbatim' ('' escapes a quote) or "expandable" (` escapes)
_STRING = r"""(?:'((?:[^']|'')*)'|"((?:[^"`]|`.)*)")"""

_URI = re.compile(r"""-Uri\s+(?:["']([^"']+)["']|([^\s"']+))""", re.IGNORECASE)
_POSITIONAL_URI = re.compile(
    r"""\b(?:invoke-webrequest|invoke-restmethod|iwr|irm)\s+["']?(https?://[^\s"']+)""",
    re.IGNORECASE,
)
_METHOD = re.compile(r"""-Method\s+["']?([a-zA-Z]+)["']?""", re.IGNORECASE)
_HEADERS_BLOCK = re.compile(r"""-Headers\s+@\{([^}]+)\}""", re.IGNORECASE)
_HEADER_PAIR = re.compile(r"""(?:["']([^"']+)["']|([\w-]+))\s*=\s*""" + _STRING)
_CONTENT_TYPE = re.compile(r"""-ContentType\s+["']([^"']+)["']""", re.IGNORECASE)
_USER_AGENT = re.compile(r"""\.UserAgent\s*=\s*["']([^"']+)["']""", re.IGNORECASE)
_BODY = re.compile(r"""-Body\s+""" + _STRING, re.IGNORECASE)


def matches(lowered: str) -> bool:
    return any(marker in lowered for marker in _MARKERS) or lowered.startswith(_ALIASES)


def normalize(text: str) -> str:
    return join_lines(_CONTINUATION.sub(" ", text))


def unquote(verbatim: str | None, expandable: str | None) -> str:
    """Decode the contents of a matched PowerShell string literal."""
    if verbatim is not None:
        return verbatim.replace("''", "'")
    if expandable is not None:
        return expandable.replace('`"', '"').replace("``", "`")
    return ""


def _extract_url(text: str) -> str:
    match = _URI.search(text)
    if match is not None:
        return match.group(1) or match.group(2)
    positional = _POSITIONAL_URI.search(text)
    return positional.group(1) if positional else ""


def _extract_headers(text: str) -> list[KeyValuePair]:
    headers: list[KeyValuePair] = []

    block = _HEADERS_BLOCK.search(text)
    if block is not None:
        for quoted_key, bare_key, verbatim, expandable in _HEADER_PAIR.findall(block.group(1)):
            # findall reports unmatched groups as empty strings
            value = verbatim.replace("''", "'") if verbatim else unquote(None, expandable)
            headers.append(KeyValuePair(key=quoted_key or bare_key, value=value))

    content_type = _CONTENT_TYPE.search(text)
    if content_type is not None:
        headers.append(KeyValuePair(key="Content-Type", value=content_type.group(1)))

    user_agent = _USER_AGENT.search(text)
    if user_agent is not None:
        headers.append(KeyValuePair(key="User-Agent", value=user_agent.group(1)))

    return headers


def _extract_body(text: str) -> str:
    match = _BODY.search(text)
    if match is None:
        return ""
    return unquote(*match.groups())


def parse(text: str) -> ImportResult:
    """Parse an Invoke-WebRequest or Invoke-RestMethod snippet into a draft."""
    clean = normalize(text)

    method_match = _METHOD.search(clean)

    return build_result(
        "powershell",
        url=_extract_url(clean),
        method=method_match.group(1).upper() if method_match else None,
        headers=_extract_headers(clean),
        body=pretty_json(_extract_body(clean)),
    )
