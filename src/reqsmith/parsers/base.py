"""Helpers shared by the dialect parsers."""

import json
import re
from urllib.parse import parse_qsl, urlsplit

from reqsmith.models.draft import Dialect, ImportResult, KeyValuePair, RequestDraft

_NEWLINES = re.compile(r"[\r\n]+")


def join_lines(text: str) -> str:
    """Collapse any remaining line breaks into single spaces."""
    return _NEWLINES.sub(" ", text).strip()


def pretty_json(body: str) -> str:
    """Re-indent a JSON body with two spaces, or return it unchanged."""
    if not body:
        return body
    try:
        parsed = json.loads(body)
    except ValueError:
        return body
    return json.dumps(parsed, indent=2, ensure_ascii=False)


def params_from_url(url: str) -> list[KeyValuePair]:
    """Lift the query string of a URL into key/value pairs.

    The URL itself is left untouched; only absolute URLs are considered.
    """
    if "?" not in url:
        return []
    try:
        parts = urlsplit(url)
    except ValueError:
        return []
    if not parts.scheme or not parts.netloc:
        return []
    return [KeyValuePair(key=k, value=v) for k, v in parse_qsl(parts.query, keep_blank_values=True)]


def build_result(
    dialect: Dialect,
    url: str,
    method: str | None,
    headers: list[KeyValuePair],
    body: str,
) -> ImportResult:
    """Assemble an import result from extracted fields.

    A body with no explicit method upgrades the request to POST.
    """
    if method is None:
        method = "POST" if body else "GET"
    draft = RequestDraft(
        method=method,
        url=url,
        params=params_from_url(url),
        headers=headers,
        body=body,
    )
    return ImportResult(dialect=dialect, draft=draft)


def draft_from_url(text: str) -> RequestDraft:
    """Build a draft from text pasted as a plain URL."""
    url = text.strip()
    return RequestDraft(url=url, params=params_from_url(url))
