"""Smart-Import: recognise pasted cURL, fetch and PowerShell snippets."""

from collections.abc import Callable

from reqsmith.models.draft import Dialect, ImportResult
from reqsmith.parsers import curl, fetch, powershell
from reqsmith.parsers.base import draft_from_url

# Checked in priority order
_DIALECTS: list[tuple[Dialect, Callable[[str], bool], Callable[[str], ImportResult]]] = [
    ("curl", curl.matches, curl.parse),
    ("fetch", fetch.matches, fetch.parse),
    ("powershell", powershell.matches, powershell.parse),
]


def detect_dialect(text: str) -> Dialect | None:
    """Return the dialect of a pasted snippet, or None if none matches."""
    lowered = text.strip().lower()
    if not lowered:
        return None
    for name, matches, _ in _DIALECTS:
        if matches(lowered):
            return name
    return None


def smart_import(text: str) -> ImportResult | None:
    """Convert pasted command text into a draft.

    Returns None when the text is not a recognised snippet, in which case
    the caller should treat it as an ordinary paste.
    """
    stripped = text.strip()
    lowered = stripped.lower()
    if not lowered:
        return None
    for _, matches, parse in _DIALECTS:
        if matches(lowered):
            return parse(stripped)
    return None


__all__ = ["detect_dialect", "draft_from_url", "smart_import"]
