"""Execution result models."""

from typing import Literal

from pydantic import BaseModel

ContentKind = Literal["JSON", "HTML", "XML", "Stream", "Text"]

_SIZE_UNITS = ("B", "KB", "MB", "GB")


def format_bytes(size: int) -> str:
    """Format a byte count like '1.5 KB'."""
    if size <= 0:
        return "0 B"
    exponent = 0
    while exponent < len(_SIZE_UNITS) - 1 and size >= 1024 ** (exponent + 1):
        exponent += 1
    value = round(size / 1024**exponent, 2)
    return f"{value:g} {_SIZE_UNITS[exponent]}"


class ResponseProgress(BaseModel):
    """Snapshot of a streamed response after one chunk."""

    text: str
    size_bytes: int
    elapsed_ms: int

    @property
    def size_label(self) -> str:
        return format_bytes(self.size_bytes)


class ExecutionResult(BaseModel):
    """Outcome of executing one HTTP draft."""

    status_code: int | None = None
    reason: str = ""
    content_type: str = ""
    kind: ContentKind = "Text"
    language: str = "plaintext"
    text: str = ""
    size_bytes: int = 0
    elapsed_ms: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True when a response was received, whatever its status code."""
        return self.error is None and self.status_code is not None

    @property
    def size_label(self) -> str:
        return format_bytes(self.size_bytes)
