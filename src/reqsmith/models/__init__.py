"""Pydantic models for reqsmith."""

from reqsmith.models.draft import (
    BODYLESS_METHODS,
    EditorTab,
    ImportResult,
    KeyValuePair,
    Protocol,
    RequestDraft,
)
from reqsmith.models.history import HistoryItem
from reqsmith.models.output import FormatOptions
from reqsmith.models.response import ContentKind, ExecutionResult, ResponseProgress, format_bytes
from reqsmith.models.websocket import ConnectionState, WsMessage

__all__ = [
    "BODYLESS_METHODS",
    "ConnectionState",
    "ContentKind",
    "EditorTab",
    "ExecutionResult",
    "FormatOptions",
    "HistoryItem",
    "ImportResult",
    "KeyValuePair",
    "Protocol",
    "RequestDraft",
    "ResponseProgress",
    "WsMessage",
    "format_bytes",
]
