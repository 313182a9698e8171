"""Service layer for business logic."""

from reqsmith.services.executor import AbortHandle, RequestExecutor
from reqsmith.services.formatter import FormatterService
from reqsmith.services.history import (
    HistoryItemNotFoundError,
    HistoryService,
    PinLimitError,
    identity_of,
)
from reqsmith.services.websocket import WebSocketSession

__all__ = [
    "AbortHandle",
    "FormatterService",
    "HistoryItemNotFoundError",
    "HistoryService",
    "PinLimitError",
    "RequestExecutor",
    "WebSocketSession",
    "identity_of",
]
