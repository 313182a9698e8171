"""Repository layer for durable local state."""

from reqsmith.repositories.history import HistoryPort, JsonHistoryRepository

__all__ = ["HistoryPort", "JsonHistoryRepository"]
