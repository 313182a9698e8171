"""History service: dedup, pinning and capacity policy for past requests."""

from datetime import datetime

from reqsmith.models.draft import RequestDraft
from reqsmith.models.history import HistoryItem
from reqsmith.models.output import debug_log
from reqsmith.repositories.history import HistoryPort

HistoryIdentity = tuple[str, str, str]


class HistoryItemNotFoundError(LookupError):
    """Raised when no history entry matches an id."""

    def __init__(self, item_id: str, ambiguous: bool = False):
        self.item_id = item_id
        self.ambiguous = ambiguous
        if ambiguous:
            message = f"History id prefix is ambiguous: {item_id}"
        else:
            message = f"History entry not found: {item_id}"
        super().__init__(message)


class PinLimitError(Exception):
    """Raised when pinning would exceed the pin limit."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Max {limit} pinned requests allowed. Unpin one first.")


def identity_of(item: HistoryItem) -> HistoryIdentity:
    """Return the key used to deduplicate history entries.

    WebSocket entries use the literal method ``WS`` since their method is
    never executed.
    """
    method = item.method if item.protocol == "HTTP" else "WS"
    return (item.protocol, method, item.url)


def sort_pinned_first(items: list[HistoryItem]) -> list[HistoryItem]:
    """Order pinned entries first, each group newest first."""
    return sorted(items, key=lambda h: (not h.pinned, -h.timestamp.timestamp()))


class HistoryService:
    """Maintains the bounded, deduplicated, pinnable request history.

    Every mutation loads the stored collection, changes it and saves it back,
    so the repository stays the single source of truth.
    """

    def __init__(
        self,
        repository: HistoryPort,
        limit: int = 20,
        pin_limit: int = 5,
        debug: bool = False,
    ):
        self.repository = repository
        self.limit = limit
        self.pin_limit = pin_limit
        self.debug = debug

    def list_items(self) -> list[HistoryItem]:
        """Return all history entries in display order."""
        return self.repository.load()

    def get(self, item_id: str) -> HistoryItem:
        """Find an entry by id or unique id prefix."""
        return self._find(self.repository.load(), item_id)

    def record(self, draft: RequestDraft, now: datetime | None = None) -> HistoryItem:
        """Insert or update the entry for a draft after a successful exchange.

        Args:
            draft: The draft that was sent or connected
            now: Timestamp to record, defaults to the current time

        Returns:
            The stored entry
        """
        items = self.repository.load()
        new_item = HistoryItem.from_draft(draft, now)
        identity = identity_of(new_item)

        existing = next((h for h in items if identity_of(h) == identity), None)
        if existing is not None:
            new_item.id = existing.id
            new_item.pinned = existing.pinned
            if existing.is_renamed():
                new_item.name = existing.name
            items = [h for h in items if h.id != existing.id]
            debug_log(f"history: updating {existing.id} for {identity}", self.debug)
        else:
            debug_log(f"history: adding {new_item.id} for {identity}", self.debug)

        items.insert(0, new_item)

        if len(items) > self.limit:
            items = self._evict(items)

        self.repository.save(items)
        return new_item

    def toggle_pin(self, item_id: str) -> HistoryItem:
        """Pin or unpin an entry.

        Raises:
            PinLimitError: If pinning would exceed the pin limit
        """
        items = self.repository.load()
        item = self._find(items, item_id)

        if not item.pinned:
            pinned_count = sum(1 for h in items if h.pinned)
            if pinned_count >= self.pin_limit:
                raise PinLimitError(self.pin_limit)

        item.pinned = not item.pinned
        self.repository.save(sort_pinned_first(items))
        return item

    def rename(self, item_id: str, name: str) -> HistoryItem:
        """Give an entry a custom display name."""
        name = name.strip()
        if not name:
            raise ValueError("Name cannot be empty")

        items = self.repository.load()
        item = self._find(items, item_id)
        item.name = name
        self.repository.save(items)
        return item

    def delete(self, item_id: str) -> HistoryItem:
        """Remove an entry, pinned or not."""
        items = self.repository.load()
        item = self._find(items, item_id)
        self.repository.save([h for h in items if h.id != item.id])
        return item

    def restore(self, item_id: str) -> RequestDraft:
        """Copy an entry back into a fresh draft without touching the history."""
        return self.get(item_id).to_draft()

    def _evict(self, items: list[HistoryItem]) -> list[HistoryItem]:
        """Drop the oldest unpinned entries until the list fits the limit."""
        pinned = [h for h in items if h.pinned]
        unpinned = sorted(
            (h for h in items if not h.pinned),
            key=lambda h: h.timestamp,
            reverse=True,
        )
        max_unpinned = max(0, self.limit - len(pinned))
        if len(unpinned) > max_unpinned:
            dropped = unpinned[max_unpinned:]
            debug_log(f"history: evicting {len(dropped)} unpinned item(s)", self.debug)
            unpinned = unpinned[:max_unpinned]
        return sort_pinned_first(pinned + unpinned)

    def _find(self, items: list[HistoryItem], item_id: str) -> HistoryItem:
        for item in items:
            if item.id == item_id:
                return item
        candidates = [h for h in items if item_id and h.id.startswith(item_id)]
        if len(candidates) == 1:
            return candidates[0]
        raise HistoryItemNotFoundError(item_id, ambiguous=len(candidates) > 1)
