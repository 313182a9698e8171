"""History models."""

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from reqsmith.models.draft import KeyValuePair, Protocol, RequestDraft

UNTITLED = "Untitled Request"


def _new_id() -> str:
    return uuid.uuid4().hex


class HistoryItem(BaseModel):
    """A previously sent request kept in the history store."""

    id: str = Field(default_factory=_new_id)
    name: str
    protocol: Protocol
    method: str
    url: str
    params: list[KeyValuePair] = []
    headers: list[KeyValuePair] = []
    body: str = ""
    timestamp: datetime
    pinned: bool = False

    @classmethod
    def from_draft(cls, draft: RequestDraft, now: datetime | None = None) -> "HistoryItem":
        """Snapshot a draft as a fresh, unpinned history entry.

        The draft's method is kept even for WebSocket entries, where it is
        never executed, so restoring yields the same draft back.
        """
        return cls(
            name=draft.url or UNTITLED,
            protocol=draft.protocol,
            method=draft.method,
            url=draft.url,
            params=[p.model_copy() for p in draft.params],
            headers=[h.model_copy() for h in draft.headers],
            body=draft.body,
            timestamp=now or datetime.now(UTC),
        )

    def is_renamed(self) -> bool:
        """True if the user gave this entry a name other than its URL."""
        return self.name != self.url

    def to_draft(self) -> RequestDraft:
        """Copy this entry's fields into a new draft."""
        return RequestDraft(
            protocol=self.protocol,
            method=self.method,
            url=self.url,
            params=[p.model_copy() for p in self.params],
            headers=[h.model_copy() for h in self.headers],
            body=self.body,
        )
