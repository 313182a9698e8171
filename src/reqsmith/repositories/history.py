"""History persistence."""

import os
import tempfile
from pathlib import Path
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from reqsmith.models.history import HistoryItem
from reqsmith.models.output import debug_log

_ITEMS = TypeAdapter(list[HistoryItem])


class HistoryPort(Protocol):
    """Durable storage for the history collection."""

    def load(self) -> list[HistoryItem]: ...

    def save(self, items: list[HistoryItem]) -> None: ...


class JsonHistoryRepository:
    """Stores history as a single JSON array in a local file."""

    def __init__(self, path: Path | str, debug: bool = False):
        self.path = Path(path).expanduser()
        self.debug = debug

    def load(self) -> list[HistoryItem]:
        """Load all history items.

        A missing or corrupt file is treated as empty history.

        Returns:
            Stored history items, most relevant first
        """
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as e:
            debug_log(f"history: cannot read {self.path}: {e}", self.debug)
            return []

        try:
            return _ITEMS.validate_json(raw)
        except ValidationError as e:
            message = f"history: ignoring unparseable {self.path}: {e.error_count()} error(s)"
            debug_log(message, self.debug)
            return []

    def save(self, items: list[HistoryItem]) -> None:
        """Replace the stored history with the given items.

        The file is written to a temporary sibling and swapped in, so readers
        never observe a half-written array.

        Args:
            items: The full history collection
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = _ITEMS.dump_json(items, indent=2)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        debug_log(f"history: saved {len(items)} item(s) to {self.path}", self.debug)
