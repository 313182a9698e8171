"""Request draft models."""

from typing import Literal

from pydantic import BaseModel, field_validator

Protocol = Literal["HTTP", "WS"]
EditorTab = Literal["params", "headers", "body"]
Dialect = Literal["curl", "fetch", "powershell"]

# Methods that never carry a request body
BODYLESS_METHODS = frozenset({"GET", "HEAD"})


class KeyValuePair(BaseModel):
    """A single param or header row."""

    key: str
    value: str = ""
    enabled: bool = True

    @classmethod
    def parse(cls, value: str, separator: str) -> "KeyValuePair":
        """Parse a 'key<separator>value' string like 'Accept: */*' or 'page=2'."""
        key, sep, rest = value.partition(separator)
        if not sep or not key.strip():
            raise ValueError(f"Invalid pair: {value!r}. Use the form 'key{separator}value'")
        return cls(key=key.strip(), value=rest.strip())


class RequestDraft(BaseModel):
    """The editable, unsent representation of a request."""

    protocol: Protocol = "HTTP"
    method: str = "GET"
    url: str = ""
    params: list[KeyValuePair] = []
    headers: list[KeyValuePair] = []
    body: str = ""

    @field_validator("method")
    @classmethod
    def normalize_method(cls, v: str) -> str:
        """Upper-case the method, defaulting to GET."""
        return v.strip().upper() or "GET"

    def active_params(self) -> list[KeyValuePair]:
        """Params that take part in execution."""
        return [p for p in self.params if p.enabled and p.key]

    def active_headers(self) -> list[KeyValuePair]:
        """Headers that take part in execution."""
        return [h for h in self.headers if h.enabled and h.key]

    def sends_body(self) -> bool:
        """Whether executing this draft transmits its body."""
        return self.protocol == "HTTP" and self.method not in BODYLESS_METHODS

    def active_tab(self) -> EditorTab:
        """Pick the editor tab to show, left to right: params, headers, body."""
        if self.params:
            return "params"
        if self.headers:
            return "headers"
        if self.body:
            return "body"
        return "params"


class ImportResult(BaseModel):
    """A draft recognised from pasted command text."""

    dialect: Dialect
    draft: RequestDraft

    @property
    def active_tab(self) -> EditorTab:
        return self.draft.active_tab()
