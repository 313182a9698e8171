"""WebSocket session models."""

import uuid
from datetime import datetime
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field

MessageType = Literal["sent", "received", "system"]


class ConnectionState(StrEnum):
    """Lifecycle of a WebSocket session."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class WsMessage(BaseModel):
    """One entry of the session log."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    type: MessageType
    content: str
    time: str = Field(default_factory=lambda: datetime.now().strftime("%H:%M:%S"))
