"""WebSocket session: one live socket with a newest-first message log."""

import asyncio
import functools
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, WebSocketException

from reqsmith.models.draft import RequestDraft
from reqsmith.models.output import debug_log
from reqsmith.models.websocket import ConnectionState, MessageType, WsMessage
from reqsmith.services.history import HistoryService

BINARY_PLACEHOLDER = "Binary Data"

Connector = Callable[[str], Awaitable[Any]]
MessageCallback = Callable[[WsMessage], None]

# No open timeout: connecting blocks until the server answers or refuses
default_connector: Connector = functools.partial(websockets.connect, open_timeout=None)


class WebSocketSession:
    """A single exploratory WebSocket connection.

    Connect and disconnect are gated on the current state, so connecting
    while a session is live is a no-op.
    """

    def __init__(
        self,
        history: HistoryService | None = None,
        connector: Connector | None = None,
        max_log: int = 500,
        on_message: MessageCallback | None = None,
        debug: bool = False,
    ):
        self.history = history
        self.connector = connector or default_connector
        self.on_message = on_message
        self.debug = debug
        self.state = ConnectionState.DISCONNECTED
        self._log: deque[WsMessage] = deque(maxlen=max_log)
        self._socket: Any = None
        self._reader: asyncio.Task[None] | None = None
        self._closing = False

    @property
    def messages(self) -> list[WsMessage]:
        """The session log, newest first."""
        return list(self._log)

    @property
    def connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    def reset(self) -> None:
        """Clear the log."""
        self._log.clear()

    async def connect(self, draft: RequestDraft) -> bool:
        """Open a socket to the draft's URL.

        Returns:
            True if the connection was established
        """
        if self.state != ConnectionState.DISCONNECTED:
            debug_log(f"ws: connect ignored while {self.state}", self.debug)
            return False

        self.state = ConnectionState.CONNECTING
        try:
            socket = await self.connector(draft.url)
        except (OSError, WebSocketException, ValueError) as e:
            self.state = ConnectionState.DISCONNECTED
            self._append("system", f"Connection Failed: {e}")
            return False

        self._socket = socket
        self._closing = False
        self.state = ConnectionState.CONNECTED
        self._append("system", "Connected")
        self._reader = asyncio.create_task(self._read_loop(socket))
        if self.history is not None:
            try:
                self.history.record(draft.model_copy(update={"protocol": "WS"}))
            except OSError as e:
                debug_log(f"ws: could not save history: {e}", self.debug)
        return True

    async def send(self, text: str) -> bool:
        """Send a text frame. The log reflects intent, not delivery."""
        if not self.connected or not text:
            return False
        try:
            await self._socket.send(text)
        except ConnectionClosed:
            debug_log("ws: send on a closed connection", self.debug)
            return False
        self._append("sent", text)
        return True

    async def disconnect(self) -> bool:
        """Close the session at the user's request."""
        if not self.connected:
            return False
        self._closing = True
        socket, reader = self._socket, self._reader
        await socket.close()
        if reader is not None:
            await reader
        self._finish()
        self._append("system", "Disconnected")
        return True

    async def wait_closed(self) -> None:
        """Wait until the reader stops, for whatever reason."""
        if self._reader is not None:
            await self._reader

    async def _read_loop(self, socket: Any) -> None:
        try:
            async for message in socket:
                content = message if isinstance(message, str) else BINARY_PLACEHOLDER
                self._append("received", content)
        except ConnectionClosedError as e:
            debug_log(f"ws: connection closed with error: {e}", self.debug)
            if not self._closing:
                self._append("system", "Error occurred")
        finally:
            if not self._closing:
                self._append("system", "Connection Closed")
                self._finish()

    def _finish(self) -> None:
        self._socket = None
        self.state = ConnectionState.DISCONNECTED

    def _append(self, kind: MessageType, content: str) -> None:
        entry = WsMessage(type=kind, content=content)
        self._log.appendleft(entry)
        if self.on_message is not None:
            self.on_message(entry)
