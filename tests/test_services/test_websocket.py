"""Tests for the WebSocket session."""

import asyncio

from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK

from reqsmith.models.draft import RequestDraft
from reqsmith.models.websocket import ConnectionState, WsMessage
from reqsmith.services.history import HistoryService, identity_of
from reqsmith.services.websocket import BINARY_PLACEHOLDER, WebSocketSession

_CLOSE = object()
_ERROR = object()


class FakeSocket:
    """In-memory stand-in for a websockets client connection."""

    def __init__(self, incoming: tuple = ()):
        self.queue: asyncio.Queue = asyncio.Queue()
        for message in incoming:
            self.queue.put_nowait(message)
        self.sent: list[str] = []
        self.closed = False

    async def send(self, message: str) -> None:
        if self.closed:
            raise ConnectionClosedOK(None, None)
        self.sent.append(message)

    async def close(self) -> None:
        self.closed = True
        self.queue.put_nowait(_CLOSE)

    def remote_close(self, error: bool = False) -> None:
        self.closed = True
        self.queue.put_nowait(_ERROR if error else _CLOSE)

    def __aiter__(self) -> "FakeSocket":
        return self

    async def __anext__(self):
        item = await self.queue.get()
        if item is _CLOSE:
            raise StopAsyncIteration
        if item is _ERROR:
            raise ConnectionClosedError(None, None)
        return item


async def _drain() -> None:
    for _ in range(10):
        await asyncio.sleep(0)


def _contents(session: WebSocketSession) -> list[tuple[str, str]]:
    return [(m.type, m.content) for m in session.messages]


DRAFT = RequestDraft(protocol="WS", url="wss://echo.test/socket")


class TestWebSocketSession:
    """Tests for WebSocketSession."""

    def test_connect_records_history(self, history_service: HistoryService) -> None:
        """Test a successful open logs, connects and lands in history."""
        urls: list[str] = []

        async def main() -> WebSocketSession:
            socket = FakeSocket()

            async def connector(url: str) -> FakeSocket:
                urls.append(url)
                return socket

            session = WebSocketSession(history=history_service, connector=connector)
            assert await session.connect(DRAFT) is True
            assert session.state == ConnectionState.CONNECTED
            await session.disconnect()
            return session

        session = asyncio.run(main())

        assert urls == ["wss://echo.test/socket"]
        items = history_service.list_items()
        identities = [identity_of(h) for h in items]
        assert identities == [("WS", "WS", "wss://echo.test/socket")]
        assert _contents(session)[-1] == ("system", "Connected")

    def test_http_draft_recorded_as_websocket(self, history_service: HistoryService) -> None:
        """Test the recorded entry is a WS entry whatever the draft said."""

        async def main() -> None:
            socket = FakeSocket()

            async def connector(url: str) -> FakeSocket:
                return socket

            session = WebSocketSession(history=history_service, connector=connector)
            await session.connect(RequestDraft(method="POST", url="ws://x.test"))
            await session.disconnect()

        asyncio.run(main())

        assert history_service.list_items()[0].protocol == "WS"

    def test_history_save_failure_keeps_session(
        self, unsaveable_history_service: HistoryService
    ) -> None:
        """Test a failed history write still leaves a working session."""

        async def main() -> tuple[WebSocketSession, bool, list[tuple[str, str]]]:
            socket = FakeSocket(incoming=("hello",))

            async def connector(url: str) -> FakeSocket:
                return socket

            session = WebSocketSession(history=unsaveable_history_service, connector=connector)
            connected = await session.connect(DRAFT)
            await _drain()
            snapshot = _contents(session)
            await session.disconnect()
            return session, connected, snapshot

        session, connected, snapshot = asyncio.run(main())

        assert connected
        assert snapshot == [("received", "hello"), ("system", "Connected")]
        assert _contents(session)[0] == ("system", "Disconnected")
        assert session.state == ConnectionState.DISCONNECTED

    def test_received_messages_newest_first(self) -> None:
        """Test inbound frames are logged, binary ones as a placeholder."""

        async def main() -> WebSocketSession:
            socket = FakeSocket(incoming=("hello", b"\x00\x01", "bye"))

            async def connector(url: str) -> FakeSocket:
                return socket

            session = WebSocketSession(connector=connector)
            await session.connect(DRAFT)
            await _drain()
            await session.disconnect()
            return session

        session = asyncio.run(main())

        assert _contents(session) == [
            ("system", "Disconnected"),
            ("received", "bye"),
            ("received", BINARY_PLACEHOLDER),
            ("received", "hello"),
            ("system", "Connected"),
        ]
        assert session.state == ConnectionState.DISCONNECTED

    def test_send_logs_outbound(self) -> None:
        """Test sent frames are logged immediately."""
        socket_holder: list[FakeSocket] = []

        async def main() -> list[tuple[str, str]]:
            socket = FakeSocket()
            socket_holder.append(socket)

            async def connector(url: str) -> FakeSocket:
                return socket

            session = WebSocketSession(connector=connector)
            await session.connect(DRAFT)
            assert await session.send("ping") is True
            assert await session.send("") is False
            snapshot = _contents(session)
            await session.disconnect()
            return snapshot

        snapshot = asyncio.run(main())

        assert socket_holder[0].sent == ["ping"]
        assert snapshot == [("sent", "ping"), ("system", "Connected")]

    def test_send_when_disconnected_is_ignored(self) -> None:
        """Test sending without a connection does nothing."""

        async def main() -> WebSocketSession:
            session = WebSocketSession(connector=lambda url: None)
            assert await session.send("ping") is False
            return session

        assert asyncio.run(main()).messages == []

    def test_remote_close(self) -> None:
        """Test a server-side close returns the session to disconnected."""

        async def main() -> WebSocketSession:
            socket = FakeSocket()

            async def connector(url: str) -> FakeSocket:
                return socket

            session = WebSocketSession(connector=connector)
            await session.connect(DRAFT)
            socket.remote_close()
            await session.wait_closed()
            return session

        session = asyncio.run(main())

        assert session.state == ConnectionState.DISCONNECTED
        assert _contents(session)[0] == ("system", "Connection Closed")

    def test_remote_error(self) -> None:
        """Test an abnormal close is logged generically."""

        async def main() -> WebSocketSession:
            socket = FakeSocket()

            async def connector(url: str) -> FakeSocket:
                return socket

            session = WebSocketSession(connector=connector)
            await session.connect(DRAFT)
            socket.remote_close(error=True)
            await session.wait_closed()
            return session

        session = asyncio.run(main())

        assert session.state == ConnectionState.DISCONNECTED
        assert _contents(session)[:2] == [
            ("system", "Connection Closed"),
            ("system", "Error occurred"),
        ]

    def test_connect_failure(self, history_service: HistoryService) -> None:
        """Test a refused connection is logged and not recorded."""

        async def connector(url: str) -> FakeSocket:
            raise ConnectionRefusedError("refused")

        async def main() -> tuple[WebSocketSession, bool]:
            session = WebSocketSession(history=history_service, connector=connector)
            return session, await session.connect(DRAFT)

        session, connected = asyncio.run(main())

        assert connected is False
        assert session.state == ConnectionState.DISCONNECTED
        assert _contents(session) == [("system", "Connection Failed: refused")]
        assert history_service.list_items() == []

    def test_connect_while_connected_is_noop(self) -> None:
        """Test a second connect does not open another socket."""
        calls: list[str] = []

        async def main() -> bool:
            socket = FakeSocket()

            async def connector(url: str) -> FakeSocket:
                calls.append(url)
                return socket

            session = WebSocketSession(connector=connector)
            await session.connect(DRAFT)
            second = await session.connect(DRAFT)
            await session.disconnect()
            return second

        assert asyncio.run(main()) is False
        assert len(calls) == 1

    def test_disconnect_when_idle(self) -> None:
        """Test disconnecting without a session is a no-op."""

        async def main() -> bool:
            return await WebSocketSession(connector=lambda url: None).disconnect()

        assert asyncio.run(main()) is False

    def test_log_is_capped(self) -> None:
        """Test the ring buffer keeps only the newest entries."""

        async def main() -> list[tuple[str, str]]:
            socket = FakeSocket(incoming=("1", "2", "3", "4"))

            async def connector(url: str) -> FakeSocket:
                return socket

            session = WebSocketSession(connector=connector, max_log=3)
            await session.connect(DRAFT)
            await _drain()
            snapshot = _contents(session)
            await session.disconnect()
            return snapshot

        assert asyncio.run(main()) == [("received", "4"), ("received", "3"), ("received", "2")]

    def test_on_message_callback_and_reset(self) -> None:
        """Test every entry is reported to the callback; reset clears the log."""
        seen: list[WsMessage] = []

        async def main() -> WebSocketSession:
            socket = FakeSocket(incoming=("hi",))

            async def connector(url: str) -> FakeSocket:
                return socket

            session = WebSocketSession(connector=connector, on_message=seen.append)
            await session.connect(DRAFT)
            await _drain()
            await session.disconnect()
            return session

        session = asyncio.run(main())

        assert [(m.type, m.content) for m in seen] == [
            ("system", "Connected"),
            ("received", "hi"),
            ("system", "Disconnected"),
        ]
        session.reset()
        assert session.messages == []
