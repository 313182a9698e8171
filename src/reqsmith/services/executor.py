"""Request executor: sends HTTP drafts and reports what came back."""

import asyncio
import codecs
import json
import time
from collections.abc import Callable
from urllib.parse import quote, urlsplit

import httpx

from reqsmith.models.draft import RequestDraft
from reqsmith.models.output import debug_log
from reqsmith.models.response import ContentKind, ExecutionResult, ResponseProgress
from reqsmith.services.history import HistoryService

ProgressCallback = Callable[[ResponseProgress], None]

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"

_CONNECTION_HINT = (
    "Check your network connection, proxy settings, "
    "or whether the URL protocol (http/https) is correct."
)


class RequestAbortedError(Exception):
    """Raised inside the executor when a request is aborted."""


class AbortHandle:
    """Lets a caller cancel an in-flight request."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def abort(self) -> None:
        self._event.set()

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


def classify_content_type(content_type: str) -> tuple[ContentKind, str]:
    """Map a Content-Type header to a result kind and a highlighting hint."""
    ct = content_type.lower()
    if "application/json" in ct:
        return "JSON", "json"
    if "text/html" in ct:
        return "HTML", "html"
    if "xml" in ct:
        return "XML", "xml"
    if "text/event-stream" in ct:
        return "Stream", "plaintext"
    return "Text", "plaintext"


def build_url(draft: RequestDraft) -> str:
    """Apply the draft's active params to its URL.

    Absolute URLs are updated through httpx's query API so draft values
    replace same-named query values. Anything else gets a hand-built query
    string appended.
    """
    params = draft.active_params()
    if not params:
        return draft.url

    parts = urlsplit(draft.url)
    if parts.scheme and parts.netloc:
        try:
            url = httpx.URL(draft.url)
            for p in params:
                url = url.copy_set_param(p.key, p.value)
            return str(url)
        except httpx.InvalidURL:
            pass

    query = "&".join(
        f"{quote(p.key, safe=_URI_COMPONENT_SAFE)}={quote(p.value, safe=_URI_COMPONENT_SAFE)}"
        for p in params
    )
    separator = "&" if "?" in draft.url else "?"
    return f"{draft.url}{separator}{query}"


def build_headers(draft: RequestDraft) -> dict[str, str]:
    """Collect active headers; later duplicates win."""
    headers: dict[str, str] = {}
    for h in draft.active_headers():
        headers[h.key] = h.value
    return headers


def pretty_json_text(text: str) -> str:
    """Pretty-print a JSON document, or return it unchanged."""
    try:
        return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
    except ValueError:
        return text


def describe_error(error: Exception) -> str:
    """Render a failure as display text with a hint where one applies."""
    message = str(error) or error.__class__.__name__
    text = f"Error: {message}"
    if isinstance(error, httpx.ConnectError | httpx.UnsupportedProtocol | httpx.ProxyError):
        text = f"{text}\n\n{_CONNECTION_HINT}"
    return text


def _elapsed_ms(start: float) -> int:
    return round((time.perf_counter() - start) * 1000)


class RequestExecutor:
    """Executes HTTP drafts and records successful exchanges in history."""

    def __init__(
        self,
        history: HistoryService | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        debug: bool = False,
    ):
        self.history = history
        self.debug = debug
        # No timeout: an unresponsive server blocks until the caller aborts
        self._client = httpx.AsyncClient(timeout=None, transport=transport)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "RequestExecutor":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def execute(
        self,
        draft: RequestDraft,
        on_progress: ProgressCallback | None = None,
        abort: AbortHandle | None = None,
    ) -> ExecutionResult:
        """Execute an HTTP draft.

        Errors never propagate; they come back as ``ExecutionResult.error``.

        Args:
            draft: The draft to send
            on_progress: Called once per chunk of a streamed response
            abort: Handle that cancels the request when aborted

        Returns:
            The execution result
        """
        if draft.protocol != "HTTP":
            return ExecutionResult(error="Error: WebSocket drafts open as sessions, not requests")

        abort = abort or AbortHandle()
        result = ExecutionResult()
        request_task = asyncio.create_task(self._perform(draft, result, on_progress))
        abort_task = asyncio.create_task(abort.wait())
        try:
            done, _ = await asyncio.wait(
                {request_task, abort_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
            if request_task not in done:
                request_task.cancel()
                try:
                    await request_task
                except asyncio.CancelledError:
                    pass
                raise RequestAbortedError("Request aborted")
            request_task.result()
        except (httpx.HTTPError, httpx.InvalidURL, RequestAbortedError, OSError, ValueError) as e:
            debug_log(f"execute: {draft.method} {draft.url} failed: {e!r}", self.debug)
            result.error = describe_error(e)
        finally:
            abort_task.cancel()
            if not request_task.done():
                request_task.cancel()
        return result

    async def _perform(
        self,
        draft: RequestDraft,
        result: ExecutionResult,
        on_progress: ProgressCallback | None,
    ) -> None:
        url = build_url(draft)
        request = self._client.build_request(
            draft.method,
            url,
            headers=build_headers(draft),
            content=draft.body.encode("utf-8") if draft.sends_body() else None,
        )
        debug_log(f"execute: {draft.method} {url}", self.debug)

        start = time.perf_counter()
        response = await self._client.send(request, stream=True)
        try:
            result.status_code = response.status_code
            result.reason = response.reason_phrase
            self._record(draft)

            result.content_type = response.headers.get("content-type", "")
            result.kind, result.language = classify_content_type(result.content_type)

            if result.kind == "Stream":
                await self._read_stream(response, result, start, on_progress)
            else:
                raw = await response.aread()
                text = raw.decode("utf-8", errors="replace")
                result.text = pretty_json_text(text) if result.kind == "JSON" else text
                result.size_bytes = len(raw)
            result.elapsed_ms = _elapsed_ms(start)
        finally:
            await response.aclose()

    def _record(self, draft: RequestDraft) -> None:
        """Save the draft to history; a failed save never fails the request."""
        if self.history is None:
            return
        try:
            self.history.record(draft)
        except OSError as e:
            debug_log(f"execute: could not save history: {e}", self.debug)

    async def _read_stream(
        self,
        response: httpx.Response,
        result: ExecutionResult,
        start: float,
        on_progress: ProgressCallback | None,
    ) -> None:
        """Read an event stream chunk by chunk, reporting after each one."""
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        async for chunk in response.aiter_bytes():
            result.size_bytes += len(chunk)
            result.text += decoder.decode(chunk)
            if on_progress is not None:
                on_progress(
                    ResponseProgress(
                        text=result.text,
                        size_bytes=result.size_bytes,
                        elapsed_ms=_elapsed_ms(start),
                    )
                )
        result.text += decoder.decode(b"", final=True)
