"""CLI command definitions."""

import asyncio
import sys
import threading
from pathlib import Path
from typing import Annotated, TextIO

import typer
from rich.console import Console

from reqsmith.cli.help import get_help
from reqsmith.cli.options import (
    DataOption,
    DebugOption,
    FromHistoryOption,
    HeaderOption,
    HistoryFileOption,
    JsonOption,
    MethodOption,
    NoHeadersOption,
    ParamOption,
    SendOption,
    TruncateOption,
    YesOption,
)
from reqsmith.models.draft import KeyValuePair, RequestDraft
from reqsmith.models.output import FormatOptions
from reqsmith.models.response import ExecutionResult, ResponseProgress
from reqsmith.parsers import draft_from_url, smart_import
from reqsmith.repositories.history import JsonHistoryRepository
from reqsmith.services.executor import RequestExecutor
from reqsmith.services.formatter import FormatterService
from reqsmith.services.history import HistoryItemNotFoundError, HistoryService, PinLimitError
from reqsmith.services.websocket import WebSocketSession
from reqsmith.settings import settings

console = Console()
err_console = Console(stderr=True)

history_app = typer.Typer(help="Manage the request history", no_args_is_help=True)


def _get_history_service(history_file: Path | None, debug: bool = False) -> HistoryService:
    """Build the history service, preferring the CLI option over settings."""
    path = history_file if history_file is not None else settings.history_file
    repository = JsonHistoryRepository(path, debug=debug)
    return HistoryService(
        repository,
        limit=settings.history_limit,
        pin_limit=settings.pin_limit,
        debug=debug,
    )


def _build_format_options(
    truncate: int | None = None,
    no_headers: bool = False,
    debug: bool = False,
) -> FormatOptions:
    """Build FormatOptions from CLI options."""
    return FormatOptions(truncate=truncate, show_headers=not no_headers, debug=debug)


def _read_text(text: str | None) -> str:
    """Return the argument, or stdin when it is missing or '-'."""
    if text is None or text == "-":
        return sys.stdin.read()
    return text


def _print(output: str) -> None:
    console.print(output, markup=False, soft_wrap=True)


def _build_draft(
    url: str | None,
    method: str | None,
    headers: list[str] | None,
    params: list[str] | None,
    data: str | None,
    base: RequestDraft | None,
) -> RequestDraft:
    """Build a draft from CLI options layered over an optional base draft."""
    draft = base or RequestDraft()
    if url is not None:
        draft.url = url
    draft.headers.extend(KeyValuePair.parse(h, ":") for h in headers or [])
    draft.params.extend(KeyValuePair.parse(p, "=") for p in params or [])
    if data is not None:
        draft.body = data
    if method is not None:
        draft.method = method.upper()
    elif data is not None and base is None:
        draft.method = "POST"
    if not draft.url:
        raise ValueError("A URL is required (pass one or use --from-history)")
    return draft


async def _execute(
    draft: RequestDraft,
    history: HistoryService,
    debug: bool,
) -> tuple[ExecutionResult, bool]:
    """Execute a draft, echoing streamed chunks as they arrive."""
    printed = 0
    streamed = False

    def on_progress(progress: ResponseProgress) -> None:
        nonlocal printed, streamed
        streamed = True
        console.out(progress.text[printed:], end="", highlight=False)
        printed = len(progress.text)

    async with RequestExecutor(history=history, debug=debug) as executor:
        result = await executor.execute(draft, on_progress=on_progress)
    if streamed:
        console.out("")
    return result, streamed


def _run_request(
    draft: RequestDraft,
    history: HistoryService,
    options: FormatOptions,
    debug: bool,
) -> None:
    """Execute a draft and print the outcome; exit 1 if nothing came back."""
    formatter = FormatterService()
    label = f"{draft.method} {draft.url}"
    err_console.print(formatter._build_separator(label), markup=False)

    result, streamed = asyncio.run(_execute(draft, history, debug))
    if streamed:
        # The body was already echoed chunk by chunk
        result = result.model_copy(update={"text": ""})
    _print(formatter.format_result(result, options))

    if not result.ok:
        raise typer.Exit(1)


def import_request(
    text: Annotated[
        str | None,
        typer.Argument(help="cURL, fetch or PowerShell snippet (reads stdin if omitted)"),
    ] = None,
    send: SendOption = False,
    json_output: JsonOption = False,
    history_file: HistoryFileOption = None,
    truncate: TruncateOption = None,
    no_headers: NoHeadersOption = False,
    debug: DebugOption = False,
) -> None:
    """Import a request from a pasted cURL, fetch or PowerShell snippet."""
    try:
        raw = _read_text(text)
        if not raw.strip():
            err_console.print("Error: nothing to import")
            raise typer.Exit(1)

        options = _build_format_options(truncate, no_headers, debug)
        formatter = FormatterService()

        result = smart_import(raw)
        if result is None:
            # Not a known snippet: treat it like a URL typed into the address bar
            if debug:
                err_console.print("[dim][DEBUG] No dialect matched, using input as URL[/dim]")
            draft = draft_from_url(raw)
            output = formatter.format_draft(draft, options)
        else:
            if debug:
                err_console.print(f"[dim][DEBUG] Detected dialect: {result.dialect}[/dim]")
            draft = result.draft
            output = formatter.format_import(result, options)

        if json_output:
            console.print_json(draft.model_dump_json())
        else:
            _print(output)

        if send:
            if not draft.url:
                err_console.print("Error: the snippet has no URL to send to")
                raise typer.Exit(1)
            _run_request(draft, _get_history_service(history_file, debug), options, debug)

    except ValueError as e:
        err_console.print(f"Error: {e}", markup=False)
        raise typer.Exit(1) from None


def send_request(
    url: Annotated[str | None, typer.Argument(help="Request URL")] = None,
    method: MethodOption = None,
    header: HeaderOption = None,
    param: ParamOption = None,
    data: DataOption = None,
    from_history: FromHistoryOption = None,
    history_file: HistoryFileOption = None,
    truncate: TruncateOption = None,
    no_headers: NoHeadersOption = False,
    debug: DebugOption = False,
) -> None:
    """Send an HTTP request and record it in history."""
    try:
        history = _get_history_service(history_file, debug)
        base = history.restore(from_history) if from_history is not None else None
        draft = _build_draft(url, method, header, param, data, base)
        if draft.protocol == "WS":
            err_console.print("Error: this history entry is a WebSocket; use 'reqsmith ws'")
            raise typer.Exit(1)

        options = _build_format_options(truncate, no_headers, debug)
        _run_request(draft, history, options, debug)

    except HistoryItemNotFoundError as e:
        err_console.print(f"Error: {e}", markup=False)
        raise typer.Exit(1) from None
    except ValueError as e:
        err_console.print(f"Error: {e}", markup=False)
        raise typer.Exit(1) from None


def _read_lines(stream: TextIO, loop: asyncio.AbstractEventLoop, lines: asyncio.Queue) -> None:
    """Forward lines from a blocking stream to the event loop until EOF or /quit."""
    while True:
        line = stream.readline()
        try:
            loop.call_soon_threadsafe(lines.put_nowait, line)
        except RuntimeError:
            # The session already ended and its loop is closed
            return
        if not line or line.strip() == "/quit":
            return


async def _run_session(session: WebSocketSession, draft: RequestDraft) -> bool:
    """Connect, then forward stdin lines until EOF, /quit or remote close."""
    if not await session.connect(draft):
        return False

    lines: asyncio.Queue[str] = asyncio.Queue()
    # Daemon thread: a pending readline must not keep the process alive
    reader = threading.Thread(
        target=_read_lines,
        args=(sys.stdin, asyncio.get_running_loop(), lines),
        daemon=True,
    )
    reader.start()

    closed = asyncio.ensure_future(session.wait_closed())
    while session.connected:
        next_line = asyncio.ensure_future(lines.get())
        done, _ = await asyncio.wait({next_line, closed}, return_when=asyncio.FIRST_COMPLETED)
        if next_line not in done:
            next_line.cancel()
            break
        line = next_line.result()
        if not line or line.strip() == "/quit":
            break
        await session.send(line.rstrip("\r\n"))

    await session.disconnect()
    await closed
    return True


def ws_session(
    url: Annotated[str | None, typer.Argument(help="WebSocket URL (ws:// or wss://)")] = None,
    from_history: FromHistoryOption = None,
    history_file: HistoryFileOption = None,
    debug: DebugOption = False,
) -> None:
    """Open an interactive WebSocket session."""
    try:
        history = _get_history_service(history_file, debug)
        if from_history is not None:
            draft = history.restore(from_history)
            if url is not None:
                draft.url = url
        elif url is not None:
            draft = RequestDraft(protocol="WS", url=url)
        else:
            raise ValueError("A URL is required (pass one or use --from-history)")

        formatter = FormatterService()
        session = WebSocketSession(
            history=history,
            max_log=settings.ws_log_limit,
            on_message=lambda m: _print(formatter.format_ws_message(m)),
            debug=debug,
        )

        err_console.print("Type a message and press Enter to send; /quit to disconnect.")
        if not asyncio.run(_run_session(session, draft)):
            raise typer.Exit(1)

    except HistoryItemNotFoundError as e:
        err_console.print(f"Error: {e}", markup=False)
        raise typer.Exit(1) from None
    except ValueError as e:
        err_console.print(f"Error: {e}", markup=False)
        raise typer.Exit(1) from None
    except KeyboardInterrupt:
        console.print("\nDisconnected.")


@history_app.command("list")
def list_history(
    history_file: HistoryFileOption = None,
    debug: DebugOption = False,
) -> None:
    """List saved requests, pinned first."""
    history = _get_history_service(history_file, debug)
    _print(FormatterService().format_history(history.list_items()))


@history_app.command("show")
def show_history(
    item_id: Annotated[str, typer.Argument(help="History id or id prefix")],
    json_output: JsonOption = False,
    history_file: HistoryFileOption = None,
    truncate: TruncateOption = None,
    debug: DebugOption = False,
) -> None:
    """Show one saved request."""
    try:
        item = _get_history_service(history_file, debug).get(item_id)
        if json_output:
            console.print_json(item.model_dump_json())
        else:
            options = _build_format_options(truncate, debug=debug)
            _print(FormatterService().format_history_item(item, options))
    except HistoryItemNotFoundError as e:
        err_console.print(f"Error: {e}", markup=False)
        raise typer.Exit(1) from None


@history_app.command("pin")
def pin_history(
    item_id: Annotated[str, typer.Argument(help="History id or id prefix")],
    history_file: HistoryFileOption = None,
    debug: DebugOption = False,
) -> None:
    """Toggle the pinned state of a saved request."""
    try:
        item = _get_history_service(history_file, debug).toggle_pin(item_id)
        state = "Pinned" if item.pinned else "Unpinned"
        console.print(f"{state}: {item.name}", markup=False)
    except (HistoryItemNotFoundError, PinLimitError) as e:
        err_console.print(f"Error: {e}", markup=False)
        raise typer.Exit(1) from None


@history_app.command("rename")
def rename_history(
    item_id: Annotated[str, typer.Argument(help="History id or id prefix")],
    name: Annotated[str, typer.Argument(help="New display name")],
    history_file: HistoryFileOption = None,
    debug: DebugOption = False,
) -> None:
    """Rename a saved request."""
    try:
        item = _get_history_service(history_file, debug).rename(item_id, name)
        console.print(f"Renamed to: {item.name}", markup=False)
    except HistoryItemNotFoundError as e:
        err_console.print(f"Error: {e}", markup=False)
        raise typer.Exit(1) from None
    except ValueError as e:
        err_console.print(f"Error: {e}", markup=False)
        raise typer.Exit(1) from None


@history_app.command("delete")
def delete_history(
    item_id: Annotated[str, typer.Argument(help="History id or id prefix")],
    yes: YesOption = False,
    history_file: HistoryFileOption = None,
    debug: DebugOption = False,
) -> None:
    """Delete a saved request, pinned or not."""
    try:
        history = _get_history_service(history_file, debug)
        item = history.get(item_id)
        if not yes and not typer.confirm(f"Delete '{item.name}'?"):
            console.print("Cancelled.")
            return
        history.delete(item.id)
        console.print(f"Deleted: {item.name}", markup=False)
    except HistoryItemNotFoundError as e:
        err_console.print(f"Error: {e}", markup=False)
        raise typer.Exit(1) from None


def show_help(
    command: Annotated[
        str | None,
        typer.Argument(help="Command to get help for"),
    ] = None,
) -> None:
    """Show detailed help and examples."""
    help_text = get_help(command)
    console.print(help_text, markup=False)
