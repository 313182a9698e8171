"""Main Typer application."""

import typer

from reqsmith.cli.commands import history_app, import_request, send_request, show_help, ws_session

app = typer.Typer(
    name="reqsmith",
    help="Compose HTTP and WebSocket requests from cURL, fetch and PowerShell snippets.",
    no_args_is_help=True,
)

# Register commands
app.command("import", help="Import a request from a pasted snippet")(import_request)
app.command("send", help="Send an HTTP request")(send_request)
app.command("ws", help="Open an interactive WebSocket session")(ws_session)
app.add_typer(history_app, name="history")
app.command("help", help="Show detailed help and examples")(show_help)


if __name__ == "__main__":
    app()
