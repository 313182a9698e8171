"""Help content for reqsmith CLI."""

OVERVIEW = """
reqsmith - multi-protocol request composer

Turn pasted cURL, fetch and PowerShell snippets into requests, send them over
HTTP or WebSocket, and keep a short history of what you sent.

COMMANDS:
  import    Import a request from a cURL, fetch or PowerShell snippet
  send      Send an HTTP request
  ws        Open an interactive WebSocket session
  history   List, show, pin, rename or delete saved requests
  help      Show detailed help and examples

QUICK START:
  # Paste a snippet copied from browser dev tools
  reqsmith import --send "curl https://httpbin.org/get -H 'Accept: application/json'"

  # Compose a request by hand
  reqsmith send https://httpbin.org/post -d '{"a": 1}' -H "Content-Type: application/json"

  # Re-send something from history
  reqsmith history list
  reqsmith send --from-history 3f2a

GLOBAL OPTIONS:
  --history-file PATH   History file (default: ~/.reqsmith/history.json)
  --debug               Debug logging to stderr

For more help on a specific command, use: reqsmith help <command>
"""

IMPORT_HELP = """
IMPORT COMMAND

Import a request from a pasted snippet. Recognised dialects:
  curl ...                       bash (\\ continuations) or cmd (^ continuations)
  fetch("...", {...})            as copied from browser dev tools
  Invoke-WebRequest / Invoke-RestMethod / iwr / irm

Anything else is treated as a plain URL.

USAGE:
  reqsmith import [SNIPPET] [OPTIONS]

OPTIONS:
  --send             Execute the imported request
  --json             Print the request as JSON
  --truncate INT     Truncate bodies to N characters
  --no-headers       Hide request headers

EXAMPLES:
  # From the clipboard (macOS)
  pbpaste | reqsmith import

  # Import and send
  reqsmith import --send "fetch('https://x.test/a?x=1', {method: 'GET'})"

NOTES:
  A body without an explicit method makes the request a POST.
  JSON bodies are re-indented; query parameters are listed separately.
"""

SEND_HELP = """
SEND COMMAND

Send an HTTP request. Successful exchanges (any status code) are saved in
history; requests that fail to get a response are not.

USAGE:
  reqsmith send [URL] [OPTIONS]

OPTIONS:
  -X, --method TEXT      HTTP method (default GET, or POST with a body)
  -H, --header TEXT      Header as 'Key: Value' (repeatable)
  -p, --param TEXT       Query parameter as 'key=value' (repeatable)
  -d, --data TEXT        Body (never sent with GET or HEAD)
  --from-history ID      Start from a saved request
  --truncate INT         Truncate the response body to N characters

EXAMPLES:
  reqsmith send https://httpbin.org/get -p page=2
  reqsmith send https://httpbin.org/anything -X PUT -d 'hello'

STREAMING:
  text/event-stream responses are printed chunk by chunk as they arrive.
"""

WS_HELP = """
WS COMMAND

Open an interactive WebSocket session. Each line you type is sent as a text
frame; incoming frames are printed as they arrive.

USAGE:
  reqsmith ws [URL] [OPTIONS]

OPTIONS:
  --from-history ID      Reconnect to a saved WebSocket URL

EXAMPLES:
  reqsmith ws wss://echo.websocket.org

Type /quit (or send EOF) to disconnect.
"""

HISTORY_HELP = """
HISTORY COMMAND

The history keeps at most 20 requests, 5 of which may be pinned. Pinned
requests are never evicted. Sending the same method and URL again updates
the existing entry instead of adding a new one.

USAGE:
  reqsmith history list
  reqsmith history show ID [--json]
  reqsmith history pin ID          (toggles)
  reqsmith history rename ID NAME
  reqsmith history delete ID [--yes]

IDs may be abbreviated to any unique prefix.
"""

COMMAND_HELP = {
    "import": IMPORT_HELP,
    "send": SEND_HELP,
    "ws": WS_HELP,
    "history": HISTORY_HELP,
}


def get_help(command: str | None = None) -> str:
    """Get help text for a command or overview.

    Args:
        command: Optional command name

    Returns:
        Help text string
    """
    if command is None:
        return OVERVIEW.strip()

    help_text = COMMAND_HELP.get(command.lower())
    if help_text is None:
        return f"Unknown command: {command}\n\nAvailable commands: {', '.join(COMMAND_HELP)}"

    return help_text.strip()
