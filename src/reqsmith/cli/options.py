"""Reusable CLI option definitions."""

from pathlib import Path
from typing import Annotated

import typer

# Global options
HistoryFileOption = Annotated[
    Path | None,
    typer.Option(
        "--history-file",
        help="Path of the JSON history file",
        envvar="REQSMITH_HISTORY_FILE",
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Enable debug logging to stderr",
    ),
]

# Request options
MethodOption = Annotated[
    str | None,
    typer.Option(
        "--method",
        "-X",
        help="HTTP method (default: GET, or POST when a body is given)",
    ),
]

HeaderOption = Annotated[
    list[str] | None,
    typer.Option(
        "--header",
        "-H",
        help="Request header as 'Key: Value' (repeatable)",
    ),
]

ParamOption = Annotated[
    list[str] | None,
    typer.Option(
        "--param",
        "-p",
        help="Query parameter as 'key=value' (repeatable)",
    ),
]

DataOption = Annotated[
    str | None,
    typer.Option(
        "--data",
        "-d",
        help="Request body (ignored for GET and HEAD)",
    ),
]

FromHistoryOption = Annotated[
    str | None,
    typer.Option(
        "--from-history",
        help="Start from a history entry (id or id prefix)",
    ),
]

SendOption = Annotated[
    bool,
    typer.Option(
        "--send",
        help="Execute the imported request",
    ),
]

# Output options
JsonOption = Annotated[
    bool,
    typer.Option(
        "--json",
        help="Print the request as JSON instead of markdown",
    ),
]

TruncateOption = Annotated[
    int | None,
    typer.Option(
        "--truncate",
        help="Truncate bodies to N characters",
    ),
]

NoHeadersOption = Annotated[
    bool,
    typer.Option(
        "--no-headers",
        help="Hide request headers in the output",
    ),
]

YesOption = Annotated[
    bool,
    typer.Option(
        "--yes",
        "-y",
        help="Do not ask for confirmation",
    ),
]
