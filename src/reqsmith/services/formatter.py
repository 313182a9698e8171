"""Formatter service for markdown output."""

from datetime import datetime

from reqsmith.models.draft import ImportResult, KeyValuePair, RequestDraft
from reqsmith.models.history import HistoryItem
from reqsmith.models.output import FormatOptions
from reqsmith.models.response import ExecutionResult
from reqsmith.models.websocket import WsMessage

_SENSITIVE_HEADERS = ("authorization", "x-api-key", "cookie", "set-cookie", "proxy-authorization")

_DIALECT_LABELS = {
    "curl": "cURL",
    "fetch": "fetch",
    "powershell": "PowerShell",
}


class FormatterService:
    """Service for formatting drafts, results and history as markdown."""

    def format_import(self, result: ImportResult, options: FormatOptions) -> str:
        """Format a smart-import result."""
        lines = [
            f"# Imported from {_DIALECT_LABELS[result.dialect]}",
            f"**Active tab:** {result.active_tab}",
            "",
            self.format_draft(result.draft, options),
        ]
        return "\n".join(lines)

    def format_draft(self, draft: RequestDraft, options: FormatOptions) -> str:
        """Format a request draft as markdown.

        Args:
            draft: The draft to format
            options: Formatting options

        Returns:
            Markdown formatted string
        """
        lines: list[str] = []

        if draft.protocol == "WS":
            lines.append(f"## WS {draft.url}")
            return "\n".join(lines)

        lines.append(f"## {draft.method} {draft.url or '(no URL)'}")
        lines.append("")

        if draft.params:
            lines.append("### Params")
            lines.extend(self._format_pairs(draft.params, "=", mask=False))
            lines.append("")

        if draft.headers and options.show_headers:
            lines.append("### Headers")
            lines.extend(self._format_pairs(draft.headers, ": ", mask=options.mask_secrets))
            lines.append("")

        if draft.body:
            lines.append("### Body")
            if not draft.sends_body():
                lines.append(f"_(not sent with {draft.method})_")
            lang = "json" if draft.body.lstrip().startswith(("{", "[")) else ""
            lines.append(f"```{lang}")
            lines.append(self._truncate(draft.body, options))
            lines.append("```")
            lines.append("")

        return "\n".join(lines)

    def format_result(self, result: ExecutionResult, options: FormatOptions) -> str:
        """Format an execution result as markdown.

        Args:
            result: The result to format
            options: Formatting options

        Returns:
            Markdown formatted string
        """
        lines: list[str] = []

        if result.error is not None:
            lines.append("## Request Failed")
            if result.status_code is not None:
                lines.append(f"**Status:** {result.status_code} {result.reason}".rstrip())
            lines.append("")
            lines.append(result.error)
            return "\n".join(lines)

        lines.append(f"## {result.status_code} {result.reason}".rstrip())
        lines.append(f"**Type:** {result.kind}")
        if result.elapsed_ms is not None:
            lines.append(f"**Time:** {self._format_duration(result.elapsed_ms)}")
        lines.append(f"**Size:** {result.size_label}")
        lines.append("")

        if result.text:
            lang = self._get_code_block_lang(result.language)
            lines.append(f"```{lang}")
            lines.append(self._truncate(result.text, options))
            lines.append("```")

        return "\n".join(lines)

    def format_history(self, items: list[HistoryItem]) -> str:
        """Format the history list."""
        if not items:
            return "No history yet."

        count = len(items)
        plural = "s" if count != 1 else ""
        pinned = sum(1 for h in items if h.pinned)
        lines = [f"# History - {count} request{plural} ({pinned} pinned)", ""]
        for item in items:
            marker = "📌 " if item.pinned else ""
            method = item.method if item.protocol == "HTTP" else "WS"
            lines.append(
                f"- {marker}`{item.id[:8]}` **{item.name}** {method} {item.url} "
                f"({self._format_timestamp(item.timestamp)})"
            )
        return "\n".join(lines)

    def format_history_item(self, item: HistoryItem, options: FormatOptions) -> str:
        """Format one history entry with its stored request."""
        lines = [
            f"# {item.name}",
            f"**ID:** `{item.id}`",
            f"**Pinned:** {'yes' if item.pinned else 'no'}",
            f"**Last sent:** {self._format_timestamp(item.timestamp)}",
            "",
            self.format_draft(item.to_draft(), options),
        ]
        return "\n".join(lines)

    def format_ws_message(self, message: WsMessage) -> str:
        """Format a WebSocket log entry as a single line."""
        arrows = {"sent": "→", "received": "←", "system": "•"}
        return f"[{message.time}] {arrows[message.type]} {message.content}"

    def _build_separator(self, label: str, width: int = 80) -> str:
        """Build a visual separator line with a centered label.

        Args:
            label: The label to center in the separator
            width: Total width of the separator line

        Returns:
            Separator string like "******** POST /api ********"
        """
        label_with_spaces = f" {label} "
        remaining = width - len(label_with_spaces)
        if remaining < 2:
            return f"* {label} *"
        left = remaining // 2
        right = remaining - left
        return f"{'*' * left}{label_with_spaces}{'*' * right}"

    def _truncate(self, text: str, options: FormatOptions) -> str:
        if options.truncate is not None and len(text) > options.truncate:
            return text[: options.truncate] + f"\n... (truncated, {len(text)} total chars)"
        return text

    def _format_pairs(self, pairs: list[KeyValuePair], separator: str, mask: bool) -> list[str]:
        """Format params or headers for display.

        Disabled rows are shown commented out so they are visibly skipped.
        """
        lines: list[str] = []
        for pair in pairs:
            value = pair.value
            if mask and pair.key.lower() in _SENSITIVE_HEADERS:
                value = "***"
            prefix = "" if pair.enabled else "# "
            lines.append(f"{prefix}{pair.key}{separator}{value}")
        return lines

    def _format_duration(self, ms: int) -> str:
        if ms < 1000:
            return f"{ms}ms"
        return f"{ms / 1000:.2f}s"

    def _format_timestamp(self, dt: datetime) -> str:
        return dt.isoformat(timespec="seconds")

    def _get_code_block_lang(self, language: str) -> str:
        return "" if language == "plaintext" else language
