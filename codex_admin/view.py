"""Plain-text rendering of the admin console state."""
from __future__ import annotations

import unicodedata
from datetime import datetime
from typing import Any, List, Optional, Sequence

from .console import AdminConsole, Message
from .models import Directory

PLACEHOLDER = "—"

COLUMNS = ("ID", "Name", "Path", "Language", "Role", "Enabled", "Git auto-update", "Last pull", "Actions")


def format_git_last_updated(value: Optional[str]) -> str:
    """Local-time rendering of a server timestamp; unparsable input is returned as-is."""
    if not value:
        return PLACEHOLDER
    try:
        dt = datetime.fromisoformat(str(value).strip())
        dt = dt.astimezone()
    except (TypeError, ValueError, OverflowError, OSError):
        return str(value)
    return f"{dt.year}/{dt.month}/{dt.day} {dt:%H:%M:%S}"


def enabled_label(d: Directory) -> str:
    return "yes" if d.enabled else "no"


def toggle_label(d: Directory) -> str:
    return "disable" if d.enabled else "enable"


def pull_label(console: AdminConsole, d: Directory) -> str:
    return "pulling…" if console.is_pulling(d.id) else "pull now"


def _width(text: str) -> int:
    # CJK role values occupy two terminal cells
    return sum(2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1 for ch in text)


def _pad(text: str, width: int) -> str:
    return text + " " * (width - _width(text))


def _table(rows: Sequence[Sequence[str]]) -> List[str]:
    widths = [max(_width(row[i]) for row in rows) for i in range(len(rows[0]))]
    lines = []
    for n, row in enumerate(rows):
        lines.append("  ".join(_pad(cell, widths[i]) for i, cell in enumerate(row)).rstrip())
        if n == 0:
            lines.append("  ".join("-" * w for w in widths))
    return lines


def directory_row(console: AdminConsole, d: Directory) -> List[str]:
    return [
        str(d.id),
        d.name,
        d.path,
        d.language.code if d.language else PLACEHOLDER,
        d.role.value if d.role else PLACEHOLDER,
        enabled_label(d),
        d.git_auto_update_interval_sec.label,
        format_git_last_updated(d.git_last_updated_at),
        f"[{toggle_label(d)}] [{pull_label(console, d)}] [delete]",
    ]


def format_message(message: Optional[Message]) -> Optional[str]:
    if message is None:
        return None
    return f"{'error' if message.is_error else 'ok'}: {message.text}"


def render_console(console: AdminConsole) -> str:
    lines = ["codex-mcp", "Manage indexed directories and ignore rules", ""]
    msg = format_message(console.message)
    if msg:
        lines.extend([msg, ""])
    lines.append("Directories")
    if console.loading:
        lines.append("Loading…")
    elif not console.directories:
        lines.append("No directories yet, add one above")
    else:
        rows: List[List[str]] = [list(COLUMNS)]
        rows.extend(directory_row(console, d) for d in console.directories)
        lines.extend(_table(rows))
    return "\n".join(lines) + "\n"


def render_ignore_editor(console: AdminConsole) -> str:
    editor = console.editor
    if not editor.is_open:
        return ""
    lines = [
        "Edit ignore rules",
        "gitignore format, one pattern per line; saved rules are hot-reloaded.",
        "",
        editor.content.rstrip("\n"),
    ]
    msg = format_message(editor.message)
    if msg:
        lines.extend(["", msg])
    return "\n".join(lines) + "\n"


def console_payload(console: AdminConsole) -> dict[str, Any]:
    """JSON-friendly view for --json output."""
    payload: dict[str, Any] = {
        "ok": not (console.message and console.message.is_error),
        "directories": [d.to_dict() for d in console.directories],
    }
    if console.message:
        payload["message"] = {"type": console.message.kind, "text": console.message.text}
    return payload
