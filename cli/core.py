"""Shared helpers for CLI commands."""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Awaitable, Callable, Optional

from codex_admin.client import AdminApiClient
from codex_admin.config import request_timeout
from codex_admin.console import AdminConsole
from codex_admin.logger import get_logger
from codex_admin.view import console_payload, format_message, render_console

logger = get_logger("cli")

Action = Callable[[AdminConsole], Awaitable[Any]]


def get_client(args: argparse.Namespace) -> AdminApiClient:
    timeout = getattr(args, "timeout", None)
    return AdminApiClient(
        base_url=getattr(args, "base_url", None),
        timeout=request_timeout(timeout) if timeout is not None else None,
    )


def output_json(data: Any) -> None:
    """Write JSON to stdout; single place for all commands."""
    json.dump(data, sys.stdout, indent=2, default=str, ensure_ascii=False)
    sys.stdout.write("\n")


def run_async(coro) -> Any:
    """Run an async coroutine from sync CLI context."""
    return asyncio.run(coro)


def confirm_on_tty(prompt: str) -> bool:
    """Interactive confirmation; a non-interactive stdin declines."""
    if not sys.stdin.isatty():
        print(f"[cli] {prompt} declined (stdin is not a terminal, pass --yes)", file=sys.stderr)
        return False
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def with_console(
    args: argparse.Namespace,
    action: Optional[Action] = None,
    *,
    mount: bool = True,
    confirm: Optional[Callable[[str], bool]] = None,
) -> AdminConsole:
    """Build a console, optionally load the list, run one action, tear down."""

    async def _run() -> AdminConsole:
        with get_client(args) as client:
            console = AdminConsole(client, confirm=confirm)
            try:
                if mount:
                    await console.mount()
                if action is not None:
                    await action(console)
            finally:
                console.close()
            return console

    return run_async(_run())


def emit_page(args: argparse.Namespace, console: AdminConsole) -> None:
    """Print the directory page (or its JSON form); exit 1 on an error message."""
    if getattr(args, "json", False):
        output_json(console_payload(console))
    else:
        sys.stdout.write(render_console(console))
    if console.message is not None and console.message.is_error:
        sys.exit(1)


def emit_editor_message(args: argparse.Namespace, console: AdminConsole, **extra: Any) -> None:
    message = console.editor.message
    failed = message is not None and message.is_error
    if getattr(args, "json", False):
        payload: dict[str, Any] = {"ok": not failed, **extra}
        if message is not None:
            payload["message"] = {"type": message.kind, "text": message.text}
        output_json(payload)
    else:
        text = format_message(message)
        if text:
            print(text, file=sys.stderr if failed else sys.stdout)
    if failed:
        sys.exit(1)
