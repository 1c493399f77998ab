"""Directory commands: list, add, delete, enable, disable, toggle, git-interval, pull."""
from __future__ import annotations

import argparse

from cli.core import confirm_on_tty, emit_page, with_console
from codex_admin.console import AdminConsole, Message


def cmd_list(args: argparse.Namespace) -> None:
    """Load and print the directory list."""
    emit_page(args, with_console(args))


def cmd_add(args: argparse.Namespace) -> None:
    """Add a directory, then print the refreshed list."""

    async def _add(console: AdminConsole) -> None:
        await console.add_directory(
            name=args.name,
            path=args.path,
            language=getattr(args, "language", None) or "",
            role=getattr(args, "role", None) or "",
        )

    emit_page(args, with_console(args, _add))


def cmd_delete(args: argparse.Namespace) -> None:
    """Delete a directory after confirmation (or --yes)."""
    confirm = (lambda _prompt: True) if getattr(args, "yes", False) else confirm_on_tty

    async def _delete(console: AdminConsole) -> None:
        await console.delete_directory(args.id)

    emit_page(args, with_console(args, _delete, confirm=confirm))


def _set_enabled(args: argparse.Namespace, enabled: bool) -> None:
    async def _set(console: AdminConsole) -> None:
        await console.set_enabled(args.id, enabled)

    emit_page(args, with_console(args, _set))


def cmd_enable(args: argparse.Namespace) -> None:
    _set_enabled(args, True)


def cmd_disable(args: argparse.Namespace) -> None:
    _set_enabled(args, False)


def cmd_toggle(args: argparse.Namespace) -> None:
    """Flip the enabled flag of the directory as currently listed."""

    async def _toggle(console: AdminConsole) -> None:
        directory = console.snapshot.find(args.id)
        if directory is None:
            if not (console.message and console.message.is_error):
                console.message = Message.error(f"Directory {args.id} not found")
            return
        await console.toggle_enabled(directory)

    emit_page(args, with_console(args, _toggle))


def cmd_git_interval(args: argparse.Namespace) -> None:
    async def _interval(console: AdminConsole) -> None:
        await console.set_git_interval(args.id, args.interval)

    emit_page(args, with_console(args, _interval))


def cmd_pull(args: argparse.Namespace) -> None:
    """Trigger a Git pull for one directory."""

    async def _pull(console: AdminConsole) -> None:
        await console.pull_now(args.id)

    emit_page(args, with_console(args, _pull))
