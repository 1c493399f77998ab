"""Ignore-rule commands: ignore show, ignore save, ignore edit."""
from __future__ import annotations

import argparse
import asyncio
import os
import shlex
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from cli.core import emit_editor_message, logger, with_console
from codex_admin.config import editor_command
from codex_admin.console import AdminConsole
from codex_admin.logger import ConfigurationError


def cmd_ignore_show(args: argparse.Namespace) -> None:
    """Print the current ignore file."""
    result: Dict[str, Any] = {}

    async def _show(console: AdminConsole) -> None:
        result["content"] = await console.load_ignore_rules()

    console = with_console(args, _show, mount=False)
    content = result.get("content")
    if content is None:
        emit_editor_message(args, console)
        return
    if getattr(args, "json", False):
        emit_editor_message(args, console, content=content)
    else:
        sys.stdout.write(content)


def cmd_ignore_save(args: argparse.Namespace) -> None:
    """Replace the ignore file with FILE (or stdin)."""
    source = getattr(args, "file", None)
    if source and source != "-":
        text = Path(source).read_text(encoding="utf-8")
    else:
        text = sys.stdin.read()

    async def _save(console: AdminConsole) -> None:
        await console.save_ignore_rules(text)

    emit_editor_message(args, with_console(args, _save, mount=False))


def launch_editor(text: str) -> Optional[str]:
    """Open text in $VISUAL/$EDITOR; None if the editor exits non-zero."""
    command = shlex.split(editor_command())
    if not command:
        raise ConfigurationError("No editor configured (set VISUAL or EDITOR)")
    fd, path = tempfile.mkstemp(prefix="codex-ignore-", suffix=".gitignore")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        proc = subprocess.run(command + [path], check=False)
        if proc.returncode != 0:
            logger.warning(f"[cli] editor exited with status {proc.returncode}; discarding edits")
            return None
        return Path(path).read_text(encoding="utf-8")
    finally:
        try:
            os.unlink(path)
        except OSError:
            pass


def write_recovery_file(text: str) -> Path:
    """Keep unsaved edits on disk after a failed save."""
    fd, path = tempfile.mkstemp(prefix="codex-ignore-", suffix=".unsaved")
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        fh.write(text)
    return Path(path)


def cmd_ignore_edit(args: argparse.Namespace) -> None:
    """Load the ignore file into $EDITOR and save it back if it changed."""
    extra: Dict[str, Any] = {}

    async def _edit(console: AdminConsole) -> None:
        await console.open_ignore_editor()
        if console.editor.message is not None and console.editor.message.is_error:
            return
        original = console.editor.content
        edited = await asyncio.to_thread(launch_editor, original)
        if edited is None or edited == original:
            extra["changed"] = False
            console.close_ignore_editor()
            return
        extra["changed"] = True
        console.edit_ignore_rules(edited)
        if not await console.save_ignore_rules():
            recovery = write_recovery_file(console.editor.content)
            extra["recovery_file"] = str(recovery)
            print(f"[cli] unsaved ignore rules kept in {recovery}", file=sys.stderr)

    console = with_console(args, _edit, mount=False)
    if extra.get("changed") is False and not getattr(args, "json", False):
        print("No changes", file=sys.stderr)
    emit_editor_message(args, console, **extra)
