import asyncio
import threading

import pytest

from codex_admin.console import AdminConsole

pytestmark = pytest.mark.unit


@pytest.mark.anyio
async def test_open_loads_current_content(backend):
    console = AdminConsole(backend)

    await console.open_ignore_editor()

    assert console.editor.is_open
    assert console.editor.content == backend.ignore_text
    assert console.editor.message is None
    assert backend.calls_to("list_directories") == []


@pytest.mark.anyio
async def test_failed_save_keeps_operator_text(backend):
    console = AdminConsole(backend)
    await console.open_ignore_editor()
    backend.fail.add("put_ignore_file")
    edited = "# mine\n*.log\ndist/\n"
    console.edit_ignore_rules(edited)

    assert await console.save_ignore_rules() is False

    assert console.editor.is_open
    assert console.editor.content == edited
    assert console.editor.message.is_error
    assert console.editor.message.text == "Save failed"
    assert backend.calls_to("get_ignore_file") == [("get_ignore_file",)]


@pytest.mark.anyio
async def test_save_round_trips_text_unchanged(backend):
    console = AdminConsole(backend)
    await console.open_ignore_editor()
    text = "  spaced/  \n\n# trailing blank lines kept\n\n"

    assert await console.save_ignore_rules(text) is True

    assert backend.calls_to("put_ignore_file") == [("put_ignore_file", text)]
    assert console.editor.message.text == "Saved, hot reload applied"


@pytest.mark.anyio
async def test_reload_discards_unsaved_edits(backend):
    console = AdminConsole(backend)
    await console.open_ignore_editor()
    console.edit_ignore_rules("scratch")

    await console.reload_ignore_rules()

    assert console.editor.content == backend.ignore_text


@pytest.mark.anyio
async def test_reload_failure_shows_error_and_keeps_buffer(backend):
    console = AdminConsole(backend)
    await console.open_ignore_editor()
    console.edit_ignore_rules("scratch")
    backend.fail.add("get_ignore_file")

    assert await console.reload_ignore_rules() is None

    assert console.editor.content == "scratch"
    assert console.editor.message.text == "Load failed"


@pytest.mark.anyio
async def test_close_discards_edits_without_saving(backend):
    console = AdminConsole(backend)
    await console.open_ignore_editor()
    console.edit_ignore_rules("never saved")

    console.close_ignore_editor()

    assert not console.editor.is_open
    assert console.editor.content == ""
    assert backend.calls_to("put_ignore_file") == []


@pytest.mark.anyio
async def test_load_without_open_editor_returns_text_only(backend):
    console = AdminConsole(backend)

    text = await console.load_ignore_rules()

    assert text == backend.ignore_text
    assert console.editor.content == ""


@pytest.mark.anyio
async def test_slow_load_from_earlier_open_does_not_overwrite_reopened_editor(backend):
    console = AdminConsole(backend)
    backend.ignore_text = "old/\n"
    gate = threading.Event()
    backend.ignore_gate = gate

    first = asyncio.create_task(console.open_ignore_editor())
    assert await asyncio.to_thread(backend.ignore_entered.wait, 5)
    console.close_ignore_editor()

    backend.ignore_gate = None
    backend.ignore_text = "new/\n"
    await console.open_ignore_editor()
    assert console.editor.content == "new/\n"

    gate.set()
    await first

    assert console.editor.is_open
    assert console.editor.content == "new/\n"
    assert console.editor.message is None
