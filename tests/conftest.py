import sys
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Ensure repository root is on sys.path so `import codex_admin...` works locally
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from codex_admin.logger import (  # noqa: E402
    CreateError,
    DeleteError,
    LoadError,
    PullError,
    SaveError,
    UpdateError,
)
from codex_admin.models import Directory  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


def _row(id: int, **overrides: Any) -> Dict[str, Any]:
    row = {
        "id": id,
        "name": f"repo{id}",
        "path": f"/srv/code/repo{id}",
        "language": "go",
        "role": "后端业务",
        "enabled": True,
        "git_auto_update_interval_sec": 0,
        "git_last_updated_at": None,
    }
    row.update(overrides)
    return row


class FakeBackend:
    """In-memory stand-in for AdminApiClient that records every call.

    Names in `fail` make the matching method raise its category error.
    Setting `pull_gate` / `list_gate` / `ignore_gate` makes git_pull /
    list_directories / get_ignore_file block until the event is set; reads
    capture their data before blocking.
    """

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None):
        self.rows = [dict(r) for r in rows or []]
        self.calls: List[tuple] = []
        self.fail: set = set()
        self.ignore_text = "# codex-mcp ignore rules (gitignore format)\n.git\nnode_modules\n"
        self.pull_gate: Optional[threading.Event] = None
        self.list_gate: Optional[threading.Event] = None
        self.list_entered = threading.Event()
        self.ignore_gate: Optional[threading.Event] = None
        self.ignore_entered = threading.Event()
        self._lock = threading.Lock()

    def _record(self, *call: Any) -> None:
        with self._lock:
            self.calls.append(call)

    def calls_to(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]

    def list_directories(self) -> List[Directory]:
        self._record("list_directories")
        rows = [dict(r) for r in self.rows]
        gate = self.list_gate
        self.list_entered.set()
        if gate is not None:
            gate.wait(5)
        if "list_directories" in self.fail:
            raise LoadError("Load failed", status_code=500)
        return [Directory.from_wire(r) for r in rows]

    def add_directory(self, name, path, language, role) -> int:
        self._record("add_directory", name, path, language, role)
        if "add_directory" in self.fail:
            raise CreateError("Add failed", status_code=400)
        new_id = max((r["id"] for r in self.rows), default=0) + 1
        self.rows.append(_row(
            new_id,
            name=name,
            path=path,
            language=language.code if language else "",
            role=role.value,
        ))
        return new_id

    def delete_directory(self, directory_id: int) -> None:
        self._record("delete_directory", directory_id)
        if "delete_directory" in self.fail:
            raise DeleteError("Delete failed", status_code=500)
        self.rows = [r for r in self.rows if r["id"] != directory_id]

    def set_enabled(self, directory_id: int, enabled: bool) -> None:
        self._record("set_enabled", directory_id, enabled)
        if "set_enabled" in self.fail:
            raise UpdateError("Update failed", status_code=500)
        for r in self.rows:
            if r["id"] == directory_id:
                r["enabled"] = enabled

    def set_git_interval(self, directory_id: int, interval) -> None:
        self._record("set_git_interval", directory_id, interval)
        if "set_git_interval" in self.fail:
            raise UpdateError("Setting failed", status_code=500)
        for r in self.rows:
            if r["id"] == directory_id:
                r["git_auto_update_interval_sec"] = interval.seconds

    def git_pull(self, directory_id: int) -> Optional[str]:
        self._record("git_pull", directory_id)
        if self.pull_gate is not None:
            self.pull_gate.wait(5)
        if "git_pull" in self.fail:
            raise PullError("Pull failed", status_code=500)
        stamp = "2024-05-06T07:08:09Z"
        for r in self.rows:
            if r["id"] == directory_id:
                r["git_last_updated_at"] = stamp
        return stamp

    def get_ignore_file(self) -> str:
        self._record("get_ignore_file")
        text = self.ignore_text
        gate = self.ignore_gate
        self.ignore_entered.set()
        if gate is not None:
            gate.wait(5)
        if "get_ignore_file" in self.fail:
            raise LoadError("Load failed", status_code=500)
        return text

    def put_ignore_file(self, content: str) -> None:
        self._record("put_ignore_file", content)
        if "put_ignore_file" in self.fail:
            raise SaveError("Save failed", status_code=500)
        self.ignore_text = content

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None


@pytest.fixture
def make_row():
    return _row


@pytest.fixture
def backend():
    return FakeBackend([_row(1), _row(2, enabled=False, language="", role="前端框架")])


@pytest.fixture
def empty_backend():
    return FakeBackend()


@pytest.fixture
def backend_factory():
    return FakeBackend
