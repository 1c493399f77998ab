"""Admin console state machine.

Holds everything the admin page shows (directory list, add form, per-row
pull markers, ignore-rule editor, feedback messages) and turns operator
actions into backend calls. Remote failures never escape an action: they
become a Message next to the list (or inside the editor) and the state is
left exactly as it was.

Blocking client calls run via asyncio.to_thread, so the console is idle
while a request is in flight and other actions can proceed.
"""
from __future__ import annotations

import asyncio
import functools
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Set, Tuple, Union

from .logger import (
    ContextLogger,
    CreateError,
    DeleteError,
    LoadError,
    PullError,
    SaveError,
    UpdateError,
    ValidationError,
    get_logger,
)
from .models import Directory, GitInterval, Language, Role

logger = ContextLogger(get_logger(__name__), component="console")

ConfirmFn = Callable[[str], Union[bool, Awaitable[bool]]]


@dataclass(frozen=True)
class Message:
    kind: str  # "error" | "success"
    text: str

    @classmethod
    def error(cls, text: str) -> "Message":
        return cls("error", text)

    @classmethod
    def success(cls, text: str) -> "Message":
        return cls("success", text)

    @property
    def is_error(self) -> bool:
        return self.kind == "error"


@dataclass(frozen=True)
class DirectorySnapshot:
    """The directory list as of the last applied fetch."""

    version: int = 0
    directories: Tuple[Directory, ...] = ()

    def find(self, directory_id: int) -> Optional[Directory]:
        for d in self.directories:
            if d.id == directory_id:
                return d
        return None

    def __len__(self) -> int:
        return len(self.directories)


@dataclass
class AddForm:
    """Raw operator input for the add-directory form."""

    name: str = ""
    path: str = ""
    language: str = ""
    role: str = ""

    def validate(self) -> Tuple[str, str, Optional[Language], Role]:
        name = self.name.strip()
        path = self.path.strip()
        if not name or not path:
            raise ValidationError("Name and path are required")
        role = Role.parse(self.role)
        language = Language.parse(self.language)
        return name, path, language, role


@dataclass
class IgnoreEditor:
    is_open: bool = False
    content: str = ""
    message: Optional[Message] = None


class _Closed(Exception):
    """Raised inside an action once the console has been torn down."""


def _action(fn):
    """Run an operator action; a console closed mid-flight applies nothing."""

    @functools.wraps(fn)
    async def wrapper(self: "AdminConsole", *args: Any, **kwargs: Any):
        try:
            return await fn(self, *args, **kwargs)
        except _Closed:
            logger.debug(f"[console] {fn.__name__} abandoned: console closed", action=fn.__name__)
            return None

    return wrapper


def _decline(_prompt: str) -> bool:
    return False


class AdminConsole:
    def __init__(self, client: Any, confirm: Optional[ConfirmFn] = None):
        self.client = client
        self._confirm = confirm or _decline
        self.snapshot = DirectorySnapshot()
        self.loading = True
        self.message: Optional[Message] = None
        self.form = AddForm()
        self.pulling: Set[int] = set()
        self.editor = IgnoreEditor()
        self._closed = False
        self._inflight: Set[asyncio.Future] = set()
        self._refresh_seq = 0
        self._applied_seq = 0
        self._editor_seq = 0

    @property
    def directories(self) -> Tuple[Directory, ...]:
        return self.snapshot.directories

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Tear down: cancel every in-flight call and ignore late completions."""
        self._closed = True
        for future in list(self._inflight):
            future.cancel()

    async def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        if self._closed:
            raise _Closed()
        future = asyncio.ensure_future(asyncio.to_thread(fn, *args))
        self._inflight.add(future)
        try:
            result = await future
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if self._closed and not (task is not None and task.cancelling()):
                raise _Closed() from None
            raise
        finally:
            self._inflight.discard(future)
        if self._closed:
            raise _Closed()
        return result

    async def _ask(self, prompt: str) -> bool:
        answer = self._confirm(prompt)
        if inspect.isawaitable(answer):
            answer = await answer
        return bool(answer)

    async def _refresh(self) -> Tuple[Directory, ...]:
        """Fetch and replace the list; a stale or failed fetch keeps the current one."""
        self._refresh_seq += 1
        seq = self._refresh_seq
        try:
            directories = await self._call(self.client.list_directories)
        except LoadError as e:
            if seq > self._applied_seq:
                self.message = Message.error(str(e))
            return self.snapshot.directories
        if seq <= self._applied_seq:
            logger.debug("[console] dropping stale directory list", seq=seq, applied=self._applied_seq)
            return self.snapshot.directories
        self._applied_seq = seq
        self.snapshot = DirectorySnapshot(self.snapshot.version + 1, tuple(directories))
        return self.snapshot.directories

    @_action
    async def mount(self) -> Tuple[Directory, ...]:
        """Initial load. Failure leaves the list empty."""
        self.loading = True
        self._refresh_seq += 1
        seq = self._refresh_seq
        try:
            directories = await self._call(self.client.list_directories)
        except LoadError:
            logger.warning("[console] initial directory load failed")
            self.message = Message.error("Failed to load directories")
        else:
            if seq > self._applied_seq:
                self._applied_seq = seq
                self.snapshot = DirectorySnapshot(self.snapshot.version + 1, tuple(directories))
        self.loading = False
        return self.snapshot.directories

    @_action
    async def load_directories(self) -> Tuple[Directory, ...]:
        """Operator refresh."""
        self.message = None
        return await self._refresh()

    @_action
    async def add_directory(
        self,
        name: Optional[str] = None,
        path: Optional[str] = None,
        language: Optional[str] = None,
        role: Optional[str] = None,
    ) -> Optional[Directory]:
        """Submit the add form (arguments, when given, overwrite its fields).

        On success name and path are cleared; language and role are kept for
        the next entry.
        """
        for attr, value in (("name", name), ("path", path), ("language", language), ("role", role)):
            if value is not None:
                setattr(self.form, attr, value)
        try:
            clean_name, clean_path, lang, clean_role = self.form.validate()
        except ValidationError as e:
            self.message = Message.error(str(e))
            return None

        self.message = None
        try:
            new_id = await self._call(self.client.add_directory, clean_name, clean_path, lang, clean_role)
        except CreateError as e:
            logger.warning("[console] add directory failed", path=clean_path, status=e.status_code)
            self.message = Message.error(str(e))
            return None

        logger.info("[console] directory added", directory_id=new_id, path=clean_path)
        self.message = Message.success("Added")
        self.form.name = ""
        self.form.path = ""
        await self._refresh()
        return self.snapshot.find(new_id) if new_id is not None else None

    @_action
    async def delete_directory(self, directory_id: int) -> bool:
        if not await self._ask(f"Delete directory {directory_id}?"):
            return False
        self.message = None
        try:
            await self._call(self.client.delete_directory, directory_id)
        except DeleteError as e:
            self.message = Message.error(str(e))
            return False
        logger.info("[console] directory deleted", directory_id=directory_id)
        self.message = Message.success("Deleted")
        await self._refresh()
        return True

    @_action
    async def set_enabled(self, directory_id: int, enabled: bool) -> bool:
        self.message = None
        try:
            await self._call(self.client.set_enabled, directory_id, bool(enabled))
        except UpdateError as e:
            self.message = Message.error(str(e))
            return False
        await self._refresh()
        return True

    async def toggle_enabled(self, directory: Directory) -> bool:
        return await self.set_enabled(directory.id, not directory.enabled)

    @_action
    async def set_git_interval(self, directory_id: int, interval: Union[GitInterval, int]) -> bool:
        try:
            value = GitInterval.parse(interval)
        except ValidationError as e:
            self.message = Message.error(str(e))
            return False
        self.message = None
        try:
            await self._call(self.client.set_git_interval, directory_id, value)
        except UpdateError as e:
            self.message = Message.error(str(e))
            return False
        await self._refresh()
        return True

    @_action
    async def pull_now(self, directory_id: int) -> bool:
        """Trigger a Git pull. Returns False if rejected or failed.

        A second pull for a row whose pull is still in flight is rejected
        without a request; rows are guarded independently.
        """
        if directory_id in self.pulling:
            logger.info("[console] pull already in flight", directory_id=directory_id)
            return False
        self.pulling.add(directory_id)
        self.message = None
        try:
            await self._call(self.client.git_pull, directory_id)
        except PullError as e:
            self.message = Message.error(str(e))
            return False
        finally:
            self.pulling.discard(directory_id)
        self.message = Message.success("Pull complete")
        await self._refresh()
        return True

    def is_pulling(self, directory_id: int) -> bool:
        return directory_id in self.pulling

    # Ignore-rule editor

    @_action
    async def open_ignore_editor(self) -> Optional[str]:
        self.editor.is_open = True
        self.editor.message = None
        return await self.load_ignore_rules()

    @_action
    async def load_ignore_rules(self) -> Optional[str]:
        """Fetch the ignore file into the editor, discarding unsaved edits."""
        self._editor_seq += 1
        seq = self._editor_seq
        self.editor.message = None
        try:
            content = await self._call(self.client.get_ignore_file)
        except LoadError as e:
            if seq == self._editor_seq:
                self.editor.message = Message.error(str(e))
            return None
        if seq != self._editor_seq:
            logger.debug("[console] dropping stale ignore file load", seq=seq, current=self._editor_seq)
        elif self.editor.is_open:
            self.editor.content = content or ""
        return content or ""

    reload_ignore_rules = load_ignore_rules

    def edit_ignore_rules(self, text: str) -> None:
        self.editor.content = text

    @_action
    async def save_ignore_rules(self, text: Optional[str] = None) -> bool:
        """Save the editor buffer. On failure the buffer is left as typed."""
        if text is not None:
            self.editor.content = text
        self.editor.message = None
        try:
            await self._call(self.client.put_ignore_file, self.editor.content)
        except SaveError as e:
            self.editor.message = Message.error(str(e))
            return False
        logger.info("[console] ignore rules saved", size=len(self.editor.content))
        self.editor.message = Message.success("Saved, hot reload applied")
        return True

    def close_ignore_editor(self) -> None:
        self._editor_seq += 1
        self.editor = IgnoreEditor()
