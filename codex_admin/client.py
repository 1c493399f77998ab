#!/usr/bin/env python3
"""
REST client for the codex-mcp admin API.

Every non-success outcome (transport error or non-2xx status) raises the
operation's category error with a fixed message; error bodies are not parsed
and nothing is retried.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, Type

import requests

from . import config
from .logger import (
    CreateError,
    DeleteError,
    LoadError,
    PullError,
    RemoteError,
    SaveError,
    UpdateError,
    get_logger,
)
from .models import Directory, GitInterval, Language, Role

logger = get_logger(__name__)


class AdminApiClient:
    """Thin wrapper over a requests.Session bound to one codex-mcp instance."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[Tuple[float, float]] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = config.base_url(base_url)
        self.timeout = timeout or config.request_timeout()
        self.session = session or requests.Session()
        self.session.verify = config.verify_tls()
        self.session.headers.setdefault("Accept", "application/json")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self.session.close()

    def _request(
        self,
        method: str,
        path: str,
        error_cls: Type[RemoteError],
        message: str,
        **kwargs: Any,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.warning(f"[api] {method} {path} failed: {e}")
            raise error_cls(message) from e
        if not response.ok:
            logger.warning(f"[api] {method} {path} returned HTTP {response.status_code}")
            raise error_cls(message, status_code=response.status_code)
        logger.debug(f"[api] {method} {path} -> {response.status_code}")
        return response

    def list_directories(self) -> List[Directory]:
        response = self._request("GET", "/api/directories", LoadError, "Load failed")
        try:
            rows = response.json()
        except ValueError as e:
            logger.warning(f"[api] GET /api/directories returned invalid JSON: {e}")
            raise LoadError("Load failed", status_code=response.status_code) from e
        if not isinstance(rows, list):
            raise LoadError("Load failed", status_code=response.status_code)
        return [Directory.from_wire(row) for row in rows]

    def add_directory(
        self,
        name: str,
        path: str,
        language: Optional[Language],
        role: Role,
    ) -> Optional[int]:
        """Create a directory; returns the server-assigned id when reported."""
        body = {
            "name": name,
            "path": path,
            "language": language.code if language else "",
            "role": role.value,
        }
        response = self._request("POST", "/api/directories", CreateError, "Add failed", json=body)
        try:
            payload: Dict[str, Any] = response.json()
        except ValueError:
            return None
        new_id = payload.get("id") if isinstance(payload, dict) else None
        return new_id if isinstance(new_id, int) else None

    def delete_directory(self, directory_id: int) -> None:
        self._request("DELETE", f"/api/directories/{int(directory_id)}", DeleteError, "Delete failed")

    def set_enabled(self, directory_id: int, enabled: bool) -> None:
        self._request(
            "PATCH",
            f"/api/directories/{int(directory_id)}/enabled",
            UpdateError,
            "Update failed",
            json={"enabled": bool(enabled)},
        )

    def set_git_interval(self, directory_id: int, interval: GitInterval) -> None:
        self._request(
            "PATCH",
            f"/api/directories/{int(directory_id)}/git",
            UpdateError,
            "Setting failed",
            json={"auto_update_interval_sec": interval.seconds},
        )

    def git_pull(self, directory_id: int) -> Optional[str]:
        """Trigger a pull; returns the new git_last_updated_at when reported."""
        response = self._request(
            "POST", f"/api/directories/{int(directory_id)}/git/pull", PullError, "Pull failed"
        )
        try:
            payload = response.json()
        except ValueError:
            return None
        return payload.get("git_last_updated_at") if isinstance(payload, dict) else None

    def get_ignore_file(self) -> str:
        response = self._request(
            "GET", "/api/ignore-file", LoadError, "Load failed", headers={"Accept": "text/plain"}
        )
        # Always UTF-8: requests guesses ISO-8859-1 for text/plain without a charset.
        return response.content.decode("utf-8", errors="replace")

    def put_ignore_file(self, content: str) -> None:
        self._request(
            "PUT",
            "/api/ignore-file",
            SaveError,
            "Save failed",
            data=content.encode("utf-8"),
            headers={"Content-Type": "text/plain; charset=utf-8"},
        )
