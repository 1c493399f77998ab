"""
codex_admin/config.py - Environment-driven settings for the admin console.
"""
from __future__ import annotations

import os
from urllib.parse import urlparse

from .logger import ConfigurationError, get_logger, safe_bool, safe_float

logger = get_logger(__name__)

# codex-mcp listens on :6688 by default and serves /admin and /api/* from one origin
DEFAULT_BASE_URL = "http://localhost:6688"
DEFAULT_TIMEOUT_SEC = 30.0
DEFAULT_CONNECT_TIMEOUT_SEC = 5.0


def base_url(override: str | None = None) -> str:
    """Resolve the service root: CLI arg > CODEX_MCP_URL > default."""
    url = (override or os.environ.get("CODEX_MCP_URL") or DEFAULT_BASE_URL).strip().rstrip("/")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"Invalid codex-mcp URL: {url!r} (expected http(s)://host[:port])")
    return url


def request_timeout(override: float | None = None) -> tuple[float, float]:
    """(connect, read) timeout pair passed to requests."""
    read = override if override is not None else safe_float(
        os.environ.get("CODEX_ADMIN_TIMEOUT"), DEFAULT_TIMEOUT_SEC, logger=logger, context="CODEX_ADMIN_TIMEOUT"
    )
    connect = safe_float(
        os.environ.get("CODEX_ADMIN_CONNECT_TIMEOUT"),
        DEFAULT_CONNECT_TIMEOUT_SEC,
        logger=logger,
        context="CODEX_ADMIN_CONNECT_TIMEOUT",
    )
    if read <= 0:
        read = DEFAULT_TIMEOUT_SEC
    if connect <= 0:
        connect = DEFAULT_CONNECT_TIMEOUT_SEC
    return connect, read


def verify_tls() -> bool:
    return safe_bool(os.environ.get("CODEX_ADMIN_VERIFY_TLS"), True, logger=logger, context="CODEX_ADMIN_VERIFY_TLS")


def json_logging() -> bool:
    return safe_bool(os.environ.get("CODEX_ADMIN_LOG_JSON"), False, logger=logger, context="CODEX_ADMIN_LOG_JSON")


def editor_command() -> str:
    return (os.environ.get("VISUAL") or os.environ.get("EDITOR") or "vi").strip() or "vi"
