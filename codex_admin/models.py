"""Directory records and the closed-set tags they carry.

The backend encodes role, language and the Git interval as loose strings and
integers. They are translated to enums here, at the boundary, so the console
never holds a value outside the accepted sets.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .logger import LoadError, ValidationError, get_logger

logger = get_logger(__name__)


class Role(Enum):
    FRONTEND_BUSINESS = "前端业务"
    BACKEND_BUSINESS = "后端业务"
    FRONTEND_FRAMEWORK = "前端框架"
    BACKEND_FRAMEWORK = "后端框架"

    @property
    def alias(self) -> str:
        return self.name.lower().replace("_", "-")

    @classmethod
    def parse(cls, value: Any) -> "Role":
        """Accept a wire value (前端业务) or an alias (frontend-business)."""
        if isinstance(value, Role):
            return value
        s = str(value or "").strip()
        if not s:
            raise ValidationError("Select a role (frontend/backend business or framework)")
        for role in cls:
            if s == role.value or s.lower() == role.alias:
                return role
        raise ValidationError(f"Unknown role: {s}")


class Language(Enum):
    JAVA = ("java", "Java")
    JSX = ("js", "React / JSX")
    PYTHON = ("py", "Python")
    GO = ("go", "Go")
    TYPESCRIPT = ("ts", "TypeScript")
    JAVASCRIPT = ("javascript", "JavaScript")
    CSHARP = ("csharp", "C#")
    CPP = ("cpp", "C++")
    RUST = ("rust", "Rust")
    VUE = ("vue", "Vue")
    SWIFT = ("swift", "Swift")
    KOTLIN = ("kotlin", "Kotlin")
    RUBY = ("ruby", "Ruby")
    PHP = ("php", "PHP")

    def __init__(self, code: str, label: str):
        self.code = code
        self.label = label

    @classmethod
    def parse(cls, value: Any) -> Optional["Language"]:
        """Empty means unrestricted (None)."""
        if value is None or isinstance(value, Language):
            return value
        s = str(value).strip().lower()
        if not s:
            return None
        for lang in cls:
            if s == lang.code:
                return lang
        raise ValidationError(f"Unknown language: {value}")


class GitInterval(Enum):
    OFF = (0, "off")
    MIN_5 = (300, "5 min")
    MIN_10 = (600, "10 min")
    MIN_30 = (1800, "30 min")
    HOUR_1 = (3600, "1 hour")

    def __init__(self, seconds: int, label: str):
        self.seconds = seconds
        self.label = label

    @classmethod
    def parse(cls, value: Any) -> "GitInterval":
        if isinstance(value, GitInterval):
            return value
        try:
            seconds = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid git auto-update interval: {value!r}") from None
        for interval in cls:
            if interval.seconds == seconds:
                return interval
        allowed = ", ".join(str(i.seconds) for i in cls)
        raise ValidationError(f"Git auto-update interval must be one of {allowed}, got {seconds}")


@dataclass(frozen=True)
class Directory:
    id: int
    name: str
    path: str
    language: Optional[Language] = None
    role: Optional[Role] = None
    enabled: bool = True
    git_auto_update_interval_sec: GitInterval = GitInterval.OFF
    git_last_updated_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "Directory":
        """Build a record from one element of GET /api/directories.

        Legacy rows may carry an empty or unrecognised language/role or an
        interval outside the accepted set; those degrade to None / OFF.
        A row without an integer id cannot be addressed and fails the load.
        """
        if not isinstance(data, dict):
            raise LoadError("Load failed")
        raw_id = data.get("id")
        if isinstance(raw_id, bool) or not isinstance(raw_id, int):
            raise LoadError("Load failed")

        try:
            language = Language.parse(data.get("language"))
        except ValidationError:
            logger.warning(f"[models] directory {raw_id}: unknown language {data.get('language')!r}")
            language = None

        role = None
        if data.get("role"):
            try:
                role = Role.parse(data.get("role"))
            except ValidationError:
                logger.warning(f"[models] directory {raw_id}: unknown role {data.get('role')!r}")

        raw_interval = data.get("git_auto_update_interval_sec") or 0
        try:
            interval = GitInterval.parse(raw_interval)
        except ValidationError:
            logger.warning(f"[models] directory {raw_id}: unsupported git interval {raw_interval!r}")
            interval = GitInterval.OFF

        return cls(
            id=raw_id,
            name=str(data.get("name") or ""),
            path=str(data.get("path") or ""),
            language=language,
            role=role,
            enabled=bool(data.get("enabled")),
            git_auto_update_interval_sec=interval,
            git_last_updated_at=data.get("git_last_updated_at") or None,
            updated_at=data.get("updated_at") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Wire-shaped dict, used for --json output."""
        return {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "language": self.language.code if self.language else "",
            "role": self.role.value if self.role else "",
            "enabled": self.enabled,
            "git_auto_update_interval_sec": self.git_auto_update_interval_sec.seconds,
            "git_last_updated_at": self.git_last_updated_at,
            "updated_at": self.updated_at,
        }
