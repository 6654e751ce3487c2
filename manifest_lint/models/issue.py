"""Raw schema issues as produced by the schema adapter."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class IssueKind(str, Enum):
    """Schema keyword that produced an issue."""

    REQUIRED = "required"
    DEPRECATED = "deprecated"
    MIN_MANIFEST_VERSION = "min_manifest_version"
    MAX_MANIFEST_VERSION = "max_manifest_version"
    PRIVILEGED_PERMISSIONS = "validate_privileged_permissions"
    PRIVILEGED = "privileged"
    TYPE = "type"
    OTHER = "other"

    @classmethod
    def from_keyword(cls, keyword: str | None) -> "IssueKind":
        for kind in cls:
            if kind.value == keyword:
                return kind
        return cls.OTHER


class _Missing:
    """Sentinel for an issue without an offending value."""

    _instance = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


@dataclass(frozen=True)
class RawSchemaIssue:
    """One schema validator finding."""

    kind: IssueKind
    path: tuple[str | int, ...] = ()
    value: Any = MISSING
    message: str = ""
    params: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def instance_path(self) -> str:
        """JSON pointer for the offending location (`""` for the root)."""
        return "".join(f"/{token}" for token in self.path)

    @property
    def has_value(self) -> bool:
        return self.value is not MISSING
