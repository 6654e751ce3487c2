"""Manifest document model and its one-time normalization."""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class AddonKind(str, Enum):
    """Kind of add-on a manifest declares."""

    EXTENSION = "extension"
    STATIC_THEME = "static_theme"
    LANGUAGE_PACK = "language_pack"
    DICTIONARY = "dictionary"
    SITE_PERMISSION = "site_permission"


# Checked in order; the first key present decides the kind.
KIND_KEYS: tuple[tuple[str, AddonKind], ...] = (
    ("theme", AddonKind.STATIC_THEME),
    ("langpack_id", AddonKind.LANGUAGE_PACK),
    ("dictionaries", AddonKind.DICTIONARY),
    ("site_permissions", AddonKind.SITE_PERMISSION),
)


def detect_kind(data: dict[str, Any]) -> AddonKind:
    """Resolve the add-on kind from key presence."""
    for key, kind in KIND_KEYS:
        if key in data:
            return kind
    return AddonKind.EXTENSION


def coerce_manifest_version(value: Any) -> int | None:
    """Return the manifest version as an integer, or None if it isn't one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


@dataclass(frozen=True)
class ManifestDocument:
    """A parsed manifest.

    `data` is a private deep copy of the caller's mapping. Nothing in the
    linter mutates it; normalization produces a new document instead.
    """

    data: dict[str, Any]
    kind: AddonKind = AddonKind.EXTENSION
    manifest_version: int | None = None
    normalized: bool = field(default=False, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ManifestDocument":
        if not isinstance(data, dict):
            raise ValueError("A manifest must be a JSON object")
        owned = copy.deepcopy(data)
        return cls(
            data=owned,
            kind=detect_kind(owned),
            manifest_version=coerce_manifest_version(owned.get("manifest_version")),
        )

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __contains__(self, key: str) -> bool:
        return key in self.data

    @property
    def gecko(self) -> dict[str, Any]:
        """`applications.gecko` as a dict (empty when absent or malformed)."""
        applications = self.data.get("applications")
        if not isinstance(applications, dict):
            return {}
        gecko = applications.get("gecko")
        return gecko if isinstance(gecko, dict) else {}

    @property
    def addon_id(self) -> str | None:
        addon_id = self.gecko.get("id")
        return addon_id if isinstance(addon_id, str) else None

    @property
    def strict_min_version(self) -> str | None:
        value = self.gecko.get("strict_min_version")
        return value if isinstance(value, str) else None

    def is_legacy(self) -> bool:
        """True for manifest versions below 3 (or an undeclared version)."""
        return self.manifest_version is None or self.manifest_version < 3


def normalize_manifest(document: ManifestDocument) -> ManifestDocument:
    """Merge legacy shapes so rules see one layout.

    - `browser_specific_settings` replaces `applications` when it carries a
      `gecko` entry.
    - `developer.name` / `developer.url` are promoted to `author` /
      `homepage_url`.
    """
    if document.normalized:
        return document

    data = copy.deepcopy(document.data)

    settings = data.get("browser_specific_settings")
    if isinstance(settings, dict) and settings.get("gecko"):
        data["applications"] = settings

    developer = data.get("developer")
    if isinstance(developer, dict):
        if developer.get("name"):
            data["author"] = developer["name"]
        if developer.get("url"):
            data["homepage_url"] = developer["url"]

    return ManifestDocument(
        data=data,
        kind=document.kind,
        manifest_version=document.manifest_version,
        normalized=True,
    )
