"""Immutable browser-compatibility tree for manifest keys.

The tree mirrors the `webextensions.manifest` section of MDN
browser-compat-data. A node is either a CompatLeaf (support data only) or a
CompatContainer (child nodes plus, optionally, its own leaf).
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Union

COMPAT_KEY = "__compat"


@dataclass(frozen=True)
class SupportStatement:
    """One support range for a browser."""

    version_added: str | bool | None
    flagged: bool = False


@dataclass(frozen=True)
class CompatLeaf:
    """Per-browser support data for one manifest key."""

    support: Mapping[str, tuple[SupportStatement, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def statements(self, browser: str) -> tuple[SupportStatement, ...]:
        return self.support.get(browser, ())


@dataclass(frozen=True)
class CompatContainer:
    """A key with nested keys, and its own support data when it has any."""

    children: Mapping[str, "CompatNode"]
    leaf: CompatLeaf | None = None


CompatNode = Union[CompatLeaf, CompatContainer]


def _statement(raw: Any) -> SupportStatement:
    if not isinstance(raw, dict):
        return SupportStatement(version_added=None)
    version_added = raw.get("version_added")
    if not isinstance(version_added, (str, bool)):
        version_added = None
    return SupportStatement(
        version_added=version_added,
        flagged=bool(raw.get("flags")),
    )


def _leaf(raw: Any) -> CompatLeaf:
    support = raw.get("support", {}) if isinstance(raw, dict) else {}
    parsed: dict[str, tuple[SupportStatement, ...]] = {}
    for browser, statements in support.items():
        if isinstance(statements, list):
            parsed[browser] = tuple(_statement(s) for s in statements)
        else:
            parsed[browser] = (_statement(statements),)
    return CompatLeaf(support=MappingProxyType(parsed))


def _node(raw: dict[str, Any]) -> CompatNode:
    leaf = _leaf(raw[COMPAT_KEY]) if COMPAT_KEY in raw else None
    children = {
        key: _node(value)
        for key, value in raw.items()
        if key != COMPAT_KEY and isinstance(value, dict)
    }
    if not children:
        return leaf if leaf is not None else CompatLeaf()
    return CompatContainer(children=MappingProxyType(children), leaf=leaf)


class CompatibilityIndex:
    """Read-only lookup of compat nodes by top-level manifest key."""

    def __init__(self, roots: Mapping[str, CompatNode] | None = None) -> None:
        self._roots = MappingProxyType(dict(roots or {}))

    @classmethod
    def from_mdn(cls, data: dict[str, Any]) -> "CompatibilityIndex":
        """Build from MDN data: the full dataset or its manifest subtree."""
        manifest = data.get("webextensions", {}).get("manifest") if "webextensions" in data else data
        if not isinstance(manifest, dict):
            raise ValueError("Compatibility data has no webextensions.manifest section")
        return cls({key: _node(value) for key, value in manifest.items() if isinstance(value, dict)})

    @classmethod
    def from_file(cls, path: Path) -> "CompatibilityIndex":
        with open(path, encoding="utf-8") as f:
            return cls.from_mdn(json.load(f))

    @property
    def roots(self) -> Mapping[str, CompatNode]:
        return self._roots

    def __contains__(self, key: str) -> bool:
        return key in self._roots

    def __len__(self) -> int:
        return len(self._roots)

    def get(self, key: str) -> CompatNode | None:
        return self._roots.get(key)
