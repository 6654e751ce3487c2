"""Report manifest keys and permissions newer than the declared minimum."""

import logging
from typing import Any

from .. import messages
from ..models.diagnostic import DiagnosticsCollector
from ..models.manifest import ManifestDocument
from ..versions import is_added_after, moz_sort_key, normalize_compat_version
from .index import CompatContainer, CompatibilityIndex, CompatLeaf, CompatNode, SupportStatement

logger = logging.getLogger(__name__)

DESKTOP = "firefox"
ANDROID = "firefox_android"
PERMISSION_KEYS = ("permissions", "optional_permissions")


def first_stable_version(statements: tuple[SupportStatement, ...]) -> str | None:
    """Lowest unflagged version among support ranges.

    Features sometimes ship, get removed and are re-added later (Fennec vs
    Fenix); the first release that ever shipped it is what counts.
    """
    versions = [
        normalize_compat_version(s.version_added) for s in statements if not s.flagged
    ]
    versions = [v for v in versions if v is not None]
    if not versions:
        return None
    return min(versions, key=moz_sort_key)


class CompatibilityChecker:
    """Walks a manifest in lock-step with a CompatibilityIndex."""

    def __init__(self, index: CompatibilityIndex) -> None:
        self.index = index

    def check(self, document: ManifestDocument, collector: DiagnosticsCollector) -> None:
        """Check every manifest key that has compatibility data."""
        min_version = document.strict_min_version
        if not min_version:
            return
        if not len(self.index):
            logger.debug("No compatibility data loaded, skipping compat checks")
            return

        for key, node in self.index.roots.items():
            if key in document:
                self._walk(node, key, document.get(key), min_version, collector)

    def _walk(
        self,
        node: CompatNode,
        path: str,
        value: Any,
        min_version: str,
        collector: DiagnosticsCollector,
    ) -> None:
        if isinstance(node, CompatLeaf):
            self._check_support(node, path, min_version, collector)
            return

        if node.leaf is not None:
            self._check_support(node.leaf, path, min_version, collector)

        for name, child in node.children.items():
            if isinstance(value, dict) and name in value:
                self._walk(child, f"{path}.{name}", value[name], min_version, collector)
            elif path in PERMISSION_KEYS and isinstance(value, list) and name in value:
                leaf = child if isinstance(child, CompatLeaf) else child.leaf
                if leaf is not None:
                    self._check_support(
                        leaf, f"{path}:{name}", min_version, collector, is_permission=True
                    )

    def _check_support(
        self,
        leaf: CompatLeaf,
        key: str,
        min_version: str,
        collector: DiagnosticsCollector,
        is_permission: bool = False,
    ) -> None:
        desktop = leaf.statements(DESKTOP)
        if desktop:
            version_added = desktop[0].version_added
            if is_added_after(version_added, min_version):
                if is_permission:
                    collector.add_notice(
                        messages.permission_firefox_unsupported_by_min_version(
                            key, min_version, str(version_added)
                        )
                    )
                else:
                    collector.add_warning(
                        messages.key_firefox_unsupported_by_min_version(
                            key, min_version, str(version_added)
                        )
                    )

        android = leaf.statements(ANDROID)
        if android:
            version_added = first_stable_version(android)
            if is_added_after(version_added, min_version):
                if is_permission:
                    collector.add_notice(
                        messages.permission_firefox_android_unsupported_by_min_version(
                            key, min_version, version_added
                        )
                    )
                else:
                    collector.add_warning(
                        messages.key_firefox_android_unsupported_by_min_version(
                            key, min_version, version_added
                        )
                    )
