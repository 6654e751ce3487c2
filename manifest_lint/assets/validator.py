"""Icon and theme image validation.

Every candidate path is checked in its own task; the batch is awaited with
asyncio.gather. Tasks only share the collector.
"""

import asyncio
import logging
import posixpath
from typing import Any

from .. import messages
from ..models.config import LinterConfig
from ..models.diagnostic import DiagnosticsCollector, Severity
from ..models.manifest import ManifestDocument
from ..package import FileOracle, normalize_path
from ..security.policy import ICON_ACTION_KEYS, SVG_MIME
from .decoder import ImageDecoder, PillowImageDecoder, read_image_info

logger = logging.getLogger(__name__)

IconEntry = tuple[int | None, str]


def file_extension(path: str) -> str:
    """Lowercased extension without the dot ("" when there is none)."""
    return posixpath.splitext(path)[1][1:].lower()


def _expected_size(size: Any) -> int | None:
    try:
        return int(size)
    except (TypeError, ValueError):
        return None


def collect_icons(document: ManifestDocument) -> list[IconEntry]:
    """List (expected size, path) for every icon the manifest references."""
    icons: list[IconEntry] = []

    def add(size: Any, path: Any) -> None:
        if isinstance(path, str):
            icons.append((_expected_size(size), path))

    declared = document.get("icons")
    if isinstance(declared, dict):
        for size, path in declared.items():
            add(size, path)

    for key in ICON_ACTION_KEYS:
        action = document.get(key)
        if not isinstance(action, dict) or not action.get("default_icon"):
            continue
        default_icon = action["default_icon"]
        if isinstance(default_icon, str):
            add(None, default_icon)
        elif isinstance(default_icon, dict):
            for size, path in default_icon.items():
                add(size, path)

    browser_action = document.get("browser_action")
    if isinstance(browser_action, dict) and isinstance(browser_action.get("theme_icons"), list):
        for icon in browser_action["theme_icons"]:
            if not isinstance(icon, dict):
                continue
            for theme in ("dark", "light"):
                if icon.get(theme):
                    add(icon.get("size"), icon[theme])

    return icons


def collect_theme_images(document: ManifestDocument) -> list[tuple[str, str]]:
    """List (theme.images property, path) for every declared theme image."""
    theme = document.get("theme")
    images = theme.get("images") if isinstance(theme, dict) else None
    if not isinstance(images, dict):
        return []
    found = []
    for prop, value in images.items():
        paths = value if isinstance(value, list) else [value]
        found.extend((prop, path) for path in paths if isinstance(path, str))
    return found


class AssetValidator:
    """Checks icons and theme images against the package listing."""

    def __init__(
        self,
        package: FileOracle,
        collector: DiagnosticsCollector,
        config: LinterConfig,
        decoder: ImageDecoder | None = None,
    ) -> None:
        self.package = package
        self.collector = collector
        self.config = config
        self.decoder = decoder or PillowImageDecoder()

    async def validate_icon(self, path: str, expected_size: int | None) -> None:
        try:
            info = await read_image_info(self.package, path, self.decoder)
        except Exception as e:
            logger.debug("Unexpected error while validating icon %r: %s", path, e)
            self.collector.add_once(Severity.WARNING, messages.corrupt_icon_file(path), file=path)
            return

        if info.width != info.height:
            severity = Severity.WARNING if info.mime == SVG_MIME else Severity.ERROR
            self.collector.add_once(severity, messages.icon_not_square(path), file=path)
        elif (
            expected_size is not None
            and info.mime != SVG_MIME
            and info.width != expected_size
        ):
            self.collector.add_once(
                Severity.WARNING,
                messages.icon_size_invalid(path, expected_size, info.width),
                file=path,
            )

    async def validate_icons(self, document: ManifestDocument) -> None:
        """Check every referenced icon; decodes run concurrently."""
        tasks = []
        for size, raw_path in collect_icons(document):
            path = normalize_path(raw_path)
            if not self.package.exists(path):
                self.collector.add_once(
                    Severity.ERROR, messages.manifest_icon_missing(path), file=path
                )
            elif file_extension(path) not in self.config.image_extensions:
                self.collector.add_once(
                    Severity.WARNING, messages.WRONG_ICON_EXTENSION, file=path
                )
            else:
                tasks.append(self.validate_icon(path, size))
        await asyncio.gather(*tasks)

    async def validate_theme_image(self, raw_path: str, prop: str) -> None:
        path = normalize_path(raw_path)
        extension = file_extension(path)

        if not self.package.exists(path):
            self.collector.add_once(
                Severity.ERROR,
                messages.manifest_theme_image_missing(path, f"theme.images.{prop}"),
                file=path,
            )
            return

        if extension not in self.config.theme_image_extensions:
            self.collector.add_once(
                Severity.ERROR, messages.manifest_theme_image_wrong_extension(path), file=path
            )
            return

        try:
            info = await read_image_info(self.package, path, self.decoder)
        except Exception as e:
            logger.debug("Unexpected error while validating theme image %r: %s", path, e)
            self.collector.add_once(
                Severity.ERROR, messages.manifest_theme_image_corrupted(path), file=path
            )
            return

        if info.mime not in self.config.theme_image_mimes:
            self.collector.add_once(
                Severity.ERROR,
                messages.manifest_theme_image_wrong_mime(path, info.mime),
                file=path,
            )
        elif self.config.extension_mimes.get(extension) != info.mime:
            self.collector.add_once(
                Severity.WARNING,
                messages.manifest_theme_image_mime_mismatch(path, info.mime),
                file=path,
            )

    async def validate_theme_images(self, document: ManifestDocument) -> None:
        await asyncio.gather(
            *(self.validate_theme_image(path, prop) for prop, path in collect_theme_images(document))
        )

    async def run(self, document: ManifestDocument, include_theme_images: bool) -> None:
        """Validate icons, plus theme images when asked, as one batch."""
        batch = [self.validate_icons(document)]
        if include_theme_images:
            batch.append(self.validate_theme_images(document))
        await asyncio.gather(*batch)
