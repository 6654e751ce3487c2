"""Pytest fixtures for manifest-lint tests."""

import asyncio
import io
from typing import Any, Callable

import pytest
from PIL import Image

from manifest_lint.models.config import LinterConfig, ValidationContext, load_default_config
from manifest_lint.models.diagnostic import LintReport
from manifest_lint.package import InMemoryPackage
from manifest_lint.validators.manifest import ManifestLinter

ADDON_ID = "linter-test@example.com"


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """Return a factory building in-memory images with Pillow."""

    def _make(width: int, height: int, fmt: str = "PNG") -> bytes:
        buffer = io.BytesIO()
        Image.new("RGB", (width, height), color=(200, 30, 30)).save(buffer, format=fmt)
        return buffer.getvalue()

    return _make


@pytest.fixture
def manifest_v2() -> dict:
    """A minimal manifest version 2 extension that lints clean."""
    return {
        "manifest_version": 2,
        "name": "Linter Test",
        "version": "1.0",
        "browser_specific_settings": {"gecko": {"id": ADDON_ID}},
    }


@pytest.fixture
def manifest_v3() -> dict:
    """A minimal manifest version 3 extension that lints clean."""
    return {
        "manifest_version": 3,
        "name": "Linter Test",
        "version": "1.0",
        "browser_specific_settings": {"gecko": {"id": ADDON_ID}},
    }


@pytest.fixture
def config() -> LinterConfig:
    return load_default_config()


@pytest.fixture
def lint() -> Callable[..., LintReport]:
    """Return a helper that runs a full lint pass over an in-memory package."""

    def _lint(
        manifest: dict,
        files: dict[str, Any] | None = None,
        context: ValidationContext | None = None,
        **options: Any,
    ) -> LintReport:
        linter = ManifestLinter(manifest, InMemoryPackage(files or {}), context=context, **options)
        return asyncio.run(linter.run())

    return _lint
