"""Configuration models: static linter tables and per-run validation context."""

from functools import lru_cache
from importlib import resources

from pydantic import BaseModel, ConfigDict, Field

from ..security import policy

BLOCKLIST_RESOURCE = "blocked_content_script_hosts.txt"


def parse_blocklist(text: str) -> tuple[str, ...]:
    """Parse blocklist text: one literal per line, `#` comments and blanks skipped."""
    entries = []
    for line in text.splitlines():
        value = line.strip()
        if value and not value.startswith("#"):
            entries.append(value)
    return tuple(entries)


class LinterConfig(BaseModel):
    """Process-wide immutable tables injected into the linter."""

    model_config = ConfigDict(frozen=True)
    blocked_content_script_hosts: tuple[str, ...] = ()
    restricted_homepage_urls: tuple[str, ...] = policy.RESTRICTED_HOMEPAGE_URLS
    restricted_permissions: dict[str, str] = Field(
        default_factory=lambda: dict(policy.RESTRICTED_PERMISSIONS)
    )
    privileged_permissions: frozenset[str] = policy.PRIVILEGED_PERMISSIONS
    deprecated_properties: dict[str, str] = Field(
        default_factory=lambda: dict(policy.DEPRECATED_MANIFEST_PROPERTIES)
    )
    image_extensions: frozenset[str] = policy.IMAGE_FILE_EXTENSIONS
    theme_image_extensions: frozenset[str] = policy.STATIC_THEME_IMAGE_EXTENSIONS
    theme_image_mimes: frozenset[str] = policy.STATIC_THEME_IMAGE_MIMES
    extension_mimes: dict[str, str] = Field(
        default_factory=lambda: dict(policy.FILE_EXTENSIONS_TO_MIME)
    )


@lru_cache(maxsize=1)
def load_default_config() -> LinterConfig:
    """Build the default config once, reading the packaged blocklist."""
    resource = resources.files("manifest_lint") / "data" / BLOCKLIST_RESOURCE
    text = resource.read_text(encoding="utf-8")
    return LinterConfig(blocked_content_script_hosts=parse_blocklist(text))


class ValidationContext(BaseModel):
    """Per-run options that gate privilege and version dependent rules."""

    model_config = ConfigDict(frozen=True)
    privileged: bool = False
    already_signed: bool = False
    self_hosted: bool = False
    enable_background_service_worker: bool = False
    min_manifest_version: int = 2
    max_manifest_version: int = 3
    # None means: use the table from LinterConfig
    restricted_permissions: dict[str, str] | None = None
