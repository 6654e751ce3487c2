"""Browser extension manifest linter."""

from .models.config import LinterConfig, ValidationContext, load_default_config
from .models.diagnostic import Diagnostic, DiagnosticsCollector, LintReport, Metadata, Severity
from .models.manifest import AddonKind, ManifestDocument, normalize_manifest
from .package import DirectoryPackage, InMemoryPackage, ZipPackage, open_package
from .validators.manifest import ManifestLinter, lint_manifest_text

__all__ = [
    "AddonKind",
    "Diagnostic",
    "DiagnosticsCollector",
    "DirectoryPackage",
    "InMemoryPackage",
    "LintReport",
    "LinterConfig",
    "ManifestDocument",
    "ManifestLinter",
    "Metadata",
    "Severity",
    "ValidationContext",
    "ZipPackage",
    "lint_manifest_text",
    "load_default_config",
    "normalize_manifest",
    "open_package",
]
