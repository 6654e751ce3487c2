"""Diagnostic data models and the collector that accumulates them."""

import threading
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..messages import MANIFEST_BAD_PERMISSION, Message

PACKAGE_EXTENSION = 1

# Codes that invalidate the manifest whatever channel they were reported on.
ALWAYS_INVALIDATING_CODES = frozenset({MANIFEST_BAD_PERMISSION.code})


class Severity(str, Enum):
    """Diagnostic severity."""

    ERROR = "error"
    WARNING = "warning"
    NOTICE = "notice"


class Diagnostic(BaseModel):
    """One classified finding."""

    model_config = ConfigDict(frozen=True)
    code: str
    severity: Severity
    message: str
    description: str | None = None
    file: str | None = None  # packaged file the finding targets, if any
    instance_path: str | None = None  # manifest location for schema findings


class Metadata(BaseModel):
    """Summary extracted from a manifest."""

    id: str | None = None
    manifest_version: int | None = None
    name: str | None = None
    type: int = PACKAGE_EXTENSION
    version: str | None = None
    firefox_min_version: str | None = None
    experiment_api_paths: frozenset[str] = Field(default_factory=frozenset)


class LintReport(BaseModel):
    """Complete result of one lint pass."""

    valid: bool
    errors: list[Diagnostic] = Field(default_factory=list)
    warnings: list[Diagnostic] = Field(default_factory=list)
    notices: list[Diagnostic] = Field(default_factory=list)
    metadata: Metadata


class DiagnosticsCollector:
    """Append-only collection of diagnostics.

    Appends are guarded by a lock so concurrent asset checks can report into
    the same collector. Validity is derived from the collected diagnostics,
    never stored.
    """

    def __init__(self) -> None:
        self._diagnostics: list[Diagnostic] = []
        self._lock = threading.Lock()

    def add(
        self,
        severity: Severity,
        message: Message,
        *,
        file: str | None = None,
        instance_path: str | None = None,
    ) -> Diagnostic:
        """Append a diagnostic built from a message template."""
        diagnostic = Diagnostic(
            code=message.code,
            severity=severity,
            message=message.message,
            description=message.description,
            file=file,
            instance_path=instance_path,
        )
        with self._lock:
            self._diagnostics.append(diagnostic)
        return diagnostic

    def add_once(self, severity: Severity, message: Message, *, file: str) -> bool:
        """Append unless a diagnostic with the same code already targets `file`.

        Returns True when the diagnostic was appended.
        """
        with self._lock:
            for existing in self._diagnostics:
                if existing.code == message.code and existing.file == file:
                    return False
            self._diagnostics.append(
                Diagnostic(
                    code=message.code,
                    severity=severity,
                    message=message.message,
                    description=message.description,
                    file=file,
                )
            )
        return True

    def add_error(self, message: Message, **kwargs: str | None) -> Diagnostic:
        return self.add(Severity.ERROR, message, **kwargs)

    def add_warning(self, message: Message, **kwargs: str | None) -> Diagnostic:
        return self.add(Severity.WARNING, message, **kwargs)

    def add_notice(self, message: Message, **kwargs: str | None) -> Diagnostic:
        return self.add(Severity.NOTICE, message, **kwargs)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        with self._lock:
            return list(self._diagnostics)

    def by_severity(self, severity: Severity) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is severity]

    @property
    def errors(self) -> list[Diagnostic]:
        return self.by_severity(Severity.ERROR)

    @property
    def warnings(self) -> list[Diagnostic]:
        return self.by_severity(Severity.WARNING)

    @property
    def notices(self) -> list[Diagnostic]:
        return self.by_severity(Severity.NOTICE)

    @property
    def is_valid(self) -> bool:
        """False iff an error or an always-invalidating code was collected."""
        return not any(
            d.severity is Severity.ERROR or d.code in ALWAYS_INVALIDATING_CODES
            for d in self.diagnostics
        )

    def codes(self) -> list[str]:
        return [d.code for d in self.diagnostics]

    def to_report(self, metadata: Metadata) -> LintReport:
        """Snapshot the collected diagnostics into a LintReport."""
        return LintReport(
            valid=self.is_valid,
            errors=self.errors,
            warnings=self.warnings,
            notices=self.notices,
            metadata=metadata,
        )
