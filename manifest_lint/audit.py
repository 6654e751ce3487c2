"""Audit logging for manifest lint runs."""

import json
from datetime import datetime, timezone
from pathlib import Path

from .models.diagnostic import LintReport

LINT = "LINT"
READ_ERROR = "READ_ERROR"


def _format_value(value: str | int | bool) -> str:
    text = str(value)
    if not text or any(c.isspace() or c in '"=' for c in text):
        return json.dumps(text)
    return text


class AuditLogger:
    """Appends one line per lint run to an audit file.

    Log format: ISO8601_TIMESTAMP [OPERATION] manifest=TARGET key=value ...
    Example: 2026-02-01T10:00:00Z [LINT] manifest=ext addon_id=a@b valid=False errors=2 warnings=1 notices=0 codes=NO_MESSAGES_FILE,RESTRICTED_PERMISSION

    Operations: LINT (a finished pass), READ_ERROR (the package could not be
    read, nothing was linted)
    """

    def __init__(self, log_path: Path) -> None:
        self.log_path = Path(log_path)

    @staticmethod
    def format_entry(
        operation: str, target: str, fields: dict[str, str | int | bool | None]
    ) -> str:
        """Render one entry. None fields are skipped; values with spaces,
        quotes or `=` are JSON-quoted so the line stays splittable."""
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        pairs = [f"manifest={_format_value(target)}"]
        pairs.extend(
            f"{key}={_format_value(value)}" for key, value in fields.items() if value is not None
        )
        return f"{timestamp} [{operation}] {' '.join(pairs)}\n"

    def _append(self, line: str) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.log_path, "a") as f:
            f.write(line)

    def log_report(self, target: str, report: LintReport) -> None:
        """Record the outcome of one lint pass, error codes included."""
        error_codes = sorted({d.code for d in report.errors})
        self._append(
            self.format_entry(
                LINT,
                target,
                {
                    "addon_id": report.metadata.id,
                    "valid": report.valid,
                    "errors": len(report.errors),
                    "warnings": len(report.warnings),
                    "notices": len(report.notices),
                    "codes": ",".join(error_codes) or None,
                },
            )
        )

    def log_read_error(self, target: str, error: Exception) -> None:
        """Record a package that could not be read."""
        self._append(
            self.format_entry(
                READ_ERROR,
                target,
                {"error_type": type(error).__name__, "error": str(error)},
            )
        )
